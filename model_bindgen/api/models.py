"""Resources returned by the prediction API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Generic, Optional, TypeVar

from .coding import extract_cursor, parse_datetime, parse_optional_datetime
from .errors import DecodeError

T = TypeVar("T")

_MISSING = object()


def _get(data: Any, key: str, kind: type | tuple[type, ...], default: Any = _MISSING) -> Any:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected an object, got {type(data).__name__}")

    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if default is not _MISSING:
            return default
        raise DecodeError(f"Missing required key '{key}'")

    if not isinstance(value, kind):
        raise DecodeError(f"Key '{key}' has unexpected type {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Cursor:
    """A pointer to a page of results.

    The value is opaque and is sent back to the server exactly as received.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Page(Generic[T]):
    """A page of results with cursors to the adjacent pages."""

    results: list[T]
    next: Optional[Cursor] = None
    previous: Optional[Cursor] = None

    @staticmethod
    def from_dict(data: Any, decode_item: Callable[[Any], T]) -> "Page[T]":
        results = _get(data, "results", list)
        return Page(
            results=[decode_item(item) for item in results],
            next=Page._cursor(data.get("next")),
            previous=Page._cursor(data.get("previous")),
        )

    @staticmethod
    def _cursor(url: Any) -> Optional[Cursor]:
        if url is None:
            return None
        return Cursor(extract_cursor(url))


@dataclass(frozen=True)
class ModelVersion:
    """A version of a model, with its embedded OpenAPI schema."""

    id: str
    created_at: datetime
    openapi_schema: dict[str, Any] = field(default_factory=dict)
    cog_version: Optional[str] = None

    @staticmethod
    def from_dict(data: Any) -> "ModelVersion":
        return ModelVersion(
            id=_get(data, "id", str),
            created_at=parse_datetime(_get(data, "created_at", str)),
            openapi_schema=_get(data, "openapi_schema", dict, default={}),
            cog_version=_get(data, "cog_version", str, default=None),
        )


@dataclass(frozen=True)
class Model:
    """A machine learning model hosted on the service."""

    owner: str
    name: str
    url: str
    description: Optional[str] = None
    visibility: str = "public"
    github_url: Optional[str] = None
    paper_url: Optional[str] = None
    license_url: Optional[str] = None
    latest_version: Optional[ModelVersion] = None

    @property
    def id(self) -> str:
        return f"{self.owner}/{self.name}"

    @staticmethod
    def from_dict(data: Any) -> "Model":
        latest = _get(data, "latest_version", dict, default=None)
        if latest is None:
            latest = _get(data, "lastest_version", dict, default=None)

        visibility = _get(data, "visibility", str, default="public")
        if visibility not in ("public", "private"):
            raise DecodeError(f"Unknown visibility: {visibility}")

        return Model(
            owner=_get(data, "owner", str),
            name=_get(data, "name", str),
            url=_get(data, "url", str),
            description=_get(data, "description", str, default=None),
            visibility=visibility,
            github_url=_get(data, "github_url", str, default=None),
            paper_url=_get(data, "paper_url", str, default=None),
            license_url=_get(data, "license_url", str, default=None),
            latest_version=ModelVersion.from_dict(latest) if latest is not None else None,
        )


@dataclass(frozen=True)
class Collection:
    """A named collection of models."""

    name: str
    slug: str
    description: Optional[str] = None
    models: list[Model] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Any) -> "Collection":
        return Collection(
            name=_get(data, "name", str),
            slug=_get(data, "slug", str),
            description=_get(data, "description", str, default=None),
            models=[Model.from_dict(item) for item in _get(data, "models", list, default=[])],
        )


TERMINAL_STATUSES = frozenset({"succeeded", "failed", "canceled"})


@dataclass(frozen=True)
class Prediction:
    """A single run of a model version."""

    id: str
    version: str
    status: str
    created_at: datetime
    input: dict[str, Any] = field(default_factory=dict)
    output: Any = None
    error: Any = None
    logs: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    urls: dict[str, str] = field(default_factory=dict)
    metrics: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @staticmethod
    def from_dict(data: Any) -> "Prediction":
        return Prediction(
            id=_get(data, "id", str),
            version=_get(data, "version", str),
            status=_get(data, "status", str),
            created_at=parse_datetime(_get(data, "created_at", str)),
            input=_get(data, "input", dict, default={}),
            output=data.get("output"),
            error=data.get("error"),
            logs=_get(data, "logs", str, default=None),
            started_at=parse_optional_datetime(data.get("started_at")),
            completed_at=parse_optional_datetime(data.get("completed_at")),
            urls=_get(data, "urls", dict, default={}),
            metrics=_get(data, "metrics", dict, default={}),
        )
