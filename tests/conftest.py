"""Shared fixtures: a recording fake of ``requests.Session`` and API payloads."""

import threading
from typing import Any, Dict, List, Optional, Tuple

import pytest

from model_bindgen.api.client import Client

BASE_URL = "https://api.test/v1/"
TOKEN = "r8_test_token"
CREATED_AT = "2022-04-26T19:29:04.418669Z"

_INVALID_JSON = object()


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    @classmethod
    def invalid_json(cls, status_code: int = 200, reason: str = "OK") -> "FakeResponse":
        return cls(status_code, _INVALID_JSON, reason)

    def json(self) -> Any:
        if self._payload is _INVALID_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Records every request and answers from registered routes.

    Routes are keyed by method and full URL (without query string). A route
    may hold an exception instance, which is raised instead of answering.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def add(self, method: str, path: str, response: Any) -> None:
        self.routes[(method, BASE_URL + path)] = response

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        with self._lock:
            self.calls.append({"method": method, "url": url, **kwargs})
        response = self.routes.get((method, url))
        if response is None:
            return FakeResponse(404, {"detail": "Not found."}, "Not Found")
        if isinstance(response, Exception):
            raise response
        return response

    def paths(self) -> List[str]:
        return [call["url"][len(BASE_URL):] for call in self.calls]


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> Client:
    return Client(token=TOKEN, base_url=BASE_URL, session=session)


def version_payload(schema: Optional[dict] = None, version_id: str = "v1") -> dict:
    return {
        "id": version_id,
        "created_at": CREATED_AT,
        "cog_version": "0.3.0",
        "openapi_schema": schema if schema is not None else openapi_document(),
    }


def model_payload(
    owner: str = "acme",
    name: str = "text-to-pokemon",
    latest_version: Optional[dict] = None,
    description: Optional[str] = "Generate Pokémon from a text description",
) -> dict:
    return {
        "url": f"https://replicate.com/{owner}/{name}",
        "owner": owner,
        "name": name,
        "description": description,
        "visibility": "public",
        "github_url": None,
        "paper_url": None,
        "license_url": None,
        "latest_version": latest_version,
    }


def openapi_document(
    input_properties: Optional[dict] = None,
    required: Optional[list] = None,
    output: Optional[dict] = None,
    extra_schemas: Optional[dict] = None,
) -> dict:
    """An OpenAPI document shaped like the ones embedded in model versions."""
    if input_properties is None:
        input_properties = {
            "prompt": {
                "type": "string",
                "title": "Prompt",
                "x-order": 0,
                "description": "Text prompt",
            },
            "num_outputs": {
                "type": "integer",
                "title": "Num Outputs",
                "default": 1,
                "x-order": 1,
            },
        }
        required = ["prompt"] if required is None else required

    schemas: Dict[str, Any] = {
        "Input": {
            "type": "object",
            "title": "Input",
            "properties": input_properties,
            "required": required or [],
        }
    }
    if output is not None:
        schemas["Output"] = output
    if extra_schemas:
        schemas.update(extra_schemas)

    return {
        "openapi": "3.0.2",
        "info": {"title": "Cog", "version": "0.1.0"},
        "paths": {},
        "components": {"schemas": schemas},
    }


def prediction_payload(prediction_id: str = "p1", status: str = "starting", **overrides) -> dict:
    payload = {
        "id": prediction_id,
        "version": "v1",
        "status": status,
        "created_at": CREATED_AT,
        "input": {"prompt": "a pikachu"},
        "output": None,
        "error": None,
        "logs": "",
        "started_at": None,
        "completed_at": None,
        "urls": {"get": f"{BASE_URL}predictions/{prediction_id}"},
        "metrics": {},
    }
    payload.update(overrides)
    return payload
