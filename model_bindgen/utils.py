"""Loading saved model versions for offline generation.

A saved version stands in for the API fetch: either the version object as
the API returns it, or just the schema document embedded in one.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .api.errors import DecodeError
from .api.models import ModelVersion
from .logging_config import get_logger

logger = get_logger(__name__)

LOCAL_VERSION_ID = "local"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class JSONLoaderError(Exception):
    """Raised when a saved document cannot be read or decoded."""

    pass


def read_json_document(path: str | Path) -> Any:
    """Read and decode one JSON document.

    Raises:
        FileNotFoundError: If the path does not exist.
        JSONLoaderError: If the file cannot be read or holds invalid JSON.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix.lower() != ".json":
        logger.warning(f"Reading {path} as JSON despite its suffix")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise JSONLoaderError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise JSONLoaderError(f"Invalid JSON in {path}: {e}") from e

    logger.debug(f"Read {len(text)} bytes of JSON from {path}")
    return data


def load_model_version_file(path: str | Path) -> ModelVersion:
    """Load a saved model version.

    A bare schema document gets the id ``local`` and an epoch timestamp.

    Raises:
        FileNotFoundError: If the path does not exist.
        JSONLoaderError: If the file is not a valid version or schema.
    """
    data = read_json_document(path)
    if not isinstance(data, dict):
        raise JSONLoaderError(f"Expected a JSON object in {path}")

    if "openapi_schema" not in data:
        logger.info(f"No version metadata in {path}, treating it as a schema document")
        return ModelVersion(id=LOCAL_VERSION_ID, created_at=_EPOCH, openapi_schema=data)

    try:
        return ModelVersion.from_dict(data)
    except DecodeError as e:
        raise JSONLoaderError(f"Invalid model version in {path}: {e}") from e
