"""
HTTP client for the prediction API.

All requests go through ``Client._fetch``; the resource methods are thin
wrappers that pick a path and a decoder. The client never retries.
"""

import time
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote

import requests

from ..logging_config import get_logger
from .coding import encode_keys
from .errors import ApiError, DecodeError, TransportError
from .models import Collection, Cursor, Model, ModelVersion, Page, Prediction

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.replicate.com/v1/"


def split_model_id(model_id: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts.

    Raises:
        ValueError: If the id is not of the form ``owner/name``.
    """
    owner, sep, name = model_id.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Invalid model id '{model_id}', expected 'owner/name'")
    return owner, name


def _segment(value: str) -> str:
    return quote(value, safe="")


class Client:
    """Client for the prediction HTTP API.

    Holds no mutable state beyond its ``requests.Session``; one client may be
    shared by concurrent generation runs.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        auth_scheme: str = "Bearer",
    ):
        """
        Initialize the client.

        Args:
            token: API token sent with every request.
            base_url: API root; a trailing slash is added if missing.
            session: Session to send requests with (a new one by default).
            timeout: Per-request timeout in seconds, passed to the transport.
            auth_scheme: Scheme prefix of the Authorization header.
        """
        self._token = token
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.auth_scheme = auth_scheme

    # Generic verbs

    def get(self, decode: Callable[[Any], T], path: str) -> T:
        """Fetch a single resource."""
        return self._decode(decode, self._fetch("GET", path), path)

    def list(
        self, decode: Callable[[Any], T], path: str, cursor: Optional[Cursor] = None
    ) -> Page[T]:
        """Fetch one page of a paginated collection."""
        params = {"cursor": cursor.value} if cursor is not None else None
        payload = self._fetch("GET", path, params=params)
        return self._decode(lambda data: Page.from_dict(data, decode), payload, path)

    def create(self, decode: Callable[[Any], T], path: str, body: dict[str, Any]) -> T:
        """Create a resource from a request body."""
        return self._decode(decode, self._fetch("POST", path, body=body), path)

    # Predictions

    def create_prediction(
        self,
        version_id: str,
        input: dict[str, Any],
        webhook: Optional[str] = None,
    ) -> Prediction:
        """
        Create a prediction.

        Args:
            version_id: ID of the model version to run.
            input: Model input keyed by wire names; sent verbatim.
            webhook: URL called when the prediction completes.

        Returns:
            The created prediction.
        """
        body: dict[str, Any] = {"version": version_id, "input": input}
        if webhook is not None:
            body["webhook"] = webhook
        return self.create(Prediction.from_dict, "predictions", body)

    def get_prediction(self, prediction_id: str) -> Prediction:
        return self.get(Prediction.from_dict, f"predictions/{_segment(prediction_id)}")

    def get_predictions(self, cursor: Optional[Cursor] = None) -> Page[Prediction]:
        return self.list(Prediction.from_dict, "predictions", cursor)

    def wait_for_prediction(
        self, prediction: Prediction, poll_interval: float = 0.5
    ) -> Prediction:
        """Poll a prediction until it reaches a terminal status."""
        while not prediction.is_terminal:
            time.sleep(poll_interval)
            prediction = self.get_prediction(prediction.id)
        return prediction

    # Models

    def get_model(self, model_id: str) -> Model:
        owner, name = split_model_id(model_id)
        return self.get(Model.from_dict, f"models/{_segment(owner)}/{_segment(name)}")

    def get_model_versions(
        self, model_id: str, cursor: Optional[Cursor] = None
    ) -> Page[ModelVersion]:
        owner, name = split_model_id(model_id)
        return self.list(
            ModelVersion.from_dict,
            f"models/{_segment(owner)}/{_segment(name)}/versions",
            cursor,
        )

    def get_model_version(self, model_id: str, version_id: str) -> ModelVersion:
        owner, name = split_model_id(model_id)
        return self.get(
            ModelVersion.from_dict,
            f"models/{_segment(owner)}/{_segment(name)}/versions/{_segment(version_id)}",
        )

    def get_collection(self, slug: str) -> Collection:
        """Get a collection of models, e.g. ``super-resolution``."""
        return self.get(Collection.from_dict, f"collections/{_segment(slug)}")

    # Transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"{self.auth_scheme} {self._token}",
            "Accept": "application/json",
        }

    def _fetch(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, str]] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON payload.

        Raises:
            TransportError: If no response was received.
            ApiError: If the status is outside 200-299.
            DecodeError: If a successful response is not JSON.
        """
        url = self.base_url + path
        json_body = encode_keys(body, verbatim=("input",)) if body is not None else None

        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("Request failed: %s %s: %s", method, url, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        status = response.status_code
        if not 200 <= status <= 299:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            logger.warning("Invalid JSON in response to %s %s", method, url)
            raise DecodeError(f"Invalid JSON response for {method} {path}: {e}") from e

    def _error_from_response(self, response: requests.Response) -> ApiError:
        status = response.status_code
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and isinstance(payload.get("detail"), str):
            logger.debug("API error %s: %s", status, payload["detail"])
            return ApiError(payload["detail"], status_code=status, response_body=payload)

        return ApiError(
            f"invalid response: {status} {response.reason}",
            status_code=status,
            response_body=payload,
        )

    @staticmethod
    def _decode(decode: Callable[[Any], T], payload: Any, path: str) -> T:
        try:
            return decode(payload)
        except DecodeError as e:
            logger.warning("Failed to decode response for %s: %s", path, e)
            raise
