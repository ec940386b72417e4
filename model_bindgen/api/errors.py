"""Errors raised by the HTTP API client."""

from typing import Any, Optional


class ApiError(Exception):
    """An error response from the API, or a failed request.

    ``detail`` is the human-readable message, taken from the ``detail`` field
    of the error envelope when the server sent one.
    """

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
    ):
        self.detail = detail
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"API error {self.status_code}: {self.detail}"
        return f"API error: {self.detail}"


class TransportError(ApiError):
    """The request never produced an HTTP response (DNS, TLS, timeout...)."""


class DecodeError(Exception):
    """A response body could not be decoded into the expected resource."""
