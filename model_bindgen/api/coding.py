"""
Wire coding helpers.

Key case translation between Python attribute names and the API's
snake_case wire keys, strict date decoding, and pagination cursor
extraction.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import unquote, urlsplit

from .errors import DecodeError

_ISO8601_FRACTIONAL = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"\.(?P<fraction>\d+)"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def to_wire_key(name: str) -> str:
    """Convert an attribute or body key to its snake_case wire key.

    Already-snake keys come back unchanged, so the translation is lossless
    for ASCII alphanumeric/underscore keys.
    """
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def encode_keys(body: dict[str, Any], verbatim: tuple[str, ...] = ()) -> dict[str, Any]:
    """Translate the top-level keys of a request body to wire keys.

    Values under keys listed in ``verbatim`` are passed through untouched
    (their keys are already wire names, e.g. a prediction ``input`` map).
    """
    encoded = {}
    for key, value in body.items():
        wire_key = to_wire_key(key)
        if wire_key not in verbatim and isinstance(value, dict):
            value = encode_keys(value)
        encoded[wire_key] = value
    return encoded


def parse_datetime(value: Any) -> datetime:
    """Decode an ISO-8601 timestamp with fractional seconds.

    Raises:
        DecodeError: If the value is not a string in exactly that format.
    """
    if not isinstance(value, str):
        raise DecodeError(f"Invalid date: {value!r}")

    match = _ISO8601_FRACTIONAL.fullmatch(value)
    if not match:
        raise DecodeError(f"Invalid date: {value}")

    offset = match.group("offset")
    if offset == "Z":
        tzinfo = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        tzinfo = timezone(sign * timedelta(hours=hours, minutes=minutes))

    # Sub-microsecond digits are truncated
    microsecond = int(match.group("fraction")[:6].ljust(6, "0"))

    try:
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            microsecond,
            tzinfo=tzinfo,
        )
    except ValueError as e:
        raise DecodeError(f"Invalid date: {value}") from e


def parse_optional_datetime(value: Any) -> Optional[datetime]:
    """Like ``parse_datetime`` but ``None`` stays ``None``."""
    if value is None:
        return None
    return parse_datetime(value)


def extract_cursor(url: Any) -> str:
    """Return the ``cursor`` query parameter of a pagination URL.

    The value is percent-decoded but otherwise kept verbatim; ``+`` is not
    treated as a space.

    Raises:
        DecodeError: If ``url`` is not an absolute URL carrying a non-empty
            ``cursor`` parameter.
    """
    if not isinstance(url, str):
        raise DecodeError(f"invalid cursor: {url!r}")

    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise DecodeError(f"invalid cursor: {url}")

    for pair in parts.query.split("&"):
        key, sep, value = pair.partition("=")
        if unquote(key) == "cursor" and sep and value:
            return unquote(value)

    raise DecodeError(f"invalid cursor: {url}")
