"""Tests for wire coding helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from model_bindgen.api.coding import (
    encode_keys,
    extract_cursor,
    parse_datetime,
    parse_optional_datetime,
    to_wire_key,
)
from model_bindgen.api.errors import DecodeError


class TestKeyTranslation:
    """Tests for snake_case wire keys."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("createdAt", "created_at"),
            ("latestVersion", "latest_version"),
            ("githubURL", "github_url"),
            ("HTTPStatus", "http_status"),
            ("already_snake", "already_snake"),
            ("id", "id"),
        ],
    )
    def test_to_wire_key(self, name, expected):
        assert to_wire_key(name) == expected

    def test_nested_keys_are_translated(self):
        body = {"webhookEvents": {"completedAt": 1}}
        assert encode_keys(body) == {"webhook_events": {"completed_at": 1}}

    def test_verbatim_values_are_untouched(self):
        body = {"version": "v1", "input": {"numOutputs": 2, "Image URL": "x"}}
        assert encode_keys(body, verbatim=("input",)) == body


class TestParseDatetime:
    """Tests for strict ISO-8601 decoding."""

    def test_utc_with_microseconds(self):
        assert parse_datetime("2022-04-26T19:29:04.418669Z") == datetime(
            2022, 4, 26, 19, 29, 4, 418669, tzinfo=timezone.utc
        )

    def test_short_fraction_is_padded(self):
        assert parse_datetime("2022-04-26T19:29:04.5Z").microsecond == 500000

    def test_long_fraction_is_truncated(self):
        assert parse_datetime("2022-04-26T19:29:04.123456789Z").microsecond == 123456

    def test_offset(self):
        value = parse_datetime("2022-04-26T19:29:04.000-05:30")
        assert value.utcoffset() == -timedelta(hours=5, minutes=30)

    @pytest.mark.parametrize(
        "value",
        [
            "2022-04-26T19:29:04Z",
            "2022-04-26 19:29:04.1Z",
            "2022-04-26T19:29:04.1",
            "2022-13-26T19:29:04.1Z",
            "\uff12\uff10\uff12\uff13-01-01T00:00:00.000Z",
            "2022-04-26T19:29:04.1Z\n",
            "yesterday",
            "",
            1650997744,
            None,
        ],
    )
    def test_rejects_anything_else(self, value):
        with pytest.raises(DecodeError):
            parse_datetime(value)

    def test_optional(self):
        assert parse_optional_datetime(None) is None
        assert parse_optional_datetime("2022-04-26T19:29:04.1Z").year == 2022


class TestExtractCursor:
    """Tests for pagination cursor extraction."""

    def test_cursor_among_other_parameters(self):
        url = "https://api.replicate.com/v1/predictions?limit=10&cursor=cD0y&x=1"
        assert extract_cursor(url) == "cD0y"

    def test_percent_encoding_is_decoded(self):
        assert extract_cursor("https://a.example/v1/p?cursor=a%2Fb%3D") == "a/b="

    def test_plus_is_kept(self):
        assert extract_cursor("https://a.example/v1/p?cursor=a+b") == "a+b"

    @pytest.mark.parametrize(
        "url",
        [
            "not-a-url",
            "/v1/predictions?cursor=abc",
            "https://a.example/v1/p",
            "https://a.example/v1/p?cursor=",
            "https://a.example/v1/p?cursor",
            42,
        ],
    )
    def test_invalid(self, url):
        with pytest.raises(DecodeError, match="invalid cursor"):
            extract_cursor(url)
