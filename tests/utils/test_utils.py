"""Tests for identifier, filename and timestamp helpers."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from proofpin.utils import as_utc, is_valid_uuid, sanitize_filename, utc_now
from proofpin.utils.sanitize import MAX_FILENAME_LENGTH


class TestIsValidUuid:
    def test_valid(self) -> None:
        assert is_valid_uuid("0b0e7a52-4f34-4c35-9d0e-0d7d2f1d8a10")
        assert is_valid_uuid("0B0E7A52-4F34-4C35-9D0E-0D7D2F1D8A10")

    @pytest.mark.parametrize(
        "value", ["", "123", "0b0e7a524f344c359d0e0d7d2f1d8a10", None, 42]
    )
    def test_invalid(self, value: object) -> None:
        assert not is_valid_uuid(value)


class TestSanitizeFilename:
    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("hero.png", "hero.png"),
            ("my cover (v2).jpg", "my_cover_v2_.jpg"),
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\ana\\deck.pdf", "deck.pdf"),
            ("...", "file"),
            ("", "file"),
        ],
    )
    def test_sanitize(self, filename: str, expected: str) -> None:
        assert sanitize_filename(filename) == expected

    def test_long_names_keep_extension(self) -> None:
        result = sanitize_filename("a" * 500 + ".mp4")
        assert len(result) == MAX_FILENAME_LENGTH
        assert result.endswith(".mp4")


class TestTimestamps:
    def test_naive_is_taken_as_utc(self) -> None:
        assert as_utc(datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def test_other_zones_are_converted(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        converted = as_utc(datetime(2024, 1, 1, 14, 0, tzinfo=plus_two))
        assert converted == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert converted.tzinfo == UTC

    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None
