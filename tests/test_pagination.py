"""Tests for cursor encoding."""

import pytest

from campus_threads.core.errors import ValidationError
from campus_threads.services.pagination import decode_cursor, encode_cursor


def test_cursor_round_trip() -> None:
    assert decode_cursor(encode_cursor(12345)) == 12345


@pytest.mark.parametrize("cursor", ["@@@", "bm90LWFuLWludA"])
def test_invalid_cursor(cursor: str) -> None:
    with pytest.raises(ValidationError):
        decode_cursor(cursor)
