"""
Unit tests for the status registry.
"""

import pytest

from minihttpd.http.status_codes import (
    HTTPStatus,
    STATUS_PHRASES,
    UNKNOWN_PHRASE,
    reason_phrase,
)


@pytest.mark.parametrize("code, phrase", [
    (200, "OK"),
    (201, "Created"),
    (404, "Not Found"),
    (405, "Method Not Allowed"),
    (500, "Internal Server Error"),
])
def test_known_phrases(code: int, phrase: str):
    assert reason_phrase(code) == phrase


@pytest.mark.parametrize("code", [0, 299, 418, 999])
def test_unknown_code(code: int):
    assert reason_phrase(code) == UNKNOWN_PHRASE == "Unknown"


def test_enum_members_have_phrases():
    """Every enum member is registered in the phrase table."""
    for status in HTTPStatus:
        assert reason_phrase(status) == STATUS_PHRASES[status.value]


def test_enum_compares_to_int():
    assert HTTPStatus.CREATED == 201
    assert reason_phrase(HTTPStatus.NOT_FOUND) == "Not Found"


def test_table_is_read_only():
    with pytest.raises(TypeError):
        STATUS_PHRASES[299] = "Custom"
