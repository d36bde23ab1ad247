"""
Unit tests for status codes, reason phrases and error messages.
"""

import pytest

from statichttp.http.status_codes import (
    DEFAULT_STATUS_MESSAGE,
    REASON_PHRASES,
    UNKNOWN_REASON_PHRASE,
    HTTPStatus,
    is_success,
    to_message,
    to_reason_phrase,
)


class TestReasonPhrases:

    @pytest.mark.parametrize("code, phrase", [
        (200, "OK"),
        (400, "Bad Request"),
        (403, "Forbidden"),
        (404, "Not Found"),
        (405, "Method Not Allowed"),
        (415, "Unsupported Media Type"),
        (500, "Internal Server Error"),
        (503, "Service Unavailable"),
        (505, "HTTP Version Not Supported"),
    ])
    def test_known_codes(self, code, phrase):
        assert to_reason_phrase(code) == phrase

    def test_every_table_entry_round_trips(self):
        for code, phrase in REASON_PHRASES.items():
            assert to_reason_phrase(code) == phrase

    @pytest.mark.parametrize("code", [0, 299, 418, 999, -1])
    def test_unknown_codes_fall_back(self, code):
        """A lookup miss is not an error."""
        assert to_reason_phrase(code) == UNKNOWN_REASON_PHRASE

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            REASON_PHRASES[404] = "Gone"

    def test_enum_members_are_in_table(self):
        for status in HTTPStatus:
            assert status.value in REASON_PHRASES
            assert status.phrase == REASON_PHRASES[status.value]


class TestMessages:

    def test_not_found_message(self):
        assert "cannot be found" in to_message(404)

    def test_unsupported_format_message(self):
        assert to_message(415) == "The requested file format is currently not supported."

    def test_method_messages_are_shared(self):
        assert to_message(405) == to_message(501)

    def test_default_message(self):
        assert to_message(418) == DEFAULT_STATUS_MESSAGE


class TestClassification:

    @pytest.mark.parametrize("code, expected", [
        (199, False),
        (200, True),
        (304, True),
        (399, True),
        (400, False),
        (503, False),
    ])
    def test_is_success(self, code, expected):
        assert is_success(code) is expected

    def test_enum_properties(self):
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.NOT_FOUND.is_error
        assert HTTPStatus.NOT_FOUND == 404
