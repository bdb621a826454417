"""
Tests for failed-response classification.
"""

import copy
import pickle

import pytest

from maxbot.errors import APIError, classify, parse_retry_after, should_retry_status


class TestClassify:
    """Tests for classify()."""

    def test_full_json_body(self):
        err = classify(
            400,
            None,
            b'{"code":"bad_request","message":"chat_id missing","description":"d","details":{"field":"chat_id"}}',
        )
        assert err.status_code == 400
        assert err.code == "bad_request"
        assert err.message == "chat_id missing"
        assert err.description == "d"
        assert err.details == {"field": "chat_id"}
        assert err.retry_after == 0
        assert str(err) == "max api error: status=400 code=bad_request message=chat_id missing"

    def test_error_key_is_message_fallback(self):
        err = classify(403, None, b'{"error":"forbidden"}')
        assert err.message == "forbidden"

    def test_error_key_does_not_override_message(self):
        err = classify(403, None, b'{"message":"nope","error":"forbidden"}')
        assert err.message == "nope"

    def test_non_json_body_is_not_an_error(self):
        err = classify(502, None, b"  <html>bad gateway</html> ")
        assert isinstance(err, APIError)
        assert err.status_code == 502
        assert err.code == ""
        assert err.body == "<html>bad gateway</html>"
        assert str(err) == "max api error: status=502 message=<html>bad gateway</html>"

    def test_json_array_body(self):
        err = classify(500, None, b"[1,2]")
        assert err.message == ""
        assert err.body == "[1,2]"

    def test_non_string_fields_ignored(self):
        err = classify(400, None, b'{"code":12,"message":null,"details":"x"}')
        assert err.code == ""
        assert err.message == ""
        assert err.details == {}

    def test_render_falls_back_to_description(self):
        err = classify(400, None, b'{"description":"described"}')
        assert str(err).endswith("message=described")

    def test_render_generic_when_empty(self):
        err = classify(500, None, b"")
        assert str(err) == "max api error: status=500 message=request failed"

    def test_retry_after_header(self):
        err = classify(429, "3", b"{}")
        assert err.retry_after == 3

    def test_error_is_read_only(self):
        err = classify(500, None, b"{}")
        with pytest.raises(AttributeError):
            err.status_code = 200

    def test_survives_pickle_and_copy(self):
        err = classify(
            503, "7", b'{"code":"unavailable","message":"later","details":{"shard":2}}'
        )
        for clone in (pickle.loads(pickle.dumps(err)), copy.copy(err), copy.deepcopy(err)):
            assert isinstance(clone, APIError)
            assert clone.status_code == 503
            assert clone.code == "unavailable"
            assert clone.message == "later"
            assert clone.details == {"shard": 2}
            assert clone.retry_after == 7
            assert str(clone) == str(err)


class TestRetryAfter:
    @pytest.mark.parametrize("value,expected", [
        (None, 0),
        ("", 0),
        ("0", 0),
        ("-5", 0),
        ("abc", 0),
        ("1.5", 0),
        (" 2 ", 2),
        ("10", 10),
    ])
    def test_parse(self, value, expected):
        assert parse_retry_after(value) == expected


class TestShouldRetryStatus:
    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 599])
    def test_retryable(self, status):
        assert should_retry_status(status) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422])
    def test_not_retryable(self, status):
        assert should_retry_status(status) is False
