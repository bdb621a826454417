"""
Tests for wire types and the tagged decode steps.
"""

import pytest

from maxbot.errors import DecodeError
from maxbot.types import (
    Message,
    SendMediaRequest,
    Update,
    UpdatesShape,
    UploadShape,
    decode_update,
    decode_updates,
    decode_upload,
    detect_updates_shape,
    detect_upload_shape,
    extract_command,
    id_as_int,
    normalize_command,
)


class TestCommandExtraction:
    @pytest.mark.parametrize("text,expected", [
        ("/start", "start"),
        (" /START@MyBot arg", "start"),
        ("hello", ""),
        ("/", ""),
        ("/ start", "start"),
        ("/help   me please", "help"),
        ("/Echo@", "echo"),
        ("", ""),
        ("  ", ""),
        ("say /start", ""),
    ])
    def test_extract(self, text, expected):
        assert extract_command(text) == expected

    def test_message_command(self):
        assert Message(text="/Start x").command() == "start"

    @pytest.mark.parametrize("name,expected", [
        ("start", "start"),
        ("/START", "start"),
        ("  /Help ", "help"),
        ("", ""),
        (None, ""),
    ])
    def test_normalize(self, name, expected):
        assert normalize_command(name) == expected


class TestIdentifiers:
    def test_string_and_number_ids(self):
        upd = decode_update(
            b'{"update_id": 1, "message": {"message_id": 77, "chat": {"chat_id": "-100"},'
            b' "sender": {"user_id": 12345678901234}, "text": "hi"}}'
        )
        assert upd.message.message_id == "77"
        assert upd.message.chat.chat_id == "-100"
        assert upd.message.sender.user_id == "12345678901234"

    def test_boolean_id_rejected(self):
        with pytest.raises(DecodeError):
            decode_update(b'{"update_id": 1, "message": {"chat": {"chat_id": true}}}')

    def test_object_id_rejected(self):
        with pytest.raises(DecodeError):
            decode_update(b'{"update_id": 1, "message": {"chat": {"chat_id": {}}}}')

    def test_request_accepts_int_ids(self):
        req = SendMediaRequest(chat_id=42, media_id="m1")
        assert req.chat_id == "42"
        assert req.model_dump(exclude_none=True) == {"chat_id": "42", "media_id": "m1"}

    @pytest.mark.parametrize("raw, expected", [
        (b"1.0", "1"),
        (b"1e20", "100000000000000000000"),
        (b"1.5", "1.5"),
    ])
    def test_float_ids(self, raw, expected):
        upd = decode_update(b'{"update_id": 1, "message": {"chat": {"chat_id": ' + raw + b"}}}")
        assert upd.message.chat.chat_id == expected

    def test_id_as_int(self):
        assert id_as_int("42") == 42
        with pytest.raises(ValueError):
            id_as_int("abc")


class TestDecodeUpdate:
    def test_callback_update(self):
        upd = decode_update(
            b'{"update_id": 9, "callback_query": {"callback_id": "c1", "data": "go",'
            b' "from": {"user_id": 5}, "chat": {"chat_id": 3}}}'
        )
        assert upd.message is None
        assert upd.callback_query.data == "go"
        assert upd.callback_query.from_user.user_id == "5"
        assert upd.callback_query.chat.chat_id == "3"

    def test_unknown_fields_ignored(self):
        upd = decode_update(b'{"update_id": 2, "update_type": "message_created", "extra": [1]}')
        assert upd.update_id == 2

    def test_both_payloads_rejected(self):
        with pytest.raises(DecodeError):
            decode_update(b'{"update_id": 1, "message": {"text": "a"}, "callback_query": {"data": "b"}}')

    @pytest.mark.parametrize("body", [b"{", b"", b"[]", b'"text"', b'{"update_id": "x"}'])
    def test_malformed(self, body):
        with pytest.raises(DecodeError):
            decode_update(body)


class TestDecodeUpdates:
    def test_wrapped_shape(self):
        shape, items = detect_updates_shape({"updates": [{"update_id": 1}]})
        assert shape is UpdatesShape.WRAPPED
        assert items == [{"update_id": 1}]

    def test_array_shape(self):
        shape, _ = detect_updates_shape([])
        assert shape is UpdatesShape.ARRAY

    def test_decode_both_shapes(self):
        wrapped = decode_updates(b'{"updates": [{"update_id": 1}, {"update_id": 2}], "marker": 3}')
        array = decode_updates(b'[{"update_id": 1}, {"update_id": 2}]')
        assert [u.update_id for u in wrapped] == [1, 2]
        assert [u.update_id for u in array] == [1, 2]
        assert all(isinstance(u, Update) for u in wrapped + array)

    @pytest.mark.parametrize("body", [b"not json", b'{"items": []}', b'{"updates": null}', b"42"])
    def test_unknown_shape(self, body):
        with pytest.raises(DecodeError):
            decode_updates(body)

    def test_invalid_item(self):
        with pytest.raises(DecodeError):
            decode_updates(b'[{"update_id": 1}, "oops"]')


class TestDecodeUpload:
    def test_flat_shape(self):
        shape, _ = detect_upload_shape({"media_id": "m1"})
        assert shape is UploadShape.FLAT
        resp = decode_upload(b'{"media_id": 123, "url": "https://cdn/x"}')
        assert resp.media_id == "123"
        assert resp.url == "https://cdn/x"

    def test_flat_shape_file_id(self):
        resp = decode_upload(b'{"file_id": "f1"}')
        assert resp.file_id == "f1"
        assert resp.media_id == ""

    def test_wrapped_shape(self):
        shape, _ = detect_upload_shape({"media": {"media_id": "m1"}})
        assert shape is UploadShape.WRAPPED
        resp = decode_upload(b'{"media": {"media_id": "m2", "url": "u"}}')
        assert resp.media_id == "m2"

    def test_zero_media_id_is_flat(self):
        shape, _ = detect_upload_shape({"media_id": 0})
        assert shape is UploadShape.FLAT
        assert decode_upload(b'{"media_id": 0}').media_id == "0"

    def test_url_only_is_flat(self):
        resp = decode_upload(b'{"url": "https://cdn/x"}')
        assert resp.url == "https://cdn/x"
        assert resp.media_id == ""

    def test_object_without_known_fields_is_empty_record(self):
        resp = decode_upload(b'{"status": "ok"}')
        assert (resp.media_id, resp.file_id, resp.url) == ("", "", "")

    @pytest.mark.parametrize("body", [b"nope", b"[]", b"42"])
    def test_unknown_shape(self, body):
        with pytest.raises(DecodeError):
            decode_upload(body)
