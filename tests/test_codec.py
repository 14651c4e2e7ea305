"""Tests for the JSON codec."""

import json

import pytest

from roomsocket import CodecError, JsonCodec


@pytest.fixture
def codec():
    return JsonCodec()


def test_encode_produces_utf8_json(codec):
    data = codec.encode({"text": "héllo"})

    assert isinstance(data, bytes)
    assert json.loads(data.decode("utf-8")) == {"text": "héllo"}


def test_decode_reproduces_json_values(codec):
    message = {
        "text": "hi",
        "int": 1,
        "float": 1.5,
        "flag": True,
        "nothing": None,
        "list": [1, "two", {"three": 3}],
        "map": {"inner": [False]},
    }

    assert codec.decode(codec.encode(message)) == message


def test_decode_accepts_text(codec):
    assert codec.decode('{"a": 1}') == {"a": 1}


@pytest.mark.parametrize(
    "data",
    [b"not json", b'{"truncated": "val', b"\xff\xfe", b"[1, 2]", b'"text"'],
)
def test_decode_rejects_non_objects(codec, data):
    with pytest.raises(CodecError):
        codec.decode(data)


def test_encode_rejects_unserializable_values(codec):
    with pytest.raises(CodecError):
        codec.encode({"value": object()})
