"""Tests for the JSON envelope codec."""
import json

import pytest

from disk_ttl_cache.errors import CorruptEnvelopeError, SerializationError
from disk_ttl_cache.storage.envelope import decode, encode
from disk_ttl_cache.storage.locator import CacheKey

KEY = CacheKey(segment="test", id="x")


def test_encode_writes_metadata():
    obj = json.loads(encode(KEY, {"a": [1, 2]}, 5000, stored=1000))
    assert obj["key"] == {"segment": "test", "id": "x"}
    assert obj["item"] == {"a": [1, 2]}
    assert obj["stored"] == 1000
    assert obj["ttl"] == 5000
    assert obj["expires"].startswith("1970-01-01T00:00:06")


def test_decode_remaining_and_expiry():
    env = decode(encode(KEY, "v", 100, stored=1000))
    assert env.item == "v"
    assert env.remaining(1050) == 50
    assert not env.is_expired(1099)
    assert env.is_expired(1100)


def test_encode_cycle_fails():
    value = {"a": 1}
    value["b"] = value
    with pytest.raises(SerializationError):
        encode(KEY, value, 10)


@pytest.mark.parametrize("value", [object(), {1, 2}, float("nan"), b"bytes"])
def test_encode_unrepresentable(value):
    with pytest.raises(SerializationError):
        encode(KEY, value, 10)


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"\xff\xfe",
        b"[1, 2]",
        b'{"stored": 1, "ttl": 2}',
        b'{"item": 1, "ttl": 2}',
        b'{"item": 1, "stored": "yesterday", "ttl": 2}',
        b'{"item": 1, "stored": 1, "ttl": true}',
        b'{"item": 1, "stored": 1' + b"0" * 400 + b', "ttl": 5}',
        b'{"item": ' + b"[" * 100000 + b"]" * 100000 + b', "stored": 1, "ttl": 5}',
    ],
)
def test_decode_corrupt(data):
    with pytest.raises(CorruptEnvelopeError):
        decode(data)


def test_decode_appended_garbage():
    data = encode(KEY, "v", 100) + b"bad data that kills JSON"
    with pytest.raises(CorruptEnvelopeError):
        decode(data)
