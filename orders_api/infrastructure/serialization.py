"""Serialization utilities for stored records in JSON and MessagePack."""

from __future__ import annotations

import json
from typing import TypeVar

import msgpack
from pydantic import BaseModel

from ..domain.exceptions import SerializationException

T = TypeVar("T", bound=BaseModel)


def serialize_to_msgpack(obj: BaseModel) -> bytes:
    """Serialize a Pydantic model to MessagePack bytes."""
    try:
        # JSON mode turns UUIDs and datetimes into strings msgpack can carry
        data = obj.model_dump(mode="json")
        return bytes(msgpack.packb(data, use_bin_type=True))
    except Exception as e:
        raise SerializationException(f"Failed to serialize to msgpack: {e}") from e


def deserialize_from_msgpack(data: bytes, model_class: type[T]) -> T:
    """Deserialize MessagePack bytes to a Pydantic model."""
    try:
        unpacked = msgpack.unpackb(data, raw=False)
        return model_class.model_validate(unpacked)
    except Exception as e:
        raise SerializationException(f"Failed to deserialize from msgpack: {e}") from e


def serialize_to_json(obj: BaseModel) -> bytes:
    """Serialize a Pydantic model to JSON bytes."""
    try:
        return obj.model_dump_json().encode()
    except Exception as e:
        raise SerializationException(f"Failed to serialize to JSON: {e}") from e


def deserialize_from_json(data: bytes, model_class: type[T]) -> T:
    """Deserialize JSON bytes to a Pydantic model."""
    try:
        json_str = data.decode() if isinstance(data, bytes) else data
        if not json_str or json_str.isspace():
            raise SerializationException("Empty or whitespace-only JSON data")
        return model_class.model_validate(json.loads(json_str))
    except SerializationException:
        raise
    except json.JSONDecodeError as e:
        raise SerializationException(f"Invalid JSON format: {e}") from e
    except Exception as e:
        raise SerializationException(f"Failed to deserialize from JSON: {e}") from e


def is_msgpack(data: bytes) -> bool:
    """Check if data looks like MessagePack format."""
    if not data:
        return False

    # Records are always maps: fixmap (0x80-0x8f) or map16/map32 (0xde-0xdf)
    first_byte = data[0]
    return 0x80 <= first_byte <= 0x8F or first_byte in (0xDE, 0xDF)


def detect_and_deserialize(data: bytes, model_class: type[T]) -> T:
    """Automatically detect format and deserialize."""
    if not data:
        raise SerializationException("Empty data received")

    if is_msgpack(data):
        return deserialize_from_msgpack(data, model_class)
    return deserialize_from_json(data, model_class)


SERIALIZERS = {
    "json": serialize_to_json,
    "msgpack": serialize_to_msgpack,
}
SUPPORTED_CODECS = tuple(SERIALIZERS)


def serialize(obj: BaseModel, codec: str = "json") -> bytes:
    """Serialize a model with the named codec."""
    serializer = SERIALIZERS.get(codec)
    if serializer is None:
        raise SerializationException(f"Unsupported codec: {codec}")
    return serializer(obj)
