"""Unit tests for the record codecs."""

from __future__ import annotations

import json

import msgpack
import pytest

from orders_api.domain.exceptions import SerializationException
from orders_api.domain.models import Order
from orders_api.infrastructure.serialization import (
    SUPPORTED_CODECS,
    deserialize_from_json,
    deserialize_from_msgpack,
    detect_and_deserialize,
    is_msgpack,
    serialize,
    serialize_to_json,
    serialize_to_msgpack,
)


class TestJsonCodec:
    """JSON wire format."""

    def test_field_names_and_null_timestamps(self, sample_order):
        data = json.loads(serialize_to_json(sample_order))

        assert data["order_id"] == 1001
        assert data["customer_id"] == str(sample_order.customer_id)
        assert data["line_items"][0] == {
            "item_id": str(sample_order.line_items[0].item_id),
            "quantity": 2,
            "price": 500,
        }
        assert data["created_at"].startswith("2024-01-01T00:00:00")
        assert data["shipped_at"] is None
        assert data["completed_at"] is None

    def test_decode(self, sample_order):
        assert deserialize_from_json(serialize_to_json(sample_order), Order) == sample_order

    @pytest.mark.parametrize("data", [b"", b"   ", b"{oops", b"[]"])
    def test_invalid_json(self, data):
        with pytest.raises(SerializationException):
            deserialize_from_json(data, Order)

    def test_invariant_violation_rejected_on_decode(self, sample_order):
        data = json.loads(serialize_to_json(sample_order))
        data["completed_at"] = data["created_at"]

        with pytest.raises(SerializationException):
            deserialize_from_json(json.dumps(data).encode(), Order)


class TestMsgpackCodec:
    """MessagePack wire format."""

    def test_same_field_names_as_json(self, sample_order):
        unpacked = msgpack.unpackb(serialize_to_msgpack(sample_order), raw=False)

        assert unpacked == json.loads(serialize_to_json(sample_order))

    def test_decode(self, sample_order):
        assert deserialize_from_msgpack(serialize_to_msgpack(sample_order), Order) == sample_order

    def test_invalid_msgpack(self):
        with pytest.raises(SerializationException):
            deserialize_from_msgpack(b"\x81\xc1", Order)


class TestFormatDetection:
    """Decoding picks the codec from the first byte."""

    def test_is_msgpack(self, sample_order):
        assert is_msgpack(serialize_to_msgpack(sample_order))
        assert not is_msgpack(serialize_to_json(sample_order))
        assert not is_msgpack(b"")

    @pytest.mark.parametrize("codec", SUPPORTED_CODECS)
    def test_detect_and_deserialize(self, sample_order, codec):
        assert detect_and_deserialize(serialize(sample_order, codec), Order) == sample_order

    def test_detect_empty(self):
        with pytest.raises(SerializationException, match="Empty"):
            detect_and_deserialize(b"", Order)

    def test_unknown_codec(self, sample_order):
        with pytest.raises(SerializationException, match="Unsupported codec"):
            serialize(sample_order, "xml")

    def test_supported_codecs(self):
        assert SUPPORTED_CODECS == ("json", "msgpack")
