"""
tests/test_encoder.py
─────────────────────
native → wire 변환 규칙 (우선순위·숫자·null·fallback)
"""
import math
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import numpy as np
import pytest

from fsv_core.encoder import ENCODE_RULES, encode_document, encode_value
from fsv_core.models import (
    WIRE_KINDS, DocumentReference, LiteralDocumentReference,
    LiteralGeoPointValue, wire_kind,
)
from fsv_core.path import PathUtil

REF = "projects/p/databases/(default)/documents/users/alice"


def _client(project="p"):
    return SimpleNamespace(path_util=PathUtil(project))


# ----------------------------------------------------------------------
def test_rule_order():
    assert [r.name for r in ENCODE_RULES] == [
        "timestamp",
        "live_reference",
        "literal_reference",
        "literal_geo_point",
        "string",
        "number",
        "boolean",
        "null",
        "array",
        "map",
        "fallback",
    ]


@pytest.mark.parametrize("value, expected", [
    (5,     {"integerValue": 5}),
    (5.5,   {"doubleValue": 5.5}),
    (5.0,   {"integerValue": 5}),
    (-3,    {"integerValue": -3}),
    (0.25,  {"doubleValue": 0.25}),
    (2**62, {"integerValue": 2**62}),
])
def test_integer_double_split(value, expected):
    out = encode_value(value)
    assert out == expected
    assert type(next(iter(out.values()))) is type(next(iter(expected.values())))


def test_non_finite_floats_are_doubles():
    assert math.isnan(encode_value(float("nan"))["doubleValue"])
    assert encode_value(float("inf")) == {"doubleValue": float("inf")}
    assert encode_value(float("-inf")) == {"doubleValue": float("-inf")}


def test_booleans_are_not_numbers():
    assert encode_value(True) == {"booleanValue": True}
    assert encode_value(False) == {"booleanValue": False}


def test_null():
    assert encode_value(None) == {"nullValue": None}


def test_string_unchanged():
    assert encode_value("") == {"stringValue": ""}
    assert encode_value("héllo") == {"stringValue": "héllo"}


def test_timestamp_utc():
    dt = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert encode_value(dt) == {"timestampValue": "2024-01-02T03:04:05.678000Z"}


def test_timestamp_offset_converted_to_utc():
    kst = timezone(timedelta(hours=9))
    dt = datetime(2024, 1, 2, 12, 0, 0, tzinfo=kst)
    assert encode_value(dt) == {"timestampValue": "2024-01-02T03:00:00.000000Z"}


def test_naive_timestamp_taken_as_utc():
    assert encode_value(datetime(2024, 1, 2, 3, 4, 5)) == {
        "timestampValue": "2024-01-02T03:04:05.000000Z"
    }


def test_date_is_midnight_utc():
    assert encode_value(date(2024, 1, 2)) == {"timestampValue": "2024-01-02T00:00:00.000000Z"}


def test_nested_structure():
    assert encode_value({"a": [1, "b", None]}) == {
        "mapValue": {"fields": {"a": {"arrayValue": {"values": [
            {"integerValue": 1},
            {"stringValue": "b"},
            {"nullValue": None},
        ]}}}}
    }


def test_tuple_is_array():
    assert encode_value((1, 2.5)) == {
        "arrayValue": {"values": [{"integerValue": 1}, {"doubleValue": 2.5}]}
    }


def test_empty_containers():
    assert encode_value([]) == {"arrayValue": {"values": []}}
    assert encode_value({}) == {"mapValue": {"fields": {}}}


def test_non_string_map_keys_stringified():
    assert encode_value({1: "a"}) == {"mapValue": {"fields": {"1": {"stringValue": "a"}}}}


# ── numpy / Decimal ───────────────────────────────
def test_numpy_scalars():
    assert encode_value(np.int64(3)) == {"integerValue": 3}
    assert type(encode_value(np.int64(3))["integerValue"]) is int
    assert encode_value(np.float64(2.5)) == {"doubleValue": 2.5}
    assert encode_value(np.float32(4.0)) == {"integerValue": 4}
    assert encode_value(np.bool_(True)) == {"booleanValue": True}


def test_numpy_arrays():
    assert encode_value(np.array([1, 2])) == {
        "arrayValue": {"values": [{"integerValue": 1}, {"integerValue": 2}]}
    }
    assert encode_value(np.array(7)) == {"integerValue": 7}


def test_decimal():
    assert encode_value(Decimal("1.5")) == {"doubleValue": 1.5}
    assert encode_value(Decimal("2")) == {"integerValue": 2}


# ── references / geo-points ───────────────────────
def test_live_reference_resolved_by_client():
    ref = DocumentReference(client=_client(), path="users/alice")
    assert encode_value(ref) == {"referenceValue": REF}


def test_live_reference_failure_propagates():
    class _Broken:
        def get_document_name(self, path):
            raise RuntimeError("lookup failed")

    ref = DocumentReference(client=SimpleNamespace(path_util=_Broken()), path="users/alice")
    with pytest.raises(RuntimeError, match="lookup failed"):
        encode_value(ref)
    with pytest.raises(RuntimeError):
        encode_value({"owner": ref})


def test_handle_types():
    assert encode_value(LiteralDocumentReference(REF)) == {"referenceValue": REF}
    assert encode_value(LiteralGeoPointValue(35.0, 139.0)) == {
        "geoPointValue": {"latitude": 35.0, "longitude": 139.0}
    }


def test_reference_literal_passthrough():
    assert encode_value({"referenceValue": REF}) == {"referenceValue": REF}


def test_geo_point_literal_passthrough():
    lit = {"geoPointValue": {"latitude": 35.0, "longitude": 139.0}}
    assert encode_value(lit) == lit


# ── fallback ──────────────────────────────────────
class _Custom:
    def __str__(self):
        return "custom!"


class _Unprintable:
    def __str__(self):
        raise ValueError("nope")


def test_fallback_string_coercion():
    assert encode_value(_Custom()) == {"stringValue": "custom!"}
    assert encode_value(frozenset()) == {"stringValue": "frozenset()"}


def test_fallback_never_raises():
    out = encode_value(_Unprintable())
    assert out["stringValue"].startswith("<")


# ── invariants ────────────────────────────────────
@pytest.mark.parametrize("value", [
    "s", 1, 1.5, True, None, datetime(2024, 1, 1, tzinfo=timezone.utc),
    [1, [2]], {"a": {"b": 1}}, LiteralGeoPointValue(1.0, 2.0),
    LiteralDocumentReference(REF), _Custom(), b"raw", object(),
])
def test_single_discriminator(value):
    out = encode_value(value)
    assert len(out) == 1
    assert wire_kind(out) in WIRE_KINDS


def test_encode_document_keeps_key_set():
    data = {"a": 1, "b": "x", "id": "kept", "": None}
    doc = encode_document(data)
    assert list(doc) == ["fields"]
    assert set(doc["fields"]) == set(data)
    assert doc["fields"]["id"] == {"stringValue": "kept"}


@pytest.mark.parametrize("dt", [
    datetime(1, 1, 1, 0, 30, tzinfo=timezone(timedelta(hours=1))),          # UTC 로 0 년
    datetime(9999, 12, 31, 23, 30, tzinfo=timezone(timedelta(hours=-1))),   # UTC 로 10000 년
])
def test_timestamp_out_of_utc_range_falls_back(dt):
    assert encode_value(dt) == {"stringValue": str(dt)}


def test_colliding_map_keys_last_wins():
    assert encode_value({1: "a", "1": "b"}) == {"mapValue": {"fields": {"1": {"stringValue": "b"}}}}
