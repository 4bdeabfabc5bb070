"""Native Python value → Firestore wire value.

Dispatch runs through ``ENCODE_RULES``, an ordered list of
``EncodeRule(name, predicate, handler)``; the first matching predicate wins.
The encoder never raises for data-shape reasons: anything unmatched is
coerced to a ``stringValue``.
"""
from __future__ import annotations
import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from decimal import Decimal
from numbers import Integral, Real
from typing import Any, Callable, Dict, List, NamedTuple

import numpy as np

from .config import CONVERT_CONFIG
from .models import (
    ARRAY_VALUE, BOOLEAN_VALUE, DOUBLE_VALUE, GEO_POINT_VALUE, INTEGER_VALUE,
    MAP_VALUE, NULL_VALUE, REFERENCE_VALUE, STRING_VALUE, TIMESTAMP_VALUE,
    DocumentReference, LiteralDocumentReference, LiteralGeoPointValue,
    is_coordinate,
)

# ── logger (무소음 기본) ───────────────────────────────
LOGGER = logging.getLogger("fsv.encoder")
LOGGER.addHandler(logging.NullHandler())


class EncodeRule(NamedTuple):
    name: str
    predicate: Callable[[Any], bool]
    handler: Callable[[Any], Dict[str, Any]]


# ── predicates ─────────────────────────────────────
def _is_timestamp(v: Any) -> bool:
    return isinstance(v, (datetime, date))


def _is_number(v: Any) -> bool:
    # bool 은 int 의 하위 클래스 → 제외
    if isinstance(v, (bool, np.bool_)):
        return False
    return isinstance(v, (Real, Decimal))


def _is_boolean(v: Any) -> bool:
    return isinstance(v, (bool, np.bool_))


def _is_sequence(v: Any) -> bool:
    return isinstance(v, (list, tuple, np.ndarray))


def _is_reference_literal(v: Mapping) -> bool:
    return len(v) == 1 and isinstance(v.get(REFERENCE_VALUE), str)


def _is_geo_point_literal(v: Mapping) -> bool:
    if len(v) != 1 or GEO_POINT_VALUE not in v:
        return False
    point = v[GEO_POINT_VALUE]
    return (
        isinstance(point, Mapping)
        and set(point) == {"latitude", "longitude"}
        and is_coordinate(point["latitude"])
        and is_coordinate(point["longitude"])
    )


# ── handlers ───────────────────────────────────────
def _encode_timestamp(v: date) -> Dict[str, Any]:
    if not isinstance(v, datetime):
        v = datetime.combine(v, time.min)
    if v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)   # naive → UTC 로 간주
    else:
        try:
            v = v.astimezone(timezone.utc)
        except OverflowError:            # UTC 로 바꾸면 1..9999 년 범위 밖
            return _encode_fallback(v)
    iso = v.replace(tzinfo=None).isoformat(timespec=CONVERT_CONFIG["timestamp_timespec"])
    return {TIMESTAMP_VALUE: iso + "Z"}


def _encode_number(v: Any) -> Dict[str, Any]:
    if isinstance(v, Integral):
        return {INTEGER_VALUE: int(v)}
    try:
        f = float(v)
    except (OverflowError, ValueError):   # Decimal("sNaN"), 거대한 Fraction
        return _encode_fallback(v)
    if f.is_integer():
        # 5.0 → integerValue 5 (의도된 손실)
        return {INTEGER_VALUE: int(f)}
    return {DOUBLE_VALUE: f}


def _encode_map(v: Mapping) -> Dict[str, Any]:
    if _is_reference_literal(v):
        return {REFERENCE_VALUE: v[REFERENCE_VALUE]}
    if _is_geo_point_literal(v):
        point = v[GEO_POINT_VALUE]
        return {GEO_POINT_VALUE: {"latitude": point["latitude"], "longitude": point["longitude"]}}
    fields: Dict[str, Any] = {}
    for k, x in v.items():
        key = str(k)
        if key in fields:
            LOGGER.debug("Map key %r collides after str() coercion; last value wins", k)
        fields[key] = encode_value(x)
    return {MAP_VALUE: {"fields": fields}}


def _encode_array(v: Any) -> Dict[str, Any]:
    if isinstance(v, np.ndarray):
        v = v.tolist()
        if not isinstance(v, list):   # 0-d array → scalar
            return encode_value(v)
    return {ARRAY_VALUE: {"values": [encode_value(x) for x in v]}}


def _encode_fallback(v: Any) -> Dict[str, Any]:
    try:
        text = str(v)
    except Exception:
        text = object.__repr__(v)
    LOGGER.debug("Fallback string coercion for %s", type(v).__name__)
    return {STRING_VALUE: text}


ENCODE_RULES: List[EncodeRule] = [
    EncodeRule("timestamp",         _is_timestamp,
               _encode_timestamp),
    EncodeRule("live_reference",    lambda v: isinstance(v, DocumentReference),
               lambda v: {REFERENCE_VALUE: v.resource_name()}),
    EncodeRule("literal_reference", lambda v: isinstance(v, LiteralDocumentReference),
               lambda v: v.to_wire()),
    EncodeRule("literal_geo_point", lambda v: isinstance(v, LiteralGeoPointValue),
               lambda v: v.to_wire()),
    EncodeRule("string",            lambda v: isinstance(v, str),
               lambda v: {STRING_VALUE: v}),
    EncodeRule("number",            _is_number,
               _encode_number),
    EncodeRule("boolean",           _is_boolean,
               lambda v: {BOOLEAN_VALUE: bool(v)}),
    EncodeRule("null",              lambda v: v is None,
               lambda v: {NULL_VALUE: None}),
    EncodeRule("array",             _is_sequence,
               _encode_array),
    EncodeRule("map",               lambda v: isinstance(v, Mapping),
               _encode_map),
    EncodeRule("fallback",          lambda v: True,
               _encode_fallback),
]


class FirestoreEncoder:
    """Stateless encoder; one instance may be shared across threads."""

    def encode_value(self, value: Any) -> Dict[str, Any]:
        for rule in ENCODE_RULES:
            if rule.predicate(value):
                return rule.handler(value)
        return _encode_fallback(value)

    def encode_document(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {"fields": {k: self.encode_value(v) for k, v in data.items()}}


_DEFAULT = FirestoreEncoder()


def encode_value(value: Any) -> Dict[str, Any]:
    """Convert a native value to a Firestore wire value."""
    return _DEFAULT.encode_value(value)


def encode_document(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a native mapping to a Firestore document (``{"fields": …}``)."""
    return _DEFAULT.encode_document(data)
