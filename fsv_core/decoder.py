"""Firestore wire value → native Python value.

``DECODE_RULES`` is checked in order against the discriminator keys of the
wire value.  Unknown or malformed input decodes to ``None``; the decoder
does not raise for data-shape reasons.

Geo-points and references come back as first-class handles
(:class:`LiteralGeoPointValue`, :class:`LiteralDocumentReference`), which
the encoder maps straight back to their wire shapes.
"""
from __future__ import annotations
import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from numbers import Integral, Real
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from .models import (
    ARRAY_VALUE, BOOLEAN_VALUE, DOUBLE_VALUE, GEO_POINT_VALUE, INTEGER_VALUE,
    MAP_VALUE, NULL_VALUE, REFERENCE_VALUE, STRING_VALUE, TIMESTAMP_VALUE,
    FirestoreResponse, LiteralDocumentReference, LiteralGeoPointValue,
    is_coordinate,
)
from .path import get_document_id

LOGGER = logging.getLogger("fsv.decoder")
LOGGER.addHandler(logging.NullHandler())

# RFC 3339: 소수점 이하 0‥9 자리, Z 또는 ±HH:MM
_TS_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?([Zz]|[+-]\d{2}:\d{2})$"
)


class DecodeRule(NamedTuple):
    kind: str
    predicate: Callable[[Mapping], bool]
    handler: Callable[[Mapping], Any]


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into an aware UTC datetime (None if invalid)."""
    if not isinstance(raw, str):
        return None
    m = _TS_RE.match(raw.strip())
    if not m:
        return None
    base, frac, offset = m.groups()
    frac = (frac or "")[:6].ljust(6, "0")   # ns → µs 절삭
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        dt = datetime.fromisoformat(f"{base[:10]}T{base[11:]}.{frac}{offset}")
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


# ── handlers ───────────────────────────────────────
def _decode_integer(w: Mapping) -> Optional[int]:
    raw = w[INTEGER_VALUE]
    if isinstance(raw, Integral):
        return int(raw)
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else raw
    try:
        return int(raw)      # REST API 는 int64 를 문자열로 보냄
    except (TypeError, ValueError):
        LOGGER.debug("Undecodable integerValue: %r", raw)
        return None


def _decode_double(w: Mapping) -> Optional[float]:
    raw = w[DOUBLE_VALUE]
    if isinstance(raw, Real) and not isinstance(raw, bool):
        return raw
    try:
        return float(raw)    # "NaN", "Infinity"
    except (TypeError, ValueError):
        LOGGER.debug("Undecodable doubleValue: %r", raw)
        return None


def _decode_timestamp(w: Mapping) -> Optional[datetime]:
    dt = parse_timestamp(w[TIMESTAMP_VALUE])
    if dt is None:
        LOGGER.debug("Unparseable timestampValue: %r", w[TIMESTAMP_VALUE])
    return dt


def _decode_geo_point(w: Mapping) -> Optional[LiteralGeoPointValue]:
    point = w[GEO_POINT_VALUE]
    if not isinstance(point, Mapping):
        LOGGER.debug("Malformed geoPointValue: %r", point)
        return None
    # 서버는 0.0 좌표를 생략하기도 함
    lat, lng = point.get("latitude", 0.0), point.get("longitude", 0.0)
    if not (is_coordinate(lat) and is_coordinate(lng)):
        LOGGER.debug("Malformed geoPointValue: %r", point)
        return None
    return LiteralGeoPointValue(latitude=lat, longitude=lng)


def _decode_reference(w: Mapping) -> Optional[LiteralDocumentReference]:
    raw = w[REFERENCE_VALUE]
    if not isinstance(raw, str):
        LOGGER.debug("Malformed referenceValue: %r", raw)
        return None
    return LiteralDocumentReference(reference_value=raw)


def _has_map_fields(w: Mapping) -> bool:
    mv = w.get(MAP_VALUE)
    return isinstance(mv, Mapping) and isinstance(mv.get("fields"), Mapping)


def _decode_map(w: Mapping) -> Dict[str, Any]:
    return {k: decode_value(x) for k, x in w[MAP_VALUE]["fields"].items()}


def _decode_array(w: Mapping) -> List[Any]:
    av = w[ARRAY_VALUE]
    values = av.get("values") if isinstance(av, Mapping) else None
    if not isinstance(values, (list, tuple)):
        values = []
    return [decode_value(x) for x in values]


def _has(kind: str) -> Callable[[Mapping], bool]:
    return lambda w: kind in w


DECODE_RULES: List[DecodeRule] = [
    DecodeRule(STRING_VALUE,    _has(STRING_VALUE),    lambda w: w[STRING_VALUE]),
    DecodeRule(INTEGER_VALUE,   _has(INTEGER_VALUE),   _decode_integer),
    DecodeRule(DOUBLE_VALUE,    _has(DOUBLE_VALUE),    _decode_double),
    DecodeRule(BOOLEAN_VALUE,   _has(BOOLEAN_VALUE),   lambda w: w[BOOLEAN_VALUE]),
    DecodeRule(NULL_VALUE,      _has(NULL_VALUE),      lambda w: None),
    DecodeRule(TIMESTAMP_VALUE, _has(TIMESTAMP_VALUE), _decode_timestamp),
    DecodeRule(GEO_POINT_VALUE, _has(GEO_POINT_VALUE), _decode_geo_point),
    DecodeRule(REFERENCE_VALUE, _has(REFERENCE_VALUE), _decode_reference),
    DecodeRule(MAP_VALUE,       _has_map_fields,       _decode_map),
    DecodeRule(ARRAY_VALUE,     _has(ARRAY_VALUE),     _decode_array),
]


class FirestoreDecoder:
    """Stateless decoder; one instance may be shared across threads."""

    def decode_value(self, wire: Any) -> Any:
        if not isinstance(wire, Mapping):
            LOGGER.debug("Non-mapping wire value: %s", type(wire).__name__)
            return None
        for rule in DECODE_RULES:
            if rule.predicate(wire):
                return rule.handler(wire)
        LOGGER.debug("Unknown wire value shape: keys=%s", sorted(map(str, wire)))
        return None

    def decode_document(self, doc: Union[Mapping[str, Any], FirestoreResponse]) -> Dict[str, Any]:
        if isinstance(doc, FirestoreResponse):
            name, fields = doc.name, doc.fields
        else:
            name, fields = doc.get("name"), doc.get("fields")
        doc_id = get_document_id(name)
        if not isinstance(fields, Mapping):
            if fields is not None:
                LOGGER.debug("Ignoring non-mapping document fields: %s", type(fields).__name__)
            return {"id": doc_id}
        if not fields:
            return {"id": doc_id}
        out = {k: self.decode_value(v) for k, v in fields.items()}
        out["id"] = doc_id     # 같은 이름의 필드보다 우선
        return out


_DEFAULT = FirestoreDecoder()


def decode_value(wire: Any) -> Any:
    """Convert a Firestore wire value to a native value."""
    return _DEFAULT.decode_value(wire)


def decode_document(doc: Union[Mapping[str, Any], FirestoreResponse]) -> Dict[str, Any]:
    """Convert a Firestore document to a dict with an ``id`` member."""
    return _DEFAULT.decode_document(doc)
