from __future__ import annotations
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Mapping, Optional

from .path import get_document_id

# ── wire 판별 키 (closed union) ─────────────────────────────
STRING_VALUE    = "stringValue"
INTEGER_VALUE   = "integerValue"
DOUBLE_VALUE    = "doubleValue"
BOOLEAN_VALUE   = "booleanValue"
NULL_VALUE      = "nullValue"
TIMESTAMP_VALUE = "timestampValue"
GEO_POINT_VALUE = "geoPointValue"
REFERENCE_VALUE = "referenceValue"
MAP_VALUE       = "mapValue"
ARRAY_VALUE     = "arrayValue"

WIRE_KINDS = (
    STRING_VALUE,
    INTEGER_VALUE,
    DOUBLE_VALUE,
    BOOLEAN_VALUE,
    NULL_VALUE,
    TIMESTAMP_VALUE,
    GEO_POINT_VALUE,
    REFERENCE_VALUE,
    MAP_VALUE,
    ARRAY_VALUE,
)


def wire_kind(value: Any) -> Optional[str]:
    """Return the single discriminator key of *value*, or None.

    None is returned for non-mappings and for mappings carrying zero or
    more than one known discriminator.
    """
    if not isinstance(value, Mapping):
        return None
    kinds = [k for k in WIRE_KINDS if k in value]
    return kinds[0] if len(kinds) == 1 else None


def is_coordinate(v: Any) -> bool:
    return isinstance(v, Real) and not isinstance(v, bool)


# ===== 특수 값 핸들 =====

@dataclass(frozen=True)
class LiteralDocumentReference:
    """A reference carried as its fully-qualified resource name."""
    reference_value: str

    def to_wire(self) -> Dict[str, Any]:
        return {REFERENCE_VALUE: self.reference_value}

    @property
    def document_id(self) -> str:
        return get_document_id(self.reference_value)


@dataclass(frozen=True)
class LiteralGeoPointValue:
    """A latitude/longitude pair in degrees."""
    latitude: float
    longitude: float

    def to_wire(self) -> Dict[str, Any]:
        return {GEO_POINT_VALUE: {"latitude": self.latitude, "longitude": self.longitude}}


@dataclass(frozen=True)
class DocumentReference:
    """Live reference handle bound to a client.

    The client only needs a ``path_util`` attribute whose
    ``get_document_name(path)`` returns the fully-qualified resource name.
    """
    client: Any
    path: str

    def resource_name(self) -> str:
        return self.client.path_util.get_document_name(self.path)


# ===== 문서 =====

@dataclass
class FirestoreDocument:
    fields: Dict[str, Any] = field(default_factory=dict)
    name: Optional[str] = None
    create_time: Optional[str] = None
    update_time: Optional[str] = None

    @classmethod
    def from_native(cls, data: Mapping[str, Any], name: Optional[str] = None) -> "FirestoreDocument":
        from .encoder import encode_document
        return cls(fields=encode_document(data)["fields"], name=name)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.name is not None:
            out["name"] = self.name
        out["fields"] = self.fields
        if self.create_time is not None:
            out["createTime"] = self.create_time
        if self.update_time is not None:
            out["updateTime"] = self.update_time
        return out


@dataclass
class FirestoreResponse:
    name: str
    fields: Optional[Dict[str, Any]] = None
    create_time: Optional[str] = None
    update_time: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "FirestoreResponse":
        return cls(
            name=raw["name"],
            fields=raw.get("fields"),
            create_time=raw.get("createTime"),
            update_time=raw.get("updateTime"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.fields is not None:
            out["fields"] = self.fields
        if self.create_time is not None:
            out["createTime"] = self.create_time
        if self.update_time is not None:
            out["updateTime"] = self.update_time
        return out
