"""fsv-core - Firestore REST value conversion (native ⇄ typed wire values)."""

__version__ = "0.1.0"
__author__ = "YC Math"

# 주요 API export
from .models import (
    WIRE_KINDS,
    wire_kind,
    DocumentReference,
    LiteralDocumentReference,
    LiteralGeoPointValue,
    FirestoreDocument,
    FirestoreResponse,
)
from .encoder import FirestoreEncoder, encode_value, encode_document
from .decoder import FirestoreDecoder, decode_value, decode_document
from .path import PathUtil, InvalidResourceNameError, get_document_id
from .config import FirestoreConfig

__all__ = [
    "WIRE_KINDS",
    "wire_kind",
    "DocumentReference",
    "LiteralDocumentReference",
    "LiteralGeoPointValue",
    "FirestoreDocument",
    "FirestoreResponse",
    "FirestoreEncoder",
    "encode_value",
    "encode_document",
    "FirestoreDecoder",
    "decode_value",
    "decode_document",
    "PathUtil",
    "InvalidResourceNameError",
    "get_document_id",
    "FirestoreConfig",
]
