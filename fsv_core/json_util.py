from typing import Any

import orjson

from .models import LiteralDocumentReference, LiteralGeoPointValue


def _default(o: Any):
    if isinstance(o, (LiteralDocumentReference, LiteralGeoPointValue)):
        return o.to_wire()
    raise TypeError(f"Type is not JSON serializable: {type(o).__name__}")


def dumps(o: Any) -> str:
    return orjson.dumps(
        o,
        default=_default,
        option=orjson.OPT_NON_STR_KEYS | orjson.OPT_SERIALIZE_NUMPY | orjson.OPT_PASSTHROUGH_DATACLASS,
    ).decode()


def loads(s: Any) -> Any:
    return orjson.loads(s)
