from .base import BaseDocument, PyObjectId, parse_object_id, utcnow
from .references import PrincipalKind, PrincipalRef, require_author

__all__ = [
    "BaseDocument",
    "PyObjectId",
    "parse_object_id",
    "utcnow",
    "PrincipalKind",
    "PrincipalRef",
    "require_author",
]
