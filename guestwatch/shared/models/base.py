from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, Field
from pydantic_core import core_schema


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PyObjectId(ObjectId):
    """ObjectId usable as a pydantic field; serialized as a hex string in JSON."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls.validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return {"type": "string", "pattern": "^[0-9a-f]{24}$"}

    @classmethod
    def validate(cls, v: Any) -> ObjectId:
        if isinstance(v, ObjectId):
            return v
        if not ObjectId.is_valid(v):
            raise ValueError("Invalid objectid")
        return ObjectId(v)


def parse_object_id(value: Any) -> ObjectId:
    """Parse a path/query id, raising the domain 400 error on garbage."""
    from ..exceptions import InvalidReferenceError

    try:
        return PyObjectId.validate(value)
    except (ValueError, TypeError):
        raise InvalidReferenceError(value)


class BaseDocument(BaseModel):
    id: PyObjectId = Field(default_factory=ObjectId, alias="_id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }

    def to_mongo(self) -> dict:
        """Document as stored: ``_id`` key, native ObjectId and datetime values."""
        return self.model_dump(by_alias=True)

