"""Custom column types."""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class ObjectIdType(TypeDecorator):
    """Store ``bson.ObjectId`` values as their 24-character hex form."""

    impl = String(24)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        return str(ObjectId(value)) if isinstance(value, str) else str(value)

    def process_result_value(self, value: Any, dialect: Any) -> ObjectId | None:
        if value is None:
            return None
        return ObjectId(value)
