"""Pydantic schemas for cache administration payloads."""

from __future__ import annotations

from app.schemas.base import CamelModel


class CacheNamespaceStats(CamelModel):
    namespace: str
    hits: int
    misses: int
    number_of_keys: int
