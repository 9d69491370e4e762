"""Pydantic models for data validation and serialization."""

from spotboard.data.models.token import (
    CURATED_DEFAULTS,
    CURATED_FIELDS,
    StartPxEntry,
    TokenRecord,
    TokenSyncResult,
)

__all__ = [
    "CURATED_DEFAULTS",
    "CURATED_FIELDS",
    "StartPxEntry",
    "TokenRecord",
    "TokenSyncResult",
]
