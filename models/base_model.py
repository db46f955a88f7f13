#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixins for the Token Auth API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps
- UTCDateTime: naive UTC in the database, timezone-aware UTC in Python

Notes:
- Persistence goes through the DAOs and an explicit session; models never commit.
- For SQLite, func.now() maps to CURRENT_TIMESTAMP (UTC).
"""

from __future__ import annotations

from datetime import timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """Store datetimes as naive UTC, hand them back as aware UTC.

    SQLite has no timezone support, so every value is normalised on the way in.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at and updated_at.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(UTCDateTime, server_default=func.now(), nullable=False)
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        created_at/updated_at fall back to DB defaults unless passed explicitly.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if user passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

