"""
Columns and guards shared by access-token and refresh-token records.

Fields:
- user_id (String(36)) - FK to users.id
- token (unique, immutable once set)
- expires_at (immutable once set)
- is_revoked (False -> True, exactly once)
- created_at, updated_at (updated_at only moves on revocation)
"""
from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.orm import declared_attr, validates

from models.base_model import UTCDateTime


class ImmutableFieldError(ValueError):
    """Raised when code tries to rewrite a write-once token column."""


class TokenRecordMixin:
    token = Column(String(1024), nullable=False, unique=True, index=True)
    expires_at = Column(UTCDateTime, nullable=False, index=True)
    is_revoked = Column(Boolean, default=False, nullable=False, index=True)

    @declared_attr
    def user_id(cls):
        return Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    @validates("token", "expires_at")
    def _write_once(self, key, value):
        current = getattr(self, key)
        if current is not None and current != value:
            raise ImmutableFieldError(f"{key} cannot change once set")
        return value

    @validates("is_revoked")
    def _monotonic_revocation(self, key, value):
        if self.is_revoked and not value:
            raise ImmutableFieldError("a revoked token cannot be reinstated")
        return value

    def __repr__(self):
        return f"<{self.__class__.__name__} user={self.user_id} revoked={self.is_revoked}>"
