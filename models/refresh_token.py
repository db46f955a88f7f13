"""
RefreshToken model: every refresh token ever issued, so refresh tokens can be
rotated (single use) and revoked on logout.
"""
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base
from models.token_base import TokenRecordMixin


class RefreshToken(TokenRecordMixin, BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user = relationship("User", back_populates="refresh_tokens")
