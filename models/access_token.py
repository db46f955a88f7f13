from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base
from models.token_base import TokenRecordMixin


class AccessToken(TokenRecordMixin, BaseModel, Base):
    __tablename__ = "access_tokens"

    user = relationship("User", back_populates="access_tokens")
