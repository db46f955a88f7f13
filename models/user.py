from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, UniqueConstraint
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", name="uq_users_username"),)

    username = Column(String(50), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    access_tokens = relationship("AccessToken", back_populates="user", passive_deletes=True)
    refresh_tokens = relationship("RefreshToken", back_populates="user", passive_deletes=True)
    projects = relationship("Project", back_populates="user", passive_deletes=True)
