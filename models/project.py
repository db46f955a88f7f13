from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class Project(BaseModel, Base):
    __tablename__ = "projects"
    # project names are unique per owner
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_projects_user_name"),)

    name = Column(String(100), nullable=False)
    git_url = Column(String(500), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="projects")
