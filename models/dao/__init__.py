from dataclasses import dataclass, field

from models.dao.project_dao import ProjectDAO
from models.dao.token_dao import AccessTokenDAO, RefreshTokenDAO, TokenDAO
from models.dao.user_dao import UserDAO


@dataclass
class DAOContainer:
    """All DAOs the request handlers need, built once per application."""

    users: UserDAO = field(default_factory=UserDAO)
    access_tokens: AccessTokenDAO = field(default_factory=AccessTokenDAO)
    refresh_tokens: RefreshTokenDAO = field(default_factory=RefreshTokenDAO)
    projects: ProjectDAO = field(default_factory=ProjectDAO)


__all__ = ["DAOContainer", "UserDAO", "TokenDAO", "AccessTokenDAO", "RefreshTokenDAO", "ProjectDAO"]
