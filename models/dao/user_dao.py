from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import defer

from models.db_errors import is_unique_violation
from models.user import User


class UserDAO:
    def create(self, session, username: str, password_hash: str) -> Optional[User]:
        """Insert a user inside the active transaction.

        Returns None when the username is already taken; any other storage
        error propagates.
        """
        user = User(username=username, password_hash=password_hash)
        session.session.add(user)
        try:
            session.session.flush()
        except IntegrityError as err:
            if is_unique_violation(err, "uq_users_username", "users.username"):
                return None
            raise
        return user

    def find_by_id(self, session, user_id: str) -> Optional[User]:
        return (
            session.session.query(User)
            .options(defer(User.password_hash))
            .filter(User.id == user_id)
            .first()
        )

    def find_by_username_with_password(self, session, username: str) -> Optional[User]:
        return session.session.query(User).filter(User.username == username).first()
