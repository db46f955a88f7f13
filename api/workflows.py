"""
Authentication workflows: Register, Login, Refresh, Logout.

Each method runs inside the session handed over by the transaction coordinator
and raises typed AppErrors; it never commits or rolls back itself.
"""
from __future__ import annotations

import logging
from datetime import datetime

from api.errors import Conflict, Internal, NotFound, Unauthorized
from models.dao import DAOContainer
from utils.security import PasswordService, TokenPayload, TokenService, TokenVerificationError

logger = logging.getLogger(__name__)

# One message for unknown user and wrong password
INVALID_CREDENTIALS = "Invalid credentials"


class AuthWorkflows:
    def __init__(self, daos: DAOContainer, tokens: TokenService, passwords: PasswordService):
        self.daos = daos
        self.tokens = tokens
        self.passwords = passwords

    def register(self, session, username: str, password: str, now: datetime) -> dict:
        password_hash = self.passwords.hash(password)
        user = self.daos.users.create(session, username, password_hash)
        if user is None:
            raise Conflict("Username already exists")
        logger.info("Registered user %s", user.id)
        return self.issue_token_pair(session, user, now)

    def login(self, session, username: str, password: str, now: datetime) -> dict:
        user = self.daos.users.find_by_username_with_password(session, username)
        password_hash = user.password_hash if user else None
        # verify runs even for unknown users so both failures cost the same
        if not self.passwords.verify(password_hash, password):
            raise Unauthorized(INVALID_CREDENTIALS)
        return self.issue_token_pair(session, user, now)

    def issue_token_pair(self, session, user, now: datetime) -> dict:
        """Sign a fresh pair and store both records, access first."""
        payload = TokenPayload(user_id=user.id, username=user.username)
        pair = self.tokens.issue_pair(payload, now)

        self.daos.access_tokens.create(
            session, user.id, pair.access_token, self.tokens.access_expiry(now), now
        )
        self.daos.refresh_tokens.create(
            session, user.id, pair.refresh_token, self.tokens.refresh_expiry(now), now
        )

        return {
            "access_token": pair.access_token,
            "refresh_token": pair.refresh_token,
            "user": {"id": user.id, "username": user.username},
        }

    def refresh(self, session, refresh_token: str, now: datetime) -> dict:
        try:
            claimed = self.tokens.verify_refresh(refresh_token, now)
        except TokenVerificationError:
            raise Unauthorized("Invalid or expired refresh token")

        stored = self.daos.refresh_tokens.find_live(session, refresh_token)
        if stored is None or stored.user_id != claimed.user_id:
            raise Unauthorized("Invalid or revoked refresh token")

        # the stored expiry wins over the one inside the token
        if stored.expires_at < now:
            raise Unauthorized("Refresh token has expired")

        user = self.daos.users.find_by_id(session, stored.user_id)
        if user is None:
            raise NotFound("User not found")

        if not self.daos.refresh_tokens.revoke(session, refresh_token, now):
            # a concurrent request rotated this token first
            raise Unauthorized("Invalid or revoked refresh token")

        issued = self.issue_token_pair(session, user, now)
        return {"access_token": issued["access_token"], "refresh_token": issued["refresh_token"]}

    def logout(self, session, access_token: str, refresh_token: str, now: datetime) -> dict:
        try:
            access_claims = self.tokens.verify_access(access_token, now)
        except TokenVerificationError:
            raise Unauthorized("Invalid or expired access token")
        try:
            refresh_claims = self.tokens.verify_refresh(refresh_token, now)
        except TokenVerificationError:
            raise Unauthorized("Invalid or expired refresh token")

        if access_claims.user_id != refresh_claims.user_id:
            raise Unauthorized("Invalid tokens")

        user_id = access_claims.user_id
        self._revoke_if_live(session, self.daos.access_tokens, access_token, user_id, now)
        self._revoke_if_live(session, self.daos.refresh_tokens, refresh_token, user_id, now)

        return {"message": "Logout successful", "logged_out_at": now}

    @staticmethod
    def _revoke_if_live(session, dao, token: str, expected_user_id: str, now: datetime) -> None:
        stored = dao.find(session, token)
        if stored is None:
            return
        if stored.user_id != expected_user_id:
            raise Unauthorized("Token mismatch - tokens belong to different user")
        if not stored.is_revoked and not dao.revoke(session, token, now):
            raise Internal("Failed to revoke tokens")
