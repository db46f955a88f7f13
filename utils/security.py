"""
security helpers:
- Argon2 password hashing via argon2-cffi (PasswordService)
- JWT signing/verification via PyJWT (TokenService)

Access and refresh tokens are signed with different secrets and lifetimes.
Every token carries a random nonce so two tokens for the same user signed in
the same second still differ.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class PasswordService:
    def __init__(self, hasher: PasswordHasher | None = None):
        self._ph = hasher or PasswordHasher()
        # compared against when the user does not exist, so both paths hash
        self._dummy_hash = self._ph.hash(secrets.token_urlsafe(16))

    def hash(self, password: str) -> str:
        """Hash a plaintext password using Argon2
        """
        return self._ph.hash(password)

    def verify(self, password_hash: str | None, password: str) -> bool:
        """Verify a plaintext password using argon2; never raises on mismatch.
        """
        try:
            if password_hash is None:
                self._ph.verify(self._dummy_hash, password)
                return False
            return self._ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False


@dataclass(frozen=True)
class TokenPayload:
    """Domain claims carried by a token, without signing metadata."""

    user_id: str
    username: str

    def to_claims(self) -> Dict[str, Any]:
        return {"sub": self.user_id, "username": self.username}

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "TokenPayload":
        return cls(user_id=str(claims["sub"]), username=str(claims["username"]))


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenVerificationError(Exception):
    """Token could not be accepted."""


class TokenExpiredError(TokenVerificationError):
    pass


class TokenInvalidError(TokenVerificationError):
    pass


class TokenService:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
        issuer: str | None = None,
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens need distinct secrets")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm
        self.issuer = issuer

    @classmethod
    def from_settings(cls, settings) -> "TokenService":
        return cls(
            access_secret=settings.access_secret,
            refresh_secret=settings.refresh_secret,
            access_ttl=settings.access_ttl,
            refresh_ttl=settings.refresh_ttl,
            algorithm=settings.algorithm,
            issuer=settings.issuer,
        )

    def sign(
        self,
        payload: TokenPayload,
        secret: str,
        ttl: timedelta,
        now: datetime,
        token_type: str = ACCESS,
    ) -> str:
        claims = payload.to_claims()
        claims.update(
            {
                "type": token_type,
                "nonce": secrets.token_urlsafe(16),
                "iat": int(now.timestamp()),
                "exp": int((now + ttl).timestamp()),
            }
        )
        if self.issuer:
            claims["iss"] = self.issuer
        return jwt.encode(claims, secret, algorithm=self.algorithm)

    def verify(self, token: str, secret: str, now: datetime, token_type: str = ACCESS) -> TokenPayload:
        """
        Check signature, type and expiry (against `now`, not the wall clock).
        Raises TokenExpiredError or TokenInvalidError.
        """
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": False, "verify_iat": False, "require": ["exp", "sub"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected %s token: %s (claims=%s)", token_type, exc, self._unverified_claims(token))
            raise TokenInvalidError(f"Invalid token: {exc}")

        if claims.get("type") != token_type:
            raise TokenInvalidError("Wrong token type")
        if claims["exp"] <= int(now.timestamp()):
            raise TokenExpiredError("Token expired")
        try:
            return TokenPayload.from_claims(claims)
        except KeyError as exc:
            raise TokenInvalidError(f"Missing claim: {exc}")

    def issue_access(self, payload: TokenPayload, now: datetime) -> str:
        return self.sign(payload, self.access_secret, self.access_ttl, now, ACCESS)

    def issue_refresh(self, payload: TokenPayload, now: datetime) -> str:
        return self.sign(payload, self.refresh_secret, self.refresh_ttl, now, REFRESH)

    def issue_pair(self, payload: TokenPayload, now: datetime) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(payload, now),
            refresh_token=self.issue_refresh(payload, now),
        )

    def verify_access(self, token: str, now: datetime) -> TokenPayload:
        return self.verify(token, self.access_secret, now, ACCESS)

    def verify_refresh(self, token: str, now: datetime) -> TokenPayload:
        return self.verify(token, self.refresh_secret, now, REFRESH)

    def access_expiry(self, now: datetime) -> datetime:
        return now + self.access_ttl

    def refresh_expiry(self, now: datetime) -> datetime:
        return now + self.refresh_ttl

    @staticmethod
    def _unverified_claims(token: str) -> Dict[str, Any] | None:
        # diagnostics only; never trust these claims
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None
