"""
Credential store: access-token and refresh-token records.

Both stores share one contract:
- create()       single-row insert, flushed so storage errors surface here
- find_live()    only non-revoked records
- find()         any record, revoked or not
- revoke()       conditional update; False when absent or already revoked
- expire_sweep() maintenance delete of records expiring before a cutoff

Once written, token and expires_at never change. Only is_revoked and
updated_at move, and only once.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, update

from models.access_token import AccessToken
from models.refresh_token import RefreshToken


class TokenDAO:
    model = None

    def create(self, session, user_id: str, token: str, expires_at: datetime, now: datetime):
        record = self.model(
            user_id=user_id,
            token=token,
            expires_at=expires_at,
            is_revoked=False,
            created_at=now,
            updated_at=now,
        )
        session.session.add(record)
        session.session.flush()
        return record

    def find_live(self, session, token: str) -> Optional[object]:
        return (
            session.session.query(self.model)
            .filter(self.model.token == token, self.model.is_revoked.is_(False))
            .first()
        )

    def find(self, session, token: str) -> Optional[object]:
        return session.session.query(self.model).filter(self.model.token == token).first()

    def revoke(self, session, token: str, now: datetime) -> bool:
        result = session.session.execute(
            update(self.model)
            .where(self.model.token == token, self.model.is_revoked.is_(False))
            .values(is_revoked=True, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    def expire_sweep(self, session, cutoff: datetime) -> int:
        result = session.session.execute(
            delete(self.model)
            .where(self.model.expires_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class AccessTokenDAO(TokenDAO):
    model = AccessToken


class RefreshTokenDAO(TokenDAO):
    model = RefreshToken
