"""
Transaction handle abstraction.

Business logic (workflows, the transaction coordinator) only talks to the
TransactionSession protocol. DBSession adapts a SQLAlchemy ORM session to it;
DAOs reach the native session through `.session`.

A session is used for exactly one request and moves strictly forward:
IDLE -> IN_TRANSACTION -> COMMITTED | ABORTED -> CLOSED.
"""
from __future__ import annotations

import enum
from typing import Any, Protocol

from sqlalchemy.orm import Session as OrmSession


class SessionState(enum.Enum):
    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"
    COMMITTED = "committed"
    ABORTED = "aborted"
    CLOSED = "closed"


class SessionStateError(RuntimeError):
    """Raised on a lifecycle call that is not legal in the current state."""


class TransactionSession(Protocol):
    session: Any
    state: SessionState

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def abort(self) -> None: ...

    def close(self) -> None: ...


class SessionFactory(Protocol):
    def create_session(self) -> TransactionSession: ...


class DBSession:
    """SQLAlchemy-backed TransactionSession."""

    def __init__(self, session: OrmSession):
        self.session = session
        self.state = SessionState.IDLE

    def _require(self, *allowed: SessionState) -> None:
        if self.state not in allowed:
            raise SessionStateError(f"session is {self.state.value}")

    def begin(self) -> None:
        self._require(SessionState.IDLE)
        self.session.begin()
        self.state = SessionState.IN_TRANSACTION

    def commit(self) -> None:
        # a failed commit leaves the state IN_TRANSACTION so the caller can abort
        self._require(SessionState.IN_TRANSACTION)
        self.session.commit()
        self.state = SessionState.COMMITTED

    def abort(self) -> None:
        self._require(SessionState.IN_TRANSACTION)
        try:
            self.session.rollback()
        finally:
            self.state = SessionState.ABORTED

    def close(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        try:
            self.session.close()
        finally:
            self.state = SessionState.CLOSED
