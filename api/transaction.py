"""
Request-scoped transactions.

TransactionCoordinator runs one handler inside one transaction:
create session -> begin -> handler -> commit -> result
and on any failure: abort (errors logged only) -> re-raise the original error.
The session is closed in every case.

The @transactional decorator wires a Flask view to the coordinator. The JSON
response is built only after run() returns, i.e. after the commit succeeded,
so a failed commit can never leak a 2xx response.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, NamedTuple

from flask import current_app, jsonify, request

from models.session import SessionFactory, SessionState, TransactionSession

logger = logging.getLogger(__name__)


class HandlerResult(NamedTuple):
    status_code: int
    payload: Any


Handler = Callable[[TransactionSession, Any], HandlerResult]


class TransactionCoordinator:
    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def run(self, handler: Handler, request_context: Any = None) -> HandlerResult:
        session = self.session_factory.create_session()
        try:
            session.begin()
            result = handler(session, request_context)
            session.commit()
            return result
        except Exception:
            if session.state is SessionState.IN_TRANSACTION:
                try:
                    session.abort()
                except Exception:
                    logger.exception("Error aborting transaction")
            raise
        finally:
            try:
                session.close()
            except Exception:
                logger.exception("Error closing session")


def get_coordinator() -> TransactionCoordinator:
    return current_app.extensions["transaction_coordinator"]


def transactional(status_code: int = 200, schema=None):
    """
    Run the decorated view inside a request transaction.

    The view receives the session as its first argument and returns either a
    payload (sent with `status_code`) or a (payload, status) tuple. With a
    marshmallow `schema`, the JSON body is validated before any session is
    opened and passed to the view as `data`.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if schema is not None:
                kwargs["data"] = schema.load(request.get_json(silent=True) or {})

            def handler(session, request_context):
                rv = fn(session, *args, **kwargs)
                if isinstance(rv, tuple):
                    return HandlerResult(rv[1], rv[0])
                return HandlerResult(status_code, rv)

            result = get_coordinator().run(handler, request)
            return jsonify(result.payload), result.status_code

        return wrapper

    return decorator
