"""
Helpers for classifying storage errors raised by SQLAlchemy drivers.

Uniqueness violations become Conflict (409) and write-write conflicts between
concurrent transactions become Locked (423); everything else is left alone.
"""
from sqlalchemy.exc import DBAPIError, IntegrityError

# PostgreSQL SQLSTATEs for serialization failure, deadlock and lock timeout
WRITE_CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}
UNIQUE_VIOLATION_SQLSTATE = "23505"


def _sqlstate(err):
    orig = getattr(err, "orig", None)
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_unique_violation(err, *names) -> bool:
    """True if err is a uniqueness violation, optionally on one of the given
    constraint or column names (e.g. "uq_users_username", "users.username")."""
    if not isinstance(err, IntegrityError):
        return False
    message = str(getattr(err, "orig", err)).lower()
    unique = (
        _sqlstate(err) == UNIQUE_VIOLATION_SQLSTATE
        or "unique constraint" in message
        or "unique violation" in message
        or "duplicate key" in message
    )
    if not unique:
        return False
    if not names:
        return True
    return any(name.lower() in message for name in names)


def is_write_conflict(err) -> bool:
    if not isinstance(err, DBAPIError) or isinstance(err, IntegrityError):
        return False
    if _sqlstate(err) in WRITE_CONFLICT_SQLSTATES:
        return True
    message = str(getattr(err, "orig", err)).lower()
    return "database is locked" in message or "deadlock" in message
