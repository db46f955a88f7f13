import pytest

from models.session import SessionState, SessionStateError
from models.user import User


def test_lifecycle_commit_path(storage):
    session = storage.create_session()
    assert session.state is SessionState.IDLE

    session.begin()
    assert session.state is SessionState.IN_TRANSACTION
    session.session.add(User(username="alice01", password_hash="x"))
    session.commit()
    assert session.state is SessionState.COMMITTED
    session.close()
    assert session.state is SessionState.CLOSED

    assert storage.count(User) == 1


def test_lifecycle_abort_path_discards_writes(storage):
    session = storage.create_session()
    session.begin()
    session.session.add(User(username="alice01", password_hash="x"))
    session.session.flush()
    session.abort()
    session.close()

    assert session.state is SessionState.CLOSED
    assert storage.count(User) == 0


@pytest.mark.parametrize("call", ["commit", "abort"])
def test_commit_and_abort_need_a_transaction(storage, call):
    session = storage.create_session()

    with pytest.raises(SessionStateError):
        getattr(session, call)()


def test_session_is_not_reusable(storage):
    session = storage.create_session()
    session.begin()
    session.commit()

    with pytest.raises(SessionStateError):
        session.begin()
    with pytest.raises(SessionStateError):
        session.abort()

    session.close()
    session.close()
    with pytest.raises(SessionStateError):
        session.begin()


def test_factory_hands_out_distinct_sessions(storage):
    first = storage.create_session()
    second = storage.create_session()

    assert first is not second
    assert first.session is not second.session
    first.close()
    second.close()
