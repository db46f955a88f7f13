from contextlib import contextmanager
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from models.access_token import AccessToken
from models.refresh_token import RefreshToken
from models.token_base import ImmutableFieldError
from models.user import User


@contextmanager
def transaction(storage):
    session = storage.create_session()
    session.begin()
    try:
        yield session
        session.commit()
    except Exception:
        session.abort()
        raise
    finally:
        session.close()


@pytest.fixture(name="user_id")
def user_id_fixture(storage, daos):
    with transaction(storage) as session:
        user = daos.users.create(session, "alice01", "not-a-real-hash")
    return user.id


@pytest.mark.parametrize("dao_name", ["access_tokens", "refresh_tokens"])
def test_create_then_find(storage, daos, clock, user_id, dao_name):
    dao = getattr(daos, dao_name)
    now = clock.now()
    with transaction(storage) as session:
        dao.create(session, user_id, "tok-1", now + timedelta(minutes=15), now)

    with storage.reader() as session:
        record = dao.find_live(session, "tok-1")
        assert record.user_id == user_id
        assert record.is_revoked is False
        assert record.expires_at == now + timedelta(minutes=15)
        assert record.created_at == now
        assert dao.find_live(session, "tok-unknown") is None


def test_revoke_happens_once(storage, daos, clock, user_id):
    dao = daos.refresh_tokens
    now = clock.now()
    with transaction(storage) as session:
        dao.create(session, user_id, "tok-1", now + timedelta(days=7), now)

    later = now + timedelta(minutes=5)
    with transaction(storage) as session:
        assert dao.revoke(session, "tok-1", later) is True
    with transaction(storage) as session:
        assert dao.revoke(session, "tok-1", later + timedelta(minutes=5)) is False
        assert dao.revoke(session, "tok-absent", later) is False

    with storage.reader() as session:
        assert dao.find_live(session, "tok-1") is None
        record = dao.find(session, "tok-1")
        assert record.is_revoked is True
        assert record.updated_at == later
        assert record.expires_at == now + timedelta(days=7)


def test_revocation_rolls_back_with_the_transaction(storage, daos, clock, user_id):
    dao = daos.access_tokens
    now = clock.now()
    with transaction(storage) as session:
        dao.create(session, user_id, "tok-1", now + timedelta(minutes=15), now)

    with pytest.raises(RuntimeError):
        with transaction(storage) as session:
            dao.revoke(session, "tok-1", now)
            raise RuntimeError("handler failed")

    with storage.reader() as session:
        assert dao.find_live(session, "tok-1") is not None


def test_duplicate_token_string_is_rejected(storage, daos, clock, user_id):
    now = clock.now()
    with transaction(storage) as session:
        daos.access_tokens.create(session, user_id, "tok-1", now + timedelta(minutes=15), now)

    with pytest.raises(IntegrityError):
        with transaction(storage) as session:
            daos.access_tokens.create(session, user_id, "tok-1", now + timedelta(minutes=15), now)

    assert storage.count(AccessToken) == 1


def test_token_and_expiry_are_write_once(clock):
    record = RefreshToken(user_id="u-1", token="tok-1", expires_at=clock.now(), is_revoked=False)

    with pytest.raises(ImmutableFieldError):
        record.token = "tok-2"
    with pytest.raises(ImmutableFieldError):
        record.expires_at = clock.now() + timedelta(days=1)

    record.is_revoked = True
    with pytest.raises(ImmutableFieldError):
        record.is_revoked = False


def test_expire_sweep_deletes_only_expired_records(storage, daos, clock, user_id):
    now = clock.now()
    with transaction(storage) as session:
        daos.access_tokens.create(session, user_id, "old-access", now - timedelta(minutes=1), now - timedelta(minutes=16))
        daos.access_tokens.create(session, user_id, "live-access", now + timedelta(minutes=14), now)
        daos.refresh_tokens.create(session, user_id, "old-refresh", now - timedelta(hours=1), now - timedelta(days=7))

    with transaction(storage) as session:
        assert daos.access_tokens.expire_sweep(session, now) == 1
        assert daos.refresh_tokens.expire_sweep(session, now) == 1

    assert storage.count(AccessToken) == 1
    assert storage.count(RefreshToken) == 0


def test_deleting_a_user_cascades_to_tokens(storage, daos, clock, user_id):
    now = clock.now()
    with transaction(storage) as session:
        daos.access_tokens.create(session, user_id, "tok-a", now + timedelta(minutes=15), now)
        daos.refresh_tokens.create(session, user_id, "tok-r", now + timedelta(days=7), now)

    with transaction(storage) as session:
        session.session.delete(session.session.get(User, user_id))

    assert storage.count(AccessToken) == 0
    assert storage.count(RefreshToken) == 0
