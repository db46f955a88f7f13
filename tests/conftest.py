from datetime import datetime, timezone

import pytest

from api import create_app
from utils.time_utils import FrozenClock


@pytest.fixture(name="app")
def app_fixture():
    """Fresh app per test; the testing config uses in-memory SQLite (StaticPool),
    so every app starts from an empty database."""
    app = create_app("testing")
    yield app
    storage = app.extensions["db_storage"]
    storage.drop_all()
    storage.dispose()


@pytest.fixture(name="clock")
def clock_fixture(app):
    """Controllable request clock, injected in place of the wall clock."""
    clock = FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))
    app.extensions["clock"] = clock
    return clock


@pytest.fixture(name="client")
def client_fixture(app, clock):
    with app.test_client() as client:
        yield client


@pytest.fixture(name="storage")
def storage_fixture(app):
    return app.extensions["db_storage"]


@pytest.fixture(name="daos")
def daos_fixture(app):
    return app.extensions["daos"]
