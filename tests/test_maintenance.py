from datetime import timedelta

from models.access_token import AccessToken
from models.refresh_token import RefreshToken
from tests.helpers import registered_tokens


def test_purge_tokens_before_cutoff(app, client, clock, storage):
    registered_tokens(client)
    cutoff = clock.now() + app.extensions["auth_settings"].access_ttl + timedelta(seconds=1)

    result = app.test_cli_runner().invoke(args=["purge-tokens", "--before", cutoff.isoformat()])

    assert result.exit_code == 0, result.output
    assert "Deleted 1 access token(s) and 0 refresh token(s)" in result.output
    assert storage.count(AccessToken) == 0
    assert storage.count(RefreshToken) == 1


def test_purge_tokens_defaults_to_now(app, client, storage):
    registered_tokens(client)

    result = app.test_cli_runner().invoke(args=["purge-tokens"])

    assert result.exit_code == 0, result.output
    assert "Deleted 0 access token(s) and 0 refresh token(s)" in result.output
    assert storage.count(AccessToken) == 1


def test_purge_tokens_naive_cutoff_is_utc(app, client, clock, storage):
    registered_tokens(client)
    naive = (clock.now() + timedelta(days=8)).replace(tzinfo=None)

    result = app.test_cli_runner().invoke(args=["purge-tokens", "--before", naive.isoformat()])

    assert result.exit_code == 0, result.output
    assert storage.count() == 1  # only the user row is left


def test_purge_tokens_rejects_bad_dates(app):
    result = app.test_cli_runner().invoke(args=["purge-tokens", "--before", "yesterday"])

    assert result.exit_code != 0
    assert "ISO-8601" in result.output
