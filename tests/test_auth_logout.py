from datetime import timedelta

from api.transaction import HandlerResult
from models.dao.token_dao import RefreshTokenDAO
from tests.helpers import API, bearer, logout, refresh, registered_tokens
from utils.security import TokenPayload


def test_logout_revokes_both_tokens(client, storage, daos):
    tokens = registered_tokens(client)

    response = logout(client, tokens["accessToken"], tokens["refreshToken"])

    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "Logout successful"
    assert body["loggedOutAt"]
    with storage.reader() as session:
        assert daos.access_tokens.find_live(session, tokens["accessToken"]) is None
        assert daos.refresh_tokens.find_live(session, tokens["refreshToken"]) is None


def test_logout_twice_succeeds_both_times(client):
    tokens = registered_tokens(client)

    first = logout(client, tokens["accessToken"], tokens["refreshToken"])
    second = logout(client, tokens["accessToken"], tokens["refreshToken"])

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.get_json()["message"] == second.get_json()["message"]


def test_logged_out_tokens_stop_working(client):
    tokens = registered_tokens(client)
    logout(client, tokens["accessToken"], tokens["refreshToken"])

    projects = client.get(f"{API}/projects", headers=bearer(tokens["accessToken"]))
    rotated = refresh(client, tokens["refreshToken"])

    assert projects.status_code == 401
    assert rotated.status_code == 401


def test_logout_with_tokens_of_two_users(client):
    alice = registered_tokens(client, "alice01")
    bob = registered_tokens(client, "bob0001")

    response = logout(client, alice["accessToken"], bob["refreshToken"])

    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid tokens"


def test_logout_rejects_a_record_owned_by_someone_else(client, app, clock):
    alice = registered_tokens(client, "alice01")
    bob = registered_tokens(client, "bob0001")

    # an access token signed for alice but stored against bob
    forged = app.extensions["token_service"].issue_access(
        TokenPayload(user_id=alice["user"]["id"], username="alice01"), clock.now()
    )

    def store(session, request_context):
        app.extensions["daos"].access_tokens.create(
            session, bob["user"]["id"], forged, clock.now() + timedelta(minutes=15), clock.now()
        )
        return HandlerResult(201, None)

    app.extensions["transaction_coordinator"].run(store)

    response = logout(client, forged, alice["refreshToken"])

    assert response.status_code == 401
    assert response.get_json()["message"] == "Token mismatch - tokens belong to different user"


def test_logout_with_unknown_but_valid_tokens_is_a_no_op(client, app, clock, storage):
    alice = registered_tokens(client, "alice01")
    payload = TokenPayload(user_id=alice["user"]["id"], username="alice01")
    pair = app.extensions["token_service"].issue_pair(payload, clock.now())
    before = storage.count()

    response = logout(client, pair.access_token, pair.refresh_token)

    assert response.status_code == 200
    assert storage.count() == before


def test_logout_with_expired_access_token(client, clock, app):
    tokens = registered_tokens(client)
    clock.advance(app.extensions["auth_settings"].access_ttl + timedelta(seconds=1))

    response = logout(client, tokens["accessToken"], tokens["refreshToken"])

    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid or expired access token"


def test_logout_requires_both_tokens(client):
    tokens = registered_tokens(client)

    response = client.post(f"{API}/auth/logout", json={"accessToken": tokens["accessToken"]})

    assert response.status_code == 400
    assert "refreshToken" in response.get_json()["details"]


def test_failed_revocation_rolls_back_the_whole_logout(client, storage, daos, monkeypatch):
    tokens = registered_tokens(client)
    # the access record is revoked for real first, then the refresh revoke reports nothing done
    monkeypatch.setattr(RefreshTokenDAO, "revoke", lambda self, session, token, now: False)

    response = logout(client, tokens["accessToken"], tokens["refreshToken"])

    assert response.status_code == 500
    assert response.get_json()["message"] == "Failed to revoke tokens"
    with storage.reader() as session:
        assert daos.access_tokens.find_live(session, tokens["accessToken"]) is not None
        assert daos.refresh_tokens.find_live(session, tokens["refreshToken"]) is not None
