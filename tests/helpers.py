"""Shared request helpers for API tests."""

API = "/api/v1"
DEFAULT_PASSWORD = "Str0ngPass1"


def register(client, username="alice01", password=DEFAULT_PASSWORD):
    return client.post(f"{API}/auth/register", json={"username": username, "password": password})


def login(client, username="alice01", password=DEFAULT_PASSWORD):
    return client.post(f"{API}/auth/login", json={"username": username, "password": password})


def refresh(client, refresh_token):
    return client.post(f"{API}/auth/token/refresh", json={"refreshToken": refresh_token})


def logout(client, access_token, refresh_token):
    return client.post(
        f"{API}/auth/logout",
        json={"accessToken": access_token, "refreshToken": refresh_token},
    )


def bearer(access_token):
    return {"Authorization": f"Bearer {access_token}"}


def registered_tokens(client, username="alice01"):
    response = register(client, username)
    assert response.status_code == 201, response.get_json()
    return response.get_json()
