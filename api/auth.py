"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/token/refresh
- POST /auth/logout

Every route runs in one request transaction (@transactional): tokens are
persisted and revoked atomically with the rest of the request, and the
response goes out only after the commit.
"""
from __future__ import annotations

from flask import Blueprint, current_app

from api.transaction import transactional
from models.schemas.auth import (
    AuthResponseSchema,
    LogoutResponseSchema,
    LogoutSchema,
    RefreshResponseSchema,
    RefreshTokenSchema,
)
from models.schemas.user import LoginSchema, RegisterSchema

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
logout_schema = LogoutSchema()
auth_response_schema = AuthResponseSchema()
refresh_response_schema = RefreshResponseSchema()
logout_response_schema = LogoutResponseSchema()


def _workflows():
    return current_app.extensions["auth_workflows"]


def _now():
    return current_app.extensions["clock"].now()


@bp.post("/register")
@transactional(status_code=201, schema=register_schema)
def register(session, data):
    """
    Register a new user and log them in.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, password]
          properties:
            username: { type: string, example: alice01 }
            password: { type: string, example: Str0ngPass1 }
    responses:
      201:
        description: Created (returns tokens and user)
      400:
        description: Validation error
      409:
        description: Username already exists
    """
    result = _workflows().register(session, data["username"], data["password"], _now())
    return auth_response_schema.dump(result)


@bp.post("/login")
@transactional(schema=login_schema)
def login(session, data):
    """
    Login: return accessToken, refreshToken and user
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [username, password]
           properties:
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
    """
    result = _workflows().login(session, data["username"], data["password"], _now())
    return auth_response_schema.dump(result)


@bp.post("/token/refresh")
@transactional(schema=refresh_schema)
def refresh(session, data):
    """
    Trade a refresh token for a new token pair (the old one is revoked).
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns new tokens)
      401:
        description: Invalid, expired or revoked refresh token
      404:
        description: User not found
    """
    result = _workflows().refresh(session, data["refresh_token"], _now())
    return refresh_response_schema.dump(result)


@bp.post("/logout")
@transactional(schema=logout_schema)
def logout(session, data):
    """
    Logout: revokes both tokens. Repeating the call succeeds again.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [accessToken, refreshToken]
           properties:
             accessToken: { type: string }
             refreshToken: { type: string }
    responses:
      200:
        description: Logout successful
      401:
        description: Invalid or mismatched tokens
    """
    result = _workflows().logout(session, data["access_token"], data["refresh_token"], _now())
    return logout_response_schema.dump(result)
