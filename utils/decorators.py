from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from api.errors import Unauthorized
from utils.security import TokenVerificationError


def jwt_required():
    """
    Require a live access token in the Authorization header.

    The signature and expiry are checked first, then the credential store, so a
    token revoked by logout stops working right away.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                raise Unauthorized("Access token required")
            token = auth.split(" ", 1)[1].strip()

            ext = current_app.extensions
            now = ext["clock"].now()
            try:
                payload = ext["token_service"].verify_access(token, now)
            except TokenVerificationError:
                raise Unauthorized("Invalid or expired access token")

            with ext["db_storage"].reader() as session:
                stored = ext["daos"].access_tokens.find_live(session, token)
            if stored is None or stored.user_id != payload.user_id:
                raise Unauthorized("Invalid or revoked access token")

            g.current_user = payload
            return fn(*args, **kwargs)

        return wrapper

    return decorator
