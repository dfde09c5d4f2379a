"""Bearer token handling for the tracker API.

Tokens are HS256 JWTs carrying a ``userId`` claim. The holder must still be
an active user when the token is presented.
"""

import datetime
import logging

import jwt
from fastapi import Request

from artifacts.errors import UnauthorizedError
from web import config

logger = logging.getLogger(__name__)


def create_access_token(user: dict, secret: str, ttl_hours: int = None) -> str:
    ttl = config.TOKEN_TTL_HOURS if ttl_hours is None else ttl_hours
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {
        "userId": user["id"],
        "role": user.get("role", "user"),
        "iat": now,
        "exp": now + datetime.timedelta(hours=ttl),
    }
    return jwt.encode(payload, secret, algorithm=config.JWT_ALGORITHM)


def extract_token(request: Request, allow_query: bool = False):
    """Token from ``?token=`` (when allowed, takes precedence) or the Bearer header."""
    if allow_query:
        token = request.query_params.get("token")
        if token:
            return token
    header = request.headers.get("authorization") or ""
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def verify_token(token: str, records, secret: str) -> dict:
    """Decode the token and return the active user it names.

    Raises:
        UnauthorizedError: missing, malformed, expired or for an unknown/inactive user.
    """
    if not token:
        raise UnauthorizedError("No access token supplied")
    try:
        payload = jwt.decode(token, secret, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Access token expired", public_message="Invalid or expired token") from e
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError(f"Invalid access token: {e}", public_message="Invalid or expired token") from e

    user = records.get_user(payload.get("userId"))
    if user is None or not user.get("active", True):
        raise UnauthorizedError(
            f"Token user {payload.get('userId')} missing or inactive",
            public_message="Invalid or expired token",
        )
    return user


def current_user(request: Request, allow_query: bool = False) -> dict:
    state = request.app.state
    token = extract_token(request, allow_query=allow_query)
    return verify_token(token, state.records, state.jwt_secret)
