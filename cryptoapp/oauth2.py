"""
Bearer tokens: issuing, checking, and the dependency guarding protected routes.

Tokens are stateless HS256 JWTs carrying the user id and an expiry. There is
no server-side revocation: logging out means the client forgets its token.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from jose import JWTError, jwt

from cryptoapp.core.config import Settings, get_settings
from cryptoapp.core.database import is_row_id
from cryptoapp.core.errors import Unauthorized

logger = logging.getLogger(__name__)


def _settings(request: Optional[Request] = None) -> Settings:
    if request is not None and hasattr(request.app.state, "settings"):
        return request.app.state.settings
    return get_settings()


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or get_settings()
    now = now or datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = dict(data)
    to_encode.update({"iat": int(now.timestamp()), "exp": int((now + expires_delta).timestamp())})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.ALGORITHM)


def verify_access_token(
    token: Optional[str],
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> int:
    """
    Return the user id carried by `token`.

    Raises Unauthorized when the token is missing, malformed, signed with
    another key, has no user id, or is expired at `now`.
    """
    if not token:
        raise Unauthorized("No token, authorization denied")

    settings = settings or get_settings()
    now = now or datetime.now(timezone.utc)

    try:
        # Expiry is checked below against `now`, not the wall clock
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError:
        raise Unauthorized("Token is not valid")

    exp = payload.get("exp")
    if not isinstance(exp, (int, float)) or now.timestamp() >= exp:
        raise Unauthorized("Token has expired")

    try:
        user_id = int(payload["user_id"])
    except (KeyError, TypeError, ValueError):
        raise Unauthorized("Token is not valid")
    if not is_row_id(user_id):
        raise Unauthorized("Token is not valid")
    return user_id


def _token_from_headers(request: Request, header_name: str) -> Optional[str]:
    token = request.headers.get(header_name)
    if token:
        return token.strip()

    # Also accept the standard scheme
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_current_user_id(request: Request) -> int:
    """Auth gateway. Route bodies only run when this returns."""
    settings = _settings(request)
    token = _token_from_headers(request, settings.AUTH_HEADER_NAME)

    try:
        user_id = verify_access_token(token, settings=settings)
    except Unauthorized as exc:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        raise

    request.state.user_id = user_id
    return user_id
