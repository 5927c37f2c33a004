"""Credential Capabilities — password digests and bearer tokens.

Invariants:
    - hash_password/verify_password are the only code that touches bcrypt
    - Tokens carry the user id as `sub` plus `exp`; nothing else
    - verify_token raises AuthenticationError on ANY failure (signature, expiry, subject)

Design Decisions:
    - passlib CryptContext: scheme upgrades without touching callers
    - python-jose for HS256 JWT; secret and lifetime from Settings
    - CryptContext cached per cost factor: tests run with a low bcrypt_rounds
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import get_settings
from app.core.domain_types import UserId
from app.core.errors import AuthenticationError
from app.core.identifiers import parse_identifier

logger = logging.getLogger(__name__)


@lru_cache
def _crypt_context(rounds: int) -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds,
    )


def hash_password(password: str) -> str:
    return _crypt_context(get_settings().bcrypt_rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return _crypt_context(get_settings().bcrypt_rounds).verify(
            plain_password, hashed_password,
        )
    except ValueError:
        # unrecognized digest format
        return False


def issue_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """Sign a bearer token whose only claim besides exp is the user id."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.jwt_expire_days)
    )
    return jwt.encode(
        {"sub": str(user_id), "exp": expire},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> UserId:
    """Return the user id carried by token, or raise AuthenticationError."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except JWTError:
        raise AuthenticationError("Invalid token")
    user_id = parse_identifier(payload.get("sub"))
    if user_id is None:
        logger.warning("Token with malformed subject rejected")
        raise AuthenticationError("Invalid token")
    return UserId(user_id)
