"""Password hashing and the bearer tokens that carry a Principal."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from gigboard.core.config import get_settings
from gigboard.policies.ownership import Principal

_hasher = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(raw: str) -> str:
    return _hasher.hash(raw)


def verify_password(raw: str, hashed: str) -> bool:
    return _hasher.verify(raw, hashed)


def issue_token(principal: Principal, *, ttl: Optional[timedelta] = None) -> str:
    """Sign the identity a client presents on later requests.

    ``ttl`` defaults to ``jwt_access_token_minutes``; a negative value
    yields a token that is already expired.
    """
    settings = get_settings()
    if ttl is None:
        ttl = timedelta(minutes=settings.jwt_access_token_minutes)
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": principal.user_id,
        "user_id": principal.user_id,
        "name": principal.name,
        "email": principal.email,
        "iat": int(issued.timestamp()),
        "exp": int((issued + ttl).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def read_claims(token: str) -> Dict[str, Any]:
    """Verified claims of ``token``; raises ``JWTError`` when it does not verify."""
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def read_token(token: str) -> Optional[Principal]:
    try:
        claims = read_claims(token)
    except JWTError:
        return None

    user_id = claims.get("user_id") or claims.get("sub")
    if not user_id:
        return None
    return Principal(
        user_id=str(user_id),
        name=str(claims.get("name") or "Unknown"),
        email=claims.get("email"),
    )
