from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from app.config import settings


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Bearer token for the session context of ``user_id``; roles are looked up per request."""
    now = datetime.utcnow()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id carried by ``token``, or None when it is invalid or expired."""
    try:
        claims = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        return None
    return claims.get("sub")
