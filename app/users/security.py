# app/users/security.py

from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.helpers.time import utcnow
from app.users.identity import Role
from config.appconfig import settings


# ============================================================
# ✅ Create Access Token
# ============================================================
def create_access_token(
    actor_id: str,
    role: Role,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed access token carrying (sub, role)."""
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRY)

    to_encode = {"sub": actor_id, "role": Role(role).value, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# ============================================================
# ✅ Decode Token
# ============================================================
def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT token."""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        return payload
    except JWTError:
        return None
