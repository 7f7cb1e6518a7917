from dataclasses import dataclass
from datetime import datetime, timedelta

from jose import JWTError, jwt

from .. import config
from .error_handlers import InvalidToken

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 24


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str


def create_access_token(user_id: int, role: str, *, issued_at: datetime | None = None) -> str:
    iat = issued_at or datetime.utcnow()
    to_encode = {
        "sub": str(user_id),
        "role": role,
        "iat": iat,
        "exp": iat + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify a token and return its claims.

    Raises InvalidToken for a bad signature, an expired token or a malformed
    payload, so callers handle every rejection the same way.
    """
    if not token or not isinstance(token, str):
        raise InvalidToken()

    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError as e:
        raise InvalidToken() from e

    role = payload.get("role")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError) as e:
        raise InvalidToken() from e
    if not isinstance(role, str) or not role:
        raise InvalidToken()

    return TokenClaims(user_id=user_id, role=role)
