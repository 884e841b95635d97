from datetime import datetime, timedelta, timezone

import jwt

from app.core.config import get_jwt_secret, get_jwt_algorithm

TOKEN_EXPIRE_MINUTES = 60 * 12


def create_token(data: dict, expires_minutes: int = TOKEN_EXPIRE_MINUTES) -> str:
    payload = dict(data)
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode(payload, get_jwt_secret(), algorithm=get_jwt_algorithm())


def decode_token(token: str) -> dict | None:
    """Payload of a valid, unexpired token; None otherwise."""
    try:
        return jwt.decode(token, get_jwt_secret(), algorithms=[get_jwt_algorithm()])
    except jwt.PyJWTError:
        return None
