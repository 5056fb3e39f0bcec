from datetime import datetime, timedelta, timezone

import jwt

from agenda.core import config


def create_access_token(subject: str, expires_minutes: int | None = None, claims: dict | None = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    payload = dict(claims or {})
    payload.update({"sub": subject, "exp": expire, "iat": now})
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
