import uuid

import bcrypt
from jose import JWTError, jwt

from ptcoach.config import settings


def hash_password(password: str) -> str:
    # bcrypt works on bytes and returns bytes; the hash is stored as text
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def decode_access_token(token: str) -> uuid.UUID | None:
    """Return the user id carried by a bearer token, or None when it is unusable."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    subject = payload.get("sub")
    token_type = payload.get("type")
    if subject is None or token_type not in (None, "access"):
        return None
    try:
        return uuid.UUID(str(subject))
    except ValueError:
        return None
