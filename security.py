"""
Credentials and sessions

Passwords are bcrypt hashed through passlib. A session is a signed HS256 JWT
carrying the user's id, email, role and name with an absolute expiry; it is
never stored server side. The token travels in an HTTP-only cookie, with an
`Authorization: Bearer` header accepted as a fallback for API clients.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Request, Response
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError as PydanticValidationError

import config

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)


class Identity(BaseModel):
    """Decoded credential payload."""
    user_id: str
    email: str
    role: str
    name: str = ""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Unrecognized or corrupt hash
        return False


def issue_credential(user: Dict[str, Any], expires_in: Optional[timedelta] = None) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.get("_id") or user.get("id")),
        "email": user.get("email"),
        "role": user.get("role"),
        "name": user.get("name", ""),
        "iat": issued_at,
        "exp": issued_at + (expires_in if expires_in is not None else config.TOKEN_TTL),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALG)


def verify_credential(token: Optional[str]) -> Optional[Identity]:
    """Return the identity in `token`, or None when it is absent, tampered, malformed or expired."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
        return Identity(
            user_id=payload["sub"],
            email=payload["email"],
            role=payload["role"],
            name=payload.get("name") or "",
        )
    except (JWTError, KeyError, TypeError, PydanticValidationError):
        return None


def token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(config.COOKIE_NAME)
    if token:
        return token
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


def identity_from_request(request: Request) -> Optional[Identity]:
    return verify_credential(token_from_request(request))


def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=config.COOKIE_NAME,
        value=token,
        max_age=int(config.TOKEN_TTL.total_seconds()),
        path="/",
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response):
    response.set_cookie(
        key=config.COOKIE_NAME,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )
