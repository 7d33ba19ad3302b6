# chatbuddy/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header, HTTPException
from jose import jwt, JWTError
from loguru import logger
from passlib.context import CryptContext
from pydantic import ValidationError

from .schemas import TokenClaims, User
from .settings import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # unknown/corrupt hash format
        return False

def create_access_token(user: User, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    claims = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.JWT_EXPIRE_DAYS)).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> Optional[TokenClaims]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return TokenClaims.model_validate(payload)
    except (JWTError, ValidationError) as e:
        logger.warning(f"[auth] JWT decode failed: {e}")
        return None

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None

def current_claims(Authorization: str | None = Header(default=None)) -> TokenClaims:
    """FastAPI dependency: 401 without a bearer token, 403 when it does not verify."""
    token = bearer_token(Authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Access token required")
    claims = decode_access_token(token)
    if claims is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    return claims
