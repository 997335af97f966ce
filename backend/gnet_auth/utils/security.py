from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..config import settings
from .exceptions import AuthError, PermissionDeniedError

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer scheme; missing header is reported by get_current_user
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against hashed password"""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)

def token_payload(user: User) -> dict:
    """Identity claims carried by both token types"""
    return {"userId": user.id, "email": user.email, "role": user.role}

def _create_token(data: dict, token_type: str, secret: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"type": token_type, "iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    return _create_token(
        data,
        ACCESS_TOKEN,
        settings.JWT_ACCESS_SECRET,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT refresh token"""
    return _create_token(
        data,
        REFRESH_TOKEN,
        settings.JWT_REFRESH_SECRET,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )

def _decode_token(token: str, token_type: str, secret: str) -> dict:
    payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != token_type or not payload.get("userId"):
        raise JWTError(f"Not a valid {token_type} token")
    return payload

def verify_access_token(token: str) -> dict:
    """Decode an access token. Raises JWTError when invalid or expired."""
    return _decode_token(token, ACCESS_TOKEN, settings.JWT_ACCESS_SECRET)

def verify_refresh_token(token: str) -> dict:
    """Decode a refresh token. Raises JWTError when invalid or expired."""
    return _decode_token(token, REFRESH_TOKEN, settings.JWT_REFRESH_SECRET)

async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from the bearer access token"""
    if not token:
        raise AuthError("No token provided. Access denied.")

    try:
        payload = verify_access_token(token)
    except JWTError:
        raise AuthError("Invalid or expired token.")

    user = db.query(User).filter(User.id == payload["userId"]).first()
    if user is None:
        raise AuthError("Invalid token. User not found.")

    return user

def require_role(allowed_roles: list):
    """Dependency factory restricting a route to the given roles"""
    def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            raise PermissionDeniedError("Access denied. Insufficient permissions.")
        return current_user
    return role_checker
