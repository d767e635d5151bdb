from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt

from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from database import get_db
from models_orm import UserORM
from config import Config
from exceptions import ForbiddenException

import bcrypt
import logging

logger = logging.getLogger("fitmarket")

SECRET_KEY = Config.SECRET_KEY
ALGORITHM = Config.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = Config.ACCESS_TOKEN_EXPIRE_MINUTES


def verify_password(plain_password, hashed_password):
    if not plain_password or not hashed_password:
        return False
    # bcrypt requires bytes for both
    pwd_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(pwd_bytes, hashed_bytes)


def get_password_hash(password):
    # bcrypt requires bytes, returns bytes. We store as string.
    pwd_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


async def get_current_user(request: Request, db: Session = Depends(get_db)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    # Get token from Authorization header or cookie
    token = None
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.replace("Bearer ", "")
    else:
        token = request.cookies.get("access_token")

    if not token:
        logger.debug("AUTH: No token found in header or cookie")
        raise credentials_exception

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        email: str = payload.get("sub")
        if email is None:
            logger.info("AUTH: Token missing 'sub' (email)")
            raise credentials_exception
    except JWTError as e:
        logger.info(f"AUTH: JWT Validation Error: {e}")
        raise credentials_exception

    user = db.query(UserORM).filter(UserORM.email == email).first()
    if user is None:
        logger.info(f"AUTH: User {email} not found in DB")
        raise credentials_exception

    return user


async def require_admin(user: UserORM = Depends(get_current_user)):
    if user.role != "admin":
        raise ForbiddenException("Admins only")
    return user


def ensure_self_or_admin(user: UserORM, *, email: Optional[str] = None, user_id: Optional[str] = None):
    """Reject callers acting on another user's records unless they are an admin."""
    if user.role == "admin":
        return
    if email is not None and user.email.lower() == email.lower():
        return
    if user_id is not None and user.id == user_id:
        return
    logger.warning(f"AUTH: {user.email} tried to act on {email or user_id}")
    raise ForbiddenException("You can only modify your own records")
