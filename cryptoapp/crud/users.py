"""
Credential Store: registration, password check and lookup of users.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cryptoapp import models, utils
from cryptoapp.core.config import get_settings
from cryptoapp.core.database import is_row_id
from cryptoapp.core.errors import Conflict, InvalidCredentials, InvalidInput, NotFound

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists."
USERNAME_TAKEN = "User with this username already exists."


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def register(
    db: Session,
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
    min_password_length: Optional[int] = None,
) -> models.User:
    if min_password_length is None:
        min_password_length = get_settings().MIN_PASSWORD_LENGTH

    username = _clean(username)
    email = _clean(email).lower()

    # 1. Shape of the request
    if not username or not email or not password:
        raise InvalidInput("Username, email and password are required")
    if len(password) < min_password_length:
        raise InvalidInput(f"Password must be at least {min_password_length} characters long")

    # 2. Duplicates
    if db.query(models.User).filter(models.User.email == email).first():
        raise Conflict(EMAIL_TAKEN)
    if db.query(models.User).filter(models.User.username == username).first():
        raise Conflict(USERNAME_TAKEN)

    # 3. Creation, only the hash is stored
    new_user = models.User(username=username, email=email, password_hash=utils.hash(password))

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration
        db.rollback()
        raise Conflict("User with this email or username already exists.")
    db.refresh(new_user)

    logger.info("User %s registered", new_user.user_id)
    return new_user


def verify(db: Session, email: Optional[str], password: Optional[str]) -> models.User:
    # Same error for unknown email and wrong password
    email = _clean(email).lower()
    if not email or not password:
        raise InvalidCredentials()

    user = db.query(models.User).filter(models.User.email == email).first()
    if not user or not utils.verify(password, user.password_hash):
        logger.info("Failed login attempt")
        raise InvalidCredentials()

    return user


def get_by_id(db: Session, user_id: int) -> models.User:
    if not is_row_id(user_id):
        raise NotFound("User not found")
    user = db.query(models.User).filter(models.User.user_id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user
