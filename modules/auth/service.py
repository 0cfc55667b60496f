"""
Auth Module - Service Layer
=============================
Sign-up and sign-in against the user directory.
"""

import logging
from typing import Tuple

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from common.security import hash_password, verify_password, create_token
from common.exceptions import ValidationError, UsernameTakenError, InvalidCredentialsError
from modules.user.models import User, MembershipTier

logger = logging.getLogger("storefront.auth")


class AuthService:
    """Handles all authentication logic: registration, credential check, token creation."""

    def get_user(self, db: Session, username: str):
        return db.query(User).filter(User.username == username).first()

    def sign_up(self, db: Session, username: str, password: str) -> User:
        """
        Register a new user at the lowest membership tier with zero points.

        Raises:
            ValidationError if username or password is blank
            UsernameTakenError if the username already exists
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Please enter a username and password.")

        if self.get_user(db, username):
            raise UsernameTakenError()

        user = User(
            username=username,
            password_hash=hash_password(password),
            membership=MembershipTier.BRONZE.value,
            points=0,
        )
        try:
            db.add(user)
            db.flush()
        except IntegrityError:
            db.rollback()
            # Race condition: another request registered this username
            raise UsernameTakenError()

        logger.info(f"Registered user {username}")
        return user

    def sign_in(self, db: Session, username: str, password: str) -> Tuple[User, str]:
        """
        Check credentials.

        Returns:
            (user, session_token)

        Raises:
            InvalidCredentialsError if no user matches username and password
        """
        username = (username or "").strip()
        user = self.get_user(db, username) if username else None
        if not user or not verify_password(password or "", user.password_hash):
            raise InvalidCredentialsError()

        token = create_token({"sub": user.username})
        return user, token


# Singleton instance
auth_service = AuthService()
