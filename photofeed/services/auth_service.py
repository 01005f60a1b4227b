"""
Authentication Service
Handles user registration, sign-in, token issuing and account liveness checks
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import timedelta
from typing import Optional, Tuple
import logging
import uuid

from photofeed.models.user import User
from photofeed.core.config import Settings
from photofeed.core.database import require_db
from photofeed.core.exceptions import AccountGone, Conflict, NotFound, Unauthorized
from photofeed.core.security import (
    TokenClaims,
    verify_password,
    get_password_hash,
    create_access_token,
)
from photofeed.schemas.user import UserSignup, UserSignin

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_ERRORS = [{"field": "email", "message": "This email is already registered"}]
NO_ACCOUNT_ERRORS = [{"field": "email", "message": "No active account found with this email"}]


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def create_user(
        db: Session,
        payload: UserSignup,
        profile_pic: Optional[str] = None,
        rounds: Optional[int] = None
    ) -> User:
        """
        Create new user account

        Args:
            db: Database session
            payload: Validated signup data (name trimmed, email normalised)
            profile_pic: Stored profile picture path, if one was uploaded
            rounds: bcrypt cost factor

        Returns:
            Created User object

        Raises:
            Conflict: email already registered (including deleted accounts)
        """
        db = require_db(db)

        existing = db.query(User.id).filter(User.email == payload.email).first()
        if existing:
            raise Conflict("User already exists", DUPLICATE_EMAIL_ERRORS)

        user = User(
            name=payload.name,
            email=payload.email,
            password=get_password_hash(payload.password, rounds=rounds),
            profile_pic=profile_pic,
        )

        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            db.rollback()
            raise Conflict("User already exists", DUPLICATE_EMAIL_ERRORS)
        db.refresh(user)

        logger.info("User signed up", extra={"user_id": str(user.id)})
        return user

    @staticmethod
    def authenticate_user(db: Session, payload: UserSignin) -> User:
        """
        Authenticate user by email and password

        Raises:
            NotFound: no active account for the email
            Unauthorized: wrong password
        """
        db = require_db(db)

        user = db.query(User).filter(User.email == payload.email).first()
        if not user or user.is_deleted:
            raise NotFound("User not found", NO_ACCOUNT_ERRORS)

        if not verify_password(payload.password, user.password):
            logger.warning("Failed sign-in attempt", extra={"user_id": str(user.id)})
            raise Unauthorized("Invalid password")

        return user

    @staticmethod
    def create_token(user: User, settings: Settings) -> str:
        return create_access_token(
            user_id=str(user.id),
            email=user.email,
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            expires_delta=timedelta(days=settings.JWT_EXPIRE_DAYS),
        )

    @staticmethod
    def sign_in(db: Session, payload: UserSignin, settings: Settings) -> Tuple[User, str]:
        user = AuthService.authenticate_user(db, payload)
        token = AuthService.create_token(user, settings)
        logger.info("User signed in", extra={"user_id": str(user.id)})
        return user, token

    @staticmethod
    def get_active_user(db: Session, claims: TokenClaims) -> User:
        """
        Load the account a verified token refers to.

        Runs on every authenticated request; a token for a deleted or
        missing account is rejected.
        """
        db = require_db(db)

        try:
            user_id = uuid.UUID(claims.user_id)
        except ValueError:
            raise AccountGone()

        user = db.query(User).filter(User.id == user_id).first()
        if user is None or user.is_deleted:
            raise AccountGone()

        return user
