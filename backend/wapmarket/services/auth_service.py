# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Passwords are hashed with bcrypt (BCRYPT_ROUNDS, 12 by default). Emails are
unique across the marketplace and compared lower-cased. Successful
authentication hands back a signed JWT from token_service.
"""

import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User, ROLE_BUYER, ROLE_SELLER, ROLES
from ..time_utils import utcnow
from ..validation import SignupRequest, ValidationError
from .token_service import issue_token


SELF_SIGNUP_ROLES = (ROLE_BUYER, ROLE_SELLER)


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class DuplicateEmailError(ValueError):
    """Raised when an account already uses the email."""
    pass


class UserNotFoundError(Exception):
    pass


class InvalidCredentialsError(Exception):
    pass


def validate_password_strength(password: str) -> None:
    """
    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit
    - At most 72 bytes once UTF-8 encoded
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    # bcrypt only accepts up to 72 bytes
    if len(password.encode("utf-8")) > 72:
        raise PasswordValidationError("Password must be at most 72 bytes long")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    # bcrypt.checkpw is timing-safe
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter(User.email == email.strip().lower()).first()


def create_user(
    email: str,
    password: str,
    *,
    name: str | None = None,
    phone: str | None = None,
    role: str = ROLE_BUYER,
    commit: bool = True,
) -> User:
    """
    Create a user with a bcrypt hash.

    Raises:
        ValidationError: unknown role
        DuplicateEmailError: email already registered
        PasswordValidationError: weak password
    """
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

    email = email.strip().lower()
    if get_user_by_email(email):
        raise DuplicateEmailError("Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        phone=phone,
        role=role,
    )
    db.session.add(user)
    db.session.flush()

    if commit:
        db.session.commit()
    return user


def register(req: SignupRequest) -> tuple[User, str]:
    """Self-service signup. Returns (user, token)."""
    role = req.role or ROLE_BUYER
    if role not in SELF_SIGNUP_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(SELF_SIGNUP_ROLES)}")

    user = create_user(
        req.email,
        req.password,
        name=req.name,
        phone=req.phone,
        role=role,
    )
    current_app.logger.info("User %s registered with role %s", user.id, user.role)
    return user, issue_token(user)


def authenticate(email: str, password: str) -> User:
    """
    Verify credentials.

    Raises UserNotFoundError for an unknown email and
    InvalidCredentialsError for a wrong password or deactivated account.
    Updates last_login_at on success.
    """
    user = get_user_by_email(email)
    if not user:
        raise UserNotFoundError("User not found")

    if not user.is_active or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Invalid credentials")

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def login(email: str, password: str) -> tuple[User, str]:
    user = authenticate(email, password)
    return user, issue_token(user)
