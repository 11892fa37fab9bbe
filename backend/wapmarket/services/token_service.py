# Overview: Issue and decode signed bearer tokens.

"""
JWT bearer tokens.

Tokens are stateless: the claims carry the user's id, email and role, and
the signature (HS256 with SECRET_KEY) is the only thing that makes them
trustworthy. There is no server-side revocation; tokens simply expire
after JWT_EXPIRES_HOURS.
"""

from datetime import timedelta

from flask import current_app
from jose import JWTError, ExpiredSignatureError, jwt

from ..models import User
from ..time_utils import utcnow


class TokenError(Exception):
    """Raised when a bearer token cannot be trusted."""
    pass


def issue_token(user: User) -> str:
    now = utcnow()
    claims = {
        "sub": str(user.id),
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(
        claims,
        current_app.config["SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token: str) -> dict:
    """
    Verify signature and expiry and return the claims.

    Raises TokenError for anything that is not a well-formed, unexpired
    token with an integer id and a role.
    """
    try:
        claims = jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except ExpiredSignatureError:
        raise TokenError("Token expired")
    except JWTError:
        raise TokenError("Invalid token")

    if not isinstance(claims.get("id"), int) or not claims.get("role"):
        raise TokenError("Invalid token")
    return claims
