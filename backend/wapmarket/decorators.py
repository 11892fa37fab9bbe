# Overview: Authentication and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .extensions import db
from .models import User, ROLE_ADMIN
from .services.token_service import decode_token, TokenError


def _is_authenticated() -> bool:
    return getattr(g, 'current_user', None) is not None


def _resolve_bearer():
    """
    Returns (user, claims, error_response).

    user and claims are None when no Authorization header was sent.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None, None, None

    if not auth_header.startswith("Bearer "):
        return None, None, (jsonify({"error": "Authentication required"}), 401)

    token = auth_header.split(" ", 1)[1].strip()
    try:
        claims = decode_token(token)
    except TokenError as e:
        return None, None, (jsonify({"error": str(e)}), 401)

    user = db.session.get(User, claims["id"])
    if not user or not user.is_active:
        return None, None, (jsonify({"error": "Invalid or expired token"}), 401)

    return user, claims, None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.token_claims: The decoded JWT claims (id, email, role)

    Returns 401 if the header is missing, the token is invalid or expired,
    or the user no longer exists.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user, claims, error = _resolve_bearer()
        if error:
            return error
        if user is None:
            return jsonify({"error": "Authentication required"}), 401

        g.current_user = user
        g.token_claims = claims
        return f(*args, **kwargs)

    return decorated_function


def optional_auth(f):
    """
    Like require_auth, but anonymous callers pass with g.current_user = None.

    A header that is present but invalid is still rejected with 401.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user, claims, error = _resolve_bearer()
        if error:
            return error

        g.current_user = user
        g.token_claims = claims
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles):
    """
    Require the token's role claim to be one of roles.

    Admin satisfies every role check. Must be stacked under @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            role = g.token_claims.get("role")
            if role == ROLE_ADMIN or role in roles:
                return f(*args, **kwargs)

            return jsonify({
                "error": "Forbidden",
                "required_roles": list(roles),
                "message": f"Requires role: {', '.join(roles)}",
            }), 403

        return decorated_function
    return decorator


def forbid_roles(*roles):
    """Reject authenticated callers whose role claim is in roles (403)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            claims = getattr(g, 'token_claims', None)
            if claims and claims.get("role") in roles:
                return jsonify({
                    "error": "Forbidden",
                    "message": f"Not available to role: {claims.get('role')}",
                }), 403
            return f(*args, **kwargs)

        return decorated_function
    return decorator
