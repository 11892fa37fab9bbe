# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/wapmarket/routes/auth.py
"""
Authentication API routes

- Self-service signup for buyers and sellers
- Login returning a signed bearer token
- Profile lookup for the token's user
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services.auth_service import (
    PasswordValidationError,
    DuplicateEmailError,
    UserNotFoundError,
    InvalidCredentialsError,
)
from ..validation import parse_signup_payload, ValidationError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/auth/signup")
@auth_bp.post("/auth/register")
def signup_route():
    """
    Create an account and return {token, user}.

    Body: email, password, name?, phone?, role? (buyer|seller)
    """
    try:
        req = parse_signup_payload(request.get_json(silent=True))
        user, token = auth_service.register(req)
        return jsonify({"token": token, "user": user.to_dict()}), 201

    except (ValidationError, PasswordValidationError, DuplicateEmailError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/auth/login")
def login_route():
    """
    Authenticate and return {token, user}.

    The token must be sent as "Authorization: Bearer <token>" on protected
    routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400

        email = data.get("email")
        password = data.get("password")

        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            return jsonify({"error": "email and password required"}), 400

        user, token = auth_service.login(email, password)
        return jsonify({"token": token, "user": user.to_dict()}), 200

    except UserNotFoundError as e:
        current_app.logger.warning("Login attempt for unknown email from %s", request.remote_addr)
        return jsonify({"error": str(e)}), 404
    except InvalidCredentialsError as e:
        current_app.logger.warning("Invalid credentials from %s", request.remote_addr)
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/auth/profile")
@auth_bp.get("/profile")
@require_auth
def profile_route():
    """Return the authenticated user's row."""
    return jsonify({"user": g.current_user.to_dict()}), 200
