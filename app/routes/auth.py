from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from ..extensions import db
from ..models import Users, UserTypes, UserPositions, SUPER_ADMIN_TYPE_ID, utcnow
from ..services import settings_service
from ..utils.auth_utils import (
    check_password,
    hash_password,
    record_security_event,
    start_session,
    token_required,
)
from ..utils.serializers import serialize_session_user
from ..utils.validation import ValidationError, check_email, missing_fields, parse_int, require_text

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/signup", methods=["POST"])
def signup_user():
    """
    Register a new account
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, email, phone, password, userType]
          properties:
            name: {type: string}
            email: {type: string}
            phone: {type: string}
            password: {type: string}
            userType: {type: integer}
            userPosition: {type: integer}
    responses:
      201:
        description: User registered
      400:
        description: Missing fields or duplicate email
      403:
        description: Registration disabled
    """
    try:
        data = request.get_json(silent=True) or {}

        missing = missing_fields(data, ["name", "email", "phone", "password", "userType"])
        if missing:
            return jsonify({
                "status": "error",
                "message": f"Missing required fields ({', '.join(missing)})"
            }), 400

        if not settings_service.get_setting(settings_service.GENERAL, "registrationEnabled"):
            return jsonify({
                "status": "error",
                "message": "Registration is currently disabled"
            }), 403

        email = check_email(data["email"])
        user_type = parse_int(data["userType"], "userType")
        user_position = parse_int(data.get("userPosition"), "userPosition")

        if not db.session.get(UserTypes, user_type):
            return jsonify({"status": "error", "message": "Unknown user type"}), 400
        if user_position is not None and not db.session.get(UserPositions, user_position):
            return jsonify({"status": "error", "message": "Unknown user position"}), 400

        existing = db.session.scalar(select(Users).where(Users.email == email))
        if existing:
            return jsonify({
                "status": "error",
                "message": "User already exists with this email"
            }), 400

        user = Users(
            user_name=require_text(data["name"], "name"),
            email=email,
            phone=require_text(data["phone"], "phone"),
            password_hash=hash_password(require_text(data["password"], "password")),
            user_type=user_type,
            user_position=user_position,
            is_active=True,
            is_verified=False,
        )
        db.session.add(user)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "User registered successfully",
            "user": serialize_session_user(user)
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({
            "status": "error",
            "message": "Database integrity error",
            "details": str(e.orig)
        }), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Signup failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Signup failed",
            "details": str(e)
        }), 500


@auth_bp.route("/login", methods=["POST"])
def login_user():
    """
    Sign in and receive a session token
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password]
          properties:
            email: {type: string}
            password: {type: string}
    responses:
      200:
        description: Login successful, returns token and user
      401:
        description: Unknown user or wrong password
      403:
        description: Account inactive or maintenance mode
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")
        if isinstance(email, str):
            email = email.strip()

        if not email or not password:
            return jsonify({
                "status": "error",
                "message": "Email and password required"
            }), 400

        if not isinstance(email, str) or not isinstance(password, str):
            return jsonify({
                "status": "error",
                "message": "Email and password must be text"
            }), 400

        user = db.session.scalar(select(Users).where(Users.email == email))
        if not user:
            record_security_event("failed_login", email, status="failed")
            db.session.commit()
            return jsonify({"status": "error", "message": "User not found"}), 401

        if not check_password(password, user.password_hash):
            record_security_event("failed_login", email, status="failed")
            db.session.commit()
            return jsonify({"status": "error", "message": "Invalid password"}), 401

        if not user.is_active:
            record_security_event("failed_login", email, status="warning")
            db.session.commit()
            return jsonify({"status": "error", "message": "Account is inactive"}), 403

        maintenance = settings_service.get_setting(settings_service.GENERAL, "maintenanceMode")
        if maintenance and user.user_type != SUPER_ADMIN_TYPE_ID:
            return jsonify({
                "status": "error",
                "message": "The system is under maintenance"
            }), 403

        token = start_session(user)
        record_security_event("login", email)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Login successful",
            "token": token,
            "user": serialize_session_user(user)
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Login failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Login failed",
            "details": str(e)
        }), 500


@auth_bp.route("/me", methods=["GET"])
@token_required
def get_current_user():
    """
    GET /api/auth/me
    Purpose: Restore the signed-in user from a stored token.

    Behavior:
    - Valid token → the session user.
    - Missing, tampered, expired or revoked token → 401.
    """
    return jsonify({
        "status": "success",
        "user": serialize_session_user(g.current_user)
    }), 200


@auth_bp.route("/logout", methods=["POST"])
@token_required
def logout_user():
    try:
        g.current_session.revoked_at = utcnow()
        record_security_event("logout", g.current_user.email)
        db.session.commit()
        return jsonify({"status": "success", "message": "Logged out"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Logout failed: {e}")
        return jsonify({"status": "error", "message": "Logout failed", "details": str(e)}), 500


@auth_bp.route("/change-password", methods=["POST"])
@token_required
def change_password():
    """
    Change the signed-in user's password
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [current_password, new_password]
          properties:
            current_password: {type: string}
            new_password: {type: string}
    responses:
      200:
        description: Password updated
      400:
        description: Missing fields or weak password
      401:
        description: Current password is wrong
    """
    try:
        data = request.get_json(silent=True) or {}
        current_password = data.get("current_password")
        new_password = data.get("new_password")

        if not current_password or not new_password:
            return jsonify({
                "status": "error",
                "message": "current_password and new_password are required"
            }), 400

        if not isinstance(current_password, str) or not isinstance(new_password, str):
            return jsonify({
                "status": "error",
                "message": "Passwords must be text"
            }), 400

        if len(new_password) < 8:
            return jsonify({
                "status": "error",
                "message": "New password must be at least 8 characters"
            }), 400

        user = g.current_user
        if not check_password(current_password, user.password_hash):
            record_security_event("password_change", user.email, status="failed")
            db.session.commit()
            return jsonify({"status": "error", "message": "Invalid password"}), 401

        user.password_hash = hash_password(new_password)
        record_security_event("password_change", user.email)
        db.session.commit()

        return jsonify({"status": "success", "message": "Password updated successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Password change failed: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500
