# Admin user management: list, create, edit, delete users
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from ...extensions import db
from ...models import Users, UserTypes, UserPositions
from ...utils.auth_utils import hash_password, token_required
from ...utils.export_utils import csv_response
from ...utils.filtering import filter_rows
from ...utils.serializers import serialize_user
from ...utils.validation import (
    ValidationError,
    check_email,
    optional_str,
    parse_bool,
    parse_int,
    require_fields,
    require_text,
)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")

SEARCH_FIELDS = ["user_name", "email"]

CSV_COLUMNS = {
    "ID": "id",
    "Name": "user_name",
    "Email": "email",
    "Phone": "phone",
    "Type": "type.type_en_name",
    "Position": "position.position_en_name",
    "Active": "is_active",
    "Created At": "created_at",
}


def _load_users():
    stmt = (
        select(Users)
        .options(joinedload(Users.type_info), joinedload(Users.position_info))
        .order_by(Users.created_at.desc(), Users.id.desc())
    )
    return [serialize_user(u) for u in db.session.scalars(stmt).unique()]


def _user_fields(data, creating):
    """Validate the user form and return column values."""
    required = ["user_name", "email", "user_type"]
    if creating:
        required.append("password")
    require_fields(data, required, "Please fill in all required fields")

    user_type = parse_int(data.get("user_type"), "user_type")
    user_position = parse_int(data.get("user_position"), "user_position")

    if not db.session.get(UserTypes, user_type):
        raise ValidationError("Unknown user type", field="user_type")
    if user_position is not None and not db.session.get(UserPositions, user_position):
        raise ValidationError("Unknown user position", field="user_position")

    fields = {
        "user_name": require_text(data["user_name"], "user_name"),
        "email": check_email(data["email"]),
        "phone": optional_str(data.get("phone")),
        "user_type": user_type,
        "user_position": user_position,
    }
    if "is_active" in data:
        fields["is_active"] = parse_bool(data.get("is_active"), "is_active", default=True)
    if "is_verified" in data:
        fields["is_verified"] = parse_bool(data.get("is_verified"), "is_verified")
    if optional_str(data.get("password")):
        fields["password_hash"] = hash_password(require_text(data["password"], "password"))
    return fields


def _email_taken(email, exclude_id=None):
    stmt = select(Users.id).where(Users.email == email)
    if exclude_id is not None:
        stmt = stmt.where(Users.id != exclude_id)
    return db.session.scalar(stmt) is not None


@users_bp.route("", methods=["GET"])
@token_required
def list_users():
    """
    List users
    ---
    tags:
      - Users
    parameters:
      - in: query
        name: search
        type: string
        description: Case-insensitive match on name or email
      - in: query
        name: type
        type: string
        description: User type id, or "all"
      - in: query
        name: format
        type: string
        enum: [json, csv]
    responses:
      200:
        description: Users ordered newest first
    """
    try:
        rows = filter_rows(
            _load_users(),
            search=request.args.get("search"),
            fields=SEARCH_FIELDS,
            status_field="user_type",
            status=request.args.get("type"),
        )

        if request.args.get("format") == "csv":
            return csv_response(rows, CSV_COLUMNS, "users")

        return jsonify({"status": "success", "count": len(rows), "users": rows}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching users: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch users", "details": str(e)}), 500


@users_bp.route("/stats", methods=["GET"])
@token_required
def user_stats():
    """Totals for the user screen cards."""
    try:
        rows = _load_users()
        by_type = {}
        for row in rows:
            name = row["type"]["type_en_name"] if row["type"] else "Unknown"
            by_type[name] = by_type.get(name, 0) + 1

        return jsonify({
            "status": "success",
            "stats": {
                "total": len(rows),
                "active": sum(1 for r in rows if r["is_active"]),
                "inactive": sum(1 for r in rows if not r["is_active"]),
                "verified": sum(1 for r in rows if r["is_verified"]),
                "by_type": by_type,
            },
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error computing user stats: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch user stats", "details": str(e)}), 500


@users_bp.route("/<int:user_id>", methods=["GET"])
@token_required
def get_user(user_id):
    user = db.session.get(Users, user_id)
    if not user:
        return jsonify({"status": "error", "message": "User not found"}), 404
    return jsonify({"status": "success", "user": serialize_user(user)}), 200


@users_bp.route("", methods=["POST"])
@token_required
def create_user():
    """
    Create a user
    ---
    tags:
      - Users
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [user_name, email, user_type, password]
          properties:
            user_name: {type: string}
            email: {type: string}
            phone: {type: string}
            user_type: {type: integer}
            user_position: {type: integer}
            password: {type: string}
    responses:
      201:
        description: User created successfully
      400:
        description: Validation error or duplicate email
    """
    try:
        data = request.get_json(silent=True) or {}
        fields = _user_fields(data, creating=True)

        if _email_taken(fields["email"]):
            return jsonify({"status": "error", "message": "Email already exists"}), 400

        fields.setdefault("is_active", True)
        user = Users(**fields)
        db.session.add(user)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "User created successfully",
            "user": serialize_user(user),
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving user: {e}")
        return jsonify({"status": "error", "message": "Failed to save user", "details": str(e)}), 500


@users_bp.route("/<int:user_id>", methods=["PUT"])
@token_required
def update_user(user_id):
    """
    Edit a user
    ---
    tags:
      - Users
    parameters:
      - in: path
        name: user_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          description: Same fields as create; an empty password keeps the current one
    responses:
      200:
        description: User updated successfully
      404:
        description: User not found
    """
    try:
        user = db.session.get(Users, user_id)
        if not user:
            return jsonify({"status": "error", "message": "User not found"}), 404

        data = request.get_json(silent=True) or {}
        fields = _user_fields(data, creating=False)

        if _email_taken(fields["email"], exclude_id=user_id):
            return jsonify({"status": "error", "message": "Email already exists"}), 400

        for key, value in fields.items():
            setattr(user, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "User updated successfully",
            "user": serialize_user(user),
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving user {user_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to save user", "details": str(e)}), 500


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@token_required
def delete_user(user_id):
    try:
        user = db.session.get(Users, user_id)
        if not user:
            return jsonify({"status": "error", "message": "User not found"}), 404

        db.session.delete(user)
        db.session.commit()
        return jsonify({"status": "success", "message": "User deleted successfully"}), 200

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "User is still referenced by other records", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting user {user_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete user", "details": str(e)}), 500
