from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from app.extensions import db
from app.models import Notifications, Users, NOTIFICATION_TYPES
from app.services.email_service import email_service
from app.utils.auth_utils import token_required
from app.utils.export_utils import csv_response
from app.utils.filtering import filter_rows
from app.utils.i18n import add_labels
from app.utils.serializers import serialize_notification
from app.utils.validation import (
    ValidationError,
    check_choice,
    check_email,
    parse_int,
    require_fields,
    require_text,
)

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")

SEARCH_FIELDS = ["title", "message", "user.user_name", "user.email"]

CSV_COLUMNS = {
    "ID": "id",
    "User": "user.user_name",
    "Email": "user.email",
    "Title": "title",
    "Message": "message",
    "Type": "type",
    "Read": "is_read",
    "Created At": "created_at",
}


def _load_notifications(user_id=None):
    stmt = (
        select(Notifications)
        .options(joinedload(Notifications.user))
        .order_by(Notifications.created_at.desc(), Notifications.id.desc())
    )
    if user_id is not None:
        stmt = stmt.where(Notifications.user_id == user_id)
    return [serialize_notification(n) for n in db.session.scalars(stmt).unique()]


def _notification_fields(data):
    require_fields(data, ["user_id", "title", "message"], "Please fill required fields")

    user_id = parse_int(data.get("user_id"), "user_id")
    if not db.session.get(Users, user_id):
        raise ValidationError("Unknown user", field="user_id")

    notification_type = data.get("type") or "general"
    check_choice("type", notification_type, NOTIFICATION_TYPES)

    return {
        "user_id": user_id,
        "title": require_text(data["title"], "title"),
        "message": require_text(data["message"], "message"),
        "type": notification_type,
        "related_id": parse_int(data.get("related_id"), "related_id"),
        # Saving from the admin form resets the read flag
        "is_read": False,
    }


@notifications_bp.route("", methods=["GET"])
@token_required
def list_notifications():
    """
    List notifications
    ---
    tags:
      - Notifications
    parameters:
      - in: query
        name: search
        type: string
        description: Matches title, message, user name or email
      - in: query
        name: type
        type: string
        enum: [all, general, inquiry, booking, payment, system]
      - in: query
        name: user_id
        type: integer
      - in: query
        name: locale
        type: string
        enum: [en, ar]
      - in: query
        name: format
        type: string
        enum: [json, csv]
    responses:
      200:
        description: Notifications ordered newest first
    """
    try:
        user_id = parse_int(request.args.get("user_id"), "user_id")
        rows = filter_rows(
            _load_notifications(user_id),
            search=request.args.get("search"),
            fields=SEARCH_FIELDS,
            status_field="type",
            status=request.args.get("type"),
        )

        if request.args.get("format") == "csv":
            return csv_response(rows, CSV_COLUMNS, "notifications")

        add_labels(rows, ["type"], request.args.get("locale"))
        return jsonify({"status": "success", "count": len(rows), "notifications": rows}), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except Exception as e:
        current_app.logger.error(f"Error fetching notifications: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch notifications", "details": str(e)}), 500


@notifications_bp.route("/stats", methods=["GET"])
@token_required
def notification_stats():
    try:
        rows = _load_notifications()
        return jsonify({
            "status": "success",
            "stats": {
                "total": len(rows),
                "unread": sum(1 for r in rows if not r["is_read"]),
                "system": sum(1 for r in rows if r["type"] == "system"),
            },
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error computing notification stats: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch notification stats", "details": str(e)}), 500


@notifications_bp.route("/<int:notification_id>", methods=["GET"])
@token_required
def get_notification(notification_id):
    notification = db.session.get(Notifications, notification_id)
    if not notification:
        return jsonify({"status": "error", "message": "Notification not found"}), 404
    return jsonify({"status": "success", "notification": serialize_notification(notification)}), 200


@notifications_bp.route("", methods=["POST"])
@token_required
def create_notification():
    """
    Send an in-app notification to a user
    ---
    tags:
      - Notifications
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [user_id, title, message]
          properties:
            user_id: {type: integer}
            title: {type: string}
            message: {type: string}
            type: {type: string, enum: [general, inquiry, booking, payment, system]}
            related_id: {type: integer}
    responses:
      201:
        description: Notification created successfully
      400:
        description: Validation error
    """
    try:
        data = request.get_json(silent=True) or {}
        notification = Notifications(**_notification_fields(data))
        db.session.add(notification)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Notification created successfully",
            "notification": serialize_notification(notification),
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving notification: {e}")
        return jsonify({"status": "error", "message": "Failed to save notification", "details": str(e)}), 500


@notifications_bp.route("/<int:notification_id>", methods=["PUT"])
@token_required
def update_notification(notification_id):
    try:
        notification = db.session.get(Notifications, notification_id)
        if not notification:
            return jsonify({"status": "error", "message": "Notification not found"}), 404

        data = request.get_json(silent=True) or {}
        for key, value in _notification_fields(data).items():
            setattr(notification, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Notification updated successfully",
            "notification": serialize_notification(notification),
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving notification {notification_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to save notification", "details": str(e)}), 500


@notifications_bp.route("/<int:notification_id>", methods=["DELETE"])
@token_required
def delete_notification(notification_id):
    try:
        notification = db.session.get(Notifications, notification_id)
        if not notification:
            return jsonify({"status": "error", "message": "Notification not found"}), 404

        db.session.delete(notification)
        db.session.commit()
        return jsonify({"status": "success", "message": "Notification deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting notification {notification_id}: {e}")
        return jsonify({"status": "error", "message": "Delete failed", "details": str(e)}), 500


@notifications_bp.route("/<int:notification_id>/read", methods=["POST"])
@token_required
def mark_notification_read(notification_id):
    try:
        notification = db.session.get(Notifications, notification_id)
        if not notification:
            return jsonify({"status": "error", "message": "Notification not found"}), 404

        notification.is_read = True
        db.session.commit()
        return jsonify({
            "status": "success",
            "message": "Notification marked as read",
            "notification": serialize_notification(notification),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error marking notification {notification_id} read: {e}")
        return jsonify({"status": "error", "message": "Failed to update notification", "details": str(e)}), 500


@notifications_bp.route("/read-all", methods=["POST"])
@token_required
def mark_all_read():
    """
    Mark every unread notification as read
    ---
    tags:
      - Notifications
    parameters:
      - in: body
        name: body
        required: false
        schema:
          type: object
          properties:
            user_id:
              type: integer
              description: Limit to one user's notifications
    responses:
      200:
        description: Number of notifications updated
    """
    try:
        data = request.get_json(silent=True) or {}
        user_id = parse_int(data.get("user_id"), "user_id")

        stmt = update(Notifications).where(Notifications.is_read.is_(False))
        if user_id is not None:
            stmt = stmt.where(Notifications.user_id == user_id)
        result = db.session.execute(stmt.values(is_read=True))
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "All notifications marked as read",
            "updated": result.rowcount,
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error marking notifications read: {e}")
        return jsonify({"status": "error", "message": "Failed to update notifications", "details": str(e)}), 500


@notifications_bp.route("/test-email", methods=["POST"])
@token_required
def test_email():
    """
    Test email configuration
    ---
    tags:
      - Notifications
    summary: Send a test email to verify Resend integration
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email]
          properties:
            email:
              type: string
              format: email
              example: admin@brandspace.com
    responses:
      200:
        description: Test email sent successfully
      400:
        description: Missing or invalid email
      502:
        description: Email provider rejected the message or is not configured
    """
    try:
        data = request.get_json(silent=True) or {}
        email = check_email(data.get("email"))
        if not email:
            return jsonify({"status": "error", "message": "Email address is required"}), 400

        result = email_service.send_test_email(email)
        if not result.get("success"):
            return jsonify({"status": "error", "message": "Failed to send test email", "details": result.get("error")}), 502

        return jsonify({"status": "success", "message": result["message"], "email_id": result.get("email_id")}), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except Exception as e:
        current_app.logger.error(f"Error sending test email: {e}")
        return jsonify({"status": "error", "message": "Failed to send test email", "details": str(e)}), 500
