from flask import Blueprint, jsonify, request, current_app, g
from app.extensions import db
from sqlalchemy import func
from sqlalchemy.orm import joinedload
from datetime import timedelta
from app.models import SecurityEvents, UserSessions, SECURITY_EVENT_TYPES, utcnow
from app.services import settings_service
from app.utils.auth_utils import admin_required, record_security_event
from app.utils.serializers import serialize_security_event, serialize_session
from app.utils.validation import ValidationError, check_choice, parse_int

admin_security_bp = Blueprint(
    "admin_security_bp",
    __name__,
    url_prefix="/api/admin/security",
)

METRICS_DAYS = 30
DEFAULT_EVENT_LIMIT = 50
MAX_EVENT_LIMIT = 500


@admin_security_bp.route("/settings", methods=["GET"])
@admin_required
def get_security_settings():
    return jsonify({
        "status": "success",
        "settings": settings_service.get_settings(settings_service.SECURITY),
    }), 200


@admin_security_bp.route("/settings", methods=["PUT"])
@admin_required
def update_security_settings():
    """
    Toggle security features
    ---
    tags:
      - Admin Security
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            twoFactorAuth: {type: boolean}
            passwordExpiry: {type: boolean}
            sessionTimeout: {type: boolean}
            ipWhitelist: {type: boolean}
            auditLogging: {type: boolean}
            emailAlerts: {type: boolean}
    responses:
      200:
        description: Security settings updated successfully
      400:
        description: Unknown key or non-boolean value
    """
    try:
        data = request.get_json(silent=True)
        settings = settings_service.update_settings(settings_service.SECURITY, data)
        record_security_event("permission_change", g.current_user.email)
        db.session.commit()
        return jsonify({
            "status": "success",
            "message": "Security settings updated successfully",
            "settings": settings,
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving security settings: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@admin_security_bp.route("/events", methods=["GET"])
@admin_required
def get_security_events():
    """
    Audit trail, newest first
    ---
    tags:
      - Admin Security
    parameters:
      - in: query
        name: limit
        type: integer
        default: 50
      - in: query
        name: type
        type: string
        enum: [login, failed_login, password_change, permission_change, logout]
    responses:
      200:
        description: Security events
    """
    try:
        limit = parse_int(request.args.get("limit"), "limit") or DEFAULT_EVENT_LIMIT
        limit = max(1, min(limit, MAX_EVENT_LIMIT))

        query = db.session.query(SecurityEvents)
        event_type = request.args.get("type")
        if event_type and event_type != "all":
            check_choice("type", event_type, SECURITY_EVENT_TYPES)
            query = query.filter(SecurityEvents.event_type == event_type)

        events = (
            query.order_by(SecurityEvents.created_at.desc(), SecurityEvents.id.desc())
            .limit(limit)
            .all()
        )
        return jsonify({
            "status": "success",
            "events": [serialize_security_event(e) for e in events],
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except Exception as e:
        current_app.logger.error(f"Error loading security events: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


def _active_sessions_query(now):
    return db.session.query(UserSessions).filter(
        UserSessions.revoked_at.is_(None),
        UserSessions.expires_at > now,
    )


@admin_security_bp.route("/metrics", methods=["GET"])
@admin_required
def get_security_metrics():
    """Login activity over the last 30 days plus currently active sessions."""
    try:
        now = utcnow()
        since = now - timedelta(days=METRICS_DAYS)

        def count(event_type):
            return (
                db.session.query(func.count(SecurityEvents.id))
                .filter(SecurityEvents.event_type == event_type, SecurityEvents.created_at >= since)
                .scalar()
                or 0
            )

        failed = count("failed_login")
        return jsonify({
            "status": "success",
            "metrics": {
                "loginAttempts": count("login") + failed,
                "failedAttempts": failed,
                "activeSessions": _active_sessions_query(now).count(),
                "passwordChanges": count("password_change"),
            },
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error computing security metrics: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@admin_security_bp.route("/sessions", methods=["GET"])
@admin_required
def get_active_sessions():
    try:
        sessions = (
            _active_sessions_query(utcnow())
            .options(joinedload(UserSessions.user))
            .order_by(UserSessions.last_activity.desc())
            .all()
        )
        current_jti = g.current_session.token_jti
        return jsonify({
            "status": "success",
            "sessions": [serialize_session(s, current_jti) for s in sessions],
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error loading sessions: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@admin_security_bp.route("/sessions/<int:session_id>", methods=["DELETE"])
@admin_required
def revoke_session(session_id):
    try:
        session = db.session.get(UserSessions, session_id)
        if not session:
            return jsonify({"status": "error", "message": "Session not found"}), 404

        if session.revoked_at is None:
            session.revoked_at = utcnow()
            record_security_event("logout", session.user.email if session.user else None)
        db.session.commit()
        return jsonify({"status": "success", "message": "Session revoked"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error revoking session {session_id}: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500
