from flask import Blueprint, jsonify, current_app
from app.extensions import db
from sqlalchemy import func, select
from app.models import UserTypes, Users, Malls, Shops, Bookings, Payments, Inquiries, Notifications
from app.utils.auth_utils import admin_required

admin_system_bp = Blueprint("admin_system_bp", __name__, url_prefix="/api/admin/system")


@admin_system_bp.route("/connection", methods=["GET"])
def check_connection():
    """
    Database connectivity check
    ---
    tags:
      - Admin System
    responses:
      200:
        description: Database reachable
      503:
        description: Query against user_types failed
    """
    try:
        db.session.execute(select(UserTypes.id).limit(1)).all()
        return jsonify({"success": True}), 200
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Database connection check failed: {e}")
        return jsonify({"success": False, "error": str(e)}), 503


@admin_system_bp.route("/status", methods=["GET"])
@admin_required
def get_status():
    """
    Returns the database backend and row counts per table.
    """
    tables = {
        "users": Users,
        "malls": Malls,
        "shops": Shops,
        "bookings": Bookings,
        "payments": Payments,
        "inquiries": Inquiries,
        "notifications": Notifications,
    }
    counts = {
        name: db.session.query(func.count(model.id)).scalar() or 0
        for name, model in tables.items()
    }
    return jsonify({
        "status": "success",
        "database": db.engine.dialect.name,
        "scheduler": current_app.config.get("SCHEDULER_ENABLED", False),
        "tables": counts,
    }), 200
