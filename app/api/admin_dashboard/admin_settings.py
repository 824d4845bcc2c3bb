from flask import Blueprint, jsonify, request, current_app
from app.extensions import db
from app.services import settings_service
from app.utils.auth_utils import admin_required
from app.utils.validation import ValidationError

admin_settings_bp = Blueprint(
    "admin_settings_bp",
    __name__,
    url_prefix="/api/admin/settings",
)


@admin_settings_bp.route("", methods=["GET"])
@admin_required
def get_settings():
    """
    Current general settings (stored values over defaults)
    ---
    tags:
      - Admin Settings
    responses:
      200:
        description: Settings document
    """
    try:
        return jsonify({
            "status": "success",
            "settings": settings_service.get_settings(settings_service.GENERAL),
        }), 200
    except Exception as e:
        current_app.logger.error(f"Error loading settings: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@admin_settings_bp.route("", methods=["PUT"])
@admin_required
def update_settings():
    """
    Partially update general settings
    ---
    tags:
      - Admin Settings
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            siteName: {type: string}
            maintenanceMode: {type: boolean}
            registrationEnabled: {type: boolean}
            emailNotifications: {type: boolean}
            backupFrequency: {type: string, enum: [hourly, daily, weekly, monthly]}
            maxFileSize: {type: integer, minimum: 1, maximum: 100}
            theme: {type: string, enum: [light, dark, system]}
            language: {type: string, enum: [en, ar]}
    responses:
      200:
        description: Settings saved; returns the merged document
      400:
        description: Unknown key or invalid value
    """
    try:
        data = request.get_json(silent=True)
        settings = settings_service.update_settings(settings_service.GENERAL, data)
        return jsonify({
            "status": "success",
            "message": "Settings saved successfully",
            "settings": settings,
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving settings: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@admin_settings_bp.route("/reset", methods=["POST"])
@admin_required
def reset_settings():
    try:
        settings = settings_service.reset_settings(settings_service.GENERAL)
        return jsonify({
            "status": "success",
            "message": "Settings reset to defaults",
            "settings": settings,
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error resetting settings: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500
