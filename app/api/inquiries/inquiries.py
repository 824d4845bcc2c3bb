# Inquiry management: questions from prospective tenants about shops
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from ...extensions import db
from ...models import (
    Inquiries,
    Developers,
    Shops,
    Users,
    CONTACT_PREFERENCES,
    INQUIRY_STATUSES,
    INQUIRY_TYPES,
    utcnow,
)
from ...services import settings_service
from ...services.email_service import email_service
from ...services.notification_service import notify
from ...utils.auth_utils import token_required
from ...utils.export_utils import csv_response
from ...utils.filtering import count_by, filter_rows
from ...utils.i18n import add_labels
from ...utils.serializers import serialize_inquiry
from ...utils.validation import (
    ValidationError,
    check_choice,
    optional_str,
    parse_int,
    require_fields,
    require_text,
)

inquiries_bp = Blueprint("inquiries", __name__, url_prefix="/api/inquiries")

SEARCH_FIELDS = [
    "shop.title",
    "user.user_name",
    "user.email",
    "developer.company_name",
    "message",
]

CSV_COLUMNS = {
    "ID": "id",
    "Shop": "shop.title",
    "Customer": "user.user_name",
    "Email": "user.email",
    "Developer": "developer.company_name",
    "Type": "inquiry_type",
    "Message": "message",
    "Contact Preference": "contact_preference",
    "Status": "status",
    "Response": "response",
    "Responded At": "responded_at",
    "Created At": "created_at",
}


def _load_inquiries():
    stmt = (
        select(Inquiries)
        .options(
            joinedload(Inquiries.shop),
            joinedload(Inquiries.user),
            joinedload(Inquiries.developer),
        )
        .order_by(Inquiries.created_at.desc(), Inquiries.id.desc())
    )
    return [serialize_inquiry(i) for i in db.session.scalars(stmt).unique()]


def _inquiry_fields(data):
    require_fields(
        data, ["shop_id", "user_id", "developer_id", "message"], "Please fill in required fields"
    )

    shop_id = parse_int(data.get("shop_id"), "shop_id")
    user_id = parse_int(data.get("user_id"), "user_id")
    developer_id = parse_int(data.get("developer_id"), "developer_id")
    if not db.session.get(Shops, shop_id):
        raise ValidationError("Unknown shop", field="shop_id")
    if not db.session.get(Users, user_id):
        raise ValidationError("Unknown user", field="user_id")
    if not db.session.get(Developers, developer_id):
        raise ValidationError("Unknown developer", field="developer_id")

    inquiry_type = data.get("inquiry_type") or "general"
    contact_preference = data.get("contact_preference") or "email"
    status = data.get("status") or "pending"
    check_choice("inquiry_type", inquiry_type, INQUIRY_TYPES)
    check_choice("contact_preference", contact_preference, CONTACT_PREFERENCES)
    check_choice("status", status, INQUIRY_STATUSES)

    response = optional_str(data.get("response"))
    return {
        "shop_id": shop_id,
        "user_id": user_id,
        "developer_id": developer_id,
        "inquiry_type": inquiry_type,
        "message": require_text(data["message"], "message"),
        "contact_preference": contact_preference,
        "preferred_contact_time": optional_str(data.get("preferred_contact_time")),
        "status": status,
        "response": response,
        "responded_at": utcnow() if response and status == "responded" else None,
    }


@inquiries_bp.route("", methods=["GET"])
@token_required
def list_inquiries():
    """
    List inquiries
    ---
    tags:
      - Inquiries
    parameters:
      - in: query
        name: search
        type: string
        description: Matches shop, customer, developer or the message text
      - in: query
        name: status
        type: string
        enum: [all, pending, responded, closed]
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
        description: Inquiries ordered newest first
    """
    try:
        rows = filter_rows(
            _load_inquiries(),
            search=request.args.get("search"),
            fields=SEARCH_FIELDS,
            status_field="status",
            status=request.args.get("status"),
        )

        if request.args.get("format") == "csv":
            return csv_response(rows, CSV_COLUMNS, "inquiries")

        add_labels(rows, ["status"], request.args.get("locale"))
        return jsonify({"status": "success", "count": len(rows), "inquiries": rows}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching inquiries: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch inquiries", "details": str(e)}), 500


@inquiries_bp.route("/stats", methods=["GET"])
@token_required
def inquiry_stats():
    try:
        rows = _load_inquiries()
        counts = count_by(rows, "status", INQUIRY_STATUSES)
        return jsonify({"status": "success", "stats": {"total": len(rows), **counts}}), 200

    except Exception as e:
        current_app.logger.error(f"Error computing inquiry stats: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch inquiry stats", "details": str(e)}), 500


@inquiries_bp.route("/<int:inquiry_id>", methods=["GET"])
@token_required
def get_inquiry(inquiry_id):
    inquiry = db.session.get(Inquiries, inquiry_id)
    if not inquiry:
        return jsonify({"status": "error", "message": "Inquiry not found"}), 404
    return jsonify({"status": "success", "inquiry": serialize_inquiry(inquiry)}), 200


@inquiries_bp.route("", methods=["POST"])
@token_required
def create_inquiry():
    """
    Create an inquiry
    ---
    tags:
      - Inquiries
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [shop_id, user_id, developer_id, message]
          properties:
            shop_id: {type: integer}
            user_id: {type: integer}
            developer_id: {type: integer}
            message: {type: string}
            inquiry_type: {type: string, enum: [general, pricing, availability, visit]}
            contact_preference: {type: string, enum: [email, phone, whatsapp]}
            status: {type: string, enum: [pending, responded, closed]}
            response: {type: string}
    responses:
      201:
        description: Inquiry created successfully
      400:
        description: Validation error
    """
    try:
        data = request.get_json(silent=True) or {}
        inquiry = Inquiries(**_inquiry_fields(data))
        db.session.add(inquiry)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Inquiry created successfully",
            "inquiry": serialize_inquiry(inquiry),
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving inquiry: {e}")
        return jsonify({"status": "error", "message": "Failed to save inquiry", "details": str(e)}), 500


@inquiries_bp.route("/<int:inquiry_id>", methods=["PUT"])
@token_required
def update_inquiry(inquiry_id):
    try:
        inquiry = db.session.get(Inquiries, inquiry_id)
        if not inquiry:
            return jsonify({"status": "error", "message": "Inquiry not found"}), 404

        data = request.get_json(silent=True) or {}
        for key, value in _inquiry_fields(data).items():
            setattr(inquiry, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Inquiry updated successfully",
            "inquiry": serialize_inquiry(inquiry),
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving inquiry {inquiry_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to save inquiry", "details": str(e)}), 500


@inquiries_bp.route("/<int:inquiry_id>", methods=["DELETE"])
@token_required
def delete_inquiry(inquiry_id):
    try:
        inquiry = db.session.get(Inquiries, inquiry_id)
        if not inquiry:
            return jsonify({"status": "error", "message": "Inquiry not found"}), 404

        db.session.delete(inquiry)
        db.session.commit()
        return jsonify({"status": "success", "message": "Inquiry deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting inquiry {inquiry_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete inquiry", "details": str(e)}), 500


@inquiries_bp.route("/<int:inquiry_id>/respond", methods=["POST"])
@token_required
def respond_to_inquiry(inquiry_id):
    """
    Reply to an inquiry
    ---
    tags:
      - Inquiries
    parameters:
      - in: path
        name: inquiry_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [response]
          properties:
            response: {type: string}
    responses:
      200:
        description: Response saved; the inquirer is notified in-app and, when enabled, by email
      400:
        description: Empty response
      404:
        description: Inquiry not found
    """
    try:
        inquiry = db.session.get(Inquiries, inquiry_id)
        if not inquiry:
            return jsonify({"status": "error", "message": "Inquiry not found"}), 404

        data = request.get_json(silent=True) or {}
        response_text = optional_str(data.get("response"))
        if not response_text:
            return jsonify({"status": "error", "message": "Response text is required"}), 400

        inquiry.response = response_text
        inquiry.status = "responded"
        inquiry.responded_at = utcnow()

        shop_title = inquiry.shop.title if inquiry.shop else None
        notify(
            inquiry.user_id,
            "Inquiry answered",
            f"Your inquiry about {shop_title or 'a shop'} has a new response.",
            type="inquiry",
            related_id=inquiry.id,
        )
        db.session.commit()

        email_sent = False
        if inquiry.user and settings_service.get_setting(settings_service.GENERAL, "emailNotifications"):
            result = email_service.send_inquiry_response(
                to_email=inquiry.user.email,
                customer_name=inquiry.user.user_name,
                shop_title=shop_title,
                original_message=inquiry.message,
                response_text=response_text,
                inquiry_id=inquiry.id,
            )
            email_sent = result.get("success", False)
            if not email_sent:
                current_app.logger.warning(
                    f"Inquiry {inquiry.id} response email not sent: {result.get('error')}"
                )

        return jsonify({
            "status": "success",
            "message": "Response sent successfully",
            "email_sent": email_sent,
            "inquiry": serialize_inquiry(inquiry),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error responding to inquiry {inquiry_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to respond to inquiry", "details": str(e)}), 500
