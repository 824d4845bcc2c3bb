# Booking management: rent and purchase bookings plus contract files
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from ...extensions import db
from ...models import (
    Bookings,
    Developers,
    Shops,
    Users,
    BOOKING_STATUSES,
    BOOKING_PAYMENT_STATUSES,
    BOOKING_TYPES,
)
from ...services import settings_service
from ...utils.auth_utils import token_required
from ...utils.export_utils import csv_response
from ...utils.filtering import count_by, filter_rows, sum_field
from ...utils.i18n import add_labels
from ...utils.s3_utils import (
    UploadError,
    contract_key,
    delete_file_from_s3,
    file_extension,
    upload_file_to_s3,
)
from ...utils.serializers import serialize_booking
from ...utils.validation import (
    ValidationError,
    check_choice,
    optional_str,
    parse_date,
    parse_decimal,
    parse_int,
    require_fields,
)

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")

SEARCH_FIELDS = ["shop.title", "user.user_name", "user.email", "developer.company_name"]

CSV_COLUMNS = {
    "ID": "id",
    "Shop": "shop.title",
    "Customer": "user.user_name",
    "Email": "user.email",
    "Developer": "developer.company_name",
    "Type": "booking_type",
    "Start Date": "start_date",
    "End Date": "end_date",
    "Monthly Amount": "monthly_amount",
    "Total Amount": "total_amount",
    "Status": "status",
    "Payment Status": "payment_status",
    "Created At": "created_at",
}


def _load_bookings():
    stmt = (
        select(Bookings)
        .options(
            joinedload(Bookings.shop),
            joinedload(Bookings.user),
            joinedload(Bookings.developer),
        )
        .order_by(Bookings.created_at.desc(), Bookings.id.desc())
    )
    return [serialize_booking(b) for b in db.session.scalars(stmt).unique()]


def _booking_fields(data):
    require_fields(data, ["shop_id", "user_id", "developer_id"], "Please fill in required fields")

    shop_id = parse_int(data.get("shop_id"), "shop_id")
    user_id = parse_int(data.get("user_id"), "user_id")
    developer_id = parse_int(data.get("developer_id"), "developer_id")
    if not db.session.get(Shops, shop_id):
        raise ValidationError("Unknown shop", field="shop_id")
    if not db.session.get(Users, user_id):
        raise ValidationError("Unknown user", field="user_id")
    if not db.session.get(Developers, developer_id):
        raise ValidationError("Unknown developer", field="developer_id")

    booking_type = data.get("booking_type") or "rent"
    status = data.get("status") or "pending"
    payment_status = data.get("payment_status") or "pending"
    check_choice("booking_type", booking_type, BOOKING_TYPES)
    check_choice("status", status, BOOKING_STATUSES)
    check_choice("payment_status", payment_status, BOOKING_PAYMENT_STATUSES)

    start_date = parse_date(data.get("start_date"), "start_date")
    end_date = parse_date(data.get("end_date"), "end_date")
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date must be on or after the start date", field="end_date")

    return {
        "shop_id": shop_id,
        "user_id": user_id,
        "developer_id": developer_id,
        "booking_type": booking_type,
        "start_date": start_date,
        "end_date": end_date,
        "monthly_amount": parse_decimal(data.get("monthly_amount"), "monthly_amount"),
        "total_amount": parse_decimal(data.get("total_amount"), "total_amount"),
        "security_deposit": parse_decimal(data.get("security_deposit"), "security_deposit"),
        "commission_amount": parse_decimal(data.get("commission_amount"), "commission_amount"),
        "contract_duration": parse_int(data.get("contract_duration"), "contract_duration"),
        "status": status,
        "payment_status": payment_status,
        "notes": optional_str(data.get("notes")),
    }


@bookings_bp.route("", methods=["GET"])
@token_required
def list_bookings():
    """
    List bookings
    ---
    tags:
      - Bookings
    parameters:
      - in: query
        name: search
        type: string
        description: Matches shop, customer name or email, developer
      - in: query
        name: status
        type: string
        enum: [all, pending, confirmed, cancelled, completed]
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
        description: Bookings ordered newest first
    """
    try:
        rows = filter_rows(
            _load_bookings(),
            search=request.args.get("search"),
            fields=SEARCH_FIELDS,
            status_field="status",
            status=request.args.get("status"),
        )

        if request.args.get("format") == "csv":
            return csv_response(rows, CSV_COLUMNS, "bookings")

        add_labels(rows, ["status", "payment_status"], request.args.get("locale"))
        return jsonify({"status": "success", "count": len(rows), "bookings": rows}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching bookings: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch bookings", "details": str(e)}), 500


@bookings_bp.route("/stats", methods=["GET"])
@token_required
def booking_stats():
    try:
        rows = _load_bookings()
        counts = count_by(rows, "status", BOOKING_STATUSES)
        return jsonify({
            "status": "success",
            "stats": {
                "total": len(rows),
                **counts,
                "total_amount": sum_field(rows, "total_amount"),
            },
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error computing booking stats: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch booking stats", "details": str(e)}), 500


@bookings_bp.route("/<int:booking_id>", methods=["GET"])
@token_required
def get_booking(booking_id):
    booking = db.session.get(Bookings, booking_id)
    if not booking:
        return jsonify({"status": "error", "message": "Booking not found"}), 404
    return jsonify({"status": "success", "booking": serialize_booking(booking)}), 200


@bookings_bp.route("", methods=["POST"])
@token_required
def create_booking():
    """
    Create a booking
    ---
    tags:
      - Bookings
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [shop_id, user_id, developer_id]
          properties:
            shop_id: {type: integer}
            user_id: {type: integer}
            developer_id: {type: integer}
            booking_type: {type: string, enum: [rent, purchase]}
            start_date: {type: string, format: date}
            end_date: {type: string, format: date}
            monthly_amount: {type: number}
            total_amount: {type: number}
            status: {type: string}
            payment_status: {type: string}
    responses:
      201:
        description: Booking created successfully
      400:
        description: Validation error
    """
    try:
        data = request.get_json(silent=True) or {}
        booking = Bookings(**_booking_fields(data))
        db.session.add(booking)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Booking created successfully",
            "booking": serialize_booking(booking),
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving booking: {e}")
        return jsonify({"status": "error", "message": "Failed to save booking", "details": str(e)}), 500


@bookings_bp.route("/<int:booking_id>", methods=["PUT"])
@token_required
def update_booking(booking_id):
    try:
        booking = db.session.get(Bookings, booking_id)
        if not booking:
            return jsonify({"status": "error", "message": "Booking not found"}), 404

        data = request.get_json(silent=True) or {}
        for key, value in _booking_fields(data).items():
            setattr(booking, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Booking updated successfully",
            "booking": serialize_booking(booking),
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving booking {booking_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to save booking", "details": str(e)}), 500


@bookings_bp.route("/<int:booking_id>", methods=["DELETE"])
@token_required
def delete_booking(booking_id):
    try:
        booking = db.session.get(Bookings, booking_id)
        if not booking:
            return jsonify({"status": "error", "message": "Booking not found"}), 404

        db.session.delete(booking)
        db.session.commit()
        return jsonify({"status": "success", "message": "Booking deleted successfully"}), 200

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Booking is still referenced by other records", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting booking {booking_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete booking", "details": str(e)}), 500


@bookings_bp.route("/<int:booking_id>/contract", methods=["POST"])
@token_required
def upload_contract(booking_id):
    """
    Upload a signed contract for a booking
    ---
    tags:
      - Bookings
    consumes:
      - multipart/form-data
    parameters:
      - in: path
        name: booking_id
        type: integer
        required: true
      - in: formData
        name: contract_file
        type: file
        required: true
    responses:
      200:
        description: Contract stored, booking returned with its URL
      400:
        description: Missing file, disallowed type or too large
      404:
        description: Booking not found
    """
    try:
        booking = db.session.get(Bookings, booking_id)
        if not booking:
            return jsonify({"status": "error", "message": "Booking not found"}), 404

        contract = request.files.get("contract_file")
        if not contract or not contract.filename:
            return jsonify({"status": "error", "message": "contract_file is required"}), 400

        allowed = settings_service.get_setting(settings_service.GENERAL, "allowedFileTypes")
        if file_extension(contract.filename) not in allowed:
            return jsonify({
                "status": "error",
                "message": f"File type not allowed. Allowed types: {', '.join(allowed)}"
            }), 400

        max_mb = settings_service.get_setting(settings_service.GENERAL, "maxFileSize")
        contract.stream.seek(0, 2)
        size = contract.stream.tell()
        contract.stream.seek(0)
        if size > max_mb * 1024 * 1024:
            return jsonify({
                "status": "error",
                "message": f"File exceeds the {max_mb} MB limit"
            }), 400

        bucket_name = current_app.config.get("S3_BUCKET_NAME")
        if not bucket_name:
            return jsonify({"status": "error", "message": "S3_BUCKET_NAME is not configured"}), 500

        previous = booking.contract_file
        booking.contract_file = upload_file_to_s3(
            contract,
            contract_key(booking_id, contract.filename),
            bucket_name,
            content_type=contract.mimetype,
        )
        db.session.commit()

        if previous:
            try:
                delete_file_from_s3(previous, bucket_name)
            except UploadError as e:
                current_app.logger.warning(f"Could not remove old contract for booking {booking_id}: {e}")

        return jsonify({
            "status": "success",
            "message": "Contract uploaded successfully",
            "booking": serialize_booking(booking),
        }), 200

    except UploadError as e:
        db.session.rollback()
        current_app.logger.error(f"Contract upload failed for booking {booking_id}: {e}")
        return jsonify({"status": "error", "message": "File upload failed", "details": str(e)}), 502

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error uploading contract for booking {booking_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to upload contract", "details": str(e)}), 500
