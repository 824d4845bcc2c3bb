# Payment management: rent, deposits and commissions recorded against bookings
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from ...extensions import db
from ...models import (
    Payments,
    Bookings,
    Users,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    PAYMENT_TYPES,
    utcnow,
)
from ...utils.auth_utils import token_required
from ...utils.export_utils import csv_response
from ...utils.filtering import count_by, filter_rows, sum_field
from ...utils.i18n import add_labels
from ...utils.serializers import serialize_payment
from ...utils.validation import (
    ValidationError,
    check_choice,
    optional_str,
    parse_date,
    parse_decimal,
    parse_int,
    require_fields,
)

payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")

SEARCH_FIELDS = [
    "booking.shop.title",
    "user.user_name",
    "user.email",
    "transaction_id",
    "amount",
]

CSV_COLUMNS = {
    "ID": "id",
    "Booking": "booking_id",
    "Shop": "booking.shop.title",
    "Customer": "user.user_name",
    "Email": "user.email",
    "Amount": "amount",
    "Type": "payment_type",
    "Method": "payment_method",
    "Status": "payment_status",
    "Transaction": "transaction_id",
    "Due Date": "due_date",
    "Paid At": "paid_at",
}


def _load_payments():
    stmt = (
        select(Payments)
        .options(
            joinedload(Payments.booking).joinedload(Bookings.shop),
            joinedload(Payments.user),
        )
        .order_by(Payments.created_at.desc(), Payments.id.desc())
    )
    return [serialize_payment(p) for p in db.session.scalars(stmt).unique()]


def _payment_fields(data):
    require_fields(data, ["booking_id", "user_id", "amount"], "Please fill in required fields")

    booking_id = parse_int(data.get("booking_id"), "booking_id")
    user_id = parse_int(data.get("user_id"), "user_id")
    if not db.session.get(Bookings, booking_id):
        raise ValidationError("Unknown booking", field="booking_id")
    if not db.session.get(Users, user_id):
        raise ValidationError("Unknown user", field="user_id")

    amount = parse_decimal(data.get("amount"), "amount")
    if amount <= 0:
        raise ValidationError("amount must be greater than zero", field="amount")

    payment_type = data.get("payment_type") or "monthly_rent"
    payment_method = data.get("payment_method") or "credit_card"
    payment_status = data.get("payment_status") or "pending"
    check_choice("payment_type", payment_type, PAYMENT_TYPES)
    check_choice("payment_method", payment_method, PAYMENT_METHODS)
    check_choice("payment_status", payment_status, PAYMENT_STATUSES)

    return {
        "booking_id": booking_id,
        "user_id": user_id,
        "amount": amount,
        "payment_type": payment_type,
        "payment_method": payment_method,
        "payment_status": payment_status,
        "transaction_id": optional_str(data.get("transaction_id")),
        "due_date": parse_date(data.get("due_date"), "due_date"),
        "paid_at": utcnow() if payment_status == "completed" else None,
    }


@payments_bp.route("", methods=["GET"])
@token_required
def list_payments():
    """
    List payments
    ---
    tags:
      - Payments
    parameters:
      - in: query
        name: search
        type: string
        description: Matches shop, customer, transaction id or amount
      - in: query
        name: status
        type: string
        enum: [all, pending, completed, failed, refunded]
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
        description: Payments ordered newest first
    """
    try:
        rows = filter_rows(
            _load_payments(),
            search=request.args.get("search"),
            fields=SEARCH_FIELDS,
            status_field="payment_status",
            status=request.args.get("status"),
        )

        if request.args.get("format") == "csv":
            return csv_response(rows, CSV_COLUMNS, "payments")

        add_labels(rows, ["payment_status"], request.args.get("locale"))
        return jsonify({"status": "success", "count": len(rows), "payments": rows}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching payments: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch payments", "details": str(e)}), 500


@payments_bp.route("/stats", methods=["GET"])
@token_required
def payment_stats():
    try:
        rows = _load_payments()
        counts = count_by(rows, "payment_status", PAYMENT_STATUSES)
        return jsonify({
            "status": "success",
            "stats": {
                "total": len(rows),
                **counts,
                "total_amount": sum_field(rows, "amount"),
            },
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error computing payment stats: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch payment stats", "details": str(e)}), 500


@payments_bp.route("/<int:payment_id>", methods=["GET"])
@token_required
def get_payment(payment_id):
    payment = db.session.get(Payments, payment_id)
    if not payment:
        return jsonify({"status": "error", "message": "Payment not found"}), 404
    return jsonify({"status": "success", "payment": serialize_payment(payment)}), 200


@payments_bp.route("", methods=["POST"])
@token_required
def create_payment():
    """
    Record a payment
    ---
    tags:
      - Payments
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [booking_id, user_id, amount]
          properties:
            booking_id: {type: integer}
            user_id: {type: integer}
            amount: {type: number}
            payment_type: {type: string}
            payment_method: {type: string}
            payment_status: {type: string, enum: [pending, completed, failed, refunded]}
            transaction_id: {type: string}
            due_date: {type: string, format: date}
    responses:
      201:
        description: Payment created successfully; paid_at is set when completed
      400:
        description: Validation error
    """
    try:
        data = request.get_json(silent=True) or {}
        payment = Payments(**_payment_fields(data))
        db.session.add(payment)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Payment created successfully",
            "payment": serialize_payment(payment),
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving payment: {e}")
        return jsonify({"status": "error", "message": "Failed to save payment", "details": str(e)}), 500


@payments_bp.route("/<int:payment_id>", methods=["PUT"])
@token_required
def update_payment(payment_id):
    try:
        payment = db.session.get(Payments, payment_id)
        if not payment:
            return jsonify({"status": "error", "message": "Payment not found"}), 404

        data = request.get_json(silent=True) or {}
        for key, value in _payment_fields(data).items():
            setattr(payment, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Payment updated successfully",
            "payment": serialize_payment(payment),
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving payment {payment_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to save payment", "details": str(e)}), 500


@payments_bp.route("/<int:payment_id>", methods=["DELETE"])
@token_required
def delete_payment(payment_id):
    try:
        payment = db.session.get(Payments, payment_id)
        if not payment:
            return jsonify({"status": "error", "message": "Payment not found"}), 404

        db.session.delete(payment)
        db.session.commit()
        return jsonify({"status": "success", "message": "Payment deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting payment {payment_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete payment", "details": str(e)}), 500
