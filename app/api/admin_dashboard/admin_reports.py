# app/api/admin_dashboard/admin_reports.py
from flask import Blueprint, jsonify, request, send_file, current_app
from app.extensions import db
from sqlalchemy import func
from sqlalchemy.orm import joinedload
from io import BytesIO
import pandas as pd
from datetime import datetime, timedelta
from app.models import Users, Malls, Shops, Bookings, Payments, Inquiries, utcnow
from app.services.dashboard_service import (
    as_datetime,
    month_windows,
    percent_change,
    to_float,
)
from app.utils.auth_utils import admin_required
from app.utils.export_utils import rows_to_frame
from app.utils.serializers import serialize_booking, serialize_payment
from app.utils.validation import ValidationError, parse_date, parse_int

admin_reports_bp = Blueprint("admin_reports_bp", __name__, url_prefix="/api/admin/reports")

EXPORT_SECTIONS = ("summary", "monthly", "payments", "bookings")
MAX_MONTHS = 24

PAYMENT_COLUMNS = {
    "Payment ID": "id",
    "Booking ID": "booking_id",
    "Shop": "booking.shop.title",
    "Customer": "user.user_name",
    "Amount": "amount",
    "Type": "payment_type",
    "Method": "payment_method",
    "Status": "payment_status",
    "Paid At": "paid_at",
}

BOOKING_COLUMNS = {
    "Booking ID": "id",
    "Shop": "shop.title",
    "Customer": "user.user_name",
    "Developer": "developer.company_name",
    "Type": "booking_type",
    "Status": "status",
    "Total Amount": "total_amount",
    "Created At": "created_at",
}


# -------------------------------------------------------------------
# Query helpers
# -------------------------------------------------------------------
def _count_created(model, start=None, end=None):
    query = db.session.query(func.count(model.id))
    if start is not None:
        query = query.filter(model.created_at >= start)
    if end is not None:
        query = query.filter(model.created_at < end)
    return query.scalar() or 0


def _payment_date():
    return func.coalesce(Payments.paid_at, Payments.created_at)


def completed_revenue(start=None, end=None):
    """Sum of completed payments, dated by paid_at (created_at when missing)."""
    query = db.session.query(func.sum(Payments.amount)).filter(
        Payments.payment_status == "completed"
    )
    if start is not None:
        query = query.filter(_payment_date() >= start)
    if end is not None:
        query = query.filter(_payment_date() < end)
    return to_float(query.scalar())


def report_window(args):
    """
    Resolve ?from=&to= into an inclusive date range.

    Defaults to the first of the current month through today.
    """
    today = utcnow().date()
    date_from = parse_date(args.get("from"), "from") or today.replace(day=1)
    date_to = parse_date(args.get("to"), "to") or today
    if date_from > date_to:
        raise ValidationError("'from' must be on or before 'to'", field="from")
    return date_from, date_to


def previous_window(date_from, date_to):
    length = (date_to - date_from).days + 1
    prev_to = date_from - timedelta(days=1)
    return prev_to - timedelta(days=length - 1), prev_to


def build_summary(date_from, date_to):
    start = as_datetime(date_from)
    end = as_datetime(date_to + timedelta(days=1))
    prev_from, prev_to = previous_window(date_from, date_to)
    prev_start = as_datetime(prev_from)
    prev_end = as_datetime(prev_to + timedelta(days=1))

    today_start = as_datetime(utcnow().date())
    inquiries = _count_created(Inquiries, start, end)
    converted = (
        db.session.query(func.count(Bookings.id))
        .filter(
            Bookings.status.in_(("confirmed", "completed")),
            Bookings.created_at >= start,
            Bookings.created_at < end,
        )
        .scalar()
        or 0
    )
    revenue = completed_revenue(start, end)

    return {
        "from": date_from.isoformat(),
        "to": date_to.isoformat(),
        "totalUsers": _count_created(Users),
        "totalMalls": _count_created(Malls),
        "totalShops": _count_created(Shops),
        "totalRevenue": revenue,
        "bookingsToday": _count_created(Bookings, today_start, today_start + timedelta(days=1)),
        "inquiries": inquiries,
        "activeUsers": db.session.query(func.count(Users.id))
        .filter(Users.is_active.is_(True))
        .scalar()
        or 0,
        "conversionRate": round(converted / inquiries * 100, 1) if inquiries else 0,
        "growth": {
            "users": percent_change(
                _count_created(Users, start, end), _count_created(Users, prev_start, prev_end)
            ),
            "malls": percent_change(
                _count_created(Malls, start, end), _count_created(Malls, prev_start, prev_end)
            ),
            "shops": percent_change(
                _count_created(Shops, start, end), _count_created(Shops, prev_start, prev_end)
            ),
            "revenue": percent_change(revenue, completed_revenue(prev_start, prev_end)),
        },
    }


def build_monthly(months):
    data = []
    for label, start, end in month_windows(months):
        start_dt, end_dt = as_datetime(start), as_datetime(end)
        data.append({
            "month": label,
            "users": _count_created(Users, start_dt, end_dt),
            "malls": _count_created(Malls, start_dt, end_dt),
            "shops": _count_created(Shops, start_dt, end_dt),
            "revenue": completed_revenue(start_dt, end_dt),
        })
    return data


def _months_arg(value, default=6):
    months = parse_int(value, "months") or default
    if not 1 <= months <= MAX_MONTHS:
        raise ValidationError(f"months must be between 1 and {MAX_MONTHS}", field="months")
    return months


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------
@admin_reports_bp.route("/summary", methods=["GET"])
@admin_required
def get_summary():
    """
    Platform totals and growth for a date window
    ---
    tags:
      - Admin Reports
    parameters:
      - in: query
        name: from
        type: string
        format: date
        description: Defaults to the first day of the current month
      - in: query
        name: to
        type: string
        format: date
        description: Defaults to today
    responses:
      200:
        description: Totals, revenue of completed payments, conversion and growth vs the preceding window
      400:
        description: Invalid dates or from after to
    """
    try:
        date_from, date_to = report_window(request.args)
        return jsonify({"status": "success", "summary": build_summary(date_from, date_to)}), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except Exception as e:
        current_app.logger.error(f"Error building report summary: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@admin_reports_bp.route("/monthly", methods=["GET"])
@admin_required
def get_monthly():
    """Per-month new users, malls, shops and revenue for ?months=N (default 6)."""
    try:
        months = _months_arg(request.args.get("months"))
        return jsonify({"status": "success", "monthly": build_monthly(months)}), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except Exception as e:
        current_app.logger.error(f"Error building monthly report: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@admin_reports_bp.route("/export", methods=["POST"])
@admin_required
def export_report():
    """
    Download the report as an Excel workbook or CSV
    ---
    tags:
      - Admin Reports
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            format:
              type: string
              enum: [excel, csv]
            sections:
              type: array
              items:
                type: string
                enum: [summary, monthly, payments, bookings]
            from: {type: string, format: date}
            to: {type: string, format: date}
            months: {type: integer}
    responses:
      200:
        description: File download
      400:
        description: Unknown format or section
    """
    try:
        selected = request.get_json(silent=True) or {}
        export_format = selected.get("format") or "excel"
        if export_format not in ("excel", "csv"):
            raise ValidationError("format must be 'excel' or 'csv'", field="format")

        sections = selected.get("sections") or list(EXPORT_SECTIONS)
        unknown = [s for s in sections if s not in EXPORT_SECTIONS]
        if unknown:
            raise ValidationError(f"Unknown report sections: {', '.join(unknown)}", field="sections")

        months = _months_arg(selected.get("months"))
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = BytesIO()

        if export_format == "csv":
            pd.DataFrame(build_monthly(months)).to_csv(output, index=False, encoding="utf-8")
            output.seek(0)
            return send_file(
                output,
                as_attachment=True,
                download_name=f"Brandspace_Report_{stamp}.csv",
                mimetype="text/csv",
            )

        date_from, date_to = report_window(selected)
        with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
            if "summary" in sections:
                summary = build_summary(date_from, date_to)
                growth = summary.pop("growth")
                rows = [{"Metric": k, "Value": v} for k, v in summary.items()]
                rows += [{"Metric": f"{k} growth %", "Value": v} for k, v in growth.items()]
                pd.DataFrame(rows, columns=["Metric", "Value"]).to_excel(
                    writer, sheet_name="Summary", index=False
                )

            if "monthly" in sections:
                pd.DataFrame(
                    build_monthly(months), columns=["month", "users", "malls", "shops", "revenue"]
                ).to_excel(writer, sheet_name="Monthly", index=False)

            if "payments" in sections:
                payments = (
                    db.session.query(Payments)
                    .options(
                        joinedload(Payments.booking).joinedload(Bookings.shop),
                        joinedload(Payments.user),
                    )
                    .order_by(Payments.created_at.desc())
                    .all()
                )
                rows_to_frame([serialize_payment(p) for p in payments], PAYMENT_COLUMNS).to_excel(
                    writer, sheet_name="Payments", index=False
                )

            if "bookings" in sections:
                bookings = (
                    db.session.query(Bookings)
                    .options(
                        joinedload(Bookings.shop),
                        joinedload(Bookings.user),
                        joinedload(Bookings.developer),
                    )
                    .order_by(Bookings.created_at.desc())
                    .all()
                )
                rows_to_frame([serialize_booking(b) for b in bookings], BOOKING_COLUMNS).to_excel(
                    writer, sheet_name="Bookings", index=False
                )

        output.seek(0)
        return send_file(
            output,
            as_attachment=True,
            download_name=f"Brandspace_Report_{stamp}.xlsx",
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except Exception as e:
        current_app.logger.error(f"Error exporting report: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500
