from flask import Blueprint, jsonify, request, current_app
from app.extensions import db
from sqlalchemy import func
from app.models import Users, Malls, Shops, Bookings, Payments, CategoryTypes
from app.services.dashboard_service import (
    as_datetime,
    month_windows,
    occupancy_rate,
    percent_change,
    to_float,
)
from app.utils.auth_utils import admin_required
from app.utils.validation import ValidationError

admin_analytics_bp = Blueprint(
    "admin_analytics_bp",
    __name__,
    url_prefix="/api/admin/analytics",
)

RANGES = {"3months": 3, "6months": 6, "12months": 12}
DEFAULT_RANGE = "6months"
TOP_MALLS = 5


def _range_windows():
    value = request.args.get("range") or DEFAULT_RANGE
    if value not in RANGES:
        raise ValidationError(
            f"range must be one of: {', '.join(RANGES)}", field="range"
        )
    return month_windows(RANGES[value])


def _users_before(moment):
    return (
        db.session.query(func.count(Users.id)).filter(Users.created_at < moment).scalar() or 0
    )


def _completed_payments(start, end):
    """Completed payments dated inside [start, end)."""
    paid_on = func.coalesce(Payments.paid_at, Payments.created_at)
    return (
        db.session.query(Payments)
        .filter(Payments.payment_status == "completed")
        .filter(paid_on >= start, paid_on < end)
    )


def _revenue(start, end):
    paid_on = func.coalesce(Payments.paid_at, Payments.created_at)
    total = (
        db.session.query(func.sum(Payments.amount))
        .filter(Payments.payment_status == "completed")
        .filter(paid_on >= start, paid_on < end)
        .scalar()
    )
    return to_float(total)


def _revenue_by(group_column, start, end):
    """Completed-payment revenue grouped through booking → shop."""
    paid_on = func.coalesce(Payments.paid_at, Payments.created_at)
    rows = (
        db.session.query(group_column, func.sum(Payments.amount))
        .join(Bookings, Payments.booking_id == Bookings.id)
        .join(Shops, Bookings.shop_id == Shops.id)
        .filter(Payments.payment_status == "completed")
        .filter(paid_on >= start, paid_on < end)
        .group_by(group_column)
        .all()
    )
    return {key: to_float(total) for key, total in rows}


def _with_errors(build):
    try:
        return jsonify({"status": "success", "data": build()}), 200
    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400
    except Exception as e:
        current_app.logger.error(f"Error building analytics: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


# -------------------------------------------------------------------
# 1) SUMMARY: users, occupancy, latest month revenue, user growth
# -------------------------------------------------------------------
@admin_analytics_bp.route("/summary", methods=["GET"])
@admin_required
def get_summary():
    """
    Headline analytics for the selected range
    ---
    tags:
      - Admin Analytics
    parameters:
      - in: query
        name: range
        type: string
        enum: [3months, 6months, 12months]
    responses:
      200:
        description: totalUsers, occupancyRate, monthlyRevenue, growthRate
      400:
        description: Unknown range
    """

    def build():
        windows = _range_windows()
        _, range_start, _ = windows[0]
        _, last_start, last_end = windows[-1]

        total_users = db.session.query(func.count(Users.id)).scalar() or 0
        total_shops = db.session.query(func.count(Shops.id)).scalar() or 0
        rented = (
            db.session.query(func.count(Shops.id)).filter(Shops.status == "rented").scalar() or 0
        )
        return {
            "totalUsers": total_users,
            "occupancyRate": occupancy_rate(rented, total_shops),
            "monthlyRevenue": _revenue(as_datetime(last_start), as_datetime(last_end)),
            "growthRate": percent_change(total_users, _users_before(as_datetime(range_start))),
        }

    return _with_errors(build)


# -------------------------------------------------------------------
# 2) USER GROWTH: cumulative, new and active users per month
# -------------------------------------------------------------------
@admin_analytics_bp.route("/user-growth", methods=["GET"])
@admin_required
def get_user_growth():
    def build():
        data = []
        for label, start, end in _range_windows():
            start_dt, end_dt = as_datetime(start), as_datetime(end)
            total = _users_before(end_dt)
            active = (
                db.session.query(func.count(Users.id))
                .filter(Users.created_at < end_dt, Users.is_active.is_(True))
                .scalar()
                or 0
            )
            data.append({
                "month": label,
                "users": total,
                "newUsers": total - _users_before(start_dt),
                "activeUsers": active,
            })
        return data

    return _with_errors(build)


# -------------------------------------------------------------------
# 3) REVENUE: completed payments per month
# -------------------------------------------------------------------
@admin_analytics_bp.route("/revenue", methods=["GET"])
@admin_required
def get_revenue():
    def build():
        data = []
        for label, start, end in _range_windows():
            start_dt, end_dt = as_datetime(start), as_datetime(end)
            data.append({
                "month": label,
                "revenue": _revenue(start_dt, end_dt),
                "payments": _completed_payments(start_dt, end_dt).count(),
            })
        return data

    return _with_errors(build)


# -------------------------------------------------------------------
# 4) MALL PERFORMANCE: top malls by revenue with occupancy
# -------------------------------------------------------------------
@admin_analytics_bp.route("/mall-performance", methods=["GET"])
@admin_required
def get_mall_performance():
    """
    Top 5 malls by completed-payment revenue over the range.
    Malls without revenue still rank by their shop count.
    """

    def build():
        windows = _range_windows()
        start, end = as_datetime(windows[0][1]), as_datetime(windows[-1][2])
        revenue = _revenue_by(Shops.mall_id, start, end)

        shop_counts = dict(
            db.session.query(Shops.mall_id, func.count(Shops.id)).group_by(Shops.mall_id).all()
        )
        rented_counts = dict(
            db.session.query(Shops.mall_id, func.count(Shops.id))
            .filter(Shops.status == "rented")
            .group_by(Shops.mall_id)
            .all()
        )

        data = []
        for mall_id, name in db.session.query(Malls.id, Malls.en_name).all():
            shops = shop_counts.get(mall_id, 0)
            data.append({
                "id": mall_id,
                "name": name,
                "shops": shops,
                "occupancy": occupancy_rate(rented_counts.get(mall_id, 0), shops),
                "revenue": revenue.get(mall_id, 0.0),
            })
        data.sort(key=lambda m: (m["revenue"], m["shops"]), reverse=True)
        return data[:TOP_MALLS]

    return _with_errors(build)


# -------------------------------------------------------------------
# 5) CATEGORY BREAKDOWN: share of shops and revenue per category
# -------------------------------------------------------------------
@admin_analytics_bp.route("/category-breakdown", methods=["GET"])
@admin_required
def get_category_breakdown():
    def build():
        windows = _range_windows()
        start, end = as_datetime(windows[0][1]), as_datetime(windows[-1][2])
        revenue = _revenue_by(Shops.category_type_id, start, end)

        counts = dict(
            db.session.query(Shops.category_type_id, func.count(Shops.id))
            .group_by(Shops.category_type_id)
            .all()
        )
        total_shops = sum(counts.values())

        data = []
        for category in db.session.query(CategoryTypes).order_by(CategoryTypes.id).all():
            count = counts.get(category.id, 0)
            data.append({
                "name": category.type_en_name,
                "name_ar": category.type_ar_name,
                "shops": count,
                "value": round(count / total_shops * 100, 1) if total_shops else 0,
                "revenue": revenue.get(category.id, 0.0),
            })
        return data

    return _with_errors(build)
