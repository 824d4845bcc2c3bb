"""
Aggregates behind the dashboard cards and the reports/analytics screens.

The arithmetic lives in small pure helpers so it can be checked without a
database; the query functions only gather counts and rows.
"""
from datetime import date, datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from app.extensions import db
from app.models import Bookings, Inquiries, Malls, Shops, Users, utcnow

RECENT_ACTIVITY_LIMIT = 10
RECENT_PER_SOURCE = 5
RECENT_INQUIRY_DAYS = 7


def occupancy_rate(rented, total):
    """Whole-number percentage of rented shops, 0 when there are none."""
    if not total:
        return 0
    return round(rented / total * 100)


def percent_change(current, previous, digits=1):
    if not previous:
        return 0
    return round((current - previous) / previous * 100, digits)


def to_float(value):
    """SUM() over DECIMAL returns Decimal or None."""
    if value is None:
        return 0.0
    return float(value)


def month_start(day):
    return date(day.year, day.month, 1)


def add_months(day, months):
    """First day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_windows(months, today=None):
    """
    The last ``months`` calendar months ending with the current one, oldest
    first, as ``(label, start, end)`` with ``end`` exclusive.
    """
    today = today or utcnow().date()
    current = month_start(today)
    windows = []
    for offset in range(months - 1, -1, -1):
        start = add_months(current, -offset)
        end = add_months(start, 1)
        windows.append((start.strftime("%Y-%m"), start, end))
    return windows


def as_datetime(day):
    return datetime(day.year, day.month, day.day)


def avatar_for(name):
    if not name:
        return "UN"
    return name[:2].upper()


def activity_record(kind, row):
    user_name = row.user.user_name if row.user else None
    return {
        "id": row.id,
        "user": user_name or "Unknown User",
        "action": f"Created new {kind}",
        "target": (row.shop.title if row.shop else None) or "Unknown Shop",
        "time": row.created_at.isoformat() if row.created_at else None,
        "avatar": avatar_for(user_name),
        "type": kind,
    }


def build_recent_activity(inquiries, bookings, limit=RECENT_ACTIVITY_LIMIT):
    """Merge inquiry and booking rows into one newest-first feed."""
    records = [activity_record("inquiry", row) for row in inquiries]
    records += [activity_record("booking", row) for row in bookings]
    records.sort(key=lambda r: r["time"] or "", reverse=True)
    return records[:limit]


def dashboard_stats(now=None):
    now = now or utcnow()

    total_malls = db.session.query(func.count(Malls.id)).scalar() or 0
    total_shops = db.session.query(func.count(Shops.id)).scalar() or 0
    rented_shops = (
        db.session.query(func.count(Shops.id)).filter(Shops.status == "rented").scalar() or 0
    )
    total_bookings = db.session.query(func.count(Bookings.id)).scalar() or 0
    total_revenue = db.session.query(func.sum(Bookings.total_amount)).scalar()
    recent_inquiries = (
        db.session.query(func.count(Inquiries.id))
        .filter(Inquiries.created_at >= now - timedelta(days=RECENT_INQUIRY_DAYS))
        .scalar()
        or 0
    )
    active_users = (
        db.session.query(func.count(Users.id)).filter(Users.is_active.is_(True)).scalar() or 0
    )

    this_month = month_start(now.date())
    last_month = add_months(this_month, -1)
    next_month = add_months(this_month, 1)
    bookings_this_month = _count_between(Bookings, this_month, next_month)
    bookings_last_month = _count_between(Bookings, last_month, this_month)

    return {
        "totalMalls": total_malls,
        "totalShops": total_shops,
        "totalBookings": total_bookings,
        "totalRevenue": to_float(total_revenue),
        "recentInquiries": recent_inquiries,
        "activeUsers": active_users,
        "occupancyRate": occupancy_rate(rented_shops, total_shops),
        "monthlyGrowth": percent_change(bookings_this_month, bookings_last_month),
    }


def _count_between(model, start, end):
    return (
        db.session.query(func.count(model.id))
        .filter(model.created_at >= as_datetime(start), model.created_at < as_datetime(end))
        .scalar()
        or 0
    )


def recent_activity(limit=RECENT_ACTIVITY_LIMIT):
    inquiries = (
        db.session.query(Inquiries)
        .options(joinedload(Inquiries.user), joinedload(Inquiries.shop))
        .order_by(Inquiries.created_at.desc(), Inquiries.id.desc())
        .limit(RECENT_PER_SOURCE)
        .all()
    )
    bookings = (
        db.session.query(Bookings)
        .options(joinedload(Bookings.user), joinedload(Bookings.shop))
        .order_by(Bookings.created_at.desc(), Bookings.id.desc())
        .limit(RECENT_PER_SOURCE)
        .all()
    )
    return build_recent_activity(inquiries, bookings, limit)
