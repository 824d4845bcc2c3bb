from flask import Blueprint, jsonify, request, current_app
from app.extensions import db
from app.utils.auth_utils import token_required
from ..models import (
    Bookings,
    CategoryTypes,
    Developers,
    Malls,
    Shops,
    UserPositions,
    UserTypes,
    Users,
)

lookups_bp = Blueprint("lookups", __name__, url_prefix="/api/lookups")

LIMIT = 500


def _options(query, name_column, to_dict):
    """
    Run a select-box query, optionally narrowed by ?q=<prefix>.

    Returns the rows ordered by their display column, capped at LIMIT.
    """
    prefix = request.args.get("q", default="", type=str).strip()
    if prefix:
        query = query.filter(name_column.ilike(f"{prefix}%"))
    rows = query.order_by(name_column).limit(LIMIT).all()
    return jsonify({"status": "success", "items": [to_dict(r) for r in rows]}), 200


@lookups_bp.route("/user-types", methods=["GET"])
@token_required
def user_types():
    """
    GET /api/lookups/user-types
    Purpose: Options for the user type select.
    """
    return _options(
        db.session.query(UserTypes.id, UserTypes.type_en_name, UserTypes.type_ar_name),
        UserTypes.type_en_name,
        lambda r: {"id": r.id, "type_en_name": r.type_en_name, "type_ar_name": r.type_ar_name},
    )


@lookups_bp.route("/user-positions", methods=["GET"])
@token_required
def user_positions():
    return _options(
        db.session.query(
            UserPositions.id, UserPositions.position_en_name, UserPositions.position_ar_name
        ),
        UserPositions.position_en_name,
        lambda r: {
            "id": r.id,
            "position_en_name": r.position_en_name,
            "position_ar_name": r.position_ar_name,
        },
    )


@lookups_bp.route("/developers", methods=["GET"])
@token_required
def developers():
    return _options(
        db.session.query(Developers.id, Developers.company_name),
        Developers.company_name,
        lambda r: {"id": r.id, "company_name": r.company_name},
    )


@lookups_bp.route("/category-types", methods=["GET"])
@token_required
def category_types():
    return _options(
        db.session.query(CategoryTypes.id, CategoryTypes.type_en_name, CategoryTypes.type_ar_name),
        CategoryTypes.type_en_name,
        lambda r: {"id": r.id, "type_en_name": r.type_en_name, "type_ar_name": r.type_ar_name},
    )


@lookups_bp.route("/malls", methods=["GET"])
@token_required
def malls():
    return _options(
        db.session.query(Malls.id, Malls.en_name, Malls.ar_name),
        Malls.en_name,
        lambda r: {"id": r.id, "en_name": r.en_name, "ar_name": r.ar_name},
    )


@lookups_bp.route("/shops", methods=["GET"])
@token_required
def shops():
    """
    GET /api/lookups/shops
    Purpose: Shop select for bookings and inquiries.
    Input: ?mall_id=<id> (optional) narrows to one mall.
    """
    query = db.session.query(Shops.id, Shops.title, Shops.mall_id)
    mall_id = request.args.get("mall_id", type=int)
    if mall_id:
        query = query.filter(Shops.mall_id == mall_id)
    return _options(
        query,
        Shops.title,
        lambda r: {"id": r.id, "title": r.title, "mall_id": r.mall_id},
    )


@lookups_bp.route("/users", methods=["GET"])
@token_required
def users():
    return _options(
        db.session.query(Users.id, Users.user_name, Users.email),
        Users.user_name,
        lambda r: {"id": r.id, "user_name": r.user_name, "email": r.email},
    )


@lookups_bp.route("/bookings", methods=["GET"])
@token_required
def bookings():
    """
    GET /api/lookups/bookings
    Purpose: Booking select for the payment form, labelled "#id - shop".
    """
    try:
        rows = (
            db.session.query(Bookings.id, Bookings.user_id, Shops.title)
            .outerjoin(Shops, Bookings.shop_id == Shops.id)
            .order_by(Bookings.id.desc())
            .limit(LIMIT)
            .all()
        )
        items = [
            {
                "id": r.id,
                "user_id": r.user_id,
                "label": f"#{r.id} - {r.title or 'Unknown Shop'}",
            }
            for r in rows
        ]
        return jsonify({"status": "success", "items": items}), 200

    except Exception as e:
        current_app.logger.error(f"Error loading booking options: {e}")
        return jsonify({"status": "error", "message": "Failed to load bookings", "details": str(e)}), 500
