# Shop management: units inside malls, with pricing and availability
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from ...extensions import db
from ...models import (
    Shops,
    Malls,
    CategoryTypes,
    SHOP_STATUSES,
    SALE_TYPES,
    FINISHING_TYPES,
    VIEW_TYPES,
)
from ...utils.auth_utils import token_required
from ...utils.export_utils import csv_response
from ...utils.filtering import count_by, filter_rows, sum_field
from ...utils.i18n import add_labels
from ...utils.serializers import serialize_shop
from ...utils.validation import (
    ValidationError,
    check_choice,
    check_email,
    optional_str,
    parse_bool,
    parse_date,
    parse_decimal,
    parse_float,
    parse_int,
    require_fields,
    require_text,
)

shops_bp = Blueprint("shops", __name__, url_prefix="/api/shops")

SEARCH_FIELDS = [
    "title",
    "shop_number",
    "mall.ar_name",
    "mall.en_name",
    "category_type.type_en_name",
    "category_type.type_ar_name",
]

CSV_COLUMNS = {
    "ID": "id",
    "Title": "title",
    "Shop Number": "shop_number",
    "Mall": "mall.en_name",
    "Category": "category_type.type_en_name",
    "Floor": "floor_number",
    "Area": "unit_area",
    "Monthly Rent": "monthly_rent",
    "Sale Price": "sale_price",
    "Sale Type": "sale_type",
    "Status": "status",
}


def _load_shops():
    stmt = (
        select(Shops)
        .options(joinedload(Shops.mall), joinedload(Shops.category_type))
        .order_by(Shops.created_at.desc(), Shops.id.desc())
    )
    return [serialize_shop(s) for s in db.session.scalars(stmt).unique()]


def _shop_fields(data):
    require_fields(
        data,
        ["title", "mall_id", "category_type_id"],
        "Please fill in required fields: Title, Mall, and Category",
    )

    mall_id = parse_int(data.get("mall_id"), "mall_id")
    category_type_id = parse_int(data.get("category_type_id"), "category_type_id")
    if not db.session.get(Malls, mall_id):
        raise ValidationError("Unknown mall", field="mall_id")
    if not db.session.get(CategoryTypes, category_type_id):
        raise ValidationError("Unknown category", field="category_type_id")

    sale_type = data.get("sale_type") or "rent"
    finishing_type = data.get("finishing_type") or "not_finished"
    status = data.get("status") or "available"
    view_type = data.get("view_type") or "corridor"
    check_choice("sale_type", sale_type, SALE_TYPES)
    check_choice("finishing_type", finishing_type, FINISHING_TYPES)
    check_choice("status", status, SHOP_STATUSES)
    check_choice("view_type", view_type, VIEW_TYPES)

    return {
        "title": require_text(data["title"], "title"),
        "mall_id": mall_id,
        "category_type_id": category_type_id,
        "shop_number": optional_str(data.get("shop_number")),
        "floor_number": parse_int(data.get("floor_number"), "floor_number"),
        "phone_number": optional_str(data.get("phone_number")),
        "whatsapp_number": optional_str(data.get("whatsapp_number")),
        "email": check_email(data.get("email")),
        "unit_area": parse_float(data.get("unit_area"), "unit_area"),
        "monthly_rent": parse_decimal(data.get("monthly_rent"), "monthly_rent"),
        "sale_price": parse_decimal(data.get("sale_price"), "sale_price"),
        "sale_type": sale_type,
        "finishing_type": finishing_type,
        "delivery_date": parse_date(data.get("delivery_date"), "delivery_date"),
        "status": status,
        "description": optional_str(data.get("description")),
        "view_type": view_type,
        "is_corner_shop": parse_bool(data.get("is_corner_shop"), "is_corner_shop"),
        "has_storage": parse_bool(data.get("has_storage"), "has_storage"),
        "electricity_capacity": parse_int(
            data.get("electricity_capacity"), "electricity_capacity"
        ),
        "security_deposit": parse_decimal(data.get("security_deposit"), "security_deposit"),
        # Saving a shop from the admin form always reactivates it
        "is_active": True,
    }


@shops_bp.route("", methods=["GET"])
@token_required
def list_shops():
    """
    List shops
    ---
    tags:
      - Shops
    parameters:
      - in: query
        name: search
        type: string
        description: Matches title, shop number, mall or category names
      - in: query
        name: status
        type: string
        enum: [all, available, reserved, sold, rented]
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
        description: Shops ordered newest first
    """
    try:
        rows = filter_rows(
            _load_shops(),
            search=request.args.get("search"),
            fields=SEARCH_FIELDS,
            status_field="status",
            status=request.args.get("status"),
        )

        if request.args.get("format") == "csv":
            return csv_response(rows, CSV_COLUMNS, "shops")

        add_labels(rows, ["status"], request.args.get("locale"))
        return jsonify({"status": "success", "count": len(rows), "shops": rows}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching shops: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch shops", "details": str(e)}), 500


@shops_bp.route("/stats", methods=["GET"])
@token_required
def shop_stats():
    """Card totals for the shop screen, including rent across all units."""
    try:
        rows = _load_shops()
        counts = count_by(rows, "status", SHOP_STATUSES)
        return jsonify({
            "status": "success",
            "stats": {
                "total": len(rows),
                **counts,
                "total_monthly_rent": sum_field(rows, "monthly_rent"),
            },
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error computing shop stats: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch shop stats", "details": str(e)}), 500


@shops_bp.route("/<int:shop_id>", methods=["GET"])
@token_required
def get_shop(shop_id):
    shop = db.session.get(Shops, shop_id)
    if not shop:
        return jsonify({"status": "error", "message": "Shop not found"}), 404
    return jsonify({"status": "success", "shop": serialize_shop(shop)}), 200


@shops_bp.route("", methods=["POST"])
@token_required
def create_shop():
    """
    Create a shop
    ---
    tags:
      - Shops
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [title, mall_id, category_type_id]
          properties:
            title: {type: string}
            mall_id: {type: integer}
            category_type_id: {type: integer}
            shop_number: {type: string}
            floor_number: {type: integer}
            monthly_rent: {type: number}
            sale_price: {type: number}
            sale_type: {type: string, enum: [rent, sale, both]}
            status: {type: string, enum: [available, reserved, sold, rented]}
    responses:
      201:
        description: Shop created successfully
      400:
        description: Validation error
    """
    try:
        data = request.get_json(silent=True) or {}
        shop = Shops(**_shop_fields(data))
        db.session.add(shop)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Shop created successfully",
            "shop": serialize_shop(shop),
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving shop: {e}")
        return jsonify({"status": "error", "message": "Failed to save shop", "details": str(e)}), 500


@shops_bp.route("/<int:shop_id>", methods=["PUT"])
@token_required
def update_shop(shop_id):
    try:
        shop = db.session.get(Shops, shop_id)
        if not shop:
            return jsonify({"status": "error", "message": "Shop not found"}), 404

        data = request.get_json(silent=True) or {}
        for key, value in _shop_fields(data).items():
            setattr(shop, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Shop updated successfully",
            "shop": serialize_shop(shop),
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving shop {shop_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to save shop", "details": str(e)}), 500


@shops_bp.route("/<int:shop_id>", methods=["DELETE"])
@token_required
def delete_shop(shop_id):
    try:
        shop = db.session.get(Shops, shop_id)
        if not shop:
            return jsonify({"status": "error", "message": "Shop not found"}), 404

        db.session.delete(shop)
        db.session.commit()
        return jsonify({"status": "success", "message": "Shop deleted successfully"}), 200

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Shop is still referenced by other records", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting shop {shop_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete shop", "details": str(e)}), 500
