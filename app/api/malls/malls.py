# Mall management: list, create, edit, delete malls
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from ...extensions import db
from ...models import Malls, Developers, CONSTRUCTION_STATUSES
from ...utils.auth_utils import token_required
from ...utils.export_utils import csv_response
from ...utils.filtering import count_by, filter_rows
from ...utils.i18n import add_labels
from ...utils.serializers import serialize_mall
from ...utils.validation import (
    ValidationError,
    check_choice,
    optional_str,
    parse_date,
    parse_float,
    parse_int,
    require_fields,
    require_text,
)

malls_bp = Blueprint("malls", __name__, url_prefix="/api/malls")

SEARCH_FIELDS = ["ar_name", "en_name", "city", "district", "developer.company_name"]

CSV_COLUMNS = {
    "ID": "id",
    "English Name": "en_name",
    "Arabic Name": "ar_name",
    "City": "city",
    "District": "district",
    "Developer": "developer.company_name",
    "Total Area": "total_area",
    "Floors": "total_floors",
    "Parking": "parking_spaces",
    "Status": "construction_status",
    "Completion Date": "completion_date",
}


def _load_malls():
    stmt = (
        select(Malls)
        .options(joinedload(Malls.developer))
        .order_by(Malls.created_at.desc(), Malls.id.desc())
    )
    return [serialize_mall(m) for m in db.session.scalars(stmt).unique()]


def _mall_fields(data):
    require_fields(
        data,
        ["ar_name", "en_name", "city"],
        "Please fill in required fields: Arabic name, English name, and city",
    )

    developer_id = parse_int(data.get("developer_id"), "developer_id")
    # The edit form sends "0" when no developer is selected
    if developer_id == 0:
        developer_id = None
    if developer_id is not None and not db.session.get(Developers, developer_id):
        raise ValidationError("Unknown developer", field="developer_id")

    status = data.get("construction_status") or "planning"
    check_choice("construction_status", status, CONSTRUCTION_STATUSES)

    return {
        "ar_name": require_text(data["ar_name"], "ar_name"),
        "en_name": require_text(data["en_name"], "en_name"),
        "description": optional_str(data.get("description")),
        "address": optional_str(data.get("address")),
        "city": require_text(data["city"], "city"),
        "district": optional_str(data.get("district")),
        "developer_id": developer_id,
        "total_area": parse_float(data.get("total_area"), "total_area"),
        "total_floors": parse_int(data.get("total_floors"), "total_floors"),
        "parking_spaces": parse_int(data.get("parking_spaces"), "parking_spaces"),
        "construction_status": status,
        "completion_date": parse_date(data.get("completion_date"), "completion_date"),
    }


@malls_bp.route("", methods=["GET"])
@token_required
def list_malls():
    """
    List malls
    ---
    tags:
      - Malls
    parameters:
      - in: query
        name: search
        type: string
        description: Matches names, city, district or developer
      - in: query
        name: status
        type: string
        enum: [all, planning, under_construction, completed]
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
        description: Malls ordered newest first
    """
    try:
        rows = filter_rows(
            _load_malls(),
            search=request.args.get("search"),
            fields=SEARCH_FIELDS,
            status_field="construction_status",
            status=request.args.get("status"),
        )

        if request.args.get("format") == "csv":
            return csv_response(rows, CSV_COLUMNS, "malls")

        add_labels(rows, ["construction_status"], request.args.get("locale"))
        return jsonify({"status": "success", "count": len(rows), "malls": rows}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching malls: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch malls", "details": str(e)}), 500


@malls_bp.route("/stats", methods=["GET"])
@token_required
def mall_stats():
    try:
        rows = _load_malls()
        counts = count_by(rows, "construction_status", CONSTRUCTION_STATUSES)
        return jsonify({
            "status": "success",
            "stats": {"total": len(rows), **counts},
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error computing mall stats: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch mall stats", "details": str(e)}), 500


@malls_bp.route("/<int:mall_id>", methods=["GET"])
@token_required
def get_mall(mall_id):
    mall = db.session.get(Malls, mall_id)
    if not mall:
        return jsonify({"status": "error", "message": "Mall not found"}), 404
    return jsonify({"status": "success", "mall": serialize_mall(mall)}), 200


@malls_bp.route("", methods=["POST"])
@token_required
def create_mall():
    """
    Create a mall
    ---
    tags:
      - Malls
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [ar_name, en_name, city]
          properties:
            ar_name: {type: string}
            en_name: {type: string}
            city: {type: string}
            district: {type: string}
            developer_id: {type: integer}
            total_area: {type: number}
            total_floors: {type: integer}
            parking_spaces: {type: integer}
            construction_status: {type: string}
            completion_date: {type: string, format: date}
    responses:
      201:
        description: Mall created successfully
      400:
        description: Validation error
    """
    try:
        data = request.get_json(silent=True) or {}
        mall = Malls(**_mall_fields(data), is_active=True)
        db.session.add(mall)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Mall created successfully",
            "mall": serialize_mall(mall),
        }), 201

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving mall: {e}")
        return jsonify({"status": "error", "message": "Failed to save mall", "details": str(e)}), 500


@malls_bp.route("/<int:mall_id>", methods=["PUT"])
@token_required
def update_mall(mall_id):
    try:
        mall = db.session.get(Malls, mall_id)
        if not mall:
            return jsonify({"status": "error", "message": "Mall not found"}), 404

        data = request.get_json(silent=True) or {}
        for key, value in _mall_fields(data).items():
            setattr(mall, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Mall updated successfully",
            "mall": serialize_mall(mall),
        }), 200

    except ValidationError as e:
        return jsonify({"status": "error", "message": e.message}), 400

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Database integrity error", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving mall {mall_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to save mall", "details": str(e)}), 500


@malls_bp.route("/<int:mall_id>", methods=["DELETE"])
@token_required
def delete_mall(mall_id):
    try:
        mall = db.session.get(Malls, mall_id)
        if not mall:
            return jsonify({"status": "error", "message": "Mall not found"}), 404

        db.session.delete(mall)
        db.session.commit()
        return jsonify({"status": "success", "message": "Mall deleted successfully"}), 200

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Mall is still referenced by other records", "details": str(e.orig)}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting mall {mall_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete mall", "details": str(e)}), 500
