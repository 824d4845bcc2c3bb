from flask import Blueprint, jsonify, current_app
from app.services import dashboard_service
from app.utils.auth_utils import token_required

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("/stats", methods=["GET"])
@token_required
def get_dashboard_stats():
    """
    Headline numbers for the admin home screen
    ---
    tags:
      - Dashboard
    responses:
      200:
        description: Dashboard cards
        schema:
          type: object
          properties:
            totalMalls: {type: integer}
            totalShops: {type: integer}
            totalBookings: {type: integer}
            totalRevenue: {type: number}
            recentInquiries: {type: integer, description: Inquiries from the last 7 days}
            activeUsers: {type: integer}
            occupancyRate: {type: integer, description: Rented shops as a whole percentage}
            monthlyGrowth: {type: number, description: Bookings this month vs last month, percent}
    """
    try:
        return jsonify({"status": "success", **dashboard_service.dashboard_stats()}), 200
    except Exception as e:
        current_app.logger.error(f"Error fetching dashboard stats: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500


@dashboard_bp.route("/recent-activity", methods=["GET"])
@token_required
def get_recent_activity():
    """
    Latest inquiries and bookings, newest first
    ---
    tags:
      - Dashboard
    responses:
      200:
        description: Up to 10 activity records
    """
    try:
        activities = dashboard_service.recent_activity()
        return jsonify({"status": "success", "activities": activities}), 200
    except Exception as e:
        current_app.logger.error(f"Error fetching recent activity: {e}")
        return jsonify({"status": "error", "message": "Internal server error", "details": str(e)}), 500
