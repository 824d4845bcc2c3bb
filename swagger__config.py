"""
Swagger/OpenAPI configuration for the Brandspace Admin API
"""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Brandspace Admin API",
        "description": "REST API for managing malls, shops, bookings, payments, inquiries and notifications, with reports, analytics and admin settings",
        "contact": {"email": "support@brandspace.com"},
        "version": "1.0.0",
    },
    "host": "",
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"',
        }
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Authentication", "description": "Login, signup and session tokens"},
        {"name": "Users", "description": "User management"},
        {"name": "Malls", "description": "Mall management"},
        {"name": "Shops", "description": "Shop units inside malls"},
        {"name": "Bookings", "description": "Rent and purchase bookings, contract uploads"},
        {"name": "Payments", "description": "Payments recorded against bookings"},
        {"name": "Inquiries", "description": "Questions from prospective tenants"},
        {"name": "Notifications", "description": "In-app notifications and email checks"},
        {"name": "Lookups", "description": "Options for form select boxes"},
        {"name": "Dashboard", "description": "Home screen cards and recent activity"},
        {"name": "Admin Reports", "description": "Summary, monthly figures and exports"},
        {"name": "Admin Analytics", "description": "Growth, revenue and mall performance"},
        {"name": "Admin Settings", "description": "Platform settings"},
        {"name": "Admin Security", "description": "Security settings, audit trail and sessions"},
        {"name": "Admin System", "description": "Connectivity and table counts"},
    ],
    "definitions": {
        "Error": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "error"},
                "message": {"type": "string"},
                "details": {"type": "string"},
            },
        },
        "Success": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "success"},
                "message": {"type": "string"},
            },
        },
        "SessionUser": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "name": {"type": "string"},
                "email": {"type": "string", "format": "email"},
                "phone": {"type": "string"},
                "userType": {"type": "integer"},
                "userPosition": {"type": "integer"},
                "isVerified": {"type": "boolean"},
                "isActive": {"type": "boolean"},
            },
        },
        "Mall": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "ar_name": {"type": "string"},
                "en_name": {"type": "string"},
                "city": {"type": "string"},
                "district": {"type": "string"},
                "developer_id": {"type": "integer"},
                "construction_status": {
                    "type": "string",
                    "enum": ["planning", "under_construction", "completed"],
                },
                "is_active": {"type": "boolean"},
            },
        },
        "Shop": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "title": {"type": "string"},
                "mall_id": {"type": "integer"},
                "category_type_id": {"type": "integer"},
                "monthly_rent": {"type": "number", "format": "float"},
                "sale_price": {"type": "number", "format": "float"},
                "status": {
                    "type": "string",
                    "enum": ["available", "reserved", "sold", "rented"],
                },
            },
        },
        "Booking": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "shop_id": {"type": "integer"},
                "user_id": {"type": "integer"},
                "developer_id": {"type": "integer"},
                "booking_type": {"type": "string", "enum": ["rent", "purchase"]},
                "start_date": {"type": "string", "format": "date"},
                "end_date": {"type": "string", "format": "date"},
                "total_amount": {"type": "number", "format": "float"},
                "status": {
                    "type": "string",
                    "enum": ["pending", "confirmed", "cancelled", "completed"],
                },
                "contract_file": {"type": "string"},
            },
        },
        "Payment": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "booking_id": {"type": "integer"},
                "user_id": {"type": "integer"},
                "amount": {"type": "number", "format": "float"},
                "payment_status": {
                    "type": "string",
                    "enum": ["pending", "completed", "failed", "refunded"],
                },
                "due_date": {"type": "string", "format": "date"},
                "paid_at": {"type": "string", "format": "date-time"},
            },
        },
        "Inquiry": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "shop_id": {"type": "integer"},
                "user_id": {"type": "integer"},
                "message": {"type": "string"},
                "status": {"type": "string", "enum": ["pending", "responded", "closed"]},
                "response": {"type": "string"},
                "responded_at": {"type": "string", "format": "date-time"},
            },
        },
        "Notification": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "user_id": {"type": "integer"},
                "title": {"type": "string"},
                "message": {"type": "string"},
                "type": {
                    "type": "string",
                    "enum": ["general", "inquiry", "booking", "payment", "system"],
                },
                "is_read": {"type": "boolean"},
            },
        },
    },
}
