from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
from flasgger import Swagger
import os

load_dotenv()
from app.config import Config  # noqa: E402
from app.extensions import db  # noqa: E402
from swagger__config import SWAGGER_CONFIG, SWAGGER_TEMPLATE  # noqa: E402
from app.routes.auth import auth_bp  # noqa: E402
from app.routes.lookups import lookups_bp  # noqa: E402
from app.routes.dashboard import dashboard_bp  # noqa: E402
from app.api.users.users import users_bp  # noqa: E402
from app.api.malls.malls import malls_bp  # noqa: E402
from app.api.shops.shops import shops_bp  # noqa: E402
from app.api.bookings.bookings import bookings_bp  # noqa: E402
from app.api.payments.payments import payments_bp  # noqa: E402
from app.api.inquiries.inquiries import inquiries_bp  # noqa: E402
from app.api.communication.notifications import notifications_bp  # noqa: E402
from app.api.admin_dashboard.admin_reports import admin_reports_bp  # noqa: E402
from app.api.admin_dashboard.admin_analytics import admin_analytics_bp  # noqa: E402
from app.api.admin_dashboard.admin_settings import admin_settings_bp  # noqa: E402
from app.api.admin_dashboard.admin_security import admin_security_bp  # noqa: E402
from app.api.admin_dashboard.admin_system import admin_system_bp  # noqa: E402


def create_app(config_object=Config):
    print("Starting create_app()")
    app = Flask(__name__)
    try:
        print("Loading config...")
        app.config.from_object(config_object)
        print(f"Config loaded: {len(app.config)} items")

        print("Initializing CORS...")
        CORS(app)

        print("Initializing database...")
        db.init_app(app)

        print("Initializing Swagger/OpenAPI documentation...")
        host = os.environ.get("API_HOST", "127.0.0.1:5000")
        swagger_template = SWAGGER_TEMPLATE.copy()
        swagger_template["host"] = host

        Swagger(app, config=SWAGGER_CONFIG, template=swagger_template)
        print("Swagger initialized - Access at /api/docs")
        print("Registering blueprints...")

        blueprints = [
            auth_bp,
            lookups_bp,
            dashboard_bp,
            users_bp,
            malls_bp,
            shops_bp,
            bookings_bp,
            payments_bp,
            inquiries_bp,
            notifications_bp,
            admin_reports_bp,
            admin_analytics_bp,
            admin_settings_bp,
            admin_security_bp,
            admin_system_bp,
        ]

        for bp in blueprints:
            app.register_blueprint(bp)
            print(f"  ✓ {bp.name} registered")

        print("All blueprints registered successfully")

        @app.route("/")
        def home():
            """
            Root endpoint - API status
            ---
            tags:
              - Utility
            responses:
              200:
                description: API is running
                schema:
                  type: object
                  properties:
                    status:
                      type: string
                    message:
                      type: string
                    docs_url:
                      type: string
            """
            return {"status": "ok", "message": "Backend is running!", "docs_url": "/api/docs"}, 200

        print(f"Total routes registered: {len(list(app.url_map.iter_rules()))}")

        if app.config.get("SCHEDULER_ENABLED"):
            from app.scheduler import init_scheduler

            init_scheduler(app)

    except Exception as e:
        print(f"Error during app creation: {e}")
        import traceback

        print(f"Full traceback: {traceback.format_exc()}")
        raise

    print("create_app() completed successfully")
    return app


app = create_app()

# Port diagnostics
expected_port = os.environ.get("PORT", "NOT SET")
print(f"PORT environment variable: {expected_port}")


if __name__ == "__main__":
    # Create a .env containing:
    #       DATABASE_URL=mysql+pymysql://<USER>:<PASSWORD>@<HOST>:<PORT>/brandspace
    # then run `python init_db.py` once to create tables and the Super Admin.
    port = int(os.environ.get("PORT", 5000))
    app.run(
        host="0.0.0.0", port=port, debug=os.environ.get("FLASK_ENV") != "production"
    )
