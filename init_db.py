from app.extensions import db
from app.models import Base
from app.seed import seed_admin, seed_lookups
from main import create_app

app = create_app()

with app.app_context():
    Base.metadata.create_all(bind=db.engine)
    print("Tables created (existing tables left untouched)")

    added = seed_lookups()
    print(f"Seeded {added} lookup row(s)")

    admin = seed_admin(app.config["DEFAULT_ADMIN_EMAIL"], app.config["DEFAULT_ADMIN_PASSWORD"])
    print(f"Super Admin ready: {admin.email}")

print("Database initialized successfully!")
