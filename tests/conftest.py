"""
Pytest configuration and shared fixtures for the Brandspace admin API tests.
"""

import os
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from dotenv import load_dotenv
from flask import Flask

test_env_path = Path(__file__).parent / ".env.test"
if test_env_path.exists():
    load_dotenv(test_env_path, override=True)
    print(f" Loaded test environment from: {test_env_path}")
else:
    print(f" WARNING: .env.test not found at {test_env_path}")

# Must be set before main is imported: the email service and config read it at import
os.environ["FLASK_ENV"] = "testing"
os.environ["TESTING"] = "True"

from main import create_app  # noqa: E402
from app.extensions import db as database  # noqa: E402
from app.models import (  # noqa: E402
    Base,
    Bookings,
    Developers,
    Inquiries,
    Malls,
    Payments,
    Shops,
    Users,
)
from app.seed import seed_admin, seed_lookups  # noqa: E402
from app.utils.auth_utils import hash_password  # noqa: E402

ADMIN_EMAIL = "admin@brandspace-test.com"
ADMIN_PASSWORD = "password123"
CUSTOMER_TYPE_ID = 4


def is_safe_test_database(db_uri: str) -> bool:
    """
    Check if the database URI is safe for testing.
    Returns False if it appears to be a production database.
    """
    if not db_uri:
        return False

    dangerous_patterns = [
        "rlwy.net",
        "railway.internal",
        "supabase.co",
        "amazonaws.com",
        "azure.com",
        "prod",
        "production",
    ]
    safe_patterns = ["sqlite", "brandspace_test", "test", "localhost", "127.0.0.1"]

    db_uri_lower = db_uri.lower()
    for pattern in dangerous_patterns:
        if pattern in db_uri_lower:
            print(f" DANGER: Found production pattern '{pattern}' in database URL!")
            return False

    for pattern in safe_patterns:
        if pattern in db_uri_lower:
            return True
    return False


@pytest.fixture(scope="session")
def app():
    """Create and configure a test app instance."""
    app = create_app()

    app.config.update(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "SCHEDULER_ENABLED": False,
            "DEFAULT_ADMIN_EMAIL": ADMIN_EMAIL,
            "DEFAULT_ADMIN_PASSWORD": ADMIN_PASSWORD,
        }
    )

    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if not is_safe_test_database(db_uri):
        print(f" DANGER: Database URL appears to be production: {db_uri}")
        print(" Tests aborted to prevent data loss!")
        sys.exit(1)

    print(f"✅ Running tests against: {db_uri}")
    yield app


@pytest.fixture
def db(app: Flask):
    """Fresh tables plus lookup rows and the Super Admin for every test."""
    with app.app_context():
        if not app.config.get("TESTING"):
            print(" DANGER: Not in testing mode!")
            sys.exit(1)

        Base.metadata.drop_all(bind=database.engine)
        Base.metadata.create_all(bind=database.engine)
        seed_lookups()
        seed_admin(ADMIN_EMAIL, ADMIN_PASSWORD)

        yield database

        database.session.remove()
        Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def client(app, db):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def login(client, email, password):
    response = client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
    )
    if response.status_code == 200:
        return {"Authorization": f"Bearer {response.json['token']}"}
    return {}


@pytest.fixture
def admin_user(db):
    return db.session.query(Users).filter_by(email=ADMIN_EMAIL).one()


@pytest.fixture
def auth_headers(client):
    """Authorization headers for the seeded Super Admin."""
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def customer(db):
    """A tenant account, used as the customer on bookings and inquiries."""
    user = Users(
        user_name="Sara Customer",
        email="customer@example.com",
        phone="0500000000",
        password_hash=hash_password("customerpass"),
        user_type=CUSTOMER_TYPE_ID,
        is_active=True,
        is_verified=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def customer_headers(client, customer):
    return login(client, "customer@example.com", "customerpass")


@pytest.fixture
def test_user_data():
    """Provide a dictionary of user data for signup/login tests."""
    return {
        "name": "New User",
        "email": "newuser@example.com",
        "phone": "555-0199",
        "password": "password123",
        "userType": CUSTOMER_TYPE_ID,
    }


@pytest.fixture
def developer(db):
    developer = Developers(
        company_name="Emaar Test Developments",
        email="dev@example.com",
        phone="0111111111",
    )
    db.session.add(developer)
    db.session.commit()
    return developer


@pytest.fixture
def mall(db, developer):
    mall = Malls(
        ar_name="مول الاختبار",
        en_name="Test Mall",
        city="Riyadh",
        district="Olaya",
        developer_id=developer.id,
        construction_status="completed",
        is_active=True,
    )
    db.session.add(mall)
    db.session.commit()
    return mall


@pytest.fixture
def shop(db, mall):
    shop = Shops(
        title="Corner Unit A1",
        mall_id=mall.id,
        category_type_id=1,
        shop_number="A1",
        floor_number=1,
        monthly_rent=Decimal("12000.00"),
        status="available",
    )
    db.session.add(shop)
    db.session.commit()
    return shop


@pytest.fixture
def booking(db, shop, customer, developer):
    today = date.today()
    booking = Bookings(
        shop_id=shop.id,
        user_id=customer.id,
        developer_id=developer.id,
        booking_type="rent",
        start_date=today,
        end_date=today + timedelta(days=365),
        monthly_amount=Decimal("12000.00"),
        total_amount=Decimal("144000.00"),
        status="confirmed",
    )
    db.session.add(booking)
    db.session.commit()
    return booking


@pytest.fixture
def payment(db, booking, customer):
    payment = Payments(
        booking_id=booking.id,
        user_id=customer.id,
        amount=Decimal("12000.00"),
        payment_type="monthly_rent",
        payment_method="bank_transfer",
        payment_status="pending",
        due_date=date.today() + timedelta(days=30),
    )
    db.session.add(payment)
    db.session.commit()
    return payment


@pytest.fixture
def inquiry(db, shop, customer, developer):
    inquiry = Inquiries(
        shop_id=shop.id,
        user_id=customer.id,
        developer_id=developer.id,
        inquiry_type="pricing",
        message="Is the monthly rent negotiable?",
        contact_preference="email",
    )
    db.session.add(inquiry)
    db.session.commit()
    return inquiry
