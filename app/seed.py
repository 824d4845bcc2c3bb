"""Reference rows every installation needs, plus the demo Super Admin."""
from sqlalchemy import select

from app.extensions import db
from app.models import CategoryTypes, UserPositions, UserTypes, Users, SUPER_ADMIN_TYPE_ID
from app.utils.auth_utils import hash_password

USER_TYPES = [
    (1, "Super Admin", "مدير عام"),
    (2, "Admin", "مدير"),
    (3, "Developer", "مطور عقاري"),
    (4, "Customer", "عميل"),
]

USER_POSITIONS = [
    (1, "CEO", "الرئيس التنفيذي"),
    (2, "Manager", "مدير"),
    (3, "Sales", "مبيعات"),
    (4, "Support", "دعم"),
]

CATEGORY_TYPES = [
    (1, "Retail", "تجزئة"),
    (2, "Food & Beverage", "أطعمة ومشروبات"),
    (3, "Entertainment", "ترفيه"),
    (4, "Services", "خدمات"),
    (5, "Others", "أخرى"),
]


def _ensure(model, rows, en_field, ar_field):
    added = 0
    for row_id, en_name, ar_name in rows:
        if db.session.get(model, row_id) is None:
            db.session.add(model(id=row_id, **{en_field: en_name, ar_field: ar_name}))
            added += 1
    return added


def seed_lookups():
    """Insert missing user types, positions and shop categories. Idempotent."""
    added = _ensure(UserTypes, USER_TYPES, "type_en_name", "type_ar_name")
    added += _ensure(UserPositions, USER_POSITIONS, "position_en_name", "position_ar_name")
    added += _ensure(CategoryTypes, CATEGORY_TYPES, "type_en_name", "type_ar_name")
    db.session.commit()
    return added


def seed_admin(email, password, name="Super Admin"):
    """Create the Super Admin account unless the email is already taken."""
    user = db.session.scalar(select(Users).where(Users.email == email))
    if user:
        return user

    user = Users(
        user_name=name,
        email=email,
        password_hash=hash_password(password),
        user_type=SUPER_ADMIN_TYPE_ID,
        user_position=1,
        is_active=True,
        is_verified=True,
    )
    db.session.add(user)
    db.session.commit()
    return user
