from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKeyConstraint,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()
metadata = Base.metadata


def utcnow():
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Status / type choices shared by the models and the request validators
CONSTRUCTION_STATUSES = ("planning", "under_construction", "completed")
SHOP_STATUSES = ("available", "reserved", "sold", "rented")
SALE_TYPES = ("rent", "sale", "both")
FINISHING_TYPES = ("not_finished", "semi_finished", "fully_finished")
VIEW_TYPES = ("corridor", "street", "internal", "external")
BOOKING_TYPES = ("rent", "purchase")
BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
BOOKING_PAYMENT_STATUSES = ("pending", "partial", "completed")
PAYMENT_TYPES = ("monthly_rent", "security_deposit", "commission", "purchase", "other")
PAYMENT_METHODS = ("credit_card", "bank_transfer", "cash", "cheque")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")
INQUIRY_TYPES = ("general", "pricing", "availability", "visit")
CONTACT_PREFERENCES = ("email", "phone", "whatsapp")
INQUIRY_STATUSES = ("pending", "responded", "closed")
NOTIFICATION_TYPES = ("general", "inquiry", "booking", "payment", "system")
SECURITY_EVENT_TYPES = (
    "login",
    "failed_login",
    "password_change",
    "permission_change",
    "logout",
)
SECURITY_EVENT_STATUSES = ("success", "failed", "warning")

SUPER_ADMIN_TYPE_ID = 1
ADMIN_TYPE_ID = 2
ADMIN_TYPE_IDS = (SUPER_ADMIN_TYPE_ID, ADMIN_TYPE_ID)


class UserTypes(Base):
    __tablename__ = "user_types"

    id = mapped_column(Integer, primary_key=True)
    type_en_name = mapped_column(String(100), nullable=False)
    type_ar_name = mapped_column(String(100), nullable=False)

    users: Mapped[List["Users"]] = relationship(
        "Users", uselist=True, back_populates="type_info"
    )


class UserPositions(Base):
    __tablename__ = "user_positions"

    id = mapped_column(Integer, primary_key=True)
    position_en_name = mapped_column(String(100), nullable=False)
    position_ar_name = mapped_column(String(100), nullable=False)

    users: Mapped[List["Users"]] = relationship(
        "Users", uselist=True, back_populates="position_info", passive_deletes=True
    )


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_type"], ["user_types.id"], name="fk_users_user_type"
        ),
        ForeignKeyConstraint(
            ["user_position"],
            ["user_positions.id"],
            ondelete="SET NULL",
            name="fk_users_user_position",
        ),
        Index("users_email_unique", "email", unique=True),
    )

    id = mapped_column(Integer, primary_key=True)
    user_name = mapped_column(String(150), nullable=False)
    email = mapped_column(String(255), nullable=False)
    phone = mapped_column(String(50))
    password_hash = mapped_column(String(255), nullable=False)
    user_type = mapped_column(Integer, nullable=False)
    user_position = mapped_column(Integer)
    is_active = mapped_column(Boolean, nullable=False, default=True)
    is_verified = mapped_column(Boolean, nullable=False, default=False)
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    type_info: Mapped["UserTypes"] = relationship(
        "UserTypes", back_populates="users"
    )
    position_info: Mapped[Optional["UserPositions"]] = relationship(
        "UserPositions", back_populates="users"
    )
    bookings: Mapped[List["Bookings"]] = relationship(
        "Bookings", uselist=True, back_populates="user", passive_deletes=True
    )
    payments: Mapped[List["Payments"]] = relationship(
        "Payments", uselist=True, back_populates="user", passive_deletes=True
    )
    inquiries: Mapped[List["Inquiries"]] = relationship(
        "Inquiries", uselist=True, back_populates="user", passive_deletes=True
    )
    notifications: Mapped[List["Notifications"]] = relationship(
        "Notifications",
        uselist=True,
        back_populates="user",
        cascade="all, delete-orphan",
    )
    sessions: Mapped[List["UserSessions"]] = relationship(
        "UserSessions",
        uselist=True,
        back_populates="user",
        cascade="all, delete-orphan",
    )


class Developers(Base):
    __tablename__ = "developers"

    id = mapped_column(Integer, primary_key=True)
    company_name = mapped_column(String(200), nullable=False)
    email = mapped_column(String(255))
    phone = mapped_column(String(50))
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    malls: Mapped[List["Malls"]] = relationship(
        "Malls", uselist=True, back_populates="developer", passive_deletes=True
    )


class Malls(Base):
    __tablename__ = "malls"
    __table_args__ = (
        ForeignKeyConstraint(
            ["developer_id"],
            ["developers.id"],
            ondelete="SET NULL",
            name="fk_malls_developer",
        ),
        Index("malls_city", "city"),
    )

    id = mapped_column(Integer, primary_key=True)
    ar_name = mapped_column(String(200), nullable=False)
    en_name = mapped_column(String(200), nullable=False)
    description = mapped_column(Text)
    address = mapped_column(String(255))
    city = mapped_column(String(100), nullable=False)
    district = mapped_column(String(100))
    developer_id = mapped_column(Integer)
    total_area = mapped_column(Float)
    total_floors = mapped_column(Integer)
    parking_spaces = mapped_column(Integer)
    construction_status = mapped_column(
        Enum(*CONSTRUCTION_STATUSES, name="mall_construction_status"),
        nullable=False,
        default="planning",
    )
    completion_date = mapped_column(Date)
    is_active = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    developer: Mapped[Optional["Developers"]] = relationship(
        "Developers", back_populates="malls"
    )
    shops: Mapped[List["Shops"]] = relationship(
        "Shops", uselist=True, back_populates="mall", passive_deletes=True
    )


class CategoryTypes(Base):
    __tablename__ = "category_types"

    id = mapped_column(Integer, primary_key=True)
    type_en_name = mapped_column(String(100), nullable=False)
    type_ar_name = mapped_column(String(100), nullable=False)

    shops: Mapped[List["Shops"]] = relationship(
        "Shops", uselist=True, back_populates="category_type"
    )


class Shops(Base):
    __tablename__ = "shops"
    __table_args__ = (
        ForeignKeyConstraint(
            ["mall_id"], ["malls.id"], ondelete="CASCADE", name="fk_shops_mall"
        ),
        ForeignKeyConstraint(
            ["category_type_id"], ["category_types.id"], name="fk_shops_category"
        ),
        Index("shops_mall_id", "mall_id"),
        Index("shops_status", "status"),
    )

    id = mapped_column(Integer, primary_key=True)
    title = mapped_column(String(200), nullable=False)
    mall_id = mapped_column(Integer, nullable=False)
    category_type_id = mapped_column(Integer, nullable=False)
    shop_number = mapped_column(String(50))
    floor_number = mapped_column(Integer)
    phone_number = mapped_column(String(50))
    whatsapp_number = mapped_column(String(50))
    email = mapped_column(String(255))
    unit_area = mapped_column(Float)
    monthly_rent = mapped_column(Numeric(12, 2))
    sale_price = mapped_column(Numeric(14, 2))
    sale_type = mapped_column(
        Enum(*SALE_TYPES, name="shop_sale_type"), nullable=False, default="rent"
    )
    finishing_type = mapped_column(
        Enum(*FINISHING_TYPES, name="shop_finishing_type"),
        nullable=False,
        default="not_finished",
    )
    delivery_date = mapped_column(Date)
    status = mapped_column(
        Enum(*SHOP_STATUSES, name="shop_status"), nullable=False, default="available"
    )
    description = mapped_column(Text)
    view_type = mapped_column(
        Enum(*VIEW_TYPES, name="shop_view_type"), nullable=False, default="corridor"
    )
    is_corner_shop = mapped_column(Boolean, nullable=False, default=False)
    has_storage = mapped_column(Boolean, nullable=False, default=False)
    electricity_capacity = mapped_column(Integer)
    security_deposit = mapped_column(Numeric(12, 2))
    is_active = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    mall: Mapped["Malls"] = relationship("Malls", back_populates="shops")
    category_type: Mapped["CategoryTypes"] = relationship(
        "CategoryTypes", back_populates="shops"
    )
    bookings: Mapped[List["Bookings"]] = relationship(
        "Bookings", uselist=True, back_populates="shop", passive_deletes=True
    )
    inquiries: Mapped[List["Inquiries"]] = relationship(
        "Inquiries", uselist=True, back_populates="shop", passive_deletes=True
    )


class Bookings(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        ForeignKeyConstraint(
            ["shop_id"], ["shops.id"], ondelete="CASCADE", name="fk_bookings_shop"
        ),
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_bookings_user"
        ),
        ForeignKeyConstraint(
            ["developer_id"], ["developers.id"], name="fk_bookings_developer"
        ),
        Index("bookings_status", "status"),
    )

    id = mapped_column(Integer, primary_key=True)
    shop_id = mapped_column(Integer, nullable=False)
    user_id = mapped_column(Integer, nullable=False)
    developer_id = mapped_column(Integer, nullable=False)
    booking_type = mapped_column(
        Enum(*BOOKING_TYPES, name="booking_type"), nullable=False, default="rent"
    )
    start_date = mapped_column(Date)
    end_date = mapped_column(Date)
    monthly_amount = mapped_column(Numeric(12, 2))
    total_amount = mapped_column(Numeric(14, 2))
    security_deposit = mapped_column(Numeric(12, 2))
    commission_amount = mapped_column(Numeric(12, 2))
    contract_duration = mapped_column(Integer)
    status = mapped_column(
        Enum(*BOOKING_STATUSES, name="booking_status"),
        nullable=False,
        default="pending",
    )
    payment_status = mapped_column(
        Enum(*BOOKING_PAYMENT_STATUSES, name="booking_payment_status"),
        nullable=False,
        default="pending",
    )
    contract_file = mapped_column(String(500))
    notes = mapped_column(Text)
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    shop: Mapped["Shops"] = relationship("Shops", back_populates="bookings")
    user: Mapped["Users"] = relationship("Users", back_populates="bookings")
    developer: Mapped["Developers"] = relationship("Developers")
    payments: Mapped[List["Payments"]] = relationship(
        "Payments", uselist=True, back_populates="booking", passive_deletes=True
    )


class Payments(Base):
    __tablename__ = "payments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["booking_id"],
            ["bookings.id"],
            ondelete="CASCADE",
            name="fk_payments_booking",
        ),
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_payments_user"
        ),
        Index("payments_status", "payment_status"),
    )

    id = mapped_column(Integer, primary_key=True)
    booking_id = mapped_column(Integer, nullable=False)
    user_id = mapped_column(Integer, nullable=False)
    amount = mapped_column(Numeric(14, 2), nullable=False)
    payment_type = mapped_column(
        Enum(*PAYMENT_TYPES, name="payment_type"),
        nullable=False,
        default="monthly_rent",
    )
    payment_method = mapped_column(
        Enum(*PAYMENT_METHODS, name="payment_method"),
        nullable=False,
        default="credit_card",
    )
    payment_status = mapped_column(
        Enum(*PAYMENT_STATUSES, name="payment_status"),
        nullable=False,
        default="pending",
    )
    transaction_id = mapped_column(String(100))
    payment_gateway_response = mapped_column(JSON)
    due_date = mapped_column(Date)
    paid_at = mapped_column(DateTime)
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    booking: Mapped["Bookings"] = relationship("Bookings", back_populates="payments")
    user: Mapped["Users"] = relationship("Users", back_populates="payments")


class Inquiries(Base):
    __tablename__ = "inquiries"
    __table_args__ = (
        ForeignKeyConstraint(
            ["shop_id"], ["shops.id"], ondelete="CASCADE", name="fk_inquiries_shop"
        ),
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_inquiries_user"
        ),
        ForeignKeyConstraint(
            ["developer_id"], ["developers.id"], name="fk_inquiries_developer"
        ),
        Index("inquiries_status", "status"),
    )

    id = mapped_column(Integer, primary_key=True)
    shop_id = mapped_column(Integer, nullable=False)
    user_id = mapped_column(Integer, nullable=False)
    developer_id = mapped_column(Integer, nullable=False)
    inquiry_type = mapped_column(
        Enum(*INQUIRY_TYPES, name="inquiry_type"), nullable=False, default="general"
    )
    message = mapped_column(Text, nullable=False)
    contact_preference = mapped_column(
        Enum(*CONTACT_PREFERENCES, name="inquiry_contact_preference"),
        nullable=False,
        default="email",
    )
    preferred_contact_time = mapped_column(String(100))
    status = mapped_column(
        Enum(*INQUIRY_STATUSES, name="inquiry_status"),
        nullable=False,
        default="pending",
    )
    response = mapped_column(Text)
    responded_at = mapped_column(DateTime)
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    shop: Mapped["Shops"] = relationship("Shops", back_populates="inquiries")
    user: Mapped["Users"] = relationship("Users", back_populates="inquiries")
    developer: Mapped["Developers"] = relationship("Developers")


class Notifications(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="fk_notifications_user",
        ),
        Index("notifications_user_read", "user_id", "is_read"),
    )

    id = mapped_column(Integer, primary_key=True)
    user_id = mapped_column(Integer, nullable=False)
    title = mapped_column(String(255), nullable=False)
    message = mapped_column(Text, nullable=False)
    type = mapped_column(
        Enum(*NOTIFICATION_TYPES, name="notification_type"),
        nullable=False,
        default="general",
    )
    related_id = mapped_column(Integer)
    is_read = mapped_column(Boolean, nullable=False, default=False)
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    user: Mapped["Users"] = relationship("Users", back_populates="notifications")


class SystemSettings(Base):
    __tablename__ = "system_settings"
    __table_args__ = (
        Index("system_settings_key_unique", "setting_key", unique=True),
        {"comment": "One JSON document per settings group."},
    )

    id = mapped_column(Integer, primary_key=True)
    setting_key = mapped_column(String(64), nullable=False)
    setting_value = mapped_column(JSON, nullable=False)
    updated_at = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


class SecurityEvents(Base):
    __tablename__ = "security_events"
    __table_args__ = (
        Index("security_events_created", "created_at"),
        {"comment": "Minimal audit trail of authentication activity."},
    )

    id = mapped_column(Integer, primary_key=True)
    event_type = mapped_column(
        Enum(*SECURITY_EVENT_TYPES, name="security_event_type"), nullable=False
    )
    user_email = mapped_column(String(255))
    ip_address = mapped_column(String(64))
    device = mapped_column(String(255))
    status = mapped_column(
        Enum(*SECURITY_EVENT_STATUSES, name="security_event_status"),
        nullable=False,
        default="success",
    )
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )


class UserSessions(Base):
    __tablename__ = "user_sessions"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_sessions_user"
        ),
        Index("user_sessions_jti_unique", "token_jti", unique=True),
    )

    id = mapped_column(Integer, primary_key=True)
    user_id = mapped_column(Integer, nullable=False)
    token_jti = mapped_column(String(64), nullable=False)
    ip_address = mapped_column(String(64))
    device = mapped_column(String(255))
    created_at = mapped_column(
        DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    last_activity = mapped_column(DateTime, default=utcnow)
    expires_at = mapped_column(DateTime, nullable=False)
    revoked_at = mapped_column(DateTime)

    user: Mapped["Users"] = relationship("Users", back_populates="sessions")
