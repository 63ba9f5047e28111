# shared_db/models/sql_models.py
import uuid
from decimal import Decimal
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Numeric,
    String, Text, Uuid, false, func, true,
)

from shared_db.core.database import Base
from shared_db.models.enums import OnDelete, OrderStatus, Role, Status, enum_values


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def reference(target: str, on_delete: OnDelete) -> ForeignKey:
    """Foreign key whose delete policy is always spelled out."""
    return ForeignKey(target, ondelete=on_delete.value)


def _pk():
    return Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


def _created_at():
    return Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())


def _updated_at():
    return Column(
        DateTime(timezone=True), nullable=False,
        default=utcnow, onupdate=utcnow, server_default=func.now(),
    )


# --- Enumerated column types (shared by name across tables) ---
role_type = Enum(
    Role, name="role", values_callable=enum_values,
    validate_strings=True, create_constraint=True, metadata=Base.metadata,
)
status_type = Enum(
    Status, name="status", values_callable=enum_values,
    validate_strings=True, create_constraint=True, metadata=Base.metadata,
)
order_status_type = Enum(
    OrderStatus, name="order_status", values_callable=enum_values,
    validate_strings=True, create_constraint=True, metadata=Base.metadata,
)


# --- users-service ---
class User(Base):
    __tablename__ = "users"

    id = _pk()
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)  # already hashed by the caller
    phone = Column(String(50))
    role = Column(role_type, nullable=False, default=Role.CUSTOMER, server_default=Role.CUSTOMER.value)
    status = Column(status_type, nullable=False, default=Status.ACTIVE, server_default=Status.ACTIVE.value)
    address = Column(String(500))
    city = Column(String(255))
    created_at = _created_at()
    updated_at = _updated_at()


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = _pk()
    user_id = Column(Uuid(as_uuid=True), reference("users.id", OnDelete.CASCADE), nullable=False, index=True)
    token_hash = Column(String(255))
    expires_at = Column(DateTime(timezone=True))
    created_at = _created_at()


# --- restaurant-service ---
class Restaurant(Base):
    __tablename__ = "restaurant"

    id = _pk()
    owner_id = Column(Uuid(as_uuid=True), reference("users.id", OnDelete.RESTRICT), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500))
    cuisine_type = Column(String(255))
    address = Column(String(500))
    city = Column(String(100))
    latitude = Column(Numeric(10, 8))
    longitude = Column(Numeric(11, 8))
    phone = Column(String(20))
    email = Column(String(100), nullable=False, unique=True, index=True)
    rating = Column(Numeric(3, 2), nullable=False, default=Decimal("0"), server_default="0")
    total_reviews = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    is_verified = Column(Boolean, nullable=False, default=False, server_default=false())
    delivery_fee = Column(Numeric(8, 2), nullable=False, default=Decimal("3.00"), server_default="3.00")
    minimum_order = Column(Numeric(8, 2), nullable=False, default=Decimal("1.00"), server_default="1.00")
    estimated_prep_time = Column(Integer, nullable=False, default=10, server_default="10")  # minutes
    is_open = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = _created_at()
    updated_at = _updated_at()


class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id = _pk()
    restaurant_id = Column(Uuid(as_uuid=True), reference("restaurant.id", OnDelete.CASCADE), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500))
    sort_order = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = _pk()
    restaurant_id = Column(Uuid(as_uuid=True), reference("restaurant.id", OnDelete.CASCADE), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), reference("menu_categories.id", OnDelete.CASCADE), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500))
    price = Column(Numeric(8, 2), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True, server_default=true())
    preparation_time = Column(Integer, nullable=False, default=5, server_default="5")  # minutes
    created_at = _created_at()
    updated_at = _updated_at()


# --- order-service ---
class Order(Base):
    __tablename__ = "orders"

    id = _pk()
    order_number = Column(String(20), nullable=False, unique=True, index=True)
    customer_id = Column(Uuid(as_uuid=True), reference("users.id", OnDelete.RESTRICT), nullable=False, index=True)
    restaurant_id = Column(Uuid(as_uuid=True), reference("restaurant.id", OnDelete.RESTRICT), nullable=False, index=True)
    driver_id = Column(Uuid(as_uuid=True), reference("users.id", OnDelete.RESTRICT), index=True)
    status = Column(
        "order_status", order_status_type, nullable=False,
        default=OrderStatus.PENDING, server_default=OrderStatus.PENDING.value,
    )
    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=Decimal("0"), server_default="0")
    total_amount = Column(Numeric(10, 2), nullable=False)
    delivery_address = Column(String, nullable=False)
    estimated_delivery_time = Column(DateTime(timezone=True))
    actual_delivery_time = Column(DateTime(timezone=True))
    created_at = _created_at()
    updated_at = _updated_at()


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = _pk()
    order_id = Column(Uuid(as_uuid=True), reference("orders.id", OnDelete.CASCADE), nullable=False, index=True)
    menu_item_id = Column(Uuid(as_uuid=True), reference("menu_items.id", OnDelete.RESTRICT), nullable=False, index=True)
    menu_item_name = Column(String(255), nullable=False)  # snapshot at order time
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    created_at = _created_at()


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id = _pk()
    order_id = Column(Uuid(as_uuid=True), reference("orders.id", OnDelete.CASCADE), nullable=False, index=True)
    status = Column("order_status", order_status_type, nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    notes = Column(Text)
