# shared_db/models/schemas.py
"""Read and insert shapes handed to calling services.

Every entity has a ``<Entity>Record`` (all columns, built from the ORM row)
and a ``New<Entity>`` (what a caller may supply on insert). Insert shapes
leave out the identifier and timestamps; columns with a store default are
optional and ``None`` means "use the default".
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from shared_db.models.enums import OrderStatus, Role, Status

# Fixed-point columns: max_digits / decimal_places match the Numeric(p, s) columns
Money8 = Annotated[Decimal, Field(max_digits=8, decimal_places=2)]
Money10 = Annotated[Decimal, Field(max_digits=10, decimal_places=2)]
Latitude = Annotated[Decimal, Field(max_digits=10, decimal_places=8)]
Longitude = Annotated[Decimal, Field(max_digits=11, decimal_places=8)]
Rating = Annotated[Decimal, Field(max_digits=3, decimal_places=2)]

# Integer columns are 32-bit
INT_MAX = 2**31 - 1
Int32 = Annotated[int, Field(ge=-INT_MAX - 1, le=INT_MAX)]

CENT = Decimal("0.01")


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * Decimal(unit_price)).quantize(CENT, rounding=ROUND_HALF_UP)


class InsertShape(BaseModel):
    model_config = {"extra": "forbid"}


class RecordShape(BaseModel):
    # Pydantic V2 Config to read SQLAlchemy models
    model_config = {"from_attributes": True}


def _email_within(limit: int, value: str) -> str:
    if len(value) > limit:
        raise ValueError(f"email longer than {limit} characters")
    return value


# --- Users ---
class NewUser(InsertShape):
    """Emails go through ``EmailStr``: the domain part is stored lowercased and
    special-use domains such as ``.test`` or ``.local`` are rejected."""
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=255, description="Hashed credential")
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[Role] = None
    status: Optional[Status] = None
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def _email_length(cls, value):
        return _email_within(255, value)


class UserRecord(RecordShape):
    id: UUID
    full_name: str
    email: str
    password: str
    phone: Optional[str] = None
    role: Role
    status: Status
    address: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class NewUserSession(InsertShape):
    user_id: UUID
    token_hash: Optional[str] = Field(None, max_length=255)
    expires_at: Optional[datetime] = None


class UserSessionRecord(RecordShape):
    id: UUID
    user_id: UUID
    token_hash: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Advisory check; nothing in the store sweeps expired sessions."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        # SQLite hands back naive datetimes, stored values are UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return expires_at <= now


# --- Restaurants & menus ---
class NewRestaurant(InsertShape):
    """Same email rules as ``NewUser``, limited to 100 characters."""
    owner_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    cuisine_type: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: EmailStr
    rating: Optional[Rating] = None
    total_reviews: Optional[Int32] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None
    delivery_fee: Optional[Money8] = None
    minimum_order: Optional[Money8] = None
    estimated_prep_time: Optional[Int32] = None
    is_open: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def _email_length(cls, value):
        return _email_within(100, value)


class RestaurantRecord(RecordShape):
    id: UUID
    owner_id: UUID
    name: str
    description: Optional[str] = None
    cuisine_type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    phone: Optional[str] = None
    email: str
    rating: Decimal
    total_reviews: int
    is_active: bool
    is_verified: bool
    delivery_fee: Decimal
    minimum_order: Decimal
    estimated_prep_time: int
    is_open: bool
    created_at: datetime
    updated_at: datetime


class NewMenuCategory(InsertShape):
    restaurant_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    sort_order: Optional[Int32] = None
    is_active: Optional[bool] = None


class MenuCategoryRecord(RecordShape):
    id: UUID
    restaurant_id: UUID
    name: str
    description: Optional[str] = None
    sort_order: int
    is_active: bool


class NewMenuItem(InsertShape):
    restaurant_id: UUID
    category_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    price: Money8
    is_available: Optional[bool] = None
    preparation_time: Optional[Int32] = None


class MenuItemRecord(RecordShape):
    id: UUID
    restaurant_id: UUID
    category_id: UUID
    name: str
    description: Optional[str] = None
    price: Decimal
    is_available: bool
    preparation_time: int
    created_at: datetime
    updated_at: datetime


# --- Orders ---
class NewOrder(InsertShape):
    order_number: str = Field(..., min_length=1, max_length=20)
    customer_id: UUID
    restaurant_id: UUID
    driver_id: Optional[UUID] = None
    status: Optional[OrderStatus] = None
    subtotal: Money10
    delivery_fee: Optional[Money10] = None
    total_amount: Money10
    delivery_address: str = Field(..., min_length=1)
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None


class OrderRecord(RecordShape):
    id: UUID
    order_number: str
    customer_id: UUID
    restaurant_id: UUID
    driver_id: Optional[UUID] = None
    status: OrderStatus
    subtotal: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    delivery_address: str
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class NewOrderItem(InsertShape):
    """Line of an order.

    ``menu_item_name`` and ``unit_price`` are snapshotted from the menu item
    when left out; ``total_price`` is computed when left out and must equal
    ``quantity * unit_price`` when given.
    """
    order_id: UUID
    menu_item_id: UUID
    menu_item_name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: int = Field(..., gt=0, le=INT_MAX)
    unit_price: Optional[Money10] = None
    total_price: Optional[Money10] = None

    @model_validator(mode="after")
    def _check_total(self):
        if self.unit_price is not None and self.total_price is not None:
            if line_total(self.quantity, self.unit_price) != self.total_price:
                raise ValueError("total_price must equal quantity * unit_price")
        return self


class OrderItemRecord(RecordShape):
    id: UUID
    order_id: UUID
    menu_item_id: UUID
    menu_item_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    created_at: datetime


class NewOrderStatusHistory(InsertShape):
    order_id: UUID
    status: OrderStatus
    notes: Optional[str] = None


class OrderStatusHistoryRecord(RecordShape):
    id: UUID
    order_id: UUID
    status: OrderStatus
    changed_at: datetime
    notes: Optional[str] = None
