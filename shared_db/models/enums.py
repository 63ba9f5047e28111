# shared_db/models/enums.py
import enum


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    RESTAURANT_OWNER = "restaurant_owner"
    ADMIN = "admin"


class Status(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def can_transition_to(self, other: "OrderStatus") -> bool:
        """Advisory transition rule for the order-management layer.

        Forward one step along pending -> ... -> delivered, or cancel from
        any non-terminal state. The store itself never enforces this.
        """
        other = OrderStatus(other)
        if self.is_terminal:
            return False
        if other is OrderStatus.CANCELLED:
            return True
        flow = ORDER_FLOW
        return other in flow and flow.index(other) == flow.index(self) + 1


ORDER_FLOW = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.PICKED_UP,
    OrderStatus.DELIVERED,
)


class OnDelete(str, enum.Enum):
    """What happens to a child row when its parent row is deleted."""
    CASCADE = "CASCADE"
    RESTRICT = "RESTRICT"


def enum_values(enum_cls):
    return [member.value for member in enum_cls]
