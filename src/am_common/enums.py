"""Global enums — must match DB CHECK constraints exactly (see alembic/versions)."""

from enum import Enum


class UserRole(str, Enum):
    SELLER = "Seller"
    BUYER = "Buyer"


class UnitOfMeasure(str, Enum):
    KG = "kg"
    G = "g"
    LB = "lb"
    PIECE = "piece"
    DOZEN = "dozen"
    LITER = "liter"
    BAG = "bag"
    CRATE = "crate"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    """Recorded on the order only; payments are settled outside this service."""
    CASH = "cash"
    MPESA = "mpesa"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"


class OrderEventType(str, Enum):
    NEW_ORDER = "NEW_ORDER"
    ORDER_STATUS_UPDATED = "ORDER_STATUS_UPDATED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
