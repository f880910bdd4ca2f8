from enum import Enum


class SellerOrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    packed = "packed"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"


class SellerStatus(str, Enum):
    pending = "pending"
    active = "active"
    suspended = "suspended"


class PayoutStatus(str, Enum):
    completed = "completed"


class ActorRole(str, Enum):
    admin = "admin"
    seller = "seller"


TERMINAL_STATUSES = {SellerOrderStatus.delivered, SellerOrderStatus.cancelled}

# sellers walk the fulfillment path one step at a time
SELLER_TRANSITIONS = {
    SellerOrderStatus.pending: [SellerOrderStatus.processing],
    SellerOrderStatus.processing: [SellerOrderStatus.packed],
    SellerOrderStatus.packed: [SellerOrderStatus.shipped],
    SellerOrderStatus.shipped: [SellerOrderStatus.delivered],
    SellerOrderStatus.delivered: [],
    SellerOrderStatus.cancelled: [],
}

# admin may additionally cancel anything that is not terminal yet
ADMIN_TRANSITIONS = {
    status: allowed + ([] if status in TERMINAL_STATUSES else [SellerOrderStatus.cancelled])
    for status, allowed in SELLER_TRANSITIONS.items()
}

ALLOWED_TRANSITIONS = {
    ActorRole.seller: SELLER_TRANSITIONS,
    ActorRole.admin: ADMIN_TRANSITIONS,
}


def can_transition(role: ActorRole, current: SellerOrderStatus, new: SellerOrderStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[role].get(current, [])
