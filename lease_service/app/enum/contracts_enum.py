from enum import Enum


class ContractStatus(str, Enum):
    active = "active"
    expired = "expired"
    settled = "settled"


class SettlementStatus(str, Enum):
    not_ready = "not_ready"
    ready = "ready"
    requested = "requested"
    completed = "completed"


class DeductionStatus(str, Enum):
    unpaid = "unpaid"
    pending = "pending"
    partial = "partial"
    paid = "paid"


class ShippingStatus(str, Enum):
    preparing = "preparing"
    shipped = "shipped"
    delivered = "delivered"


class ProcurementStatus(str, Enum):
    secured = "secured"
    unsecured = "unsecured"
