from enum import Enum


class TransactionKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    BORROWING = "borrowing"
    LEDGER_TRANSFER = "ledger_transfer"


class PaymentMethod(str, Enum):
    PAYNEARBY = "paynearby"
    ONLINE = "online"


class UserRole(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class Operation(str, Enum):
    INVENTORY_ADD = "inventory_add"
    INVENTORY_UPDATE = "inventory_update"
    INVENTORY_VIEW = "inventory_view"
    INVENTORY_SALE = "inventory_sale"
    SERVICE_ADD = "service_add"
    SERVICE_UPDATE = "service_update"
    SERVICE_VIEW = "service_view"
    SERVICE_SALE = "service_sale"
    BANKING_TRANSACTION = "banking_transaction"
    BANKING_VIEW = "banking_view"
