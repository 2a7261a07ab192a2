from .employee import Employee
from .service import Service, CATEGORIES
from .transaction import Transaction, TransactionItem, PAYMENT_METHODS
from .user import User, ROLES

__all__ = [
    "Employee", "Service", "Transaction", "TransactionItem", "User",
    "CATEGORIES", "PAYMENT_METHODS", "ROLES",
]
