from .cash_service import CashService
from .transaction_service import TransactionService
from .inventory_service import InventoryService
from .reporting_service import ReportingService

__all__ = [
    "CashService",
    "TransactionService",
    "InventoryService",
    "ReportingService",
]
