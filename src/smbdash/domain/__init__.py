from .models import Cash, CashMovement, Product, ProductMaterial, RawMaterial, StockMovement, Transaction
from .errors import (
    ApiError,
    InsufficientFundsError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "Cash",
    "CashMovement",
    "Product",
    "ProductMaterial",
    "RawMaterial",
    "StockMovement",
    "Transaction",
    "ApiError",
    "InsufficientFundsError",
    "InsufficientStockError",
    "NotFoundError",
    "ValidationError",
]
