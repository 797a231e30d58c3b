"""Input rules shared by every write use-case.

The API enforces the same rules server-side; checking them here lets the
client reject a form before a request is issued. Views never re-implement
these checks, they call the services which call this module.
"""
from __future__ import annotations

import math
from typing import Optional

from smbdash.domain.errors import InsufficientFundsError, InsufficientStockError, ValidationError
from smbdash.domain.models import Cash, Product


def round_money(value: float) -> float:
    return round(float(value), 2)


def _to_float(value, field: str) -> float:
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number.") from None
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field} must be a number.")
    return number


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_text(value: Optional[str], field: str = "Description") -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required.")
    return text


def positive_amount(value, field: str = "Amount") -> float:
    number = _to_float(value, field)
    if number <= 0:
        raise ValidationError(f"{field} must be a positive number.")
    return number


def non_negative_amount(value, field: str) -> float:
    number = _to_float(value, field)
    if number < 0:
        raise ValidationError(f"{field} must be >= 0.")
    return number


def positive_int(value, field: str = "Quantity") -> int:
    number = int(_to_float(value, field))
    if number <= 0:
        raise ValidationError(f"{field} must be a positive integer.")
    return number


def non_negative_int(value, field: str) -> int:
    number = int(_to_float(value, field))
    if number < 0:
        raise ValidationError(f"{field} must be a non-negative integer.")
    return number


def optional(value, parse, field: str):
    """Blank input means 'not provided'; anything else must satisfy ``parse``."""
    if is_blank(value):
        return None
    return parse(value, field)


def ensure_funds(cash: Optional[Cash], required: float) -> None:
    # Unknown balance: the server has the last word.
    if cash is None:
        return
    if float(cash.balance) < float(required):
        raise InsufficientFundsError(
            f"Insufficient cash balance. Available: {cash.balance:.2f}, required: {required:.2f}"
        )


def ensure_stock(product: Product, quantity: int) -> None:
    if int(product.stock) < int(quantity):
        raise InsufficientStockError(f"Not enough stock for {product.name}. Available: {product.stock} pcs")
