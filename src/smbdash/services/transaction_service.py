from __future__ import annotations

import logging
from typing import Optional

from smbdash.domain import rules
from smbdash.domain.errors import NotFoundError, ValidationError
from smbdash.domain.models import (
    CAPITAL,
    EXPENSE,
    PURCHASE,
    SALE,
    TRANSACTION_TYPES,
    Product,
    Transaction,
    TransactionPage,
)
from smbdash.domain.pricing import sale_amount

log = logging.getLogger("smbdash.transactions")


class TransactionService:
    def __init__(self, repo, cash_service, page_size: int = 10):
        self.repo = repo
        self.cash = cash_service
        self.page_size = page_size

    def _find_product(self, product_id: int) -> Product:
        for p in self.repo.list_products():
            if p.id == product_id:
                return p
        raise NotFoundError("Selected product was not found.")

    def _post(self, type_: str, amount: float, description: str, **extra) -> dict:
        amount = rules.round_money(amount)
        created = self.repo.create_transaction(type_, amount, description, **extra)
        log.info("transaction_recorded type=%s amount=%.2f id=%s", type_, amount, created.get("id"))
        return created

    def record_sale(self, product_id, quantity, description: Optional[str]) -> dict:
        description = rules.require_text(description)
        try:
            pid = int(product_id or 0)
        except (TypeError, ValueError):
            pid = 0
        if pid <= 0:
            raise ValidationError("Select a product.")
        qty = rules.positive_int(quantity, "Quantity")

        product = self._find_product(pid)
        rules.ensure_stock(product, qty)

        amount = product.selling_price * qty
        return self._post(SALE, amount, description, product_id=product.id, quantity=qty)

    def _record_outflow(self, type_: str, amount, description: Optional[str]) -> dict:
        description = rules.require_text(description)
        value = rules.positive_amount(amount)
        rules.ensure_funds(self.cash.try_get_cash(), value)
        return self._post(type_, value, description)

    def record_purchase(self, amount, description: Optional[str]) -> dict:
        return self._record_outflow(PURCHASE, amount, description)

    def record_expense(self, amount, description: Optional[str]) -> dict:
        return self._record_outflow(EXPENSE, amount, description)

    def record_capital(self, amount, description: Optional[str]) -> dict:
        description = rules.require_text(description)
        value = rules.positive_amount(amount)
        return self._post(CAPITAL, value, description)

    def list_page(self, type_: str, page: int = 1) -> tuple[list[Transaction], bool]:
        """
        Returns (rows of ``type_``, has_next).

        The API pages over all transaction types, so filtering happens after
        paging and a page may hold fewer rows than the page size.
        """
        if type_ not in TRANSACTION_TYPES:
            raise ValidationError(f"Unknown transaction type: {type_}")
        page = max(int(page), 1)
        result: TransactionPage = self.repo.list_transactions(page, self.page_size)
        rows = [t for t in result.transactions if t.type == type_]
        return rows, result.is_full

    @staticmethod
    def sale_preview(product: Optional[Product], quantity) -> Optional[float]:
        return sale_amount(product, quantity)
