from __future__ import annotations

import logging
from typing import Optional

from smbdash.domain import rules
from smbdash.domain.errors import ApiError, ValidationError
from smbdash.domain.models import CASH_ADDITION, CASH_DEDUCTION, Cash

log = logging.getLogger(__name__)


class CashService:
    def __init__(self, repo):
        self.repo = repo

    def get_cash(self) -> Cash:
        return self.repo.get_cash()

    def try_get_cash(self) -> Optional[Cash]:
        try:
            return self.repo.get_cash()
        except ApiError as e:
            log.warning("cash_unavailable error=%s", e)
            return None

    def adjust(self, amount, type_: str, description: Optional[str]) -> dict:
        value = rules.positive_amount(amount)
        description = rules.require_text(description)
        if type_ not in (CASH_ADDITION, CASH_DEDUCTION):
            raise ValidationError("Movement type must be 'addition' or 'deduction'.")
        if type_ == CASH_DEDUCTION:
            rules.ensure_funds(self.try_get_cash(), value)

        result = self.repo.update_cash(value, type_, description)
        log.info("cash_adjusted type=%s amount=%.2f", type_, value)
        return result
