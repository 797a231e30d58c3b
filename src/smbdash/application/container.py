from __future__ import annotations

from dataclasses import dataclass

import requests

from smbdash.config import ApiSettings
from smbdash.repositories.api_repo import ApiRepository
from smbdash.services.cash_service import CashService
from smbdash.services.inventory_service import InventoryService
from smbdash.services.reporting_service import ReportingService
from smbdash.services.transaction_service import TransactionService


@dataclass(frozen=True)
class AppContainer:
    settings: ApiSettings
    repo: ApiRepository
    cash: CashService
    transactions: TransactionService
    inventory: InventoryService
    reporting: ReportingService


def build_container(settings: ApiSettings, session: requests.Session | None = None) -> AppContainer:
    repo = ApiRepository(settings.base_url, timeout=settings.timeout, session=session)

    cash = CashService(repo)
    transactions = TransactionService(repo, cash, page_size=settings.transactions_page_size)
    inventory = InventoryService(repo, cash)
    reporting = ReportingService(
        repo,
        cash,
        fetch_limit=settings.dashboard_fetch_limit,
        low_stock_threshold=settings.low_stock_threshold,
    )

    return AppContainer(
        settings=settings,
        repo=repo,
        cash=cash,
        transactions=transactions,
        inventory=inventory,
        reporting=reporting,
    )
