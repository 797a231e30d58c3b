"""Dashboard figures derived from one fetched snapshot.

Every function here is a pure transform of its arguments (plus ``today``
when the caller leaves it out). Nothing is cached: the dashboard calls them
again after each refresh.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from smbdash.domain.models import (
    CAPITAL,
    EXPENSE,
    EXPENSE_TYPES,
    INCOME_TYPES,
    PURCHASE,
    SALE,
    DailySales,
    MonthlyFinancial,
    MonthlyForecast,
    Product,
    ProfitMargin,
    SalesSummary,
    Transaction,
    TransactionStats,
)

TREND_DAYS = 30


def parse_timestamp(value: str) -> Optional[datetime]:
    s = (value or "").strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt


def month_key(value: str) -> Optional[str]:
    """'YYYY-MM' of an API timestamp (offsets normalised to UTC), or None if unparseable."""
    dt = parse_timestamp(value)
    return dt.strftime("%Y-%m") if dt else None


def utc_today() -> date:
    """Calendar day in UTC, the zone API timestamps are bucketed in."""
    return datetime.now(timezone.utc).date()


def current_month(today: Optional[date] = None) -> str:
    return (today or utc_today()).strftime("%Y-%m")


# ---------- period selector ----------
def available_months(transactions: Iterable[Transaction], today: Optional[date] = None) -> list[str]:
    months = {m for m in (month_key(t.date) for t in transactions) if m}
    ordered = sorted(months, reverse=True)
    now = current_month(today)
    if now not in months:
        ordered.insert(0, now)
    return ordered


# ---------- monthly summary ----------
def monthly_financial(transactions: Iterable[Transaction], month: str) -> MonthlyFinancial:
    income = 0.0
    expenses = 0.0
    for t in transactions:
        if month_key(t.date) != month:
            continue
        if t.type in INCOME_TYPES:
            income += t.amount
        elif t.type in EXPENSE_TYPES:
            expenses += t.amount
    return MonthlyFinancial(income=income, expenses=expenses, profit=income - expenses)


# ---------- per product ----------
def _sales_totals(transactions: Iterable[Transaction]) -> tuple[Counter, dict]:
    counts: Counter = Counter()
    amounts: dict[int, float] = defaultdict(float)
    for t in transactions:
        if t.type != SALE or t.product_id is None:
            continue
        # one transaction counts as one unit, whatever quantity was sold
        counts[t.product_id] += 1
        amounts[t.product_id] += t.amount
    return counts, amounts


def sales_by_product(transactions: Iterable[Transaction], products: Iterable[Product]) -> list[SalesSummary]:
    counts, amounts = _sales_totals(transactions)
    out = []
    for p in products:
        total = amounts.get(p.id, 0.0)
        if total <= 0:
            continue
        out.append(SalesSummary(
            product_id=p.id,
            product_name=p.name,
            total_quantity=counts[p.id],
            total_amount=total,
        ))
    return out


def margin_percent(total_sales: float, total_quantity: int, production_cost: float) -> float:
    if total_sales <= 0:
        return 0.0
    return (total_sales - total_quantity * production_cost) / total_sales * 100


def profit_margins(transactions: Iterable[Transaction], products: Iterable[Product]) -> list[ProfitMargin]:
    counts, amounts = _sales_totals(transactions)
    return [
        ProfitMargin(
            product_id=p.id,
            product_name=p.name,
            margin=margin_percent(amounts.get(p.id, 0.0), counts[p.id], p.production_cost),
        )
        for p in products
    ]


def monthly_forecast(transactions: Iterable[Transaction], products: Iterable[Product]) -> list[MonthlyForecast]:
    transactions = list(transactions)
    counts, _ = _sales_totals(transactions)
    sale_months = {month_key(t.date) for t in transactions if t.type == SALE}
    sale_months.discard(None)
    months_covered = max(1, len(sale_months))
    return [
        MonthlyForecast(
            product_id=p.id,
            product_name=p.name,
            avg_monthly_demand=counts[p.id] / months_covered,
        )
        for p in products
    ]


# ---------- time series ----------
def trailing_days(today: Optional[date] = None, days: int = TREND_DAYS) -> list[str]:
    end = today or utc_today()
    return [(end - timedelta(days=offset)).isoformat() for offset in range(days - 1, -1, -1)]


def sales_by_date(transactions: Iterable[Transaction], today: Optional[date] = None, days: int = TREND_DAYS) -> list[DailySales]:
    window = trailing_days(today, days)
    totals = dict.fromkeys(window, 0.0)
    for t in transactions:
        if t.type != SALE:
            continue
        # API dates are UTC ISO strings, so the prefix is the UTC day
        day = t.date[:10]
        if day in totals:
            totals[day] += t.amount
    return [DailySales(date=d, total_amount=totals[d]) for d in window]


# ---------- counters ----------
def transaction_stats(transactions: Iterable[Transaction]) -> TransactionStats:
    by_type = Counter(t.type for t in transactions)
    return TransactionStats(
        sales=by_type[SALE],
        purchases=by_type[PURCHASE],
        expenses=by_type[EXPENSE],
        capital=by_type[CAPITAL],
    )
