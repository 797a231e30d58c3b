from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import make_product, make_tx
from smbdash.services import aggregation

TODAY = date(2024, 6, 15)


def test_monthly_summary_splits_income_and_expenses():
    tx = [
        make_tx(1, "sale", 1000, "2024-06-01T10:00:00.000Z", product_id=1),
        make_tx(2, "purchase", 400, "2024-06-05T10:00:00.000Z"),
        make_tx(3, "capital", 250, "2024-05-20T10:00:00.000Z"),
    ]

    june = aggregation.monthly_financial(tx, "2024-06")
    assert june.income == 1000
    assert june.expenses == 400
    assert june.profit == 600

    may = aggregation.monthly_financial(tx, "2024-05")
    assert (may.income, may.expenses, may.profit) == (250, 0, 250)


def test_profit_is_always_income_minus_expenses():
    tx = [
        make_tx(1, "sale", 12.35, "2024-06-01T10:00:00Z", product_id=1),
        make_tx(2, "capital", 100.10, "2024-06-02T10:00:00Z"),
        make_tx(3, "expense", 33.33, "2024-06-03T10:00:00Z"),
        make_tx(4, "purchase", 250.01, "2024-06-04T10:00:00Z"),
    ]
    summary = aggregation.monthly_financial(tx, "2024-06")
    assert summary.profit == summary.income - summary.expenses
    assert summary.profit < 0


def test_month_key_normalises_offsets_to_utc():
    assert aggregation.month_key("2024-06-30T23:30:00-05:00") == "2024-07"
    assert aggregation.month_key("2024-06-30T23:30:00.000Z") == "2024-06"
    assert aggregation.month_key("not a date") is None


def test_available_months_are_unique_descending_and_include_current():
    tx = [
        make_tx(1, "sale", 10, "2024-03-02T10:00:00Z"),
        make_tx(2, "sale", 10, "2024-05-02T10:00:00Z"),
        make_tx(3, "purchase", 10, "2024-05-09T10:00:00Z"),
        make_tx(4, "capital", 10, "2023-12-31T10:00:00Z"),
    ]
    assert aggregation.available_months(tx, TODAY) == ["2024-06", "2024-05", "2024-03", "2023-12"]
    assert aggregation.available_months(tx, date(2024, 5, 20)) == ["2024-05", "2024-03", "2023-12"]
    assert aggregation.available_months([], TODAY) == ["2024-06"]


def test_sales_by_product_counts_transactions_and_skips_products_without_sales():
    products = [make_product(1, "A", cost=50), make_product(2, "B", cost=10)]
    tx = [
        make_tx(1, "sale", 600, "2024-06-01T10:00:00Z", product_id=1),
        make_tx(2, "sale", 400, "2024-06-02T10:00:00Z", product_id=1),
        make_tx(3, "purchase", 999, "2024-06-02T10:00:00Z", product_id=2),
    ]

    summaries = aggregation.sales_by_product(tx, products)

    assert len(summaries) == 1
    assert summaries[0].product_name == "A"
    assert summaries[0].total_quantity == 2
    assert summaries[0].total_amount == 1000


def test_profit_margin_uses_transaction_count_as_quantity():
    products = [make_product(1, "A", cost=50), make_product(2, "B", cost=10)]
    tx = [make_tx(1, "sale", 1000, "2024-06-01T10:00:00Z", product_id=1)]

    margins = {m.product_name: m.margin for m in aggregation.profit_margins(tx, products)}

    assert margins["A"] == pytest.approx(95.0)
    assert margins["B"] == 0.0


def test_margin_percent_is_zero_without_sales():
    assert aggregation.margin_percent(0, 3, 50) == 0.0
    assert aggregation.margin_percent(200, 2, 50) == pytest.approx(50.0)


def test_forecast_averages_over_months_with_sales():
    products = [make_product(1, "A"), make_product(2, "B")]
    tx = [
        make_tx(1, "sale", 100, "2024-05-10T10:00:00Z", product_id=1),
        make_tx(2, "sale", 100, "2024-05-20T10:00:00Z", product_id=1),
        make_tx(3, "sale", 100, "2024-06-01T10:00:00Z", product_id=1),
        make_tx(4, "purchase", 100, "2024-01-01T10:00:00Z"),
    ]

    demand = {f.product_name: f.avg_monthly_demand for f in aggregation.monthly_forecast(tx, products)}

    assert demand["A"] == pytest.approx(1.5)
    assert demand["B"] == 0.0


def test_forecast_without_any_sales_is_zero():
    products = [make_product(1, "A")]
    forecast = aggregation.monthly_forecast([], products)
    assert forecast[0].avg_monthly_demand == 0.0


def test_sales_by_date_has_thirty_ascending_days_ending_today():
    tx = [
        make_tx(1, "sale", 100, "2024-06-15T09:00:00.000Z", product_id=1),
        make_tx(2, "sale", 50, "2024-05-17T00:00:00.000Z", product_id=1),
        make_tx(3, "sale", 999, "2024-05-16T23:00:00.000Z", product_id=1),
        make_tx(4, "purchase", 300, "2024-06-10T10:00:00.000Z"),
    ]

    series = aggregation.sales_by_date(tx, TODAY)

    assert len(series) == 30
    assert series[0].date == "2024-05-17"
    assert series[-1].date == "2024-06-15"
    assert [d.date for d in series] == sorted(d.date for d in series)
    assert sum(d.total_amount for d in series) == 150
    assert series[-1].total_amount == 100
    assert series[1].total_amount == 0.0


def test_sales_by_date_without_transactions_is_all_zero():
    series = aggregation.sales_by_date([], TODAY)
    assert len(series) == 30
    assert all(d.total_amount == 0.0 for d in series)


def test_transaction_stats_counts_each_type():
    tx = [
        make_tx(1, "sale", 1, "2024-06-01T10:00:00Z"),
        make_tx(2, "sale", 1, "2024-06-01T10:00:00Z"),
        make_tx(3, "purchase", 1, "2024-06-01T10:00:00Z"),
        make_tx(4, "capital", 1, "2024-06-01T10:00:00Z"),
    ]
    stats = aggregation.transaction_stats(tx)
    assert (stats.sales, stats.purchases, stats.expenses, stats.capital) == (2, 1, 0, 1)


class _JustAfterLocalMidnight(datetime):
    @classmethod
    def now(cls, tz=None):
        # 01:30 on 1 July at UTC+2 is still 30 June in UTC
        moment = datetime(2024, 7, 1, 1, 30, tzinfo=timezone(timedelta(hours=2)))
        return moment.astimezone(tz) if tz else moment.replace(tzinfo=None)


def test_default_window_and_month_follow_the_utc_day(monkeypatch):
    monkeypatch.setattr(aggregation, "datetime", _JustAfterLocalMidnight)

    assert aggregation.utc_today() == date(2024, 6, 30)
    assert aggregation.trailing_days()[-1] == "2024-06-30"
    assert aggregation.current_month() == "2024-06"
    assert aggregation.available_months([]) == ["2024-06"]
