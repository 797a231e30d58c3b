from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from smbdash.domain.errors import ApiError
from smbdash.domain.models import DashboardReport, DashboardSnapshot, StockMovement
from smbdash.services import aggregation

log = logging.getLogger(__name__)


class ReportingService:
    def __init__(self, repo, cash_service, fetch_limit: int = 1000, low_stock_threshold: int = 10):
        self.repo = repo
        self.cash = cash_service
        self.fetch_limit = fetch_limit
        self.low_stock_threshold = low_stock_threshold

    def load_snapshot(self) -> DashboardSnapshot:
        """Fetch transactions, products and cash concurrently.

        A missing cash record only blanks the balance card; any other failed
        read leaves the dashboard empty with a single error message.
        """
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="dashboard") as pool:
            f_tx = pool.submit(self.repo.list_transactions, 1, self.fetch_limit)
            f_products = pool.submit(self.repo.list_products)
            f_cash = pool.submit(self.cash.try_get_cash)

            cash = f_cash.result()
            try:
                transactions = f_tx.result().transactions
                products = f_products.result()
            except ApiError as e:
                log.error("dashboard_load_failed error=%s", e)
                return DashboardSnapshot(cash=cash, error=f"Failed to load dashboard data: {e}")

        log.info("dashboard_loaded transactions=%s products=%s", len(transactions), len(products))
        return DashboardSnapshot(cash=cash, transactions=transactions, products=products)

    def build_dashboard(
        self,
        snapshot: DashboardSnapshot,
        month: Optional[str] = None,
        today: Optional[date] = None,
    ) -> DashboardReport:
        tx = snapshot.transactions
        products = snapshot.products

        months = aggregation.available_months(tx, today)
        selected = month or aggregation.current_month(today)
        by_product = aggregation.sales_by_product(tx, products)

        return DashboardReport(
            cash=snapshot.cash,
            available_months=months,
            selected_month=selected,
            monthly=aggregation.monthly_financial(tx, selected),
            sales_by_product=by_product,
            sales_by_date=aggregation.sales_by_date(tx, today),
            profit_margins=aggregation.profit_margins(tx, products),
            forecasts=aggregation.monthly_forecast(tx, products),
            stats=aggregation.transaction_stats(tx),
            low_stock=[p for p in products if int(p.stock) < self.low_stock_threshold],
            total_sales=sum(s.total_amount for s in by_product),
            total_transactions=len(tx),
            recent=list(tx[:5]),
            error=snapshot.error,
        )

    def stock_movements(self, kind: str = "product") -> list[StockMovement]:
        return self.repo.list_stock_movements(kind)

    def export_dashboard_excel(self, path: str, report: DashboardReport) -> None:
        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, end_row: int, end_col: int):
            ref = f"A1:{get_column_letter(end_col)}{end_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(tab)

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Dashboard"
        ws["A1"].font = Font(bold=True, size=14)

        ws["A3"] = "Month"
        ws["B3"] = report.selected_month

        rows = [
            ("Cash balance", float(report.cash.balance) if report.cash else None, "money"),
            ("Income (sales + capital)", report.monthly.income, "money"),
            ("Expenses (purchases + expenses)", report.monthly.expenses, "money"),
            ("Profit", report.monthly.profit, "money"),
            ("Total sales (all time)", report.total_sales, "money"),
            ("Transactions", report.total_transactions, "int"),
            ("Low stock products", len(report.low_stock), "int"),
        ]
        for i, (label, val, kind) in enumerate(rows):
            r = 5 + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = val if val is not None else "n/a"
            if kind == "money" and val is not None:
                money(ws[f"B{r}"])
        set_widths(ws, {"A": 34, "B": 22})

        # -------- 2) Sales by product --------
        ws2 = wb.create_sheet("Sales by Product")
        ws2.append(["Product ID", "Product", "Sale transactions", "Total amount"])
        bold_row(ws2, 1)
        for s in report.sales_by_product:
            ws2.append([s.product_id, s.product_name, s.total_quantity, float(s.total_amount)])
            money(ws2[f"D{ws2.max_row}"])
        set_widths(ws2, {"A": 12, "B": 34, "C": 18, "D": 18})
        if ws2.max_row >= 2:
            add_table(ws2, "SalesByProduct", ws2.max_row, 4)

        # -------- 3) Daily sales --------
        ws3 = wb.create_sheet("Daily Sales")
        ws3.append(["Date", "Total amount"])
        bold_row(ws3, 1)
        for d in report.sales_by_date:
            ws3.append([d.date, float(d.total_amount)])
            money(ws3[f"B{ws3.max_row}"])
        ws3.freeze_panes = "A2"
        set_widths(ws3, {"A": 14, "B": 18})

        # -------- 4) Margins & forecast --------
        ws4 = wb.create_sheet("Margins & Forecast")
        ws4.append(["Product", "Margin %", "Avg monthly demand"])
        bold_row(ws4, 1)
        demand = {f.product_id: f.avg_monthly_demand for f in report.forecasts}
        for m in report.profit_margins:
            ws4.append([m.product_name, round(m.margin, 2), round(demand.get(m.product_id, 0.0), 2)])
        set_widths(ws4, {"A": 34, "B": 12, "C": 20})

        wb.save(path)
        log.info("dashboard_exported path=%s month=%s", path, report.selected_month)
