from __future__ import annotations

import tkinter as tk
from tkinter import ttk, filedialog
from datetime import date
from pathlib import Path
import logging

from smbdash.domain.models import DashboardReport, DashboardSnapshot
from smbdash.ui.formatting import day_label, money, month_label, timestamp_label, type_label

log = logging.getLogger(__name__)


class DashboardView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Dashboard")

        self.snapshot = DashboardSnapshot(cash=None)
        self.report: DashboardReport | None = None

        self.selected_month: str | None = None
        self.month_var = tk.StringVar()
        self.error_var = tk.StringVar(value="")
        self._month_values: list[str] = []

        self._build()

    def _build(self):
        tab = self.frame

        ttk.Label(tab, textvariable=self.error_var, foreground="#b91c1c").pack(anchor="w", padx=10)

        # KPI cards
        kpi = ttk.Frame(tab)
        kpi.pack(fill="x", padx=10, pady=(4, 8))
        self.kpi_labels: dict[str, ttk.Label] = {}
        cards = [
            ("cash", "Cash balance"),
            ("count", "Transactions"),
            ("low", "Low stock (< 10 pcs)"),
            ("sales", "Total sales (all time)"),
        ]
        for i, (key, title) in enumerate(cards):
            box = ttk.LabelFrame(kpi, text=title)
            box.grid(row=0, column=i, sticky="nsew", padx=4)
            kpi.columnconfigure(i, weight=1)
            lbl = ttk.Label(box, text="-", style="KPIValue.TLabel")
            lbl.pack(anchor="w", padx=10, pady=8)
            self.kpi_labels[key] = lbl

        # Monthly figures
        monthly = ttk.LabelFrame(tab, text="Monthly financials")
        monthly.pack(fill="x", padx=10, pady=(0, 8))

        ttk.Label(monthly, text="Month").grid(row=0, column=0, padx=10, pady=8, sticky="w")
        self.month_combo = ttk.Combobox(monthly, textvariable=self.month_var, state="readonly", width=20)
        self.month_combo.grid(row=0, column=1, padx=10, pady=8, sticky="w")
        self.month_combo.bind("<<ComboboxSelected>>", self._on_month_selected)

        self.income_l = ttk.Label(monthly, text="Income: -", style="KPIValue.TLabel")
        self.expense_l = ttk.Label(monthly, text="Expenses: -", style="KPIValue.TLabel")
        self.profit_l = ttk.Label(monthly, text="Profit: -", style="KPIValue.TLabel")
        self.income_l.grid(row=0, column=2, padx=16)
        self.expense_l.grid(row=0, column=3, padx=16)
        self.profit_l.grid(row=0, column=4, padx=16)

        self.stats_l = ttk.Label(monthly, text="")
        self.stats_l.grid(row=1, column=0, columnspan=5, padx=10, pady=(0, 8), sticky="w")

        ttk.Button(monthly, text="Export to Excel", command=self.export_report)\
            .grid(row=0, column=5, padx=10, pady=8, sticky="e")
        monthly.columnconfigure(5, weight=1)

        # Charts
        charts = ttk.Frame(tab)
        charts.pack(fill="both", expand=True, padx=10)
        charts.columnconfigure(0, weight=1)
        charts.columnconfigure(1, weight=1)

        self.product_canvas = tk.Canvas(charts, height=200, bg="#f8fafc", highlightthickness=1, highlightbackground="#cbd5e1")
        self.product_canvas.grid(row=0, column=0, sticky="nsew", padx=6, pady=6)

        self.daily_canvas = tk.Canvas(charts, height=200, bg="#f8fafc", highlightthickness=1, highlightbackground="#cbd5e1")
        self.daily_canvas.grid(row=0, column=1, sticky="nsew", padx=6, pady=6)

        # Tables
        tables = ttk.Frame(tab)
        tables.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        for i in range(3):
            tables.columnconfigure(i, weight=1)

        self.margin_tree = self._table(tables, 0, "Profit margin per product",
                                       {"product": ("Product", 200), "margin": ("Margin %", 90)})
        self.forecast_tree = self._table(tables, 1, "Monthly demand forecast",
                                         {"product": ("Product", 200), "avg": ("Avg / month", 100)})
        self.recent_tree = self._table(tables, 2, "Recent transactions",
                                       {"dt": ("Date", 90), "type": ("Type", 120), "amount": ("Amount", 100),
                                        "desc": ("Description", 200)})

    def _table(self, parent, column: int, title: str, columns: dict[str, tuple[str, int]]) -> ttk.Treeview:
        box = ttk.LabelFrame(parent, text=title)
        box.grid(row=0, column=column, sticky="nsew", padx=4)
        cols = tuple(columns)
        tree = ttk.Treeview(box, columns=cols, show="headings", height=7)
        for c in cols:
            heading, width = columns[c]
            tree.heading(c, text=heading)
            tree.column(c, width=width, anchor="w")
        tree.pack(fill="both", expand=True, padx=6, pady=6)
        return tree

    # ---------- data ----------
    def refresh(self):
        self.snapshot = self.app.reporting.load_snapshot()
        if self.snapshot.error:
            self.app.toast("Dashboard data could not be loaded.", kind="error")
        self.render()

    def render(self):
        report = self.app.reporting.build_dashboard(self.snapshot, month=self.selected_month)
        self.report = report
        self.selected_month = report.selected_month

        self.error_var.set(report.error or "")

        self._month_values = report.available_months
        self.month_combo["values"] = [month_label(m) for m in report.available_months]
        self.month_var.set(month_label(report.selected_month))

        self.kpi_labels["cash"].config(text=money(report.cash.balance) if report.cash else "Not available")
        self.kpi_labels["count"].config(text=str(report.total_transactions))
        self.kpi_labels["low"].config(text=str(len(report.low_stock)))
        self.kpi_labels["sales"].config(text=money(report.total_sales))

        m = report.monthly
        self.income_l.config(text=f"Income: {money(m.income)}")
        self.expense_l.config(text=f"Expenses: {money(m.expenses)}")
        self.profit_l.config(text=f"{'Profit' if m.profit >= 0 else 'Loss'}: {'+' if m.profit >= 0 else ''}{money(m.profit)}")

        s = report.stats
        self.stats_l.config(
            text=f"Sales: {s.sales}   Purchases: {s.purchases}   Expenses: {s.expenses}   Capital: {s.capital}"
        )

        self._draw_bar_chart(
            self.product_canvas,
            "Sales per product",
            [(x.product_name, x.total_amount) for x in report.sales_by_product],
        )
        daily = [(day_label(d.date), d.total_amount) for d in report.sales_by_date]
        if not any(v for _, v in daily):
            daily = []
        self._draw_line_chart(self.daily_canvas, "Sales, last 30 days", daily)

        self._fill(self.margin_tree, [(x.product_name, f"{x.margin:.2f}%") for x in report.profit_margins])
        self._fill(self.forecast_tree, [(x.product_name, f"{x.avg_monthly_demand:.2f}") for x in report.forecasts])
        self._fill(self.recent_tree, [
            (timestamp_label(t.date)[:10], type_label(t.type), money(t.amount), t.description)
            for t in report.recent
        ])

    def _on_month_selected(self, _evt=None):
        idx = self.month_combo.current()
        if 0 <= idx < len(self._month_values):
            self.selected_month = self._month_values[idx]
        self.render()

    @staticmethod
    def _fill(tree: ttk.Treeview, rows: list[tuple]):
        for item in tree.get_children():
            tree.delete(item)
        for r in rows:
            tree.insert("", "end", values=r)

    # ---------- charts ----------
    def _draw_bar_chart(self, canvas: tk.Canvas, title: str, data: list[tuple[str, float]], color: str = "#3b82f6"):
        canvas.delete("all")
        w, h = int(canvas.winfo_width() or 560), int(canvas.winfo_height() or 200)
        canvas.create_text(12, 16, text=title, anchor="w", font=("Segoe UI", 10, "bold"), fill="#0f172a")
        if not data:
            canvas.create_text(w // 2, h // 2, text="No product sales yet", fill="#64748b")
            return
        maxv = max(v for _, v in data) or 1
        bw = max(24, (w - 40) // len(data))
        for i, (label, val) in enumerate(data):
            x0 = 24 + i * bw
            x1 = x0 + bw - 8
            y1 = h - 30
            y0 = y1 - int((val / maxv) * (h - 70))
            canvas.create_rectangle(x0, y0, x1, y1, fill=color, outline="")
            canvas.create_text((x0 + x1) // 2, y1 + 12, text=label[:10], font=("Segoe UI", 8), fill="#475569")
            canvas.create_text((x0 + x1) // 2, y0 - 8, text=f"{val:,.0f}", font=("Segoe UI", 8), fill="#0f172a")

    def _draw_line_chart(self, canvas: tk.Canvas, title: str, data: list[tuple[str, float]]):
        canvas.delete("all")
        w, h = int(canvas.winfo_width() or 560), int(canvas.winfo_height() or 200)
        canvas.create_text(12, 16, text=title, anchor="w", font=("Segoe UI", 10, "bold"), fill="#0f172a")
        if not data:
            canvas.create_text(w // 2, h // 2, text="No sales in the last 30 days", fill="#64748b")
            return
        vals = [v for _, v in data]
        maxv = max(vals) or 1
        points = []
        for i, (d, v) in enumerate(data):
            x = 40 + int(i * (w - 80) / max(len(data) - 1, 1))
            y = h - 30 - int(v * (h - 70) / maxv)
            points.extend([x, y])
            if i % max(len(data) // 6, 1) == 0:
                canvas.create_text(x, h - 14, text=d, font=("Segoe UI", 8), fill="#475569")
        canvas.create_line(*points, fill="#2563eb", width=2)

    # ---------- export ----------
    def export_report(self):
        if self.report is None:
            self.app.toast("Nothing to export yet.", kind="warn")
            return
        path = filedialog.asksaveasfilename(
            title="Save dashboard as",
            defaultextension=".xlsx",
            filetypes=[("Excel files", "*.xlsx")],
            initialdir=self.app.exports_dir,
            initialfile=f"dashboard_{self.report.selected_month}_{date.today().isoformat()}.xlsx",
        )
        if not path:
            return
        try:
            self.app.reporting.export_dashboard_excel(path, self.report)
            self.app.toast(f"Dashboard exported to {Path(path).name}.", kind="success")
        except OSError as e:
            self.app.handle_error("Export error", e, "Excel export failed.")
