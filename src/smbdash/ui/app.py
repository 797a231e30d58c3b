from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
import logging

from smbdash.domain.errors import ApiError, AppError
from smbdash.ui.formatting import money, timestamp_label
from smbdash.ui.views.cash_view import CashView
from smbdash.ui.views.dashboard_view import DashboardView
from smbdash.ui.views.products_view import ProductsView
from smbdash.ui.views.raw_materials_view import RawMaterialsView
from smbdash.ui.views.stock_report_view import StockReportView
from smbdash.ui.views.transactions_view import TransactionsView

log = logging.getLogger(__name__)


class App(tk.Tk):
    def __init__(self, container, api_url: str, logs_dir: str, exports_dir: str):
        super().__init__()
        self.title("Small Business Dashboard")
        self.geometry("1280x760")
        self.minsize(1120, 660)

        self.cash = container.cash
        self.transactions = container.transactions
        self.inventory = container.inventory
        self.reporting = container.reporting

        self.api_url = api_url
        self.logs_dir = logs_dir
        self.exports_dir = exports_dir

        # UI state
        self.cash_var = tk.StringVar(value="Cash: not loaded")
        self.status_var = tk.StringVar(value="")
        self._toast_after_id = None

        self._build_styles()
        self._build_topbar()

        main = ttk.Frame(self)
        main.pack(fill="both", expand=True, padx=12, pady=(0, 8))

        self.sidebar = ttk.Frame(main)
        self.sidebar.pack(side="left", fill="y", padx=(0, 10))

        self.content = ttk.Frame(main)
        self.content.pack(side="right", fill="both", expand=True)

        self.nb = ttk.Notebook(self.content, style="Side.TNotebook")
        self.nb.pack(fill="both", expand=True)

        # Views (tabs hidden)
        self.dashboard_view = DashboardView(self.nb, self)
        self.transactions_view = TransactionsView(self.nb, self)
        self.cash_view = CashView(self.nb, self)
        self.raw_materials_view = RawMaterialsView(self.nb, self)
        self.products_view = ProductsView(self.nb, self)
        self.stock_report_view = StockReportView(self.nb, self)

        self._build_sidebar()
        self._build_status_bar()

        self.refresh_all(show_toast=False)
        self.toast("Ready.", kind="info", ms=1200)

    def _build_styles(self):
        style = ttk.Style(self)
        style.layout("Side.TNotebook.Tab", [])
        style.configure("Side.TNotebook", tabmargins=0)

        try:
            style.configure("Big.TButton", padding=(14, 10))
            style.configure("Title.TLabel", font=("Segoe UI", 12, "bold"))
            style.configure("KPI.TLabel", font=("Segoe UI", 10))
            style.configure("KPIValue.TLabel", font=("Segoe UI", 11, "bold"))
        except tk.TclError as e:
            log.exception("UI style setup failed: %s", e)

    def _build_topbar(self):
        top = ttk.Frame(self)
        top.pack(fill="x", padx=12, pady=10)

        ttk.Label(top, textvariable=self.cash_var, style="Title.TLabel").pack(side="left")
        ttk.Button(top, text="Refresh cash", command=self.update_cash).pack(side="left", padx=10)

        ttk.Label(top, text=f"API: {self.api_url}").pack(side="right")

    def _build_sidebar(self):
        box = ttk.LabelFrame(self.sidebar, text="Navigate")
        box.pack(fill="x", pady=(0, 10))

        pages = [
            ("📊 Dashboard", self.dashboard_view),
            ("🧾 Transactions", self.transactions_view),
            ("💰 Cash", self.cash_view),
            ("🧱 Raw materials", self.raw_materials_view),
            ("📦 Products", self.products_view),
            ("📋 Stock report", self.stock_report_view),
        ]
        for i, (label, view) in enumerate(pages):
            ttk.Button(
                box, text=label, style="Big.TButton",
                command=lambda v=view: self.show(v),
            ).pack(fill="x", padx=10, pady=(10 if i == 0 else 6, 6))

        ttk.Button(box, text="🔄 Refresh", style="Big.TButton",
                   command=self.refresh_all).pack(fill="x", padx=10, pady=(6, 10))

    def _build_status_bar(self):
        bar = ttk.Frame(self)
        bar.pack(fill="x", padx=12, pady=(0, 10))
        ttk.Label(bar, textvariable=self.status_var).pack(side="left")
        ttk.Label(bar, text=f"Logs: {self.logs_dir}").pack(side="right")

    def show(self, view):
        self.nb.select(view.frame)
        view.refresh()

    def toast(self, msg: str, kind: str = "info", ms: int = 2500):
        prefix = {"info": "ℹ ", "success": "✅ ", "warn": "⚠ ", "error": "❌ "}.get(kind, "")
        self.status_var.set(prefix + msg)
        if self._toast_after_id is not None:
            try:
                self.after_cancel(self._toast_after_id)
            except tk.TclError:
                pass
        self._toast_after_id = self.after(ms, lambda: self.status_var.set(""))

    def handle_error(self, title: str, exc: Exception, toast_msg: str):
        if isinstance(exc, ApiError):
            log.warning("%s: %s (status=%s)", title, exc, exc.status_code)
            messagebox.showerror(title, str(exc), parent=self)
        elif isinstance(exc, AppError):
            log.info("%s: %s", title, exc)
            messagebox.showwarning(title, str(exc), parent=self)
        else:
            log.exception("%s", title)
            messagebox.showerror(title, f"Unexpected error: {exc}", parent=self)
        self.toast(toast_msg, kind="error")

    # ---------- cash ----------
    def update_cash(self, silent: bool = True):
        cash = self.cash.try_get_cash()
        if cash is None:
            self.cash_var.set("Cash: not available")
            if not silent:
                self.toast("Cash balance not available.", kind="warn")
            return None
        self.cash_var.set(f"Cash: {money(cash.balance)}  (updated {timestamp_label(cash.last_updated)})")
        if not silent:
            self.toast("Cash balance updated.", kind="success")
        return cash

    # ---------- refresh ----------
    def refresh_all(self, show_toast: bool = True):
        self.update_cash()
        current = self.nb.select()
        for view in (
            self.dashboard_view,
            self.transactions_view,
            self.cash_view,
            self.raw_materials_view,
            self.products_view,
            self.stock_report_view,
        ):
            if str(view.frame) == current:
                view.refresh()
        if show_toast:
            self.toast("Refreshed.", kind="info", ms=1200)
