from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from smbdash.domain.errors import AppError
from smbdash.domain.models import CAPITAL, EXPENSE, PURCHASE, SALE, Product
from smbdash.ui.formatting import money, timestamp_label, type_label


class TransactionsView:
    """Sub-tabs for each transaction type, one form + history pane per type."""

    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Transactions")

        self.tabs = ttk.Notebook(self.frame)
        self.tabs.pack(fill="both", expand=True, padx=6, pady=6)

        self.panes = {t: TransactionPane(self.tabs, app, t) for t in (SALE, PURCHASE, EXPENSE, CAPITAL)}
        self.tabs.bind("<<NotebookTabChanged>>", lambda _e: self.refresh())

    def refresh(self):
        current = self.tabs.select()
        for pane in self.panes.values():
            if str(pane.frame) == current:
                pane.refresh()


class TransactionPane:
    def __init__(self, notebook: ttk.Notebook, app, type_: str):
        self.app = app
        self.type = type_
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text=type_label(type_))

        self.page = 1
        self.has_next = False
        self.products: list[Product] = []
        self.product_pick = tk.StringVar()
        self.preview_var = tk.StringVar(value="Amount: n/a")
        self.page_var = tk.StringVar(value="Page 1")

        self._build()

    def _build(self):
        tab = self.frame

        form = ttk.LabelFrame(tab, text=f"Record {type_label(self.type).lower()}")
        form.pack(fill="x", padx=10, pady=10)

        row = 0
        if self.type == SALE:
            ttk.Label(form, text="Product").grid(row=row, column=0, padx=10, pady=6, sticky="w")
            self.combo = ttk.Combobox(form, textvariable=self.product_pick, state="readonly", width=60)
            self.combo.grid(row=row, column=1, padx=10, pady=6, sticky="w")
            self.combo.bind("<<ComboboxSelected>>", lambda _e: self.update_preview())
            row += 1

            ttk.Label(form, text="Quantity (pcs)").grid(row=row, column=0, padx=10, pady=6, sticky="w")
            self.qty_e = ttk.Entry(form, width=12)
            self.qty_e.grid(row=row, column=1, padx=10, pady=6, sticky="w")
            self.qty_e.bind("<KeyRelease>", lambda _e: self.update_preview())
            row += 1

            ttk.Label(form, textvariable=self.preview_var).grid(row=row, column=1, padx=10, pady=6, sticky="w")
            row += 1
        else:
            ttk.Label(form, text="Amount").grid(row=row, column=0, padx=10, pady=6, sticky="w")
            self.amount_e = ttk.Entry(form, width=18)
            self.amount_e.grid(row=row, column=1, padx=10, pady=6, sticky="w")
            row += 1

        ttk.Label(form, text="Description").grid(row=row, column=0, padx=10, pady=6, sticky="w")
        self.desc_e = ttk.Entry(form, width=60)
        self.desc_e.grid(row=row, column=1, padx=10, pady=6, sticky="w")
        self.desc_e.bind("<Return>", lambda _e: self.submit())
        row += 1

        ttk.Button(form, text=f"Record {type_label(self.type).lower()}", style="Big.TButton", command=self.submit)\
            .grid(row=row, column=1, padx=10, pady=(6, 10), sticky="w")

        hist = ttk.LabelFrame(tab, text="History")
        hist.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        cols = ("dt", "product", "amount", "desc") if self.type == SALE else ("dt", "amount", "desc")
        heads = {"dt": "Date", "product": "Product", "amount": "Amount", "desc": "Description"}
        widths = {"dt": 160, "product": 220, "amount": 140, "desc": 520}
        self.tree = ttk.Treeview(hist, columns=cols, show="headings", height=12)
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.pack(fill="both", expand=True, padx=10, pady=10)

        nav = ttk.Frame(hist)
        nav.pack(fill="x", padx=10, pady=(0, 10))
        self.prev_b = ttk.Button(nav, text="Previous", command=self.prev_page)
        self.prev_b.pack(side="left")
        ttk.Label(nav, textvariable=self.page_var).pack(side="left", padx=10)
        self.next_b = ttk.Button(nav, text="Next", command=self.next_page)
        self.next_b.pack(side="left")

    # ---------- data ----------
    def refresh(self):
        if self.type == SALE:
            self.refresh_products()
        self.refresh_history()

    def refresh_products(self):
        try:
            self.products = self.app.inventory.list_products()
        except AppError as e:
            self.app.handle_error("Products", e, "Failed to load products.")
            self.products = []
        if not self.products:
            self.app.toast("No products found. Add a product first.", kind="warn")
        self.combo["values"] = [
            f"{p.name} (stock: {p.stock} pcs, price: {money(p.selling_price)}/pcs)" for p in self.products
        ]
        self.update_preview()

    def refresh_history(self):
        try:
            rows, self.has_next = self.app.transactions.list_page(self.type, self.page)
        except AppError as e:
            self.app.handle_error("History", e, "Failed to load transactions.")
            rows, self.has_next = [], False

        for item in self.tree.get_children():
            self.tree.delete(item)
        for t in rows:
            values = [timestamp_label(t.date)]
            if self.type == SALE:
                values.append(t.product_name or "N/A")
            values += [money(t.amount), t.description]
            self.tree.insert("", "end", values=values)

        self.page_var.set(f"Page {self.page}")
        self.prev_b.state(["disabled"] if self.page <= 1 else ["!disabled"])
        self.next_b.state(["!disabled"] if self.has_next else ["disabled"])

    def prev_page(self):
        if self.page > 1:
            self.page -= 1
            self.refresh_history()

    def next_page(self):
        if self.has_next:
            self.page += 1
            self.refresh_history()

    # ---------- form ----------
    def _selected_product(self) -> Product | None:
        idx = self.combo.current()
        if 0 <= idx < len(self.products):
            return self.products[idx]
        return None

    def update_preview(self):
        amount = self.app.transactions.sale_preview(self._selected_product(), self.qty_e.get())
        self.preview_var.set(f"Amount: {money(amount)}")

    def _clear_form(self):
        self.desc_e.delete(0, tk.END)
        if self.type == SALE:
            self.qty_e.delete(0, tk.END)
            self.product_pick.set("")
            self.update_preview()
        else:
            self.amount_e.delete(0, tk.END)

    def submit(self):
        svc = self.app.transactions
        description = self.desc_e.get()
        try:
            if self.type == SALE:
                product = self._selected_product()
                svc.record_sale(product.id if product else 0, self.qty_e.get(), description)
            elif self.type == PURCHASE:
                svc.record_purchase(self.amount_e.get(), description)
            elif self.type == EXPENSE:
                svc.record_expense(self.amount_e.get(), description)
            else:
                svc.record_capital(self.amount_e.get(), description)
        except AppError as e:
            self.app.handle_error(f"{type_label(self.type)} not recorded", e, "Transaction failed.")
            return

        self.app.toast(f"{type_label(self.type)} recorded.", kind="success")
        self._clear_form()
        self.page = 1
        self.app.update_cash()
        self.refresh()
