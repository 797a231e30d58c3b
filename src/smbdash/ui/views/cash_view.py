from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from smbdash.domain.errors import AppError
from smbdash.domain.models import CASH_ADDITION, CASH_DEDUCTION
from smbdash.ui.formatting import money, timestamp_label


class CashView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Cash")

        self.balance_var = tk.StringVar(value="Balance: -")
        self.kind = tk.StringVar(value=CASH_ADDITION)
        self._build()

    def _build(self):
        tab = self.frame

        ttk.Label(tab, textvariable=self.balance_var, style="Title.TLabel").pack(anchor="w", padx=10, pady=10)

        form = ttk.LabelFrame(tab, text="Manual cash movement")
        form.pack(fill="x", padx=10, pady=(0, 10))

        ttk.Label(form, text="Amount").grid(row=0, column=0, padx=10, pady=6, sticky="w")
        self.amount_e = ttk.Entry(form, width=18)
        self.amount_e.grid(row=0, column=1, padx=10, pady=6, sticky="w")

        ttk.Label(form, text="Type").grid(row=1, column=0, padx=10, pady=6, sticky="w")
        kinds = ttk.Frame(form)
        kinds.grid(row=1, column=1, padx=10, pady=6, sticky="w")
        ttk.Radiobutton(kinds, text="Addition", value=CASH_ADDITION, variable=self.kind).pack(side="left")
        ttk.Radiobutton(kinds, text="Deduction", value=CASH_DEDUCTION, variable=self.kind).pack(side="left", padx=10)

        ttk.Label(form, text="Description").grid(row=2, column=0, padx=10, pady=6, sticky="w")
        self.desc_e = ttk.Entry(form, width=60)
        self.desc_e.grid(row=2, column=1, padx=10, pady=6, sticky="w")

        ttk.Button(form, text="Update balance", style="Big.TButton", command=self.submit)\
            .grid(row=3, column=1, padx=10, pady=(6, 10), sticky="w")

        hist = ttk.LabelFrame(tab, text="Cash movements")
        hist.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        cols = ("dt", "type", "amount", "desc")
        heads = {"dt": "Date", "type": "Type", "amount": "Amount", "desc": "Description"}
        widths = {"dt": 160, "type": 110, "amount": 140, "desc": 560}
        self.tree = ttk.Treeview(hist, columns=cols, show="headings", height=14)
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.pack(fill="both", expand=True, padx=10, pady=10)

    def refresh(self):
        for item in self.tree.get_children():
            self.tree.delete(item)

        cash = self.app.update_cash()
        if cash is None:
            self.balance_var.set("Balance: not available")
            return
        self.balance_var.set(f"Balance: {money(cash.balance)}  (last updated {timestamp_label(cash.last_updated)})")
        for m in cash.movements:
            self.tree.insert("", "end", values=(timestamp_label(m.date), m.type, money(m.amount), m.description))

    def submit(self):
        try:
            self.app.cash.adjust(self.amount_e.get(), self.kind.get(), self.desc_e.get())
        except AppError as e:
            self.app.handle_error("Cash not updated", e, "Cash update failed.")
            return

        self.app.toast("Cash balance updated.", kind="success")
        self.amount_e.delete(0, tk.END)
        self.desc_e.delete(0, tk.END)
        self.kind.set(CASH_ADDITION)
        self.refresh()
