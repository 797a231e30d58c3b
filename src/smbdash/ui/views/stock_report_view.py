from __future__ import annotations

from tkinter import ttk

from smbdash.domain.errors import AppError
from smbdash.ui.formatting import timestamp_label


class StockReportView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Stock report")

        box = ttk.LabelFrame(self.frame, text="Product stock movements")
        box.pack(fill="both", expand=True, padx=10, pady=10)

        cols = ("dt", "product", "type", "qty", "desc")
        heads = {"dt": "Date", "product": "Product", "type": "Type", "qty": "Quantity", "desc": "Description"}
        widths = {"dt": 160, "product": 240, "type": 100, "qty": 90, "desc": 480}
        self.tree = ttk.Treeview(box, columns=cols, show="headings", height=22)
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.pack(fill="both", expand=True, padx=10, pady=10)

    def refresh(self):
        for item in self.tree.get_children():
            self.tree.delete(item)
        try:
            rows = self.app.reporting.stock_movements("product")
        except AppError as e:
            self.app.handle_error("Stock report", e, "Failed to load stock report.")
            return
        for m in rows:
            self.tree.insert("", "end", values=(
                timestamp_label(m.date), m.product_name or "N/A", m.type, f"{m.quantity:g}", m.description
            ))
