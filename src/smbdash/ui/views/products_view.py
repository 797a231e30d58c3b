from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox

from smbdash.domain.errors import AppError
from smbdash.domain.models import Product, RawMaterial
from smbdash.ui.formatting import money


class MaterialLines:
    """Editable bill of materials: one (material, quantity) row per line."""

    def __init__(self, parent, materials: list[RawMaterial], on_change=None):
        self.frame = ttk.Frame(parent)
        self.materials = materials
        self.on_change = on_change or (lambda: None)
        self.rows: list[tuple[ttk.Frame, ttk.Combobox, ttk.Entry]] = []

        self.body = ttk.Frame(self.frame)
        self.body.pack(fill="x")
        ttk.Button(self.frame, text="+ Add material", command=self.add_line).pack(anchor="w", pady=(4, 0))

    def add_line(self, material_id: int = 0, quantity: str = ""):
        row = ttk.Frame(self.body)
        row.pack(fill="x", pady=2)
        combo = ttk.Combobox(row, state="readonly", width=28,
                             values=[f"{m.name} ({money(m.cost_per_unit)}/unit)" for m in self.materials])
        combo.pack(side="left")
        for i, m in enumerate(self.materials):
            if m.id == material_id:
                combo.current(i)
        qty = ttk.Entry(row, width=8)
        qty.insert(0, quantity)
        qty.pack(side="left", padx=6)
        item = (row, combo, qty)
        ttk.Button(row, text="✕", width=3, command=lambda: self.remove_line(item)).pack(side="left")

        combo.bind("<<ComboboxSelected>>", lambda _e: self.on_change())
        qty.bind("<KeyRelease>", lambda _e: self.on_change())
        self.rows.append(item)
        self.on_change()

    def remove_line(self, item):
        if item in self.rows:
            self.rows.remove(item)
            item[0].destroy()
            self.on_change()

    def reset(self):
        for row, _combo, _qty in self.rows:
            row.destroy()
        self.rows = []
        self.add_line()

    def lines(self) -> list[dict]:
        out = []
        for _row, combo, qty in self.rows:
            idx = combo.current()
            mid = self.materials[idx].id if 0 <= idx < len(self.materials) else 0
            out.append({"raw_material_id": mid, "quantity": qty.get().strip()})
        return out


class ProductsView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Products")

        self.products: list[Product] = []
        self.materials: list[RawMaterial] = []
        self.cost_var = tk.StringVar(value="Production cost: n/a")
        self.price_var = tk.StringVar(value="Selling price: n/a")

        tab = self.frame
        self.left = ttk.LabelFrame(tab, text="New product", width=380)
        self.left.pack(side="left", fill="y", padx=(0, 6), pady=8)
        self.left.pack_propagate(False)

        right = ttk.LabelFrame(tab, text="Products")
        right.pack(side="right", fill="both", expand=True, pady=8)

        self.name_e = self._entry(self.left, "Name", 0)
        self.time_e = self._entry(self.left, "Production time (min)", 1)
        self.margin_e = self._entry(self.left, "Profit margin %", 2)
        self.margin_e.bind("<KeyRelease>", lambda _e: self.update_preview())

        ttk.Label(self.left, text="Raw materials").grid(row=3, column=0, sticky="nw", padx=8, pady=4)
        self.lines_holder = ttk.Frame(self.left)
        self.lines_holder.grid(row=3, column=1, sticky="ew", padx=8, pady=4)
        self.lines = MaterialLines(self.lines_holder, self.materials, on_change=self.update_preview)
        self.lines.frame.pack(fill="x")

        ttk.Label(self.left, textvariable=self.cost_var).grid(row=4, column=0, columnspan=2, sticky="w", padx=8, pady=(8, 2))
        ttk.Label(self.left, textvariable=self.price_var).grid(row=5, column=0, columnspan=2, sticky="w", padx=8, pady=2)
        ttk.Button(self.left, text="Add product", command=self.on_add)\
            .grid(row=6, column=0, columnspan=2, sticky="ew", padx=8, pady=8)

        cols = ("id", "name", "stock", "cost", "price", "margin")
        heads = {"id": "ID", "name": "Name", "stock": "Stock (pcs)", "cost": "Production cost",
                 "price": "Selling price", "margin": "Margin %"}
        widths = {"id": 48, "name": 260, "stock": 90, "cost": 130, "price": 130, "margin": 90}
        self.tree = ttk.Treeview(right, columns=cols, show="headings", height=20)
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.tag_configure("low", background="#ffdddd")
        self.tree.pack(fill="both", expand=True, padx=6, pady=6)
        self.tree.bind("<Double-1>", lambda _e: self.open_edit())

        btns = ttk.Frame(right)
        btns.pack(fill="x", padx=6, pady=(0, 6))
        ttk.Button(btns, text="Edit / add stock", command=self.open_edit).pack(side="left")
        ttk.Button(btns, text="Delete", command=self.on_delete).pack(side="left", padx=10)

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=4)
        e = ttk.Entry(parent, width=16)
        e.grid(row=row, column=1, sticky="ew", padx=8, pady=4)
        parent.columnconfigure(1, weight=1)
        return e

    def update_preview(self):
        cost, price = self.app.inventory.price_preview(self.lines.lines(), self.margin_e.get(), self.materials)
        self.cost_var.set(f"Production cost: {money(cost)}")
        self.price_var.set(f"Selling price: {money(price)}")

    def refresh(self):
        for item in self.tree.get_children():
            self.tree.delete(item)
        try:
            self.materials = self.app.inventory.list_raw_materials()
            self.products = self.app.inventory.list_products()
        except AppError as e:
            self.app.handle_error("Products", e, "Failed to load products.")
            self.materials, self.products = [], []

        self.lines.materials = self.materials
        self.lines.reset()

        threshold = self.app.reporting.low_stock_threshold
        for p in self.products:
            margin = self.app.inventory.implied_margin(p)
            self.tree.insert(
                "", "end", iid=str(p.id),
                values=(p.id, p.name, p.stock, money(p.production_cost), money(p.selling_price),
                        f"{margin:.2f}" if margin is not None else "-"),
                tags=("low",) if p.stock < threshold else (),
            )

    def _selected(self) -> Product | None:
        sel = self.tree.selection()
        if not sel:
            return None
        return next((p for p in self.products if str(p.id) == sel[0]), None)

    def on_add(self):
        try:
            self.app.inventory.add_product(
                self.name_e.get(), self.margin_e.get(), self.lines.lines(), production_time=self.time_e.get()
            )
        except AppError as e:
            self.app.handle_error("Product not added", e, "Failed to add product.")
            return
        self.app.toast("Product added.", kind="success")
        for e in (self.name_e, self.time_e, self.margin_e):
            e.delete(0, tk.END)
        self.refresh()
        self.update_preview()

    def on_delete(self):
        product = self._selected()
        if product is None:
            messagebox.showwarning("Validation", "Select a product.", parent=self.frame)
            return
        if not messagebox.askyesno("Confirm delete", f"Delete product '{product.name}'?", parent=self.frame):
            return
        try:
            self.app.inventory.delete_product(product.id)
        except AppError as e:
            self.app.handle_error("Delete product", e, "Failed to delete product.")
            return
        self.app.toast("Product deleted.", kind="success")
        self.refresh()

    def open_edit(self):
        product = self._selected()
        if product is None:
            messagebox.showwarning("Validation", "Select a product.", parent=self.frame)
            return

        win = tk.Toplevel(self.app)
        win.title(f"Edit product #{product.id}")
        win.transient(self.app)

        name_e = self._entry(win, "Name", 0)
        name_e.insert(0, product.name)
        time_e = self._entry(win, "Production time (min)", 1)
        if product.production_time is not None:
            time_e.insert(0, str(product.production_time))
        margin_e = self._entry(win, "Profit margin %", 2)
        margin = self.app.inventory.implied_margin(product)
        if margin is not None:
            margin_e.insert(0, f"{margin:g}")
        stock_e = self._entry(win, "Stock to add (pcs)", 3)

        ttk.Label(win, text="Raw materials").grid(row=4, column=0, sticky="nw", padx=8, pady=4)
        holder = ttk.Frame(win)
        holder.grid(row=4, column=1, sticky="ew", padx=8, pady=4)
        lines = MaterialLines(holder, self.materials)
        lines.frame.pack(fill="x")
        for m in product.materials:
            lines.add_line(m.raw_material_id, f"{m.quantity:g}")
        if not product.materials:
            lines.add_line()

        def save():
            try:
                self.app.inventory.update_product(
                    product.id,
                    name_e.get(),
                    lines.lines(),
                    profit_margin=margin_e.get(),
                    production_time=time_e.get(),
                    stock_to_add=stock_e.get(),
                )
            except AppError as e:
                self.app.handle_error("Product not updated", e, "Failed to update product.")
                return
            win.destroy()
            self.app.toast("Product updated.", kind="success")
            self.refresh()

        ttk.Button(win, text="Save", command=save).grid(row=5, column=0, columnspan=2, sticky="ew", padx=8, pady=8)
