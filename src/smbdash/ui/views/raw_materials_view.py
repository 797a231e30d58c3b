from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox

from smbdash.domain.errors import AppError
from smbdash.domain.models import RawMaterial
from smbdash.ui.formatting import money


class RawMaterialsView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Raw materials")

        self.materials: list[RawMaterial] = []
        self.cost_var = tk.StringVar(value="Total cost: n/a")
        self._build()

    def _build(self):
        tab = self.frame

        left = ttk.LabelFrame(tab, text="Buy new raw material", width=290)
        left.pack(side="left", fill="y", padx=(0, 6), pady=8)
        left.pack_propagate(False)

        right = ttk.LabelFrame(tab, text="Raw materials")
        right.pack(side="right", fill="both", expand=True, pady=8)

        self.name_e = self._entry(left, "Name", 0)
        self.stock_e = self._entry(left, "Stock", 1)
        self.cost_e = self._entry(left, "Cost per unit", 2)
        for e in (self.stock_e, self.cost_e):
            e.bind("<KeyRelease>", lambda _e: self.update_preview())

        ttk.Label(left, textvariable=self.cost_var).grid(row=3, column=0, columnspan=2, sticky="w", padx=8, pady=6)
        ttk.Button(left, text="Add", command=self.on_add).grid(row=4, column=0, columnspan=2, sticky="ew", padx=8, pady=6)

        cols = ("id", "name", "stock", "cost")
        heads = {"id": "ID", "name": "Name", "stock": "Stock", "cost": "Cost / unit"}
        widths = {"id": 48, "name": 300, "stock": 100, "cost": 120}
        self.tree = ttk.Treeview(right, columns=cols, show="headings", height=20)
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.pack(fill="both", expand=True, padx=6, pady=6)
        self.tree.bind("<Double-1>", lambda _e: self.open_edit())

        btns = ttk.Frame(right)
        btns.pack(fill="x", padx=6, pady=(0, 6))
        ttk.Button(btns, text="Edit / restock", command=self.open_edit).pack(side="left")
        ttk.Button(btns, text="Delete", command=self.on_delete).pack(side="left", padx=10)

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=4)
        e = ttk.Entry(parent, width=16)
        e.grid(row=row, column=1, sticky="ew", padx=8, pady=4)
        parent.columnconfigure(1, weight=1)
        return e

    def update_preview(self):
        cost = self.app.inventory.raw_material_cost_preview(self.stock_e.get(), self.cost_e.get())
        self.cost_var.set(f"Total cost: {money(cost)}")

    def refresh(self):
        for item in self.tree.get_children():
            self.tree.delete(item)
        try:
            self.materials = self.app.inventory.list_raw_materials()
        except AppError as e:
            self.app.handle_error("Raw materials", e, "Failed to load raw materials.")
            self.materials = []
        for m in self.materials:
            self.tree.insert("", "end", iid=str(m.id), values=(m.id, m.name, f"{m.stock:g}", money(m.cost_per_unit)))

    def _selected(self) -> RawMaterial | None:
        sel = self.tree.selection()
        if not sel:
            return None
        return next((m for m in self.materials if str(m.id) == sel[0]), None)

    def on_add(self):
        try:
            self.app.inventory.add_raw_material(self.name_e.get(), self.stock_e.get(), self.cost_e.get())
        except AppError as e:
            self.app.handle_error("Raw material not added", e, "Failed to add raw material.")
            return
        self.app.toast("Raw material added, cash deducted.", kind="success")
        for e in (self.name_e, self.stock_e, self.cost_e):
            e.delete(0, tk.END)
        self.update_preview()
        self.app.update_cash()
        self.refresh()

    def on_delete(self):
        material = self._selected()
        if material is None:
            messagebox.showwarning("Validation", "Select a raw material.", parent=self.frame)
            return
        if not messagebox.askyesno("Confirm delete", f"Delete raw material '{material.name}'?", parent=self.frame):
            return
        try:
            self.app.inventory.delete_raw_material(material.id)
        except AppError as e:
            self.app.handle_error("Delete raw material", e, "Failed to delete raw material.")
            return
        self.app.toast("Raw material deleted.", kind="success")
        self.refresh()

    def open_edit(self):
        material = self._selected()
        if material is None:
            messagebox.showwarning("Validation", "Select a raw material.", parent=self.frame)
            return

        win = tk.Toplevel(self.app)
        win.title(f"Edit raw material #{material.id}")
        win.transient(self.app)

        name_e = self._entry(win, "Name", 0)
        name_e.insert(0, material.name)
        cost_e = self._entry(win, "Cost per unit", 1)
        cost_e.insert(0, f"{material.cost_per_unit:g}")
        add_e = self._entry(win, "Stock to add", 2)

        preview = tk.StringVar(value="Purchase cost: n/a")

        def update_preview(_evt=None):
            cost = self.app.inventory.raw_material_cost_preview(add_e.get(), cost_e.get())
            preview.set(f"Purchase cost: {money(cost)}")

        for e in (cost_e, add_e):
            e.bind("<KeyRelease>", update_preview)
        ttk.Label(win, textvariable=preview).grid(row=3, column=0, columnspan=2, sticky="w", padx=8, pady=6)

        def save():
            try:
                self.app.inventory.update_raw_material(material.id, name_e.get(), cost_e.get(), add_e.get())
            except AppError as e:
                self.app.handle_error("Raw material not updated", e, "Failed to update raw material.")
                return
            win.destroy()
            self.app.toast("Raw material updated.", kind="success")
            self.app.update_cash()
            self.refresh()

        ttk.Button(win, text="Save", command=save).grid(row=4, column=0, columnspan=2, sticky="ew", padx=8, pady=8)
