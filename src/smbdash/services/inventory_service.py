from __future__ import annotations

import logging
from typing import Iterable, Optional

from smbdash.domain import rules
from smbdash.domain.errors import NotFoundError, ValidationError
from smbdash.domain.models import Product, RawMaterial
from smbdash.domain.pricing import implied_margin, price_preview, purchase_cost

log = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, repo, cash_service):
        self.repo = repo
        self.cash = cash_service

    # ---------- raw materials ----------
    def list_raw_materials(self) -> list[RawMaterial]:
        return self.repo.list_raw_materials()

    def get_raw_material(self, material_id: int) -> RawMaterial:
        for m in self.repo.list_raw_materials():
            if m.id == int(material_id):
                return m
        raise NotFoundError("Raw material not found.")

    def add_raw_material(self, name: Optional[str], stock, cost_per_unit) -> dict:
        name = rules.require_text(name, "Name")
        qty = rules.non_negative_amount(stock, "Stock")
        cost = rules.positive_amount(cost_per_unit, "Cost per unit")

        rules.ensure_funds(self.cash.try_get_cash(), qty * cost)
        created = self.repo.create_raw_material(name, qty, cost)
        log.info("raw_material_created name=%s stock=%s cost=%.2f", name, qty, cost)
        return created

    def update_raw_material(self, material_id: int, name: Optional[str], cost_per_unit=None, stock_to_add=None) -> dict:
        name = rules.require_text(name, "Name")
        cost = rules.optional(cost_per_unit, rules.positive_amount, "Cost per unit")
        to_add = rules.optional(stock_to_add, rules.non_negative_amount, "Stock to add")

        if to_add:
            unit_cost = cost if cost is not None else self.get_raw_material(material_id).cost_per_unit
            rules.ensure_funds(self.cash.try_get_cash(), to_add * unit_cost)

        updated = self.repo.update_raw_material(int(material_id), name=name, cost_per_unit=cost, stock_to_add=to_add)
        log.info("raw_material_updated id=%s stock_to_add=%s", material_id, to_add)
        return updated

    def delete_raw_material(self, material_id: int) -> None:
        self.repo.delete_raw_material(int(material_id))
        log.info("raw_material_deleted id=%s", material_id)

    @staticmethod
    def raw_material_cost_preview(stock, cost_per_unit) -> Optional[float]:
        return purchase_cost(stock, cost_per_unit)

    # ---------- products ----------
    def list_products(self) -> list[Product]:
        return self.repo.list_products()

    def low_stock(self, threshold: int = 10) -> list[Product]:
        return [p for p in self.repo.list_products() if int(p.stock) < threshold]

    @staticmethod
    def _bill_of_materials(lines: Iterable[dict]) -> list[dict]:
        """
        lines: [{raw_material_id, quantity}]
        """
        lines = list(lines)
        error = ValidationError("At least one raw material with a positive quantity is required.")
        if not lines:
            raise error

        out = []
        for line in lines:
            try:
                mid = int(line.get("raw_material_id") or 0)
                qty = float(line.get("quantity") or 0)
            except (TypeError, ValueError):
                raise error from None
            if mid <= 0 or qty <= 0:
                raise error
            out.append({"raw_material_id": mid, "quantity": qty})
        return out

    def add_product(self, name: Optional[str], profit_margin, materials: Iterable[dict], production_time=None) -> dict:
        name = rules.require_text(name, "Name")
        margin = rules.non_negative_amount(profit_margin, "Profit margin")
        bom = self._bill_of_materials(materials)
        minutes = rules.optional(production_time, rules.non_negative_int, "Production time")

        created = self.repo.create_product(name, margin, bom, production_time=minutes)
        log.info("product_created name=%s margin=%.2f materials=%s", name, margin, len(bom))
        return created

    def update_product(
        self,
        product_id: int,
        name: Optional[str],
        materials: Iterable[dict],
        profit_margin=None,
        production_time=None,
        stock_to_add=None,
    ) -> dict:
        name = rules.require_text(name, "Name")
        margin = rules.optional(profit_margin, rules.non_negative_amount, "Profit margin")
        bom = self._bill_of_materials(materials)
        to_add = rules.optional(stock_to_add, rules.non_negative_int, "Stock to add")
        minutes = rules.optional(production_time, rules.non_negative_int, "Production time")

        updated = self.repo.update_product(
            int(product_id),
            name=name,
            production_time=minutes,
            profit_margin=margin,
            raw_materials=bom,
            stock_to_add=to_add,
        )
        log.info("product_updated id=%s stock_to_add=%s", product_id, to_add)
        return updated

    def delete_product(self, product_id: int) -> None:
        self.repo.delete_product(int(product_id))
        log.info("product_deleted id=%s", product_id)

    def price_preview(self, lines: Iterable[dict], profit_margin, materials: Iterable[RawMaterial] | None = None):
        if materials is None:
            materials = self.repo.list_raw_materials()
        return price_preview(lines, materials, profit_margin)

    @staticmethod
    def implied_margin(product: Product) -> Optional[float]:
        return implied_margin(product)
