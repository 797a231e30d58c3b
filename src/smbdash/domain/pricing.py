from __future__ import annotations

from typing import Iterable, Optional

from smbdash.domain.models import Product, RawMaterial
from smbdash.domain.rules import is_blank, round_money


def _as_float(value) -> Optional[float]:
    if is_blank(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value) -> Optional[int]:
    number = _as_float(value)
    return int(number) if number is not None else None


def sale_amount(product: Optional[Product], quantity) -> Optional[float]:
    qty = _as_int(quantity)
    if product is None or qty is None or qty <= 0:
        return None
    total = round_money(product.selling_price * qty)
    return total if total > 0 else None


def purchase_cost(quantity, cost_per_unit) -> Optional[float]:
    """Cash needed to buy ``quantity`` units of a raw material; ``None`` if incomplete."""
    qty = _as_float(quantity)
    cost = _as_float(cost_per_unit)
    if qty is None or cost is None or qty <= 0 or cost <= 0:
        return None
    return qty * cost


def production_cost(lines: Iterable[dict], materials: Iterable[RawMaterial]) -> float:
    """
    lines: [{raw_material_id, quantity}]

    Incomplete lines (no material picked, unknown material, blank or
    non-positive quantity) contribute nothing.
    """
    by_id = {m.id: m for m in materials}
    total = 0.0
    for line in lines:
        mid = _as_int(line.get("raw_material_id"))
        qty = _as_float(line.get("quantity"))
        if not mid or qty is None or qty <= 0:
            continue
        material = by_id.get(mid)
        if material is None:
            continue
        total += material.cost_per_unit * qty
    return total


def price_preview(lines: Iterable[dict], materials: Iterable[RawMaterial], profit_margin) -> tuple[Optional[float], Optional[float]]:
    """Returns (production_cost, selling_price), each rounded, ``None`` when not positive."""
    margin = _as_float(profit_margin) if not is_blank(profit_margin) else 0.0
    if margin is None or margin < 0:
        return None, None
    cost = production_cost(lines, materials)
    price = cost + (cost * margin) / 100
    return (
        round_money(cost) if cost > 0 else None,
        round_money(price) if price > 0 else None,
    )


def implied_margin(product: Product) -> Optional[float]:
    if product.production_cost <= 0:
        return None
    return (product.selling_price - product.production_cost) * 100 / product.production_cost
