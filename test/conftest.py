import json
import sys
from pathlib import Path

import requests

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_product(id, name, stock=20, price=100.0, cost=50.0, materials=()):
    from smbdash.domain.models import Product

    return Product(id=id, name=name, stock=stock, selling_price=price, production_cost=cost, materials=tuple(materials))


def make_tx(id, type, amount, date, product_id=None, product_name=None, description=""):
    from smbdash.domain.models import Transaction

    return Transaction(
        id=id,
        type=type,
        amount=float(amount),
        description=description or f"{type} #{id}",
        date=date,
        product_id=product_id,
        product_name=product_name,
    )


def make_cash(balance, last_updated="2024-06-15T08:00:00.000Z"):
    from smbdash.domain.models import Cash

    return Cash(id=1, balance=float(balance), last_updated=last_updated)


class FakeApiRepo:
    """In-memory stand-in for ApiRepository; records every write."""

    def __init__(self, products=(), transactions=(), cash=None, materials=(), movements=()):
        self.products = list(products)
        self.transactions = list(transactions)
        self.cash = cash
        self.materials = list(materials)
        self.movements = list(movements)
        self.calls: list[tuple[str, dict]] = []
        self.fail: set[str] = set()

    def _check(self, name):
        from smbdash.domain.errors import ApiError

        if name in self.fail:
            raise ApiError(f"{name} failed", status_code=500)

    def _record(self, name, /, **kwargs):
        self._check(name)
        self.calls.append((name, kwargs))
        return {"id": len(self.calls)}

    # reads
    def list_products(self):
        self._check("list_products")
        return list(self.products)

    def list_transactions(self, page=1, limit=10):
        from smbdash.domain.models import TransactionPage

        self._check("list_transactions")
        start = (page - 1) * limit
        return TransactionPage(transactions=self.transactions[start:start + limit], page=page, limit=limit)

    def get_cash(self):
        from smbdash.domain.errors import ApiError

        self._check("get_cash")
        if self.cash is None:
            raise ApiError("Cash record not available.", status_code=404)
        return self.cash

    def list_raw_materials(self):
        self._check("list_raw_materials")
        return list(self.materials)

    def list_stock_movements(self, kind="product"):
        self._check("list_stock_movements")
        return list(self.movements)

    # writes
    def create_transaction(self, type, amount, description, product_id=None, quantity=None):
        return self._record("create_transaction", type=type, amount=amount, description=description,
                            product_id=product_id, quantity=quantity)

    def update_cash(self, amount, type, description):
        return self._record("update_cash", amount=amount, type=type, description=description)

    def create_raw_material(self, name, stock, cost_per_unit):
        return self._record("create_raw_material", name=name, stock=stock, cost_per_unit=cost_per_unit)

    def update_raw_material(self, material_id, name=None, cost_per_unit=None, stock_to_add=None):
        return self._record("update_raw_material", material_id=material_id, name=name,
                            cost_per_unit=cost_per_unit, stock_to_add=stock_to_add)

    def delete_raw_material(self, material_id):
        self._record("delete_raw_material", material_id=material_id)

    def create_product(self, name, profit_margin, raw_materials, production_time=None):
        return self._record("create_product", name=name, profit_margin=profit_margin,
                            raw_materials=list(raw_materials), production_time=production_time)

    def update_product(self, product_id, name=None, production_time=None, profit_margin=None,
                       raw_materials=None, stock_to_add=None):
        return self._record("update_product", product_id=product_id, name=name, production_time=production_time,
                            profit_margin=profit_margin, raw_materials=raw_materials, stock_to_add=stock_to_add)

    def delete_product(self, product_id):
        self._record("delete_product", product_id=product_id)


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        else:
            self.content = json.dumps(body).encode("utf-8") if body is not None else b""

    def json(self):
        return json.loads(self.content.decode("utf-8"))

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Replays queued responses (or exceptions) and records each request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[dict] = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        nxt = self.responses.pop(0) if self.responses else FakeResponse(200, {})
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class RoutingSession:
    """Answers by URL suffix, for callers that issue requests from several threads."""

    def __init__(self, routes):
        self.routes = dict(routes)
        self.requests: list[dict] = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        for suffix, response in self.routes.items():
            if url.endswith(suffix):
                return response
        return FakeResponse(404, {"error": "Not found"})
