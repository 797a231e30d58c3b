from __future__ import annotations

import logging
from typing import Iterable, Optional

import requests

from smbdash.domain.errors import ApiError
from smbdash.domain.models import Cash, Product, RawMaterial, StockMovement, TransactionPage

log = logging.getLogger("smbdash.api")


class ApiRepository:
    """Thin client over the accounting REST API.

    Every method returns domain models; transport and HTTP failures are
    raised as ``ApiError`` carrying the server's ``error`` message when it
    sent one.
    """

    def __init__(self, base_url: str, timeout: float = 10, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ---------- transport ----------
    def _request(self, method: str, path: str, params: dict | None = None, payload: dict | None = None):
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, params=params, json=payload, timeout=self.timeout)
            r.raise_for_status()
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            message = self._server_error(e.response) or str(e)
            log.warning("api_http_error method=%s path=%s status=%s error=%s", method, path, status, message)
            raise ApiError(message, status_code=status) from e
        except requests.RequestException as e:
            log.warning("api_unreachable method=%s path=%s error=%s", method, path, e)
            raise ApiError(f"API request failed: {e}") from e

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(f"API returned invalid JSON for {method} {path}") from e

    @staticmethod
    def _server_error(response) -> Optional[str]:
        if response is None:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return None

    @staticmethod
    def _parse(parse, data, what: str):
        try:
            return parse(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            log.warning("api_bad_payload what=%s error=%r", what, e)
            raise ApiError(f"API returned malformed {what}: {e!r}") from e

    @staticmethod
    def _compact(payload: dict) -> dict:
        return {k: v for k, v in payload.items() if v is not None}

    @staticmethod
    def _materials_payload(materials: Iterable[dict]) -> list[dict]:
        return [
            {"rawMaterialId": int(m["raw_material_id"]), "quantity": float(m["quantity"])}
            for m in materials
        ]

    # ---------- transactions ----------
    def list_transactions(self, page: int = 1, limit: int = 10) -> TransactionPage:
        data = self._request("GET", "/transactions", params={"page": page, "limit": limit}) or {}
        return self._parse(lambda d: TransactionPage.from_api(d, page=page, limit=limit), data, "transactions")

    def create_transaction(
        self,
        type: str,
        amount: float,
        description: str,
        product_id: int | None = None,
        quantity: int | None = None,
    ) -> dict:
        payload = self._compact({
            "type": type,
            "amount": amount,
            "description": description,
            "productId": product_id,
            "quantity": quantity,
        })
        return self._request("POST", "/transactions", payload=payload) or {}

    # ---------- products ----------
    def list_products(self) -> list[Product]:
        rows = self._request("GET", "/products") or []
        return self._parse(lambda rs: [Product.from_api(p) for p in rs], rows, "products")

    def create_product(
        self,
        name: str,
        profit_margin: float,
        raw_materials: Iterable[dict],
        production_time: int | None = None,
    ) -> dict:
        payload = self._compact({
            "name": name,
            "productionTime": production_time,
            "profitMargin": profit_margin,
            "rawMaterials": self._materials_payload(raw_materials),
        })
        return self._request("POST", "/products", payload=payload) or {}

    def update_product(
        self,
        product_id: int,
        name: str | None = None,
        production_time: int | None = None,
        profit_margin: float | None = None,
        raw_materials: Iterable[dict] | None = None,
        stock_to_add: int | None = None,
    ) -> dict:
        payload = self._compact({
            "name": name,
            "productionTime": production_time,
            "profitMargin": profit_margin,
            "rawMaterials": self._materials_payload(raw_materials) if raw_materials is not None else None,
            "stockToAdd": stock_to_add,
        })
        return self._request("PATCH", f"/products/{int(product_id)}", payload=payload) or {}

    def delete_product(self, product_id: int) -> None:
        self._request("DELETE", f"/products/{int(product_id)}")

    # ---------- raw materials ----------
    def list_raw_materials(self) -> list[RawMaterial]:
        rows = self._request("GET", "/raw-materials") or []
        return self._parse(lambda rs: [RawMaterial.from_api(m) for m in rs], rows, "raw materials")

    def create_raw_material(self, name: str, stock: float, cost_per_unit: float) -> dict:
        payload = {"name": name, "stock": stock, "costPerUnit": cost_per_unit}
        return self._request("POST", "/raw-materials", payload=payload) or {}

    def update_raw_material(
        self,
        material_id: int,
        name: str | None = None,
        cost_per_unit: float | None = None,
        stock_to_add: float | None = None,
    ) -> dict:
        payload = self._compact({"name": name, "costPerUnit": cost_per_unit, "stockToAdd": stock_to_add})
        return self._request("PATCH", f"/raw-materials/{int(material_id)}", payload=payload) or {}

    def delete_raw_material(self, material_id: int) -> None:
        self._request("DELETE", f"/raw-materials/{int(material_id)}")

    # ---------- cash ----------
    def get_cash(self) -> Cash:
        data = self._request("GET", "/cash")
        if not data:
            raise ApiError("Cash record not available.")
        return self._parse(Cash.from_api, data, "cash record")

    def update_cash(self, amount: float, type: str, description: str) -> dict:
        payload = {"amount": amount, "type": type, "description": description}
        return self._request("POST", "/cash", payload=payload) or {}

    # ---------- reports ----------
    def list_stock_movements(self, kind: str = "product") -> list[StockMovement]:
        rows = self._request("GET", "/stock-movements", params={"type": kind}) or []
        return self._parse(lambda rs: [StockMovement.from_api(r) for r in rs], rows, "stock movements")
