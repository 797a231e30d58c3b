from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional


SALE = "sale"
PURCHASE = "purchase"
EXPENSE = "expense"
CAPITAL = "capital"

TRANSACTION_TYPES = (SALE, PURCHASE, EXPENSE, CAPITAL)
INCOME_TYPES = frozenset({SALE, CAPITAL})
EXPENSE_TYPES = frozenset({PURCHASE, EXPENSE})

CASH_ADDITION = "addition"
CASH_DEDUCTION = "deduction"


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    stock: int
    selling_price: float
    production_cost: float
    production_time: Optional[int] = None
    materials: tuple["ProductMaterial", ...] = ()

    @classmethod
    def from_api(cls, data: dict) -> "Product":
        materials = tuple(ProductMaterial.from_api(m) for m in data.get("rawMaterials") or ())
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            stock=int(data.get("stock") or 0),
            selling_price=float(data.get("sellingPrice") or 0),
            production_cost=float(data.get("productionCost") or 0),
            production_time=_opt_int(data.get("productionTime")),
            materials=materials,
        )


@dataclass(frozen=True)
class ProductMaterial:
    raw_material_id: int
    name: str
    cost_per_unit: float
    quantity: float

    @classmethod
    def from_api(cls, data: dict) -> "ProductMaterial":
        # {"rawMaterial": {...}, "quantity": n} or the flat {"rawMaterialId": id, "quantity": n}
        rm = data.get("rawMaterial") or {}
        return cls(
            raw_material_id=int(rm.get("id", data.get("rawMaterialId", 0))),
            name=str(rm.get("name") or ""),
            cost_per_unit=float(rm.get("costPerUnit") or 0),
            quantity=float(data.get("quantity") or 0),
        )


@dataclass(frozen=True)
class RawMaterial:
    id: int
    name: str
    stock: float
    cost_per_unit: float

    @classmethod
    def from_api(cls, data: dict) -> "RawMaterial":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            stock=float(data.get("stock") or 0),
            cost_per_unit=float(data.get("costPerUnit") or 0),
        )


@dataclass(frozen=True)
class Transaction:
    id: int
    type: str
    amount: float
    description: str
    date: str
    product_id: Optional[int] = None
    product_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Transaction":
        product = data.get("product") or {}
        product_id = product.get("id", data.get("productId"))
        return cls(
            id=int(data["id"]),
            type=str(data.get("type") or ""),
            amount=float(data.get("amount") or 0),
            description=str(data.get("description") or ""),
            date=str(data.get("date") or ""),
            product_id=_opt_int(product_id),
            product_name=product.get("name"),
        )


@dataclass(frozen=True)
class TransactionPage:
    transactions: list[Transaction]
    page: int
    limit: int
    total: Optional[int] = None

    @property
    def is_full(self) -> bool:
        return len(self.transactions) >= self.limit

    @classmethod
    def from_api(cls, data: dict, page: int, limit: int) -> "TransactionPage":
        rows = data.get("transactions") or []
        return cls(
            transactions=[Transaction.from_api(r) for r in rows],
            page=page,
            limit=limit,
            total=_opt_int(data.get("total")),
        )


@dataclass(frozen=True)
class CashMovement:
    id: int
    type: str
    amount: float
    description: str
    date: str

    @classmethod
    def from_api(cls, data: dict) -> "CashMovement":
        return cls(
            id=int(data["id"]),
            type=str(data.get("type") or ""),
            amount=float(data.get("amount") or 0),
            description=str(data.get("description") or ""),
            date=str(data.get("date") or ""),
        )


@dataclass(frozen=True)
class Cash:
    id: int
    balance: float
    last_updated: str
    movements: tuple[CashMovement, ...] = ()

    @classmethod
    def from_api(cls, data: dict) -> "Cash":
        return cls(
            id=int(data.get("id") or 0),
            balance=float(data.get("balance") or 0),
            last_updated=str(data.get("lastUpdated") or ""),
            movements=tuple(CashMovement.from_api(m) for m in data.get("movements") or ()),
        )


@dataclass(frozen=True)
class StockMovement:
    id: int
    date: str
    description: str
    quantity: float
    type: str
    product_name: Optional[str]

    @classmethod
    def from_api(cls, data: dict) -> "StockMovement":
        product = data.get("product") or {}
        return cls(
            id=int(data["id"]),
            date=str(data.get("date") or ""),
            description=str(data.get("description") or ""),
            quantity=float(data.get("quantity") or 0),
            type=str(data.get("type") or ""),
            product_name=product.get("name"),
        )


# ---------- derived (dashboard) ----------

@dataclass(frozen=True)
class MonthlyFinancial:
    income: float
    expenses: float
    profit: float


@dataclass(frozen=True)
class SalesSummary:
    product_id: int
    product_name: str
    total_quantity: int
    total_amount: float


@dataclass(frozen=True)
class DailySales:
    date: str
    total_amount: float


@dataclass(frozen=True)
class ProfitMargin:
    product_id: int
    product_name: str
    margin: float


@dataclass(frozen=True)
class MonthlyForecast:
    product_id: int
    product_name: str
    avg_monthly_demand: float


@dataclass(frozen=True)
class TransactionStats:
    sales: int = 0
    purchases: int = 0
    expenses: int = 0
    capital: int = 0


@dataclass(frozen=True)
class DashboardSnapshot:
    cash: Optional[Cash]
    transactions: list[Transaction] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class DashboardReport:
    cash: Optional[Cash]
    available_months: list[str]
    selected_month: str
    monthly: MonthlyFinancial
    sales_by_product: list[SalesSummary]
    sales_by_date: list[DailySales]
    profit_margins: list[ProfitMargin]
    forecasts: list[MonthlyForecast]
    stats: TransactionStats
    low_stock: list[Product]
    total_sales: float
    total_transactions: int
    recent: list[Transaction]
    error: Optional[str] = None
