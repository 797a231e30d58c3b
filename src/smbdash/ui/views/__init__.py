from .dashboard_view import DashboardView
from .transactions_view import TransactionsView
from .cash_view import CashView
from .raw_materials_view import RawMaterialsView
from .products_view import ProductsView
from .stock_report_view import StockReportView

__all__ = [
    "DashboardView",
    "TransactionsView",
    "CashView",
    "RawMaterialsView",
    "ProductsView",
    "StockReportView",
]
