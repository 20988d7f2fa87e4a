from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from fieldsales_console.clients.backend_sdk.models_rows import ShopRow


@dataclass
class OrderProduct:
    product_id: str | None
    product_name: str | None
    quantity: int
    amount: Decimal
    free_qty: int = 0

    @property
    def is_free(self) -> bool:
        return self.free_qty > 0

    @property
    def units(self) -> int:
        return self.quantity + self.free_qty


@dataclass
class Order:
    order_id: str
    visit_id: str | None = None
    created_at: datetime | None = None
    currency: str | None = None
    sales_officers_id: str | None = None
    sales_officer_name: str | None = None
    shop_id: str | None = None
    shop_name: str | None = None
    area_sales_manager_id: str | None = None
    area_sales_manager_name: str | None = None
    products: list[OrderProduct] = field(default_factory=list)
    total_amount: Decimal = Decimal("0")

    @property
    def paid_products(self) -> list[OrderProduct]:
        return [line for line in self.products if not line.is_free]

    @property
    def free_products(self) -> list[OrderProduct]:
        return [line for line in self.products if line.is_free]

    @property
    def product_count(self) -> int:
        return len(self.products)

    @property
    def total_quantity(self) -> int:
        return sum(line.units for line in self.products)

    @property
    def product_names(self) -> str:
        return " ".join(line.product_name for line in self.products if line.product_name)


@dataclass
class TopProduct:
    product_id: str
    product_name: str | None
    quantity: int = 0
    amount: Decimal = Decimal("0")


@dataclass
class TopSalesOfficer:
    sales_officers_id: str
    name: str | None
    visit_count: int = 0
    order_count: int = 0
    total_amount: Decimal = Decimal("0")


@dataclass
class ShopSummary:
    shop: ShopRow
    gps_location: str | None
    recent_orders: list[Order]
    order_count: int
    total_sales: Decimal
    currency: str
    top_products: list[TopProduct]
    top_sales_officers: list[TopSalesOfficer]


@dataclass(frozen=True)
class MonthlySales:
    month: str
    amount: Decimal


@dataclass(frozen=True)
class ActivityItem:
    order_id: str
    description: str
    created_at: datetime | None
    relative_time: str


@dataclass
class DashboardStats:
    total_sales: Decimal
    orders_count: int
    active_shops: int
    active_sales_officers: int
    monthly_sales: list[MonthlySales]
    sales_change_percent: int
    orders_change_percent: int
    recent_activity: list[ActivityItem]
