from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class _Row(BaseModel):
    model_config = ConfigDict(extra="allow")

    # timestamp columns without a zone are stored in UTC
    @field_validator("created_at", check_fields=False)
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class OrderLineRow(_Row):
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
    product_id: str | None = None
    product_name: str | None = None
    quantity: int = 0
    amount: Decimal = Decimal("0")
    free_qty: int = 0
    is_deleted: bool = False

    @field_validator("quantity", "free_qty", "amount", mode="before")
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class ShopRow(_Row):
    shop_id: str
    name: str | None = None
    address: str | None = None
    territory: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    owner_name: str | None = None
    phone_number: str | None = None
    gps_location: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    is_deleted: bool = False


class ProductRow(_Row):
    product_id: str
    name: str | None = None
    category: str | None = None
    unit_of_measure: str | None = None
    mrp: Decimal | None = None
    pts: Decimal | None = None
    ptr: Decimal | None = None
    scheme_type: str | None = None
    scheme_percentage: Decimal | None = None
    net_ptr: Decimal | None = None
    retailer_profit_value: Decimal | None = None
    gst_percent: Decimal | None = None
    currency: str | None = None
    product_scheme_buy_qty: int | None = None
    product_scheme_get_qty: int | None = None
    is_active: bool = True
    created_at: datetime | None = None


class SalesOfficerRow(_Row):
    sales_officers_id: str
    employee_id: str | None = None
    name: str | None = None
    phone_number: str | None = None
    address: str | None = None
    dob: date | None = None
    id_type: str | None = None
    id_no: str | None = None
    reporting_manager_id: str | None = None
    reporting_manager_name: str | None = None
    is_active: bool = True
    created_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_manager(cls, data: Any) -> Any:
        if isinstance(data, dict) and "area_sales_managers" in data:
            data = dict(data)
            manager = data.pop("area_sales_managers")
            if isinstance(manager, dict) and not data.get("reporting_manager_name"):
                data["reporting_manager_name"] = manager.get("name")
        return data


class AreaSalesManagerRow(_Row):
    asm_user_id: str
    employee_id: str | None = None
    name: str | None = None
    phone_number: str | None = None
    address: str | None = None
    dob: date | None = None
    id_type: str | None = None
    id_no: str | None = None
    is_active: bool = True
    created_at: datetime | None = None


class SchemeRow(_Row):
    scheme_id: int
    scheme_text: str | None = None
    scheme_min_price: Decimal | None = None
    scheme_scope: Literal["product", "order"] | None = None
    is_active: bool = True
    created_at: datetime | None = None


class VisitRow(_Row):
    visit_id: str
    shop_id: str | None = None
    sales_officers_id: str | None = None
    created_at: datetime | None = None
    is_deleted: bool = False
