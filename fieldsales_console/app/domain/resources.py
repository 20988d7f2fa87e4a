"""Declarative description of every listable collection.

One ``ResourceDefinition`` drives the query builder, the client pipeline,
the scope policy and the deactivation path for its collection, so the list
controller itself stays resource-agnostic.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel

from fieldsales_console.app.domain.models.identity import Role
from fieldsales_console.clients.backend_sdk.models_rows import (
    AreaSalesManagerRow,
    OrderLineRow,
    ProductRow,
    SalesOfficerRow,
    SchemeRow,
    ShopRow,
)


class PagingMode(str, Enum):
    SERVER = "server"
    CLIENT = "client"


class ScopeKind(str, Enum):
    NONE = "none"
    DIRECT = "direct"
    INDIRECT = "indirect"
    ADMIN_ONLY = "admin_only"


class FilterKind(str, Enum):
    EQUALS = "equals"
    TIME_RANGE = "time_range"


@dataclass(frozen=True)
class ScopeRule:
    kind: ScopeKind = ScopeKind.NONE
    field: str | None = None


@dataclass(frozen=True)
class FilterDef:
    column: str
    kind: FilterKind = FilterKind.EQUALS
    admin_only: bool = False


@dataclass(frozen=True)
class SoftDeleteFlag:
    column: str
    visible_value: bool
    deactivated_value: bool

    @property
    def toggleable(self) -> bool:
        return self.column == "is_active"


IS_DELETED = SoftDeleteFlag("is_deleted", visible_value=False, deactivated_value=True)
IS_ACTIVE = SoftDeleteFlag("is_active", visible_value=True, deactivated_value=False)


@dataclass(frozen=True, eq=False)
class ResourceDefinition:
    name: str
    table: str
    key_field: str
    row_model: type[BaseModel]
    soft_flag: SoftDeleteFlag
    search_fields: tuple[str, ...]
    sortable: tuple[str, ...]
    filters: Mapping[str, FilterDef] = field(default_factory=dict)
    scope_rule: ScopeRule = ScopeRule()
    paging: PagingMode = PagingMode.CLIENT
    select: str = "*"
    aggregated: bool = False
    mutation_table: str | None = None
    mutation_scope_field: str | None = None
    deactivate_roles: frozenset[Role] = frozenset({Role.ADMIN})
    required_role: Role | None = None
    default_sort_column: str = "created_at"
    default_sort_descending: bool = True

    @property
    def writable_table(self) -> str:
        return self.mutation_table or self.table

    @property
    def pushes_search(self) -> bool:
        # Aggregated search fields (product names) only exist after grouping.
        return not self.aggregated


def read_field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


BOTH_ROLES = frozenset({Role.ADMIN, Role.AREA_MANAGER})

ORDERS = ResourceDefinition(
    name="orders",
    table="orders_view",
    mutation_table="orders",
    key_field="order_id",
    row_model=OrderLineRow,
    soft_flag=IS_DELETED,
    search_fields=("order_id", "sales_officer_name", "shop_name", "area_sales_manager_name", "product_names"),
    sortable=("created_at", "total_amount", "shop_name", "sales_officer_name", "area_sales_manager_name", "order_id"),
    filters={
        "sales_officer": FilterDef("sales_officers_id"),
        "area_manager": FilterDef("area_sales_manager_id", admin_only=True),
        "period": FilterDef("created_at", kind=FilterKind.TIME_RANGE),
    },
    scope_rule=ScopeRule(ScopeKind.INDIRECT, "sales_officers_id"),
    aggregated=True,
    deactivate_roles=BOTH_ROLES,
)

SHOPS = ResourceDefinition(
    name="shops",
    table="shops",
    key_field="shop_id",
    row_model=ShopRow,
    soft_flag=IS_DELETED,
    search_fields=("name", "address", "owner_name", "phone_number", "city"),
    sortable=("name", "territory", "city", "state", "owner_name", "created_at"),
    filters={
        "territory": FilterDef("territory"),
        "city": FilterDef("city"),
        "state": FilterDef("state"),
    },
    scope_rule=ScopeRule(ScopeKind.INDIRECT, "created_by"),
    mutation_scope_field="created_by",
    deactivate_roles=BOTH_ROLES,
)

PRODUCTS = ResourceDefinition(
    name="products",
    table="products",
    key_field="product_id",
    row_model=ProductRow,
    soft_flag=IS_ACTIVE,
    search_fields=("name", "category"),
    sortable=("name", "category", "mrp", "ptr", "net_ptr", "created_at"),
    filters={"category": FilterDef("category")},
)

SALES_OFFICERS = ResourceDefinition(
    name="sales_officers",
    table="sales_officers",
    key_field="sales_officers_id",
    row_model=SalesOfficerRow,
    soft_flag=IS_ACTIVE,
    select="*,area_sales_managers:reporting_manager_id(name)",
    search_fields=("name", "employee_id", "phone_number"),
    sortable=("name", "employee_id", "phone_number", "created_at"),
    filters={"reporting_manager": FilterDef("reporting_manager_id", admin_only=True)},
    scope_rule=ScopeRule(ScopeKind.DIRECT, "reporting_manager_id"),
    paging=PagingMode.SERVER,
    mutation_scope_field="reporting_manager_id",
    deactivate_roles=BOTH_ROLES,
)

AREA_SALES_MANAGERS = ResourceDefinition(
    name="area_sales_managers",
    table="area_sales_managers",
    key_field="asm_user_id",
    row_model=AreaSalesManagerRow,
    soft_flag=IS_ACTIVE,
    search_fields=("name", "employee_id", "phone_number", "address"),
    sortable=("name", "employee_id", "phone_number", "created_at"),
    scope_rule=ScopeRule(ScopeKind.ADMIN_ONLY),
    paging=PagingMode.SERVER,
    required_role=Role.ADMIN,
)

SCHEMES = ResourceDefinition(
    name="schemes",
    table="schemes",
    key_field="scheme_id",
    row_model=SchemeRow,
    soft_flag=IS_ACTIVE,
    search_fields=("scheme_text", "scheme_scope"),
    sortable=("scheme_text", "scheme_min_price", "scheme_scope", "created_at"),
    filters={"scope": FilterDef("scheme_scope")},
)

RESOURCES: dict[str, ResourceDefinition] = {
    resource.name: resource
    for resource in (ORDERS, SHOPS, PRODUCTS, SALES_OFFICERS, AREA_SALES_MANAGERS, SCHEMES)
}


def get_resource(name: str) -> ResourceDefinition:
    try:
        return RESOURCES[name.strip().lower().replace("-", "_")]
    except KeyError as exc:
        raise ValueError(f"Unknown resource: {name}. Expected one of: {', '.join(RESOURCES)}") from exc
