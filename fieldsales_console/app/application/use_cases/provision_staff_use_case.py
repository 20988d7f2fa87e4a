from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError
from fieldsales_console.app.infrastructure.logging.logger import get_logger, log_action
from fieldsales_console.app.ui.forms import validate_staff_form
from fieldsales_console.clients.backend_sdk.exceptions import ApiError
from fieldsales_console.clients.backend_sdk.models import ProvisionResponse
from fieldsales_console.clients.backend_sdk.session import ApiSession


class StaffKind(str, Enum):
    AREA_SALES_MANAGER = "area_sales_manager"
    SALES_OFFICER = "sales_officer"


FUNCTION_NAMES = {
    StaffKind.AREA_SALES_MANAGER: "create-asm",
    StaffKind.SALES_OFFICER: "create-sales-officer",
}


def build_payload(values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "phone": values["phone_number"],
        "password": values["password"],
        "employee_id": values["employee_id"],
        "name": values["name"],
        "address": values["address"],
        "phone_number": values["phone_number"],
        "dob": values["dob"] or None,
        "id_type": values["id_type"],
        "id_no": values["id_no"],
    }


class ProvisionStaffUseCase:
    def __init__(self, session: ApiSession, identity: Identity | None, logger: logging.Logger | None = None) -> None:
        self.session = session
        self.identity = identity
        self.logger = logger or get_logger(__name__)

    def execute(self, kind: StaffKind, form: Mapping[str, Any]) -> ProvisionResponse:
        identity = self.identity
        if identity is None:
            raise ScopeDeniedError(kind.value, None, "Sign in to create staff accounts")
        if kind is StaffKind.AREA_SALES_MANAGER and not identity.is_admin:
            raise ScopeDeniedError(kind.value, identity.role, "Only administrators can create area sales managers")

        needs_manager = kind is StaffKind.SALES_OFFICER and identity.is_admin
        result = validate_staff_form(form, require_manager=needs_manager)
        result.raise_for_errors()

        payload = build_payload(result.values)
        if kind is StaffKind.SALES_OFFICER:
            payload["reporting_manager_id"] = result.values["reporting_manager_id"] if identity.is_admin else identity.id

        try:
            data = self.session.functions_client().invoke(FUNCTION_NAMES[kind], payload)
        except ApiError as error:
            log_action(
                self.logger, "provisioning", f"create_{kind.value}", identity.role.value, identity.id, "error",
                employee_id=payload["employee_id"], error=error.message,
            )
            raise
        log_action(
            self.logger, "provisioning", f"create_{kind.value}", identity.role.value, identity.id, "success",
            employee_id=payload["employee_id"],
        )
        return ProvisionResponse.model_validate(data)
