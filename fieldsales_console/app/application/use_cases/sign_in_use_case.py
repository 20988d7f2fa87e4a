from __future__ import annotations

import logging

from fieldsales_console.app.domain.models.identity import Identity, Role
from fieldsales_console.app.infrastructure.logging.logger import get_logger, log_action
from fieldsales_console.app.ui.forms import validate_login_form
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient
from fieldsales_console.clients.backend_sdk.exceptions import ApiError, AuthError
from fieldsales_console.clients.backend_sdk.models import AuthUser, TokenResponse
from fieldsales_console.clients.backend_sdk.postgrest import QuerySpec, eq
from fieldsales_console.clients.backend_sdk.session import ApiSession


def identity_from_session(session: ApiSession) -> Identity | None:
    if not session.is_authenticated or session.user is None:
        return None
    role = Role.parse(session.role)
    if role is None:
        return None
    return Identity(
        id=session.user.id,
        role=role,
        name=session.display_name,
        email=session.user.email,
        phone=session.user.phone,
    )


class SignInUseCase:
    def __init__(self, session: ApiSession, logger: logging.Logger | None = None) -> None:
        self.session = session
        self.logger = logger or get_logger(__name__)

    def execute(self, identifier: str, password: str, role: Role) -> Identity:
        by_email = role is Role.ADMIN
        form = validate_login_form(identifier, password, by_email=by_email)
        form.raise_for_errors()

        auth = self.session.auth_client()
        try:
            if by_email:
                token = auth.sign_in_with_password(form.values["password"], email=form.values["email"])
            else:
                token = auth.sign_in_with_password(form.values["password"], phone=form.values["phone"])
        except AuthError:
            log_action(self.logger, "auth", "sign_in", role.value, None, "error")
            raise
        if token.user is None:
            raise AuthError(code="NO_USER", message="Sign-in response did not include a user", details=None, status_code=401)

        verified_role, display_name = self._verify_role(token)
        if verified_role is not role:
            log_action(self.logger, "auth", "sign_in", role.value, token.user.id, "denied", verified_role=verified_role.value if verified_role else None)
            raise AuthError(
                code="ROLE_MISMATCH",
                message="Account is not authorized for the selected role",
                details={"requested": role.value, "verified": verified_role.value if verified_role else None},
                status_code=403,
            )

        self.session.establish(token, role=role.value, display_name=display_name)
        log_action(self.logger, "auth", "sign_in", role.value, token.user.id, "success")
        return Identity(
            id=token.user.id,
            role=role,
            name=display_name,
            email=token.user.email,
            phone=token.user.phone,
        )

    def _verify_role(self, token: TokenResponse) -> tuple[Role | None, str | None]:
        user: AuthUser = token.user
        display_name = user.user_metadata.get("name")
        claimed = Role.parse(user.app_metadata.get("role"))
        if claimed is not None:
            return claimed, display_name
        tables = TableClient(http=self.session.http, access_token=token.access_token)
        result = tables.select(
            QuerySpec(
                table="area_sales_managers",
                select="asm_user_id,name",
                filters=(eq("asm_user_id", user.id), eq("is_active", True)),
                limit=1,
            )
        )
        if result.rows:
            return Role.AREA_MANAGER, result.rows[0].get("name") or display_name
        return None, display_name


class SignOutUseCase:
    def __init__(self, session: ApiSession, logger: logging.Logger | None = None) -> None:
        self.session = session
        self.logger = logger or get_logger(__name__)

    def execute(self) -> None:
        identity = identity_from_session(self.session)
        try:
            if self.session.access_token:
                self.session.auth_client().sign_out()
        except ApiError as error:
            log_action(self.logger, "auth", "sign_out", None, None, "error", error=str(error))
        finally:
            self.session.clear()
        log_action(
            self.logger,
            "auth",
            "sign_out",
            identity.role.value if identity else None,
            identity.id if identity else None,
            "success",
        )
