from __future__ import annotations

import argparse
import getpass
import sys
from collections.abc import Sequence

from fieldsales_console.app.application.list_controller import ListController
from fieldsales_console.app.application.pipeline import SortState
from fieldsales_console.app.application.use_cases.load_dashboard_use_case import LoadDashboardUseCase
from fieldsales_console.app.application.use_cases.load_filter_options_use_case import LoadFilterOptionsUseCase
from fieldsales_console.app.application.use_cases.load_shop_details_use_case import LoadShopDetailsUseCase
from fieldsales_console.app.application.use_cases.open_list_use_case import OpenListUseCase
from fieldsales_console.app.application.use_cases.provision_staff_use_case import ProvisionStaffUseCase, StaffKind
from fieldsales_console.app.application.use_cases.sign_in_use_case import SignInUseCase, SignOutUseCase, identity_from_session
from fieldsales_console.app.domain.models.identity import Identity, Role
from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError
from fieldsales_console.app.domain.resources import RESOURCES, get_resource
from fieldsales_console.app.export.csv_exporter import export_current_view
from fieldsales_console.app.infrastructure.errors.error_mapper import ErrorMapper
from fieldsales_console.app.ui.forms import FormValidationError
from fieldsales_console.app.ui.role_gate import RESOURCE_ROUTES, check_route
from fieldsales_console.app.ui.table_printer import LIST_COLUMNS, normalize_value, print_table
from fieldsales_console.clients.backend_sdk.config import ConfigError, load_config
from fieldsales_console.clients.backend_sdk.exceptions import ApiError
from fieldsales_console.clients.backend_sdk.session import ApiSession


def _notify(level: str, message: str) -> None:
    print(f"[{level}] {message}", file=sys.stderr)


def _parse_filters(pairs: Sequence[str]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for pair in pairs:
        name, separator, value = pair.partition("=")
        if not separator:
            raise ValueError(f"Filters must look like name=value, got {pair!r}")
        filters[name.strip()] = value.strip()
    return filters


def _add_view_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("resource", choices=sorted(RESOURCES))
    parser.add_argument("--search", default="")
    parser.add_argument("--filter", action="append", default=[], metavar="NAME=VALUE")
    parser.add_argument("--sort", default=None)
    parser.add_argument("--desc", action="store_true")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--include-inactive", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fieldsales-console", description="Field sales admin console")
    parser.add_argument("--env-file", default=None)
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login")
    login.add_argument("--role", choices=["admin", "asm"], default="admin")
    login.add_argument("identifier", help="email for admins, phone number for area sales managers")

    commands.add_parser("logout")
    commands.add_parser("dashboard")

    _add_view_arguments(commands.add_parser("list"))
    export = commands.add_parser("export")
    _add_view_arguments(export)
    export.add_argument("--output-dir", default=None)

    filters = commands.add_parser("filters", help="show the values accepted by --filter for a resource")
    filters.add_argument("resource", choices=sorted(RESOURCES))

    deactivate = commands.add_parser("deactivate")
    deactivate.add_argument("resource", choices=sorted(RESOURCES))
    deactivate.add_argument("resource_id")
    deactivate.add_argument("--yes", action="store_true")

    shop = commands.add_parser("shop")
    shop.add_argument("shop_id")

    staff = commands.add_parser("create-staff")
    staff.add_argument("kind", choices=[kind.value for kind in StaffKind])
    staff.add_argument("--employee-id", required=True)
    staff.add_argument("--name", required=True)
    staff.add_argument("--phone-number", required=True)
    staff.add_argument("--address", default="")
    staff.add_argument("--dob", default=None)
    staff.add_argument("--id-type", default=None)
    staff.add_argument("--id-no", default="")
    staff.add_argument("--reporting-manager-id", default=None)
    return parser


def _require_route(identity: Identity | None, route: str) -> bool:
    decision = check_route(identity, route)
    if not decision.allowed:
        _notify("denied", f"{decision.message} Go to {decision.redirect_to}.")
    return decision.allowed


def _open_view(session: ApiSession, identity: Identity | None, args: argparse.Namespace) -> ListController:
    controller = OpenListUseCase(session.table_client(), identity, notifier=_notify).execute(args.resource)
    controller.state.search = args.search
    controller.state.filters = _parse_filters(args.filter)
    controller.state.active_only = not args.include_inactive
    if args.sort:
        controller.state.sort = SortState(args.sort, descending=args.desc)
    controller.state.page = max(args.page, 1)
    controller.refresh()
    return controller


def _run(args: argparse.Namespace, session: ApiSession) -> int:
    identity = identity_from_session(session)

    if args.command == "login":
        role = Role.ADMIN if args.role == "admin" else Role.AREA_MANAGER
        signed_in = SignInUseCase(session).execute(args.identifier, getpass.getpass("Password: "), role)
        print(f"Signed in as {signed_in.name or signed_in.id} ({signed_in.role.value})")
        return 0

    if args.command == "logout":
        SignOutUseCase(session).execute()
        print("Signed out")
        return 0

    if args.command == "dashboard":
        if not _require_route(identity, "/dashboard"):
            return 2
        stats = LoadDashboardUseCase(session.table_client(), identity).execute()
        print(f"Total sales: {normalize_value(stats.total_sales)} ({stats.sales_change_percent:+d}%)")
        print(f"Orders: {stats.orders_count} ({stats.orders_change_percent:+d}%)")
        print(f"Active shops: {stats.active_shops}")
        print(f"Active sales officers: {stats.active_sales_officers}")
        print_table("Monthly sales", stats.monthly_sales, [("month", "Month"), ("amount", "Amount")])
        print_table("Recent activity", stats.recent_activity, [("description", "Activity"), ("relative_time", "When")])
        return 0

    if args.command in {"list", "export"}:
        resource = get_resource(args.resource)
        if not _require_route(identity, RESOURCE_ROUTES[resource.name]):
            return 2
        controller = _open_view(session, identity, args)
        if controller.state.error:
            return 1
        if args.command == "export":
            path = export_current_view(resource=resource.name, rows=controller.state.rows, output_dir=args.output_dir)
            print(f"Exported {len(controller.state.rows)} rows to {path}")
            return 0
        state = controller.state
        print_table(f"{resource.name} (page {state.page}/{max(state.max_page, 1)}, {state.total} total)", state.rows, LIST_COLUMNS[resource.name])
        return 0

    if args.command == "filters":
        resource = get_resource(args.resource)
        if not _require_route(identity, RESOURCE_ROUTES[resource.name]):
            return 2
        options = LoadFilterOptionsUseCase(session.table_client(), identity).execute(resource)
        if not options:
            print(f"{resource.name} has no filter options")
        for name, values in options.items():
            rendered = [f"{value['id']} ({value['name']})" if isinstance(value, dict) else value for value in values]
            print(f"{name}: {', '.join(rendered) or '-'}")
        return 0

    if args.command == "deactivate":
        resource = get_resource(args.resource)
        if not _require_route(identity, RESOURCE_ROUTES[resource.name]):
            return 2
        controller = OpenListUseCase(session.table_client(), identity, notifier=_notify).execute(resource.name)
        controller.request_deactivation(args.resource_id)
        if not args.yes and input(f"Deactivate {resource.name} {args.resource_id}? [y/N] ").strip().lower() != "y":
            controller.cancel_deactivation()
            print("Cancelled")
            return 0
        outcome = controller.confirm_deactivation()
        return 0 if outcome.succeeded else 1

    if args.command == "shop":
        if not _require_route(identity, "/shops/detail"):
            return 2
        summary = LoadShopDetailsUseCase(session.table_client(), identity).execute(args.shop_id)
        print(f"{summary.shop.name} ({summary.shop.shop_id}) location={summary.gps_location or '-'}")
        print(f"Orders: {summary.order_count}  Total sales: {normalize_value(summary.total_sales)} {summary.currency}")
        print_table("Recent orders", summary.recent_orders, LIST_COLUMNS["orders"])
        print_table("Top products", summary.top_products, [("product_name", "Product"), ("quantity", "Qty"), ("amount", "Amount")])
        print_table(
            "Top sales officers",
            summary.top_sales_officers,
            [("name", "Officer"), ("visit_count", "Visits"), ("order_count", "Orders"), ("total_amount", "Amount")],
        )
        return 0

    if args.command == "create-staff":
        kind = StaffKind(args.kind)
        form = {
            "employee_id": args.employee_id,
            "name": args.name,
            "phone_number": args.phone_number,
            "password": getpass.getpass("Initial password: "),
            "address": args.address,
            "dob": args.dob,
            "id_type": args.id_type,
            "id_no": args.id_no,
            "reporting_manager_id": args.reporting_manager_id,
        }
        result = ProvisionStaffUseCase(session, identity).execute(kind, form)
        print(result.message or f"{kind.value} {args.employee_id} created")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        session = ApiSession(config=load_config(args.env_file))
        return _run(args, session)
    except ConfigError as error:
        _notify("error", str(error))
        return 2
    except (ApiError, ScopeDeniedError, FormValidationError, ValueError) as error:
        _notify("error", ErrorMapper.to_display_message(error))
        return 1


if __name__ == "__main__":
    sys.exit(main())
