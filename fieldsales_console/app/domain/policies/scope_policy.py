from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Union

from fieldsales_console.app.domain.models.identity import Identity, Role
from fieldsales_console.app.domain.resources import ResourceDefinition, ScopeKind, read_field
from fieldsales_console.clients.backend_sdk.postgrest import Filter, eq, in_

TeamLookup = Callable[[str], Iterable[str]]


class ScopeDeniedError(Exception):
    def __init__(self, resource: str, role: Role | None, message: str | None = None) -> None:
        self.resource = resource
        self.role = role
        super().__init__(message or f"Role {role.value if role else 'anonymous'} may not access {resource}")


@dataclass(frozen=True)
class Unrestricted:
    denies_all = False

    def clauses(self) -> tuple[Filter, ...]:
        return ()

    def matches(self, row: Any) -> bool:
        return True


@dataclass(frozen=True)
class DenyAll:
    reason: str
    denies_all = True

    def clauses(self) -> tuple[Filter, ...]:
        return ()

    def matches(self, row: Any) -> bool:
        return False


@dataclass(frozen=True)
class FieldEquals:
    field: str
    value: str
    denies_all = False

    def clauses(self) -> tuple[Filter, ...]:
        return (eq(self.field, self.value),)

    def matches(self, row: Any) -> bool:
        return str(read_field(row, self.field)) == self.value


@dataclass(frozen=True)
class FieldIn:
    field: str
    values: tuple[str, ...]
    denies_all = False

    def clauses(self) -> tuple[Filter, ...]:
        return (in_(self.field, self.values),)

    def matches(self, row: Any) -> bool:
        return str(read_field(row, self.field)) in self.values


Scope = Union[Unrestricted, DenyAll, FieldEquals, FieldIn]


def get_scope(identity: Identity | None, resource: ResourceDefinition, team_lookup: TeamLookup | None = None) -> Scope:
    if identity is None:
        return DenyAll("no signed-in identity")
    if identity.role is Role.ADMIN:
        return Unrestricted()

    rule = resource.scope_rule
    if rule.kind is ScopeKind.ADMIN_ONLY:
        raise ScopeDeniedError(resource.name, identity.role)
    if rule.kind is ScopeKind.NONE or rule.field is None:
        return Unrestricted()
    if rule.kind is ScopeKind.DIRECT:
        return FieldEquals(rule.field, identity.id)

    if team_lookup is None:
        return DenyAll("team lookup unavailable")
    officer_ids = tuple(dict.fromkeys(str(officer_id) for officer_id in team_lookup(identity.id)))
    if not officer_ids:
        return DenyAll("no sales officers report to this manager")
    return FieldIn(rule.field, officer_ids)
