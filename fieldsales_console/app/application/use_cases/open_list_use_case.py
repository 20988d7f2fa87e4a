from __future__ import annotations

from fieldsales_console.app.application.list_controller import ListController
from fieldsales_console.app.application.mutation_executor import Notifier
from fieldsales_console.app.application.repository import ResourceRepository
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError
from fieldsales_console.app.domain.resources import get_resource
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient


class OpenListUseCase:
    def __init__(self, tables: TableClient, identity: Identity | None, notifier: Notifier | None = None) -> None:
        self.tables = tables
        self.identity = identity
        self.notifier = notifier

    def execute(self, resource_name: str, page_size: int | None = None) -> ListController:
        resource = get_resource(resource_name)
        if resource.required_role is not None and (self.identity is None or self.identity.role is not resource.required_role):
            raise ScopeDeniedError(resource.name, self.identity.role if self.identity else None)
        repository = ResourceRepository(resource, self.tables, self.identity)
        return ListController(
            resource,
            repository.fetch_page,
            repository.soft_delete,
            identity=self.identity,
            page_size=page_size,
            notifier=self.notifier,
        )
