from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from fieldsales_console.app.application.mutation_executor import MutationExecutor, MutationOutcome, Notifier
from fieldsales_console.app.application.pipeline import PageSlice, SortState, max_page, toggle_sort
from fieldsales_console.app.application.query_builder import ListQuery, default_sort
from fieldsales_console.app.core.config import settings
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError
from fieldsales_console.app.domain.resources import ResourceDefinition
from fieldsales_console.app.infrastructure.errors.error_mapper import ErrorMapper
from fieldsales_console.app.infrastructure.logging.logger import get_logger, log_action
from fieldsales_console.clients.backend_sdk.exceptions import ApiError

FetchPage = Callable[[ListQuery], PageSlice]
SoftDelete = Callable[[str], None]


@dataclass
class ListState:
    page_size: int = 10
    page: int = 1
    rows: list[Any] = field(default_factory=list)
    total: int = 0
    search: str = ""
    filters: dict[str, Any] = field(default_factory=dict)
    sort: SortState | None = None
    active_only: bool = True
    is_loading: bool = False
    error: str | None = None

    @property
    def max_page(self) -> int:
        return max_page(self.total, self.page_size)


class ListController:
    """Generic role-scoped list: search, filter, sort, paginate and deactivate one resource.

    ``fetch_page`` and ``soft_delete`` are injected; ``ResourceRepository``
    provides both for the real backend. Backend and scope errors never escape
    the controller: they end up in ``state.error`` and one notification.
    """

    def __init__(
        self,
        resource: ResourceDefinition,
        fetch_page: FetchPage,
        soft_delete: SoftDelete | None = None,
        *,
        identity: Identity | None = None,
        page_size: int | None = None,
        notifier: Notifier | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.resource = resource
        self._fetch_page = fetch_page
        self._identity = identity
        self._notifier = notifier
        self._logger = logger or get_logger(__name__)
        self._generation = 0
        self.state = ListState(page_size=page_size or settings.PAGE_SIZE, sort=default_sort(resource))
        self.mutations = MutationExecutor(
            resource.name,
            soft_delete,
            self._refetch_after_mutation,
            identity=identity,
            notifier=notifier,
            logger=self._logger,
        )

    def query(self) -> ListQuery:
        return ListQuery(
            page=self.state.page,
            page_size=self.state.page_size,
            search=self.state.search,
            filters=dict(self.state.filters),
            sort=self.state.sort,
            active_only=self.state.active_only,
        )

    def refresh(self) -> ListState:
        self._generation += 1
        generation = self._generation
        self.state.is_loading = True
        try:
            result = self._fetch_page(self.query())
        except (ApiError, ScopeDeniedError) as error:
            if generation == self._generation:
                message = ErrorMapper.to_display_message(error)
                self.state.error = message
                self._log("fetch", "error", error=str(error))
                if self._notifier:
                    self._notifier("error", message)
        else:
            if generation != self._generation:
                self._log("fetch", "stale", generation=generation, current=self._generation)
                return self.state
            self.state.rows = list(result.rows)
            self.state.total = result.total
            self.state.error = None
        finally:
            if generation == self._generation:
                self.state.is_loading = False
        return self.state

    def retry(self) -> ListState:
        return self.refresh()

    def set_search(self, term: str) -> ListState:
        self.state.search = term or ""
        self.state.page = 1
        return self.refresh()

    def set_filter(self, name: str, value: Any) -> ListState:
        if name not in self.resource.filters:
            raise ValueError(f"Unknown filter for {self.resource.name}: {name}")
        if value in (None, ""):
            self.state.filters.pop(name, None)
        else:
            self.state.filters[name] = value
        self.state.page = 1
        return self.refresh()

    def set_active_only(self, active_only: bool) -> ListState:
        self.state.active_only = active_only
        self.state.page = 1
        return self.refresh()

    def clear_filters(self) -> ListState:
        self.state.filters = {}
        self.state.search = ""
        self.state.active_only = True
        self.state.page = 1
        return self.refresh()

    def toggle_sort(self, column: str) -> ListState:
        if column not in self.resource.sortable:
            raise ValueError(f"{self.resource.name} cannot be sorted by {column}")
        self.state.sort = toggle_sort(self.state.sort, column)
        return self.refresh()

    def go_to_page(self, page: int) -> ListState:
        if page < 1 or page > max(self.state.max_page, 1):
            return self.state
        self.state.page = page
        return self.refresh()

    def next_page(self) -> ListState:
        return self.go_to_page(self.state.page + 1)

    def prev_page(self) -> ListState:
        return self.go_to_page(self.state.page - 1)

    def request_deactivation(self, resource_id: str) -> bool:
        return self.mutations.request(resource_id)

    def cancel_deactivation(self) -> None:
        self.mutations.cancel()

    def confirm_deactivation(self) -> MutationOutcome:
        return self.mutations.confirm()

    def deactivate(self, resource_id: str) -> MutationOutcome:
        return self.mutations.execute(resource_id)

    def _refetch_after_mutation(self) -> None:
        self.refresh()
        last = self.state.max_page
        if last > 0 and self.state.page > last:
            self.state.page = last
            self.refresh()
        elif last == 0:
            self.state.page = 1

    def _log(self, action: str, outcome: str, **extra: Any) -> None:
        log_action(
            self._logger,
            module=self.resource.name,
            action=action,
            actor_role=self._identity.role.value if self._identity else None,
            actor_id=self._identity.id if self._identity else None,
            outcome=outcome,
            **extra,
        )
