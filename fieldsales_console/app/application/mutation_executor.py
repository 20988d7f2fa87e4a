from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError
from fieldsales_console.app.infrastructure.errors.error_mapper import ErrorMapper
from fieldsales_console.app.infrastructure.logging.logger import get_logger, log_action
from fieldsales_console.clients.backend_sdk.exceptions import ApiError

Notifier = Callable[[str, str], None]


class DeactivationPhase(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    IN_FLIGHT = "in_flight"
    SUCCESS = "success"
    REFETCHING = "refetching"
    FAILURE = "failure"


class MutationBusyError(RuntimeError):
    pass


@dataclass(frozen=True)
class MutationOutcome:
    resource_id: str
    succeeded: bool
    error: Exception | None = None

    @property
    def message(self) -> str | None:
        return ErrorMapper.to_display_message(self.error) if self.error else None


class MutationExecutor:
    """Runs one soft-delete at a time: confirm, update, then refetch through the owner."""

    def __init__(
        self,
        resource_name: str,
        soft_delete: Callable[[str], None] | None,
        refetch: Callable[[], None],
        *,
        identity: Identity | None = None,
        notifier: Notifier | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._resource_name = resource_name
        self._soft_delete = soft_delete
        self._refetch = refetch
        self._identity = identity
        self._notifier = notifier
        self._logger = logger or get_logger(__name__)
        self.phase = DeactivationPhase.IDLE
        self.pending_id: str | None = None
        self.last_error: Exception | None = None
        self.transitions: list[DeactivationPhase] = [DeactivationPhase.IDLE]

    @property
    def busy(self) -> bool:
        return self.phase in {DeactivationPhase.IN_FLIGHT, DeactivationPhase.SUCCESS, DeactivationPhase.REFETCHING}

    def request(self, resource_id: str) -> bool:
        if self.phase is not DeactivationPhase.IDLE:
            return False
        self.transitions = [DeactivationPhase.IDLE]
        self.pending_id = str(resource_id)
        self._move(DeactivationPhase.CONFIRMING)
        return True

    def cancel(self) -> None:
        if self.phase is DeactivationPhase.CONFIRMING:
            self.pending_id = None
            self._move(DeactivationPhase.IDLE)

    def confirm(self) -> MutationOutcome:
        if self.phase is not DeactivationPhase.CONFIRMING or self.pending_id is None:
            raise RuntimeError("No deactivation is awaiting confirmation")
        return self._run(self.pending_id)

    def execute(self, resource_id: str) -> MutationOutcome:
        resource_id = str(resource_id)
        if self.busy:
            return MutationOutcome(resource_id, False, MutationBusyError("Another deactivation is still running"))
        if self.phase is DeactivationPhase.CONFIRMING and self.pending_id != resource_id:
            self.cancel()
        if self.phase is DeactivationPhase.IDLE:
            self.transitions = [DeactivationPhase.IDLE]
        return self._run(resource_id)

    def _run(self, resource_id: str) -> MutationOutcome:
        self._move(DeactivationPhase.IN_FLIGHT)
        try:
            if self._soft_delete is None:
                raise ScopeDeniedError(self._resource_name, self._identity.role if self._identity else None, f"{self._resource_name} is read-only")
            self._soft_delete(resource_id)
        except (ApiError, ScopeDeniedError) as error:
            self.last_error = error
            self._move(DeactivationPhase.FAILURE)
            self._log(resource_id, "error", error=str(error))
            self._notify("error", ErrorMapper.to_display_message(error))
            self.pending_id = None
            self._move(DeactivationPhase.IDLE)
            return MutationOutcome(resource_id, False, error)

        self.last_error = None
        self._move(DeactivationPhase.SUCCESS)
        self._log(resource_id, "success")
        self._notify("success", f"{self._resource_name} {resource_id} deactivated")
        self._move(DeactivationPhase.REFETCHING)
        try:
            self._refetch()
        finally:
            self.pending_id = None
            self._move(DeactivationPhase.IDLE)
        return MutationOutcome(resource_id, True)

    def _move(self, phase: DeactivationPhase) -> None:
        self.phase = phase
        self.transitions.append(phase)

    def _notify(self, level: str, message: str) -> None:
        if self._notifier:
            self._notifier(level, message)

    def _log(self, resource_id: str, outcome: str, **extra: object) -> None:
        log_action(
            self._logger,
            module=self._resource_name,
            action="deactivate",
            actor_role=self._identity.role.value if self._identity else None,
            actor_id=self._identity.id if self._identity else None,
            outcome=outcome,
            resource_id=resource_id,
            **extra,
        )
