"""Owned dashboard state: the current snapshot and collaborator lifecycles."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Sequence, TypeVar

from tenacity import RetryError, Retrying, stop_after_attempt, wait_fixed

from rural_explorer.common.errors import LifecycleError, StaleLoadError
from rural_explorer.common.models import DerivedSummary, PropertyRecord
from rural_explorer.common.time_utils import utc_now

T = TypeVar("T")


@dataclass(frozen=True)
class LoadTicket:
    generation: int
    source_name: str


@dataclass(frozen=True)
class Snapshot:
    generation: int
    source_name: str
    records: tuple[PropertyRecord, ...]
    summary: DerivedSummary
    loaded_at: datetime


class DashboardState:
    """Holds at most one snapshot and replaces it whole.

    Each load takes a ticket first. Only the most recently issued ticket may
    commit, so a slow load that finishes after a newer one started is dropped
    instead of overwriting the newer data.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest_generation = 0
        self._current: Snapshot | None = None

    @property
    def current(self) -> Snapshot | None:
        return self._current

    @property
    def latest_generation(self) -> int:
        return self._latest_generation

    def begin_load(self, source_name: str) -> LoadTicket:
        with self._lock:
            self._latest_generation += 1
            return LoadTicket(generation=self._latest_generation, source_name=source_name)

    def is_current(self, ticket: LoadTicket) -> bool:
        return ticket.generation == self._latest_generation

    def commit(
        self,
        ticket: LoadTicket,
        records: Sequence[PropertyRecord],
        summary: DerivedSummary,
    ) -> Snapshot:
        with self._lock:
            if ticket.generation != self._latest_generation:
                raise StaleLoadError(
                    f"load {ticket.generation} ({ticket.source_name}) superseded by "
                    f"load {self._latest_generation}"
                )
            snapshot = Snapshot(
                generation=ticket.generation,
                source_name=ticket.source_name,
                records=tuple(records),
                summary=summary,
                loaded_at=utc_now(),
            )
            self._current = snapshot
            return snapshot

    def clear(self) -> None:
        with self._lock:
            self._current = None


class LifecycleState(str, Enum):
    UNINITIALISED = "uninitialised"
    READY = "ready"
    FAILED = "failed"


class Lifecycle:
    """uninitialised -> ready | failed, with a bounded number of attempts."""

    def __init__(self, name: str, *, max_attempts: int = 2, wait_seconds: float = 0.6) -> None:
        self.name = name
        self.max_attempts = max_attempts
        self.wait_seconds = wait_seconds
        self.state = LifecycleState.UNINITIALISED
        self.attempts = 0
        self.last_error: BaseException | None = None
        self.resource = None

    @property
    def ready(self) -> bool:
        return self.state is LifecycleState.READY

    def initialise(self, factory: Callable[[], T]) -> T:
        if self.state is LifecycleState.READY:
            return self.resource
        if self.state is LifecycleState.FAILED:
            raise LifecycleError(f"{self.name} already failed: {self.last_error}")

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.wait_seconds),
            reraise=False,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self.attempts = attempt.retry_state.attempt_number
                    self.resource = factory()
        except RetryError as exc:
            self.state = LifecycleState.FAILED
            self.last_error = exc.last_attempt.exception()
            raise LifecycleError(
                f"{self.name} failed after {self.attempts} attempts: {self.last_error}"
            ) from self.last_error

        self.state = LifecycleState.READY
        self.last_error = None
        return self.resource

    def reset(self) -> None:
        self.state = LifecycleState.UNINITIALISED
        self.attempts = 0
        self.last_error = None
        self.resource = None
