"""Data store collaborator interface and an in-memory implementation."""

from __future__ import annotations

import itertools
import threading
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional, Protocol

from workforce_engine.errors import DataStoreError
from workforce_engine.schema import Employee, ProductivityScoreRecord, Task


class DataStore(Protocol):
    """Queries the analytical components issue against the platform store.

    Implementations raise :class:`DataStoreError` on failure. The engine
    propagates these unchanged and never retries.
    """

    def get_employee(self, organization_id: str, employee_id: str) -> Optional[Employee]: ...

    def list_employees(
        self,
        organization_id: str,
        active_only: bool = False,
        department: Optional[str] = None,
    ) -> list[Employee]: ...

    def tasks_for_employee(self, organization_id: str, employee_id: str) -> list[Task]: ...

    def append_score(self, record: ProductivityScoreRecord) -> None: ...

    def latest_score(self, organization_id: str, employee_id: str) -> Optional[ProductivityScoreRecord]: ...

    def latest_scores(self, organization_id: str) -> list[ProductivityScoreRecord]: ...

    def score_history(
        self, organization_id: str, employee_id: str, since: datetime
    ) -> list[ProductivityScoreRecord]: ...


class InMemoryDataStore:
    """Thread-safe in-memory store used by the CLI, demos and tests.

    Score history is append-only. Records sharing a timestamp are ordered
    by insertion, so the most recent append wins on ties.
    """

    def __init__(
        self,
        employees: Iterable[Employee] = (),
        tasks: Iterable[Task] = (),
        scores: Iterable[ProductivityScoreRecord] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._sequence = itertools.count()
        self._employees: dict[tuple[str, str], Employee] = {}
        self._tasks: dict[tuple[str, str], list[Task]] = defaultdict(list)
        self._scores: dict[tuple[str, str], list[tuple[datetime, int, ProductivityScoreRecord]]] = defaultdict(list)

        for employee in employees:
            self.add_employee(employee)
        for task in tasks:
            self.add_task(task)
        for record in scores:
            self.append_score(record)

    def add_employee(self, employee: Employee) -> None:
        with self._lock:
            self._employees[(employee.organization_id, employee.employee_id)] = employee

    def add_task(self, task: Task) -> None:
        with self._lock:
            self._tasks[(task.organization_id, task.assigned_to)].append(task)

    def get_employee(self, organization_id: str, employee_id: str) -> Optional[Employee]:
        with self._lock:
            return self._employees.get((organization_id, employee_id))

    def list_employees(
        self,
        organization_id: str,
        active_only: bool = False,
        department: Optional[str] = None,
    ) -> list[Employee]:
        wanted_department = department.lower() if department else None
        with self._lock:
            employees = [e for (org, _), e in self._employees.items() if org == organization_id]
        if active_only:
            employees = [e for e in employees if e.is_active]
        if wanted_department is not None:
            employees = [e for e in employees if (e.department or "").lower() == wanted_department]
        return employees

    def tasks_for_employee(self, organization_id: str, employee_id: str) -> list[Task]:
        with self._lock:
            return list(self._tasks.get((organization_id, employee_id), ()))

    def append_score(self, record: ProductivityScoreRecord) -> None:
        if not 0 <= record.score <= 100:
            raise DataStoreError(f"score {record.score} outside [0, 100] for employee {record.employee_id}")
        with self._lock:
            self._scores[(record.organization_id, record.employee_id)].append(
                (record.calculated_at, next(self._sequence), record)
            )

    def latest_score(self, organization_id: str, employee_id: str) -> Optional[ProductivityScoreRecord]:
        with self._lock:
            entries = list(self._scores.get((organization_id, employee_id), ()))
        if not entries:
            return None
        return max(entries, key=lambda entry: entry[:2])[2]

    def latest_scores(self, organization_id: str) -> list[ProductivityScoreRecord]:
        with self._lock:
            buckets = [list(entries) for (org, _), entries in self._scores.items() if org == organization_id and entries]
        return [max(entries, key=lambda entry: entry[:2])[2] for entries in buckets]

    def score_history(
        self, organization_id: str, employee_id: str, since: datetime
    ) -> list[ProductivityScoreRecord]:
        with self._lock:
            entries = list(self._scores.get((organization_id, employee_id), ()))
        window = sorted((entry for entry in entries if entry[0] > since), key=lambda entry: entry[:2])
        return [record for _, _, record in window]

    def all_scores(self, organization_id: str, employee_id: str) -> list[ProductivityScoreRecord]:
        """Full history for one employee, oldest first."""

        with self._lock:
            entries = sorted(self._scores.get((organization_id, employee_id), ()), key=lambda entry: entry[:2])
        return [record for _, _, record in entries]
