"""CSV adapter for employees, tasks, score history and role requirements."""

from __future__ import annotations

import csv
from typing import Callable, TypeVar

from workforce_engine.adapters.records import parse_employee, parse_score, parse_skills, parse_task
from workforce_engine.schema import Employee, ProductivityScoreRecord, Task

T = TypeVar("T")


def _parse_rows(file_path: str, parse_row: Callable[[dict, str], T]) -> list[T]:
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        records: list[T] = []
        for row_number, row in enumerate(reader, start=2):
            records.append(parse_row(row, f"Row {row_number}"))
        return records


def parse_employees(file_path: str) -> list[Employee]:
    """Parse employees; the ``skills`` column is ``;``-separated."""

    return _parse_rows(file_path, parse_employee)


def parse_tasks(file_path: str) -> list[Task]:
    return _parse_rows(file_path, parse_task)


def parse_scores(file_path: str) -> list[ProductivityScoreRecord]:
    return _parse_rows(file_path, parse_score)


def parse_role_requirements(file_path: str) -> dict[str, list[str]]:
    """Parse ``role_name,required_skills`` rows into a role -> skills mapping."""

    def parse_row(row: dict, where: str) -> tuple[str, list[str]]:
        role = (row.get("role_name") or "").strip()
        if not role:
            raise ValueError(f"{where}: missing required fields ['role_name']")
        return role, list(parse_skills(row.get("required_skills"), where))

    return dict(_parse_rows(file_path, parse_row))
