"""JSON adapter: a single dataset bundle with all record types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from workforce_engine.adapters.records import parse_employee, parse_score, parse_skills, parse_task
from workforce_engine.catalog import RoleRequirementCatalog
from workforce_engine.schema import Employee, ProductivityScoreRecord, Task
from workforce_engine.store import InMemoryDataStore

_SECTIONS = ("employees", "tasks", "scores", "role_requirements")


@dataclass
class Dataset:
    employees: list[Employee] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    scores: list[ProductivityScoreRecord] = field(default_factory=list)
    role_requirements: dict[str, list[str]] = field(default_factory=dict)

    def build_store(self) -> InMemoryDataStore:
        return InMemoryDataStore(employees=self.employees, tasks=self.tasks, scores=self.scores)

    def build_catalog(self) -> RoleRequirementCatalog:
        return RoleRequirementCatalog(self.role_requirements)


def _section(payload: dict, name: str) -> list:
    items = payload.get(name) or []
    if not isinstance(items, list):
        raise ValueError(f"'{name}' must be a list of objects")
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"{name} item {index}: expected an object")
    return items


def parse_payload(payload: dict) -> Dataset:
    """Parse an already-decoded JSON bundle."""

    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object with " + ", ".join(_SECTIONS))

    employees = [parse_employee(item, f"employees item {i}") for i, item in enumerate(_section(payload, "employees"), start=1)]
    tasks = [parse_task(item, f"tasks item {i}") for i, item in enumerate(_section(payload, "tasks"), start=1)]
    scores = [parse_score(item, f"scores item {i}") for i, item in enumerate(_section(payload, "scores"), start=1)]

    role_requirements = {}
    for i, item in enumerate(_section(payload, "role_requirements"), start=1):
        where = f"role_requirements item {i}"
        role = str(item.get("role_name") or "").strip()
        if not role:
            raise ValueError(f"{where}: missing required fields ['role_name']")
        role_requirements[role] = list(parse_skills(item.get("required_skills"), where))

    return Dataset(employees=employees, tasks=tasks, scores=scores, role_requirements=role_requirements)


def parse(file_path: str) -> Dataset:
    """Parse a JSON dataset file."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_payload(payload)
