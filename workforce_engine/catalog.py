"""Role-requirement lookup with a built-in fallback table."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_ROLE_SKILLS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "frontend developer": ("JavaScript", "HTML", "CSS", "React", "TypeScript"),
        "backend developer": ("Node.js", "Python", "SQL", "API Design", "Database"),
        "full stack developer": ("JavaScript", "Node.js", "React", "SQL", "API Design"),
        "product manager": ("Product Strategy", "Agile", "User Research", "Analytics"),
        "designer": ("Figma", "UI/UX", "Prototyping", "Design Systems"),
        "ui/ux designer": ("Figma", "Sketch", "Prototyping", "User Research"),
        "data scientist": ("Python", "Machine Learning", "Statistics", "SQL"),
        "devops engineer": ("Docker", "Kubernetes", "CI/CD", "AWS", "Linux"),
        "qa engineer": ("Testing", "Automation", "Selenium", "Jest"),
        "mobile developer": ("React Native", "iOS", "Android", "Mobile UI"),
    }
)

GENERIC_SKILLS: tuple[str, ...] = ("Communication", "Problem Solving", "Teamwork")


class RoleCatalog(Protocol):
    def lookup(self, role: str) -> Optional[tuple[str, ...]]: ...


class RoleRequirementCatalog:
    """Read-only catalog of role name -> ordered required skills.

    Role names are matched case-insensitively and exactly.
    """

    def __init__(self, requirements: Optional[Mapping[str, list[str]]] = None) -> None:
        entries = {}
        for role, skills in (requirements or {}).items():
            entries[role.strip().lower()] = tuple(skills)
        self._entries = MappingProxyType(entries)

    def lookup(self, role: str) -> Optional[tuple[str, ...]]:
        if not role:
            return None
        return self._entries.get(role.strip().lower())


def default_skills_for_role(role: str) -> tuple[str, ...]:
    """Match ``role`` against the fallback table by containment either way."""

    role_lower = (role or "").strip().lower()
    if role_lower:
        for pattern, skills in DEFAULT_ROLE_SKILLS.items():
            if pattern in role_lower or role_lower in pattern:
                return skills
    return GENERIC_SKILLS


def resolve_required_skills(role: str, catalog: Optional[RoleCatalog] = None) -> tuple[str, ...]:
    """Catalog entry for ``role``, else the fallback table, else generic skills."""

    if catalog is not None:
        try:
            skills = catalog.lookup(role)
        except Exception:  # noqa: BLE001
            logger.warning("Role catalog lookup failed for %r, using built-in defaults", role, exc_info=True)
            skills = None
        if skills is not None:
            return tuple(skills)
    return default_skills_for_role(role)
