"""Mini README: Role-based presentation filtering for ledger records.

Structure:
    * Role - the four viewer roles.
    * Viewer - role plus display name of whoever is looking.
    * visible_projects / visible_transactions - per-role subsets.
    * can_create_projects / can_allocate_funds - panel gating helpers.

Filtering is display-level only. Names are compared with plain, case-sensitive
string equality and the stored collections are never restricted, so these
helpers hide records rather than protect them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from .models import Project, Transaction


class Role(str, Enum):
    """Viewer roles recognised by the ledger."""

    GOVERNMENT = "government"
    LOCAL_AUTHORITY = "local_authority"
    CONTRACTOR = "contractor"
    PUBLIC = "public"

    @classmethod
    def from_str(cls, value: object) -> "Role":
        """Coerce arbitrary casing into a valid role."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported role: {value}") from error


@dataclass(frozen=True, slots=True)
class Viewer:
    role: Role
    name: str


_SEES_ALL_PROJECTS = {Role.GOVERNMENT, Role.LOCAL_AUTHORITY, Role.PUBLIC}
_SEES_ALL_TRANSACTIONS = {Role.GOVERNMENT, Role.PUBLIC}


def visible_projects(projects: Iterable[Project], viewer: Viewer) -> List[Project]:
    """Return projects the viewer's role may see.

    Contractors only see projects whose ``contractor`` label equals their name.
    """

    if viewer.role in _SEES_ALL_PROJECTS:
        return list(projects)
    return [project for project in projects if project.contractor == viewer.name]


def visible_transactions(transactions: Iterable[Transaction], viewer: Viewer) -> List[Transaction]:
    """Return transactions the viewer's role may see.

    Roles without full visibility see entries where they are sender or recipient.
    """

    if viewer.role in _SEES_ALL_TRANSACTIONS:
        return list(transactions)
    return [
        transaction
        for transaction in transactions
        if viewer.name in (transaction.sender, transaction.recipient)
    ]


def can_create_projects(role: Role) -> bool:
    return role is Role.GOVERNMENT


def can_allocate_funds(role: Role) -> bool:
    return role in (Role.GOVERNMENT, Role.LOCAL_AUTHORITY)
