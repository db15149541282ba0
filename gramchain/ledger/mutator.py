"""Mini README: Ledger mutator owning every write to the record store.

Structure:
    * ProjectConflictError - optimistic update rejected on a stale revision.
    * LedgerMutator - append transactions, create and patch projects, clear.

The mutator keeps no cache: each call loads the current collections, applies
one change, and saves. Identifiers are random base-36 tokens, transaction
hashes are decorative, and block heights count local transactions starting
after 12000. Nothing here validates amounts, roles, or project references.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..logging_utils import get_logger
from .models import (
    Milestone,
    Project,
    ProjectStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from .store import RecordStore

LOGGER = get_logger(__name__)

BLOCK_HEIGHT_BASE = 12000
_BASE36 = string.digits + string.ascii_lowercase
_HEX = "0123456789abcdef"


class ProjectConflictError(ValueError):
    """Raised when a patch targets an outdated project revision."""

    def __init__(self, project_id: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Project {project_id} changed since revision {expected[:12]}; current is {actual[:12]}"
        )
        self.project_id = project_id
        self.expected = expected
        self.actual = actual


def _current_millis() -> int:
    return int(time.time() * 1000)


def _coerce_amount(value: object) -> Union[int, float]:
    if isinstance(value, bool):
        raise ValueError("Amounts must be numeric, not boolean")
    if isinstance(value, (int, float)):
        return value
    return float(str(value))


def _coerce_optional_text(value: object) -> Optional[str]:
    return None if value is None else str(value)


def _coerce_milestone(item: object) -> Milestone:
    if isinstance(item, Milestone):
        return item
    if not isinstance(item, Mapping):
        raise ValueError(f"Invalid milestone {item!r}: expected an object")
    try:
        milestone = Milestone.from_dict(item)
        return replace(milestone, amount=_coerce_amount(milestone.amount))
    except (KeyError, ValueError) as error:
        raise ValueError(f"Invalid milestone {dict(item)!r}: {error}") from error


def _coerce_milestones(value: object) -> List[Milestone]:
    if not isinstance(value, (list, tuple)):
        raise ValueError("Milestones must be provided as a list.")
    return [_coerce_milestone(item) for item in value]


_PATCH_COERCERS: Dict[str, Callable[[object], object]] = {
    "name": str,
    "description": str,
    "location": str,
    "total_budget": _coerce_amount,
    "allocated_funds": _coerce_amount,
    "spent_funds": _coerce_amount,
    "status": ProjectStatus.from_str,
    "created_at": int,
    "milestones": _coerce_milestones,
    "contractor": _coerce_optional_text,
    "ipfs_hash": _coerce_optional_text,
    "signature": _coerce_optional_text,
    "created_by": _coerce_optional_text,
}


def coerce_project_patch(patch: Mapping[str, object]) -> Dict[str, object]:
    """Validate patch keys and coerce values to the project field types."""

    coerced: Dict[str, object] = {}
    for key, value in patch.items():
        if key == "project_id":
            raise ValueError("Project identifiers cannot be patched.")
        coercer = _PATCH_COERCERS.get(key)
        if coercer is None:
            raise ValueError(f"Patching field '{key}' is not supported.")
        coerced[key] = coercer(value)
    return coerced


class LedgerMutator:
    """Apply ledger changes against a :class:`RecordStore`."""

    def __init__(
        self,
        store: RecordStore,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.store = store
        self._rng = rng or random.Random()
        self._clock = clock or _current_millis

    def _token(self, length: int, alphabet: str = _BASE36) -> str:
        return "".join(self._rng.choice(alphabet) for _ in range(length))

    def new_milestone_id(self) -> str:
        return "ms_" + self._token(6)

    def now(self) -> int:
        """Current time in epoch milliseconds from the configured clock."""

        return self._clock()

    def list_transactions(self) -> List[Transaction]:
        transactions, _ = self.store.load()
        return transactions

    def list_projects(self) -> List[Project]:
        _, projects = self.store.load()
        return projects

    def get_project(self, project_id: str) -> Project:
        """Retrieve a project, raising informative errors when missing."""

        for project in self.list_projects():
            if project.project_id == project_id:
                return project
        raise KeyError(f"Project {project_id} not found")

    def add_transaction(
        self,
        *,
        sender: str,
        recipient: str,
        amount: object,
        transaction_type: object,
        description: str = "",
        status: object = TransactionStatus.PENDING,
        project_id: Optional[str] = None,
    ) -> Transaction:
        """Append a transaction, filling identifier, hash, time and block height."""

        transactions, _ = self.store.load()
        transaction = Transaction(
            transaction_id=self._token(9),
            hash="0x" + self._token(5, _HEX) + "...",
            sender=str(sender),
            recipient=str(recipient),
            amount=_coerce_amount(amount),
            transaction_type=TransactionType.from_str(transaction_type),
            description=str(description),
            timestamp=self._clock(),
            status=TransactionStatus.from_str(status),
            block_height=BLOCK_HEIGHT_BASE + len(transactions) + 1,
            project_id=project_id or "",
        )
        transactions.append(transaction)
        self.store.save_transactions(transactions)
        LOGGER.info(
            "Appended %s transaction %s at block %s (%s -> %s, amount=%s)",
            transaction.transaction_type.value,
            transaction.transaction_id,
            transaction.block_height,
            transaction.sender,
            transaction.recipient,
            transaction.amount,
        )
        return transaction

    def add_project(
        self,
        *,
        name: str,
        total_budget: object,
        description: str = "",
        location: str = "",
        allocated_funds: object = 0,
        spent_funds: object = 0,
        status: object = ProjectStatus.PLANNING,
        contractor: Optional[str] = None,
        milestones: Optional[Iterable[Union[Milestone, Mapping[str, Any]]]] = None,
        ipfs_hash: Optional[str] = None,
        signature: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Project:
        """Append a project with a ``proj_`` identifier and creation time."""

        _, projects = self.store.load()
        project = Project(
            project_id="proj_" + self._token(6),
            name=str(name),
            description=str(description),
            location=str(location),
            total_budget=_coerce_amount(total_budget),
            allocated_funds=_coerce_amount(allocated_funds),
            spent_funds=_coerce_amount(spent_funds),
            status=ProjectStatus.from_str(status),
            created_at=self._clock(),
            milestones=_coerce_milestones(list(milestones or [])),
            contractor=contractor,
            ipfs_hash=ipfs_hash,
            signature=signature,
            created_by=created_by,
        )
        projects.append(project)
        self.store.save_projects(projects)
        LOGGER.info(
            "Created project %s '%s' with budget %s and %s milestones",
            project.project_id,
            project.name,
            project.total_budget,
            len(project.milestones),
        )
        return project

    def update_project(
        self,
        project_id: str,
        patch: Mapping[str, object],
        *,
        expected_revision: Optional[str] = None,
    ) -> None:
        """Shallow-merge ``patch`` into the matching project.

        Unknown identifiers are ignored. When ``expected_revision`` is given it
        must match :meth:`Project.revision_tag` of the stored project.
        """

        coerced = coerce_project_patch(patch)
        _, projects = self.store.load()
        for index, project in enumerate(projects):
            if project.project_id != project_id:
                continue
            if expected_revision is not None:
                current = project.revision_tag()
                if current != expected_revision:
                    raise ProjectConflictError(project_id, expected_revision, current)
            projects[index] = replace(project, **coerced)
            self.store.save_projects(projects)
            LOGGER.info("Updated project %s fields %s", project_id, sorted(coerced))
            return
        LOGGER.debug("Ignoring update for unknown project %s", project_id)

    def clear_all(self) -> None:
        """Remove every transaction and project."""

        self.store.clear()
        LOGGER.warning("All ledger data cleared")
