"""Mini README: Record types stored in the GramChain ledger.

Structure:
    * TransactionType / TransactionStatus - enums for transaction records.
    * ProjectStatus / MilestoneStatus - enums for project lifecycle labels.
    * Transaction - append-only fund movement with decorative chain fields.
    * Milestone - payment stage owned by a project.
    * Project - funded work item with free-form budget counters.

Every record exports itself with ``as_dict`` using the camelCase keys of the
persisted layout (``from``, ``blockHeight``, ``totalBudget`` ...) and is
rebuilt with ``from_dict``. Optional fields are omitted from the export when
unset. ``hash`` and ``blockHeight`` are labels only; nothing derives them from
record content.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

_EnumT = TypeVar("_EnumT", bound="_LabelEnum")


class _LabelEnum(str, Enum):
    """String enum tolerant of arbitrary casing and padding."""

    @classmethod
    def from_str(cls: Type[_EnumT], value: object) -> _EnumT:
        """Coerce arbitrary casing into a valid member."""

        if isinstance(value, cls):
            return value
        try:
            normalised = str(value).strip().lower()
            return cls(normalised)
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported {cls.__name__} value: {value}") from error


class TransactionType(_LabelEnum):
    """Kinds of fund movement."""

    ALLOCATION = "allocation"
    TRANSFER = "transfer"
    PAYMENT = "payment"


class TransactionStatus(_LabelEnum):
    """Transaction states; transitions are not enforced."""

    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"


class ProjectStatus(_LabelEnum):
    PLANNING = "planning"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MilestoneStatus(_LabelEnum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    PAID = "paid"


def _optional_int(value: object) -> Optional[int]:
    return None if value is None else int(value)


@dataclass(slots=True)
class Transaction:
    """Ledger entry recording a movement of funds between two labels."""

    transaction_id: str
    hash: str
    sender: str
    recipient: str
    amount: float
    transaction_type: TransactionType
    description: str
    timestamp: int
    status: TransactionStatus
    block_height: int
    project_id: str = ""

    def as_dict(self) -> Dict[str, Any]:
        """Export the transaction using the persisted key names."""

        return {
            "id": self.transaction_id,
            "hash": self.hash,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
            "type": self.transaction_type.value,
            "projectId": self.project_id,
            "description": self.description,
            "timestamp": self.timestamp,
            "status": self.status.value,
            "blockHeight": self.block_height,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Transaction":
        """Rebuild a transaction from its persisted form."""

        return cls(
            transaction_id=str(payload["id"]),
            hash=str(payload["hash"]),
            sender=str(payload["from"]),
            recipient=str(payload["to"]),
            amount=payload["amount"],
            transaction_type=TransactionType.from_str(payload["type"]),
            description=str(payload.get("description", "")),
            timestamp=int(payload["timestamp"]),
            status=TransactionStatus.from_str(payload["status"]),
            block_height=int(payload["blockHeight"]),
            project_id=str(payload.get("projectId") or ""),
        )


@dataclass(slots=True)
class Milestone:
    """Payment stage of a project."""

    milestone_id: str
    name: str
    description: str
    amount: float
    status: MilestoneStatus = MilestoneStatus.PENDING
    submitted_at: Optional[int] = None
    approved_at: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        exported: Dict[str, Any] = {
            "id": self.milestone_id,
            "name": self.name,
            "description": self.description,
            "amount": self.amount,
            "status": self.status.value,
        }
        if self.submitted_at is not None:
            exported["submittedAt"] = self.submitted_at
        if self.approved_at is not None:
            exported["approvedAt"] = self.approved_at
        return exported

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Milestone":
        return cls(
            milestone_id=str(payload["id"]),
            name=str(payload["name"]),
            description=str(payload.get("description", "")),
            amount=payload["amount"],
            status=MilestoneStatus.from_str(payload.get("status", "pending")),
            submitted_at=_optional_int(payload.get("submittedAt")),
            approved_at=_optional_int(payload.get("approvedAt")),
        )


@dataclass(slots=True)
class Project:
    """Funded work item.

    ``allocated_funds`` and ``spent_funds`` are free-form counters updated by
    patches; they are not reconciled against milestones or transactions.
    """

    project_id: str
    name: str
    description: str
    location: str
    total_budget: float
    allocated_funds: float
    spent_funds: float
    status: ProjectStatus
    created_at: int
    milestones: List[Milestone] = field(default_factory=list)
    contractor: Optional[str] = None
    ipfs_hash: Optional[str] = None
    signature: Optional[str] = None
    created_by: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        """Export the project and its milestones using persisted key names."""

        exported: Dict[str, Any] = {
            "id": self.project_id,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "totalBudget": self.total_budget,
            "allocatedFunds": self.allocated_funds,
            "spentFunds": self.spent_funds,
            "status": self.status.value,
            "milestones": [milestone.as_dict() for milestone in self.milestones],
            "createdAt": self.created_at,
        }
        for key, value in (
            ("contractor", self.contractor),
            ("ipfsHash", self.ipfs_hash),
            ("signature", self.signature),
            ("createdBy", self.created_by),
        ):
            if value is not None:
                exported[key] = value
        return exported

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Project":
        """Rebuild a project from its persisted form."""

        return cls(
            project_id=str(payload["id"]),
            name=str(payload["name"]),
            description=str(payload.get("description", "")),
            location=str(payload.get("location", "")),
            total_budget=payload["totalBudget"],
            allocated_funds=payload.get("allocatedFunds", 0),
            spent_funds=payload.get("spentFunds", 0),
            status=ProjectStatus.from_str(payload["status"]),
            created_at=int(payload["createdAt"]),
            milestones=[Milestone.from_dict(item) for item in payload.get("milestones", [])],
            contractor=payload.get("contractor"),
            ipfs_hash=payload.get("ipfsHash"),
            signature=payload.get("signature"),
            created_by=payload.get("createdBy"),
        )

    def revision_tag(self) -> str:
        """Return a content fingerprint used for optimistic update checks."""

        canonical = json.dumps(self.as_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def find_milestone(self, milestone_id: str) -> Milestone:
        for milestone in self.milestones:
            if milestone.milestone_id == milestone_id:
                return milestone
        raise KeyError(f"Milestone {milestone_id} not present in project {self.project_id}")
