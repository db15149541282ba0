"""Mini README: Fund allocation and milestone workflows.

Structure:
    * FormValidationError - aggregated report of missing form fields.
    * require_fields - collect missing required fields in one error.
    * allocate_funds - record an allocation/payment and bump project funds.
    * create_planned_project - planning-stage project with default milestones.
    * submit_milestone / approve_milestone / pay_milestone - stage transitions.
    * pending_milestones - milestones still awaiting submission.

Each workflow is a thin composition of :class:`LedgerMutator` calls. Status
changes are not guarded: any stage may be set from any other, matching the
ledger's lack of transition checks.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Mapping, Optional, Sequence

from ..logging_utils import get_logger
from .models import (
    Milestone,
    MilestoneStatus,
    Project,
    ProjectStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from .mutator import LedgerMutator
from .visibility import Role, Viewer

LOGGER = get_logger(__name__)

TREASURY_LABEL = "Government Treasury"

# (name, description, share of total budget)
DEFAULT_MILESTONE_PLAN = (
    ("Project Initiation", "Initial project setup and planning", 0.2),
    ("Development Phase", "Main construction and development work", 0.6),
    ("Project Completion", "Final touches and project handover", 0.2),
)


class FormValidationError(ValueError):
    """Required inputs were missing; lists every missing field at once."""

    def __init__(self, missing_fields: Sequence[str]) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Please fill in all required fields: " + ", ".join(self.missing_fields)
        )


def require_fields(form: Mapping[str, object], required: Sequence[str]) -> None:
    """Raise :class:`FormValidationError` naming every blank required field."""

    missing = [name for name in required if form.get(name) in (None, "")]
    if missing:
        raise FormValidationError(missing)


def allocate_funds(
    mutator: LedgerMutator,
    viewer: Viewer,
    *,
    recipient_type: object,
    recipient: str,
    amount: object,
    description: str,
    project_id: Optional[str] = None,
) -> Transaction:
    """Record a completed fund movement and add it to the project's allocation.

    Funds sent to a local authority are allocations; funds sent to a
    contractor are payments.
    """

    require_fields(
        {"recipient": recipient, "amount": amount, "description": description},
        ("recipient", "amount", "description"),
    )
    recipient_role = Role.from_str(recipient_type)
    if recipient_role not in (Role.LOCAL_AUTHORITY, Role.CONTRACTOR):
        raise ValueError(f"Funds cannot be allocated to role '{recipient_role.value}'")
    transaction_type = (
        TransactionType.ALLOCATION
        if recipient_role is Role.LOCAL_AUTHORITY
        else TransactionType.PAYMENT
    )
    sender = TREASURY_LABEL if viewer.role is Role.GOVERNMENT else viewer.name

    transaction = mutator.add_transaction(
        sender=sender,
        recipient=recipient,
        amount=amount,
        transaction_type=transaction_type,
        description=description,
        status=TransactionStatus.COMPLETED,
        project_id=project_id,
    )
    if project_id:
        try:
            project = mutator.get_project(project_id)
        except KeyError:
            LOGGER.debug("Allocation references unknown project %s", project_id)
        else:
            mutator.update_project(
                project_id,
                {"allocated_funds": project.allocated_funds + transaction.amount},
            )
    return transaction


def build_default_milestones(mutator: LedgerMutator, total_budget: float) -> List[Milestone]:
    """Split a budget 20/60/20 across the standard milestone plan."""

    return [
        Milestone(
            milestone_id=mutator.new_milestone_id(),
            name=name,
            description=description,
            amount=math.floor(total_budget * share),
        )
        for name, description, share in DEFAULT_MILESTONE_PLAN
    ]


def create_planned_project(
    mutator: LedgerMutator,
    *,
    name: str,
    total_budget: object,
    description: str = "",
    location: str = "",
    contractor: Optional[str] = None,
) -> Project:
    """Create a planning-stage project with unfunded default milestones."""

    require_fields({"name": name, "total_budget": total_budget}, ("name", "total_budget"))
    budget = float(total_budget)
    return mutator.add_project(
        name=name,
        description=description,
        location=location,
        total_budget=budget,
        allocated_funds=0,
        spent_funds=0,
        status=ProjectStatus.PLANNING,
        contractor=contractor or None,
        milestones=build_default_milestones(mutator, budget),
    )


def pending_milestones(project: Project) -> List[Milestone]:
    return [m for m in project.milestones if m.status is MilestoneStatus.PENDING]


def _set_milestone(
    mutator: LedgerMutator, project_id: str, milestone_id: str, **changes: object
) -> Milestone:
    project = mutator.get_project(project_id)
    updated = replace(project.find_milestone(milestone_id), **changes)
    milestones = [
        updated if milestone.milestone_id == milestone_id else milestone
        for milestone in project.milestones
    ]
    mutator.update_project(project_id, {"milestones": milestones})
    LOGGER.info(
        "Milestone %s of project %s is now %s", milestone_id, project_id, updated.status.value
    )
    return updated


def submit_milestone(mutator: LedgerMutator, project_id: str, milestone_id: str) -> Milestone:
    """Mark a milestone as submitted for approval."""

    return _set_milestone(
        mutator,
        project_id,
        milestone_id,
        status=MilestoneStatus.SUBMITTED,
        submitted_at=mutator.now(),
    )


def approve_milestone(mutator: LedgerMutator, project_id: str, milestone_id: str) -> Milestone:
    """Approve a submitted milestone for payment."""

    return _set_milestone(
        mutator,
        project_id,
        milestone_id,
        status=MilestoneStatus.APPROVED,
        approved_at=mutator.now(),
    )


def pay_milestone(
    mutator: LedgerMutator, project_id: str, milestone_id: str, *, payer: str = TREASURY_LABEL
) -> Transaction:
    """Pay out a milestone: record the payment and add it to spent funds."""

    project = mutator.get_project(project_id)
    milestone = project.find_milestone(milestone_id)
    _set_milestone(mutator, project_id, milestone_id, status=MilestoneStatus.PAID)
    transaction = mutator.add_transaction(
        sender=payer,
        recipient=project.contractor or project.name,
        amount=milestone.amount,
        transaction_type=TransactionType.PAYMENT,
        description=f"{milestone.name} milestone payment",
        status=TransactionStatus.COMPLETED,
        project_id=project_id,
    )
    refreshed = mutator.get_project(project_id)
    mutator.update_project(
        project_id, {"spent_funds": refreshed.spent_funds + milestone.amount}
    )
    return transaction
