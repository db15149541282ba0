"""Mini README: Aggregates derived from the ledger collections.

Structure:
    * total_funds - sum of completed allocation amounts.
    * pending_count - number of pending transactions.
    * summarise_dashboard - headline figures for the dashboard cards.

All helpers are pure functions recomputed from scratch on every call; the
collections are small and local so no incremental bookkeeping is kept.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

from .models import Project, ProjectStatus, Transaction, TransactionStatus, TransactionType


def total_funds(transactions: Iterable[Transaction]) -> float:
    """Sum ``amount`` over completed allocations."""

    return sum(
        transaction.amount
        for transaction in transactions
        if transaction.status is TransactionStatus.COMPLETED
        and transaction.transaction_type is TransactionType.ALLOCATION
    )


def pending_count(transactions: Iterable[Transaction]) -> int:
    """Count transactions still pending."""

    return sum(1 for transaction in transactions if transaction.status is TransactionStatus.PENDING)


def summarise_dashboard(
    transactions: Sequence[Transaction], projects: Sequence[Project]
) -> Dict[str, Any]:
    """Aggregate ledger insights for dashboard visualisation."""

    return {
        "total_funds": total_funds(transactions),
        "active_projects": sum(
            1 for project in projects if project.status is ProjectStatus.IN_PROGRESS
        ),
        "completed_projects": sum(
            1 for project in projects if project.status is ProjectStatus.COMPLETED
        ),
        "pending_approvals": pending_count(transactions),
        "transaction_count": len(transactions),
        "project_count": len(projects),
    }
