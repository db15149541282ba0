"""Mini README: Ledger state for GramChain.

This package holds the fund-tracking records and everything that reads or
writes them: the key-value record store, the mutator that appends
transactions and patches projects, derived metrics, role-based visibility
filters, and the allocation/milestone workflows built on top. Storage is
behind the ``RecordStore`` interface so the rest of the package does not care
whether records live in memory or on disk.
"""

from .metrics import pending_count, summarise_dashboard, total_funds
from .models import (
    Milestone,
    MilestoneStatus,
    Project,
    ProjectStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from .mutator import BLOCK_HEIGHT_BASE, LedgerMutator, ProjectConflictError
from .store import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
    RecordStoreCorruptedError,
)
from .visibility import Role, Viewer, visible_projects, visible_transactions
from .workflows import FormValidationError

__all__ = [
    "BLOCK_HEIGHT_BASE",
    "FormValidationError",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "LedgerMutator",
    "Milestone",
    "MilestoneStatus",
    "Project",
    "ProjectConflictError",
    "ProjectStatus",
    "RecordStore",
    "RecordStoreCorruptedError",
    "Role",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "Viewer",
    "pending_count",
    "summarise_dashboard",
    "total_funds",
    "visible_projects",
    "visible_transactions",
]
