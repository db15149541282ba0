"""Mini README: Core package initializer for the GramChain ledger service.

This module exposes convenience imports that allow other parts of the
application to access shared helpers without needing to know the exact module
structure. Ledger, attestation, and interface code live in sub-packages so
the package root stays free of heavy runtime dependencies.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
