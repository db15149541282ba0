"""Mini README: Optional attestation flow for project creation.

The package asks a wallet to sign a fixed message naming the project and its
budget, pins the project document with a pinning service, and hands the
signature and content identifier to the ledger. ``adapter`` orchestrates the
flow, ``wallet`` and ``pinning`` wrap the two remote boundaries, and
``errors`` holds the shared exception hierarchy.
"""

from .adapter import (
    AttestationAdapter,
    AttestationResult,
    AttestationState,
    ProjectForm,
    SignatureResult,
    build_signing_message,
    create_attested_project,
)
from .errors import (
    AttestationError,
    PinningError,
    PinningNotConfiguredError,
    ProviderRpcError,
    UserRejectedError,
    WalletError,
    WalletNotInstalledError,
)
from .pinning import PinningClient, UploadResult
from .wallet import JsonRpcWalletProvider, WalletProvider, create_wallet_provider

__all__ = [
    "AttestationAdapter",
    "AttestationError",
    "AttestationResult",
    "AttestationState",
    "JsonRpcWalletProvider",
    "PinningClient",
    "PinningError",
    "PinningNotConfiguredError",
    "ProjectForm",
    "ProviderRpcError",
    "SignatureResult",
    "UploadResult",
    "UserRejectedError",
    "WalletError",
    "WalletNotInstalledError",
    "WalletProvider",
    "build_signing_message",
    "create_attested_project",
    "create_wallet_provider",
]
