"""Mini README: Error hierarchy for the attestation flow.

Structure:
    * AttestationError - base class surfaced to callers of the adapter.
    * WalletNotInstalledError / PinningNotConfiguredError - missing dependency.
    * UserRejectedError - the wallet owner declined a prompt.
    * WalletError / PinningError - provider, transport, or parse failures.
    * ProviderRpcError - raw error reported by a wallet provider.
"""

from __future__ import annotations

from typing import Optional

# JSON-RPC error code wallets use when the user dismisses a prompt.
USER_REJECTED_CODE = 4001


class AttestationError(RuntimeError):
    """Base class for every failure of the attestation flow."""


class WalletNotInstalledError(AttestationError):
    pass


class PinningNotConfiguredError(AttestationError):
    pass


class UserRejectedError(AttestationError):
    pass


class WalletError(AttestationError):
    pass


class PinningError(AttestationError):
    pass


class ProviderRpcError(Exception):
    """Error returned by a wallet provider, carrying its JSON-RPC code."""

    def __init__(self, code: Optional[int], message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def user_rejected(self) -> bool:
        return self.code == USER_REJECTED_CODE
