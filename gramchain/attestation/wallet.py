"""Mini README: Wallet provider abstractions used for attestation signatures.

Structure:
    * WalletProvider - abstract interface for account and signature requests.
    * JsonRpcWalletProvider - provider speaking JSON-RPC over HTTP.
    * create_wallet_provider - build the configured provider, if any.

Providers report failures as :class:`ProviderRpcError`; the adapter decides
which of those mean "user rejected" and which are plain provider errors.
Signatures are returned as opaque strings and never verified here.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import requests

from ..configuration import get_settings
from ..logging_utils import get_logger
from .errors import ProviderRpcError

LOGGER = get_logger(__name__)

# Generic JSON-RPC "internal error" used for transport failures.
INTERNAL_ERROR_CODE = -32603


class WalletProvider(ABC):
    """Base interface for wallets able to list accounts and sign messages."""

    provider_name: str = "generic"

    @abstractmethod
    def request_accounts(self) -> List[str]:
        """Prompt for account access and return the authorised addresses."""

    @abstractmethod
    def personal_sign(self, message: str, address: str) -> str:
        """Ask ``address`` to sign ``message`` and return the signature."""


class JsonRpcWalletProvider(WalletProvider):
    """Wallet reached through an HTTP JSON-RPC endpoint (node or wallet bridge)."""

    provider_name = "json-rpc"

    def __init__(
        self,
        rpc_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        self.rpc_url = rpc_url
        self.session = session or requests.Session()
        self.timeout = timeout
        self._ids = itertools.count(1)
        LOGGER.debug("Initialising JSON-RPC wallet provider at '%s'", rpc_url)

    def _call(self, method: str, params: List[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as error:
            raise ProviderRpcError(INTERNAL_ERROR_CODE, str(error)) from error
        if not isinstance(body, dict):
            raise ProviderRpcError(INTERNAL_ERROR_CODE, f"Malformed {method} response: {body!r}")
        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                raise ProviderRpcError(INTERNAL_ERROR_CODE, str(error))
            raise ProviderRpcError(error.get("code"), str(error.get("message", "unknown error")))
        return body.get("result")

    def request_accounts(self) -> List[str]:
        result = self._call("eth_requestAccounts", [])
        if result is not None and not isinstance(result, list):
            raise ProviderRpcError(INTERNAL_ERROR_CODE, f"Malformed account list: {result!r}")
        return [str(account) for account in result or []]

    def personal_sign(self, message: str, address: str) -> str:
        encoded = "0x" + message.encode("utf-8").hex()
        return str(self._call("personal_sign", [encoded, address]))


def create_wallet_provider() -> Optional[WalletProvider]:
    """Return a provider for the configured RPC endpoint, or ``None`` when unset."""

    settings = get_settings()
    if not settings.wallet_rpc_url:
        return None
    return JsonRpcWalletProvider(settings.wallet_rpc_url, timeout=settings.http_timeout_seconds)
