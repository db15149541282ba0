"""Mini README: Shared pytest fixtures for the GramChain test-suite.

Structure:
    * FIXED_NOW - epoch milliseconds returned by the test clock.
    * make_mutator - ledger mutator over an in-memory store with seeded ids.
    * FakeResponse / FakeHttpSession - offline stand-ins for ``requests``.
    * FakeWallet - scripted wallet provider; FORM - complete project form.
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests

from gramchain.attestation import WalletProvider
from gramchain.ledger import InMemoryRecordStore, LedgerMutator

FIXED_NOW = 1_717_000_000_000


def make_mutator(store: Optional[InMemoryRecordStore] = None, seed: int = 7) -> LedgerMutator:
    return LedgerMutator(
        store or InMemoryRecordStore(),
        rng=random.Random(seed),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def mutator() -> LedgerMutator:
    return make_mutator()


class FakeResponse:
    """Minimal ``requests.Response`` replacement."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeHttpSession:
    """Records outbound calls and replays queued responses in order."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def _next(self, method: str, url: str, kwargs: Dict[str, Any]) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, kwargs)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, kwargs)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        return self._next(method, url, kwargs)


ADDRESS = "0x1111111111111111111111111111111111111111"

FORM = {
    "budget": "500000",
    "projectTitle": "Rural Community Center",
    "startDate": "2024-07-01",
    "totalDuration": "12 months",
    "localPresident": "ABC Construction Ltd",
    "location": "Village A, District X",
    "projectDescription": "Community center construction",
    "initialFundReleaseAmount": "50000",
    "pinCode": "560001",
}


class FakeWallet(WalletProvider):
    provider_name = "fake"

    def __init__(
        self,
        accounts: Optional[List[str]] = None,
        *,
        account_error: Optional[Exception] = None,
        sign_error: Optional[Exception] = None,
    ) -> None:
        self.accounts = [ADDRESS] if accounts is None else accounts
        self.account_error = account_error
        self.sign_error = sign_error
        self.signed: List[tuple] = []
        self.account_requests = 0

    def request_accounts(self) -> List[str]:
        self.account_requests += 1
        if self.account_error:
            raise self.account_error
        return list(self.accounts)

    def personal_sign(self, message: str, address: str) -> str:
        if self.sign_error:
            raise self.sign_error
        self.signed.append((message, address))
        return "0xsigned"
