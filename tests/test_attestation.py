"""Mini README: Tests for the attestation adapter, wallet, and pinning client.

Structure:
    * successful attestation stores the signature and content id on a project.
    * rejections and missing dependencies end in ``error`` with no project.
    * form validation runs before any wallet call.
    * pinning responses in every known shape are understood.
    * the JSON-RPC wallet maps provider errors to codes.
"""

from __future__ import annotations

import json
from typing import Optional

import pytest
import requests

from conftest import ADDRESS, FORM, FakeHttpSession, FakeResponse, FakeWallet, make_mutator
from gramchain.attestation import (
    AttestationAdapter,
    AttestationState,
    JsonRpcWalletProvider,
    PinningClient,
    PinningError,
    PinningNotConfiguredError,
    ProviderRpcError,
    UserRejectedError,
    WalletError,
    WalletNotInstalledError,
    WalletProvider,
    build_signing_message,
    create_attested_project,
)
from gramchain.attestation.adapter import ProjectForm
from gramchain.attestation.wallet import INTERNAL_ERROR_CODE
from gramchain.ledger import FormValidationError, ProjectStatus


def _pinning(*responses, api_key: Optional[str] = "key-123") -> PinningClient:
    return PinningClient(
        api_key,
        upload_url="https://pin.example/api/v0/add",
        gateway_url="https://gateway.example/ipfs/",
        session=FakeHttpSession(*responses),
    )


def _adapter(wallet: Optional[WalletProvider], pinning: PinningClient) -> AttestationAdapter:
    return AttestationAdapter(wallet, pinning, clock=lambda: 1_717_000_000_000)


def test_attested_project_stores_signature_and_cid() -> None:
    mutator = make_mutator()
    wallet = FakeWallet()
    pinning = _pinning(FakeResponse(payload={"Name": "project.json", "Hash": "bafycid", "Size": "321"}))
    adapter = _adapter(wallet, pinning)

    project = create_attested_project(FORM, adapter, mutator)

    assert adapter.state is AttestationState.SUCCESS
    assert project.ipfs_hash == "bafycid"
    assert project.signature == "0xsigned"
    assert project.created_by == ADDRESS
    assert project.status is ProjectStatus.IN_PROGRESS
    assert project.contractor == "ABC Construction Ltd"
    assert project.allocated_funds == pytest.approx(50000)
    assert project.total_budget == pytest.approx(500000)
    assert project.milestones == []
    assert mutator.list_projects() == [project]

    message, address = wallet.signed[0]
    assert message == (
        'I am creating a new project "Rural Community Center" with budget $500000 on GramChain. '
        "This signature confirms my authorization for this project creation."
    )
    assert address == ADDRESS

    _, url, kwargs = pinning.session.calls[0]
    assert url == "https://pin.example/api/v0/add"
    assert kwargs["headers"]["Authorization"] == "Bearer key-123"
    filename, body, content_type = kwargs["files"]["file"]
    document = json.loads(body)
    assert document["createdBy"] == ADDRESS
    assert document["timestamp"] == 1_717_000_000_000
    assert document["pinCode"] == "560001"
    assert content_type == "application/json"
    assert filename.startswith("project-") and filename.endswith(".json")


def test_signature_rejection_leaves_no_project() -> None:
    mutator = make_mutator()
    wallet = FakeWallet(sign_error=ProviderRpcError(4001, "User denied message signature."))
    pinning = _pinning()
    adapter = _adapter(wallet, pinning)

    with pytest.raises(UserRejectedError):
        create_attested_project(FORM, adapter, mutator)

    assert adapter.state is AttestationState.ERROR
    assert adapter.error_message == "User rejected the signature request."
    assert mutator.list_projects() == []
    assert pinning.session.calls == []


def test_connection_rejection_is_distinguished_from_provider_errors() -> None:
    rejected = _adapter(FakeWallet(account_error=ProviderRpcError(4001, "denied")), _pinning())
    with pytest.raises(UserRejectedError, match="connection request"):
        rejected.attest(ProjectForm.from_mapping(FORM))

    broken = _adapter(FakeWallet(account_error=ProviderRpcError(-32002, "already pending")), _pinning())
    with pytest.raises(WalletError, match="already pending"):
        broken.attest(ProjectForm.from_mapping(FORM))
    assert broken.state is AttestationState.ERROR


def test_missing_wallet_and_empty_accounts() -> None:
    adapter = _adapter(None, _pinning())
    with pytest.raises(WalletNotInstalledError):
        adapter.attest(ProjectForm.from_mapping(FORM))
    assert adapter.state is AttestationState.ERROR

    adapter = _adapter(FakeWallet(accounts=[]), _pinning())
    with pytest.raises(WalletError, match="No accounts"):
        adapter.attest(ProjectForm.from_mapping(FORM))


def test_missing_pinning_key_fails_at_upload() -> None:
    mutator = make_mutator()
    adapter = _adapter(FakeWallet(), _pinning(api_key=None))

    with pytest.raises(PinningNotConfiguredError):
        create_attested_project(FORM, adapter, mutator)
    assert adapter.state is AttestationState.ERROR
    assert mutator.list_projects() == []


def test_unexpected_provider_failure_ends_in_error_state() -> None:
    mutator = make_mutator()
    adapter = _adapter(FakeWallet(sign_error=RuntimeError("provider crashed")), _pinning())

    with pytest.raises(WalletError, match="Failed to sign message: provider crashed"):
        create_attested_project(FORM, adapter, mutator)

    assert adapter.state is AttestationState.ERROR
    assert adapter.error_message == "Failed to sign message: provider crashed"
    assert mutator.list_projects() == []


def test_unexpected_upload_failure_ends_in_error_state() -> None:
    mutator = make_mutator()
    adapter = _adapter(FakeWallet(), _pinning(RuntimeError("socket closed")))

    with pytest.raises(RuntimeError):
        create_attested_project(FORM, adapter, mutator)

    assert adapter.state is AttestationState.ERROR
    assert adapter.error_message == "socket closed"
    assert mutator.list_projects() == []



def test_validation_runs_before_any_wallet_call() -> None:
    wallet = FakeWallet()
    adapter = _adapter(wallet, _pinning())
    incomplete = dict(FORM, startDate="", pinCode="")

    with pytest.raises(FormValidationError) as excinfo:
        create_attested_project(incomplete, adapter, make_mutator())

    assert excinfo.value.missing_fields == ["startDate", "pinCode"]
    assert wallet.account_requests == 0
    assert adapter.state is AttestationState.ERROR


def test_non_numeric_budget_is_rejected() -> None:
    with pytest.raises(ValueError, match="budget"):
        ProjectForm.from_mapping(dict(FORM, budget="lots"))


def test_signing_message_embeds_title_and_budget() -> None:
    message = build_signing_message(ProjectForm.from_mapping(FORM))
    assert '"Rural Community Center"' in message
    assert "$500000" in message


@pytest.mark.parametrize(
    "payload, expected_size",
    [
        ({"data": {"Hash": "bafyA", "Size": 10}}, 10),
        ({"Hash": "bafyA", "Size": "42"}, 42),
        ([{"Hash": "bafyA", "Size": None}], 0),
    ],
)
def test_upload_accepts_known_response_shapes(payload, expected_size) -> None:
    result = _pinning(FakeResponse(payload=payload)).upload_document({"a": 1})

    assert result.cid == "bafyA"
    assert result.size == expected_size
    assert result.url == "https://gateway.example/ipfs/bafyA"


def test_upload_rejects_unexpected_response_and_transport_errors() -> None:
    with pytest.raises(PinningError, match="Unexpected response structure"):
        _pinning(FakeResponse(payload={"status": "ok"})).upload_document({"a": 1})
    with pytest.raises(PinningError, match="Failed to upload"):
        _pinning(requests.ConnectionError("offline")).upload_document({"a": 1})
    with pytest.raises(PinningError):
        _pinning(FakeResponse(status_code=500, payload={})).upload_document({"a": 1})


def test_fetch_document_reads_from_gateway() -> None:
    pinning = _pinning(FakeResponse(payload={"projectTitle": "Rural Community Center"}))

    assert pinning.fetch_document("bafyA") == {"projectTitle": "Rural Community Center"}
    assert pinning.session.calls[0][1] == "https://gateway.example/ipfs/bafyA"

    with pytest.raises(PinningError, match="Failed to retrieve"):
        _pinning(FakeResponse(status_code=404, payload={})).fetch_document("missing")


def test_connection_probe_reports_failures() -> None:
    assert _pinning(FakeResponse(payload={"Hash": "bafyProbe"})).test_connection() is True
    assert _pinning(api_key=None).test_connection() is False


def test_json_rpc_wallet_maps_errors() -> None:
    session = FakeHttpSession(
        FakeResponse(payload={"jsonrpc": "2.0", "id": 1, "result": [ADDRESS]}),
        FakeResponse(payload={"jsonrpc": "2.0", "id": 2, "error": {"code": 4001, "message": "denied"}}),
        requests.ConnectionError("bridge down"),
    )
    wallet = JsonRpcWalletProvider("http://wallet.local", session=session)

    assert wallet.request_accounts() == [ADDRESS]
    with pytest.raises(ProviderRpcError) as rejected:
        wallet.personal_sign("hello", ADDRESS)
    assert rejected.value.user_rejected
    with pytest.raises(ProviderRpcError) as transport:
        wallet.personal_sign("hello", ADDRESS)
    assert not transport.value.user_rejected

    sign_call = session.calls[1][2]["json"]
    assert sign_call["method"] == "personal_sign"
    assert sign_call["params"] == ["0x" + b"hello".hex(), ADDRESS]


@pytest.mark.parametrize(
    "payload",
    [
        ["0xabc"],
        {"jsonrpc": "2.0", "id": 1, "error": "bridge exploded"},
        {"jsonrpc": "2.0", "id": 1, "result": "0xabc"},
    ],
)
def test_json_rpc_wallet_reports_malformed_responses(payload) -> None:
    wallet = JsonRpcWalletProvider("http://wallet.local", session=FakeHttpSession(FakeResponse(payload=payload)))

    with pytest.raises(ProviderRpcError) as excinfo:
        wallet.request_accounts()
    assert excinfo.value.code == INTERNAL_ERROR_CODE


def test_malformed_bridge_reply_fails_attestation_cleanly() -> None:
    session = FakeHttpSession(FakeResponse(payload=["0xabc"]))
    adapter = _adapter(JsonRpcWalletProvider("http://wallet.local", session=session), _pinning())

    with pytest.raises(WalletError, match="Failed to connect to wallet"):
        adapter.attest(ProjectForm.from_mapping(FORM))
    assert adapter.state is AttestationState.ERROR
