"""Mini README: Wallet-signature and document-upload attestation flow.

Structure:
    * AttestationState - idle, connecting, signing, uploading, success, error.
    * ProjectForm - validated project creation form (nine required fields).
    * SignatureResult / AttestationResult - outputs handed to the ledger.
    * AttestationAdapter - runs the linear connect -> sign -> upload sequence.
    * create_attested_project - validate, attest, then append the project.

The sequence is strictly linear with no retries. Any failure moves the adapter
to ``error``, records the message, and re-raises. Because the project is only
appended after a successful attestation, a failed run leaves the ledger
untouched. The signature and content identifier are stored verbatim on the
project; nothing later checks them against the message or signer.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from ..ledger.models import Project, ProjectStatus
from ..ledger.mutator import LedgerMutator
from ..ledger.workflows import require_fields
from ..logging_utils import get_logger
from .errors import (
    ProviderRpcError,
    UserRejectedError,
    WalletError,
    WalletNotInstalledError,
)
from .pinning import PinningClient, UploadResult
from .wallet import WalletProvider

LOGGER = get_logger(__name__)

MESSAGE_TEMPLATE = (
    'I am creating a new project "{title}" with budget ${budget} on GramChain. '
    "This signature confirms my authorization for this project creation."
)


class AttestationState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    SIGNING = "signing"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


# attribute name -> key used by the submitted form and the pinned document
FORM_KEYS = {
    "budget": "budget",
    "project_title": "projectTitle",
    "start_date": "startDate",
    "total_duration": "totalDuration",
    "local_president": "localPresident",
    "location": "location",
    "project_description": "projectDescription",
    "initial_fund_release_amount": "initialFundReleaseAmount",
    "pin_code": "pinCode",
}


@dataclass(slots=True)
class ProjectForm:
    """Project creation form as submitted; every field is required."""

    budget: str
    project_title: str
    start_date: str
    total_duration: str
    local_president: str
    location: str
    project_description: str
    initial_fund_release_amount: str
    pin_code: str

    @classmethod
    def from_mapping(cls, form: Mapping[str, object]) -> "ProjectForm":
        """Validate presence of every field and that amounts are numeric."""

        require_fields(form, list(FORM_KEYS.values()))
        parsed = cls(**{attr: str(form[key]).strip() for attr, key in FORM_KEYS.items()})
        for attr in ("budget", "initial_fund_release_amount"):
            try:
                float(getattr(parsed, attr))
            except ValueError as error:
                raise ValueError(f"Field '{FORM_KEYS[attr]}' must be numeric") from error
        return parsed

    def as_dict(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for attr, key in FORM_KEYS.items()}


@dataclass(slots=True)
class SignatureResult:
    signature: str
    message: str
    address: str


@dataclass(slots=True)
class AttestationResult:
    signature: SignatureResult
    upload: UploadResult
    document: Dict[str, Any]


def build_signing_message(form: ProjectForm) -> str:
    return MESSAGE_TEMPLATE.format(title=form.project_title, budget=form.budget)


class AttestationAdapter:
    """Collect a wallet signature and pin the project document."""

    def __init__(
        self,
        wallet: Optional[WalletProvider],
        pinning: PinningClient,
        *,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.wallet = wallet
        self.pinning = pinning
        self._clock = clock or (lambda: int(time.time() * 1000))
        self.state = AttestationState.IDLE
        self.error_message = ""

    def reset(self) -> None:
        self.state = AttestationState.IDLE
        self.error_message = ""

    def fail(self, error: Exception) -> None:
        """Move to ``error`` keeping ``error``'s message for display."""

        self.state = AttestationState.ERROR
        self.error_message = str(error)
        LOGGER.warning("Attestation failed: %s", self.error_message)

    def _transition(self, state: AttestationState) -> None:
        LOGGER.debug("Attestation %s -> %s", self.state.value, state.value)
        self.state = state

    def connect(self) -> str:
        """Return the first authorised wallet account."""

        if self.wallet is None:
            raise WalletNotInstalledError(
                "Wallet provider is not installed. Configure a wallet to continue."
            )
        try:
            accounts = self.wallet.request_accounts()
        except ProviderRpcError as error:
            if error.user_rejected:
                raise UserRejectedError("User rejected the connection request.") from error
            raise WalletError(f"Failed to connect to wallet: {error.message}") from error
        except Exception as error:
            raise WalletError(f"Failed to connect to wallet: {error}") from error
        if not accounts:
            raise WalletError("No accounts found. Please connect your wallet.")
        return accounts[0]

    def sign(self, message: str, address: str) -> SignatureResult:
        if self.wallet is None:
            raise WalletNotInstalledError("Wallet provider is not installed.")
        try:
            signature = self.wallet.personal_sign(message, address)
        except ProviderRpcError as error:
            if error.user_rejected:
                raise UserRejectedError("User rejected the signature request.") from error
            raise WalletError(f"Failed to sign message: {error.message}") from error
        except Exception as error:
            raise WalletError(f"Failed to sign message: {error}") from error
        return SignatureResult(signature=signature, message=message, address=address)

    def attest(self, form: ProjectForm) -> AttestationResult:
        """Run connect, sign and upload for ``form``."""

        self.reset()
        try:
            self._transition(AttestationState.CONNECTING)
            address = self.connect()
            LOGGER.info("Connected to wallet account %s", address)

            document: Dict[str, Any] = {
                **form.as_dict(),
                "createdBy": address,
                "timestamp": self._clock(),
            }
            self._transition(AttestationState.SIGNING)
            signature = self.sign(build_signing_message(form), address)

            self._transition(AttestationState.UPLOADING)
            upload = self.pinning.upload_document(document)
        except Exception as error:
            self.fail(error)
            raise
        self._transition(AttestationState.SUCCESS)
        return AttestationResult(signature=signature, upload=upload, document=document)


def create_attested_project(
    form_data: Mapping[str, object],
    adapter: AttestationAdapter,
    mutator: LedgerMutator,
) -> Project:
    """Validate the form, attest it, and append the resulting project.

    Validation happens before any wallet or network call.
    """

    try:
        form = ProjectForm.from_mapping(form_data)
    except ValueError as error:
        adapter.fail(error)
        raise
    result = adapter.attest(form)
    project = mutator.add_project(
        name=form.project_title,
        description=form.project_description,
        location=form.location,
        total_budget=float(form.budget),
        allocated_funds=float(form.initial_fund_release_amount),
        spent_funds=0,
        status=ProjectStatus.IN_PROGRESS,
        contractor=form.local_president,
        milestones=[],
        ipfs_hash=result.upload.cid,
        signature=result.signature.signature,
        created_by=result.signature.address,
    )
    LOGGER.info(
        "Attested project %s pinned as %s by %s",
        project.project_id,
        result.upload.cid,
        result.signature.address,
    )
    return project
