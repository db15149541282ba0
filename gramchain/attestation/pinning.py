"""Mini README: Client for the document pinning service and its gateway.

Structure:
    * UploadResult - content identifier, share URL, and size of an upload.
    * PinningClient - multipart upload, gateway fetch, and connection probe.

Uploads send one JSON document as a multipart ``file`` field with a bearer
API key. The service has answered in three shapes over time
(``{"data": {"Hash", "Size"}}``, ``{"Hash", "Size"}`` and a one-element list
of the latter); all are accepted. Nothing re-hashes fetched documents to
confirm they match what was uploaded.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import requests

from ..configuration import get_settings
from ..logging_utils import get_logger
from .errors import AttestationError, PinningError, PinningNotConfiguredError

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class UploadResult:
    cid: str
    url: str
    size: int


def _coerce_size(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return 0


def _extract_hash(response: Any) -> Tuple[str, int]:
    """Pull ``(Hash, Size)`` out of any of the known response shapes."""

    if isinstance(response, dict) and isinstance(response.get("data"), dict) and response["data"].get("Hash"):
        entry = response["data"]
    elif isinstance(response, dict) and response.get("Hash"):
        entry = response
    elif isinstance(response, list) and response and isinstance(response[0], dict) and response[0].get("Hash"):
        entry = response[0]
    else:
        raise PinningError("Upload failed: Unexpected response structure from pinning service")
    return str(entry["Hash"]), _coerce_size(entry.get("Size"))


class PinningClient:
    """Upload project documents and read them back through the public gateway."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        upload_url: str,
        gateway_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.upload_url = upload_url
        self.gateway_url = gateway_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        if not api_key:
            LOGGER.warning("Pinning API key is not set; document uploads will fail")

    @classmethod
    def from_settings(cls) -> "PinningClient":
        settings = get_settings()
        return cls(
            settings.pinning_api_key,
            upload_url=settings.pinning_upload_url,
            gateway_url=settings.pinning_gateway_url,
            timeout=settings.http_timeout_seconds,
        )

    def gateway_link(self, cid: str) -> str:
        return f"{self.gateway_url}/{cid}"

    def upload_document(
        self, payload: Mapping[str, Any], *, filename: Optional[str] = None
    ) -> UploadResult:
        """Serialise ``payload`` to JSON and pin it, returning its identifier."""

        if not self.api_key:
            raise PinningNotConfiguredError(
                "Pinning API key is not configured. Set GRAMCHAIN_PINNING_API_KEY."
            )
        filename = filename or f"project-{int(time.time() * 1000)}.json"
        document = json.dumps(payload, indent=2).encode("utf-8")
        LOGGER.debug("Uploading %s (%s bytes) to %s", filename, len(document), self.upload_url)
        try:
            response = self.session.post(
                self.upload_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                files={"file": (filename, document, "application/json")},
                timeout=self.timeout,
            )
            response.raise_for_status()
            cid, size = _extract_hash(response.json())
        except (PinningError, requests.RequestException, ValueError) as error:
            raise PinningError(f"Failed to upload to IPFS: {error}") from error
        LOGGER.info("Pinned %s as %s (%s bytes)", filename, cid, size)
        return UploadResult(cid=cid, url=self.gateway_link(cid), size=size)

    def fetch_document(self, cid: str) -> Dict[str, Any]:
        """Retrieve a previously uploaded JSON document from the gateway."""

        try:
            response = self.session.get(self.gateway_link(cid), timeout=self.timeout)
            response.raise_for_status()
            document = response.json()
        except (requests.RequestException, ValueError) as error:
            raise PinningError(f"Failed to retrieve project from IPFS: {error}") from error
        if not isinstance(document, dict):
            raise PinningError("Failed to retrieve project from IPFS: document is not an object")
        return document

    def test_connection(self) -> bool:
        """Upload a small probe document; return whether the service accepted it."""

        try:
            self.upload_document(
                {"test": "connection", "timestamp": int(time.time() * 1000)},
                filename="test.json",
            )
        except AttestationError as error:
            LOGGER.error("Pinning connection test failed: %s", error)
            return False
        return True
