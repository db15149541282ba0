"""Mini README: Centralised configuration models and helpers for GramChain.

Structure:
    * GramChainSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read environment variables (prefixed with
    ``GRAMCHAIN_``), locate the ledger data directory, and configure the
    pinning gateway, wallet bridge, and backend API endpoints. The settings
    are cached so validation only happens once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class GramChainSettings(BaseSettings):
    """Runtime configuration for the GramChain ledger service."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    log_level: str = Field("INFO", description="Root logging level.")
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the JSON record store.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the web interface to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the web interface exposes.",
        ge=1,
        le=65535,
    )
    api_base_url: str = Field(
        "http://localhost:8080/api",
        description="Base URL of the GramChain backend REST API.",
    )
    pinning_api_key: Optional[str] = Field(
        None,
        description=(
            "API key for the pinning service. Attested project creation is"
            " unavailable while this is unset."
        ),
    )
    pinning_upload_url: str = Field(
        "https://node.lighthouse.storage/api/v0/add",
        description="Endpoint accepting multipart document uploads.",
    )
    pinning_gateway_url: str = Field(
        "https://gateway.lighthouse.storage/ipfs",
        description="Public gateway used to build share URLs and fetch documents.",
    )
    wallet_rpc_url: Optional[str] = Field(
        None,
        description="JSON-RPC endpoint of the wallet bridge used for signatures.",
    )
    http_timeout_seconds: float = Field(
        30.0,
        description="Timeout applied to outbound HTTP calls.",
        gt=0,
    )

    class Config:
        env_prefix = "GRAMCHAIN_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @validator("pinning_gateway_url", "api_base_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        """Keep base URLs joinable with ``/``-prefixed paths."""

        return value.rstrip("/")

    @property
    def ledger_directory(self) -> Path:
        """Directory used by the JSON file record store."""

        return self.data_directory / "ledger"


@lru_cache()
def get_settings() -> GramChainSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return GramChainSettings()
