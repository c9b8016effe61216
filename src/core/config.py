"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) away from the CLI and
  the HTTP layer.
- Built once at startup and injected; services never read `os.environ`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Central, immutable configuration of the webhook.

    The unprefixed names (`LINODE_TOKEN`, `NODEBALANCER_ID`, `PORT`) are
    accepted next to the `CERT_WEBHOOK_*` ones so existing deployments keep
    working.
    """

    model_config = SettingsConfigDict(
        env_prefix="CERT_WEBHOOK_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    linode_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("CERT_WEBHOOK_LINODE_TOKEN", "LINODE_TOKEN"),
        description="Bearer token for the Linode API.",
    )
    nodebalancer_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("CERT_WEBHOOK_NODEBALANCER_ID", "NODEBALANCER_ID"),
        description="NodeBalancer whose HTTPS config receives the certificate.",
    )
    linode_api_url: str = Field(
        default="https://api.linode.com/v4",
        min_length=8,
        description="Base URL of the Linode API.",
    )

    host: str = Field(default="0.0.0.0", description="Bind address of the webhook server.")
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("CERT_WEBHOOK_PORT", "PORT"),
        description="Bind port of the webhook server.",
    )

    http_connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Connect timeout for Linode API calls (seconds).",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Read/write timeout per phase, and bound on each whole Linode or Kubernetes call (seconds).",
    )
    http_max_keepalive_connections: int = Field(default=10, ge=1, le=1000)
    http_keepalive_expiry_seconds: float = Field(default=60.0, gt=0)

    retry_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per network step (secret read, NodeBalancer upsert).",
    )
    retry_base_delay_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Backoff before the second attempt; doubles after each failure.",
    )
    sync_deadline_seconds: float = Field(
        default=120.0,
        ge=0,
        description="Overall deadline of one sync call (0 disables it).",
    )
    terminator_sort_by_id: bool = Field(
        default=False,
        description="Sort NodeBalancer configs by id before picking the port-443 one.",
    )

    kubeconfig_path: Path | None = Field(
        default=None,
        description="Explicit kubeconfig; otherwise in-cluster config, then ~/.kube/config.",
    )

    max_payload_bytes: int = Field(
        default=256 * 1024,
        ge=1024,
        description="Maximum accepted webhook body size.",
    )
    log_level: str = Field(default="INFO", min_length=1)
