"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation at the edge (webhook payloads, remote API listings)
  with self-documenting `Field`s.
- The domain does not know about HTTP, Kubernetes or Linode clients; these
  models describe *what* flows through a sync, not *how* it is fetched.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class CertificateRequest(BaseModel):
    """Identifies the secret holding freshly issued material.

    Deliberately unconstrained: character rules are enforced by
    `core.services.validator` so the failure becomes a `validationError`
    outcome instead of a parsing error.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(default="", description="Namespace of the TLS secret.")
    secret_name: str = Field(default="", description="Name of the TLS secret.")

    def __str__(self) -> str:
        return f"{self.namespace}/{self.secret_name}"


class CertificateMaterial(BaseModel):
    """Decoded PEM pair. Held for one sync call, never logged."""

    model_config = ConfigDict(frozen=True)

    certificate_pem: str = Field(..., min_length=1, repr=False)
    private_key_pem: str = Field(..., min_length=1, repr=False)


class TerminatorConfig(BaseModel):
    """One NodeBalancer config (listener), as returned by the Linode API."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int = Field(..., description="Config identifier on the NodeBalancer.")
    port: int = Field(..., ge=1, le=65535)
    protocol: str = Field(default="http", description="http, https or tcp.")


class SyncStatus(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validationError"
    FETCH_ERROR = "fetchError"
    UPSERT_ERROR = "upsertError"
    TIMEOUT = "timeout"


class SyncOutcome(BaseModel):
    """Result of one `synchronize` call."""

    status: SyncStatus
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is SyncStatus.SUCCESS


class SecretRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    namespace: str


class CertManagerHook(BaseModel):
    """Payload posted by cert-manager style notifiers."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    secret_ref: SecretRef = Field(..., alias="secretRef")

    def to_request(self) -> CertificateRequest:
        return CertificateRequest(namespace=self.secret_ref.namespace, secret_name=self.secret_ref.name)


class SyncRequestBody(BaseModel):
    """Flat payload: `{"namespace": ..., "secret_name": ...}`."""

    model_config = ConfigDict(extra="ignore")

    namespace: str
    secret_name: str

    def to_request(self) -> CertificateRequest:
        return CertificateRequest(namespace=self.namespace, secret_name=self.secret_name)


class ApiResponse(BaseModel):
    """JSON body returned by every HTTP endpoint."""

    status: str
    message: str | None = None
