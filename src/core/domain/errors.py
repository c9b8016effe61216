"""Error taxonomy of a sync call.

Each error carries `retryable`: the retry executor only re-attempts errors
that may be transient. Terminal errors (malformed secrets) are surfaced after
the first failure.
"""

from __future__ import annotations


class CertWebhookError(Exception):
    """Base class of every error raised by the sync engine."""

    retryable: bool = True


class InvalidRequestError(CertWebhookError):
    """Caller input is malformed."""

    retryable = False


class FetchError(CertWebhookError):
    """The certificate material could not be read from the secret store."""


class SecretNotFoundError(FetchError):
    def __init__(self, namespace: str, name: str) -> None:
        super().__init__(f"secret {namespace}/{name} not found")
        self.namespace = namespace
        self.name = name


class SecretStoreError(FetchError):
    """Transport or API failure talking to the secret store."""


class MissingFieldError(FetchError):
    retryable = False

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} not found in secret")
        self.field = field


class SecretDecodeError(FetchError):
    retryable = False


class RemoteAPIError(CertWebhookError):
    """Non-success answer (or no answer) from the load-balancer API."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResolveError(RemoteAPIError):
    pass


class UpsertError(RemoteAPIError):
    pass
