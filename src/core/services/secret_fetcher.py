"""Certificate material retrieval.

The secret is re-read on every call: the whole point of a sync is to pick up
the latest material, so nothing is cached.
"""

from __future__ import annotations

import base64
import binascii
import logging

from core.domain.errors import MissingFieldError, SecretDecodeError
from core.domain.models import CertificateMaterial
from core.interfaces.secret_store import SecretStore

CERTIFICATE_KEY = "tls.crt"
PRIVATE_KEY_KEY = "tls.key"

logger = logging.getLogger(__name__)


def _decode_pem(field: str, encoded: str) -> str:
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SecretDecodeError(f"{field} is not valid base64: {exc}") from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SecretDecodeError(f"{field} is not valid UTF-8: {exc}") from exc
    if not text:
        raise SecretDecodeError(f"{field} decodes to an empty value")
    return text


class SecretFetcher:
    """Reads and decodes a TLS key pair from a `SecretStore`."""

    def __init__(
        self,
        store: SecretStore,
        *,
        certificate_key: str = CERTIFICATE_KEY,
        private_key_key: str = PRIVATE_KEY_KEY,
    ) -> None:
        self._store = store
        self._certificate_key = certificate_key
        self._private_key_key = private_key_key

    async def fetch(self, namespace: str, secret_name: str) -> CertificateMaterial:
        logger.debug("Retrieving secret %s/%s", namespace, secret_name)
        data = await self._store.get_secret_data(namespace, secret_name)

        cert_data = data.get(self._certificate_key)
        if not cert_data:
            raise MissingFieldError(self._certificate_key)
        key_data = data.get(self._private_key_key)
        if not key_data:
            raise MissingFieldError(self._private_key_key)

        return CertificateMaterial(
            certificate_pem=_decode_pem(self._certificate_key, cert_data),
            private_key_pem=_decode_pem(self._private_key_key, key_data),
        )
