"""Request validation: runs before any network call."""

from __future__ import annotations

import string

from core.domain.errors import InvalidRequestError
from core.domain.models import CertificateRequest

_ASCII_ALNUM = frozenset(string.ascii_letters + string.digits)
NAMESPACE_CHARS = _ASCII_ALNUM | {"-"}
SECRET_NAME_CHARS = _ASCII_ALNUM | {"-", "."}


def validate_request(request: CertificateRequest) -> None:
    """Raise `InvalidRequestError` when the request cannot name a secret."""

    if not request.namespace:
        raise InvalidRequestError("namespace cannot be empty")
    if not request.secret_name:
        raise InvalidRequestError("secret_name cannot be empty")
    if not set(request.namespace) <= NAMESPACE_CHARS:
        raise InvalidRequestError("namespace contains invalid characters")
    if not set(request.secret_name) <= SECRET_NAME_CHARS:
        raise InvalidRequestError("secret_name contains invalid characters")
