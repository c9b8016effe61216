"""Secret store contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- The Kubernetes adapter and in-memory test doubles are interchangeable.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SecretStore(Protocol):
    """Minimal read-only view over namespaced secrets.

    Design rules:
    - `get_secret_data` is async because it performs I/O.
    - Values are returned in their stored (base64) form; decoding belongs to
      the core.
    - Raises `SecretNotFoundError` when the secret does not exist and
      `SecretStoreError` for anything else, so callers can tell them apart.
    """

    async def get_secret_data(self, namespace: str, name: str) -> dict[str, str]:
        ...
