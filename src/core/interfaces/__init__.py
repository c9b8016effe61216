"""Core interfaces/abstractions.

Why:
- Defines the contracts (Protocol) that concrete adapters implement.
- Inverts dependencies: the sync engine depends on abstractions only.
"""

from core.interfaces.load_balancer import LoadBalancerAPI
from core.interfaces.secret_store import SecretStore

__all__ = ["LoadBalancerAPI", "SecretStore"]
