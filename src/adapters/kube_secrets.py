"""Kubernetes secret store adapter.

Notes:
- The official `kubernetes` client is blocking; each read runs in a worker
  thread (`asyncio.to_thread`) so the event loop keeps serving requests.
- One `ApiClient` per process, shared read-only by every sync.
- Every call carries `_request_timeout` (connect, read): the client has no
  default, and a hung call would pin its worker thread forever.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from core.config import AppSettings
from core.domain.errors import SecretNotFoundError, SecretStoreError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT: tuple[float, float] = (10.0, 30.0)


def load_api_client(kubeconfig_path: Path | None = None) -> client.ApiClient:
    """Explicit kubeconfig, else in-cluster service account, else ~/.kube/config."""

    if kubeconfig_path is not None:
        configuration = client.Configuration()
        config.load_kube_config(config_file=str(kubeconfig_path), client_configuration=configuration)
        return client.ApiClient(configuration)

    configuration = client.Configuration()
    try:
        config.load_incluster_config(client_configuration=configuration)
        logger.debug("Using in-cluster Kubernetes configuration")
    except ConfigException:
        config.load_kube_config(client_configuration=configuration)
        logger.debug("Using local kubeconfig")
    return client.ApiClient(configuration)


class KubernetesSecretStore:
    """`core.interfaces.SecretStore` backed by `CoreV1Api.read_namespaced_secret`."""

    def __init__(
        self,
        api_client: client.ApiClient,
        *,
        request_timeout: tuple[float, float] = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._api_client = api_client
        self._core_v1 = client.CoreV1Api(api_client)
        self.request_timeout = request_timeout

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "KubernetesSecretStore":
        return cls(
            load_api_client(settings.kubeconfig_path),
            request_timeout=(settings.http_connect_timeout_seconds, settings.http_timeout_seconds),
        )

    def _read(self, namespace: str, name: str) -> dict[str, str]:
        try:
            secret = self._core_v1.read_namespaced_secret(
                name=name,
                namespace=namespace,
                _request_timeout=self.request_timeout,
            )
        except ApiException as exc:
            if exc.status == 404:
                raise SecretNotFoundError(namespace, name) from exc
            raise SecretStoreError(f"Kubernetes API error ({exc.status}): {exc.reason}") from exc
        except Exception as exc:
            raise SecretStoreError(f"Failed to read secret {namespace}/{name}: {exc}") from exc
        return dict(secret.data or {})

    async def get_secret_data(self, namespace: str, name: str) -> dict[str, str]:
        return await asyncio.to_thread(self._read, namespace, name)

    async def check_connection(self) -> tuple[bool, str]:
        """Reachability check for the deep health check."""

        def _version() -> str:
            return client.VersionApi(self._api_client).get_code(_request_timeout=self.request_timeout).git_version

        try:
            version = await asyncio.to_thread(_version)
        except Exception as exc:
            return False, f"Failed to connect to Kubernetes API: {exc}"
        return True, f"Kubernetes {version}"

    def close(self) -> None:
        self._api_client.close()
