"""Kubernetes secret store client wrapper."""
import logging
from typing import Any, Dict, List, Mapping, Optional

from kubernetes import client, config as kube_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from .config_loader import load_config, ConfigError
from .errors import InfrastructureError
from .models import ManagedSecret
from .schema import label_selector

logger = logging.getLogger(__name__)

# Lazy loading: defer config loading until a cluster call is actually made
_CONFIG: Optional[Dict[str, Any]] = None
_CONFIG_LOADED = False


def _get_config() -> Dict[str, Any]:
    """
    Lazy load configuration on first use.

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If config file is invalid
    """
    global _CONFIG, _CONFIG_LOADED

    if not _CONFIG_LOADED:
        _CONFIG = load_config()
        _CONFIG_LOADED = True

    return _CONFIG


def _load_kube_config(settings: Dict[str, Any]) -> None:
    """Load cluster credentials according to the 'kubernetes' config section."""
    auth = settings.get("auth", "auto")
    kubeconfig_path = settings.get("kubeconfig_path")
    context = settings.get("context")

    if auth in ("auto", "in_cluster"):
        try:
            kube_config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
            return
        except ConfigException:
            if auth == "in_cluster":
                raise
            logger.debug("Not running in a cluster, falling back to kubeconfig")

    kube_config.load_kube_config(config_file=kubeconfig_path, context=context)
    logger.info(f"Loaded kubeconfig {kubeconfig_path or '(default)'}")


def to_managed_secret(secret: client.V1Secret) -> ManagedSecret:
    """Convert a V1Secret into a ManagedSecret, replacing missing maps with empty ones."""
    metadata = secret.metadata or client.V1ObjectMeta()
    return ManagedSecret(
        name=metadata.name,
        namespace=metadata.namespace,
        labels=dict(metadata.labels or {}),
        annotations=dict(metadata.annotations or {}),
        data=dict(secret.data or {}),
        type=secret.type or "Opaque",
        resource_version=metadata.resource_version,
    )


def to_v1_secret(namespace: str, secret: ManagedSecret) -> client.V1Secret:
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(
            name=secret.name,
            namespace=namespace,
            labels=dict(secret.labels),
            annotations=dict(secret.annotations),
            resource_version=secret.resource_version,
        ),
        type=secret.type,
        data=dict(secret.data),
    )


class KubeSecretClient:
    """Wrapper around CoreV1Api for workspace secrets."""

    def __init__(self, core_v1: Optional[client.CoreV1Api] = None, settings: Optional[Dict[str, Any]] = None):
        self._core_v1 = core_v1
        self._settings = settings

    @property
    def core_v1(self) -> client.CoreV1Api:
        """Lazy-initialize client."""
        if self._core_v1 is None:
            try:
                settings = self._settings
                if settings is None:
                    settings = _get_config()["kubernetes"]
                _load_kube_config(settings)
            except (ConfigError, ConfigException) as e:
                raise InfrastructureError(f"Failed to configure Kubernetes client: {e}") from e
            self._core_v1 = client.CoreV1Api()
        return self._core_v1

    def list_secrets(self, namespace: str, labels: Mapping[str, str]) -> List[ManagedSecret]:
        """
        List secrets in a namespace carrying all of the given labels.

        Raises:
            InfrastructureError: If the API call fails
        """
        selector = label_selector(dict(labels))
        try:
            result = self.core_v1.list_namespaced_secret(namespace, label_selector=selector)
        except ApiException as e:
            raise InfrastructureError(f"Failed to list secrets in {namespace}: {e.reason}") from e
        secrets = [to_managed_secret(item) for item in result.items or []]
        logger.debug(f"Found {len(secrets)} secrets in {namespace} matching {selector}")
        return secrets

    def create_or_replace_secret(self, namespace: str, secret: ManagedSecret) -> None:
        """
        Replace the named secret if it exists, create it otherwise.

        Raises:
            InfrastructureError: If the API call fails
        """
        body = to_v1_secret(namespace, secret)
        try:
            try:
                self.core_v1.read_namespaced_secret(secret.name, namespace)
            except ApiException as e:
                if e.status != 404:
                    raise
                try:
                    self.core_v1.create_namespaced_secret(namespace, body)
                    logger.info(f"Created secret {namespace}/{secret.name}")
                    return
                except ApiException as create_error:
                    if create_error.status != 409:
                        raise
                    # Created by someone else since the read
                    logger.debug(f"Secret {namespace}/{secret.name} appeared concurrently, replacing")
            self.core_v1.replace_namespaced_secret(secret.name, namespace, body)
            logger.info(f"Replaced secret {namespace}/{secret.name}")
        except ApiException as e:
            raise InfrastructureError(
                f"Failed to write secret {namespace}/{secret.name}: {e.reason}"
            ) from e
