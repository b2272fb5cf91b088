"""Tests for the Kubernetes secret store wrapper."""
from unittest import mock

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from workspace_secrets.secrets.domains import kube_client
from workspace_secrets.secrets.domains.errors import InfrastructureError
from workspace_secrets.secrets.domains.kube_client import KubeSecretClient, to_managed_secret
from workspace_secrets.secrets.domains.models import ManagedSecret
from workspace_secrets.secrets.domains.schema import SEARCH_LABELS


@pytest.fixture
def core_v1():
    return mock.Mock(spec=client.CoreV1Api)


@pytest.fixture
def secret():
    return ManagedSecret(
        name="git-credentials-secret-abcde",
        labels={"a": "b"},
        annotations={"c": "d"},
        data={"credentials": "eA=="},
    )


def v1_secret(name, annotations=None, labels=None):
    return client.V1Secret(
        metadata=client.V1ObjectMeta(
            name=name, namespace="ns", annotations=annotations, labels=labels, resource_version="42",
        ),
        data={"credentials": "eA=="},
    )


class TestListSecrets:
    """Listing and conversion of secrets."""

    def test_uses_label_selector(self, core_v1):
        core_v1.list_namespaced_secret.return_value = client.V1SecretList(items=[v1_secret("s1")])

        result = KubeSecretClient(core_v1=core_v1).list_secrets("ns", SEARCH_LABELS)

        core_v1.list_namespaced_secret.assert_called_once_with(
            "ns",
            label_selector="app.kubernetes.io/part-of=che.eclipse.org,"
                           "app.kubernetes.io/component=workspace-secret",
        )
        assert [s.name for s in result] == ["s1"]

    def test_missing_metadata_maps_become_empty(self):
        converted = to_managed_secret(v1_secret("s1"))
        assert converted.annotations == {}
        assert converted.labels == {}
        assert converted.resource_version == "42"
        assert converted.type == "Opaque"

    def test_api_error_raises_infrastructure_error(self, core_v1):
        core_v1.list_namespaced_secret.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(InfrastructureError, match="Forbidden"):
            KubeSecretClient(core_v1=core_v1).list_secrets("ns", SEARCH_LABELS)


class TestCreateOrReplaceSecret:
    """Create-or-replace semantics."""

    def test_replaces_existing_secret(self, core_v1, secret):
        KubeSecretClient(core_v1=core_v1).create_or_replace_secret("ns", secret)

        core_v1.replace_namespaced_secret.assert_called_once()
        name, namespace, body = core_v1.replace_namespaced_secret.call_args[0]
        assert (name, namespace) == (secret.name, "ns")
        assert body.metadata.annotations == {"c": "d"}
        assert body.data == {"credentials": "eA=="}
        core_v1.create_namespaced_secret.assert_not_called()

    def test_creates_missing_secret(self, core_v1, secret):
        core_v1.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")

        KubeSecretClient(core_v1=core_v1).create_or_replace_secret("ns", secret)

        namespace, body = core_v1.create_namespaced_secret.call_args[0]
        assert namespace == "ns"
        assert body.metadata.name == secret.name
        assert body.metadata.labels == {"a": "b"}
        core_v1.replace_namespaced_secret.assert_not_called()

    def test_read_error_raises_infrastructure_error(self, core_v1, secret):
        core_v1.read_namespaced_secret.side_effect = ApiException(status=500, reason="Internal Error")

        with pytest.raises(InfrastructureError, match="Internal Error"):
            KubeSecretClient(core_v1=core_v1).create_or_replace_secret("ns", secret)
        core_v1.create_namespaced_secret.assert_not_called()

    def test_conflict_on_replace_raises_infrastructure_error(self, core_v1, secret):
        core_v1.replace_namespaced_secret.side_effect = ApiException(status=409, reason="Conflict")

        with pytest.raises(InfrastructureError, match="Conflict"):
            KubeSecretClient(core_v1=core_v1).create_or_replace_secret("ns", secret)

    def test_create_conflict_falls_back_to_replace(self, core_v1, secret):
        core_v1.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")
        core_v1.create_namespaced_secret.side_effect = ApiException(status=409, reason="AlreadyExists")

        KubeSecretClient(core_v1=core_v1).create_or_replace_secret("ns", secret)

        name, namespace, body = core_v1.replace_namespaced_secret.call_args[0]
        assert (name, namespace) == (secret.name, "ns")
        assert body.data == {"credentials": "eA=="}

    def test_create_failure_raises_infrastructure_error(self, core_v1, secret):
        core_v1.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")
        core_v1.create_namespaced_secret.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(InfrastructureError, match="Forbidden"):
            KubeSecretClient(core_v1=core_v1).create_or_replace_secret("ns", secret)
        core_v1.replace_namespaced_secret.assert_not_called()


class TestLazyClient:
    """Kubernetes configuration is loaded on first use."""

    def test_kubeconfig_auth(self, monkeypatch):
        load_kube_config = mock.Mock()
        load_incluster_config = mock.Mock()
        monkeypatch.setattr(kube_client.kube_config, "load_kube_config", load_kube_config)
        monkeypatch.setattr(kube_client.kube_config, "load_incluster_config", load_incluster_config)

        store = KubeSecretClient(settings={"auth": "kubeconfig", "kubeconfig_path": "/tmp/kc", "context": "dev"})
        assert isinstance(store.core_v1, client.CoreV1Api)

        load_incluster_config.assert_not_called()
        load_kube_config.assert_called_once_with(config_file="/tmp/kc", context="dev")

    def test_auto_falls_back_to_kubeconfig(self, monkeypatch):
        load_kube_config = mock.Mock()
        monkeypatch.setattr(kube_client.kube_config, "load_kube_config", load_kube_config)
        monkeypatch.setattr(
            kube_client.kube_config, "load_incluster_config", mock.Mock(side_effect=ConfigException("no sa"))
        )

        KubeSecretClient(settings={"auth": "auto"}).core_v1

        load_kube_config.assert_called_once_with(config_file=None, context=None)

    def test_in_cluster_failure_raises_infrastructure_error(self, monkeypatch):
        monkeypatch.setattr(
            kube_client.kube_config, "load_incluster_config", mock.Mock(side_effect=ConfigException("no sa"))
        )

        with pytest.raises(InfrastructureError, match="no sa"):
            KubeSecretClient(settings={"auth": "in_cluster"}).core_v1

    def test_settings_come_from_config_file(self, monkeypatch):
        monkeypatch.setattr(kube_client, "_CONFIG", None)
        monkeypatch.setattr(kube_client, "_CONFIG_LOADED", False)
        monkeypatch.setattr(kube_client, "load_config", lambda: {"kubernetes": {"auth": "kubeconfig"}})
        load_kube_config = mock.Mock()
        monkeypatch.setattr(kube_client.kube_config, "load_kube_config", load_kube_config)

        KubeSecretClient().core_v1

        load_kube_config.assert_called_once_with(config_file=None, context=None)
