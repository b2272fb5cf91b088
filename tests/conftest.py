"""Shared fakes for the collaborators of the secret workflows."""
import copy

import pytest

from workspace_secrets.secrets.domains.errors import InfrastructureError, NotFoundError
from workspace_secrets.secrets.domains.models import ActorContext, NamespaceMeta, User


class InMemorySecretStore:
    """SecretStore keeping secrets per namespace, keyed by name."""

    def __init__(self):
        self.namespaces = {}
        self.writes = []
        self.fail_on_write = None
        self.fail_on_list = None

    def add(self, namespace, secret):
        self.namespaces.setdefault(namespace, {})[secret.name] = copy.deepcopy(secret)

    def secrets(self, namespace):
        return list(self.namespaces.get(namespace, {}).values())

    def list_secrets(self, namespace, labels):
        if self.fail_on_list:
            raise InfrastructureError(self.fail_on_list)
        return [
            copy.deepcopy(secret)
            for secret in self.secrets(namespace)
            if all(secret.labels.get(key) == value for key, value in labels.items())
        ]

    def create_or_replace_secret(self, namespace, secret):
        if self.fail_on_write and secret.name in self.fail_on_write:
            raise InfrastructureError(f"write of {secret.name} rejected")
        self.writes.append((namespace, secret.name))
        self.add(namespace, secret)


class FakeNamespaceResolver:
    """Resolves every user to '<user_name>-che'."""

    def __init__(self, namespaces=None):
        self.namespaces = namespaces if namespaces is not None else [NamespaceMeta(name="alice-che")]
        self.provisioned = []
        self.fail_on_list = None

    def list_namespaces(self, actor):
        if self.fail_on_list:
            raise InfrastructureError(self.fail_on_list)
        return list(self.namespaces)

    def provision(self, actor):
        meta = NamespaceMeta(name=self.evaluate_namespace_name(actor))
        self.provisioned.append(meta.name)
        return meta

    def evaluate_namespace_name(self, actor):
        return f"{actor.user_name}-che"


class FakeUserManager:
    def __init__(self, users=(), error=None):
        self.users = {user.id: user for user in users}
        self.error = error

    def get_by_id(self, user_id):
        if self.error is not None:
            raise self.error
        if user_id not in self.users:
            raise NotFoundError(f"User {user_id} not found")
        return self.users[user_id]


class FakePreferenceManager:
    def __init__(self, preferences=None, error=None):
        self.preferences = preferences or {}
        self.error = error

    def find_preferences(self, user_id):
        if self.error is not None:
            raise self.error
        return dict(self.preferences.get(user_id, {}))


@pytest.fixture
def store():
    return InMemorySecretStore()


@pytest.fixture
def resolver():
    return FakeNamespaceResolver()


@pytest.fixture
def alice():
    return User(id="u1", name="alice", email="alice@example.com")


@pytest.fixture
def actor(alice):
    return ActorContext(user_id=alice.id, user_name=alice.name)
