"""Interfaces of the services this package relies on."""
from typing import Dict, Mapping, Protocol, Sequence

from .models import ActorContext, ManagedSecret, NamespaceMeta, User


class NamespaceResolver(Protocol):
    def list_namespaces(self, actor: ActorContext) -> Sequence[NamespaceMeta]:
        ...

    def provision(self, actor: ActorContext) -> NamespaceMeta:
        ...

    def evaluate_namespace_name(self, actor: ActorContext) -> str:
        ...


class SecretStore(Protocol):
    def list_secrets(self, namespace: str, labels: Mapping[str, str]) -> Sequence[ManagedSecret]:
        ...

    def create_or_replace_secret(self, namespace: str, secret: ManagedSecret) -> None:
        ...


class UserManager(Protocol):
    def get_by_id(self, user_id: str) -> User:
        """Raises NotFoundError or ServerError."""
        ...


class PreferenceManager(Protocol):
    def find_preferences(self, user_id: str) -> Dict[str, str]:
        """Raises ServerError."""
        ...
