"""Domain models for workspace secret management."""
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class CredentialRecord:
    """Personal access token for a source-control provider."""
    scm_provider_url: str
    che_user_id: str
    scm_token_name: str
    token: str
    scm_user_name: str = ""
    scm_organization: Optional[str] = None


@dataclass
class ManagedSecret:
    """Secret object as persisted in a workspace namespace.

    Data values are base64-encoded strings. Missing labels/annotations on
    objects coming from the store are represented as empty dicts.
    """
    name: str
    namespace: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    data: Dict[str, str] = field(default_factory=dict)
    type: str = "Opaque"
    resource_version: Optional[str] = None


@dataclass
class User:
    """User record as delivered by the user service."""
    id: str
    name: str
    email: Optional[str] = None


@dataclass
class ActorContext:
    """Identity on whose behalf an operation runs."""
    user_id: str
    user_name: Optional[str] = None


@dataclass
class NamespaceMeta:
    """Workspace namespace as reported by the namespace resolver."""
    name: str
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class UserPersistedEvent:
    """Published after a user record has been stored."""
    user: User
