"""Workflow for saving git credentials into the user's workspace namespace."""
import logging
import secrets
import string
from dataclasses import replace

from ..domains import credential_encoder
from ..domains.collaborators import NamespaceResolver, SecretStore
from ..domains.errors import (
    InfrastructureError,
    MalformedUrlError,
    PersistenceError,
    UnsatisfiedPreconditionError,
)
from ..domains.matcher import find_reusable
from ..domains.models import ActorContext, CredentialRecord, ManagedSecret
from ..domains.schema import (
    ANNOTATION_CHE_USERID,
    ANNOTATION_SCM_URL,
    CREDENTIALS_DATA_KEY,
    DEFAULT_SECRET_ANNOTATIONS,
    NAME_PATTERN,
    NAME_SUFFIX_LENGTH,
    NEW_SECRET_LABELS,
    SEARCH_LABELS,
)

logger = logging.getLogger(__name__)

_NAME_ALPHABET = string.ascii_lowercase + string.digits


def generate_name(prefix: str = NAME_PATTERN, length: int = NAME_SUFFIX_LENGTH) -> str:
    """Return prefix followed by a random lowercase alphanumeric suffix."""
    return prefix + "".join(secrets.choice(_NAME_ALPHABET) for _ in range(length))


def new_credential_secret(record: CredentialRecord, namespace: str) -> ManagedSecret:
    annotations = dict(DEFAULT_SECRET_ANNOTATIONS)
    annotations[ANNOTATION_SCM_URL] = record.scm_provider_url
    annotations[ANNOTATION_CHE_USERID] = record.che_user_id
    return ManagedSecret(
        name=generate_name(),
        namespace=namespace,
        labels=dict(NEW_SECRET_LABELS),
        annotations=annotations,
    )


class GitCredentialManager:
    """
    Creates or updates the git credentials secret in the user's namespace.

    At most one credential secret per (provider URL, user) is kept: an existing
    matching secret is updated in place instead of adding another one.
    """

    def __init__(self, namespace_resolver: NamespaceResolver, store: SecretStore):
        self.namespace_resolver = namespace_resolver
        self.store = store

    def _first_namespace(self, actor: ActorContext) -> str:
        """
        Return the actor's namespace.

        Credentials go to the namespace pre-created for the user, so the first
        listed namespace is expected to be the same on every call.

        Raises:
            UnsatisfiedPreconditionError: If the actor has no namespace
            PersistenceError: If the namespaces cannot be listed
        """
        try:
            namespaces = self.namespace_resolver.list_namespaces(actor)
        except InfrastructureError as e:
            raise PersistenceError(str(e)) from e

        for namespace in namespaces:
            return namespace.name

        raise UnsatisfiedPreconditionError("No user namespace found. Cannot read SCM credentials.")

    def create_or_replace(self, record: CredentialRecord, actor: ActorContext) -> ManagedSecret:
        """
        Save a personal access token as a git credentials secret.

        Args:
            record: Token to store
            actor: User on whose behalf the token is saved

        Returns:
            The secret as written to the store

        Raises:
            UnsatisfiedPreconditionError: If the actor has no namespace
            PersistenceError: If the provider URL is malformed or the store fails
        """
        namespace = self._first_namespace(actor)
        try:
            candidates = self.store.list_secrets(namespace, SEARCH_LABELS)
            existing = find_reusable(candidates, record)

            credentials = credential_encoder.encode(record)
            data = {CREDENTIALS_DATA_KEY: credential_encoder.encode_data_value(credentials)}

            if existing is not None:
                secret = replace(existing, namespace=namespace, data=data)
            else:
                secret = replace(new_credential_secret(record, namespace), data=data)

            self.store.create_or_replace_secret(namespace, secret)
        except (InfrastructureError, MalformedUrlError) as e:
            raise PersistenceError(str(e)) from e

        action = "Updated" if existing is not None else "Created"
        logger.info(f"{action} git credentials secret {namespace}/{secret.name} for {record.scm_provider_url}")
        return secret
