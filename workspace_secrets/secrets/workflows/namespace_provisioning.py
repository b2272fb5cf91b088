"""Workflow writing user profile and preference secrets into workspace namespaces."""
import logging
from typing import Dict

from ..domains.collaborators import NamespaceResolver, PreferenceManager, SecretStore, UserManager
from ..domains.credential_encoder import encode_data_value
from ..domains.errors import (
    AuxiliaryDataUnavailableError,
    InfrastructureError,
    NotFoundError,
    ServerError,
)
from ..domains.events import EventService
from ..domains.models import ActorContext, ManagedSecret, NamespaceMeta, User, UserPersistedEvent
from ..domains.schema import (
    USER_PREFERENCES_MOUNT_PATH,
    USER_PREFERENCES_SECRET_NAME,
    USER_PROFILE_MOUNT_PATH,
    USER_PROFILE_SECRET_NAME,
    user_info_annotations,
    user_info_labels,
)

logger = logging.getLogger(__name__)


def _encode_values(values: Dict[str, str]) -> Dict[str, str]:
    return {key: encode_data_value(str(value).encode("utf-8")) for key, value in values.items()}


def user_info_secret(name: str, mount_path: str, values: Dict[str, str]) -> ManagedSecret:
    return ManagedSecret(
        name=name,
        labels=user_info_labels(),
        annotations=user_info_annotations(mount_path),
        data=_encode_values(values),
    )


def profile_secret(user: User) -> ManagedSecret:
    return user_info_secret(
        USER_PROFILE_SECRET_NAME,
        USER_PROFILE_MOUNT_PATH,
        {"id": user.id, "name": user.name or "", "email": user.email or ""},
    )


def preferences_secret(preferences: Dict[str, str]) -> ManagedSecret:
    return user_info_secret(USER_PREFERENCES_SECRET_NAME, USER_PREFERENCES_MOUNT_PATH, preferences)


class NamespaceProvisioner:
    """Provisions user namespaces and keeps the user information secrets in them current."""

    def __init__(
        self,
        namespace_resolver: NamespaceResolver,
        store: SecretStore,
        user_manager: UserManager,
        preference_manager: PreferenceManager,
    ):
        self.namespace_resolver = namespace_resolver
        self.store = store
        self.user_manager = user_manager
        self.preference_manager = preference_manager

    def provision(self, actor: ActorContext) -> NamespaceMeta:
        """
        Provision the actor's namespace and write their profile and preferences into it.

        Only namespace provisioning errors propagate; user information secrets
        are written on a best-effort basis.

        Raises:
            InfrastructureError: If the namespace cannot be provisioned
        """
        namespace_meta = self.namespace_resolver.provision(actor)

        try:
            self.create_or_update_secrets(self._load_user(actor.user_id))
        except AuxiliaryDataUnavailableError:
            logger.error("Could not find current user. Skipping creation of user information secrets.", exc_info=True)
        except InfrastructureError:
            logger.error("There was a failure while creating user information secrets.", exc_info=True)

        return namespace_meta

    def on_event(self, event: UserPersistedEvent) -> None:
        """Handle a user-persisted notification. Never raises."""
        try:
            self.create_or_update_secrets(event.user)
        except InfrastructureError:
            logger.error("There was a failure while creating user information secrets.", exc_info=True)

    def subscribe(self, event_service: EventService) -> None:
        event_service.subscribe(self.on_event, UserPersistedEvent)

    def unsubscribe(self, event_service: EventService) -> None:
        event_service.unsubscribe(self.on_event, UserPersistedEvent)

    def create_or_update_secrets(self, user: User) -> None:
        """
        Write the profile secret and, if preferences are readable, the preferences secret.

        Raises:
            InfrastructureError: If the namespace name cannot be evaluated or a write fails
        """
        namespace = self.namespace_resolver.evaluate_namespace_name(
            ActorContext(user_id=user.id, user_name=user.name)
        )

        self.store.create_or_replace_secret(namespace, profile_secret(user))
        logger.info(f"Wrote user profile secret to {namespace} for user {user.id}")

        try:
            preferences = self._load_preferences(user.id)
        except AuxiliaryDataUnavailableError:
            logger.error(
                "Could not find user preferences. Skipping creation of user preferences secrets.",
                exc_info=True,
            )
            return

        self.store.create_or_replace_secret(namespace, preferences_secret(preferences))
        logger.info(f"Wrote user preferences secret to {namespace} for user {user.id}")

    def _load_user(self, user_id: str) -> User:
        try:
            return self.user_manager.get_by_id(user_id)
        except (NotFoundError, ServerError) as e:
            raise AuxiliaryDataUnavailableError(f"User {user_id} unavailable: {e}") from e

    def _load_preferences(self, user_id: str) -> Dict[str, str]:
        try:
            return self.preference_manager.find_preferences(user_id)
        except ServerError as e:
            raise AuxiliaryDataUnavailableError(f"Preferences of {user_id} unavailable: {e}") from e
