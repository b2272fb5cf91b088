"""Finds an existing credential secret that can be reused for a token."""
import logging
from typing import Iterable, Optional

from .models import CredentialRecord, ManagedSecret
from .schema import ANNOTATION_CHE_USERID, ANNOTATION_GIT_CREDENTIALS, ANNOTATION_SCM_URL

logger = logging.getLogger(__name__)


def normalize_url(url: Optional[str]) -> Optional[str]:
    """Strip trailing slashes from a provider URL."""
    if url is None:
        return None
    return url.rstrip("/")


def is_match(secret: ManagedSecret, record: CredentialRecord) -> bool:
    annotations = secret.annotations or {}
    if (annotations.get(ANNOTATION_GIT_CREDENTIALS) or "").lower() != "true":
        return False
    if normalize_url(annotations.get(ANNOTATION_SCM_URL)) != normalize_url(record.scm_provider_url):
        return False
    return annotations.get(ANNOTATION_CHE_USERID) == record.che_user_id


def find_reusable(candidates: Iterable[ManagedSecret], record: CredentialRecord) -> Optional[ManagedSecret]:
    """
    Return the first candidate holding credentials for the same provider and user.

    Args:
        candidates: Secrets already selected by the search labels
        record: Credential being saved

    Returns:
        Matching secret, or None if a new one has to be created
    """
    for secret in candidates:
        if is_match(secret, record):
            logger.debug(f"Reusing secret {secret.name} for {record.scm_provider_url}")
            return secret
    logger.debug(f"No reusable secret for {record.scm_provider_url} and user {record.che_user_id}")
    return None
