"""Builds the git-credentials line stored in credential secrets."""
import base64
from typing import Optional, Tuple
from urllib.parse import quote, urlsplit

from .errors import MalformedUrlError
from .models import CredentialRecord
from .schema import OAUTH_2_PREFIX

DEFAULT_HTTP_PORT = 80
SUPPORTED_SCHEMES = ("http", "https")


def parse_provider_url(url: str) -> Tuple[str, str, Optional[int]]:
    """
    Split an SCM provider URL into protocol, host and explicit port.

    Args:
        url: Provider URL, e.g. https://github.com/

    Returns:
        (protocol, host, port) where port is None if the URL has none

    Raises:
        MalformedUrlError: If the URL is not http(s), has no host, or has a bad port
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except (ValueError, TypeError, AttributeError) as e:
        raise MalformedUrlError(f"Malformed SCM provider URL '{url}': {e}") from e

    if not parts.scheme or not parts.netloc:
        raise MalformedUrlError(f"Malformed SCM provider URL '{url}': scheme and host are required")

    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise MalformedUrlError(f"Malformed SCM provider URL '{url}': unsupported protocol '{parts.scheme}'")

    # Keep the host as written; urlsplit().hostname lowercases it
    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        host = host[:host.find("]") + 1]
    else:
        host = host.partition(":")[0]

    if not host:
        raise MalformedUrlError(f"Malformed SCM provider URL '{url}': empty host")

    return parts.scheme, host, port


def username_segment(record: CredentialRecord) -> str:
    """
    Return the username part of the credentials URL.

    OAuth2 tokens always use "oauth2". Providers whose user object carries an
    organization instead of a username get the literal "username".
    """
    if record.scm_token_name.startswith(OAUTH_2_PREFIX):
        return "oauth2"
    if not record.scm_organization:
        return record.scm_user_name or ""
    return "username"


def encode(record: CredentialRecord) -> bytes:
    """
    Compose the git-credentials line for a personal access token.

    Args:
        record: Credential to encode

    Returns:
        UTF-8 bytes of "<protocol>://<user>:<token>@<host>[:<port>]"

    Raises:
        MalformedUrlError: If the provider URL cannot be parsed
    """
    protocol, host, port = parse_provider_url(record.scm_provider_url)
    port_segment = f":{port}" if port is not None and port != DEFAULT_HTTP_PORT else ""
    line = (
        f"{protocol}://{username_segment(record)}:{quote(record.token, safe='')}"
        f"@{host}{port_segment}"
    )
    return line.encode("utf-8")


def encode_data_value(value: bytes) -> str:
    """Base64-encode bytes for a secret data entry."""
    return base64.b64encode(value).decode("ascii")
