"""Label and annotation keys carried by managed workspace secrets.

These keys are read by the mount-injection controller and must not change.
"""
from typing import Dict

CHE_PREFIX = "che.eclipse.org"
DEV_WORKSPACE_PREFIX = "controller.devfile.io"

# Credential secrets
NAME_PATTERN = "git-credentials-secret-"
NAME_SUFFIX_LENGTH = 5
CREDENTIALS_DATA_KEY = "credentials"
CREDENTIALS_MOUNT_PATH = "/.git-credentials"
OAUTH_2_PREFIX = "oauth2-"

ANNOTATION_SCM_URL = f"{CHE_PREFIX}/scm-url"
ANNOTATION_SCM_USERNAME = f"{CHE_PREFIX}/scm-username"
ANNOTATION_CHE_USERID = f"{CHE_PREFIX}/che-userid"
ANNOTATION_AUTOMOUNT = f"{CHE_PREFIX}/automount-workspace-secret"
ANNOTATION_MOUNT_PATH = f"{CHE_PREFIX}/mount-path"
ANNOTATION_MOUNT_AS = f"{CHE_PREFIX}/mount-as"
ANNOTATION_GIT_CREDENTIALS = f"{CHE_PREFIX}/git-credential"
ANNOTATION_DEV_WORKSPACE_MOUNT_PATH = f"{DEV_WORKSPACE_PREFIX}/mount-path"
ANNOTATION_DEV_WORKSPACE_MOUNT_AS = f"{DEV_WORKSPACE_PREFIX}/mount-as"

LABEL_DEV_WORKSPACE_CREDENTIAL = f"{DEV_WORKSPACE_PREFIX}/git-credential"
LABEL_DEV_WORKSPACE_WATCH_SECRET = f"{DEV_WORKSPACE_PREFIX}/watch-secret"
LABEL_DEV_WORKSPACE_MOUNT = f"{DEV_WORKSPACE_PREFIX}/mount-to-devworkspace"

# Used to look up existing secrets before matching on annotations
SEARCH_LABELS: Dict[str, str] = {
    "app.kubernetes.io/part-of": CHE_PREFIX,
    "app.kubernetes.io/component": "workspace-secret",
}

# Only set when we create the secret ourselves
NEW_SECRET_LABELS: Dict[str, str] = {
    **SEARCH_LABELS,
    LABEL_DEV_WORKSPACE_CREDENTIAL: "true",
    LABEL_DEV_WORKSPACE_WATCH_SECRET: "true",
}

DEFAULT_SECRET_ANNOTATIONS: Dict[str, str] = {
    ANNOTATION_AUTOMOUNT: "true",
    ANNOTATION_MOUNT_PATH: CREDENTIALS_MOUNT_PATH,
    ANNOTATION_MOUNT_AS: "file",
    ANNOTATION_GIT_CREDENTIALS: "true",
    ANNOTATION_DEV_WORKSPACE_MOUNT_PATH: CREDENTIALS_MOUNT_PATH,
}

# User information secrets
USER_PROFILE_SECRET_NAME = "user-profile"
USER_PREFERENCES_SECRET_NAME = "user-preferences"
USER_PROFILE_MOUNT_PATH = "/config/user/profile"
USER_PREFERENCES_MOUNT_PATH = "/config/user/preferences"


def label_selector(labels: Dict[str, str]) -> str:
    """Render labels as a Kubernetes equality-based selector."""
    return ",".join(f"{key}={value}" for key, value in labels.items())


def user_info_labels() -> Dict[str, str]:
    return {LABEL_DEV_WORKSPACE_MOUNT: "true"}


def user_info_annotations(mount_path: str) -> Dict[str, str]:
    return {
        ANNOTATION_DEV_WORKSPACE_MOUNT_AS: "file",
        ANNOTATION_DEV_WORKSPACE_MOUNT_PATH: mount_path,
    }
