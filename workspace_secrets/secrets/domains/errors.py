"""Exceptions raised by workspace secret operations."""


class WorkspaceSecretsError(Exception):
    """Base class for workspace secret errors."""
    pass


class UnsatisfiedPreconditionError(WorkspaceSecretsError):
    """No namespace exists yet for the acting user."""
    pass


class PersistenceError(WorkspaceSecretsError):
    """Credential secret could not be built or written."""
    pass


class MalformedUrlError(WorkspaceSecretsError, ValueError):
    """SCM provider URL cannot be parsed."""
    pass


class InfrastructureError(WorkspaceSecretsError):
    """Failure reported by the object store or the namespace resolver."""
    pass


class NotFoundError(WorkspaceSecretsError):
    pass


class ServerError(WorkspaceSecretsError):
    pass


class AuxiliaryDataUnavailableError(WorkspaceSecretsError):
    """User or preference data needed for profile secrets is unavailable."""
    pass
