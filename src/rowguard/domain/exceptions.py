"""Domain exceptions."""


class RowGuardError(Exception):
    """Base exception for rowguard."""

    pass


class PermissionDenied(RowGuardError):
    """User does not have permission for the requested action."""

    pass


class NotFound(RowGuardError):
    """Requested resource was not found."""

    pass


class ValidationError(RowGuardError):
    """Validation failed for input data."""

    pass


class QueryConfigurationError(RowGuardError):
    """Query handle lacks the alias or metadata needed for filtering."""

    pass


class MalformedRules(RowGuardError):
    """Raw rule data does not have the expected shape."""

    pass
