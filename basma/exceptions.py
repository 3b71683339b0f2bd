"""
Exception hierarchy shared by services and blueprints.

Services raise these; the application registers one JSON error handler per
type so every endpoint maps them to the same status code.

Usage:
    from basma.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Post", resource_id=42)
    raise ValidationError("Title is required", details={"title": "required"})
"""


class BasmaError(Exception):
    """Base class for errors scoped to a single operation."""
    status_code = 400


class ValidationError(BasmaError):
    """Input is malformed or violates a business rule (empty field, bad tier, missing committee tag).

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names.
    """
    status_code = 422

    def __init__(self, message, details=None):
        self.details = details or {}
        super().__init__(message)


class PermissionDeniedError(BasmaError):
    """The actor lacks the role or ownership required for a mutation."""
    status_code = 403

    def __init__(self, message='You do not have permission to perform this action.'):
        super().__init__(message)


class NotFoundError(BasmaError):
    """The referenced item does not exist, or is not visible to the actor.

    Args:
        resource: Entity name (e.g. "Post", "Meeting").
        resource_id: The id that was looked up.
    """
    status_code = 404

    def __init__(self, resource, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class AuthenticationError(BasmaError):
    """Sign-in failed: unknown account, wrong password or banned member."""
    status_code = 401


class BackendUnavailableError(BasmaError):
    """The database could not be reached. The caller may re-submit; nothing is retried here."""
    status_code = 503

    def __init__(self, message='The service is temporarily unavailable. Please try again.'):
        super().__init__(message)
