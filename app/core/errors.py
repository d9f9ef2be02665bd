"""Service-layer error taxonomy.

Services raise these; a single FastAPI exception handler renders them as
``{"error": <code>, "message": <text>, **details}`` with the class status code.
Detail keys are camelCased on the way out, matching the API schemas.
"""

from typing import Any

from pydantic.alias_generators import to_camel


class ServiceError(Exception):
    """Base for expected, user-facing failures of a service operation."""

    status_code = 500

    def __init__(self, code: str, message: str, **details: Any) -> None:
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Response body; detail keys are camelCased like the API schemas."""
        body = {to_camel(key): value for key, value in self.details.items()}
        return {"error": self.code, "message": self.message, **body}


class InvalidInputError(ServiceError):
    """Missing or malformed input."""

    status_code = 400


class PermissionDeniedError(ServiceError):
    """Quota, level, reputation or board requirement not met."""

    status_code = 403


class RateLimitedError(ServiceError):
    """Daily posting cap reached."""

    status_code = 429


class ConflictError(ServiceError):
    """Duplicate username/email or an invitation code that was already redeemed."""

    status_code = 409


class NotFoundError(ServiceError):
    """Unknown user, code, topic or comment."""

    status_code = 404


class DependencyError(ServiceError):
    """Datastore unavailable or failed unexpectedly; retryable by the client."""

    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable. Please retry.") -> None:
        super().__init__("SERVICE_UNAVAILABLE", message)
