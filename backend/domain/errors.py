"""
Domain error taxonomy.

Repositories and services raise these; the API layer maps each one to an HTTP
status and a JSON body with a human-readable ``message``.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class FieldError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class CatalogError(Exception):
    """Base class for errors that are safe to show to API clients."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[FieldError]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, [FieldError(field, message)])

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = [e.to_dict() for e in self.errors]
        return body


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Not found"


class ConflictError(CatalogError):
    status_code = 409
    default_message = "Conflict"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class InUseError(CatalogError):
    """Deletion blocked because other rows still reference the entity."""

    status_code = 409
    default_message = "Resource is still in use"


class UnauthorizedError(CatalogError):
    status_code = 401
    default_message = "Not authenticated"


class ForbiddenError(CatalogError):
    status_code = 403
    default_message = "Access denied"


class LastAdminError(CatalogError):
    status_code = 400
    default_message = "Cannot remove the last administrator"


class SelfDeleteError(CatalogError):
    status_code = 400
    default_message = "Cannot delete your own account"


class InternalError(CatalogError):
    status_code = 500
    default_message = "Internal server error"
