"""Service-layer exceptions for BrewLog."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class ServiceError(Exception):
    """Base exception for BrewLog services."""

    pass


class FieldValidationError(ServiceError):
    """Raised when request input is malformed or out of range."""

    def __init__(self, errors: list[FieldError], message: str = "One or more validation errors occurred"):
        super().__init__(message)
        self.errors = errors


class BusinessValidationError(ServiceError):
    """Raised when input breaks a business rule."""

    pass


class NotFoundError(ServiceError):
    """Raised when an entity id does not exist."""

    def __init__(self, entity_name: str, entity_id: int):
        super().__init__(f"{entity_name} with ID {entity_id} was not found.")
        self.entity_name = entity_name
        self.entity_id = entity_id


class ReferentialIntegrityError(ServiceError):
    """Raised when a delete is blocked by brew sessions that still reference the row."""

    pass
