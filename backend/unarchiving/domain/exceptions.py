"""Domain-specific exceptions, framework-independent."""


class DomainError(Exception):
    """Base class for every error raised by the unarchiving domain."""


class ValidationError(DomainError):
    """Raised when required input is missing or malformed."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class InvalidStatusError(DomainError):
    """Raised when a status token does not name one of the lifecycle states."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown record status: {value!r}")


class IllegalTransitionError(DomainError):
    """Raised when a status change is not an edge of the transition graph."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from {current} to {target}")


class InvalidStateError(DomainError):
    """Raised when an operation is not permitted in the current lifecycle state."""


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


NotFoundError = EntityNotFoundError


class DuplicateEntityError(DomainError):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class ReconstructionError(DomainError):
    """Raised when a persisted row cannot be turned back into a valid entity.

    Indicates corrupted or legacy storage that needs manual reconciliation;
    callers must not swallow it.
    """

    def __init__(self, row_id: object, reason: str):
        self.row_id = row_id
        self.reason = reason
        super().__init__(f"Cannot reconstruct record {row_id!r}: {reason}")


class PermissionDeniedError(DomainError):
    """Raised by use cases when an authorization rule denies the actor."""

    def __init__(self, action: str, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"Cannot {action}: {reason}")
