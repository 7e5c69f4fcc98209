"""Domain exceptions, mapped to JSON error responses at the HTTP boundary."""


class AppError(Exception):
    """Base class for errors that carry an HTTP status code."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400


class ConflictError(AppError):
    """A uniqueness constraint would be violated."""

    status_code = 400


class DuplicateAttributeError(ConflictError):
    def __init__(self, event_id: str, name: str):
        self.event_id = event_id
        self.name = name
        super().__init__(f"An attribute named '{name}' already exists for this event")


class DuplicateAssociationError(ConflictError):
    def __init__(self, event_id: str, provider_id: str):
        self.event_id = event_id
        self.provider_id = provider_id
        super().__init__("The provider is already associated with this event")


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class AuthorizationError(AppError):
    """Authenticated, but not allowed to perform the action."""

    status_code = 403


class NotFoundError(AppError):
    """Raised when a requested entity does not exist."""

    status_code = 404

    def __init__(self, entity_type: str, entity_id: str | None = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found")
