"""
Custom Exception Hierarchy
Domain and application-level exceptions
"""


class DomainException(Exception):
    """Base exception for all domain errors"""
    pass


class AuthorizationException(DomainException):
    """Caller not authorized for this operation"""
    pass


class ValidationException(DomainException):
    """Data validation failed"""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class RepositoryException(DomainException):
    """Database operation failed"""
    pass


class ResourceNotFoundException(DomainException):
    """Requested resource not found"""

    def __init__(self, resource_type: str, identifier: str):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} not found: {identifier}")


class DuplicateResourceException(DomainException):
    """Resource already exists"""

    def __init__(self, resource_type: str, field: str, value: str):
        self.resource_type = resource_type
        self.field = field
        self.value = value
        super().__init__(f"{resource_type} with {field}='{value}' already exists")


class CollaboratorUnavailableException(DomainException):
    """External collaborator (discovery, AI, email) failed or timed out"""

    def __init__(self, collaborator: str, message: str, retryable: bool = False):
        self.collaborator = collaborator
        self.message = message
        self.retryable = retryable
        super().__init__(f"{collaborator} unavailable: {message}")


class InvalidStatusTransitionException(DomainException):
    """Posting status change not allowed by the lifecycle"""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move posting from '{current}' to '{target}'")
