class ServiceError(Exception):
    """Base exception for service errors"""


class NotFoundError(ServiceError):
    """Raised when a requested record does not exist"""


class ConflictError(ServiceError):
    """Raised when a write would violate a uniqueness constraint"""


class DatabaseError(ServiceError):
    """Raised when a database query fails"""


class ChatServiceError(ServiceError):
    """Raised when the chat completion call fails"""
