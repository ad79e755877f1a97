from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(ServiceError):
    def __init__(self, message: str = "Invalid or missing token") -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class ValidationError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    """A lookup missed. `entity` names what was looked up (subject, unit, resource, ...)."""

    def __init__(self, entity: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"{entity.replace('_', ' ').capitalize()} not found", status.HTTP_404_NOT_FOUND)
        self.entity = entity


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class GoneError(ServiceError):
    def __init__(self, message: str = "Resource has been deleted") -> None:
        super().__init__(message, status.HTTP_410_GONE)


class StorageError(ServiceError):
    """Object storage provider failed (upload, signing, removal)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
