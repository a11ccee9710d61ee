import logging
import traceback

from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base class for errors the API reports back to the client."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    headers: dict | None = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message, headers=self.headers)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class TokenError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class DeliveryError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY


class UserAlreadyExistsException(ValidationError):
    def __init__(self, field: str):
        super().__init__(f"User with this {field} already exists.")


def internal_error(where: str, e: Exception) -> HTTPException:
    """Log an unexpected failure and hide its details from the client."""
    logging.error(f"Internal Server Error in {where}: {e}\n{traceback.format_exc()}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                         detail="An unknown error occurred.")
