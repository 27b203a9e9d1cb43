"""
Errores de la API con el formato estándar de respuesta.

Cada error es un HTTPException cuyo `detail` ya es el sobre JSON
{success, status_code, error, code}. El manejador registrado en main.py
lo devuelve tal cual.
"""
from typing import Optional, Dict
from fastapi import HTTPException, status


class APIError(HTTPException):
    """Base de la taxonomía de errores."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        **extra
    ):
        detail = {
            "success": False,
            "status_code": self.status_code,
            "error": message,
            "code": code or self.default_code,
        }
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)
        self.message = message


class ValidationError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class UnauthenticatedError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "AUTHENTICATION_REQUIRED"

    def __init__(self, message: str, code: Optional[str] = None, **extra):
        super().__init__(message, code, headers={"WWW-Authenticate": "Bearer"}, **extra)


class ForbiddenError(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictError(APIError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class ServiceUnavailableError(APIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "SERVICE_UNAVAILABLE"
