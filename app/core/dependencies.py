"""
Dependencias de autenticación para FastAPI.

El token Bearer se valida en cada request y produce una identidad
inmutable (CurrentUser) que se pasa explícitamente a los handlers.

Uso:
    @router.post("/products")
    async def create(current_user: CurrentUser = Depends(get_current_admin_user)):
        ...
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from core.security import decode_token
from core.errors import UnauthenticatedError, ForbiddenError


ROLE_ADMIN = "admin"
ROLE_USER = "user"


@dataclass(frozen=True)
class CurrentUser:
    """Identidad extraída del token: {id, email, role}"""
    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# auto_error=False: los errores se emiten con el formato estándar de la API
security = HTTPBearer(auto_error=False)


def _identity_from_token(token: str) -> Optional[CurrentUser]:
    payload = decode_token(token)
    if not payload:
        return None

    try:
        user_id = int(payload.get("id"))
    except (TypeError, ValueError):
        return None

    email = payload.get("email")
    role = payload.get("role")
    if not email or not role:
        return None

    return CurrentUser(id=user_id, email=email, role=role)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """
    Obtener la identidad del usuario desde el header 'Authorization: Bearer <token>'.
    """
    if not credentials or not credentials.credentials:
        raise UnauthenticatedError(
            "Acceso denegado. Token de autenticación requerido.",
            "AUTHENTICATION_REQUIRED"
        )

    identity = _identity_from_token(credentials.credentials)
    if identity is None:
        raise UnauthenticatedError("Token inválido o expirado", "INVALID_TOKEN")

    return identity


def require_roles(*roles: str):
    """
    Construir una dependencia que exige uno de los roles indicados.
    Se ejecuta siempre después de get_current_user.
    """
    async def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise ForbiddenError(
                "Acceso denegado. Permisos insuficientes.",
                "FORBIDDEN"
            )
        return current_user

    return checker


get_current_admin_user = require_roles(ROLE_ADMIN)


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[CurrentUser]:
    """
    Obtener la identidad si hay un token válido, sino retornar None.
    Útil para endpoints públicos que muestran más datos a administradores.
    """
    if not credentials or not credentials.credentials:
        return None
    return _identity_from_token(credentials.credentials)
