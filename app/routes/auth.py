"""
Endpoints de autenticación: registro, login y perfil propio.

Los tokens se envían como 'Authorization: Bearer <token>' y contienen
{id, email, role}.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db
from core.dependencies import CurrentUser, get_current_user
from core.errors import UnauthenticatedError, ValidationError
from core.security import verify_password, create_access_token
from core.user_service import (
    format_user,
    token_identity,
    get_user_or_404,
    create_user,
    set_password,
    replace_addresses
)
from models.user import User
from schemas.auth import UserRegister, UserLogin, UserUpdateProfile, ChangePasswordRequest

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


# ==================== REGISTRO ====================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """
    Registrar un nuevo usuario (rol "user").

    Retorna el usuario y un token de acceso.
    """
    user = create_user(
        db,
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone,
        company=user_data.company
    )

    return {
        "success": True,
        "status_code": 201,
        "message": "Usuario registrado exitosamente",
        "data": {
            "user": format_user(user),
            "token": create_access_token(token_identity(user))
        }
    }


# ==================== LOGIN ====================

@router.post("/login")
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Iniciar sesión con email y contraseña.
    """
    user = db.query(User).filter(User.email == credentials.email.strip().lower()).first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise UnauthenticatedError("Credenciales inválidas", "INVALID_CREDENTIALS")

    if not user.is_active:
        raise UnauthenticatedError("La cuenta está desactivada", "USER_INACTIVE")

    return {
        "success": True,
        "status_code": 200,
        "message": "Login exitoso",
        "data": {
            "user": format_user(user),
            "token": create_access_token(token_identity(user)),
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        }
    }


# ==================== PERFIL DE USUARIO ====================

@router.get("/me")
async def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Obtener información del usuario autenticado.
    """
    user = get_user_or_404(db, current_user.id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Usuario obtenido exitosamente",
        "data": format_user(user)
    }


@router.put("/me")
async def update_me(
    profile_data: UserUpdateProfile,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Actualizar nombre, apellido, teléfono, empresa y direcciones.
    """
    user = get_user_or_404(db, current_user.id)
    changes = profile_data.model_dump(exclude_unset=True, exclude={"addresses"})

    for field in ("first_name", "last_name"):
        if field in changes and not changes[field]:
            changes.pop(field)

    for field, value in changes.items():
        setattr(user, field, value)

    if profile_data.addresses is not None:
        replace_addresses(user, profile_data.addresses)

    db.commit()
    db.refresh(user)

    return {
        "success": True,
        "status_code": 200,
        "message": "Perfil actualizado exitosamente",
        "data": format_user(user)
    }


@router.put("/password")
async def change_password(
    password_data: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Cambiar la contraseña propia. Requiere la contraseña actual.
    """
    user = get_user_or_404(db, current_user.id)

    if not verify_password(password_data.current_password, user.hashed_password):
        raise ValidationError("La contraseña actual es incorrecta", "INVALID_PASSWORD")

    set_password(db, user, password_data.new_password)

    return {
        "success": True,
        "status_code": 200,
        "message": "Contraseña actualizada exitosamente"
    }
