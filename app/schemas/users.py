"""
Schemas de administración de usuarios.
"""
from pydantic import EmailStr, Field, validator
from typing import Optional, Literal
from schemas.base import APIModel, check_password_length


class UserAdminCreate(APIModel):
    """Crear usuario o administrador desde el panel"""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    company: Optional[str] = Field(None, max_length=255)
    role: Literal["admin", "user"] = "user"

    @validator('email')
    def normalize_email(cls, v):
        return v.strip().lower()

    _password_length = validator('password', allow_reuse=True)(check_password_length)


class UserAdminUpdate(APIModel):
    """Actualizar usuario (admin)"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    company: Optional[str] = Field(None, max_length=255)
    role: Optional[Literal["admin", "user"]] = None
    is_active: Optional[bool] = None


class UserPasswordReset(APIModel):
    """Resetear contraseña de un usuario (admin)"""
    password: str = Field(..., min_length=6, max_length=72)

    _password_length = validator('password', allow_reuse=True)(check_password_length)
