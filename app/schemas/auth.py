"""
Schemas de autenticación y perfil propio.
"""
from pydantic import EmailStr, Field, validator
from typing import Optional, List
from schemas.base import APIModel, check_password_length


# ==================== AUTH SCHEMAS ====================

class UserRegister(APIModel):
    """Schema para registro de usuario"""
    email: EmailStr = Field(..., description="Email del usuario")
    password: str = Field(..., min_length=6, max_length=72, description="Contraseña (mínimo 6 caracteres)")
    first_name: str = Field(..., min_length=1, max_length=100, description="Nombre")
    last_name: str = Field(..., min_length=1, max_length=100, description="Apellido")
    phone: Optional[str] = Field(None, max_length=30)
    company: Optional[str] = Field(None, max_length=255)

    @validator('email')
    def normalize_email(cls, v):
        return v.strip().lower()

    _password_length = validator('password', allow_reuse=True)(check_password_length)

    @validator('first_name', 'last_name')
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('El campo no puede estar vacío')
        return v


class UserLogin(APIModel):
    """Schema para login de usuario"""
    email: str = Field(..., min_length=1, description="Email del usuario")
    password: str = Field(..., min_length=1, description="Contraseña")


# ==================== PERFIL ====================

class AddressIn(APIModel):
    """Dirección de despacho"""
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    state: Optional[str] = Field(None, max_length=120)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: str = Field("Chile", max_length=80)
    is_default: bool = False


class UserUpdateProfile(APIModel):
    """Actualizar perfil propio"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    company: Optional[str] = Field(None, max_length=255)
    addresses: Optional[List[AddressIn]] = None


class ChangePasswordRequest(APIModel):
    """Schema para cambio de contraseña"""
    current_password: str = Field(..., min_length=1, description="Contraseña actual")
    new_password: str = Field(..., min_length=6, max_length=72, description="Nueva contraseña")

    _password_length = validator('new_password', allow_reuse=True)(check_password_length)
