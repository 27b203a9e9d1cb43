"""
Base de los schemas: la API expone y recibe campos en camelCase
(productId, salePrice, isActive...) y también acepta snake_case.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from core.security import MAX_PASSWORD_BYTES, password_too_long


class APIModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


def check_password_length(cls, v: str) -> str:
    """Rechazar contraseñas que bcrypt no puede procesar (más de 72 bytes)."""
    if password_too_long(v):
        raise ValueError(f'La contraseña no puede superar {MAX_PASSWORD_BYTES} bytes')
    return v
