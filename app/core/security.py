"""
Utilidades para seguridad: contraseñas y JWT
"""
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from core.config import settings


# ==================== PASSWORD HASHING ====================

# bcrypt solo considera los primeros 72 bytes y rechaza entradas más largas
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """
    Hash password usando bcrypt.
    El costo se controla con BCRYPT_ROUNDS; la sal es única por contraseña.
    """
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verificar si una contraseña coincide con su hash.
    """
    if not hashed_password or password_too_long(plain_password):
        return False
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


# ==================== JWT TOKEN MANAGEMENT ====================

def create_access_token(user: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Crear un token JWT de acceso.

    Args:
        user: Identidad a incluir en el token ({id, email, role})
        expires_delta: Tiempo de expiración personalizado (opcional)

    Returns:
        str: Token JWT codificado
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "id": str(user["id"]),
        "email": user["email"],
        "role": user["role"],
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decodificar y validar un token JWT (firma y expiración).

    Returns:
        Dict con el payload del token o None si es inválido
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None
