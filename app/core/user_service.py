"""
Operaciones sobre usuarios compartidas por /auth, /admin/users y los scripts.
"""
import logging
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.dates import isoformat
from core.dependencies import ROLE_USER
from core.errors import ConflictError, NotFoundError
from core.security import hash_password
from models.user import User
from models.addresses import UserAddress
from schemas.auth import AddressIn

logger = logging.getLogger(__name__)


def format_user(user: User) -> dict:
    """Datos públicos del usuario (nunca incluye la contraseña)."""
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phone": user.phone,
        "company": user.company,
        "role": user.role,
        "isActive": user.is_active,
        "isVerified": user.is_verified,
        "addresses": [
            {
                "id": address.id,
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "zipCode": address.zip_code,
                "country": address.country,
                "isDefault": address.is_default,
            }
            for address in user.addresses
        ],
        "createdAt": isoformat(user.created_at),
        "updatedAt": isoformat(user.updated_at),
    }


def token_identity(user: User) -> dict:
    return {"id": user.id, "email": user.email, "role": user.role}


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Usuario no encontrado", "USER_NOT_FOUND")
    return user


def create_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: Optional[str] = None,
    company: Optional[str] = None,
    role: str = ROLE_USER,
    is_verified: bool = False
) -> User:
    """Crear un usuario con la contraseña hasheada. Email duplicado -> 409."""
    email = email.strip().lower()
    if db.query(User.id).filter(User.email == email).first():
        raise ConflictError("El email ya está registrado", "EMAIL_ALREADY_EXISTS")

    user = User(
        email=email,
        hashed_password=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        company=company,
        role=role,
        is_active=True,
        is_verified=is_verified,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("El email ya está registrado", "EMAIL_ALREADY_EXISTS")
    db.refresh(user)

    logger.info(f"👤 Usuario creado: {user.email} ({user.role})")
    return user


def set_password(db: Session, user: User, password: str) -> None:
    user.hashed_password = hash_password(password)
    db.commit()


def replace_addresses(user: User, addresses: List[AddressIn]) -> None:
    """
    Reemplazar las direcciones del usuario.
    Solo la primera marcada como predeterminada conserva la marca.
    """
    default_taken = False
    new_addresses = []
    for address in addresses:
        is_default = address.is_default and not default_taken
        default_taken = default_taken or is_default
        new_addresses.append(UserAddress(
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country or "Chile",
            is_default=is_default,
        ))
    user.addresses = new_addresses
