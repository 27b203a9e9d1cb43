"""
Crear un usuario administrador, o promover a admin uno existente.

Uso (desde app/):
    python -m scripts.create_admin --email admin@suvenirs.cl --password admin123
"""
import argparse
import sys

from core.database import SessionLocal
from core.dependencies import ROLE_ADMIN
from core.errors import APIError
from core.user_service import create_user
from models.user import User


def create_admin(email: str, password: str, first_name: str, last_name: str) -> int:
    db = SessionLocal()

    try:
        existing = db.query(User).filter(User.email == email.strip().lower()).first()
        if existing:
            if existing.role == ROLE_ADMIN:
                print("⚠️  El usuario ya es administrador")
            else:
                existing.role = ROLE_ADMIN
                existing.is_active = True
                existing.is_verified = True
                db.commit()
                print("✅ Usuario promovido a administrador")
            print(f"   Email: {existing.email}")
            print(f"   Rol: {existing.role}")
            return 0

        admin = create_user(
            db,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=ROLE_ADMIN,
            is_verified=True
        )
        print("✅ Administrador creado exitosamente")
        print(f"   Email: {admin.email}")
        print(f"   Rol: {admin.role}")
        print("\n⚠️  Cambia la contraseña después del primer inicio de sesión!")
        return 0

    except APIError as e:
        print(f"❌ Error: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Crear o promover un administrador")
    parser.add_argument("--email", default="admin@suvenirs.cl")
    parser.add_argument("--password", default="admin123")
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="Suvenirs")
    args = parser.parse_args()

    if len(args.password) < 6:
        print("❌ La contraseña debe tener al menos 6 caracteres")
        sys.exit(1)

    sys.exit(create_admin(args.email, args.password, args.first_name, args.last_name))
