"""
Fixtures compartidas: base SQLite en memoria recreada en cada test,
cliente HTTP y tokens de administrador y usuario normal.
"""
import os
import sys

# Configuración de pruebas (antes de importar core.config)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PEXELS_API_KEY"] = ""
os.environ["ENV"] = "test"

# Agregar app al path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'app'))

import pytest
from fastapi.testclient import TestClient

from main import app
from core.database import Base, engine, SessionLocal
from core.dependencies import ROLE_ADMIN
from core.user_service import create_user
import models  # noqa: F401

ADMIN_EMAIL = "admin@test.com"
ADMIN_PASSWORD = "Admin123"
USER_EMAIL = "user@test.com"
USER_PASSWORD = "User123"


@pytest.fixture(autouse=True)
def setup_database():
    """Esquema limpio para cada test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """Fixture para base de datos de prueba"""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    """Fixture para cliente HTTP"""
    with TestClient(app) as test_client:
        yield test_client


def login(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


@pytest.fixture
def admin_user(db):
    return create_user(
        db,
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        first_name="Admin",
        last_name="Test",
        role=ROLE_ADMIN,
        is_verified=True
    )


@pytest.fixture
def normal_user(db):
    return create_user(
        db,
        email=USER_EMAIL,
        password=USER_PASSWORD,
        first_name="User",
        last_name="Test"
    )


@pytest.fixture
def admin_token(client, admin_user):
    """Crear admin de prueba y retornar token"""
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def user_token(client, normal_user):
    """Crear usuario normal de prueba y retornar token"""
    return login(client, USER_EMAIL, USER_PASSWORD)


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def user_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}
