"""
Tests de autenticación: registro, login y perfil propio.
"""
from conftest import USER_EMAIL, USER_PASSWORD, login
from core.security import decode_token
from models.user import User


NEW_USER = {
    "email": "Maria.Soto@Empresa.cl",
    "password": "secreto123",
    "firstName": "María",
    "lastName": "Soto",
    "company": "Empresa SpA",
}


class TestRegister:
    """Tests de registro"""

    def test_registro_retorna_usuario_y_token(self, client):
        response = client.post("/auth/register", json=NEW_USER)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["email"] == "maria.soto@empresa.cl"
        assert data["user"]["role"] == "user"
        assert data["user"]["isVerified"] is False
        assert "password" not in data["user"]
        assert "hashedPassword" not in data["user"]

        payload = decode_token(data["token"])
        assert payload["id"] == str(data["user"]["id"])
        assert payload["role"] == "user"

    def test_email_duplicado(self, client):
        client.post("/auth/register", json=NEW_USER)
        response = client.post("/auth/register", json=dict(NEW_USER, email="maria.soto@empresa.cl"))
        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_ALREADY_EXISTS"

    def test_email_invalido(self, client):
        response = client.post("/auth/register", json=dict(NEW_USER, email="no-es-email"))
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_password_corta(self, client):
        response = client.post("/auth/register", json=dict(NEW_USER, password="123"))
        assert response.status_code == 400

    def test_password_mayor_a_72_bytes(self, client):
        """40 caracteres multibyte son 80 bytes: se rechaza con 400"""
        response = client.post("/auth/register", json=dict(NEW_USER, password="ñ" * 40))
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestLogin:
    """Tests de login"""

    def test_login_exitoso(self, client, normal_user):
        response = client.post("/auth/login", json={"email": "USER@test.com", "password": USER_PASSWORD})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == USER_EMAIL
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0

    def test_password_incorrecta(self, client, normal_user):
        response = client.post("/auth/login", json={"email": USER_EMAIL, "password": "incorrecta"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_usuario_inexistente(self, client):
        response = client.post("/auth/login", json={"email": "nadie@test.com", "password": "x"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_usuario_inactivo(self, client, db, normal_user):
        db.query(User).filter(User.id == normal_user.id).update({User.is_active: False})
        db.commit()

        response = client.post("/auth/login", json={"email": USER_EMAIL, "password": USER_PASSWORD})
        assert response.status_code == 401
        assert response.json()["code"] == "USER_INACTIVE"

    def test_password_larga_es_credencial_invalida(self, client, normal_user):
        response = client.post("/auth/login", json={"email": USER_EMAIL, "password": "a" * 100})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"


class TestProfile:
    """Tests del perfil propio"""

    def test_obtener_perfil(self, client, user_headers):
        response = client.get("/auth/me", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["data"]["email"] == USER_EMAIL

    def test_actualizar_perfil_y_direcciones(self, client, user_headers):
        response = client.put("/auth/me", json={
            "firstName": "Usuaria",
            "company": "Regalos Ltda",
            "addresses": [
                {"street": "Av. Providencia 123", "city": "Santiago", "isDefault": True},
                {"street": "Calle 2", "city": "Valparaíso", "isDefault": True},
            ]
        }, headers=user_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["firstName"] == "Usuaria"
        assert data["lastName"] == "Test"
        assert data["company"] == "Regalos Ltda"
        assert [a["isDefault"] for a in data["addresses"]] == [True, False]
        assert data["addresses"][0]["country"] == "Chile"

    def test_nombre_vacio_no_se_aplica(self, client, user_headers):
        response = client.put("/auth/me", json={"phone": "+56 9 1234 5678"}, headers=user_headers)
        data = response.json()["data"]
        assert data["firstName"] == "User"
        assert data["phone"] == "+56 9 1234 5678"

    def test_no_puede_cambiar_su_rol(self, client, user_headers):
        response = client.put("/auth/me", json={"role": "admin"}, headers=user_headers)
        assert response.json()["data"]["role"] == "user"


class TestChangePassword:
    """Tests de cambio de contraseña"""

    def test_cambio_exitoso(self, client, user_headers):
        response = client.put("/auth/password", json={
            "currentPassword": USER_PASSWORD,
            "newPassword": "NuevaClave456"
        }, headers=user_headers)
        assert response.status_code == 200
        assert login(client, USER_EMAIL, "NuevaClave456")

    def test_password_actual_incorrecta(self, client, user_headers):
        response = client.put("/auth/password", json={
            "currentPassword": "incorrecta",
            "newPassword": "NuevaClave456"
        }, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PASSWORD"

    def test_nueva_password_mayor_a_72_bytes(self, client, user_headers):
        response = client.put("/auth/password", json={
            "currentPassword": USER_PASSWORD,
            "newPassword": "ñ" * 40
        }, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
