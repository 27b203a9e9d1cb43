"""
Tests del panel de administración: dashboard y gestión de usuarios.
"""
from conftest import login


NEW_USER = {
    "email": "vendedor@empresa.cl",
    "password": "Vendedor123",
    "firstName": "Pedro",
    "lastName": "Rojas",
}


class TestDashboard:
    """Tests del resumen del panel"""

    def test_conteos(self, client, admin_headers, normal_user):
        client.post("/products", json={
            "productId": "P-1", "name": "Taza", "description": "Taza", "quantity": 0,
            "featured": True
        }, headers=admin_headers)
        client.post("/products", json={
            "productId": "P-2", "name": "Termo", "description": "Termo", "quantity": 5,
            "isActive": False
        }, headers=admin_headers)
        client.post("/quotes", json={
            "items": [{"productId": "P-1", "productName": "Taza", "quantity": 2}]
        })

        response = client.get("/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["products"] == {"total": 2, "active": 1, "featured": 1, "outOfStock": 1}
        assert data["users"]["total"] == 2
        assert data["quotes"]["total"] == 1
        assert data["quotes"]["pending"] == 1
        assert len(data["quotes"]["recent"]) == 1


class TestAdminUsers:
    """Tests de gestión de usuarios"""

    def test_crear_usuario_verificado(self, client, admin_headers):
        response = client.post("/admin/users", json=NEW_USER, headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["isVerified"] is True
        assert data["role"] == "user"
        assert login(client, NEW_USER["email"], NEW_USER["password"])

    def test_crear_administrador(self, client, admin_headers):
        response = client.post("/admin/users", json=dict(NEW_USER, role="admin"), headers=admin_headers)
        assert response.json()["data"]["role"] == "admin"

    def test_rol_invalido(self, client, admin_headers):
        response = client.post("/admin/users", json=dict(NEW_USER, role="superadmin"), headers=admin_headers)
        assert response.status_code == 400

    def test_email_duplicado(self, client, admin_headers, normal_user):
        response = client.post(
            "/admin/users", json=dict(NEW_USER, email="user@test.com"), headers=admin_headers
        )
        assert response.status_code == 409

    def test_listado_con_filtros(self, client, admin_headers, normal_user):
        body = client.get("/admin/users", params={"role": "admin"}, headers=admin_headers).json()
        assert [u["email"] for u in body["data"]] == ["admin@test.com"]

        body = client.get("/admin/users", params={"search": "USER@"}, headers=admin_headers).json()
        assert body["pagination"]["total"] == 1

    def test_actualizar_y_desactivar(self, client, admin_headers, normal_user):
        response = client.put(
            f"/admin/users/{normal_user.id}",
            json={"company": "Nueva SpA", "isActive": False, "firstName": None},
            headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["company"] == "Nueva SpA"
        assert data["isActive"] is False
        assert data["firstName"] == "User"

        response = client.post("/auth/login", json={"email": "user@test.com", "password": "User123"})
        assert response.status_code == 401

    def test_resetear_password(self, client, admin_headers, normal_user):
        response = client.put(
            f"/admin/users/{normal_user.id}/password",
            json={"password": "Reseteada99"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert login(client, "user@test.com", "Reseteada99")

    def test_usuario_inexistente(self, client, admin_headers):
        response = client.get("/admin/users/999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_eliminar_usuario(self, client, admin_headers, normal_user):
        response = client.delete(f"/admin/users/{normal_user.id}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"/admin/users/{normal_user.id}", headers=admin_headers).status_code == 404

    def test_no_puede_eliminarse_a_si_mismo(self, client, admin_headers, admin_user):
        response = client.delete(f"/admin/users/{admin_user.id}", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "CANNOT_DELETE_SELF"


class TestAdminProducts:
    """Tests del listado de productos de administración"""

    def test_incluye_inactivos_y_filtra(self, client, admin_headers):
        client.post("/products", json={
            "productId": "P-1", "name": "Taza", "description": "Taza"
        }, headers=admin_headers)
        client.post("/products", json={
            "productId": "P-2", "name": "Termo", "description": "Termo", "isActive": False
        }, headers=admin_headers)

        body = client.get("/admin/products", headers=admin_headers).json()
        assert body["pagination"]["total"] == 2

        body = client.get("/admin/products", params={"isActive": "false"}, headers=admin_headers).json()
        assert [p["productId"] for p in body["data"]] == ["P-2"]
