"""
Tests de productos: CRUD, validaciones y listados públicos.
"""
import pytest


def create_category(client, headers, name, **extra):
    response = client.post("/categories", json={"name": name, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def create_product(client, headers, product_id, name, **extra):
    payload = {
        "productId": product_id,
        "name": name,
        "description": f"Descripción de {name}",
        **extra
    }
    response = client.post("/products", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def catalog(client, admin_headers):
    """Dos categorías con productos, uno inactivo y uno destacado"""
    tazas = create_category(client, admin_headers, "Tazas")
    termos = create_category(client, admin_headers, "Termos")
    create_product(client, admin_headers, "P-001", "Taza Blanca", category=tazas["id"], price=1000)
    create_product(client, admin_headers, "P-002", "Taza Negra", category=tazas["id"], price=3000, featured=True)
    create_product(client, admin_headers, "P-003", "Termo Acero", category=termos["id"], price=2000)
    create_product(client, admin_headers, "P-004", "Termo Oculto", category=termos["id"], isActive=False)
    return {"tazas": tazas, "termos": termos}


class TestCreateProduct:
    """Tests de creación de productos"""

    def test_crear_con_valores_por_defecto(self, client, admin_headers):
        product = create_product(client, admin_headers, "P-100", "Bolígrafo Metálico")
        assert product["slug"] == "boligrafo-metalico"
        assert product["currency"] == "CLP"
        assert product["image"] == "/placeholder-product.jpg"
        assert product["quantity"] == 0
        assert product["featured"] is False
        assert product["isActive"] is True
        assert product["category"] is None

    def test_moneda_en_mayusculas(self, client, admin_headers):
        product = create_product(client, admin_headers, "P-101", "Libreta", currency="usd")
        assert product["currency"] == "USD"

    def test_precio_oferta_mayor_o_igual_rechazado(self, client, admin_headers):
        """salePrice debe ser menor que price"""
        response = client.post("/products", json={
            "productId": "P-102",
            "name": "Mochila",
            "description": "Mochila corporativa",
            "price": 5000,
            "salePrice": 5000
        }, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SALE_PRICE"

    def test_precio_oferta_valido(self, client, admin_headers):
        product = create_product(client, admin_headers, "P-103", "Mochila", price=5000, salePrice=4500)
        assert product["price"] == 5000
        assert product["salePrice"] == 4500

    def test_product_id_duplicado(self, client, admin_headers):
        create_product(client, admin_headers, "P-104", "Gorro")
        response = client.post("/products", json={
            "productId": "P-104",
            "name": "Gorro Lana",
            "description": "Otro gorro"
        }, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_PRODUCT_ID"

    def test_slug_duplicado(self, client, admin_headers):
        create_product(client, admin_headers, "P-105", "Gorro Lana")
        response = client.post("/products", json={
            "productId": "P-106",
            "name": "Gorro  lana",
            "description": "Mismo slug"
        }, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_SLUG"

    def test_categoria_inexistente(self, client, admin_headers):
        response = client.post("/products", json={
            "productId": "P-107",
            "name": "Llavero",
            "description": "Llavero metálico",
            "category": 999
        }, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "CATEGORY_NOT_FOUND"

    def test_cantidad_negativa(self, client, admin_headers):
        response = client.post("/products", json={
            "productId": "P-108",
            "name": "Llavero",
            "description": "Llavero metálico",
            "quantity": -1
        }, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestUpdateDeleteProduct:
    """Tests de actualización y eliminación"""

    def test_cambio_de_nombre_recalcula_slug(self, client, admin_headers):
        product = create_product(client, admin_headers, "P-200", "Taza Roja")
        response = client.put(
            f"/products/{product['id']}",
            json={"name": "Taza Azul Marino"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["slug"] == "taza-azul-marino"

    def test_oferta_invalida_en_actualizacion(self, client, admin_headers):
        product = create_product(client, admin_headers, "P-201", "Polera", price=8000)
        response = client.put(
            f"/products/{product['id']}",
            json={"salePrice": 9000},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SALE_PRICE"

    def test_quitar_categoria(self, client, admin_headers):
        category = create_category(client, admin_headers, "Poleras")
        product = create_product(client, admin_headers, "P-202", "Polera Dry", category=category["id"])
        response = client.put(
            f"/products/{product['id']}",
            json={"category": None},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["category"] is None

    def test_actualizar_inexistente(self, client, admin_headers):
        response = client.put("/products/999", json={"name": "X"}, headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "PRODUCT_NOT_FOUND"

    def test_eliminar_producto(self, client, admin_headers):
        product = create_product(client, admin_headers, "P-203", "Chapita")
        response = client.delete(f"/products/{product['id']}", headers=admin_headers)
        assert response.status_code == 200

        response = client.get(f"/products/{product['id']}", headers=admin_headers)
        assert response.status_code == 404

    def test_eliminar_no_afecta_cotizaciones(self, client, admin_headers):
        """Las cotizaciones guardan una copia del producto"""
        product = create_product(client, admin_headers, "P-204", "Pendrive")
        quote = client.post("/quotes", json={
            "items": [{"productId": "P-204", "productName": "Pendrive", "quantity": 3}]
        }).json()["data"]

        client.delete(f"/products/{product['id']}", headers=admin_headers)

        response = client.get(f"/quotes/{quote['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["items"][0]["productName"] == "Pendrive"


class TestListProducts:
    """Tests del listado público"""

    def test_solo_activos_con_paginacion(self, client, catalog):
        response = client.get("/products")
        assert response.status_code == 200
        body = response.json()
        assert {p["productId"] for p in body["data"]} == {"P-001", "P-002", "P-003"}
        assert body["pagination"] == {"page": 1, "limit": 12, "total": 3, "totalPages": 1}

    def test_paginacion(self, client, catalog):
        body = client.get("/products", params={"limit": 2, "page": 2}).json()
        assert len(body["data"]) == 1
        assert body["pagination"]["totalPages"] == 2

    def test_limite_maximo(self, client):
        response = client.get("/products", params={"limit": 101})
        assert response.status_code == 400

    def test_filtro_categoria_ignora_desconocidas(self, client, catalog):
        """Un slug válido y uno inexistente: solo productos del válido"""
        body = client.get("/products", params={"category": "tazas,no-existe"}).json()
        assert {p["productId"] for p in body["data"]} == {"P-001", "P-002"}

    def test_filtro_categoria_por_id(self, client, catalog):
        category_id = catalog["termos"]["id"]
        body = client.get("/products", params={"category": str(category_id)}).json()
        assert [p["productId"] for p in body["data"]] == ["P-003"]

    def test_filtro_varias_categorias(self, client, catalog):
        body = client.get("/products", params={"category": "tazas,termos"}).json()
        assert body["pagination"]["total"] == 3

    def test_filtro_destacados(self, client, catalog):
        body = client.get("/products", params={"featured": "true"}).json()
        assert [p["productId"] for p in body["data"]] == ["P-002"]

    def test_busqueda_sin_mayusculas(self, client, catalog):
        body = client.get("/products", params={"search": "TAZA"}).json()
        assert body["pagination"]["total"] == 2

    def test_orden_por_precio(self, client, catalog):
        body = client.get("/products", params={"sort": "price", "order": "asc"}).json()
        assert [p["productId"] for p in body["data"]] == ["P-001", "P-003", "P-002"]

    def test_muestra_aleatoria(self, client, catalog):
        body = client.get("/products", params={"random": "true", "limit": 2}).json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 2, "totalPages": 1}

    def test_producto_incluye_resumen_de_categoria(self, client, catalog):
        body = client.get("/products", params={"search": "Termo Acero"}).json()
        category = body["data"][0]["category"]
        assert category["slug"] == "termos"
        assert set(category) >= {"id", "name", "slug", "description", "icon"}


class TestGetProduct:
    """Tests de detalle de producto"""

    def test_por_slug(self, client, catalog):
        response = client.get("/products/slug/taza-blanca")
        assert response.status_code == 200
        assert response.json()["data"]["productId"] == "P-001"

    def test_slug_inactivo_no_visible(self, client, catalog):
        response = client.get("/products/slug/termo-oculto")
        assert response.status_code == 404

    def test_inactivo_solo_para_admin(self, client, admin_headers, user_headers, catalog):
        hidden = client.get(
            "/admin/products", params={"search": "P-004"}, headers=admin_headers
        ).json()["data"][0]

        assert client.get(f"/products/{hidden['id']}").status_code == 404
        assert client.get(f"/products/{hidden['id']}", headers=user_headers).status_code == 404
        assert client.get(f"/products/{hidden['id']}", headers=admin_headers).status_code == 200
