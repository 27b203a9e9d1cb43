"""
Tests del blog: borradores, publicación, tags y visitas.
"""
from core.blog_service import normalize_tags


POST = {
    "title": "Regalos Corporativos para Fin de Año",
    "excerpt": "Ideas para sorprender a tu equipo",
    "content": "Contenido del post sobre tazas y termos personalizados.",
    "tags": [" Regalos ", "empresas", "REGALOS", ""],
}


def create_post(client, headers, **extra):
    response = client.post("/blog", json={**POST, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestNormalizeTags:
    """Tests unitarios de normalización de tags"""

    def test_recorta_minusculas_y_sin_duplicados(self):
        assert normalize_tags([" Regalos ", "empresas", "REGALOS", "", None]) == ["regalos", "empresas"]

    def test_sin_tags(self):
        assert normalize_tags(None) == []


class TestCreatePost:
    """Tests de creación de posts"""

    def test_autor_es_el_usuario_autenticado(self, client, admin_headers, admin_user):
        post = create_post(client, admin_headers)
        assert post["author"] == {
            "id": admin_user.id,
            "firstName": "Admin",
            "lastName": "Test",
            "email": "admin@test.com",
        }
        assert post["slug"] == "regalos-corporativos-para-fin-de-ano"
        assert post["tags"] == ["regalos", "empresas"]
        assert post["views"] == 0

    def test_borrador_sin_fecha_de_publicacion(self, client, admin_headers):
        post = create_post(client, admin_headers)
        assert post["isPublished"] is False
        assert post["publishedAt"] is None

    def test_publicado_al_crear(self, client, admin_headers):
        post = create_post(client, admin_headers, isPublished=True)
        assert post["isPublished"] is True
        assert post["publishedAt"] is not None

    def test_titulo_duplicado(self, client, admin_headers):
        create_post(client, admin_headers)
        response = client.post("/blog", json=POST, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_SLUG"

    def test_solo_admin(self, client, user_headers):
        assert client.post("/blog", json=POST).status_code == 401
        assert client.post("/blog", json=POST, headers=user_headers).status_code == 403

    def test_campos_obligatorios(self, client, admin_headers):
        response = client.post("/blog", json={"title": "Sin contenido"}, headers=admin_headers)
        assert response.status_code == 400


class TestPublishing:
    """Tests de publicación y fecha de primera publicación"""

    def test_alternar_conserva_fecha(self, client, admin_headers):
        post = create_post(client, admin_headers)

        published = client.patch(f"/blog/{post['id']}/publish", headers=admin_headers).json()["data"]
        assert published["isPublished"] is True
        first_published_at = published["publishedAt"]
        assert first_published_at is not None

        draft = client.patch(f"/blog/{post['id']}/publish", headers=admin_headers).json()["data"]
        assert draft["isPublished"] is False
        assert draft["publishedAt"] == first_published_at

        again = client.patch(f"/blog/{post['id']}/publish", headers=admin_headers).json()["data"]
        assert again["publishedAt"] == first_published_at

    def test_publicar_por_actualizacion(self, client, admin_headers):
        post = create_post(client, admin_headers)
        response = client.put(
            f"/blog/{post['id']}",
            json={"isPublished": True, "tags": ["Navidad"]},
            headers=admin_headers
        )
        data = response.json()["data"]
        assert data["publishedAt"] is not None
        assert data["tags"] == ["navidad"]

    def test_cambio_de_titulo_recalcula_slug(self, client, admin_headers):
        post = create_post(client, admin_headers)
        response = client.put(
            f"/blog/{post['id']}", json={"title": "Ideas de Navidad"}, headers=admin_headers
        )
        assert response.json()["data"]["slug"] == "ideas-de-navidad"


class TestPublicBlog:
    """Tests de lectura pública"""

    def test_borradores_ocultos(self, client, admin_headers):
        draft = create_post(client, admin_headers)

        assert client.get("/blog").json()["data"] == []
        assert client.get(f"/blog/slug/{draft['slug']}").status_code == 404
        assert client.get(f"/blog/{draft['id']}").status_code == 404
        assert client.get(f"/blog/admin/{draft['id']}", headers=admin_headers).status_code == 200

    def test_lectura_por_slug_suma_una_visita(self, client, admin_headers):
        post = create_post(client, admin_headers, isPublished=True)

        first = client.get(f"/blog/slug/{post['slug']}").json()["data"]
        second = client.get(f"/blog/slug/{post['slug']}").json()["data"]
        assert first["views"] == 1
        assert second["views"] == 2

        # Por ID no cuenta visitas
        by_id = client.get(f"/blog/{post['id']}").json()["data"]
        assert by_id["views"] == 2

    def test_autor_publico_sin_email(self, client, admin_headers):
        post = create_post(client, admin_headers, isPublished=True)
        data = client.get(f"/blog/{post['id']}").json()["data"]
        assert "email" not in data["author"]

    def test_filtro_por_tag_y_busqueda(self, client, admin_headers):
        create_post(client, admin_headers, isPublished=True)
        create_post(
            client, admin_headers,
            title="Mochilas Ecológicas", content="Materiales reciclados", tags=["eco"],
            isPublished=True
        )

        body = client.get("/blog", params={"tag": "ECO"}).json()
        assert [p["title"] for p in body["data"]] == ["Mochilas Ecológicas"]

        body = client.get("/blog", params={"search": "termos"}).json()
        assert body["pagination"]["total"] == 1

    def test_tags_de_posts_publicados(self, client, admin_headers):
        create_post(client, admin_headers, isPublished=True)
        create_post(client, admin_headers, title="Borrador", tags=["oculto"])

        response = client.get("/blog/tags")
        assert response.json()["data"] == ["empresas", "regalos"]


class TestAdminBlog:
    """Tests del listado de administración"""

    def test_listado_con_filtro_de_estado(self, client, admin_headers):
        create_post(client, admin_headers, isPublished=True)
        create_post(client, admin_headers, title="Borrador")

        body = client.get("/blog/admin/all", headers=admin_headers).json()
        assert body["pagination"]["total"] == 2
        assert "email" in body["data"][0]["author"]

        body = client.get(
            "/blog/admin/all", params={"isPublished": "false"}, headers=admin_headers
        ).json()
        assert [p["title"] for p in body["data"]] == ["Borrador"]

    def test_eliminar(self, client, admin_headers):
        post = create_post(client, admin_headers)
        assert client.delete(f"/blog/{post['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/blog/admin/{post['id']}", headers=admin_headers).status_code == 404
