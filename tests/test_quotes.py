"""
Tests de cotizaciones: creación, numeración, estados y estadísticas.
"""
from datetime import datetime, timezone

import pytest

from core import quote_service
from core.errors import ValidationError
from models.quote import Quote, QuoteCounter


CART = {
    "items": [
        {"productId": "P-001", "productName": "Taza Blanca", "quantity": 10},
        {"productId": 42, "productName": "Termo", "quantity": 5, "description": "Con logo"},
    ],
    "customerName": "Ana Pérez",
    "customerEmail": "ANA@Empresa.CL",
    "customerCompany": "Empresa SpA",
}


def create_quote(client, payload=None):
    response = client.post("/quotes", json=payload or CART)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreateQuote:
    """Tests de creación pública de cotizaciones"""

    def test_totales_calculados_en_servidor(self, client):
        payload = dict(CART, totalItems=99, totalUnits=999)
        quote = create_quote(client, payload)
        assert quote["totalItems"] == 2
        assert quote["totalUnits"] == 15
        assert quote["status"] == "pending"
        assert quote["source"] == "web"
        assert quote["customerEmail"] == "ana@empresa.cl"
        assert quote["items"][1]["productId"] == "42"

    def test_items_vacios_rechazados(self, client):
        response = client.post("/quotes", json={"items": []})
        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_ITEMS"

    def test_sin_items_rechazado(self, client):
        response = client.post("/quotes", json={"customerName": "Ana"})
        assert response.status_code == 400

    def test_cantidad_minima(self, client):
        response = client.post("/quotes", json={
            "items": [{"productId": "P-1", "productName": "Taza", "quantity": 0}]
        })
        assert response.status_code == 400

    def test_origen_whatsapp(self, client):
        quote = create_quote(client, dict(CART, source="whatsapp"))
        assert quote["source"] == "whatsapp"

    def test_formato_de_numero(self, client):
        quote = create_quote(client)
        now = datetime.now(timezone.utc)
        assert quote["quoteNumber"] == f"COT-{now:%y%m}-0001"


class TestQuoteNumbering:
    """Tests del contador mensual de números de cotización"""

    def test_numeros_consecutivos(self, client):
        numbers = [create_quote(client)["quoteNumber"] for _ in range(3)]
        suffixes = [int(n.rsplit("-", 1)[1]) for n in numbers]
        assert suffixes == [1, 2, 3]
        assert len(set(numbers)) == 3

    def test_reinicia_cada_mes(self, db):
        october = datetime(2026, 10, 31, 23, 59, tzinfo=timezone.utc)
        november = datetime(2026, 11, 1, 0, 0, tzinfo=timezone.utc)
        assert quote_service.next_quote_number(db, october) == "COT-2610-0001"
        assert quote_service.next_quote_number(db, october) == "COT-2610-0002"
        assert quote_service.next_quote_number(db, november) == "COT-2611-0001"
        db.commit()

        counters = {c.key: c.value for c in db.query(QuoteCounter).all()}
        assert counters == {"2610": 2, "2611": 1}

    def test_continua_numeros_existentes(self, db):
        """Sin contador, parte desde el mayor número ya emitido en el mes"""
        db.add(Quote(quote_number="COT-2610-0007", total_items=1, total_units=1))
        db.commit()

        now = datetime(2026, 10, 5, tzinfo=timezone.utc)
        assert quote_service.next_quote_number(db, now) == "COT-2610-0008"


class TestQuoteStatus:
    """Tests de cambios de estado"""

    def test_transicion_libre(self, client, admin_headers):
        quote = create_quote(client)
        for status in ["completed", "pending", "rejected", "contacted"]:
            response = client.put(
                f"/quotes/{quote['id']}/status",
                json={"status": status},
                headers=admin_headers
            )
            assert response.status_code == 200
            assert response.json()["data"]["status"] == status

    def test_estado_invalido(self, client, admin_headers):
        quote = create_quote(client)
        response = client.put(
            f"/quotes/{quote['id']}/status",
            json={"status": "archived"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATUS"

    def test_estado_requerido(self, client, admin_headers):
        quote = create_quote(client)
        response = client.put(f"/quotes/{quote['id']}/status", json={}, headers=admin_headers)
        assert response.status_code == 400

    def test_check_status_transition(self):
        assert quote_service.check_status_transition("pending", "quoted") == "quoted"
        with pytest.raises(ValidationError):
            quote_service.check_status_transition("pending", None)


class TestAdminQuotes:
    """Tests de administración de cotizaciones"""

    def test_listado_requiere_admin(self, client, user_headers):
        assert client.get("/quotes").status_code == 401
        assert client.get("/quotes", headers=user_headers).status_code == 403

    def test_filtros(self, client, admin_headers):
        first = create_quote(client)
        create_quote(client, dict(CART, customerName="Bruno Díaz", customerCompany="Wayne"))
        client.put(f"/quotes/{first['id']}/status", json={"status": "quoted"}, headers=admin_headers)

        body = client.get("/quotes", params={"status": "quoted"}, headers=admin_headers).json()
        assert [q["id"] for q in body["data"]] == [first["id"]]

        body = client.get("/quotes", params={"search": "wayne"}, headers=admin_headers).json()
        assert body["pagination"]["total"] == 1

        today = datetime.now(timezone.utc).date().isoformat()
        body = client.get(
            "/quotes", params={"dateFrom": today, "dateTo": today}, headers=admin_headers
        ).json()
        assert body["pagination"]["total"] == 2

        body = client.get("/quotes", params={"dateTo": "2000-01-01"}, headers=admin_headers).json()
        assert body["pagination"]["total"] == 0

    def test_actualizar_items_recalcula_totales(self, client, admin_headers):
        quote = create_quote(client)
        response = client.put(f"/quotes/{quote['id']}", json={
            "items": [{"productId": "P-9", "productName": "Llavero", "quantity": 100}],
            "quotedAmount": 150000,
            "notes": "Cliente frecuente"
        }, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalItems"] == 1
        assert data["totalUnits"] == 100
        assert data["quotedAmount"] == 150000
        assert data["notes"] == "Cliente frecuente"

    def test_actualizar_con_items_vacios(self, client, admin_headers):
        quote = create_quote(client)
        response = client.put(f"/quotes/{quote['id']}", json={"items": []}, headers=admin_headers)
        assert response.status_code == 400

    def test_eliminar(self, client, admin_headers):
        quote = create_quote(client)
        assert client.delete(f"/quotes/{quote['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/quotes/{quote['id']}", headers=admin_headers).status_code == 404

    def test_estadisticas(self, client, admin_headers):
        first = create_quote(client)
        create_quote(client)
        client.put(f"/quotes/{first['id']}/status", json={"status": "completed"}, headers=admin_headers)

        stats = client.get("/quotes/stats", headers=admin_headers).json()["data"]
        assert stats == {
            "total": 2,
            "pending": 1,
            "contacted": 0,
            "quoted": 0,
            "approved": 0,
            "rejected": 0,
            "completed": 1,
        }


class TestMonthlySales:
    """Tests de ventas mensuales"""

    def test_mes_vacio(self, client, admin_headers):
        response = client.get(
            "/admin/sales/monthly", params={"year": 2001, "month": 2}, headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["monthName"] == "febrero"
        assert data["sales"] == {
            "count": 0,
            "totalUnits": 0,
            "totalAmount": 0,
            "totalQuotes": 0,
            "conversionRate": "0",
        }

    def test_mes_actual(self, client, admin_headers):
        sold = create_quote(client)
        quoted_only = create_quote(client)
        create_quote(client)
        client.put(f"/quotes/{sold['id']}", json={
            "status": "completed", "finalAmount": 50000, "quotedAmount": 60000
        }, headers=admin_headers)
        client.put(f"/quotes/{quoted_only['id']}", json={
            "status": "completed", "quotedAmount": 30000
        }, headers=admin_headers)

        data = client.get("/admin/sales/monthly", headers=admin_headers).json()["data"]
        now = datetime.now(timezone.utc)
        assert data["year"] == now.year
        assert data["month"] == now.month
        assert data["sales"]["count"] == 2
        assert data["sales"]["totalUnits"] == 30
        assert data["sales"]["totalAmount"] == 80000
        assert data["sales"]["totalQuotes"] == 3
        assert data["sales"]["conversionRate"] == "66.7"

    def test_monto_final_cero_no_usa_el_cotizado(self, client, admin_headers):
        quote = create_quote(client)
        client.put(f"/quotes/{quote['id']}", json={
            "status": "completed", "finalAmount": 0, "quotedAmount": 60000
        }, headers=admin_headers)

        data = client.get("/admin/sales/monthly", headers=admin_headers).json()["data"]
        assert data["sales"]["count"] == 1
        assert data["sales"]["totalAmount"] == 0

    def test_mes_invalido(self, client, admin_headers):
        response = client.get("/admin/sales/monthly", params={"month": 13}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_MONTH"
