"""
Tests de integración de la API con TestClient.
"""
import json
from unittest.mock import patch

from contable.models.models import User


class TestBootstrap:

    def test_seed_test_user(self, client, db):
        response = client.get("/api/seed-test-user")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["created"] is True
        assert data["message"] == "Usuario de prueba creado exitosamente"
        assert data["user"]["email"] == "test@example.com"

        # Segunda llamada: ya existen usuarios
        data = client.get("/api/seed-test-user").json()
        assert data["created"] is False
        assert data["message"] == "Ya existen usuarios en el sistema"
        assert db.query(User).count() == 1

    def test_seed_user_can_login(self, client):
        client.get("/api/seed-test-user")

        response = client.post("/api/v1/auth/login", data={
            "username": "test@example.com",
            "password": "password123"
        })
        assert response.status_code == 200

    def test_seed_unexpected_error(self, client, db):
        """Cualquier fallo devuelve el sobre {success, message} con 500"""
        with patch("contable.api.endpoints.bootstrap.get_password_hash",
                   side_effect=RuntimeError("hash no disponible")):
            response = client.get("/api/seed-test-user")

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert "hash no disponible" in data["message"]
        assert db.query(User).count() == 0

    def test_invoice_preview_requires_settings(self, client):
        response = client.get("/api/invoice-preview")

        assert response.status_code == 400
        assert response.json() == {"error": "Se requiere el parámetro settings"}

    def test_invoice_preview_invalid_json(self, client):
        response = client.get("/api/invoice-preview", params={"settings": "no-es-json"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error al generar vista previa"}

    def test_invoice_preview_html(self, client):
        settings = json.dumps({"companyName": "Ferretería Central", "primaryColor": "#ff0000"})
        response = client.get("/api/invoice-preview", params={"settings": settings})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Ferretería Central" in response.text
        assert "#ff0000" in response.text


class TestAuth:

    def test_login(self, client, user):
        response = client.post("/api/v1/auth/login", data={
            "username": "empresa@prueba.do",
            "password": "Clave1234"
        })

        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"

    def test_login_wrong_password(self, client, user):
        response = client.post("/api/v1/auth/login", data={
            "username": "empresa@prueba.do",
            "password": "incorrecta1"
        })
        assert response.status_code == 401

    def test_register_and_me(self, client, db):
        response = client.post("/api/v1/auth/register", json={
            "name": "Nueva Empresa",
            "email": "nueva@empresa.do",
            "password": "Segura2024",
            "rnc": "131-00051-7"
        })
        assert response.status_code == 201
        assert response.json()["rnc"] == "131000517"

        token = client.post("/api/v1/auth/login", data={
            "username": "nueva@empresa.do",
            "password": "Segura2024"
        }).json()["access_token"]

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["email"] == "nueva@empresa.do"

    def test_register_duplicate_email(self, client, user):
        response = client.post("/api/v1/auth/register", json={
            "name": "Otra",
            "email": "empresa@prueba.do",
            "password": "Segura2024"
        })
        assert response.status_code == 400

    def test_requires_token(self, client, db):
        assert client.get("/api/v1/expenses/").status_code == 401

    def test_update_profile(self, client, auth_headers):
        response = client.put("/api/v1/auth/me", headers=auth_headers, json={
            "company": "Empresa Renovada S.R.L.",
            "phone": "(829) 555-0101"
        })
        assert response.status_code == 200
        assert response.json()["company"] == "Empresa Renovada S.R.L."
        assert response.json()["phone"] == "(829) 555-0101"

    def test_update_profile_null_name_keeps_name(self, client, auth_headers):
        """El nombre es obligatorio: un null explícito no lo borra"""
        response = client.put("/api/v1/auth/me", headers=auth_headers, json={
            "name": None,
            "address": None
        })
        assert response.status_code == 200
        assert response.json()["name"] == "Empresa Prueba"
        assert response.json()["address"] is None

    def test_invalid_phone(self, client, auth_headers):
        response = client.post("/api/v1/auth/register", json={
            "name": "Nueva Empresa",
            "email": "nueva.do",
            "password": "Segura2024",
            "phone": "12345"
        })
        assert response.status_code == 422

        response = client.put("/api/v1/auth/me", headers=auth_headers, json={"phone": "tel-abc"})
        assert response.status_code == 422


class TestExpenses:

    def test_crud(self, client, auth_headers, supplier):
        response = client.post("/api/v1/expenses/", headers=auth_headers, json={
            "date": "2024-03-15",
            "description": "Resmas de papel",
            "amount": 1180,
            "category": "Bienes",
            "supplier_id": supplier.id,
            "ncf": "b0100000001",
            "payment_method": "Efectivo"
        })
        assert response.status_code == 201
        expense = response.json()
        assert expense["ncf"] == "B0100000001"
        assert expense["status"] == "paid"
        assert expense["supplier"]["name"] == "Papelería Nacional"

        response = client.put(f"/api/v1/expenses/{expense['id']}", headers=auth_headers, json={
            "amount": 2360,
            "status": "pending"
        })
        assert response.json()["amount"] == 2360
        assert response.json()["status"] == "pending"

        listed = client.get("/api/v1/expenses/", headers=auth_headers,
                            params={"category": "Bienes"}).json()
        assert [e["id"] for e in listed] == [expense["id"]]

        response = client.delete(f"/api/v1/expenses/{expense['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/v1/expenses/{expense['id']}", headers=auth_headers).status_code == 404

    def test_receipt_upload(self, client, auth_headers, user):
        expense = client.post("/api/v1/expenses/", headers=auth_headers, json={
            "date": "2024-03-15",
            "description": "Almuerzo de trabajo",
            "amount": 850,
            "category": "Otros"
        }).json()

        response = client.post(
            f"/api/v1/expenses/{expense['id']}/receipt",
            headers=auth_headers,
            files={"file": ("recibo.pdf", b"%PDF-1.4 recibo", "application/pdf")}
        )
        assert response.status_code == 200
        assert response.json()["path"].startswith(f"{user.id}/")
        assert response.json()["path"].endswith(".pdf")

        receipt = client.get(f"/api/v1/expenses/{expense['id']}/receipt", headers=auth_headers).json()
        assert receipt["url"] == f"/storage/receipts/{receipt['path']}"

        response = client.post(
            f"/api/v1/expenses/{expense['id']}/receipt",
            headers=auth_headers,
            files={"file": ("recibo.txt", b"texto", "text/plain")}
        )
        assert response.status_code == 400

    def test_invalid_ncf(self, client, auth_headers):
        response = client.post("/api/v1/expenses/", headers=auth_headers, json={
            "date": "2024-03-15",
            "description": "Gasto",
            "amount": 100,
            "category": "Otros",
            "ncf": "X123"
        })
        assert response.status_code == 422

    def test_negative_amount(self, client, auth_headers):
        response = client.post("/api/v1/expenses/", headers=auth_headers, json={
            "date": "2024-03-15",
            "description": "Gasto",
            "amount": -50,
            "category": "Otros"
        })
        assert response.status_code == 422

    def test_unknown_supplier(self, client, auth_headers):
        response = client.post("/api/v1/expenses/", headers=auth_headers, json={
            "date": "2024-03-15",
            "description": "Gasto",
            "amount": 100,
            "category": "Otros",
            "supplier_id": 9999
        })
        assert response.status_code == 400


class TestReport606:

    def _create_expenses(self, client, auth_headers, supplier_id):
        for payload in (
            {"date": "2024-03-15", "description": "Papel", "amount": 1180,
             "category": "Bienes", "supplier_id": supplier_id},
            {"date": "2024-03-20", "description": "Impuesto", "amount": 300,
             "category": "Impuestos"},
            {"date": "2024-04-02", "description": "Abril", "amount": 500,
             "category": "Bienes"},
        ):
            assert client.post("/api/v1/expenses/", headers=auth_headers, json=payload).status_code == 201

    def test_report(self, client, auth_headers, supplier):
        self._create_expenses(client, auth_headers, supplier.id)

        response = client.get("/api/v1/reports/606/202403", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["rnc"] == "131000517"
        assert data["summary"]["total_records"] == 2
        # 1000 + 300 de base, 180 de ITBIS
        assert data["summary"]["total_base_amount"] == 1300
        assert data["summary"]["total_itbis_amount"] == 180
        assert data["entries"][0]["rnc"] == "101012345"
        assert data["entries"][1]["supplier_name"] == "-"

    def test_report_filters(self, client, auth_headers, supplier):
        self._create_expenses(client, auth_headers, supplier.id)

        data = client.get("/api/v1/reports/606/202403", headers=auth_headers,
                          params={"categories": "Impuestos"}).json()
        assert data["summary"]["total_records"] == 1

        data = client.post("/api/v1/reports/606/202403", headers=auth_headers,
                           json={"status": ["pending"]}).json()
        assert data["summary"]["total_records"] == 0

    def test_invalid_period(self, client, auth_headers):
        response = client.get("/api/v1/reports/606/2024-3", headers=auth_headers)
        assert response.status_code == 400

    def test_submit(self, client, auth_headers, supplier):
        self._create_expenses(client, auth_headers, supplier.id)

        response = client.post("/api/v1/reports/606/submit", headers=auth_headers, json={
            "period": "202403",
            "credentials": {"username": "usuario", "password": "clave", "rnc": "131000517"}
        })
        assert response.json() == {
            "success": True,
            "message": "Reporte enviado exitosamente a la DGII."
        }

        response = client.post("/api/v1/reports/606/submit", headers=auth_headers, json={
            "period": "202403",
            "credentials": {"username": "usuario"}
        })
        assert response.json()["success"] is False

    def test_pdf(self, client, auth_headers, supplier):
        self._create_expenses(client, auth_headers, supplier.id)

        response = client.get("/api/v1/reports/606/202403/pdf", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_periods(self, client):
        periods = client.get("/api/v1/reports/periods").json()
        assert len(periods) == 36


class TestInvoices:

    def _create(self, client, auth_headers, client_id):
        return client.post("/api/v1/invoices/", headers=auth_headers, json={
            "client_id": client_id,
            "date": "2024-03-01",
            "items": [
                {"description": "Servicio de consultoría", "quantity": 1, "price": 1000},
                {"description": "Material de oficina", "quantity": 2, "price": 500},
            ]
        })

    def test_create_and_pdf(self, client, auth_headers, customer):
        response = self._create(client, auth_headers, customer.id)

        assert response.status_code == 201
        invoice = response.json()
        assert invoice["total"] == 2360
        assert invoice["due_date"] == "2024-03-16"
        assert invoice["client"]["name"] == "Cliente Ejemplo S.A."

        response = client.get(f"/api/v1/invoices/{invoice['id']}/pdf", headers=auth_headers)
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_requires_items(self, client, auth_headers, customer):
        response = client.post("/api/v1/invoices/", headers=auth_headers, json={
            "client_id": customer.id,
            "date": "2024-03-01",
            "items": []
        })
        assert response.status_code == 422

    def test_unknown_client(self, client, auth_headers):
        assert self._create(client, auth_headers, 9999).status_code == 400

    def test_status_and_notifications(self, client, auth_headers, customer):
        invoice = self._create(client, auth_headers, customer.id).json()

        response = client.patch(f"/api/v1/invoices/{invoice['id']}/status",
                                headers=auth_headers, json={"status": "paid"})
        assert response.json()["status"] == "paid"

        assert client.get("/api/v1/notifications/unread-count", headers=auth_headers).json() == {"count": 2}
        notifications = client.get("/api/v1/notifications/", headers=auth_headers).json()
        assert {n["title"] for n in notifications} == {"Nueva factura", "Estado de factura actualizado"}

        assert client.post("/api/v1/notifications/read-all", headers=auth_headers).json() == {"updated": 2}
        assert client.get("/api/v1/notifications/unread-count", headers=auth_headers).json() == {"count": 0}

    def test_client_with_invoices_cannot_be_deleted(self, client, auth_headers, customer):
        self._create(client, auth_headers, customer.id)

        response = client.delete(f"/api/v1/clients/{customer.id}", headers=auth_headers)
        assert response.status_code == 400


class TestInvoiceSettings:

    def test_defaults_from_profile(self, client, auth_headers):
        data = client.get("/api/v1/settings/invoice", headers=auth_headers).json()

        assert data["company_name"] == "Empresa Prueba S.R.L."
        assert data["company_rnc"] == "131000517"
        assert data["primary_color"] == "#3b82f6"

    def test_update(self, client, auth_headers):
        response = client.put("/api/v1/settings/invoice", headers=auth_headers, json={
            "primary_color": "#10b981",
            "show_watermark": True,
            "watermark_text": "PAGADO"
        })
        assert response.status_code == 200
        assert response.json()["primary_color"] == "#10b981"

        response = client.put("/api/v1/settings/invoice", headers=auth_headers, json={
            "primary_color": "azul"
        })
        assert response.status_code == 422

    def test_logo_upload(self, client, auth_headers):
        png = b"\x89PNG\r\n\x1a\n" + b"0" * 16
        response = client.post(
            "/api/v1/settings/invoice/logo",
            headers=auth_headers,
            files={"file": ("logo.png", png, "image/png")}
        )
        assert response.status_code == 200

        logo = client.get("/api/v1/settings/invoice/logo", headers=auth_headers).json()
        assert logo["path"] == response.json()["path"]


class TestApp:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_security_headers(self, client):
        response = client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_dashboard(self, client, auth_headers):
        stats = client.get("/api/v1/dashboard/stats", headers=auth_headers).json()

        assert stats["total_invoices"] == 0
        assert len(stats["last_7_days"]["labels"]) == 7
