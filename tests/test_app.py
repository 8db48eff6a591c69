"""
HTTP tests for the PDF download route against a throwaway SQLite file.
"""
from datetime import datetime
from decimal import Decimal

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from models import Client, Invoice, InvoiceItem, User, make_engine, make_session_factory


@pytest.fixture
def app_and_ids(tmp_path):
    db_url = f"sqlite:///{(tmp_path / 'test.db').as_posix()}"
    app = create_app(db_url)
    app.config["TESTING"] = True

    SessionLocal = make_session_factory(make_engine(db_url))
    with SessionLocal() as s:
        owner = User(
            email="owner@acme.test",
            password_hash=generate_password_hash("secret123"),
            business_name="Acme Studio",
            invoice_template="classic",
        )
        other = User(email="other@acme.test", password_hash=generate_password_hash("secret123"))
        s.add_all([owner, other])
        s.flush()

        client = Client(user_id=owner.id, name="Globex", email="ap@globex.test")
        other_client = Client(user_id=other.id, name="Initech", email="ap@initech.test")
        s.add_all([client, other_client])
        s.flush()

        inv = Invoice(
            user_id=owner.id,
            client_id=client.id,
            invoice_number="INV-042",
            issue_date=datetime(2026, 1, 15),
            due_date=datetime(2026, 2, 14),
            subtotal=Decimal("100.00"),
            tax_rate=Decimal("10"),
            tax_amount=Decimal("10.00"),
            total=Decimal("110.00"),
            items=[
                InvoiceItem(description="Design", quantity=Decimal("2"), rate=Decimal("25.00"), amount=Decimal("50.00")),
                InvoiceItem(description="Build", quantity=Decimal("1"), rate=Decimal("50.00"), amount=Decimal("50.00")),
            ],
        )
        foreign = Invoice(
            user_id=other.id,
            client_id=other_client.id,
            invoice_number="INV-900",
            issue_date=datetime(2026, 1, 1),
            due_date=datetime(2026, 1, 31),
            subtotal=Decimal("1"),
            total=Decimal("1"),
        )
        s.add_all([inv, foreign])
        s.commit()
        ids = {"invoice": inv.id, "foreign": foreign.id}

    return app, ids


def _login(test_client):
    return test_client.post("/login", json={"email": "owner@acme.test", "password": "secret123"})


def test_pdf_requires_login(app_and_ids):
    app, ids = app_and_ids
    resp = app.test_client().get(f"/invoices/{ids['invoice']}/pdf")
    assert resp.status_code == 401


def test_bad_password_rejected(app_and_ids):
    app, _ = app_and_ids
    resp = app.test_client().post("/login", json={"email": "owner@acme.test", "password": "nope"})
    assert resp.status_code == 401


def test_pdf_download(app_and_ids):
    app, ids = app_and_ids
    c = app.test_client()
    assert _login(c).status_code == 200

    resp = c.get(f"/invoices/{ids['invoice']}/pdf")
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.headers["Content-Disposition"] == 'attachment; filename="invoice-INV-042.pdf"'
    assert resp.data.startswith(b"%PDF")


def test_pdf_template_override(app_and_ids):
    app, ids = app_and_ids
    c = app.test_client()
    _login(c)
    resp = c.get(f"/invoices/{ids['invoice']}/pdf?template=does-not-exist")
    assert resp.status_code == 200
    assert resp.data.startswith(b"%PDF")


def test_foreign_and_missing_invoices_are_404(app_and_ids):
    app, ids = app_and_ids
    c = app.test_client()
    _login(c)
    assert c.get(f"/invoices/{ids['foreign']}/pdf").status_code == 404
    assert c.get("/invoices/99999/pdf").status_code == 404


def test_render_failure_is_500(app_and_ids, monkeypatch):
    app, ids = app_and_ids
    c = app.test_client()
    _login(c)

    def boom(*args, **kwargs):
        raise RuntimeError("reportlab exploded")

    monkeypatch.setattr("app.generate_invoice_pdf", boom)
    resp = c.get(f"/invoices/{ids['invoice']}/pdf")
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Failed to generate PDF"}


def test_templates_catalogue(app_and_ids):
    app, _ = app_and_ids
    body = app.test_client().get("/templates").get_json()
    assert body["available"] == ["modern", "classic", "minimal"]
    assert [t["name"] for t in body["templates"]] == body["available"]
    assert body["color_presets"][0]["primary"] == "#3b82f6"


def test_logout_ends_session(app_and_ids):
    app, ids = app_and_ids
    c = app.test_client()
    _login(c)
    assert c.get(f"/invoices/{ids['invoice']}/pdf").status_code == 200

    resp = c.get("/logout")
    assert resp.status_code == 302
    assert c.get(f"/invoices/{ids['invoice']}/pdf").status_code == 401
