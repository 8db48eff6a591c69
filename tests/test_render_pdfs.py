"""
Bulk renderer CLI against a seeded SQLite file.
"""
from datetime import datetime
from decimal import Decimal

import pytest

import render_pdfs
from config import Config
from models import Base, Client, Invoice, InvoiceItem, User, make_engine, make_session_factory


@pytest.fixture
def seeded_db(tmp_path, monkeypatch):
    db_url = f"sqlite:///{(tmp_path / 'bulk.db').as_posix()}"
    monkeypatch.setattr(Config, "SQLALCHEMY_DATABASE_URI", db_url)

    engine = make_engine(db_url)
    Base.metadata.create_all(engine)
    with make_session_factory(engine)() as s:
        acme = User(email="owner@acme.test", password_hash="x", business_name="Acme Studio")
        other = User(email="other@acme.test", password_hash="x", invoice_template="minimal")
        s.add_all([acme, other])
        s.flush()

        globex = Client(user_id=acme.id, name="Globex", email="ap@globex.test")
        initech = Client(user_id=other.id, name="Initech", email="ap@initech.test")
        s.add_all([globex, initech])
        s.flush()

        first = Invoice(
            user_id=acme.id,
            client_id=globex.id,
            invoice_number="2026/1",
            issue_date=datetime(2026, 1, 15),
            due_date=datetime(2026, 2, 14),
            subtotal=Decimal("50.00"),
            total=Decimal("50.00"),
            created_at=datetime(2026, 1, 15, 9, 0),
            items=[InvoiceItem(description="Design", quantity=Decimal("1"), rate=Decimal("50.00"), amount=Decimal("50.00"))],
        )
        second = Invoice(
            user_id=other.id,
            client_id=initech.id,
            invoice_number="INV-7",
            issue_date=datetime(2026, 1, 20),
            due_date=datetime(2026, 2, 19),
            subtotal=Decimal("20.00"),
            total=Decimal("20.00"),
            created_at=datetime(2026, 1, 20, 9, 0),
        )
        s.add_all([first, second])
        s.commit()
        ids = {"first": first.id, "second": second.id}
    return ids


def test_renders_every_invoice(seeded_db, tmp_path, capsys):
    out = tmp_path / "out"
    assert render_pdfs.main(["--out", str(out), "--template", "classic"]) == 0

    printed = capsys.readouterr().out
    assert "[1/2] DONE  2026/1 ->" in printed
    assert "[2/2] DONE  INV-7 ->" in printed
    assert "Generated: 2" in printed
    assert "Failed:    0" in printed

    assert sorted(p.name for p in out.iterdir()) == ["invoice-20261.pdf", "invoice-INV-7.pdf"]
    assert (out / "invoice-INV-7.pdf").read_bytes().startswith(b"%PDF")


def test_invoice_id_filter(seeded_db, tmp_path, capsys):
    out = tmp_path / "out"
    assert render_pdfs.main(["--out", str(out), "--invoice-id", str(seeded_db["second"])]) == 0
    assert [p.name for p in out.iterdir()] == ["invoice-INV-7.pdf"]
    assert "[1/1] DONE  INV-7" in capsys.readouterr().out


def test_user_email_filter_is_case_insensitive(seeded_db, tmp_path):
    out = tmp_path / "out"
    assert render_pdfs.main(["--out", str(out), "--user-email", "  Owner@Acme.test "]) == 0
    assert [p.name for p in out.iterdir()] == ["invoice-20261.pdf"]


def test_no_match_is_not_an_error(seeded_db, tmp_path, capsys):
    out = tmp_path / "out"
    assert render_pdfs.main(["--out", str(out), "--invoice-id", "99999"]) == 0
    assert "No invoices found for the given filter." in capsys.readouterr().out
    assert list(out.iterdir()) == []


def test_failed_render_is_reported(seeded_db, tmp_path, capsys, monkeypatch):
    real = render_pdfs.generate_invoice_pdf

    def flaky(session, invoice_id, **kwargs):
        if invoice_id == seeded_db["first"]:
            raise RuntimeError("disk full")
        return real(session, invoice_id, **kwargs)

    monkeypatch.setattr(render_pdfs, "generate_invoice_pdf", flaky)
    out = tmp_path / "out"
    assert render_pdfs.main(["--out", str(out)]) == 1

    printed = capsys.readouterr().out
    assert "[1/2] FAIL  2026/1  (disk full)" in printed
    assert "[2/2] DONE  INV-7" in printed
    assert "Generated: 1" in printed
    assert "Failed:    1" in printed
    assert [p.name for p in out.iterdir()] == ["invoice-INV-7.pdf"]
