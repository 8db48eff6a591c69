# render_pdfs.py
import argparse
import logging
from pathlib import Path

from config import Config
from models import Base, ensure_sqlite_dir, make_engine, make_session_factory, Invoice, User
from pdf_service import InvoiceRenderer, generate_invoice_pdf


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render invoice PDFs to a directory.")
    parser.add_argument("--invoice-id", type=int, default=None, help="Only render this invoice.")
    parser.add_argument("--user-email", type=str, default="", help="Only render invoices issued by this user.")
    parser.add_argument("--template", type=str, default="", help="Override the issuer's template (modern, classic, minimal).")
    parser.add_argument("--out", type=str, default=Config.EXPORTS_DIR, help="Output directory.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL, logging.INFO))

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    ensure_sqlite_dir(Config.SQLALCHEMY_DATABASE_URI)
    engine = make_engine(Config.SQLALCHEMY_DATABASE_URI, echo=Config.SQLALCHEMY_ECHO)
    Base.metadata.create_all(engine)
    SessionLocal = make_session_factory(engine)
    renderer = InvoiceRenderer()
    template_override = args.template.strip() or None

    with SessionLocal() as s:
        q = s.query(Invoice).order_by(Invoice.created_at.asc())
        if args.invoice_id is not None:
            q = q.filter(Invoice.id == args.invoice_id)
        if args.user_email.strip():
            q = q.join(User, Invoice.user_id == User.id).filter(User.email == args.user_email.strip().lower())

        invoice_ids = [(inv.id, inv.invoice_number) for inv in q.all()]

        if not invoice_ids:
            print("No invoices found for the given filter.")
            return 0

        total = len(invoice_ids)
        generated = 0
        failed = 0

        for i, (invoice_id, number) in enumerate(invoice_ids, start=1):
            try:
                filename, pdf_bytes = generate_invoice_pdf(
                    s, invoice_id, template_override=template_override, renderer=renderer
                )
                path = out_dir / filename
                path.write_bytes(pdf_bytes)
                generated += 1
                print(f"[{i}/{total}] DONE  {number} -> {path}")
            except Exception as e:
                failed += 1
                print(f"[{i}/{total}] FAIL  {number}  ({e})")

    print("\nPDF rendering complete.")
    print(f"Generated: {generated}")
    print(f"Failed:    {failed}")
    print(f"Output:    {out_dir}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
