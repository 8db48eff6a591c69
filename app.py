# app.py
import logging

from flask import Flask, Response, abort, jsonify, redirect, request, url_for
from flask_login import (
    LoginManager, UserMixin, login_user, logout_user,
    login_required, current_user
)
from werkzeug.security import check_password_hash

from config import Config
from invoice_templates import COLOR_PRESETS, get_template_info
from models import Base, ensure_sqlite_dir, make_engine, make_session_factory, User
from pdf_service import InvoiceNotFound, InvoiceRenderer, generate_invoice_pdf

logger = logging.getLogger(__name__)

login_manager = LoginManager()


# -----------------------------
# Flask-Login user wrapper
# -----------------------------
class AppUser(UserMixin):
    def __init__(self, user_id: int, email: str):
        self.id = str(user_id)
        self.email = email


@login_manager.unauthorized_handler
def _unauthorized():
    return jsonify({"message": "Unauthorized"}), 401


# -----------------------------
# Helpers
# -----------------------------
def _current_user_id_int() -> int:
    try:
        return int(current_user.get_id())
    except (TypeError, ValueError):
        return -1


# -----------------------------
# App factory
# -----------------------------
def create_app(db_url: str | None = None):
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    db_url = db_url or Config.SQLALCHEMY_DATABASE_URI
    ensure_sqlite_dir(db_url)

    app = Flask(__name__)
    app.config.from_object(Config)

    login_manager.init_app(app)

    engine = make_engine(db_url, echo=Config.SQLALCHEMY_ECHO)
    Base.metadata.create_all(engine)

    SessionLocal = make_session_factory(engine)
    renderer = InvoiceRenderer()

    def db_session():
        return SessionLocal()

    # Now that SessionLocal exists, bind the user_loader properly.
    @login_manager.user_loader
    def load_user(user_id: str):
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            return None
        with db_session() as s:
            u = s.get(User, uid)
            if not u:
                return None
            return AppUser(u.id, u.email)

    # -----------------------------
    # Auth routes
    # -----------------------------
    @app.route("/login", methods=["POST"])
    def login():
        payload = request.get_json(silent=True) or request.form
        email = (payload.get("email") or "").strip().lower()
        password = payload.get("password") or ""
        with db_session() as s:
            u = s.query(User).filter(User.email == email).first()
            if u and check_password_hash(u.password_hash, password):
                login_user(AppUser(u.id, u.email))
                return jsonify({"id": u.id, "email": u.email})
        return jsonify({"message": "Invalid email or password"}), 401

    @app.route("/logout")
    @login_required
    def logout():
        logout_user()
        return redirect(url_for("templates"))

    # -----------------------------
    # Template catalogue
    # -----------------------------
    @app.route("/templates")
    def templates():
        return jsonify({
            "templates": get_template_info(),
            "available": renderer.registry.list(),
            "color_presets": COLOR_PRESETS,
        })

    # -----------------------------
    # PDF routes (scoped)
    # -----------------------------
    @app.route("/invoices/<int:invoice_id>/pdf")
    @login_required
    def invoice_pdf(invoice_id):
        template_override = (request.args.get("template") or "").strip() or None
        with db_session() as s:
            try:
                filename, pdf_bytes = generate_invoice_pdf(
                    s,
                    invoice_id,
                    user_id=_current_user_id_int(),
                    template_override=template_override,
                    renderer=renderer,
                )
            except InvoiceNotFound:
                abort(404)
            except Exception:
                logger.exception("Error generating PDF for invoice id=%s", invoice_id)
                return jsonify({"message": "Failed to generate PDF"}), 500

        return Response(
            pdf_bytes,
            mimetype="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
