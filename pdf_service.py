# pdf_service.py
import base64
import binascii
import logging
import re

from sqlalchemy.orm import selectinload

from config import Config
from invoice_data import Client, InvoiceRenderData, Issuer, LineItem
from invoice_templates import TemplateRegistry, default_registry
from models import Invoice, User
from render_support import FontSizes, LogoImage, TemplateConfig, ThemeColors
from surface import PdfSurface

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:image/([a-zA-Z]*);base64,(.+)$", re.DOTALL)


class InvoiceNotFound(ValueError):
    pass


def _safe_filename(name: str) -> str:
    # strip characters not allowed on Windows/mac paths
    return re.sub(r'[\\/*?:"<>|]', "", (name or "")).strip() or "Invoice"


def pdf_filename(invoice_number: str) -> str:
    return f"invoice-{_safe_filename(str(invoice_number))}.pdf"


def _dec_str(value) -> str:
    return "0" if value is None else str(value)


# -----------------------------
# Branding -> TemplateConfig
# -----------------------------
def decode_logo_data_uri(uri: str | None) -> LogoImage | None:
    """
    Stored logos are data URIs. Anything that is present but does not decode
    still yields a LogoImage (with an empty format) so templates draw the
    placeholder box instead of leaving a gap.
    """
    raw = (uri or "").strip()
    if not raw:
        return None
    m = _DATA_URI_RE.match(raw)
    if not m:
        return LogoImage(format="")
    try:
        data = base64.b64decode(m.group(2), validate=False)
    except (binascii.Error, ValueError):
        return LogoImage(format="")
    return LogoImage(format=m.group(1).upper(), data=data)


def _color_or(value, default: str) -> str:
    # blank means unset; anything else is passed through for hex_to_rgb to judge
    return value if (value or "").strip() else default


def build_template_config(issuer: Issuer) -> TemplateConfig:
    colors = ThemeColors(
        primary=_color_or(issuer.brand_primary_color, Config.BRAND_PRIMARY_COLOR),
        secondary=_color_or(issuer.brand_secondary_color, Config.BRAND_SECONDARY_COLOR),
        accent=_color_or(issuer.brand_accent_color, Config.BRAND_ACCENT_COLOR),
    )
    return TemplateConfig(colors=colors, logo=decode_logo_data_uri(issuer.logo_url), fonts=FontSizes())


# -----------------------------
# Renderer
# -----------------------------
class InvoiceRenderer:
    """
    Resolves the issuer's template and draws one invoice onto a fresh surface.
    Nothing is shared between calls apart from the (stateless) templates.
    """

    def __init__(self, registry: TemplateRegistry | None = None, surface_factory=PdfSurface):
        self.registry = registry or default_registry()
        self.surface_factory = surface_factory

    def generate(self, invoice: InvoiceRenderData, issuer: Issuer, template_name: str | None = None) -> bytes:
        config = build_template_config(issuer)
        name = (template_name or issuer.invoice_template or "").strip() or Config.DEFAULT_INVOICE_TEMPLATE
        template = self.registry.get(name)

        surface = self.surface_factory(title=f"Invoice {invoice.invoice_number}")
        template.generate(surface, invoice, issuer, config)
        return surface.output()


# -----------------------------
# ORM -> render inputs
# -----------------------------
def issuer_from_user(user: User) -> Issuer:
    return Issuer(
        email=user.email or "",
        first_name=user.first_name,
        last_name=user.last_name,
        business_name=user.business_name,
        business_address=user.business_address,
        business_phone=user.business_phone,
        tax_id=user.tax_id,
        logo_url=user.logo_url,
        brand_primary_color=user.brand_primary_color,
        brand_secondary_color=user.brand_secondary_color,
        brand_accent_color=user.brand_accent_color,
        invoice_template=user.invoice_template,
    )


def render_data_from_invoice(inv: Invoice) -> InvoiceRenderData:
    c = inv.client
    return InvoiceRenderData(
        invoice_number=inv.invoice_number,
        issue_date=inv.issue_date,
        due_date=inv.due_date,
        status=inv.status or "",
        client=Client(name=c.name or "", email=c.email or "", address=c.address, phone=c.phone),
        subtotal=_dec_str(inv.subtotal),
        tax_rate=_dec_str(inv.tax_rate),
        tax_amount=_dec_str(inv.tax_amount),
        discount_rate=_dec_str(inv.discount_rate),
        discount_amount=_dec_str(inv.discount_amount),
        total=_dec_str(inv.total),
        notes=inv.notes,
        items=tuple(
            LineItem(
                description=it.description or "",
                quantity=_dec_str(it.quantity),
                rate=_dec_str(it.rate),
                amount=_dec_str(it.amount),
            )
            for it in inv.items
        ),
    )


def load_render_data(session, invoice_id: int, user_id: int | None = None) -> tuple[InvoiceRenderData, Issuer]:
    """
    Joins invoice, client, items and issuer for one invoice.
    Raises InvoiceNotFound (a ValueError) when the invoice does not exist
    or belongs to another user.
    """
    q = (
        session.query(Invoice)
        .options(selectinload(Invoice.items), selectinload(Invoice.client), selectinload(Invoice.user))
        .filter(Invoice.id == invoice_id)
    )
    if user_id is not None:
        q = q.filter(Invoice.user_id == user_id)
    inv = q.first()
    if not inv:
        raise InvoiceNotFound(f"Invoice not found: id={invoice_id}")
    return render_data_from_invoice(inv), issuer_from_user(inv.user)


def generate_invoice_pdf(
    session,
    invoice_id: int,
    user_id: int | None = None,
    template_override: str | None = None,
    renderer: InvoiceRenderer | None = None,
) -> tuple[str, bytes]:
    """
    Renders the invoice to PDF bytes.

    Returns: (download filename, pdf bytes).
    """
    invoice, issuer = load_render_data(session, invoice_id, user_id=user_id)
    renderer = renderer or InvoiceRenderer()
    pdf_bytes = renderer.generate(invoice, issuer, template_name=template_override)
    logger.info("Rendered invoice %s (%d bytes)", invoice.invoice_number, len(pdf_bytes))
    return pdf_filename(invoice.invoice_number), pdf_bytes
