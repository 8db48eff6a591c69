# invoice_data.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str, None]


# -----------------------------
# Render inputs
# -----------------------------
# These are read-only display records handed to a template. Money fields stay
# decimal strings ("100.00") exactly as the database returns them; templates
# parse them defensively at the point of use.

@dataclass(frozen=True)
class LineItem:
    description: str = ""
    quantity: str = "0"
    rate: str = "0"
    amount: str = "0"


@dataclass(frozen=True)
class Client:
    name: str = ""
    email: str = ""
    address: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class Issuer:
    """
    The business generating the invoice: identity fields for the letterhead
    plus the stored branding (colors, logo data URI, template choice).
    Branding fields are None when the issuer never customized them.
    """
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    business_phone: Optional[str] = None
    tax_id: Optional[str] = None
    logo_url: Optional[str] = None
    brand_primary_color: Optional[str] = None
    brand_secondary_color: Optional[str] = None
    brand_accent_color: Optional[str] = None
    invoice_template: Optional[str] = None

    def display_name(self) -> str:
        business = (self.business_name or "").strip()
        if business:
            return business
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class InvoiceRenderData:
    invoice_number: str
    issue_date: DateLike
    due_date: DateLike
    client: Client
    status: str = "draft"
    subtotal: str = "0"
    tax_rate: str = "0"
    tax_amount: str = "0"
    discount_rate: str = "0"
    discount_amount: str = "0"
    total: str = "0"
    notes: Optional[str] = None
    items: tuple[LineItem, ...] = field(default_factory=tuple)
