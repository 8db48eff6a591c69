"""
Shared fixtures: a recording drawing surface and sample render inputs.
"""
import re
from datetime import datetime

import pytest

from invoice_data import Client, InvoiceRenderData, Issuer, LineItem
from render_support import TemplateConfig


class RecordingSurface:
    """Drop-in for PdfSurface that records every primitive with the active style."""

    def __init__(self, title=None, fail_images=False):
        self.title = title
        self.fail_images = fail_images
        self.calls = []
        self.fill = (0, 0, 0)
        self.draw = (0, 0, 0)
        self.text_color = (0, 0, 0)
        self.font_size = 10
        self.bold = False
        self.line_width = 0.2

    def set_fill_color(self, rgb):
        self.fill = tuple(rgb)

    def set_draw_color(self, rgb):
        self.draw = tuple(rgb)

    def set_text_color(self, rgb):
        self.text_color = tuple(rgb)

    def set_font(self, size, bold=False):
        self.font_size = size
        self.bold = bold

    def set_line_width(self, width):
        self.line_width = width

    def rect(self, x, y, w, h, style="S"):
        self.calls.append({"op": "rect", "x": x, "y": y, "w": w, "h": h, "style": style, "fill": self.fill})

    def rounded_rect(self, x, y, w, h, r, style="S"):
        self.calls.append({"op": "rounded_rect", "x": x, "y": y, "w": w, "h": h, "style": style, "fill": self.fill})

    def line(self, x1, y1, x2, y2):
        self.calls.append({"op": "line", "x": x1, "y": min(y1, y2), "y2": max(y1, y2), "color": self.draw})

    def text(self, value, x, y, align="left"):
        self.calls.append({
            "op": "text", "value": str(value), "x": x, "y": y, "align": align,
            "color": self.text_color, "size": self.font_size, "bold": self.bold,
        })

    def text_width(self, value):
        return len(str(value)) * self.font_size * 0.2

    def split_text_to_size(self, value, width):
        return [str(value)]

    def add_image(self, logo, x, y, w, h):
        if self.fail_images:
            raise OSError("cannot identify image file")
        self.calls.append({"op": "image", "x": x, "y": y, "w": w, "h": h, "format": logo.format})

    def output(self):
        return b"%PDF-recorded"

    # -----------------------------
    # Query helpers
    # -----------------------------
    def texts(self):
        return [c["value"] for c in self.calls if c["op"] == "text"]

    def text_calls(self, predicate):
        return [c for c in self.calls if c["op"] == "text" and predicate(c["value"])]


def top_y(call):
    return call["y"]


def bottom_y(call):
    if call["op"] in ("rect", "rounded_rect", "image"):
        return call["y"] + call["h"]
    if call["op"] == "line":
        return call["y2"]
    return call["y"]


_CURRENCY_RE = re.compile(r"^-?\$-?\d")


def split_table_and_totals(surface):
    """
    Returns (table_calls, totals_calls): everything from the item-table header
    labels through the last item row, then everything up to the grand total.
    """
    calls = surface.calls

    def idx(pred, start=0):
        for i in range(start, len(calls)):
            c = calls[i]
            if c["op"] == "text" and pred(c["value"]):
                return i
        raise AssertionError("text not drawn")

    start = idx(lambda v: v.lower() == "description")
    sub = idx(lambda v: v.startswith("Subtotal"), start)
    total = idx(lambda v: v.rstrip(":").upper() == "TOTAL", sub)
    row_end = max(
        i for i in range(start, sub)
        if calls[i]["op"] == "text" and (calls[i]["value"].lower() == "amount" or _CURRENCY_RE.match(calls[i]["value"]))
    )
    return calls[start:row_end + 1], calls[row_end + 1:total + 1]


@pytest.fixture
def recording_surface():
    return RecordingSurface()


@pytest.fixture
def issuer():
    return Issuer(
        email="billing@acme.test",
        first_name="Ada",
        last_name="Lovelace",
        business_name="Acme Studio",
        business_address="12 Harbour Road\n\nSuite 4\nPortsmouth",
        business_phone="555-0100",
        tax_id="TX-99",
        invoice_template="minimal",
    )


@pytest.fixture
def client():
    return Client(name="Globex Corp", email="ap@globex.test", address="1 Main St\nSpringfield", phone="555-0199")


def make_items(n):
    return tuple(
        LineItem(description=f"Service {i + 1}", quantity="1", rate="10.00", amount="10.00") for i in range(n)
    )


@pytest.fixture
def make_invoice(client):
    def _make(items=None, **overrides):
        items = make_items(2) if items is None else items
        fields = dict(
            invoice_number="INV-001",
            issue_date=datetime(2026, 1, 15),
            due_date=datetime(2026, 2, 14),
            client=client,
            status="sent",
            subtotal="100.00",
            tax_rate="10",
            tax_amount="10.00",
            discount_rate="0",
            discount_amount="0.00",
            total="110.00",
            notes=None,
            items=items,
        )
        fields.update(overrides)
        return InvoiceRenderData(**fields)

    return _make


@pytest.fixture
def config():
    return TemplateConfig()
