# invoice_templates.py
"""
Invoice page templates.

Every template lays a single A4 page out top to bottom with a running
``y_pos`` cursor (millimetres, y grows down the page): header, issuer,
invoice details, bill-to, item table, totals, notes, footer. Positions below
the item table are always derived from the table height actually drawn, and
positions below the totals from the number of total lines actually drawn.
There is no pagination; the footer sits at a fixed anchor near the bottom.
"""
from __future__ import annotations

import logging
from typing import Iterable, Protocol

from invoice_data import InvoiceRenderData, Issuer
from render_support import (
    BLACK,
    WHITE,
    TemplateConfig,
    add_logo,
    format_currency,
    format_date,
    format_rate,
    safe_float,
    split_address,
    truncate,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "modern"

TEMPLATE_INFO = [
    {
        "name": "modern",
        "display_name": "Modern",
        "description": "Clean and contemporary design with colored accents",
    },
    {
        "name": "classic",
        "display_name": "Classic",
        "description": "Traditional business format with professional styling",
    },
    {
        "name": "minimal",
        "display_name": "Minimal",
        "description": "Simple and elegant design with clean typography",
    },
]

COLOR_PRESETS = [
    {"name": "Blue Professional", "primary": "#3b82f6", "secondary": "#1e40af", "accent": "#10b981"},
    {"name": "Purple Creative", "primary": "#8b5cf6", "secondary": "#7c3aed", "accent": "#f59e0b"},
    {"name": "Green Nature", "primary": "#10b981", "secondary": "#059669", "accent": "#3b82f6"},
    {"name": "Red Bold", "primary": "#ef4444", "secondary": "#dc2626", "accent": "#f59e0b"},
    {"name": "Orange Warm", "primary": "#f97316", "secondary": "#ea580c", "accent": "#84cc16"},
    {"name": "Slate Modern", "primary": "#64748b", "secondary": "#475569", "accent": "#0ea5e9"},
]

GRAY_TEXT = (100, 100, 100)
MUTED_TEXT = (120, 120, 120)
DARK_TEXT = (60, 60, 60)


class InvoiceTemplate(Protocol):
    name: str

    def generate(self, surface, invoice: InvoiceRenderData, issuer: Issuer, config: TemplateConfig) -> None:
        ...


# -----------------------------
# Shared layout helpers
# -----------------------------
def _totals_lines(invoice: InvoiceRenderData) -> list[tuple[str, str, bool]]:
    """
    (label, value, is_discount) for every line above the grand total.
    Tax and discount only appear when their amount is positive, so the
    totals block height depends on the data.
    """
    lines = [("Subtotal:", format_currency(invoice.subtotal), False)]
    if safe_float(invoice.tax_amount) > 0:
        lines.append((f"Tax ({format_rate(invoice.tax_rate)}%):", format_currency(invoice.tax_amount), False))
    if safe_float(invoice.discount_amount) > 0:
        lines.append(
            (f"Discount ({format_rate(invoice.discount_rate)}%):", f"-{format_currency(invoice.discount_amount)}", True)
        )
    return lines


def _note_lines(notes: str | None, max_lines: int, max_chars: int) -> list[str]:
    kept = [ln.strip() for ln in str(notes or "").split("\n") if ln.strip()]
    return [truncate(ln, max_chars) for ln in kept[:max_lines]]


def _lerp_rgb(start, end, t: float) -> tuple[int, int, int]:
    return tuple(round(s + (e - s) * t) for s, e in zip(start, end))


def _gradient_band(surface, start_rgb, end_rgb, x, y, w, h) -> None:
    """Fake a vertical linear gradient with 1mm-tall filled strips."""
    steps = max(int(h), 1)
    for i in range(steps):
        t = i / (steps - 1) if steps > 1 else 0.0
        surface.set_fill_color(_lerp_rgb(start_rgb, end_rgb, t))
        surface.rect(x, y + i, w, min(1, h - i), "F")


def _contact_lines(issuer: Issuer, labelled: bool) -> Iterable[str]:
    if (issuer.email or "").strip():
        yield f"Email: {issuer.email}" if labelled else issuer.email
    if (issuer.business_phone or "").strip():
        yield f"Phone: {issuer.business_phone}" if labelled else issuer.business_phone
    if (issuer.tax_id or "").strip():
        yield f"Tax ID: {issuer.tax_id}"


# -----------------------------
# Modern
# -----------------------------
class ModernTemplate:
    name = "modern"

    DESC_MAX = 35
    ADDRESS_MAX = 25
    ADDRESS_MAX_LINES = 2
    NOTES_MAX_LINES = 2
    NOTE_MAX = 80

    TABLE_X = 20
    TABLE_W = 170
    HEADER_H = 12
    ROW_H = 12
    FOOTER_Y = 280

    def generate(self, surface, invoice: InvoiceRenderData, issuer: Issuer, config: TemplateConfig) -> None:
        primary = config.primary_rgb()
        secondary = config.secondary_rgb()
        accent = config.accent_rgb()
        fonts = config.fonts

        # Header band
        _gradient_band(surface, primary, secondary, 0, 0, 210, 35)
        surface.set_text_color(WHITE)
        surface.set_font(fonts.header, bold=True)
        surface.text("INVOICE", 20, 22)
        surface.set_font(fonts.body)
        surface.text(f"#{invoice.invoice_number}", 190, 22, align="right")

        # Issuer
        y_pos = 45
        if config.logo is not None:
            add_logo(surface, config, 20, y_pos + 22, 45, 22)
            y_pos += 27

        surface.set_text_color(BLACK)
        surface.set_font(fonts.title, bold=True)
        surface.text(issuer.display_name(), 20, y_pos + 6)
        y_pos += 12

        surface.set_font(fonts.small)
        surface.set_text_color((80, 80, 80))
        for ln in split_address(issuer.business_address):
            surface.text(ln, 20, y_pos)
            y_pos += 4.5
        for ln in _contact_lines(issuer, labelled=False):
            surface.text(ln, 20, y_pos)
            y_pos += 4.5
        issuer_bottom = y_pos

        # Invoice details card
        details_bottom = self._card(surface, 125, 45, 70, 48)
        surface.set_text_color(primary)
        surface.set_font(10, bold=True)
        surface.text("INVOICE DETAILS", 130, 54)
        surface.set_text_color(BLACK)
        surface.set_font(14, bold=True)
        surface.text(f"#{invoice.invoice_number}", 130, 64)

        surface.set_font(fonts.small)
        surface.set_text_color(GRAY_TEXT)
        surface.text("Issue Date:", 130, 73)
        surface.set_text_color(BLACK)
        surface.text(format_date(invoice.issue_date), 190, 73, align="right")
        surface.set_text_color(GRAY_TEXT)
        surface.text("Due Date:", 130, 80)
        surface.set_text_color(accent)
        surface.set_font(fonts.small, bold=True)
        surface.text(format_date(invoice.due_date), 190, 80, align="right")
        if (invoice.status or "").strip():
            surface.set_font(fonts.small)
            surface.set_text_color(GRAY_TEXT)
            surface.text("Status:", 130, 87)
            surface.set_text_color(secondary)
            surface.text(invoice.status.upper(), 190, 87, align="right")

        # Bill to
        client = invoice.client
        bill_lines = [truncate(ln, self.ADDRESS_MAX) for ln in split_address(client.address)[: self.ADDRESS_MAX_LINES]]
        if (client.email or "").strip():
            bill_lines.append(truncate(client.email, self.ADDRESS_MAX))
        if (client.phone or "").strip():
            bill_lines.append(client.phone)

        bill_top = max(issuer_bottom, details_bottom) + 8
        bill_h = 22 + len(bill_lines) * 5
        self._card(surface, 20, bill_top, 85, bill_h)
        surface.set_text_color(secondary)
        surface.set_font(10, bold=True)
        surface.text("BILL TO", 25, bill_top + 8)
        surface.set_text_color(BLACK)
        surface.set_font(12, bold=True)
        surface.text(truncate(client.name, 30), 25, bill_top + 15)
        surface.set_font(fonts.small)
        surface.set_text_color((80, 80, 80))
        for i, ln in enumerate(bill_lines):
            surface.text(ln, 25, bill_top + 21 + i * 5)

        # Item table
        table_top = bill_top + bill_h + 10
        table_h = self.HEADER_H + len(invoice.items) * self.ROW_H
        table_end = table_top + table_h

        _gradient_band(surface, primary, secondary, self.TABLE_X, table_top, self.TABLE_W, self.HEADER_H)
        surface.set_draw_color((226, 232, 240))
        surface.set_line_width(0.3)
        surface.rect(self.TABLE_X, table_top, self.TABLE_W, table_h, "S")

        surface.set_text_color(WHITE)
        surface.set_font(9, bold=True)
        label_y = table_top + 8
        surface.text("DESCRIPTION", 25, label_y)
        surface.text("QTY", 115, label_y, align="center")
        surface.text("RATE", 140, label_y, align="center")
        surface.text("AMOUNT", 185, label_y, align="right")

        for i, item in enumerate(invoice.items):
            row_y = table_top + self.HEADER_H + i * self.ROW_H
            if i % 2 == 1:
                surface.set_fill_color((248, 248, 248))
                surface.rect(self.TABLE_X, row_y, self.TABLE_W, self.ROW_H, "F")
            text_y = row_y + 8
            surface.set_text_color(BLACK)
            surface.set_font(9)
            surface.text(truncate(item.description, self.DESC_MAX), 25, text_y)
            surface.text(str(item.quantity or "0"), 115, text_y, align="center")
            surface.text(format_currency(item.rate), 140, text_y, align="center")
            surface.set_font(9, bold=True)
            surface.text(format_currency(item.amount), 185, text_y, align="right")

        # Totals card
        lines = _totals_lines(invoice)
        totals_top = table_end + 10
        line_h = 7
        band_h = 12
        totals_h = 6 + len(lines) * line_h + 2 + band_h + 4
        self._card(surface, 115, totals_top, 75, totals_h)

        y_pos = totals_top + 8
        for label, value, is_discount in lines:
            surface.set_font(10)
            surface.set_text_color(accent if is_discount else (80, 80, 80))
            surface.text(label, 120, y_pos)
            surface.set_font(10, bold=True)
            surface.set_text_color(accent if is_discount else BLACK)
            surface.text(value, 185, y_pos, align="right")
            y_pos += line_h

        band_y = y_pos - 3
        surface.set_fill_color(accent)
        surface.rounded_rect(118, band_y, 69, band_h, 2, "F")
        surface.set_text_color(WHITE)
        surface.set_font(12, bold=True)
        surface.text("TOTAL:", 122, band_y + 8)
        surface.set_font(14, bold=True)
        surface.text(format_currency(invoice.total), 184, band_y + 8, align="right")
        totals_bottom = totals_top + totals_h

        # Notes
        note_lines = _note_lines(invoice.notes, self.NOTES_MAX_LINES, self.NOTE_MAX)
        if note_lines:
            notes_top = totals_bottom + 10
            notes_h = 14 + len(note_lines) * 5.5
            surface.set_fill_color((250, 250, 250))
            surface.set_draw_color((226, 232, 240))
            surface.set_line_width(0.3)
            surface.rounded_rect(20, notes_top, 170, notes_h, 3, "FD")
            surface.set_text_color(secondary)
            surface.set_font(10, bold=True)
            surface.text("NOTES", 25, notes_top + 8)
            surface.set_text_color(DARK_TEXT)
            surface.set_font(9)
            for i, ln in enumerate(note_lines):
                surface.text(ln, 25, notes_top + 14 + i * 5.5)

        # Footer
        surface.set_draw_color(primary)
        surface.set_line_width(0.5)
        surface.line(85, self.FOOTER_Y - 6, 125, self.FOOTER_Y - 6)
        surface.set_text_color(MUTED_TEXT)
        surface.set_font(9)
        surface.text("Thank you for your business!", 105, self.FOOTER_Y, align="center")

    @staticmethod
    def _card(surface, x, y, w, h) -> float:
        """Offset shadow first, then the card on top. Returns the card bottom."""
        surface.set_fill_color((218, 222, 228))
        surface.rounded_rect(x + 1.5, y + 1.5, w, h, 4, "F")
        surface.set_fill_color((248, 250, 252))
        surface.set_draw_color((226, 232, 240))
        surface.set_line_width(0.5)
        surface.rounded_rect(x, y, w, h, 4, "FD")
        return y + h


# -----------------------------
# Classic
# -----------------------------
class ClassicTemplate:
    name = "classic"

    DESC_MAX = 45
    ADDRESS_MAX = 45
    NOTES_MAX_LINES = 3
    NOTE_MAX = 90

    # Column boundaries; header labels and separator rules both come from these.
    COLUMNS = ((20, 110), (110, 130), (130, 155), (155, 190))
    HEADER_H = 10
    ROW_H = 10
    FOOTER_Y = 282

    def generate(self, surface, invoice: InvoiceRenderData, issuer: Issuer, config: TemplateConfig) -> None:
        primary = config.primary_rgb()
        secondary = config.secondary_rgb()
        accent = config.accent_rgb()
        fonts = config.fonts

        # Centered letterhead
        y_pos = 18
        if config.logo is not None:
            add_logo(surface, config, 105 - 20, y_pos + 20, 40, 20)
            y_pos += 24

        surface.set_text_color(primary)
        surface.set_font(fonts.header, bold=True)
        surface.text("INVOICE", 105, y_pos + 10, align="center")

        # Ornamental rules, each narrower than the one above
        surface.set_draw_color(primary)
        for offset, half_w, width in ((14, 60, 0.8), (16, 45, 0.5), (18, 30, 0.3)):
            surface.set_line_width(width)
            surface.line(105 - half_w, y_pos + offset, 105 + half_w, y_pos + offset)
        y_pos += 28

        surface.set_text_color(BLACK)
        surface.set_font(fonts.title, bold=True)
        surface.text(issuer.display_name(), 105, y_pos, align="center")
        y_pos += 6

        surface.set_font(fonts.small)
        surface.set_text_color(DARK_TEXT)
        for ln in split_address(issuer.business_address):
            surface.text(ln, 105, y_pos, align="center")
            y_pos += 4.5
        for ln in _contact_lines(issuer, labelled=True):
            surface.text(ln, 105, y_pos, align="center")
            y_pos += 4.5

        surface.set_draw_color(secondary)
        surface.set_line_width(0.5)
        surface.line(20, y_pos + 1, 190, y_pos + 1)
        y_pos += 10

        # Invoice details (right column)
        meta_top = y_pos
        surface.set_font(fonts.small)
        surface.set_text_color(BLACK)
        surface.text("Invoice Number:", 125, meta_top)
        surface.text(str(invoice.invoice_number), 190, meta_top, align="right")
        surface.text("Invoice Date:", 125, meta_top + 6)
        surface.text(format_date(invoice.issue_date), 190, meta_top + 6, align="right")
        surface.set_font(fonts.small, bold=True)
        surface.set_text_color(primary)
        surface.text("Due Date:", 125, meta_top + 12)
        surface.text(format_date(invoice.due_date), 190, meta_top + 12, align="right")
        meta_bottom = meta_top + 12
        if (invoice.status or "").strip():
            surface.set_font(fonts.small)
            surface.set_text_color(BLACK)
            surface.text("Status:", 125, meta_top + 18)
            surface.text(invoice.status.capitalize(), 190, meta_top + 18, align="right")
            meta_bottom = meta_top + 18

        # Bill to (left column)
        client = invoice.client
        surface.set_text_color(secondary)
        surface.set_font(fonts.body, bold=True)
        surface.text("BILL TO:", 20, meta_top)
        surface.set_draw_color(secondary)
        surface.set_line_width(0.5)
        surface.line(20, meta_top + 2, 50, meta_top + 2)

        surface.set_text_color(BLACK)
        surface.set_font(fonts.body, bold=True)
        surface.text(truncate(client.name, self.ADDRESS_MAX), 20, meta_top + 9)
        y_pos = meta_top + 15
        surface.set_font(fonts.small)
        for ln in split_address(client.address):
            surface.text(truncate(ln, self.ADDRESS_MAX), 20, y_pos)
            y_pos += 5
        if (client.email or "").strip():
            surface.text(truncate(client.email, self.ADDRESS_MAX), 20, y_pos)
            y_pos += 5
        if (client.phone or "").strip():
            surface.text(client.phone, 20, y_pos)
            y_pos += 5

        # Item table
        table_x = self.COLUMNS[0][0]
        table_w = self.COLUMNS[-1][1] - table_x
        table_top = max(y_pos, meta_bottom) + 8
        table_h = self.HEADER_H + len(invoice.items) * self.ROW_H
        table_end = table_top + table_h

        surface.set_fill_color(primary)
        surface.rect(table_x, table_top, table_w, self.HEADER_H, "F")
        surface.set_draw_color(BLACK)
        surface.set_line_width(0.6)
        surface.rect(table_x, table_top, table_w, table_h, "S")
        self._column_rules(surface, table_top, self.HEADER_H)

        surface.set_text_color(WHITE)
        surface.set_font(fonts.small, bold=True)
        self._row_text(surface, table_top + 7, ("Description", "Qty", "Rate", "Amount"), fonts.small)

        for i, item in enumerate(invoice.items):
            row_y = table_top + self.HEADER_H + i * self.ROW_H
            if i % 2 == 1:
                surface.set_fill_color((245, 245, 245))
                surface.rect(table_x, row_y, table_w, self.ROW_H, "F")
            surface.set_draw_color(BLACK)
            surface.set_line_width(0.2)
            surface.rect(table_x, row_y, table_w, self.ROW_H, "S")
            self._column_rules(surface, row_y, self.ROW_H)

            surface.set_text_color(BLACK)
            surface.set_font(fonts.small)
            self._row_text(
                surface,
                row_y + 7,
                (
                    truncate(item.description, self.DESC_MAX),
                    str(item.quantity or "0"),
                    format_currency(item.rate),
                    format_currency(item.amount),
                ),
                fonts.small,
                bold_last=True,
            )

        # Totals in a double-bordered box
        lines = _totals_lines(invoice)
        totals_top = table_end + 10
        line_h = 7
        box_x, box_w = 115, 75
        box_h = 6 + len(lines) * line_h + 14
        surface.set_draw_color(BLACK)
        surface.set_line_width(0.6)
        surface.rect(box_x, totals_top, box_w, box_h, "S")
        surface.set_line_width(0.2)
        surface.rect(box_x + 1.5, totals_top + 1.5, box_w - 3, box_h - 3, "S")

        y_pos = totals_top + 8
        surface.set_font(fonts.small)
        for label, value, is_discount in lines:
            surface.set_text_color(accent if is_discount else BLACK)
            surface.text(label, 119, y_pos)
            surface.text(value, 186, y_pos, align="right")
            surface.set_draw_color((180, 180, 180))
            surface.set_line_width(0.2)
            surface.line(119, y_pos + 2, 186, y_pos + 2)
            y_pos += line_h

        y_pos += 3
        surface.set_text_color(primary)
        surface.set_font(fonts.body + 2, bold=True)
        surface.text("TOTAL:", 119, y_pos)
        surface.text(format_currency(invoice.total), 186, y_pos, align="right")
        # accounting-style double underline
        surface.set_draw_color(primary)
        surface.set_line_width(0.4)
        surface.line(150, y_pos + 2, 186, y_pos + 2)
        surface.line(150, y_pos + 3.2, 186, y_pos + 3.2)
        totals_bottom = totals_top + box_h

        # Notes
        note_lines = _note_lines(invoice.notes, self.NOTES_MAX_LINES, self.NOTE_MAX)
        if note_lines:
            notes_top = totals_bottom + 10
            notes_h = 12 + len(note_lines) * 5
            surface.set_draw_color(BLACK)
            surface.set_line_width(0.3)
            surface.rect(20, notes_top, 170, notes_h, "S")
            surface.set_text_color(BLACK)
            surface.set_font(fonts.small, bold=True)
            surface.text("Notes:", 24, notes_top + 7)
            surface.set_font(fonts.small)
            for i, ln in enumerate(note_lines):
                surface.text(ln, 24, notes_top + 13 + i * 5)

        # Footer
        surface.set_draw_color(primary)
        surface.set_line_width(0.3)
        surface.line(70, self.FOOTER_Y - 6, 140, self.FOOTER_Y - 6)
        surface.set_text_color(DARK_TEXT)
        surface.set_font(fonts.small)
        surface.text("Thank you for your business.", 105, self.FOOTER_Y, align="center")

    def _column_rules(self, surface, y, h) -> None:
        for _, right in self.COLUMNS[:-1]:
            surface.line(right, y, right, y + h)

    def _row_text(self, surface, y, cells, size, bold_last: bool = False) -> None:
        (d_l, _), (q_l, q_r), (r_l, r_r), (_, a_r) = self.COLUMNS
        surface.text(cells[0], d_l + 3, y)
        surface.text(cells[1], (q_l + q_r) / 2, y, align="center")
        surface.text(cells[2], (r_l + r_r) / 2, y, align="center")
        if bold_last:
            surface.set_font(size, bold=True)
        surface.text(cells[3], a_r - 3, y, align="right")


# -----------------------------
# Minimal
# -----------------------------
class MinimalTemplate:
    name = "minimal"

    DESC_MAX = 40
    ADDRESS_MAX = 40
    NOTES_MAX_LINES = 4
    NOTE_MAX = 90

    HEADER_H = 10
    ROW_H = 9
    FOOTER_Y = 285

    def generate(self, surface, invoice: InvoiceRenderData, issuer: Issuer, config: TemplateConfig) -> None:
        primary = config.primary_rgb()
        accent = config.accent_rgb()
        fonts = config.fonts

        # Header: wordmark with a thin accent underline, no fill
        surface.set_text_color(primary)
        surface.set_font(fonts.header)
        surface.text("Invoice", 20, 30)
        title_w = surface.text_width("Invoice")
        surface.set_draw_color(accent)
        surface.set_line_width(0.4)
        surface.line(20, 33, 20 + title_w, 33)

        if config.logo is not None:
            add_logo(surface, config, 160, 30, 30, 12)

        # Issuer
        surface.set_text_color(BLACK)
        surface.set_font(fonts.body, bold=True)
        surface.text(issuer.display_name(), 20, 45)
        y_pos = 51

        surface.set_font(fonts.small)
        surface.set_text_color(MUTED_TEXT)
        contact = " • ".join(
            v for v in ((issuer.email or "").strip(), (issuer.business_phone or "").strip()) if v
        )
        if contact:
            surface.text(contact, 20, y_pos)
            y_pos += 5
        for ln in split_address(issuer.business_address):
            surface.text(ln, 20, y_pos)
            y_pos += 4.5
        if (issuer.tax_id or "").strip():
            surface.text(f"Tax ID: {issuer.tax_id}", 20, y_pos)
            y_pos += 4.5

        # Invoice details, right aligned opposite the issuer
        surface.set_text_color(BLACK)
        surface.set_font(fonts.small, bold=True)
        surface.text(f"#{invoice.invoice_number}", 190, 45, align="right")
        surface.set_font(fonts.small)
        surface.set_text_color(MUTED_TEXT)
        surface.text(f"Issued {format_date(invoice.issue_date)}", 190, 51, align="right")
        surface.set_text_color(accent)
        surface.set_font(fonts.small, bold=True)
        surface.text(f"Due {format_date(invoice.due_date)}", 190, 57, align="right")

        # Bill to
        client = invoice.client
        y_pos = max(y_pos, 57) + 12
        surface.set_text_color(primary)
        surface.set_font(fonts.small)
        surface.text("To", 20, y_pos)
        surface.set_text_color(BLACK)
        surface.set_font(fonts.body, bold=True)
        surface.text(truncate(client.name, self.ADDRESS_MAX), 20, y_pos + 7)
        y_pos += 13

        surface.set_font(fonts.small)
        surface.set_text_color(MUTED_TEXT)
        for ln in split_address(client.address):
            surface.text(truncate(ln, self.ADDRESS_MAX), 20, y_pos)
            y_pos += 4.5
        if (client.email or "").strip():
            surface.text(client.email, 20, y_pos)
            y_pos += 4.5
        if (client.phone or "").strip():
            surface.text(client.phone, 20, y_pos)
            y_pos += 4.5

        # Item table: whitespace only, one accent rule under the labels
        table_top = y_pos + 10
        table_h = self.HEADER_H + len(invoice.items) * self.ROW_H
        table_end = table_top + table_h

        surface.set_text_color(MUTED_TEXT)
        surface.set_font(fonts.small)
        surface.text("Description", 20, table_top + 5)
        surface.text("Qty", 125, table_top + 5, align="right")
        surface.text("Rate", 155, table_top + 5, align="right")
        surface.text("Amount", 190, table_top + 5, align="right")
        surface.set_draw_color(accent)
        surface.set_line_width(0.3)
        surface.line(20, table_top + 8, 190, table_top + 8)

        for i, item in enumerate(invoice.items):
            text_y = table_top + self.HEADER_H + i * self.ROW_H + 6
            surface.set_text_color(BLACK)
            surface.set_font(fonts.small)
            surface.text(truncate(item.description, self.DESC_MAX), 20, text_y)
            surface.text(str(item.quantity or "0"), 125, text_y, align="right")
            surface.text(format_currency(item.rate), 155, text_y, align="right")
            surface.set_font(fonts.small, bold=True)
            surface.text(format_currency(item.amount), 190, text_y, align="right")

        # Totals
        y_pos = table_end + 12
        for label, value, is_discount in _totals_lines(invoice):
            surface.set_font(fonts.small)
            surface.set_text_color(accent if is_discount else MUTED_TEXT)
            surface.text(label.rstrip(":"), 140, y_pos)
            surface.set_text_color(accent if is_discount else BLACK)
            surface.text(value, 190, y_pos, align="right")
            y_pos += 7

        y_pos += 5
        surface.set_text_color(accent)
        surface.set_font(fonts.body + 4, bold=True)
        surface.text("Total", 140, y_pos)
        surface.text(format_currency(invoice.total), 190, y_pos, align="right")

        # Notes
        note_lines = _note_lines(invoice.notes, self.NOTES_MAX_LINES, self.NOTE_MAX)
        if note_lines:
            y_pos += 18
            surface.set_text_color(MUTED_TEXT)
            surface.set_font(fonts.small)
            surface.text("Notes", 20, y_pos)
            surface.set_text_color(BLACK)
            for i, ln in enumerate(note_lines):
                surface.text(ln, 20, y_pos + 7 + i * 6)

        # Footer
        surface.set_text_color(MUTED_TEXT)
        surface.set_font(fonts.small)
        surface.text("Thank you", 105, self.FOOTER_Y, align="center")


# -----------------------------
# Registry
# -----------------------------
class TemplateRegistry:
    """
    Name -> template lookup. Unknown names resolve to the default template
    instead of failing, since a stored preference may outlive its template.
    """

    def __init__(self, templates: Iterable[InvoiceTemplate] = (), default_name: str = DEFAULT_TEMPLATE):
        self._templates: dict[str, InvoiceTemplate] = {}
        self.default_name = default_name
        for t in templates:
            self.register(t)

    def register(self, template: InvoiceTemplate) -> None:
        self._templates[template.name] = template

    def get(self, name: str | None) -> InvoiceTemplate:
        template = self._templates.get(name or "")
        if template is None:
            logger.debug("Unknown invoice template %r, using %r", name, self.default_name)
            return self._templates[self.default_name]
        return template

    def list(self) -> list[str]:
        return list(self._templates)


def default_registry() -> TemplateRegistry:
    return TemplateRegistry([ModernTemplate(), ClassicTemplate(), MinimalTemplate()])


def get_template_info() -> list[dict]:
    return [dict(info) for info in TEMPLATE_INFO]
