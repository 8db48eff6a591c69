# surface.py
from __future__ import annotations

import io

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

PAGE_W_MM = 210.0
PAGE_H_MM = 297.0

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"


def _rgb01(rgb) -> tuple[float, float, float]:
    r, g, b = rgb
    return (r / 255.0, g / 255.0, b / 255.0)


class PdfSurface:
    """
    Single-page drawing surface backed by a reportlab canvas.

    Templates work in millimetres with the origin at the top-left corner and y
    growing down the page (text y is the baseline). This class flips that into
    reportlab's bottom-left point space. Fill, stroke and text colors are kept
    separately because reportlab paints text with the fill color.
    """

    def __init__(self, title: str | None = None):
        self._buf = io.BytesIO()
        self._pdf = canvas.Canvas(self._buf, pagesize=A4)
        if title:
            self._pdf.setTitle(title)
        self._page_h = A4[1]

        self._fill = (0, 0, 0)
        self._text = (0, 0, 0)
        self._font = FONT_REGULAR
        self._size = 10.0
        self._finished = False

        self._pdf.setFont(self._font, self._size)

    # -----------------------------
    # State
    # -----------------------------
    def set_fill_color(self, rgb) -> None:
        self._fill = tuple(rgb)

    def set_draw_color(self, rgb) -> None:
        self._pdf.setStrokeColorRGB(*_rgb01(rgb))

    def set_text_color(self, rgb) -> None:
        self._text = tuple(rgb)

    def set_font(self, size, bold: bool = False) -> None:
        self._font = FONT_BOLD if bold else FONT_REGULAR
        self._size = float(size)
        self._pdf.setFont(self._font, self._size)

    def set_line_width(self, width) -> None:
        self._pdf.setLineWidth(float(width) * mm)

    # -----------------------------
    # Shapes
    # -----------------------------
    def _y(self, y_mm) -> float:
        return self._page_h - float(y_mm) * mm

    def rect(self, x, y, w, h, style: str = "S") -> None:
        fill, stroke = self._paint_flags(style)
        if fill:
            self._pdf.setFillColorRGB(*_rgb01(self._fill))
        self._pdf.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=stroke, fill=fill)

    def rounded_rect(self, x, y, w, h, r, style: str = "S") -> None:
        fill, stroke = self._paint_flags(style)
        if fill:
            self._pdf.setFillColorRGB(*_rgb01(self._fill))
        self._pdf.roundRect(x * mm, self._y(y + h), w * mm, h * mm, r * mm, stroke=stroke, fill=fill)

    def line(self, x1, y1, x2, y2) -> None:
        self._pdf.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    @staticmethod
    def _paint_flags(style: str) -> tuple[int, int]:
        style = (style or "S").upper()
        return (1 if "F" in style else 0, 1 if ("S" in style or "D" in style) else 0)

    # -----------------------------
    # Text
    # -----------------------------
    def text(self, value, x, y, align: str = "left") -> None:
        s = str(value)
        self._pdf.setFillColorRGB(*_rgb01(self._text))
        self._pdf.setFont(self._font, self._size)
        if align == "center":
            self._pdf.drawCentredString(x * mm, self._y(y), s)
        elif align == "right":
            self._pdf.drawRightString(x * mm, self._y(y), s)
        else:
            self._pdf.drawString(x * mm, self._y(y), s)

    def text_width(self, value) -> float:
        return stringWidth(str(value), self._font, self._size) / mm

    def split_text_to_size(self, value, width) -> list[str]:
        return simpleSplit(str(value or ""), self._font, self._size, width * mm)

    # -----------------------------
    # Images
    # -----------------------------
    def add_image(self, logo, x, y, w, h) -> None:
        """Fit the image inside the (x, y, w, h) box, keeping its aspect ratio."""
        img = ImageReader(io.BytesIO(logo.data))
        iw, ih = img.getSize()
        scale = min(w / float(iw), h / float(ih))
        draw_w = float(iw) * scale
        draw_h = float(ih) * scale
        top = y + (h - draw_h) / 2
        self._pdf.drawImage(img, x * mm, self._y(top + draw_h), width=draw_w * mm, height=draw_h * mm, mask="auto")

    # -----------------------------
    # Output
    # -----------------------------
    def output(self) -> bytes:
        if not self._finished:
            self._pdf.showPage()
            self._pdf.save()
            self._finished = True
        return self._buf.getvalue()
