# render_support.py
"""
Helpers shared by every invoice template: color conversion, the per-render
TemplateConfig value object, logo placement, and the defensive text/number
formatting the templates rely on so a bad stored value never aborts a render.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")

# Raster formats the drawing surface can embed directly.
EMBEDDABLE_LOGO_FORMATS = {"JPEG", "JPG", "PNG", "WEBP"}

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def hex_to_rgb(hex_color) -> tuple[int, int, int]:
    m = _HEX_RE.fullmatch(str(hex_color or ""))
    if not m:
        return BLACK
    return (int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16))


# -----------------------------
# Template config
# -----------------------------
@dataclass(frozen=True)
class ThemeColors:
    primary: str = "#3b82f6"
    secondary: str = "#1e40af"
    accent: str = "#10b981"


@dataclass(frozen=True)
class FontSizes:
    header: float = 24
    title: float = 16
    body: float = 11
    small: float = 9


@dataclass(frozen=True)
class LogoImage:
    """Embeddable image payload: upper-cased format tag plus raw bytes."""
    format: str
    data: bytes = b""


@dataclass(frozen=True)
class TemplateConfig:
    colors: ThemeColors = field(default_factory=ThemeColors)
    logo: Optional[LogoImage] = None
    fonts: FontSizes = field(default_factory=FontSizes)

    def primary_rgb(self) -> tuple[int, int, int]:
        return hex_to_rgb(self.colors.primary)

    def secondary_rgb(self) -> tuple[int, int, int]:
        return hex_to_rgb(self.colors.secondary)

    def accent_rgb(self) -> tuple[int, int, int]:
        return hex_to_rgb(self.colors.accent)


# -----------------------------
# Number / text helpers
# -----------------------------
def safe_float(value, default: float = 0.0) -> float:
    try:
        f = float(str(value).strip()) if value is not None else default
    except (TypeError, ValueError):
        return default
    return f if math.isfinite(f) else default


def format_currency(amount) -> str:
    return f"${safe_float(amount):.2f}"


def format_rate(rate) -> str:
    # "Tax (8.3%)" style labels always carry one decimal
    return f"{safe_float(rate):.1f}"


def split_address(address: str | None) -> list[str]:
    return [ln for ln in str(address or "").split("\n") if ln.strip()]


def truncate(text, limit: int) -> str:
    s = str(text or "")
    return s[:limit] + "..." if len(s) > limit else s


def format_date(value) -> str:
    """M/D/YYYY, tolerating date/datetime objects and ISO strings."""
    if isinstance(value, (datetime, date)):
        return f"{value.month}/{value.day}/{value.year}"
    raw = str(value or "").strip()
    if not raw:
        return ""
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


# -----------------------------
# Logo placement
# -----------------------------
def add_logo(surface, config: TemplateConfig, x, y, max_width=40, max_height=20) -> None:
    """
    Draw the issuer logo in the box whose bottom-left corner is (x, y).
    Unsupported formats and embedding failures fall back to the placeholder,
    so a broken logo never leaves a gap or fails the render.
    """
    logo = config.logo
    if logo is None:
        return

    fmt = (logo.format or "").upper()
    if fmt not in EMBEDDABLE_LOGO_FORMATS:
        logger.debug("Logo format %r not embeddable, drawing placeholder", fmt)
        create_logo_placeholder(surface, config, x, y, max_width, max_height)
        return

    try:
        surface.add_image(logo, x, y - max_height, max_width, max_height)
    except Exception as e:
        logger.warning("Failed to add logo to PDF: %s", e)
        create_logo_placeholder(surface, config, x, y, max_width, max_height)


def create_logo_placeholder(surface, config: TemplateConfig, x, y, max_width, max_height) -> None:
    surface.set_fill_color(config.primary_rgb())
    surface.rounded_rect(x, y - max_height, max_width, max_height, 3, "F")

    surface.set_draw_color(config.secondary_rgb())
    surface.set_line_width(0.5)
    surface.rounded_rect(x, y - max_height, max_width, max_height, 3, "S")

    surface.set_text_color(WHITE)
    surface.set_font(min(max_height * 0.6, 16), bold=True)
    surface.text("LOGO", x + max_width / 2, y - max_height / 2 + 2, align="center")
