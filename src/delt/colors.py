"""Colour helpers for member colours stored as hex strings."""

from __future__ import annotations

from textual.color import Color, ColorParseError

GREY = Color(158, 158, 158)


def parse_hex_color(hex_color: str, fallback: Color = GREY) -> Color:
    """Parse ``"#4CAF50"`` or ``"4CAF50"`` into a Color.

    Returns ``fallback`` when the string is not a 6-digit hex colour.
    """
    value = hex_color.strip().removeprefix("#")
    if len(value) != 6:
        return fallback
    try:
        return Color.parse(f"#{value}")
    except ColorParseError:
        return fallback


def color_to_hex(color: Color) -> str:
    return f"#{color.r:02X}{color.g:02X}{color.b:02X}"


def with_opacity(color: Color, opacity: float) -> Color:
    return color.with_alpha(opacity)
