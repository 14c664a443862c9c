"""Formatting of normalized colors back into textual syntaxes.

The inverse of the parser: every format the parser reads can be written
here. ``hex``, ``rgb`` and ``hsl`` cannot express translucency, so
``format_by_format`` returns None for them when alpha < 1.
"""

from dataclasses import dataclass
from typing import NamedTuple

from ..models import ColorFormat, NormalizedColor, format_number, js_round, round2
from .parser import get_format_priority


class HSL(NamedTuple):
    """Hue in degrees (0-360), saturation and lightness in percent."""

    h: float
    s: float
    l: float  # noqa: E741


@dataclass(frozen=True)
class FormatConversion:
    """A color rendered in one format."""

    format: ColorFormat
    value: str


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    """Convert RGB channels (0-255) to HSL.

    Hue comes from whichever channel is largest, checked red, green, blue.

    Example:
        >>> rgb_to_hsl(0, 255, 0)
        HSL(h=120.0, s=100.0, l=50.0)
    """
    r /= 255
    g /= 255
    b /= 255

    maximum = max(r, g, b)
    minimum = min(r, g, b)
    lightness = (maximum + minimum) / 2
    hue = 0.0
    saturation = 0.0

    if maximum != minimum:
        delta = maximum - minimum
        if lightness > 0.5:
            saturation = delta / (2 - maximum - minimum)
        else:
            saturation = delta / (maximum + minimum)

        if maximum == r:
            hue = ((g - b) / delta + (6 if g < b else 0)) * 60
        elif maximum == g:
            hue = ((b - r) / delta + 2) * 60
        else:
            hue = ((r - g) / delta + 4) * 60

    return HSL(hue, saturation * 100, lightness * 100)


def to_hex(color: NormalizedColor, include_alpha: bool = False) -> str:
    """Format as ``#rrggbb`` or, with ``include_alpha``, ``#rrggbbaa``."""
    r, g, b = color.to_rgb255()
    base = f"#{r:02x}{g:02x}{b:02x}"
    if not include_alpha:
        return base
    return f"{base}{js_round(color.alpha * 255):02x}"


def to_rgba(color: NormalizedColor, force_alpha: bool = False) -> str:
    """Format as ``rgb(r, g, b)``, or ``rgba(r, g, b, a)`` when translucent or forced."""
    r, g, b = color.to_rgb255()
    alpha = round2(color.alpha)
    if not force_alpha and alpha == 1:
        return f"rgb({r}, {g}, {b})"
    return f"rgba({r}, {g}, {b}, {format_number(alpha)})"


def _hsl_components(color: NormalizedColor) -> str:
    hsl = rgb_to_hsl(color.red * 255, color.green * 255, color.blue * 255)
    return (
        f"{format_number(round2(hsl.h))} "
        f"{format_number(round2(hsl.s))}% "
        f"{format_number(round2(hsl.l))}%"
    )


def to_hsl(color: NormalizedColor, force_alpha: bool = False) -> str:
    """Format as ``hsl(h s% l%)`` or ``hsla(h s% l% / a)``."""
    base = _hsl_components(color)
    if not force_alpha and color.alpha == 1:
        return f"hsl({base})"
    return f"hsla({base} / {color.alpha:.2f})"


def to_tailwind(color: NormalizedColor) -> str:
    """Format as compact HSL ``h s% l%`` with ``/ a`` when translucent."""
    base = _hsl_components(color)
    if color.alpha == 1:
        return base
    return f"{base} / {color.alpha:.2f}"


def format_by_format(color: NormalizedColor, fmt: ColorFormat | str) -> str | None:
    """Format a color in the given format.

    Returns:
        The formatted string, or None when the format cannot represent the
        color (an opaque-only format and alpha < 1) or is unknown.
    """
    try:
        fmt = ColorFormat(fmt)
    except ValueError:
        return None

    if fmt.requires_opaque and color.alpha != 1:
        return None

    if fmt is ColorFormat.HEX:
        return to_hex(color, include_alpha=False)
    if fmt is ColorFormat.HEX_ALPHA:
        return to_hex(color, include_alpha=True)
    if fmt is ColorFormat.RGB:
        return to_rgba(color, force_alpha=False)
    if fmt is ColorFormat.RGBA:
        return to_rgba(color, force_alpha=True)
    if fmt is ColorFormat.HSL:
        return to_hsl(color, force_alpha=False)
    if fmt is ColorFormat.HSLA:
        return to_hsl(color, force_alpha=True)
    return to_tailwind(color)


def collect_format_conversions(
    color: NormalizedColor,
    primary_format: ColorFormat | None = None,
) -> list[FormatConversion]:
    """Render a color in every applicable format, in priority order.

    Starts from ``primary_format`` (or rgb/rgba depending on alpha), skips
    formats that cannot represent the color and values that only differ
    by case.
    """
    initial = primary_format or (ColorFormat.RGBA if color.alpha < 1 else ColorFormat.RGB)
    seen: set[str] = set()
    results: list[FormatConversion] = []

    for fmt in get_format_priority(initial):
        formatted = format_by_format(color, fmt)
        if not formatted:
            continue
        key = formatted.lower()
        if key in seen:
            continue
        seen.add(key)
        results.append(FormatConversion(fmt, formatted))

    if not results:
        results.append(FormatConversion(ColorFormat.RGBA, to_rgba(color, force_alpha=True)))
    return results
