"""Parsing of textual colors into normalized RGBA values.

Supports four syntaxes, tried in this order:
- Hex: ``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa``
- ``rgb()`` / ``rgba()`` with comma or space separated arguments
- ``hsl()`` / ``hsla()`` with comma or space separated arguments
- Compact HSL: ``H S% L%`` with an optional ``/ A``

Anything else yields None. Parsing never raises.
"""

import math
import re

from ..models import FALLBACK_FORMATS, ColorFormat, NormalizedColor, js_round

HEX_PATTERN = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
RGB_FUNCTION_PATTERN = re.compile(r"^rgba?\((.*)\)$", re.IGNORECASE | re.DOTALL)
HSL_FUNCTION_PATTERN = re.compile(r"^hsla?\((.*)\)$", re.IGNORECASE | re.DOTALL)
COMPACT_HSL_PATTERN = re.compile(
    r"^([0-9]+(?:\.[0-9]+)?)\s+([0-9]+(?:\.[0-9]+)?)%\s+([0-9]+(?:\.[0-9]+)?)%"
    r"(?:\s*/\s*(0?\.\d+|1(?:\.0+)?))?$"
)
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def get_format_priority(original: ColorFormat) -> tuple[ColorFormat, ...]:
    """Order of formats to offer for a color written in ``original``.

    The original format comes first, followed by the fallbacks
    rgba, hsla, hexAlpha, rgb, hsl, hex, tailwind without duplicates.
    """
    priority = [original]
    for fmt in FALLBACK_FORMATS:
        if fmt not in priority:
            priority.append(fmt)
    return tuple(priority)


def parse_color(raw: str) -> NormalizedColor | None:
    """Parse a color string.

    Args:
        raw: Text to parse. Surrounding whitespace is ignored.

    Returns:
        The normalized color, or None if the text is not a supported color.
    """
    if not raw:
        return None
    text = raw.strip()

    if HEX_PATTERN.match(text):
        return _parse_hex(text)

    match = RGB_FUNCTION_PATTERN.match(text)
    if match:
        return _parse_rgb_function(text, match.group(1))

    match = HSL_FUNCTION_PATTERN.match(text)
    if match:
        return _parse_hsl_function(text, match.group(1))

    match = COMPACT_HSL_PATTERN.match(text)
    if match:
        return _parse_compact_hsl(match)

    return None


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """Convert HSL (degrees, percent, percent) to integer RGB channels.

    Uses the standard hue-sector algorithm.
    """
    h = hue / 360
    s = saturation / 100
    light = lightness / 100

    if s == 0:
        gray = js_round(light * 255)
        return gray, gray, gray

    def hue_to_channel(p: float, q: float, t: float) -> float:
        if t < 0:
            t += 1
        if t > 1:
            t -= 1
        if t < 1 / 6:
            return p + (q - p) * 6 * t
        if t < 1 / 2:
            return q
        if t < 2 / 3:
            return p + (q - p) * (2 / 3 - t) * 6
        return p

    q = light * (1 + s) if light < 0.5 else light + s - light * s
    p = 2 * light - q

    return (
        js_round(hue_to_channel(p, q, h + 1 / 3) * 255),
        js_round(hue_to_channel(p, q, h) * 255),
        js_round(hue_to_channel(p, q, h - 1 / 3) * 255),
    )


def _parse_hex(text: str) -> NormalizedColor | None:
    digits = text[1:]
    length = len(digits)
    if length in (3, 4):
        digits = "".join(ch * 2 for ch in digits)

    try:
        r = int(digits[0:2], 16)
        g = int(digits[2:4], 16)
        b = int(digits[4:6], 16)
        a = int(digits[6:8], 16) / 255 if length in (4, 8) else 1.0
    except ValueError:
        return None

    original = ColorFormat.HEX_ALPHA if length in (4, 8) else ColorFormat.HEX
    return NormalizedColor(r / 255, g / 255, b / 255, a, get_format_priority(original))


def _split_arguments(body: str) -> list[str]:
    """Split function arguments on commas, slashes and whitespace."""
    return [part for part in re.split(r"[\s,/]+", body) if part]


def _parse_rgb_function(raw: str, body: str) -> NormalizedColor | None:
    parts = _split_arguments(body)
    if len(parts) < 3:
        return None

    channels = [_normalize_rgb_component(part) for part in parts[:3]]
    if any(channel is None for channel in channels):
        return None
    r, g, b = channels

    alpha_part = parts[3] if len(parts) > 3 else None
    alpha = _normalize_alpha(alpha_part)
    has_alpha = raw[:4].lower() == "rgba" or alpha_part is not None or "/" in raw
    original = ColorFormat.RGBA if has_alpha else ColorFormat.RGB
    return NormalizedColor(r / 255, g / 255, b / 255, alpha, get_format_priority(original))


def _parse_hsl_function(raw: str, body: str) -> NormalizedColor | None:
    parts = _split_arguments(body)
    if len(parts) < 3:
        return None

    hue = _leading_float(parts[0])
    saturation = _leading_float(parts[1])
    lightness = _leading_float(parts[2])
    if hue is None or saturation is None or lightness is None:
        return None

    alpha_part = parts[3] if len(parts) > 3 else None
    alpha = _normalize_alpha(alpha_part)
    r, g, b = hsl_to_rgb(
        _clamp(hue, 0, 360), _clamp(saturation, 0, 100), _clamp(lightness, 0, 100)
    )
    has_alpha = raw[:4].lower() == "hsla" or alpha_part is not None or "/" in raw
    original = ColorFormat.HSLA if has_alpha else ColorFormat.HSL
    return NormalizedColor(r / 255, g / 255, b / 255, alpha, get_format_priority(original))


def _parse_compact_hsl(match: re.Match[str]) -> NormalizedColor:
    hue = _clamp(float(match.group(1)), 0, 360)
    saturation = _clamp(float(match.group(2)), 0, 100)
    lightness = _clamp(float(match.group(3)), 0, 100)
    alpha = _normalize_alpha(match.group(4))

    r, g, b = hsl_to_rgb(hue, saturation, lightness)
    return NormalizedColor(
        r / 255, g / 255, b / 255, alpha, get_format_priority(ColorFormat.TAILWIND)
    )


def _normalize_rgb_component(value: str) -> int | None:
    if value.endswith("%"):
        percent = _leading_float(value)
        if percent is None:
            return None
        return js_round(_clamp(percent, 0, 100) / 100 * 255)

    try:
        numeric = float(value)
    except ValueError:
        return None
    if not math.isfinite(numeric):
        return None
    return int(_clamp(js_round(numeric), 0, 255))


def _normalize_alpha(value: str | None) -> float:
    """Alpha as a fraction; missing or unparseable alpha means opaque."""
    if value is None or not value.strip():
        return 1.0

    text = value.strip()
    numeric = _leading_float(text)
    if numeric is None:
        return 1.0
    if text.endswith("%"):
        return _clamp(numeric, 0, 100) / 100
    return _clamp(numeric, 0, 1)


def _leading_float(text: str) -> float | None:
    """Parse the numeric prefix of ``text`` ("120deg" -> 120.0)."""
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    value = float(match.group(1))
    return value if math.isfinite(value) else None


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return min(max(value, minimum), maximum)
