"""Color parsing, formatting and accessibility helpers."""

from .formatter import (
    HSL,
    FormatConversion,
    collect_format_conversions,
    format_by_format,
    rgb_to_hsl,
    to_hex,
    to_hsl,
    to_rgba,
    to_tailwind,
)
from .parser import get_format_priority, hsl_to_rgb, parse_color

__all__ = [
    "HSL",
    "FormatConversion",
    "collect_format_conversions",
    "format_by_format",
    "get_format_priority",
    "hsl_to_rgb",
    "parse_color",
    "rgb_to_hsl",
    "to_hex",
    "to_hsl",
    "to_rgba",
    "to_tailwind",
]
