"""Data models for color detection and stylesheet indexing.

Every record produced by the parser, indexer and detector is a frozen
dataclass: results are created fresh on every pass and replaced wholesale,
never mutated.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ColorFormat(str, Enum):
    """Textual color syntaxes a color can be written in."""

    HEX = "hex"
    HEX_ALPHA = "hexAlpha"
    RGB = "rgb"
    RGBA = "rgba"
    HSL = "hsl"
    HSLA = "hsla"
    TAILWIND = "tailwind"  # Compact "H S% L% [/ A]"

    @property
    def requires_opaque(self) -> bool:
        """Whether the format cannot represent a translucent color."""
        return self in (ColorFormat.HEX, ColorFormat.RGB, ColorFormat.HSL)


# Appended after the detected format, in order, skipping duplicates
FALLBACK_FORMATS: tuple[ColorFormat, ...] = (
    ColorFormat.RGBA,
    ColorFormat.HSLA,
    ColorFormat.HEX_ALPHA,
    ColorFormat.RGB,
    ColorFormat.HSL,
    ColorFormat.HEX,
    ColorFormat.TAILWIND,
)


def js_round(value: float) -> int:
    """Round half up, the way color channels are rounded everywhere."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def round2(value: float) -> float:
    """Round to 2 decimals, half up."""
    return js_round(value * 100) / 100


def format_number(value: float) -> str:
    """Render a number without a trailing ".0" (120.0 -> "120")."""
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


@dataclass(frozen=True)
class NormalizedColor:
    """A parsed color with channels in [0, 1].

    Attributes:
        red, green, blue, alpha: Channel values in [0, 1].
        format_priority: Formats the color can be rendered in, the format it
            was written in first.
    """

    red: float
    green: float
    blue: float
    alpha: float = 1.0
    format_priority: tuple[ColorFormat, ...] = field(default=FALLBACK_FORMATS)

    @property
    def original_format(self) -> ColorFormat:
        """The format the color was parsed from."""
        return self.format_priority[0]

    def to_rgb255(self) -> tuple[int, int, int]:
        """Integer channels in 0-255."""
        return (
            js_round(self.red * 255),
            js_round(self.green * 255),
            js_round(self.blue * 255),
        )

    @property
    def css_string(self) -> str:
        """Canonical ``rgb(r, g, b)`` or ``rgba(r, g, b, a)`` string."""
        r, g, b = self.to_rgb255()
        a = round2(self.alpha)
        if a < 1:
            return f"rgba({r}, {g}, {b}, {format_number(a)})"
        return f"rgb({r}, {g}, {b})"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "red": self.red,
            "green": self.green,
            "blue": self.blue,
            "alpha": self.alpha,
            "css": self.css_string,
            "format_priority": [fmt.value for fmt in self.format_priority],
        }


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line/character position in a document."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """Span between two document positions (end exclusive)."""

    start: Position
    end: Position

    @property
    def key(self) -> str:
        """Identity of the span, used to suppress duplicate records."""
        return (
            f"{self.start.line}:{self.start.character}-"
            f"{self.end.line}:{self.end.character}"
        )

    def contains(self, position: Position) -> bool:
        """Whether the position lies inside the span (end inclusive)."""
        return self.start <= position <= self.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": {"line": self.start.line, "character": self.start.character},
            "end": {"line": self.end.line, "character": self.end.character},
        }


class ContextType(str, Enum):
    """Kind of selector a custom property is declared under."""

    ROOT = "root"
    CLASS = "class"
    MEDIA = "media"
    OTHER = "other"


class ThemeHint(str, Enum):
    """Light/dark classification inferred from selector text."""

    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class SelectorContext:
    """Selector metadata used to rank same-name declarations."""

    type: ContextType
    specificity: int
    theme_hint: ThemeHint | None = None
    media_query: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "specificity": self.specificity,
            "theme_hint": self.theme_hint.value if self.theme_hint else None,
            "media_query": self.media_query,
        }


@dataclass(frozen=True)
class VariableDeclaration:
    """A custom property declaration (``--name: value``)."""

    name: str  # Including the leading "--"
    value: str
    source_id: str
    line: int
    selector: str
    context: SelectorContext
    resolved_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "resolved_value": self.resolved_value,
            "source_id": self.source_id,
            "line": self.line,
            "selector": self.selector,
            "context": self.context.to_dict(),
        }


@dataclass(frozen=True)
class ClassColorDeclaration:
    """A class rule that sets a color property."""

    class_name: str  # Without the leading "."
    property: str  # color, background-color, border-color or background
    value: str
    source_id: str
    line: int
    selector: str
    resolved_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "class_name": self.class_name,
            "property": self.property,
            "value": self.value,
            "resolved_value": self.resolved_value,
            "source_id": self.source_id,
            "line": self.line,
            "selector": self.selector,
        }


@dataclass(frozen=True)
class DetectionRecord:
    """A color token found in a document."""

    range: Range
    original_text: str
    normalized_color: str
    color: NormalizedColor
    format: ColorFormat | None = None
    is_css_variable: bool = False
    variable_name: str | None = None
    is_wrapped_in_function: bool = False
    is_tailwind_class: bool = False
    tailwind_class: str | None = None
    is_css_class: bool = False
    css_class_name: str | None = None
    is_css_variable_declaration: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "range": self.range.to_dict(),
            "original_text": self.original_text,
            "normalized_color": self.normalized_color,
            "format": self.format.value if self.format else None,
            "is_css_variable": self.is_css_variable,
            "variable_name": self.variable_name,
            "is_wrapped_in_function": self.is_wrapped_in_function,
            "is_tailwind_class": self.is_tailwind_class,
            "tailwind_class": self.tailwind_class,
            "is_css_class": self.is_css_class,
            "css_class_name": self.css_class_name,
            "is_css_variable_declaration": self.is_css_variable_declaration,
        }
