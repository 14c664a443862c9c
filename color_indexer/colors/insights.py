"""Accessibility and usage helpers for detected colors.

Contrast follows the WCAG 2 relative luminance formula. Usage identifiers
group records that refer to the same thing (a variable, a utility class, a
class name or a literal color) so hosts can count occurrences.
"""

from dataclasses import dataclass, field

from ..models import DetectionRecord, NormalizedColor

WCAG_AAA_NORMAL = 7.0
WCAG_AA_NORMAL = 4.5
WCAG_AA_LARGE = 3.0

WHITE = NormalizedColor(1.0, 1.0, 1.0, 1.0)
BLACK = NormalizedColor(0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class AccessibilityLevel:
    """WCAG level reached by a contrast ratio."""

    level: str
    passes: tuple[str, ...] = ()


@dataclass(frozen=True)
class AccessibilitySample:
    """Contrast of a color against one background."""

    label: str
    background: NormalizedColor
    contrast_ratio: float
    level: AccessibilityLevel


@dataclass
class AccessibilityReport:
    """Contrast samples for a color against reference backgrounds."""

    samples: list[AccessibilitySample] = field(default_factory=list)


def _linearize(channel: float) -> float:
    if channel <= 0.03928:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def relative_luminance(color: NormalizedColor) -> float:
    """WCAG relative luminance in [0, 1]."""
    return (
        0.2126 * _linearize(color.red)
        + 0.7152 * _linearize(color.green)
        + 0.0722 * _linearize(color.blue)
    )


def contrast_ratio(first: NormalizedColor, second: NormalizedColor) -> float:
    """Contrast ratio between two colors, from 1 to 21."""
    lighter = max(relative_luminance(first), relative_luminance(second))
    darker = min(relative_luminance(first), relative_luminance(second))
    return (lighter + 0.05) / (darker + 0.05)


def accessibility_level(ratio: float) -> AccessibilityLevel:
    """Classify a contrast ratio into a WCAG level."""
    if ratio >= WCAG_AAA_NORMAL:
        return AccessibilityLevel(
            "AAA", ("AAA (normal)", "AAA (large)", "AA (normal)", "AA (large)")
        )
    if ratio >= WCAG_AA_NORMAL:
        return AccessibilityLevel("AA", ("AA (normal)", "AA (large)", "AAA (large)"))
    if ratio >= WCAG_AA_LARGE:
        return AccessibilityLevel("AA Large", ("AA (large)",))
    return AccessibilityLevel("Fail")


def accessibility_report(color: NormalizedColor) -> AccessibilityReport:
    """Contrast of ``color`` against white and black backgrounds."""
    report = AccessibilityReport()
    for label, background in (("white", WHITE), ("black", BLACK)):
        ratio = contrast_ratio(color, background)
        report.samples.append(
            AccessibilitySample(label, background, ratio, accessibility_level(ratio))
        )
    return report


def usage_identifier(record: DetectionRecord) -> str:
    """Stable identifier of what a record refers to."""
    if record.is_css_variable and record.variable_name:
        return f"var:{record.variable_name}"
    if record.is_tailwind_class and record.tailwind_class:
        return f"tailwind:{record.tailwind_class}"
    if record.is_css_class and record.css_class_name:
        return f"class:{record.css_class_name}"
    return f"color:{record.normalized_color}"


def usage_count(records: list[DetectionRecord], target: DetectionRecord) -> int:
    """Number of records sharing the target's usage identifier."""
    identifier = usage_identifier(target)
    return sum(1 for record in records if usage_identifier(record) == identifier)
