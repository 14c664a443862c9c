"""Stylesheet indexer for custom properties and class colors.

Extracts ``--name: value`` declarations and ``.class { color: ... }`` rules
from stylesheet text with best-effort pattern matching (there is no CSS
grammar here), attaches selector context to each declaration and publishes
the result to the registry, replacing whatever the same source contributed
before.
"""

import dataclasses
import re
from collections.abc import Iterator
from typing import NamedTuple

from ..colors.parser import parse_color
from ..document import Document, LineIndex
from ..indexer_logging import LogCategory, get_category_logger
from ..models import (
    ClassColorDeclaration,
    ContextType,
    SelectorContext,
    ThemeHint,
    VariableDeclaration,
)
from ..registry import Registry
from .resolver import LocalDeclarations, VariableResolver

logger = get_category_logger(LogCategory.INDEXER)

# A declaration runs to ";" and may wrap over several lines. Without a ";"
# before the next "}", blank line or declaration it ends before "}" or at the
# end of its line, which covers indentation-based dialects such as Sass.
# A value never continues onto a line that declares a custom property.
_VALUE_CHAR = (
    r"(?:(?!\n(?:[ \t]*(?:\n|[\w-]+[ \t]*:)|[^\n]*?(?<![\w-])--[\w-]+[ \t]*:))"
    r"[^;{}])"
)
CUSTOM_PROPERTY_PATTERN = re.compile(
    r"(?<![\w-])(--[\w-]+)\s*:\s*"
    rf"(?:({_VALUE_CHAR}+?)\s*;|([^;{{}}\n]+?)[ \t]*(?:(?=\}})|$))",
    re.MULTILINE,
)
CLASS_COLOR_PATTERN = re.compile(
    r"\.([.\w-]+)\s*\{[^}]*?(?<![\w-])"
    r"(color|background-color|border-color|background)\s*:\s*([^;}]+)[;}]"
)
MEDIA_QUERY_PATTERN = re.compile(r"@media\s+([^{]+)")
CLASS_TOKEN_PATTERN = re.compile(r"\.-?[_a-zA-Z][\w-]*")
ID_TOKEN_PATTERN = re.compile(r"#-?[_a-zA-Z][\w-]*")

DEFAULT_SELECTOR = ":root"

SPECIFICITY_ROOT = 1
SPECIFICITY_CLASS_BASE = 10
SPECIFICITY_CLASS_MULTIPLE = 10
SPECIFICITY_ID = 100

DARK_MARKERS = (".dark", '[data-theme="dark"]', '[data-mode="dark"]')
LIGHT_MARKERS = (".light", '[data-theme="light"]')


class CustomPropertyMatch(NamedTuple):
    """A custom property declaration located in text."""

    name: str
    value: str
    start: int  # Offset of the name
    end: int  # Offset just past the name


class ParsedStylesheet(NamedTuple):
    """Declarations extracted from one stylesheet."""

    variables: list[VariableDeclaration]
    classes: list[ClassColorDeclaration]


def iter_custom_properties(text: str) -> Iterator[CustomPropertyMatch]:
    """Yield every ``--name: value`` declaration in ``text``."""
    for match in CUSTOM_PROPERTY_PATTERN.finditer(text):
        value = (match.group(2) or match.group(3)).strip()
        if not value:
            continue
        yield CustomPropertyMatch(match.group(1), value, match.start(1), match.end(1))


def find_containing_selector(text: str, index: int) -> str:
    """Selector of the block enclosing ``index``.

    Scans backwards to the nearest unmatched ``{`` and takes the closest
    non-empty, non-comment text before it. Falls back to ``:root`` when the
    position is not inside a block.
    """
    depth = 0
    brace = -1
    for position in range(min(index, len(text)) - 1, -1, -1):
        char = text[position]
        if char == "}":
            depth += 1
        elif char == "{":
            if depth == 0:
                brace = position
                break
            depth -= 1

    if brace == -1:
        return DEFAULT_SELECTOR

    for line in reversed(text[:brace].split("\n")):
        candidate = re.split(r"[{};]", line)[-1].strip()
        if not candidate or candidate.startswith("/*") or candidate.endswith("*/"):
            continue
        return re.sub(r"\s+", " ", candidate)

    return DEFAULT_SELECTOR


def analyze_context(selector: str) -> SelectorContext:
    """Classify a selector and compute its simplified specificity.

    - ``:root`` / ``html``: root, specificity 1
    - class selectors: 10, plus 10 for every additional class
    - id selectors: 100
    - anything else: 0
    """
    normalized = selector.lower().strip()
    is_root = normalized in (":root", "html")
    class_tokens = len(CLASS_TOKEN_PATTERN.findall(normalized))

    if is_root:
        specificity = SPECIFICITY_ROOT
    elif class_tokens:
        specificity = SPECIFICITY_CLASS_BASE + SPECIFICITY_CLASS_MULTIPLE * (class_tokens - 1)
    elif ID_TOKEN_PATTERN.search(normalized):
        specificity = SPECIFICITY_ID
    else:
        specificity = 0

    if is_root:
        context_type = ContextType.ROOT
    elif class_tokens or "[" in normalized:
        context_type = ContextType.CLASS
    elif "@media" in normalized:
        context_type = ContextType.MEDIA
    else:
        context_type = ContextType.OTHER

    theme_hint = None
    if any(marker in normalized for marker in DARK_MARKERS):
        theme_hint = ThemeHint.DARK
    elif any(marker in normalized for marker in LIGHT_MARKERS):
        theme_hint = ThemeHint.LIGHT

    media_match = MEDIA_QUERY_PATTERN.search(selector)
    media_query = media_match.group(1).strip() if media_match else None

    return SelectorContext(context_type, specificity, theme_hint, media_query)


def build_local_lookup(
    declarations: list[VariableDeclaration],
) -> dict[str, list[VariableDeclaration]]:
    """Group declarations by name, each list sorted by specificity."""
    lookup: dict[str, list[VariableDeclaration]] = {}
    for declaration in declarations:
        lookup.setdefault(declaration.name, []).append(declaration)
    for entries in lookup.values():
        entries.sort(key=lambda decl: decl.context.specificity)
    return lookup


class StylesheetIndexer:
    """Extracts declarations from stylesheets and publishes them to a registry."""

    def __init__(self, registry: Registry, resolver: VariableResolver | None = None):
        self.registry = registry
        self.resolver = resolver or VariableResolver(registry)

    def parse(self, source_id: str, text: str) -> ParsedStylesheet:
        """Extract declarations without touching the registry.

        Variable values are resolved eagerly, preferring declarations from
        the same stylesheet over the registry.
        """
        line_index = LineIndex(text)
        variables, lookup = self.extract_variables(source_id, text, line_index)
        classes = self.extract_class_colors(source_id, text, lookup, line_index)
        return ParsedStylesheet(variables, classes)

    def index(self, source_id: str, text: str) -> ParsedStylesheet:
        """Parse a stylesheet and replace its registry contribution."""
        parsed = self.parse(source_id, text)
        self.registry.replace_for_source(source_id, parsed.variables, parsed.classes)
        logger.debug(
            f"Indexed {source_id}: {len(parsed.variables)} variables, "
            f"{len(parsed.classes)} class colors"
        )
        return parsed

    def index_document(self, document: Document) -> ParsedStylesheet:
        """Index a host document under its URI."""
        return self.index(document.uri, document.get_text())

    def remove(self, source_id: str) -> None:
        """Forget a deleted stylesheet."""
        self.registry.remove_source(source_id)

    def extract_variables(
        self,
        source_id: str,
        text: str,
        line_index: LineIndex | None = None,
    ) -> tuple[list[VariableDeclaration], dict[str, list[VariableDeclaration]]]:
        """Extract custom properties with resolved values.

        Returns:
            The declarations in document order and a name -> declarations
            lookup sorted by specificity.
        """
        line_index = line_index or LineIndex(text)
        raw: list[VariableDeclaration] = []

        for prop in iter_custom_properties(text):
            selector = find_containing_selector(text, prop.start)
            raw.append(
                VariableDeclaration(
                    name=prop.name,
                    value=prop.value,
                    source_id=source_id,
                    line=line_index.position_at(prop.start).line,
                    selector=selector,
                    context=analyze_context(selector),
                )
            )

        lookup = build_local_lookup(raw)
        declarations = [
            dataclasses.replace(
                declaration,
                resolved_value=self.resolver.resolve(
                    declaration.value, lookup, frozenset({declaration.name})
                ),
            )
            for declaration in raw
        ]
        return declarations, build_local_lookup(declarations)

    def extract_class_colors(
        self,
        source_id: str,
        text: str,
        local_declarations: LocalDeclarations | None = None,
        line_index: LineIndex | None = None,
    ) -> list[ClassColorDeclaration]:
        """Extract class rules whose color property resolves to a color.

        Rules whose value is not a color are skipped.
        """
        line_index = line_index or LineIndex(text)
        declarations: list[ClassColorDeclaration] = []

        for match in CLASS_COLOR_PATTERN.finditer(text):
            class_name = match.group(1)
            raw_value = match.group(3).strip()
            resolved = raw_value
            if "var(" in raw_value:
                resolved = self.resolver.resolve(raw_value, local_declarations)

            parsed = parse_color(resolved)
            if parsed is None:
                continue

            declarations.append(
                ClassColorDeclaration(
                    class_name=class_name,
                    property=match.group(2),
                    value=raw_value,
                    source_id=source_id,
                    line=line_index.position_at(match.start()).line,
                    selector=f".{class_name}",
                    resolved_value=parsed.css_string,
                )
            )

        return declarations
