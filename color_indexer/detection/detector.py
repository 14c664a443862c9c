"""Color token detection over document text.

Detection runs a fixed sequence of independent passes over one immutable
text snapshot. Each pass yields candidate records; the merge step keeps the
first record for every range, in pass order, so a span claimed by an earlier
pass (a hex literal, say) is never reported twice.

Pass order:
1. Hex literals
2. ``rgb()`` / ``rgba()`` / ``hsl()`` / ``hsla()`` functions
3. Compact HSL triples (``210 40% 96%``)
4. ``var(--name)`` references
5. ``var()`` references wrapped in a color function
6. Utility classes such as ``bg-primary`` mapped to ``--primary``
7. ``class="..."`` tokens with a registered class color
8. Custom property declarations with a color value
"""

import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from ..colors.parser import parse_color
from ..document import Document, LineIndex
from ..indexer_logging import LogCategory, get_category_logger
from ..models import DetectionRecord, NormalizedColor, VariableDeclaration
from ..registry import Registry
from ..stylesheet.indexer import StylesheetIndexer, iter_custom_properties
from ..stylesheet.resolver import VariableResolver
from . import patterns

logger = get_category_logger(LogCategory.DETECTOR)

INLINE_SOURCE_ID = "<inline>"


@dataclass(frozen=True)
class ScanContext:
    """Everything a pass may read. Shared by all passes, never modified."""

    text: str
    lines: LineIndex
    declarations: tuple[VariableDeclaration, ...]
    declaration_offsets: tuple[int, ...]
    local_lookup: dict[str, list[VariableDeclaration]]


class TokenDetector:
    """Finds color tokens in text using a registry for references."""

    def __init__(self, registry: Registry, resolver: VariableResolver | None = None):
        self.registry = registry
        self.resolver = resolver or VariableResolver(registry)
        self._indexer = StylesheetIndexer(registry, self.resolver)
        self._passes: tuple[Callable[[ScanContext], Iterator[DetectionRecord]], ...] = (
            self._scan_hex,
            self._scan_functions,
            self._scan_compact_hsl,
            self._scan_variables,
            self._scan_wrapped_variables,
            self._scan_tailwind_classes,
            self._scan_class_attributes,
            self._scan_declarations,
        )

    def detect(self, text: str, source_id: str = INLINE_SOURCE_ID) -> list[DetectionRecord]:
        """Detect every color token in ``text``.

        Args:
            text: Document text.
            source_id: Identity attached to declarations found in the text.

        Returns:
            Records in pass order, at most one per range.
        """
        start_time = time.time()
        context = self._snapshot(text, source_id)
        records = merge_by_range(scan(context) for scan in self._passes)

        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            f"Detected {len(records)} colors in {source_id}",
            extra={
                "operation": "detect",
                "file_path": source_id,
                "record_count": len(records),
                "duration_ms": round(duration_ms, 2),
            },
        )
        return records

    def detect_document(self, document: Document) -> list[DetectionRecord]:
        return self.detect(document.get_text(), document.uri)

    def _snapshot(self, text: str, source_id: str) -> ScanContext:
        lines = LineIndex(text)
        declarations, lookup = self._indexer.extract_variables(source_id, text, lines)
        offsets = tuple(prop.start for prop in iter_custom_properties(text))
        return ScanContext(text, lines, tuple(declarations), offsets, lookup)

    # Literal passes

    def _scan_hex(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for match in patterns.HEX_COLOR.finditer(context.text):
            yield from self._literal(context, match.start(), match.group(0))

    def _scan_functions(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for match in patterns.FUNCTION_COLOR.finditer(context.text):
            yield from self._literal(context, match.start(), match.group(0))

    def _scan_compact_hsl(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for match in patterns.COMPACT_HSL.finditer(context.text):
            yield from self._literal(context, match.start(1), match.group(1))

    def _literal(
        self, context: ScanContext, start: int, text: str
    ) -> Iterator[DetectionRecord]:
        parsed = parse_color(text)
        if parsed is None:
            return
        yield DetectionRecord(
            range=context.lines.range_of(start, start + len(text)),
            original_text=text,
            normalized_color=parsed.css_string,
            color=parsed,
            format=parsed.original_format,
        )

    # Reference passes

    def _scan_variables(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for match in patterns.CSS_VAR.finditer(context.text):
            name = match.group(1)
            parsed = self._resolve_variable(context, name)
            if parsed is None:
                continue
            yield self._record(
                context,
                match.start(),
                match.group(0),
                parsed,
                is_css_variable=True,
                variable_name=name,
            )

    def _scan_wrapped_variables(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for match in patterns.CSS_VAR_IN_FUNCTION.finditer(context.text):
            function, name = match.group(1), match.group(2)
            parsed = self._resolve_variable(context, name, wrap_in=function)
            if parsed is None:
                continue
            yield self._record(
                context,
                match.start(),
                match.group(0),
                parsed,
                is_css_variable=True,
                variable_name=name,
                is_wrapped_in_function=True,
            )

    def _scan_tailwind_classes(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for match in patterns.TAILWIND_CLASS.finditer(context.text):
            name = f"--{match.group(2)}"
            parsed = self._resolve_variable(context, name)
            if parsed is None:
                continue
            yield self._record(
                context,
                match.start(),
                match.group(0),
                parsed,
                is_css_variable=True,
                variable_name=name,
                is_tailwind_class=True,
                tailwind_class=match.group(0),
            )

    def _scan_class_attributes(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for match in patterns.CLASS_ATTRIBUTE.finditer(context.text):
            offset = match.start(1)
            for token in patterns.CLASS_TOKEN.finditer(match.group(1)):
                class_name = token.group(0)
                declarations = self.registry.get_class(class_name)
                if not declarations:
                    continue

                # First registered declaration wins, regardless of specificity
                declaration = declarations[0]
                value = declaration.resolved_value or self.resolver.resolve(
                    declaration.value
                )
                parsed = parse_color(value)
                if parsed is None:
                    continue
                yield self._record(
                    context,
                    offset + token.start(),
                    class_name,
                    parsed,
                    is_css_class=True,
                    css_class_name=class_name,
                )

    def _scan_declarations(self, context: ScanContext) -> Iterator[DetectionRecord]:
        for declaration, start in zip(
            context.declarations, context.declaration_offsets, strict=True
        ):
            parsed = parse_color(self.resolver.resolve_declaration(declaration))
            if parsed is None:
                continue
            yield self._record(
                context,
                start,
                declaration.name,
                parsed,
                is_css_variable=True,
                variable_name=declaration.name,
                is_css_variable_declaration=True,
            )

    def _resolve_variable(
        self, context: ScanContext, name: str, wrap_in: str | None = None
    ) -> NormalizedColor | None:
        declaration = self.resolver.preferred_declaration(name, context.local_lookup)
        if declaration is None:
            return None

        value = self.resolver.resolve_declaration(declaration, context.local_lookup)
        if wrap_in:
            value = f"{wrap_in}({value})"
        return parse_color(value)

    @staticmethod
    def _record(
        context: ScanContext,
        start: int,
        text: str,
        parsed: NormalizedColor,
        **flags,
    ) -> DetectionRecord:
        return DetectionRecord(
            range=context.lines.range_of(start, start + len(text)),
            original_text=text,
            normalized_color=parsed.css_string,
            color=parsed,
            format=parsed.original_format,
            **flags,
        )


def merge_by_range(
    passes: Iterable[Iterable[DetectionRecord]],
) -> list[DetectionRecord]:
    """Concatenate pass results keeping the first record per range."""
    seen: set[str] = set()
    merged: list[DetectionRecord] = []
    for records in passes:
        for record in records:
            key = record.range.key
            if key in seen:
                continue
            seen.add(key)
            merged.append(record)
    return merged
