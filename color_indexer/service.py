"""Service facade wiring registry, indexer, detector and cache together.

Hosts talk to ``ColorService``: it decides whether a document is considered
at all, keeps stylesheet documents indexed (once per version), serves
detection results from the version-keyed cache and exposes the parsing and
formatting helpers.
"""

from collections.abc import Sequence
from pathlib import Path

from .cache import ResultCache
from .colors.formatter import FormatConversion, collect_format_conversions, format_by_format
from .colors.insights import AccessibilityReport, accessibility_report
from .colors.parser import parse_color
from .config import ColorIndexerConfig
from .detection.detector import TokenDetector
from .document import Document, DocumentSnapshot, is_stylesheet_document, snapshot
from .indexer_logging import get_logger
from .models import ColorFormat, DetectionRecord, NormalizedColor, Position
from .registry import Registry
from .scheduler import ApplyFn, RefreshScheduler
from .stylesheet.indexer import StylesheetIndexer
from .stylesheet.resolver import VariableResolver
from .workspace import IndexingReport, WorkspaceIndexer

logger = get_logger()


class ColorService:
    """Entry point for color detection in host documents."""

    def __init__(
        self,
        config: ColorIndexerConfig | None = None,
        registry: Registry | None = None,
    ):
        self.config = config or ColorIndexerConfig()
        self.registry = registry if registry is not None else Registry()
        self.resolver = VariableResolver(self.registry)
        self.indexer = StylesheetIndexer(self.registry, self.resolver)
        self.detector = TokenDetector(self.registry, self.resolver)
        self.cache = ResultCache()

        # uri -> version last indexed
        self._indexed_versions: dict[str, int] = {}

    # Documents

    def should_process(self, document: Document) -> bool:
        return self.config.should_process(document.language_id)

    def detect(self, document: Document) -> list[DetectionRecord]:
        """Color records for a document, computed at most once per version."""
        if not self.should_process(document):
            return []
        self.ensure_document_indexed(document)

        cached = self.cache.get(document.uri, document.version)
        if cached is not None:
            return cached

        records = self.detector.detect_document(document)
        self.cache.set(document.uri, document.version, records)
        return records

    async def detect_async(self, document: Document) -> list[DetectionRecord]:
        """Like ``detect``; concurrent calls for one version share the work."""
        if not self.should_process(document):
            return []
        self.ensure_document_indexed(document)
        captured = snapshot(document)
        return await self.cache.get_or_compute(
            captured.uri, captured.version, lambda: self.compute(captured)
        )

    async def compute(self, document: Document | DocumentSnapshot) -> list[DetectionRecord]:
        """Detection pass used by the cache and the refresh scheduler."""
        return self.detector.detect_document(document)

    def ensure_document_indexed(self, document: Document) -> bool:
        """Index a stylesheet document unless this version already is.

        Returns:
            True if the document was (re)indexed.
        """
        if not is_stylesheet_document(document):
            return False
        if self._indexed_versions.get(document.uri) == document.version:
            return False
        self.index_stylesheet(document)
        return True

    def index_stylesheet(self, document: Document) -> None:
        """Replace a stylesheet document's registry contribution."""
        self.indexer.index_document(document)
        self._indexed_versions[document.uri] = document.version
        # Any cached result may reference the changed declarations
        self.cache.invalidate()

    def remove_stylesheet(self, uri: str) -> None:
        """Forget a deleted or closed stylesheet."""
        logger.debug(f"Removing stylesheet {uri}")
        self.indexer.remove(uri)
        self._indexed_versions.pop(uri, None)
        self.cache.invalidate()

    def index_workspace(self, root: Path | str) -> IndexingReport:
        """Rebuild the registry from the stylesheets under ``root``."""
        report = WorkspaceIndexer(root, self.indexer, self.config).index_all()
        self._indexed_versions.clear()
        self.cache.invalidate()
        return report

    async def index_workspace_async(self, root: Path | str) -> IndexingReport:
        report = await WorkspaceIndexer(root, self.indexer, self.config).index_all_async()
        self._indexed_versions.clear()
        self.cache.invalidate()
        return report

    def create_scheduler(self, apply: ApplyFn) -> RefreshScheduler:
        """Refresh scheduler delivering this service's results to ``apply``."""

        async def compute(document: DocumentSnapshot) -> list[DetectionRecord]:
            self.ensure_document_indexed(document)
            return await self.compute(document)

        return RefreshScheduler(
            self.cache,
            compute,
            apply,
            debounce_seconds=self.config.refresh_debounce_seconds,
            chunk_size=self.config.apply_chunk_size,
            yield_seconds=self.config.apply_yield_seconds,
            should_refresh=self.should_process,
        )

    # Colors

    def parse_color(self, text: str) -> NormalizedColor | None:
        return parse_color(text.strip())

    def format_color(self, color: NormalizedColor, fmt: ColorFormat | str) -> str | None:
        return format_by_format(color, fmt)

    def format_conversions(
        self, color: NormalizedColor, primary_format: ColorFormat | None = None
    ) -> list[FormatConversion]:
        return collect_format_conversions(color, primary_format or color.original_format)

    def accessibility(self, color: NormalizedColor) -> AccessibilityReport:
        return accessibility_report(color)

    def palette(self) -> list[NormalizedColor]:
        """Distinct colors of every registered variable that resolves to one.

        Ordered by variable name; each variable contributes its default
        (lowest specificity) declaration.
        """
        seen: set[str] = set()
        colors: list[NormalizedColor] = []
        for name in sorted(self.registry.all_variable_names()):
            declaration = self.resolver.preferred_declaration(name)
            if declaration is None:
                continue
            parsed = parse_color(self.resolver.resolve_declaration(declaration))
            if parsed is None or parsed.css_string in seen:
                continue
            seen.add(parsed.css_string)
            colors.append(parsed)
        return colors

    @staticmethod
    def record_at(
        records: Sequence[DetectionRecord], position: Position
    ) -> DetectionRecord | None:
        """The first record whose range contains ``position``."""
        return next((record for record in records if record.range.contains(position)), None)

    def get_stats(self) -> dict[str, object]:
        return {
            "variables": self.registry.variable_count,
            "classes": self.registry.class_count,
            "sources": len(self.registry.sources()),
            "cache": self.cache.get_stats(),
        }

