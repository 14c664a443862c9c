"""Color Indexer - color token detection and stylesheet indexing.

Finds colors in arbitrary text (literals, custom property references,
utility classes and class names), resolves references against an index of
stylesheet declarations and converts colors between textual formats.
"""

__version__ = "1.0.0"

from .cache import ResultCache
from .colors import format_by_format, parse_color
from .config import ColorIndexerConfig, load_config
from .detection import TokenDetector
from .document import TextDocument
from .errors import ColorIndexerError, ConfigurationError, StylesheetReadError
from .models import ColorFormat, DetectionRecord, NormalizedColor
from .registry import Registry
from .scheduler import RefreshOutcome, RefreshScheduler, RefreshStatus
from .service import ColorService
from .stylesheet import StylesheetIndexer, VariableResolver
from .workspace import IndexingReport, WorkspaceIndexer

__all__ = [
    "ColorFormat",
    "ColorIndexerConfig",
    "ColorIndexerError",
    "ColorService",
    "ConfigurationError",
    "DetectionRecord",
    "IndexingReport",
    "NormalizedColor",
    "RefreshOutcome",
    "RefreshScheduler",
    "RefreshStatus",
    "Registry",
    "ResultCache",
    "StylesheetIndexer",
    "StylesheetReadError",
    "TextDocument",
    "TokenDetector",
    "VariableResolver",
    "WorkspaceIndexer",
    "format_by_format",
    "load_config",
    "parse_color",
]
