"""Document abstraction consumed by the detector and indexer.

A host supplies documents as stable text, a monotonically increasing
version and a stable identity. ``TextDocument`` is the in-process
implementation used by the CLI, the workspace indexer and tests.
"""

import bisect
from pathlib import PurePosixPath
from typing import Protocol

from .models import Position, Range

STYLESHEET_LANGUAGES = frozenset({"css", "scss", "sass", "less", "stylus"})
STYLESHEET_EXTENSIONS = frozenset(
    {".css", ".scss", ".sass", ".less", ".styl", ".stylus", ".pcss", ".postcss"}
)

# Language ids guessed from file extensions when a host gives none
EXTENSION_LANGUAGES = {
    ".css": "css",
    ".scss": "scss",
    ".sass": "sass",
    ".less": "less",
    ".styl": "stylus",
    ".stylus": "stylus",
    ".pcss": "postcss",
    ".postcss": "postcss",
    ".html": "html",
    ".htm": "html",
    ".vue": "vue",
    ".svelte": "svelte",
    ".astro": "astro",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".json": "json",
    ".md": "markdown",
    ".py": "python",
}


class Document(Protocol):
    """Interface a host document has to provide."""

    @property
    def uri(self) -> str: ...

    @property
    def version(self) -> int: ...

    @property
    def language_id(self) -> str: ...

    def get_text(self) -> str: ...


class LineIndex:
    """Offset to line/character conversion for one text snapshot."""

    def __init__(self, text: str):
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)
        self._length = len(text)

    def position_at(self, offset: int) -> Position:
        offset = min(max(offset, 0), self._length)
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def offset_at(self, position: Position) -> int:
        if position.line >= len(self._line_starts):
            return self._length
        line = max(position.line, 0)
        return min(self._line_starts[line] + position.character, self._length)

    def range_of(self, start: int, end: int) -> Range:
        return Range(self.position_at(start), self.position_at(end))


class TextDocument:
    """Mutable in-memory document; every edit bumps the version."""

    def __init__(
        self,
        uri: str,
        text: str,
        version: int = 1,
        language_id: str | None = None,
    ):
        self._uri = uri
        self._text = text
        self._version = version
        self._language_id = language_id or guess_language_id(uri)
        self._line_index: LineIndex | None = None

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def version(self) -> int:
        return self._version

    @property
    def language_id(self) -> str:
        return self._language_id

    def get_text(self) -> str:
        return self._text

    def update(self, text: str) -> int:
        """Replace the content and return the new version."""
        self._text = text
        self._version += 1
        self._line_index = None
        return self._version

    def position_at(self, offset: int) -> Position:
        return self._index().position_at(offset)

    def offset_at(self, position: Position) -> int:
        return self._index().offset_at(position)

    def _index(self) -> LineIndex:
        if self._line_index is None:
            self._line_index = LineIndex(self._text)
        return self._line_index

    def __repr__(self) -> str:
        return f"TextDocument(uri={self._uri!r}, version={self._version})"


def guess_language_id(uri: str) -> str:
    """Language id implied by a file extension, "plaintext" otherwise."""
    suffix = PurePosixPath(uri.split("?", 1)[0]).suffix.lower()
    return EXTENSION_LANGUAGES.get(suffix, "plaintext")


def is_stylesheet_document(document: Document) -> bool:
    """Whether a document should be indexed for declarations."""
    if document.language_id in STYLESHEET_LANGUAGES:
        return True
    suffix = PurePosixPath(document.uri.split("?", 1)[0]).suffix.lower()
    return suffix in STYLESHEET_EXTENSIONS


class DocumentSnapshot:
    """Immutable view of a document at one version."""

    __slots__ = ("_uri", "_version", "_language_id", "_text")

    def __init__(self, uri: str, version: int, language_id: str, text: str):
        self._uri = uri
        self._version = version
        self._language_id = language_id
        self._text = text

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def version(self) -> int:
        return self._version

    @property
    def language_id(self) -> str:
        return self._language_id

    def get_text(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"DocumentSnapshot(uri={self._uri!r}, version={self._version})"


def snapshot(document: Document) -> DocumentSnapshot:
    """Capture a document's text, version and identity together."""
    return DocumentSnapshot(
        document.uri, document.version, document.language_id, document.get_text()
    )
