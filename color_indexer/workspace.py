"""Workspace-wide stylesheet indexing.

Finds stylesheets under a project root with gitignore-style include and
exclude patterns, reads them and feeds them to the stylesheet indexer. A
file that cannot be read is logged and reported but never stops the rest of
the run; its registry contribution is simply absent.
"""

import asyncio
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pathspec

from .config import ColorIndexerConfig
from .errors import StylesheetReadError
from .indexer_logging import LogCategory, get_category_logger
from .stylesheet.indexer import ParsedStylesheet, StylesheetIndexer

logger = get_category_logger(LogCategory.WORKSPACE)


def source_id_for(path: Path | str) -> str:
    """Stable identity of a stylesheet on disk (its ``file://`` URI)."""
    return Path(path).resolve().as_uri()


def read_stylesheet(path: Path) -> str:
    """Read a stylesheet as UTF-8 text.

    Raises:
        StylesheetReadError: If the file is missing, unreadable or not UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StylesheetReadError(str(path), str(e)) from e


@dataclass
class IndexingReport:
    """Outcome of a workspace indexing run."""

    files_found: int = 0
    files_indexed: int = 0
    variables: int = 0
    classes: int = 0
    failures: dict[str, str] = field(default_factory=dict)
    truncated: bool = False
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "files_found": self.files_found,
            "files_indexed": self.files_indexed,
            "variables": self.variables,
            "classes": self.classes,
            "failures": dict(self.failures),
            "truncated": self.truncated,
            "duration_ms": round(self.duration_ms, 2),
        }


class WorkspaceIndexer:
    """Indexes every stylesheet of a project into the shared registry."""

    def __init__(
        self,
        root: Path | str,
        indexer: StylesheetIndexer,
        config: ColorIndexerConfig | None = None,
    ):
        self.root = Path(root).resolve()
        self.indexer = indexer
        self.registry = indexer.registry
        self.config = config or ColorIndexerConfig()

        self._include = pathspec.PathSpec.from_lines(
            "gitwildmatch", self.config.stylesheet_patterns
        )
        self._exclude = pathspec.PathSpec.from_lines(
            "gitwildmatch", self.config.exclude_patterns
        )

    def find_stylesheets(self) -> list[Path]:
        """Stylesheets under the root, sorted and capped at the file limit."""
        return self._find()[0]

    def _find(self) -> tuple[list[Path], bool]:
        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            relative_dir = Path(dirpath).relative_to(self.root)

            # Prune excluded directories before descending
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not self._exclude.match_file(self._posix(relative_dir / name) + "/")
            )

            for name in filenames:
                relative = self._posix(relative_dir / name)
                if self._include.match_file(relative) and not self._exclude.match_file(
                    relative
                ):
                    found.append(Path(dirpath) / name)

        found.sort()
        limit = self.config.max_stylesheet_files
        return found[:limit], len(found) > limit

    @staticmethod
    def _posix(path: Path) -> str:
        return path.as_posix().removeprefix("./")

    def index_file(self, path: Path | str) -> ParsedStylesheet:
        """Read one stylesheet and replace its registry contribution.

        Raises:
            StylesheetReadError: If the file cannot be read.
        """
        path = Path(path)
        text = read_stylesheet(path)
        return self.indexer.index(source_id_for(path), text)

    def remove_file(self, path: Path | str) -> None:
        """Drop a deleted stylesheet's declarations."""
        self.indexer.remove(source_id_for(path))

    def index_all(self) -> IndexingReport:
        """Rebuild the registry from every stylesheet in the workspace."""
        start_time = time.time()
        self.registry.clear()
        paths, report = self._start_report()

        for path in paths:
            self._index_one(path, report)

        return self._finish_report(report, start_time)

    async def index_all_async(self) -> IndexingReport:
        """Like ``index_all`` but yields to the event loop between files."""
        start_time = time.time()
        self.registry.clear()
        paths, report = self._start_report()

        for path in paths:
            self._index_one(path, report)
            await asyncio.sleep(0)

        return self._finish_report(report, start_time)

    def _start_report(self) -> tuple[list[Path], IndexingReport]:
        paths, truncated = self._find()
        if truncated:
            logger.warning(
                f"More than {self.config.max_stylesheet_files} stylesheets found, "
                "indexing the first ones only"
            )
        return paths, IndexingReport(files_found=len(paths), truncated=truncated)

    def _index_one(self, path: Path, report: IndexingReport) -> None:
        try:
            self.index_file(path)
            report.files_indexed += 1
        except StylesheetReadError as e:
            logger.error(
                f"Failed to index stylesheet {path}: {e.reason}",
                extra={"file_path": str(path), "operation": "index"},
            )
            report.failures[str(path)] = e.reason

    def _finish_report(self, report: IndexingReport, start_time: float) -> IndexingReport:
        report.variables = self.registry.variable_count
        report.classes = self.registry.class_count
        report.duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Indexed {report.files_indexed}/{report.files_found} stylesheets: "
            f"{report.variables} variables, {report.classes} classes",
            extra={
                "operation": "index_all",
                "record_count": report.files_indexed,
                "duration_ms": round(report.duration_ms, 2),
            },
        )
        return report
