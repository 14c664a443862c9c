"""Tests for workspace stylesheet discovery and indexing."""

import pytest

from color_indexer.config import ColorIndexerConfig
from color_indexer.errors import StylesheetReadError
from color_indexer.workspace import WorkspaceIndexer, read_stylesheet, source_id_for
from tests.conftest import make_variable


def relative_names(workspace, paths):
    return [path.relative_to(workspace.resolve()).as_posix() for path in paths]


class TestFindStylesheets:
    """Tests for include/exclude pattern matching."""

    def test_excludes_node_modules(self, sample_workspace, indexer):
        workspace = WorkspaceIndexer(sample_workspace, indexer)
        found = relative_names(sample_workspace, workspace.find_stylesheets())
        assert found == ["styles/theme.css", "styles/ui/components.css"]

    def test_file_cap(self, sample_workspace, indexer):
        config = ColorIndexerConfig(max_stylesheet_files=1)
        workspace = WorkspaceIndexer(sample_workspace, indexer, config)

        report = workspace.index_all()

        assert report.files_found == 1
        assert report.truncated

    def test_custom_patterns(self, sample_workspace, indexer):
        (sample_workspace / "styles" / "app.scss").write_text(":root { --s: #000; }")
        config = ColorIndexerConfig(
            stylesheet_patterns=["**/*.scss"], exclude_patterns=[]
        )
        workspace = WorkspaceIndexer(sample_workspace, indexer, config)

        found = relative_names(sample_workspace, workspace.find_stylesheets())
        assert found == ["styles/app.scss"]

    def test_empty_exclude_includes_vendor(self, sample_workspace, indexer):
        config = ColorIndexerConfig(exclude_patterns=[])
        workspace = WorkspaceIndexer(sample_workspace, indexer, config)
        found = relative_names(sample_workspace, workspace.find_stylesheets())
        assert "node_modules/lib/vendor.css" in found


class TestIndexAll:
    """Tests for full workspace indexing."""

    def test_indexes_every_stylesheet(self, sample_workspace, indexer, registry):
        report = WorkspaceIndexer(sample_workspace, indexer).index_all()

        assert report.success
        assert report.files_found == 2
        assert report.files_indexed == 2
        assert report.variables == 4
        assert report.classes == 2
        assert not registry.has_variable("--vendor")

    def test_clears_previous_registry(self, sample_workspace, indexer, registry):
        registry.add_variable("--stale", make_variable("--stale", "#000"))
        WorkspaceIndexer(sample_workspace, indexer).index_all()
        assert not registry.has_variable("--stale")

    def test_unreadable_file_is_isolated(self, sample_workspace, indexer, registry, caplog):
        (sample_workspace / "styles" / "broken.css").write_bytes(b"\xff\xfe:root {}")

        report = WorkspaceIndexer(sample_workspace, indexer).index_all()

        assert not report.success
        assert report.files_indexed == 2
        (failed,) = report.failures
        assert failed.endswith("broken.css")
        assert registry.has_variable("--primary")
        assert "Failed to index stylesheet" in caplog.text

    @pytest.mark.asyncio
    async def test_async_matches_sync(self, sample_workspace, indexer, registry):
        report = await WorkspaceIndexer(sample_workspace, indexer).index_all_async()
        assert report.files_indexed == 2
        assert registry.variable_count == 4

    def test_report_dict(self, sample_workspace, indexer):
        report = WorkspaceIndexer(sample_workspace, indexer).index_all()
        data = report.to_dict()
        assert data["files_indexed"] == 2
        assert data["failures"] == {}
        assert data["truncated"] is False


class TestSingleFiles:
    """Tests for indexing and removing one stylesheet."""

    def test_index_and_remove(self, sample_workspace, indexer, registry):
        workspace = WorkspaceIndexer(sample_workspace, indexer)
        path = sample_workspace / "styles" / "theme.css"

        workspace.index_file(path)
        assert registry.sources() == {source_id_for(path)}

        workspace.remove_file(path)
        assert registry.sources() == set()

    def test_missing_file(self, tmp_path, indexer):
        workspace = WorkspaceIndexer(tmp_path, indexer)
        with pytest.raises(StylesheetReadError) as exc_info:
            workspace.index_file(tmp_path / "missing.css")
        assert exc_info.value.path.endswith("missing.css")

    def test_read_stylesheet(self, tmp_path):
        path = tmp_path / "a.css"
        path.write_text(":root {}", encoding="utf-8")
        assert read_stylesheet(path) == ":root {}"

    def test_source_id_is_file_uri(self, tmp_path):
        assert source_id_for(tmp_path / "a.css").startswith("file://")
