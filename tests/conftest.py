"""
Shared fixtures for the color indexer test suite.

Provides test fixtures for:
- Registry, resolver, indexer and detector instances
- Declaration builders
- Sample stylesheet workspaces
- Logging isolation between tests
"""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from color_indexer.detection.detector import TokenDetector
from color_indexer.indexer_logging import LOGGER_NAME
from color_indexer.models import (
    ClassColorDeclaration,
    ContextType,
    SelectorContext,
    VariableDeclaration,
)
from color_indexer.registry import Registry
from color_indexer.stylesheet.indexer import StylesheetIndexer
from color_indexer.stylesheet.resolver import VariableResolver

THEME_CSS = """\
:root {
  --primary: #3b82f6;
  --background: 0 0% 100%;
  --accent: var(--primary);
  --radius: 0.5rem;
}

.dark {
  --primary: #1e3a8a;
  --background: 222.2 84% 4.9%;
}
"""

COMPONENTS_CSS = """\
.plums {
  color: #8e4585;
}

.muted {
  padding: 4px;
  background-color: var(--primary);
}

.spacer {
  color: inherit;
}
"""


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo setup_logging() side effects so caplog keeps working."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


# ---------------------------------------------------------------------------
# Core components
# ---------------------------------------------------------------------------


@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def resolver(registry: Registry) -> VariableResolver:
    return VariableResolver(registry)


@pytest.fixture
def indexer(registry: Registry, resolver: VariableResolver) -> StylesheetIndexer:
    return StylesheetIndexer(registry, resolver)


@pytest.fixture
def detector(registry: Registry, resolver: VariableResolver) -> TokenDetector:
    return TokenDetector(registry, resolver)


# ---------------------------------------------------------------------------
# Declaration builders
# ---------------------------------------------------------------------------


def make_variable(
    name: str,
    value: str,
    source_id: str = "file:///theme.css",
    specificity: int = 1,
    selector: str = ":root",
    resolved_value: str | None = None,
) -> VariableDeclaration:
    """Build a variable declaration with a minimal selector context."""
    context_type = ContextType.ROOT if specificity == 1 else ContextType.CLASS
    return VariableDeclaration(
        name=name,
        value=value,
        source_id=source_id,
        line=0,
        selector=selector,
        context=SelectorContext(context_type, specificity),
        resolved_value=resolved_value,
    )


def make_class(
    class_name: str,
    value: str,
    source_id: str = "file:///components.css",
    resolved_value: str | None = None,
) -> ClassColorDeclaration:
    return ClassColorDeclaration(
        class_name=class_name,
        property="color",
        value=value,
        source_id=source_id,
        line=0,
        selector=f".{class_name}",
        resolved_value=resolved_value,
    )


@pytest.fixture
def variable_factory():
    """Factory fixture for variable declarations."""
    return make_variable


@pytest.fixture
def class_factory():
    """Factory fixture for class color declarations."""
    return make_class


# ---------------------------------------------------------------------------
# Sample workspace
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_workspace(tmp_path: Path) -> Path:
    """Create a small project with stylesheets and a page using them."""
    styles = tmp_path / "styles"
    styles.mkdir()
    (styles / "theme.css").write_text(THEME_CSS)
    (styles / "ui").mkdir()
    (styles / "ui" / "components.css").write_text(COMPONENTS_CSS)

    vendor = tmp_path / "node_modules" / "lib"
    vendor.mkdir(parents=True)
    (vendor / "vendor.css").write_text(":root { --vendor: #abcdef; }\n")

    (tmp_path / "index.html").write_text(
        '<div class="bg-primary plums">\n'
        '  <span style="color: var(--accent)">#ff0000</span>\n'
        "</div>\n"
    )
    return tmp_path
