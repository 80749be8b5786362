"""Shared pytest fixtures for treesort tests."""
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator
from unittest.mock import MagicMock

import pytest
import yaml

from treesort.infrastructure.logger import Logger, set_global_logger
from treesort.sorting import Entry, SortConfig, TreeSortCoordinator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Create a project-like directory tree.

    project/
        .gitignore
        README.md
        Makefile
        file10.txt
        file2.txt
        docs/
            api.md
        src/
            main.py
            util.py
            pkg/
                __init__.py
    """
    source = temp_dir / "project"
    source.mkdir()

    (source / ".gitignore").write_text("*.pyc")
    (source / "README.md").write_text("# Project")
    (source / "Makefile").write_text("all:")
    (source / "file10.txt").write_text("ten")
    (source / "file2.txt").write_text("two")

    (source / "docs").mkdir()
    (source / "docs" / "api.md").write_text("# API")

    (source / "src").mkdir()
    (source / "src" / "main.py").write_text("print('main')")
    (source / "src" / "util.py").write_text("")
    (source / "src" / "pkg").mkdir()
    (source / "src" / "pkg" / "__init__.py").write_text("")

    return source


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample treesort configuration."""
    return {
        "treesort": {
            "sorting": {
                "strategy": "natural",
                "reversed": False,
                "uppercase_first": True,
                "group_by_type": True,
                "group_by_extension": False,
            },
            "integrity": {"strict": False},
            "logging": {"level": "DEBUG", "file": None},
        }
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "treesort.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double for asserting on warnings."""
    return MagicMock(spec=Logger)


@pytest.fixture
def root() -> Entry:
    return Entry.directory("project")


@pytest.fixture
def tree(root: Entry, mock_logger: MagicMock) -> TreeSortCoordinator:
    """Empty strict coordinator with the default configuration."""
    return TreeSortCoordinator(root, SortConfig(), strict=True, logger=mock_logger)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the global logger between tests."""
    yield
    set_global_logger(None)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep TREESORT_* variables of the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("TREESORT_"):
            monkeypatch.delenv(key)
