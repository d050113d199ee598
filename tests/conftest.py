"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import structlog

if TYPE_CHECKING:
    from collections.abc import Generator


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires PowerShell 7+ and a Playwright build)",
    )


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (require pwsh)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from TRACE_OPENER_* variables and cached settings."""
    from trace_opener.config import get_settings

    for key in list(os.environ):
        if key.startswith("TRACE_OPENER_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop logging configuration bound to streams a test may have closed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Create files under a fresh workspace directory.

    Usage:
        root = make_tree("bin/Debug/net8.0/playwright.ps1", "TestResults/a.zip")
        root = make_tree({"old.zip": 1_000, "new.zip": 2_000})  # with mtimes
    """
    root = tmp_path / "ws"
    root.mkdir()

    def _make(*paths: str | dict[str, float]) -> Path:
        for item in paths:
            entries = item.items() if isinstance(item, dict) else [(item, None)]
            for relative, mtime in entries:
                file = root / relative
                file.parent.mkdir(parents=True, exist_ok=True)
                file.write_bytes(b"PK")
                if mtime is not None:
                    os.utime(file, (mtime, mtime))
        return root

    return _make
