"""Data model for locating Playwright trace archives and launcher scripts.

Everything here lives for a single invocation: an identifier comes in,
candidates are scored, and a ResolvedPair goes out. Nothing is persisted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

_WHITESPACE_RUN = re.compile(r"\s+")


def _lookup_ignoring_case(enum_cls, value):
    """Accept "debug", "DEBUG" or "Debug" alike for configuration values."""
    if isinstance(value, str):
        for member in enum_cls:
            if member.value.lower() == value.lower():
                return member
    return None


class BuildFlavor(str, Enum):
    """Build configuration whose output tree holds playwright.ps1."""

    DEBUG = "Debug"
    RELEASE = "Release"

    @classmethod
    def _missing_(cls, value: object) -> BuildFlavor | None:
        return _lookup_ignoring_case(cls, value)


class MatchStrategy(str, Enum):
    """Which part of a candidate path is compared against the test name."""

    FILENAME = "filename"
    PATH_CONTAINS = "pathContains"
    BOTH = "both"

    @classmethod
    def _missing_(cls, value: object) -> MatchStrategy | None:
        return _lookup_ignoring_case(cls, value)


def normalize_test_name(name: str) -> str:
    """Collapse whitespace runs to a single space and trim.

    Examples:
        "  Shows   login\\tform " -> "Shows login form"
        "   " -> ""
    """
    return _WHITESPACE_RUN.sub(" ", name).strip()


@dataclass(frozen=True)
class TestIdentifier:
    """A test as selected by the user: its label and, optionally, its source file."""

    __test__ = False  # not a pytest test class

    name: str
    origin: Path | None = None

    @property
    def normalized_name(self) -> str:
        return normalize_test_name(self.name)


@dataclass(frozen=True)
class SearchConfig:
    """User-configurable search parameters, read-only for the locators."""

    build_flavor: BuildFlavor = BuildFlavor.DEBUG
    max_results: int = 2000
    match_strategy: MatchStrategy = MatchStrategy.BOTH
    extra_patterns: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.max_results < 1:
            raise ValueError(f"max_results must be positive, got {self.max_results}")


@dataclass
class Candidate:
    """A scored trace archive candidate."""

    path: Path
    score: int = 0
    mtime: float = 0.0  # tiebreak, 0.0 when the file could not be stat'ed


@dataclass(frozen=True)
class ResolvedPair:
    """The launcher script and trace archive handed to the viewer."""

    launcher_script: Path
    trace_archive: Path

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "launcher_script": str(self.launcher_script),
            "trace_archive": str(self.trace_archive),
        }
