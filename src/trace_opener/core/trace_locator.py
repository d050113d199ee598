"""Trace archive selection for a named test.

Playwright writes traces in a few shapes depending on how the test project
saves them, e.g.:

    TestResults/shows-login-form.zip
    bin/Debug/net8.0/playwright-traces/ShowsLoginForm-retry1.zip
    test-results/shows-login-form/trace.zip

Candidates are collected with a handful of name-derived globs (plus any
user-supplied ones), then ranked by a scoring system that prioritizes:

1. Name matches in the filename and/or path, depending on the strategy
2. The canonical ``<test dir>/trace.zip`` layout
3. Locations under bin/, TestResults/ or playwright/
4. The most recently modified file
"""

from __future__ import annotations

import math
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from trace_opener.core.models import Candidate, MatchStrategy
from trace_opener.fs import DEFAULT_EXCLUDE, FileSystem
from trace_opener.logging import get_logger

logger = get_logger(__name__)

# Strategy base scores
FILENAME_ONLY_SCORE = 100
PATH_CONTAINS_SCORE = 100
BOTH_FILENAME_SCORE = 70
BOTH_PATH_SCORE = 50

# Bonuses, independent of strategy
CANONICAL_TRACE_BONUS = 30
LOCATION_BONUS = 10

CANONICAL_TRACE_NAME = "trace.zip"

_GLOB_SPECIAL = re.compile(r"([\\{}\[\]?*])")
_WHITESPACE_RUN = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[\s_-]+")
_LOCATION_REGEX = re.compile(r"[\\/](bin|TestResults|playwright)[\\/]", re.IGNORECASE)

MAX_ENUMERATION_WORKERS = 4


def escape_for_glob(text: str) -> str:
    """Backslash-escape glob metacharacters.

    Examples:
        "checkout [smoke]" -> "checkout \\[smoke\\]"
        "what?" -> "what\\?"
    """
    return _GLOB_SPECIAL.sub(r"\\\1", text)


def name_to_glob_token(test_name: str) -> str:
    """Turn a test name into a glob token allowing any gap between words.

    Examples:
        "shows login form" -> "shows*login*form"
    """
    return _WHITESPACE_RUN.sub("*", escape_for_glob(test_name))


def build_trace_globs(test_name: str, extra_patterns: tuple[str, ...] | list[str] = ()) -> list[str]:
    """Build the ordered, de-duplicated list of candidate globs for a test."""
    token = name_to_glob_token(test_name)
    patterns = [
        f"**/{token}.zip",
        f"**/{token}*.zip",
        f"**/*{token}*/{CANONICAL_TRACE_NAME}",
        f"**/*{token}*/*trace*.zip",
        *extra_patterns,
    ]
    return list(dict.fromkeys(patterns))


def _match_key(text: str) -> str:
    """Lowercase and drop whitespace, hyphens and underscores.

    Used for fuzzy matching between test names and file paths, so that
    "Shows Login Form" matches both "shows-login-form" and "ShowsLoginForm".
    """
    return _SEPARATORS.sub("", text.lower())


def score_candidate(path: Path, test_name: str, strategy: MatchStrategy) -> int:
    """Score a candidate path against a test name.

    The filename and the directory holding it are separate pieces of
    evidence: ``shows-login-form.zip`` matches by filename only, while
    ``shows-login-form/trace.zip`` matches by path only.
    """
    name_key = _match_key(test_name)
    filename = path.name
    full = str(path)

    filename_matches = name_key in _match_key(filename)
    path_matches = name_key in _match_key(str(path.parent))

    score = 0
    if strategy is MatchStrategy.FILENAME and filename_matches:
        score += FILENAME_ONLY_SCORE
    elif strategy is MatchStrategy.PATH_CONTAINS and path_matches:
        score += PATH_CONTAINS_SCORE
    elif strategy is MatchStrategy.BOTH:
        if filename_matches:
            score += BOTH_FILENAME_SCORE
        if path_matches:
            score += BOTH_PATH_SCORE

    # Canonical runner layout: <test dir>/trace.zip
    if filename.lower() == CANONICAL_TRACE_NAME and path_matches:
        score += CANONICAL_TRACE_BONUS

    if _LOCATION_REGEX.search(full):
        score += LOCATION_BONUS

    return score


def unique_paths(paths: list[Path]) -> list[Path]:
    """De-duplicate paths case-insensitively, keeping first-seen order."""
    seen: set[str] = set()
    unique: list[Path] = []
    for path in paths:
        key = str(path).lower()
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return unique


def _safe_mtime(fs: FileSystem, path: Path) -> float:
    try:
        return fs.mtime(path)
    except OSError:
        logger.debug("mtime_unreadable", path=str(path))
        return 0.0


def collect_trace_candidates(
    fs: FileSystem,
    root: Path,
    patterns: list[str],
    max_results: int,
) -> list[Path]:
    """Enumerate every pattern and merge the results in pattern order.

    Each pattern gets an equal share of ``max_results`` so no single broad
    pattern can use up the whole budget.
    """
    if not patterns:
        return []
    per_pattern = math.ceil(max_results / len(patterns))

    def enumerate_one(pattern: str) -> list[Path]:
        return fs.enumerate(root, pattern, DEFAULT_EXCLUDE, per_pattern)

    workers = min(MAX_ENUMERATION_WORKERS, len(patterns))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        # map() yields in submission order regardless of completion order
        results = list(executor.map(enumerate_one, patterns))

    merged = [path for batch in results for path in batch]
    return unique_paths(merged)


def rank_trace_candidates(
    fs: FileSystem,
    root: Path,
    test_name: str,
    strategy: MatchStrategy,
    extra_patterns: tuple[str, ...] | list[str] = (),
    max_results: int = 2000,
) -> list[Candidate]:
    """Collect and rank every trace archive candidate for a test.

    Returns:
        Candidates sorted by score, then modification time, both descending.
    """
    patterns = build_trace_globs(test_name, extra_patterns)
    paths = collect_trace_candidates(fs, root, patterns, max_results)

    candidates = [
        Candidate(
            path=path,
            score=score_candidate(path, test_name, strategy),
            mtime=_safe_mtime(fs, path),
        )
        for path in paths
    ]
    candidates.sort(key=lambda c: (c.score, c.mtime), reverse=True)
    return candidates


def find_trace_archive(
    fs: FileSystem,
    root: Path,
    test_name: str,
    strategy: MatchStrategy,
    extra_patterns: tuple[str, ...] | list[str] = (),
    max_results: int = 2000,
) -> Path | None:
    """Find the trace archive that best matches a test name.

    Returns:
        Path of the best candidate, or None if no archive matched any pattern.
    """
    ranked = rank_trace_candidates(fs, root, test_name, strategy, extra_patterns, max_results)
    if not ranked:
        logger.debug("trace_archive_not_found", root=str(root), test_name=test_name)
        return None

    best = ranked[0]
    logger.debug(
        "trace_archive_selected",
        path=str(best.path),
        score=best.score,
        candidates=len(ranked),
    )
    return best.path
