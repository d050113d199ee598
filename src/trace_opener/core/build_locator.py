"""Launcher script selection for .NET Playwright build output.

Building a Playwright test project drops ``playwright.ps1`` next to the
compiled assemblies, one copy per target framework:

    bin/Debug/net6.0/playwright.ps1
    bin/Debug/net8.0/playwright.ps1

The highest target framework wins.
"""

from __future__ import annotations

import re
from pathlib import Path

from trace_opener.core.models import BuildFlavor
from trace_opener.fs import DEFAULT_EXCLUDE, FileSystem
from trace_opener.logging import get_logger

logger = get_logger(__name__)

LAUNCHER_SCRIPT = "playwright.ps1"

# First "/netX/" or "/netX.Y/" path segment
_TFM_REGEX = re.compile(r"[\\/](net(\d+)(?:\.(\d+))?)[\\/]", re.IGNORECASE)


def launcher_script_glob(flavor: BuildFlavor) -> str:
    """Glob matching the launcher script for a build flavor."""
    return f"**/bin/{flavor.value}/net*/{LAUNCHER_SCRIPT}"


def runtime_version_score(path: Path | str) -> int:
    """Score a path by its target framework directory.

    Examples:
        ".../bin/Debug/net8.0/playwright.ps1" -> 800
        ".../bin/Debug/net7.0/playwright.ps1" -> 700
        ".../bin/Debug/net8/playwright.ps1" -> 800
        ".../tools/playwright.ps1" -> 0
    """
    match = _TFM_REGEX.search(str(path))
    if not match:
        return 0
    major = int(match.group(2) or 0)
    minor = int(match.group(3) or 0)
    return major * 100 + minor


def find_launcher_script(
    fs: FileSystem,
    root: Path,
    flavor: BuildFlavor,
    max_results: int,
) -> Path | None:
    """Find playwright.ps1 for the newest target framework under root.

    Args:
        fs: Filesystem to search.
        root: Workspace root.
        flavor: Build configuration (Debug or Release).
        max_results: Cap on enumerated matches.

    Returns:
        Path of the best script, or None if the flavor has no build output.
    """
    matches = fs.enumerate(root, launcher_script_glob(flavor), DEFAULT_EXCLUDE, max_results)
    if not matches:
        logger.debug("launcher_script_not_found", root=str(root), flavor=flavor.value)
        return None

    # Highest framework first, then shortest path
    best = min(matches, key=lambda p: (-runtime_version_score(p), len(str(p))))
    logger.debug(
        "launcher_script_selected",
        path=str(best),
        score=runtime_version_score(best),
        candidates=len(matches),
    )
    return best
