"""Launch the Playwright trace viewer through PowerShell."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from pathlib import Path

from trace_opener.core.exceptions import LaunchFailure, ToolUnavailable
from trace_opener.core.models import ResolvedPair
from trace_opener.logging import get_logger

logger = get_logger(__name__)

WINDOWS_PWSH_NAMES = ["pwsh.exe", "pwsh"]
POSIX_PWSH_NAMES = ["pwsh"]

# Common install locations, checked when pwsh is not on PATH
WINDOWS_PWSH_PATHS = [
    r"C:\Program Files\PowerShell\7\pwsh.exe",
    r"C:\Program Files\PowerShell\7-preview\pwsh.exe",
]
POSIX_PWSH_PATHS = [
    "/usr/bin/pwsh",
    "/usr/local/bin/pwsh",
    "/opt/microsoft/powershell/7/pwsh",
]


def _is_windows() -> bool:
    return sys.platform == "win32"


def resolve_pwsh() -> str | None:
    """Find a PowerShell 7+ executable.

    Returns:
        The executable name or path, or None if PowerShell is not installed.
    """
    names = WINDOWS_PWSH_NAMES if _is_windows() else POSIX_PWSH_NAMES
    for name in names:
        found = shutil.which(name)
        if found:
            return found

    guesses = WINDOWS_PWSH_PATHS if _is_windows() else POSIX_PWSH_PATHS
    for guess in guesses:
        if Path(guess).is_file() and os.access(guess, os.X_OK):
            return guess

    return None


def build_viewer_command(executable: str, pair: ResolvedPair) -> list[str]:
    """Build the argv for ``pwsh playwright.ps1 show-trace <archive>``."""
    return [executable, str(pair.launcher_script), "show-trace", str(pair.trace_archive)]


def launch_trace_viewer(
    pair: ResolvedPair,
    cwd: Path,
    executable: str | None = None,
) -> subprocess.CompletedProcess:
    """Run the trace viewer and wait for it to exit.

    The argv is passed straight to the process, never through a shell,
    so paths with spaces or quotes need no escaping.

    Args:
        pair: Launcher script and trace archive to open.
        cwd: Working directory, normally the workspace root.
        executable: PowerShell to use; resolved when not given.

    Raises:
        ToolUnavailable: If PowerShell cannot be found.
        LaunchFailure: If the process cannot be spawned or exits non-zero.
    """
    if executable is None:
        executable = resolve_pwsh()
    if not executable:
        raise ToolUnavailable()

    cmd = build_viewer_command(executable, pair)
    logger.info("viewer_launching", cmd=cmd, cwd=str(cwd))

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or str(e)
        raise LaunchFailure(detail) from e
    except OSError as e:
        raise LaunchFailure(str(e)) from e

    logger.info("viewer_exited", returncode=result.returncode)
    return result
