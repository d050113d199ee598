"""Shared exceptions for the trace-opener package.

Every exception carries the message shown to the user, so the CLI can
report any abort path with a single notification.
"""

from __future__ import annotations


class TraceOpenerError(Exception):
    """Base class for all terminal failures of a single invocation."""

    @property
    def user_message(self) -> str:
        return str(self)


class AmbiguousWorkspace(TraceOpenerError):
    """No workspace root could be determined for the selected test."""

    def __init__(self) -> None:
        super().__init__("Could not determine a workspace folder for the selected test.")


class InvalidIdentifier(TraceOpenerError):
    """The test name is empty after whitespace normalization."""

    def __init__(self) -> None:
        super().__init__("Test name is empty or invalid.")


class LauncherNotFound(TraceOpenerError):
    """No playwright.ps1 exists under the configured build flavor."""

    def __init__(self, flavor: str) -> None:
        self.flavor = flavor
        super().__init__(
            f"Could not find playwright.ps1 in {flavor} build output "
            f"(bin/{flavor}/net*/playwright.ps1). "
            "Make sure you have built the project with Playwright installed."
        )


class ArchiveNotFound(TraceOpenerError):
    """No trace zip matched the test name."""

    def __init__(self, test_name: str) -> None:
        self.test_name = test_name
        super().__init__(f'Could not find a trace zip for test "{test_name}".')


class ToolUnavailable(TraceOpenerError):
    """PowerShell 7+ could not be found on this host."""

    def __init__(self) -> None:
        super().__init__(
            "PowerShell (pwsh) not found in PATH. Install PowerShell 7+ or add pwsh to PATH."
        )


class LaunchFailure(TraceOpenerError):
    """The viewer process could not be spawned or exited with an error."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Open Trace Viewer failed: {detail}")


class InvalidSettings(TraceOpenerError):
    """A TRACE_OPENER_* setting (environment or .env) has an invalid value."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid settings: {detail}")
