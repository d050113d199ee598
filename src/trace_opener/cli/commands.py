"""Command handlers for trace-opener CLI."""

from __future__ import annotations

import argparse
from pathlib import Path

from trace_opener.cli import formatters
from trace_opener.config import get_settings
from trace_opener.core.exceptions import LaunchFailure, ToolUnavailable, TraceOpenerError
from trace_opener.core.models import SearchConfig, TestIdentifier
from trace_opener.core.resolver import pick_search_root, resolve_artifacts
from trace_opener.core.trace_locator import rank_trace_candidates
from trace_opener.fs import FileSystem, LocalFileSystem
from trace_opener.launcher import launch_trace_viewer, resolve_pwsh
from trace_opener.logging import get_logger
from trace_opener.notify import OPENING_STATUS, ConsoleNotifier, Notifier

logger = get_logger(__name__)


def _identifier_from_args(args: argparse.Namespace) -> TestIdentifier:
    origin = getattr(args, "file", None)
    return TestIdentifier(name=args.name, origin=Path(origin) if origin else None)


def _roots_from_args(args: argparse.Namespace) -> list[Path]:
    roots = getattr(args, "roots", None)
    return [Path(r) for r in roots] if roots else [Path.cwd()]


def _config_from_args(args: argparse.Namespace) -> SearchConfig:
    return get_settings().to_search_config(
        build_flavor=getattr(args, "flavor", None),
        max_results=getattr(args, "max_results", None),
        match_strategy=getattr(args, "strategy", None),
        extra_patterns=getattr(args, "patterns", None),
    )


def run_locate(
    args: argparse.Namespace,
    notifier: Notifier | None = None,
    fs: FileSystem | None = None,
) -> int:
    """Resolve the launcher script and trace archive without launching anything."""
    notifier = notifier or ConsoleNotifier()
    identifier = _identifier_from_args(args)
    roots = _roots_from_args(args)

    try:
        config = _config_from_args(args)
        pair = resolve_artifacts(identifier, roots, config, fs)
    except TraceOpenerError as e:
        logger.warning("locate_failed", error=e.user_message)
        notifier.error(e.user_message)
        return 1
    except Exception as e:  # noqa: BLE001 - generic failure fallback
        logger.exception("locate_failed_unexpectedly")
        notifier.error(LaunchFailure(str(e)).user_message)
        return 1

    candidates = None
    if getattr(args, "candidates", False):
        candidates = rank_trace_candidates(
            fs or LocalFileSystem(),
            pick_search_root(identifier, roots),
            identifier.normalized_name,
            config.match_strategy,
            config.extra_patterns,
            config.max_results,
        )

    if getattr(args, "json_output", False):
        notifier.info(formatters.format_json_output(pair, candidates))
    else:
        notifier.info(formatters.format_text_output(pair))
        if candidates is not None:
            notifier.info(formatters.format_candidates_text(candidates))
    return 0


def run_open(
    args: argparse.Namespace,
    notifier: Notifier | None = None,
    fs: FileSystem | None = None,
) -> int:
    """Resolve the artifacts for a test and open them in the trace viewer."""
    notifier = notifier or ConsoleNotifier()
    identifier = _identifier_from_args(args)
    roots = _roots_from_args(args)
    logger.info("open_requested", test_name=identifier.name, origin=str(identifier.origin))

    try:
        config = _config_from_args(args)
        pair = resolve_artifacts(identifier, roots, config, fs)
        cwd = pick_search_root(identifier, roots)

        executable = getattr(args, "pwsh", None) or resolve_pwsh()
        if not executable:
            raise ToolUnavailable()

        with notifier.status(OPENING_STATUS):
            launch_trace_viewer(pair, cwd, executable)
    except TraceOpenerError as e:
        logger.warning("open_failed", error=e.user_message)
        notifier.error(e.user_message)
        return 1
    except Exception as e:  # noqa: BLE001 - generic failure fallback
        logger.exception("open_failed_unexpectedly")
        notifier.error(LaunchFailure(str(e)).user_message)
        return 1

    return 0
