"""Resolve a test to its launcher script and trace archive.

This is the single entry point the CLI (or any other front end) calls.
It picks the workspace root, runs both locators concurrently and turns
every "nothing found" outcome into a typed TraceOpenerError.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Sequence
from pathlib import Path

from trace_opener.core.build_locator import find_launcher_script
from trace_opener.core.exceptions import (
    AmbiguousWorkspace,
    ArchiveNotFound,
    InvalidIdentifier,
    LauncherNotFound,
)
from trace_opener.core.models import ResolvedPair, SearchConfig, TestIdentifier
from trace_opener.core.trace_locator import find_trace_archive
from trace_opener.fs import FileSystem, LocalFileSystem
from trace_opener.logging import get_logger, invocation_id_ctx

logger = get_logger(__name__)


def pick_search_root(identifier: TestIdentifier, roots: Sequence[Path]) -> Path:
    """Prefer the root containing the test's file, else the first root.

    When roots are nested, the innermost root containing the file wins.

    Raises:
        AmbiguousWorkspace: If no roots are configured.
    """
    if not roots:
        raise AmbiguousWorkspace()

    if identifier.origin is not None:
        origin = Path(identifier.origin).absolute()
        containing = [Path(r) for r in roots if origin.is_relative_to(Path(r).absolute())]
        if containing:
            return max(containing, key=lambda r: len(r.absolute().parts))

    return Path(roots[0])


async def resolve_artifacts_async(
    identifier: TestIdentifier,
    roots: Sequence[Path],
    config: SearchConfig,
    fs: FileSystem | None = None,
) -> ResolvedPair:
    """Locate the launcher script and trace archive for a test.

    Both searches are read-only and independent, so they run side by side
    in worker threads and are joined before the pair is built.

    Raises:
        AmbiguousWorkspace: No root could be determined.
        InvalidIdentifier: Test name is empty.
        LauncherNotFound: No playwright.ps1 for the configured build flavor.
        ArchiveNotFound: No trace zip matched the test name.
    """
    # Both checks run before any filesystem access
    root = pick_search_root(identifier, roots)
    test_name = identifier.normalized_name
    if not test_name:
        raise InvalidIdentifier()

    if fs is None:
        fs = LocalFileSystem()

    token = invocation_id_ctx.set(uuid.uuid4().hex[:12])
    try:
        logger.info(
            "resolve_started",
            test_name=test_name,
            root=str(root),
            flavor=config.build_flavor.value,
            strategy=config.match_strategy.value,
        )
        script, archive = await asyncio.gather(
            asyncio.to_thread(
                find_launcher_script, fs, root, config.build_flavor, config.max_results
            ),
            asyncio.to_thread(
                find_trace_archive,
                fs,
                root,
                test_name,
                config.match_strategy,
                config.extra_patterns,
                config.max_results,
            ),
        )

        if script is None:
            raise LauncherNotFound(config.build_flavor.value)
        if archive is None:
            raise ArchiveNotFound(test_name)

        logger.info("resolve_completed", launcher_script=str(script), trace_archive=str(archive))
        return ResolvedPair(launcher_script=script, trace_archive=archive)
    finally:
        invocation_id_ctx.reset(token)


def resolve_artifacts(
    identifier: TestIdentifier,
    roots: Sequence[Path],
    config: SearchConfig,
    fs: FileSystem | None = None,
) -> ResolvedPair:
    """Synchronous wrapper around resolve_artifacts_async."""
    return asyncio.run(resolve_artifacts_async(identifier, roots, config, fs))
