"""trace-opener - open Playwright traces for .NET tests by name."""

__version__ = "0.1.0"

from trace_opener.core.models import (
    BuildFlavor,
    MatchStrategy,
    ResolvedPair,
    SearchConfig,
    TestIdentifier,
)
from trace_opener.core.resolver import resolve_artifacts, resolve_artifacts_async

__all__ = [
    "BuildFlavor",
    "MatchStrategy",
    "ResolvedPair",
    "SearchConfig",
    "TestIdentifier",
    "resolve_artifacts",
    "resolve_artifacts_async",
]
