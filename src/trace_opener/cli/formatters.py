"""Output formatters for trace-opener CLI."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from trace_opener.core.models import Candidate, ResolvedPair


def format_mtime(mtime: float) -> str:
    """Format a modification time, or '-' when it could not be read."""
    if mtime <= 0:
        return "-"
    return datetime.fromtimestamp(mtime, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


def format_text_output(pair: ResolvedPair) -> str:
    """Format resolved paths as plain text."""
    return "\n".join(
        [
            f"Launcher script: {pair.launcher_script}",
            f"Trace archive:   {pair.trace_archive}",
        ]
    )


def format_candidates_text(candidates: list[Candidate]) -> str:
    """Format ranked candidates, best first."""
    if not candidates:
        return "No trace candidates."
    lines = ["Trace candidates (score, modified, path):"]
    for candidate in candidates:
        lines.append(f"  {candidate.score:>4}  {format_mtime(candidate.mtime):<19}  {candidate.path}")
    return "\n".join(lines)


def format_json_output(pair: ResolvedPair, candidates: list[Candidate] | None = None) -> str:
    """Format result as JSON."""
    data = pair.to_dict()
    if candidates is not None:
        data["candidates"] = [
            {"path": str(c.path), "score": c.score, "mtime": c.mtime} for c in candidates
        ]
    return json.dumps(data, indent=2)
