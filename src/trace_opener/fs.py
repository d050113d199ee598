"""Filesystem query interface used by the locators.

The locators never touch the disk directly. They go through a FileSystem,
so tests can hand them an in-memory tree and count the calls made.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from pathspec import PathSpec

# Dependency caches are never searched
DEFAULT_EXCLUDE = "**/node_modules/**"


class FileSystem(Protocol):
    """Glob enumeration plus the two lookups the ranking needs."""

    def enumerate(
        self,
        root: Path,
        include: str,
        exclude: str | None = DEFAULT_EXCLUDE,
        limit: int | None = None,
    ) -> list[Path]: ...

    def exists(self, path: Path) -> bool: ...

    def mtime(self, path: Path) -> float: ...


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternation in a glob, nested groups included.

    Escaped braces, unbalanced braces and groups without a comma are kept
    as they are.

    Examples:
        "*.{zip,trace}" -> ["*.zip", "*.trace"]
        "{a,b}/{c,d}" -> ["a/c", "a/d", "b/c", "b/d"]
        "{x}.zip" -> ["{x}.zip"]
    """
    depth = 0
    start = 0
    commas: list[int] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            if depth == 0:
                start, commas = i, []
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0 and commas:
                bounds = [start, *commas, i]
                prefix, suffix = pattern[:start], pattern[i + 1 :]
                expanded = [
                    result
                    for lo, hi in zip(bounds, bounds[1:])
                    for result in expand_braces(prefix + pattern[lo + 1 : hi] + suffix)
                ]
                return list(dict.fromkeys(expanded))
        elif char == "," and depth == 1:
            commas.append(i)
        i += 1
    return [pattern]


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> tuple[tuple[re.Pattern[str], bool], ...]:
    """Compile a glob into root-anchored, case-insensitive matchers.

    pathspec translates each brace expansion of the glob. Every expansion
    is anchored at the root, so ``*.zip`` only matches top-level files and
    a leading ``!`` or ``#`` is taken literally. Patterns are matched
    against lowercased root-relative POSIX paths, so the glob is lowercased
    here too.

    Returns:
        One ``(regex, subtree)`` pair per expansion. ``subtree`` is set when
        the glob ends in ``**`` or ``/`` and so also matches everything
        below the path it names.
    """
    globs = []
    for expanded in expand_braces(pattern.lower()):
        expanded = expanded.removeprefix("./").lstrip("/")
        if expanded.strip():
            globs.append(expanded)

    spec = PathSpec.from_lines("gitignore", [f"/{glob}" for glob in globs])
    return tuple(
        (compiled.regex, glob.endswith("/") or glob.rsplit("/", 1)[-1] == "**")
        for glob, compiled in zip(globs, spec.patterns)
    )


def glob_matches(pattern: str, relative_path: str) -> bool:
    """Check a root-relative POSIX path against a glob, ignoring case.

    The glob has to match the whole path. A glob naming a directory does not
    match the files inside it unless it ends in ``/**``.
    """
    path = relative_path.lower()
    for regex, subtree in compile_glob(pattern):
        if (regex.search(path) if subtree else regex.fullmatch(path)) is not None:
            return True
    return False


class LocalFileSystem:
    """FileSystem backed by os.walk.

    Directories and files are visited in sorted order so the same tree
    always yields the same matches in the same order, even when ``limit``
    cuts the walk short.
    """

    def enumerate(
        self,
        root: Path,
        include: str,
        exclude: str | None = DEFAULT_EXCLUDE,
        limit: int | None = None,
    ) -> list[Path]:
        matches: list[Path] = []
        root = Path(root)

        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = Path(dirpath).relative_to(root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"

            dirnames.sort()
            if exclude:
                # Prune excluded directories instead of walking into them
                dirnames[:] = [d for d in dirnames if not glob_matches(exclude, f"{prefix}{d}/")]

            for name in sorted(filenames):
                relative = f"{prefix}{name}"
                if exclude and glob_matches(exclude, relative):
                    continue
                if glob_matches(include, relative):
                    matches.append(Path(dirpath) / name)
                    if limit is not None and len(matches) >= limit:
                        return matches

        return matches

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def mtime(self, path: Path) -> float:
        """Return the modification time; raises OSError when unreadable."""
        return os.stat(path).st_mtime
