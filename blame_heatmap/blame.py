"""
Per-line commit timestamps from ``git blame --porcelain``.

Runs ``git blame -p`` for a single file (in the file's own directory) and
maps every line of the current file version to the committer time of the
revision that last touched it.  Lines git does not report stay ``None``.

The git call is a pluggable *provider*, ``(path) -> raw text | None``,
so the parser can be driven from canned transcripts.

No external dependencies, stdlib only.
"""

from __future__ import annotations

import os
import re
import subprocess
from typing import Callable, Optional


# <sha> <orig_line> <final_line> [<num_lines>]
_HEADER_RE = re.compile(r"^([0-9a-f]{40}) \d+ (\d+)")
_COMMITTER_TIME = "committer-time "
_NO_COMMIT = "0" * 40

BLAME_TIMEOUT = 30

AttributionProvider = Callable[[str], Optional[str]]
TimestampArray = list[Optional[int]]


# ===================================================================
# Git helpers
# ===================================================================

def _git(*args: str, cwd: str | None = None) -> str | None:
    """Run a git command and return stdout, or None on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True, encoding="utf-8", errors="replace",
            cwd=cwd, timeout=BLAME_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout


def git_toplevel(directory: str) -> str | None:
    """Root of the git work tree containing *directory*, or None."""
    out = _git("rev-parse", "--show-toplevel", cwd=directory)
    if not out or not out.strip():
        return None
    return out.strip()


def git_blame_porcelain(file_path: str) -> str | None:
    """Default provider: ``git blame -p`` run next to the file."""
    abs_path = os.path.abspath(file_path)
    return _git(
        "blame", "-p", "--", os.path.basename(abs_path),
        cwd=os.path.dirname(abs_path),
    )


# ===================================================================
# Porcelain parser
# ===================================================================

def _collect_commit_times(lines: list[str]) -> dict[str, int]:
    """First pass: commit sha -> committer time.

    Header lines switch the current commit; a ``committer-time`` line
    belongs to whichever commit header came last.
    """
    times: dict[str, int] = {}
    current = _NO_COMMIT
    for line in lines:
        match = _HEADER_RE.match(line)
        if match:
            current = match.group(1)
        elif line.startswith(_COMMITTER_TIME):
            try:
                times[current] = int(line[len(_COMMITTER_TIME):].split()[0])
            except (ValueError, IndexError):
                continue
    return times


def _map_final_lines(
    lines: list[str],
    times: dict[str, int],
    line_count: int,
) -> TimestampArray:
    """Second pass: place each commit time at its 1-based final line."""
    timestamps: TimestampArray = [None] * line_count
    for line in lines:
        match = _HEADER_RE.match(line)
        if not match:
            continue
        final_line = int(match.group(2))
        if not 1 <= final_line <= line_count:
            continue
        timestamps[final_line - 1] = times.get(match.group(1))
    return timestamps


def parse_blame_timestamps(raw: str, line_count: int) -> TimestampArray:
    """Parse porcelain output into a list of *line_count* timestamps.

    The two passes are independent, so the order git emits commit
    metadata in does not matter.
    """
    if line_count <= 0:
        return []
    lines = raw.split("\n")
    times = _collect_commit_times(lines)
    return _map_final_lines(lines, times, line_count)


# ===================================================================
# Entry point
# ===================================================================

def extract_timestamps(
    file_path: str,
    line_count: int,
    provider: AttributionProvider | None = None,
) -> TimestampArray | None:
    """Blame *file_path* and return its per-line timestamps.

    Returns None when attribution is unavailable (untracked file, git
    missing, path outside a repository).  An empty list means the
    document has no lines.
    """
    if provider is None:
        provider = git_blame_porcelain
    raw = provider(file_path)
    if raw is None:
        return None
    return parse_blame_timestamps(raw, line_count)
