"""Diff extraction for commit inspection.

GitHub returns one patch per file without file headers. The inspection
engine expects a unified diff, so patches are stitched together with
``--- a/`` / ``+++ b/`` headers. Only hunks whose bodies match their
headers are passed on; the engine's diff parser rejects a whole diff over
a single broken hunk.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from diffcheck_service.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from diffcheck_service.models.commit import FileChange

logger = get_logger("tools.diff")

# @@ -old_start[,old_count] +new_start[,new_count] @@
HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

NO_NEWLINE_MARKER = "\\"


@dataclass
class DiffHunk:
    """A hunk in a unified diff."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    header: str
    lines: list[str] = field(default_factory=list)

    def complete_lines(self) -> list[str] | None:
        """Body lines covering exactly the counts in the header.

        Lines after the last counted one are dropped, apart from a
        ``\\ No newline at end of file`` marker directly following it.

        Returns:
            The body lines, or None if the body is short of the counts or
            holds a line that is not context, removal or addition.
        """
        old_left, new_left = self.old_count, self.new_count
        body: list[str] = []

        for line in self.lines:
            if line.startswith(NO_NEWLINE_MARKER):
                body.append(line)
                continue
            if old_left == 0 and new_left == 0:
                break

            # an empty line is a context line whose trailing space was stripped
            prefix = line[:1]
            if prefix in (" ", ""):
                old_left -= 1
                new_left -= 1
            elif prefix == "-":
                old_left -= 1
            elif prefix == "+":
                new_left -= 1
            else:
                return None

            if old_left < 0 or new_left < 0:
                return None
            body.append(line)

        if old_left or new_left:
            return None
        return body


def parse_unified_diff(patch: str | None) -> list[DiffHunk]:
    """Split a patch into hunks. Text before the first hunk header is dropped.

    Args:
        patch: The unified diff patch content, or None for binary files.

    Returns:
        List of DiffHunk objects.
    """
    hunks: list[DiffHunk] = []

    for line in (patch or "").split("\n"):
        match = HUNK_HEADER_PATTERN.match(line)
        if match:
            old_start, old_count, new_start, new_count = match.groups()
            hunks.append(
                DiffHunk(
                    old_start=int(old_start),
                    old_count=int(old_count) if old_count else 1,
                    new_start=int(new_start),
                    new_count=int(new_count) if new_count else 1,
                    header=line,
                )
            )
        elif hunks:
            hunks[-1].lines.append(line)

    return hunks


def build_commit_diff(files: Iterable[FileChange]) -> str:
    """Join every inspectable file patch into one unified diff.

    Each file is re-emitted from its complete hunks. Hunks that do not
    match their header are skipped, and so are files left without any
    hunk. Order follows the commit.

    Args:
        files: File changes of a commit.

    Returns:
        The combined diff, or an empty string when nothing is inspectable.
    """
    sections: list[str] = []

    for change in files:
        lines: list[str] = []
        for hunk in parse_unified_diff(change.patch):
            body = hunk.complete_lines()
            if body is None:
                logger.debug(
                    "Skipping malformed hunk",
                    extra={"file": change.filename, "hunk": hunk.header},
                )
                continue
            lines.append(hunk.header)
            lines.extend(body)

        if not lines:
            continue
        joined = "\n".join(lines)
        sections.append(f"--- a/{change.filename}\n+++ b/{change.filename}\n{joined}\n")

    return "".join(sections)
