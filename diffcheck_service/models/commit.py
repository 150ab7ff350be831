"""Commit detail as returned by the GitHub commits API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from diffcheck_service.models.event import GithubUser

if TYPE_CHECKING:
    from github.Commit import Commit
    from github.File import File
    from github.GitAuthor import GitAuthor


class FileStatus(str, Enum):
    """Status of a file in a commit."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class FileChange:
    """One file touched by a commit."""

    filename: str
    status: FileStatus
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: str | None = None

    @property
    def has_patch(self) -> bool:
        """Binary files and oversized diffs come back without a patch."""
        return bool(self.patch)

    @classmethod
    def from_github_file(cls, file: File) -> FileChange:
        """Create a FileChange from a PyGithub ``File``.

        Unknown statuses are mapped to ``CHANGED`` so a new value on
        GitHub's side does not break the check.
        """
        try:
            status = FileStatus(file.status)
        except ValueError:
            status = FileStatus.CHANGED

        return cls(
            filename=file.filename,
            status=status,
            additions=file.additions or 0,
            deletions=file.deletions or 0,
            changes=file.changes or 0,
            patch=file.patch,
        )


def _git_user(author: GitAuthor | None) -> GithubUser:
    if author is None:
        return GithubUser()
    return GithubUser(name=author.name or "", email=author.email or "")


@dataclass(frozen=True)
class CommitDetail:
    """Full commit body fetched for a single commit reference."""

    url: str
    sha: str
    files: tuple[FileChange, ...] = ()
    author: GithubUser = field(default_factory=GithubUser)
    committer: GithubUser = field(default_factory=GithubUser)
    message: str = ""

    @property
    def patched_files(self) -> tuple[FileChange, ...]:
        """File changes that carry diff text, in commit order."""
        return tuple(f for f in self.files if f.has_patch)

    @classmethod
    def from_github_commit(cls, commit: Commit) -> CommitDetail:
        """Create a CommitDetail from a PyGithub ``Commit``.

        Args:
            commit: Commit returned by ``Repository.get_commit``.

        Returns:
            CommitDetail instance.
        """
        git_commit = commit.commit
        return cls(
            url=commit.url,
            sha=commit.sha,
            files=tuple(FileChange.from_github_file(f) for f in commit.files or ()),
            author=_git_user(git_commit.author),
            committer=_git_user(git_commit.committer),
            message=git_commit.message or "",
        )
