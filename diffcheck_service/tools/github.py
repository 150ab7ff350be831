"""GitHub API access for commit checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import requests
from github import Auth, Github, GithubException

from diffcheck_service.models.commit import CommitDetail
from diffcheck_service.utils.logging import get_logger

if TYPE_CHECKING:
    from diffcheck_service.models.config import ServiceConfig

logger = get_logger("tools.github")


class GitHubToolError(Exception):
    """Error raised by GitHub tools."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize the GitHubToolError.

        Args:
            message: Error message.
            status: HTTP status returned by GitHub, if a response arrived.
        """
        super().__init__(message)
        self.status = status


def create_github_client(config: ServiceConfig) -> Github:
    """Create the client used for every commit lookup.

    Requests are bounded by ``config.github_timeout`` and never retried.
    Without a token the client is anonymous, which works for public
    repositories within GitHub's unauthenticated rate limit.

    Args:
        config: Service configuration.

    Returns:
        Github client.
    """
    auth = Auth.Token(config.github_token) if config.github_token else None
    return Github(
        auth=auth,
        base_url=config.github_api_url,
        timeout=config.github_timeout,
        retry=None,
    )


def get_commit_detail(client: Github, repository: str, sha: str) -> CommitDetail:
    """Fetch a single commit, including its file patches.

    Issues ``GET /repos/{repository}/commits/{sha}``; the repository handle
    is lazy so no separate repository lookup is made.

    Args:
        client: GitHub client.
        repository: Repository in owner/repo format.
        sha: Commit SHA.

    Returns:
        CommitDetail for the commit.

    Raises:
        GitHubToolError: On a non-success response, a timeout or a
            connection failure.
    """
    try:
        repo = client.get_repo(repository, lazy=True)
        commit = repo.get_commit(sha)
        # files may page lazily, so conversion stays inside the guard
        detail = CommitDetail.from_github_commit(commit)

    except GithubException as e:
        if e.status == 404:
            raise GitHubToolError(
                f"Commit {sha} not found in {repository}", status=e.status
            ) from e
        raise GitHubToolError(f"GitHub API error: {e}", status=e.status) from e
    except requests.RequestException as e:
        raise GitHubToolError(f"Failed to reach GitHub: {e}") from e

    logger.debug(
        "Fetched commit",
        extra={"repository": repository, "sha": sha, "file_count": len(detail.files)},
    )
    return detail
