"""Unit tests for GitHub API tools."""

from unittest.mock import MagicMock, patch

import pytest
from github import Auth, Github, GithubException
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import ReadTimeout

from diffcheck_service.models.commit import FileStatus
from diffcheck_service.models.config import ServiceConfig
from diffcheck_service.tools.github import (
    GitHubToolError,
    create_github_client,
    get_commit_detail,
)
from tests.fixtures.diffs import CLEAN_PATCH
from tests.fixtures.github_objects import make_github_commit, make_github_file

SHA = "0d1a26e67d8f5eaf1f6ba5c57fc3c7d91ac0fd1c"


def _config(**overrides: object) -> ServiceConfig:
    values: dict[str, object] = {"webhook_secret": b"secret", "port": 8080}
    values.update(overrides)
    return ServiceConfig(**values)  # type: ignore[arg-type]


class TestCreateGitHubClient:
    """Tests for GitHub client creation."""

    def test_anonymous_client(self) -> None:
        """Test that no token means no auth."""
        with patch("diffcheck_service.tools.github.Github") as mock_github:
            client = create_github_client(_config())

        assert client is mock_github.return_value
        mock_github.assert_called_once_with(
            auth=None,
            base_url="https://api.github.com",
            timeout=10,
            retry=None,
        )

    def test_token_client(self) -> None:
        """Test that a token is passed as token auth."""
        config = _config(
            github_token="ghp_test",
            github_api_url="https://github.example.com/api/v3",
            github_timeout=3,
        )

        with patch("diffcheck_service.tools.github.Github") as mock_github:
            create_github_client(config)

        kwargs = mock_github.call_args.kwargs
        assert isinstance(kwargs["auth"], Auth.Token)
        assert kwargs["auth"].token == "ghp_test"
        assert kwargs["base_url"] == "https://github.example.com/api/v3"
        assert kwargs["timeout"] == 3
        assert kwargs["retry"] is None

    @pytest.mark.parametrize("token", [None, "ghp_test"], ids=["anonymous", "token"])
    def test_builds_real_client(self, token: str | None) -> None:
        """Test that the configured values are accepted by PyGithub itself."""
        client = create_github_client(_config(github_token=token))

        assert isinstance(client, Github)

    def test_builds_real_client_from_env(self, mock_env: dict[str, str]) -> None:
        """Test the default startup path, timeout parsed from the environment."""
        mock_env["GITHUB_TIMEOUT"] = "7"

        client = create_github_client(ServiceConfig.from_env(mock_env))

        assert isinstance(client, Github)


class TestGetCommitDetail:
    """Tests for get_commit_detail tool."""

    def test_get_commit_success(self) -> None:
        """Test fetching a commit with its files."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_commit.return_value = make_github_commit(
            SHA,
            files=[
                make_github_file("README.md", CLEAN_PATCH),
                make_github_file("logo.png", None, status="added"),
            ],
        )

        detail = get_commit_detail(mock_client, "baxterthehacker/public-repo", SHA)

        mock_client.get_repo.assert_called_once_with("baxterthehacker/public-repo", lazy=True)
        mock_client.get_repo.return_value.get_commit.assert_called_once_with(SHA)
        assert detail.sha == SHA
        assert detail.message == "Update README.md"
        assert detail.author.name == "baxterthehacker"
        assert [f.filename for f in detail.files] == ["README.md", "logo.png"]
        assert detail.files[1].status == FileStatus.ADDED
        assert [f.filename for f in detail.patched_files] == ["README.md"]

    def test_commit_not_found(self) -> None:
        """Test that a 404 becomes a not-found tool error."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_commit.side_effect = GithubException(
            404, {"message": "Not Found"}, None
        )

        with pytest.raises(GitHubToolError, match="not found") as exc_info:
            get_commit_detail(mock_client, "owner/repo", SHA)

        assert exc_info.value.status == 404

    def test_server_error(self) -> None:
        """Test that other API errors keep their status."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_commit.side_effect = GithubException(
            502, {"message": "Bad Gateway"}, None
        )

        with pytest.raises(GitHubToolError, match="GitHub API error") as exc_info:
            get_commit_detail(mock_client, "owner/repo", SHA)

        assert exc_info.value.status == 502

    @pytest.mark.parametrize(
        "error",
        [ReadTimeout("read timed out"), RequestsConnectionError("connection refused")],
        ids=["timeout", "connection"],
    )
    def test_transport_error(self, error: Exception) -> None:
        """Test that timeouts and connection failures carry no status."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_commit.side_effect = error

        with pytest.raises(GitHubToolError, match="Failed to reach GitHub") as exc_info:
            get_commit_detail(mock_client, "owner/repo", SHA)

        assert exc_info.value.status is None
        assert exc_info.value.__cause__ is error
