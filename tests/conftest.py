"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import hashlib
import hmac
import json
import os
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest

from diffcheck_service.checks.dispatcher import CommitCheckDispatcher
from diffcheck_service.models.inspection import InspectionReport
from tests.fixtures.github_objects import make_github_commit
from tests.fixtures.webhook_payloads import TEST_SECRET, create_ping_payload, create_push_payload

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


@pytest.fixture(autouse=True)
def reset_env() -> Generator[None]:
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_env() -> dict[str, str]:
    """Standard environment variables for testing."""
    return {
        "PORT": "8080",
        "WEBHOOK_SECRET": TEST_SECRET.decode(),
        "GITHUB_API_URL": "https://github.example.com/api/v3",
        "LOG_LEVEL": "DEBUG",
    }


@pytest.fixture
def webhook_secret() -> bytes:
    """Webhook secret shared with GitHub."""
    return TEST_SECRET


@pytest.fixture
def sign() -> Callable[[bytes, bytes], str]:
    """Produce an X-Hub-Signature header value independently of the service."""

    def _sign(body: bytes, secret: bytes = TEST_SECRET) -> str:
        return "sha1=" + hmac.new(secret, body, hashlib.sha1).hexdigest()

    return _sign


@pytest.fixture
def sample_push_payload() -> dict[str, Any]:
    """Push with two commits."""
    return create_push_payload(
        commit_ids=[
            "0d1a26e67d8f5eaf1f6ba5c57fc3c7d91ac0fd1c",
            "9049f1265b7d61be4a8904a9a27120d2064dab3b",
        ]
    )


@pytest.fixture
def sample_ping_payload() -> dict[str, Any]:
    """Sample GitHub ping webhook payload."""
    return create_ping_payload()


@pytest.fixture
def push_body(sample_push_payload: dict[str, Any]) -> bytes:
    return json.dumps(sample_push_payload).encode()


@pytest.fixture
def mock_github_client() -> MagicMock:
    """Mock GitHub client whose commits each touch README.md."""
    client = MagicMock()
    client.get_repo.return_value.get_commit.side_effect = make_github_commit
    return client


@pytest.fixture
def mock_engine() -> MagicMock:
    """Inspection engine that passes everything."""
    engine = MagicMock()
    engine.inspect.return_value = InspectionReport.clean()
    return engine


@pytest.fixture
def dispatcher(
    mock_github_client: MagicMock, mock_engine: MagicMock
) -> Generator[CommitCheckDispatcher]:
    """Dispatcher wired to the mock client and engine."""
    dispatcher = CommitCheckDispatcher(
        github_client=mock_github_client,
        engine=mock_engine,
        max_workers=4,
        shutdown_grace=1.0,
    )
    yield dispatcher
    dispatcher.shutdown(grace_period=1.0)
