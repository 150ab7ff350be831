"""Webhook event models.

GitHub sends far more than the service reads. Only the fields below are
kept; anything else in the payload is ignored, and missing fields fall back
to empty values. A field present with the wrong JSON type is an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _object(value: Any, name: str) -> dict[str, Any]:
    """Return a JSON object field, treating null/missing as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"'{name}' must be an object, got {type(value).__name__}")
    return value


def _string(value: Any, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"'{name}' must be a string, got {type(value).__name__}")
    return value


def _integer(value: Any, name: str) -> int:
    if value is None:
        return 0
    # bool is an int subclass but never a valid id
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"'{name}' must be an integer, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class GithubUser:
    """A subset of GitHub user data. Not every field is always filled in."""

    name: str = ""
    email: str = ""
    login: str = ""
    id: int = 0
    avatar_url: str = ""

    @classmethod
    def from_payload(cls, data: Any, name: str = "user") -> GithubUser:
        """Build a user from a (possibly absent) JSON object."""
        data = _object(data, name)
        return cls(
            name=_string(data.get("name"), f"{name}.name"),
            email=_string(data.get("email"), f"{name}.email"),
            login=_string(data.get("login"), f"{name}.login"),
            id=_integer(data.get("id"), f"{name}.id"),
            avatar_url=_string(data.get("avatar_url"), f"{name}.avatar_url"),
        )


@dataclass(frozen=True)
class Repository:
    """The repository a webhook was delivered for."""

    id: int = 0
    name: str = ""
    full_name: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> Repository:
        data = _object(data, "repository")
        return cls(
            id=_integer(data.get("id"), "repository.id"),
            name=_string(data.get("name"), "repository.name"),
            full_name=_string(data.get("full_name"), "repository.full_name"),
        )

    @property
    def owner(self) -> str:
        """Get the repository owner."""
        return self.full_name.split("/")[0]


@dataclass(frozen=True)
class CommitRef:
    """A commit referenced by a push. Carries the SHA only, never content."""

    id: str


@dataclass(frozen=True)
class PingEvent:
    """Sent by GitHub when a webhook is first configured."""

    repository: Repository = field(default_factory=Repository)
    zen: str = ""
    hook_id: int = 0

    @classmethod
    def from_webhook_payload(cls, payload: dict[str, Any]) -> PingEvent:
        return cls(
            repository=Repository.from_payload(payload.get("repository")),
            zen=_string(payload.get("zen"), "zen"),
            hook_id=_integer(payload.get("hook_id"), "hook_id"),
        )


@dataclass(frozen=True)
class PushEvent:
    """One or more commits pushed to a repository ref."""

    ref: str = ""
    commits: tuple[CommitRef, ...] = ()
    repository: Repository = field(default_factory=Repository)
    pusher: GithubUser = field(default_factory=GithubUser)

    @classmethod
    def from_webhook_payload(cls, payload: dict[str, Any]) -> PushEvent:
        """Create a PushEvent from a GitHub push payload.

        Args:
            payload: The decoded JSON object.

        Returns:
            PushEvent with commit references in payload order.

        Raises:
            TypeError: If a known field has the wrong JSON type.
        """
        raw_commits = payload.get("commits")
        if raw_commits is None:
            raw_commits = []
        if not isinstance(raw_commits, list):
            raise TypeError(f"'commits' must be an array, got {type(raw_commits).__name__}")

        commits = tuple(
            CommitRef(id=_string(_object(c, f"commits[{i}]").get("id"), f"commits[{i}].id"))
            for i, c in enumerate(raw_commits)
        )

        return cls(
            ref=_string(payload.get("ref"), "ref"),
            commits=commits,
            repository=Repository.from_payload(payload.get("repository")),
            pusher=GithubUser.from_payload(payload.get("pusher"), "pusher"),
        )


type Event = PingEvent | PushEvent

# Header value -> event variant. Closed set: anything else is unsupported.
EVENT_TYPES: dict[str, type[PingEvent] | type[PushEvent]] = {
    "ping": PingEvent,
    "push": PushEvent,
}


@dataclass(frozen=True)
class WebhookRequest:
    """An inbound webhook call, captured once its body has been read."""

    body: bytes
    content_type: str
    event_type: str
    signature: str
    delivery_id: str = ""
