"""Data models for the diff check service."""

from diffcheck_service.models.commit import CommitDetail, FileChange, FileStatus
from diffcheck_service.models.config import ConfigError, ServiceConfig
from diffcheck_service.models.event import (
    EVENT_TYPES,
    CommitRef,
    Event,
    GithubUser,
    PingEvent,
    PushEvent,
    Repository,
    WebhookRequest,
)
from diffcheck_service.models.inspection import InspectionReport, InspectionWarning

__all__ = [
    "EVENT_TYPES",
    "CommitDetail",
    "CommitRef",
    "ConfigError",
    "Event",
    "FileChange",
    "FileStatus",
    "GithubUser",
    "InspectionReport",
    "InspectionWarning",
    "PingEvent",
    "PushEvent",
    "Repository",
    "ServiceConfig",
    "WebhookRequest",
]
