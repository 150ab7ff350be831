"""Webhook intake: authenticate, decode and accept GitHub deliveries.

The intake answers GitHub as soon as an event is accepted. Commit checks
triggered by a push run afterwards on the dispatcher and never influence
the response.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from diffcheck_service.models.event import PingEvent, PushEvent, WebhookRequest
from diffcheck_service.utils.logging import get_logger
from diffcheck_service.webhook.handler import (
    UnsupportedEventError,
    WebhookParseError,
    decode_event,
)
from diffcheck_service.webhook.validators import (
    SIGNATURE_PREFIX,
    MissingSignatureError,
    WebhookSignatureError,
    verify_webhook_signature,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from diffcheck_service.checks.dispatcher import CommitCheckDispatcher
    from diffcheck_service.models.event import Event

logger = get_logger("webhook.intake")

JSON_CONTENT_TYPE = "application/json"

EVENT_HEADER = "x-github-event"
SIGNATURE_HEADER = "x-hub-signature"
DELIVERY_HEADER = "x-github-delivery"
CONTENT_TYPE_HEADER = "content-type"


@dataclass(frozen=True)
class Problem:
    """Problem details for a rejected delivery (RFC 7807 subset)."""

    title: str
    status: int
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"title": self.title, "status": self.status}
        if self.detail:
            body["detail"] = self.detail
        return body


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of handling one delivery."""

    status_code: int
    event: Event | None = None
    problem: Problem | None = None

    @property
    def accepted(self) -> bool:
        return self.problem is None

    @classmethod
    def reject(cls, status: int, title: str, detail: str | None = None) -> IntakeResult:
        return cls(status_code=status, problem=Problem(title=title, status=status, detail=detail))


class WebhookIntake:
    """Validates inbound deliveries and hands push events to the dispatcher."""

    def __init__(self, secret: bytes, dispatcher: CommitCheckDispatcher) -> None:
        """Initialize the intake.

        Args:
            secret: Webhook secret shared with GitHub.
            dispatcher: Receives the commits of every accepted push.

        Raises:
            ValueError: If the secret is empty.
        """
        if not secret:
            raise ValueError("webhook secret cannot be empty")
        self._secret = secret
        self._dispatcher = dispatcher

    async def handle(
        self,
        headers: Mapping[str, str],
        read_body: Callable[[], Awaitable[bytes]],
    ) -> IntakeResult:
        """Handle one delivery.

        Headers are checked before the body is read, and the body is only
        parsed once its signature has been verified.

        Args:
            headers: Request headers, any case.
            read_body: Coroutine function returning the full raw body.

        Returns:
            IntakeResult with the HTTP status to answer with.
        """
        headers = {k.lower(): v for k, v in headers.items()}

        content_type = headers.get(CONTENT_TYPE_HEADER, "")
        event_type = headers.get(EVENT_HEADER, "")
        signature = headers.get(SIGNATURE_HEADER, "")
        delivery_id = headers.get(DELIVERY_HEADER, "")

        logger.info(
            "Received webhook",
            extra={"event_type": event_type, "delivery_id": delivery_id},
        )

        if content_type != JSON_CONTENT_TYPE:
            logger.warning("Unsupported content type", extra={"content_type": content_type})
            return IntakeResult.reject(
                415,
                "Unsupported content type",
                f"Content-Type must be {JSON_CONTENT_TYPE}",
            )

        if not event_type:
            logger.warning("Missing event header", extra={"delivery_id": delivery_id})
            return IntakeResult.reject(400, "Missing event header", "X-GitHub-Event is required")

        if not signature.startswith(SIGNATURE_PREFIX):
            logger.warning("Missing signature", extra={"delivery_id": delivery_id})
            return IntakeResult.reject(
                401,
                "Missing signature",
                f"X-Hub-Signature must start with '{SIGNATURE_PREFIX}'",
            )

        try:
            body = await read_body()
        except Exception:
            # transport failure, not evidence of tampering
            logger.exception("Failed to read request body", extra={"delivery_id": delivery_id})
            return IntakeResult.reject(500, "Request body unreadable")

        return self.accept(
            WebhookRequest(
                body=body,
                content_type=content_type,
                event_type=event_type,
                signature=signature,
                delivery_id=delivery_id,
            )
        )

    def accept(self, request: WebhookRequest) -> IntakeResult:
        """Verify, decode and route a fully read delivery."""
        try:
            verify_webhook_signature(request.body, request.signature, self._secret)
        except MissingSignatureError as e:
            logger.warning(
                "Missing signature",
                extra={"delivery_id": request.delivery_id, "error": str(e)},
            )
            return IntakeResult.reject(401, "Missing signature", str(e))
        except WebhookSignatureError as e:
            logger.warning(
                "Signature verification failed",
                extra={"delivery_id": request.delivery_id, "error": str(e)},
            )
            return IntakeResult.reject(403, "Bad signature", str(e))

        try:
            event = decode_event(request.event_type, request.body)
        except UnsupportedEventError as e:
            logger.warning("Unsupported event", extra={"event_type": e.event_type})
            return IntakeResult.reject(400, "Unsupported event", str(e))
        except WebhookParseError as e:
            logger.warning(
                "Failed to decode payload",
                extra={"event_type": request.event_type, "error": str(e)},
            )
            return IntakeResult.reject(400, "Failed to decode payload", str(e))

        self._route(event)
        return IntakeResult(status_code=200, event=event)

    def _route(self, event: Event) -> None:
        match event:
            case PushEvent(repository=repository, commits=commits):
                logger.info(
                    "Push event accepted",
                    extra={
                        "repository": repository.full_name,
                        "ref": event.ref,
                        "commit_count": len(commits),
                    },
                )
                self._dispatcher.dispatch_checks(repository.full_name, commits)
            case PingEvent(repository=repository):
                logger.info(
                    "Ping event accepted",
                    extra={"repository": repository.full_name, "zen": event.zen},
                )
