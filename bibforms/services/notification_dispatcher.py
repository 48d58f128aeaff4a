"""
Submission notifications to the n8n automation webhook.

A dispatch reads the just-inserted response back (the row may not be visible
yet), builds the form_submitted payload and posts it once. Every failure past
the configured-check ends in a DispatchOutcome carrying a warning; nothing
here may fail the submission that triggered it.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from bibforms.config import Settings
from bibforms.exceptions import DeliveryFailure, TransientUnavailable
from bibforms.models.notification import (
    DispatchOutcome,
    NotificationData,
    NotificationPayload,
    SubmissionEvent,
)
from bibforms.services.response_store import ResponseStore
from bibforms.utils.retry import poll_until_found

logger = logging.getLogger(__name__)

EVENT_FORM_SUBMITTED = "form_submitted"
UNKNOWN_FORM_TITLE = "Unknown form"

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BACKOFF_SECONDS = 0.5
DEFAULT_DELIVERY_TIMEOUT = 10.0


class NotificationDispatcher:
    """Delivers one SubmissionEvent to the configured webhook"""

    def __init__(
        self,
        store: ResponseStore,
        webhook_url: Optional[str] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        delivery_timeout: float = DEFAULT_DELIVERY_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delivery_timeout <= 0:
            raise ValueError("delivery_timeout must be positive")

        self.store = store
        self.webhook_url = (webhook_url or "").strip() or None
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.delivery_timeout = delivery_timeout
        self._transport = transport
        self._sleep = sleep

    @classmethod
    def from_settings(cls, store: ResponseStore, settings: Settings, **kwargs) -> "NotificationDispatcher":
        return cls(
            store,
            webhook_url=settings.n8n_webhook_url,
            max_attempts=settings.notify_max_attempts,
            backoff_seconds=settings.notify_backoff_seconds,
            delivery_timeout=settings.webhook_timeout_seconds,
            **kwargs
        )

    @property
    def enabled(self) -> bool:
        return self.webhook_url is not None

    async def dispatch(self, event: SubmissionEvent) -> DispatchOutcome:
        """
        Run one dispatch to its terminal outcome.

        Store errors other than "row not visible yet" are not caught here:
        they are failures of the dispatch itself and propagate to the caller.

        Args:
            event: The response that was just inserted

        Returns:
            DispatchOutcome describing how the dispatch ended
        """
        if not self.enabled:
            logger.warning("N8N_WEBHOOK_URL not set - notification skipped")
            return DispatchOutcome.disabled()

        logger.info(
            f"Dispatching notification for response {event.response_id} "
            f"(form {event.form_id}, user {event.user_email})"
        )

        try:
            row, attempts = await self.fetch_response(event.response_id)
        except TransientUnavailable as e:
            logger.warning(
                f"No response found after {e.attempts} attempts for id {event.response_id}"
            )
            return DispatchOutcome.unavailable(e.attempts)

        payload = self.build_payload(event, row)

        try:
            status_code = await self.deliver(payload)
        except DeliveryFailure as e:
            logger.error(f"Webhook error for response {event.response_id}: {e.message}")
            return DispatchOutcome.delivery_failed(e.message, attempts)

        outcome = DispatchOutcome.delivered(status_code, attempts)
        if outcome.is_warning:
            logger.warning(f"Webhook answered {status_code} for response {event.response_id}")
        else:
            logger.info(f"Webhook answered {status_code} for response {event.response_id}")
        return outcome

    async def fetch_response(self, response_id: str) -> Tuple[Dict[str, Any], int]:
        """Read the response back, polling while it is not visible yet"""
        return await poll_until_found(
            lambda: self.store.get_response_with_form(response_id),
            max_attempts=self.max_attempts,
            interval=self.backoff_seconds,
            label=f"Response {response_id}",
            sleep=self._sleep,
        )

    def build_payload(self, event: SubmissionEvent, row: Dict[str, Any]) -> NotificationPayload:
        submitted_at = row.get("submitted_at")
        if isinstance(submitted_at, datetime):
            submitted_at = submitted_at.isoformat()

        return NotificationPayload(
            event=EVENT_FORM_SUBMITTED,
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            data=NotificationData(
                response_id=event.response_id,
                form_id=event.form_id,
                form_title=row.get("form_title") or UNKNOWN_FORM_TITLE,
                user_email=event.user_email,
                response_data=row.get("response_data"),
                submitted_at=submitted_at,
            )
        )

    async def deliver(self, payload: NotificationPayload) -> int:
        """
        POST the payload once.

        The whole call, connection included, is bounded by delivery_timeout.

        Returns:
            HTTP status code of the webhook answer, whatever it is

        Raises:
            DeliveryFailure: on transport error or timeout
        """
        logger.info(f"Sending to n8n: {self.webhook_url}")
        try:
            async with httpx.AsyncClient(timeout=self.delivery_timeout, transport=self._transport) as client:
                # httpx timeouts apply per phase; wait_for bounds the whole exchange
                response = await asyncio.wait_for(
                    client.post(
                        self.webhook_url,
                        json=payload.to_json(),
                        headers={"Content-Type": "application/json"}
                    ),
                    timeout=self.delivery_timeout
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise DeliveryFailure(f"Webhook did not answer within {self.delivery_timeout}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DeliveryFailure(str(e) or e.__class__.__name__)

        return response.status_code
