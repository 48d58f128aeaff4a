"""Detached execution of notification dispatches"""
import asyncio
import logging
from typing import Optional, Set

from bibforms.models.notification import DispatchOutcome, SubmissionEvent
from bibforms.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class NotificationScheduler:
    """
    Runs dispatches as background asyncio tasks.

    The request that schedules a dispatch never awaits it. References to
    running tasks are kept here until they finish; outcomes and exceptions
    only end up in the logs.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, dispatcher: NotificationDispatcher, event: SubmissionEvent) -> Optional[asyncio.Task]:
        """
        Start a dispatch without waiting for it.

        Must be called from within a running event loop.

        Returns:
            The created task, or None when the webhook is disabled
        """
        if not dispatcher.enabled:
            logger.debug(f"Webhook disabled, no notification for response {event.response_id}")
            return None

        task = asyncio.create_task(
            self._run(dispatcher, event),
            name=f"notify-{event.response_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, dispatcher: NotificationDispatcher, event: SubmissionEvent) -> Optional[DispatchOutcome]:
        try:
            outcome = await dispatcher.dispatch(event)
        except asyncio.CancelledError:
            logger.warning(f"Notification for response {event.response_id} cancelled at shutdown")
            raise
        except Exception:
            logger.exception(f"Notification error for response {event.response_id}")
            return None

        if outcome.is_warning:
            logger.warning(
                f"Notification for response {event.response_id} ended as "
                f"{outcome.status.value}: {outcome.warning}"
            )
        else:
            logger.info(f"Notification for response {event.response_id} ended as {outcome.status.value}")
        return outcome

    async def shutdown(self, timeout: float) -> None:
        """Give pending dispatches `timeout` seconds to finish, then cancel the rest"""
        if not self._tasks:
            return

        logger.info(f"Waiting for {len(self._tasks)} pending notification(s)")
        done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(f"Cancelled {len(pending)} notification(s) still running at shutdown")
