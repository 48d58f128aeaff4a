"""Form response submission"""
import logging
from typing import Any, Dict, Optional

from bibforms.exceptions import NotFoundError, ValidationError
from bibforms.models.notification import SubmissionEvent
from bibforms.services.form_store import FormStore
from bibforms.services.response_store import ResponseStore
from bibforms.services.notification_dispatcher import NotificationDispatcher
from bibforms.services.scheduler import NotificationScheduler

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def accepted_statuses(caller: Dict[str, Any]) -> tuple:
    """Form statuses the caller may submit to; admins can also test drafts"""
    if caller.get("role") == ADMIN_ROLE:
        return ("published", "draft")
    return ("published",)


class SubmissionService:
    """Validates and stores a response, then hands it to the notifier"""

    def __init__(
        self,
        forms: FormStore,
        responses: ResponseStore,
        scheduler: Optional[NotificationScheduler] = None,
        dispatcher: Optional[NotificationDispatcher] = None
    ):
        self.forms = forms
        self.responses = responses
        self.scheduler = scheduler
        self.dispatcher = dispatcher

    async def submit(self, form_id: Optional[str], response_data: Any, caller: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit a response to a form.

        Args:
            form_id: Target form
            response_data: Question name to answer mapping
            caller: Auth data of the submitter (user_id, email, role)

        Returns:
            The inserted record, response_data decoded

        Raises:
            ValidationError: missing form id or data, or form not open to the caller
            NotFoundError: form does not exist
        """
        if not form_id:
            raise ValidationError("form_id is required")

        form = await self.forms.get_form(form_id)
        if not form:
            logger.info(f"Form {form_id} not found")
            raise NotFoundError("Form not found")

        if form.get("status") not in accepted_statuses(caller):
            logger.info(f"Form {form_id} not published (status: {form.get('status')})")
            raise ValidationError("This form is not published yet")

        if response_data is None or not isinstance(response_data, dict):
            raise ValidationError("response_data must be an object")

        record = await self.responses.insert_response(form_id, caller.get("user_id"), response_data)
        logger.info(f"Response {record.get('id')} created for form {form_id}")

        self._schedule_notification(record, form_id, caller)
        return record

    def _schedule_notification(self, record: Dict[str, Any], form_id: str, caller: Dict[str, Any]) -> None:
        if not self.scheduler or not self.dispatcher:
            return
        try:
            event = SubmissionEvent(
                response_id=str(record["id"]),
                form_id=form_id,
                user_email=caller.get("email") or ""
            )
            self.scheduler.schedule(self.dispatcher, event)
        except Exception as e:
            logger.error(f"Could not schedule notification for response {record.get('id')}: {e}")
