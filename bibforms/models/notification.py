"""Notification-related Pydantic models"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, Union

from bibforms.exceptions import ValidationError

MISSING_NOTIFY_PARAMS = "Missing parameters: responseId, formId and userEmail are required"


class SubmissionEvent(BaseModel):
    """A response that was just inserted and must be announced to the webhook"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    response_id: str = Field(..., alias="responseId")
    form_id: str = Field(..., alias="formId")
    user_email: str = Field(..., alias="userEmail")


class NotifyRequest(BaseModel):
    """Body of POST /api/responses/notify

    Ids may arrive as numbers; to_event turns them into strings.
    """
    responseId: Optional[Union[str, int]] = None
    formId: Optional[Union[str, int]] = None
    userEmail: Optional[Union[str, int]] = None

    def to_event(self) -> SubmissionEvent:
        """Build the event, rejecting blank or missing identifiers"""
        values = {
            "responseId": self.responseId,
            "formId": self.formId,
            "userEmail": self.userEmail,
        }
        values = {key: "" if value is None else str(value).strip() for key, value in values.items()}
        if not all(values.values()):
            raise ValidationError(MISSING_NOTIFY_PARAMS)
        return SubmissionEvent(**values)


class NotificationData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response_id: str = Field(..., alias="responseId")
    form_id: str = Field(..., alias="formId")
    form_title: str = Field(..., alias="formTitle")
    user_email: str = Field(..., alias="userEmail")
    response_data: Any = Field(None, alias="responseData")
    submitted_at: Any = Field(None, alias="submittedAt")


class NotificationPayload(BaseModel):
    """Body posted to the n8n webhook"""
    event: str
    timestamp: str
    data: NotificationData

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DispatchStatus(str, Enum):
    DISABLED = "disabled"
    DELIVERED = "delivered"
    RESPONSE_UNAVAILABLE = "response_unavailable"
    DELIVERY_FAILED = "delivery_failed"


class DispatchOutcome(BaseModel):
    """Terminal state of one dispatch.

    Only RESPONSE_UNAVAILABLE reports success=False: the row could not be read
    back so nothing was sent. A failed delivery still reports success=True
    because the submission itself is saved.
    """
    model_config = ConfigDict(populate_by_name=True)

    status: DispatchStatus
    success: bool
    message: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None
    webhook_status: Optional[int] = Field(None, alias="webhookStatus")
    attempts: Optional[int] = None

    @property
    def is_warning(self) -> bool:
        return self.warning is not None

    def to_response(self) -> Dict[str, Any]:
        """JSON body for the notify endpoint"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def disabled(cls) -> "DispatchOutcome":
        return cls(
            status=DispatchStatus.DISABLED,
            success=True,
            message="Response saved (webhook disabled)"
        )

    @classmethod
    def unavailable(cls, attempts: int) -> "DispatchOutcome":
        return cls(
            status=DispatchStatus.RESPONSE_UNAVAILABLE,
            success=False,
            warning=f"Response not available after {attempts} attempts",
            attempts=attempts
        )

    @classmethod
    def delivered(cls, webhook_status: int, attempts: int) -> "DispatchOutcome":
        warning = None
        if not 200 <= webhook_status < 300:
            warning = f"Webhook responded with status {webhook_status}"
        return cls(
            status=DispatchStatus.DELIVERED,
            success=True,
            message="Notification sent to webhook",
            warning=warning,
            webhook_status=webhook_status,
            attempts=attempts
        )

    @classmethod
    def delivery_failed(cls, error: str, attempts: int) -> "DispatchOutcome":
        return cls(
            status=DispatchStatus.DELIVERY_FAILED,
            success=True,
            warning="Response saved but webhook notification failed",
            error=error,
            attempts=attempts
        )
