"""Form response endpoints"""
from fastapi import APIRouter, Body, HTTPException, Depends
from fastapi.responses import JSONResponse
from typing import Dict, Optional
import logging

from bibforms.dependencies import (
    get_dispatcher,
    get_response_store,
    get_submission_service,
)
from bibforms.exceptions import BibformsError
from bibforms.middleware.auth import get_current_user, is_admin
from bibforms.models.notification import DispatchOutcome, NotifyRequest
from bibforms.models.responses import (
    FileMetadataCreate,
    ResponseSubmitRequest,
    ResponseSubmitResponse,
)
from bibforms.services.notification_dispatcher import NotificationDispatcher
from bibforms.services.response_store import ResponseStore
from bibforms.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/notify")
async def notify_submission(
    body: Optional[NotifyRequest] = Body(None),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    """
    Run a notification dispatch and report how it ended (internal endpoint)

    Soft failures (row never visible, webhook down) still answer 200 with a
    warning. Only a failure of the dispatch itself answers 500.
    """
    body = body or NotifyRequest()
    logger.info(f"Notification requested: {body.model_dump()}")

    if not dispatcher.enabled:
        logger.warning("N8N_WEBHOOK_URL not set - notification skipped")
        return DispatchOutcome.disabled().to_response()

    event = body.to_event()

    try:
        outcome = await dispatcher.dispatch(event)
    except Exception as e:
        logger.exception(f"Notification error: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": str(e),
                "hint": "The response was saved but the notification failed"
            }
        )

    return outcome.to_response()


@router.post("", status_code=201, response_model=ResponseSubmitResponse)
async def submit_response(
    body: ResponseSubmitRequest,
    auth_data: Dict = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service)
):
    """Submit a response to a published form"""
    logger.info(f"POST /responses - form {body.form_id} by {auth_data.get('email')}")
    try:
        record = await service.submit(body.form_id, body.response_data, auth_data)
        return ResponseSubmitResponse(message="Response submitted successfully", response=record)

    except BibformsError:
        raise
    except Exception as e:
        logger.error(f"Submit response error: {e}")
        raise HTTPException(status_code=500, detail="Error while submitting the response")


@router.get("")
async def list_responses(
    form_id: Optional[str] = None,
    auth_data: Dict = Depends(get_current_user),
    store: ResponseStore = Depends(get_response_store)
):
    """All responses for admins, own responses otherwise; optionally for one form"""
    try:
        owner = None if is_admin(auth_data) else auth_data["user_id"]
        responses = await store.list_responses(form_id=form_id, user_id=owner)
        logger.info(f"{len(responses)} responses fetched for {auth_data.get('email')}")
        return responses

    except Exception as e:
        logger.error(f"List responses error: {e}")
        raise HTTPException(status_code=500, detail="Error while fetching responses")


@router.post("/files", status_code=201)
async def save_file_metadata(
    body: FileMetadataCreate,
    auth_data: Dict = Depends(get_current_user),
    store: ResponseStore = Depends(get_response_store)
):
    """Record metadata of a file uploaded as an answer"""
    try:
        response = await store.get_response(body.form_response_id)
        if not response:
            raise HTTPException(status_code=404, detail="Form response not found")

        if not is_admin(auth_data) and response.get("user_id") != auth_data["user_id"]:
            raise HTTPException(status_code=403, detail="Access denied")

        record = body.model_dump()
        record["uploaded_by"] = auth_data["user_id"]
        file_record = await store.insert_file_metadata(record)

        logger.info(f"File metadata saved: {file_record.get('id')}")
        return {"message": "File metadata saved", "file": file_record}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Save file metadata error: {e}")
        raise HTTPException(status_code=500, detail="Error while saving file metadata")


@router.get("/{response_id}")
async def get_response(
    response_id: str,
    auth_data: Dict = Depends(get_current_user),
    store: ResponseStore = Depends(get_response_store)
):
    """Get a single response (admin or owner)"""
    try:
        response = await store.get_response(response_id)
        if not response:
            raise HTTPException(status_code=404, detail="Response not found")

        if not is_admin(auth_data) and response.get("user_id") != auth_data["user_id"]:
            logger.warning(f"Access denied to response {response_id}")
            raise HTTPException(status_code=403, detail="Access denied to this response")

        return response

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get response {response_id} error: {e}")
        raise HTTPException(status_code=500, detail="Error while fetching the response")


@router.delete("/{response_id}")
async def delete_response(
    response_id: str,
    auth_data: Dict = Depends(get_current_user),
    store: ResponseStore = Depends(get_response_store)
):
    """Delete a response (admin or owner)"""
    try:
        response = await store.get_response(response_id)
        if not response:
            raise HTTPException(status_code=404, detail="Response not found")

        if not is_admin(auth_data) and response.get("user_id") != auth_data["user_id"]:
            raise HTTPException(status_code=403, detail="You can only delete your own responses")

        await store.delete_response(response_id)
        logger.info(f"Response {response_id} deleted")
        return {"success": True, "message": "Response deleted successfully"}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete response {response_id} error: {e}")
        raise HTTPException(status_code=500, detail="Error while deleting the response")
