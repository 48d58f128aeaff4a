"""Form handling endpoints"""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Optional
import logging
import math

from bibforms.dependencies import get_form_store, get_response_store, get_submission_service
from bibforms.exceptions import BibformsError
from bibforms.middleware.auth import get_current_user, require_admin
from bibforms.models.forms import FormCreate, FormStatus, FormUpdate
from bibforms.models.responses import FormSubmitRequest, PaginatedResponses, ResponseSubmitResponse
from bibforms.services.form_store import FormStore
from bibforms.services.response_store import ResponseStore
from bibforms.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def list_forms(
    status: Optional[FormStatus] = None,
    forms: FormStore = Depends(get_form_store)
):
    """List forms, newest first (PUBLIC endpoint)"""
    try:
        result = await forms.list_forms(status=status)
        logger.info(f"{len(result)} forms fetched")
        return result
    except Exception as e:
        logger.error(f"List forms error: {e}")
        raise HTTPException(status_code=500, detail="Error while fetching forms")


@router.get("/{form_id}")
async def get_form(form_id: str, forms: FormStore = Depends(get_form_store)):
    """Get a single form (PUBLIC endpoint)"""
    try:
        form = await forms.get_form(form_id)
        if not form:
            raise HTTPException(status_code=404, detail="Form not found")
        return form
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get form {form_id} error: {e}")
        raise HTTPException(status_code=500, detail="Error while fetching the form")


@router.post("", status_code=201)
async def create_form(
    body: FormCreate,
    auth_data: Dict = Depends(require_admin),
    forms: FormStore = Depends(get_form_store)
):
    """Create a form (admin only)"""
    try:
        form = await forms.create_form(
            title=body.title.strip(),
            description=body.description,
            json_schema=body.json_schema,
            status=body.status,
            created_by=auth_data["user_id"]
        )
        logger.info(f"Form created: {form.get('id')} - {form.get('title')}")
        return form
    except Exception as e:
        logger.error(f"Create form error: {e}")
        raise HTTPException(status_code=500, detail="Error while creating the form")


@router.put("/{form_id}")
async def update_form(
    form_id: str,
    body: FormUpdate,
    auth_data: Dict = Depends(require_admin),
    forms: FormStore = Depends(get_form_store)
):
    """Update the given fields of a form (admin only)"""
    try:
        if not await forms.get_form(form_id):
            raise HTTPException(status_code=404, detail="Form not found")

        changes = body.model_dump(exclude_none=True)
        form = await forms.update_form(form_id, changes)
        if not form:
            raise HTTPException(status_code=404, detail="Form not found")

        logger.info(f"Form {form_id} updated ({', '.join(changes) or 'no fields'})")
        return form
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update form {form_id} error: {e}")
        raise HTTPException(status_code=500, detail="Error while updating the form")


@router.delete("/{form_id}")
async def delete_form(
    form_id: str,
    auth_data: Dict = Depends(require_admin),
    forms: FormStore = Depends(get_form_store),
    responses: ResponseStore = Depends(get_response_store)
):
    """Delete a form that has no responses (admin only)"""
    try:
        response_count = await responses.count_for_form(form_id)
        if response_count > 0:
            logger.info(f"Form {form_id} has {response_count} responses - deletion refused")
            raise HTTPException(
                status_code=400,
                detail=f"This form cannot be deleted because it has {response_count} responses"
            )

        if not await forms.delete_form(form_id):
            raise HTTPException(status_code=404, detail="Form not found")

        logger.info(f"Form {form_id} deleted")
        return {"success": True, "message": "Form deleted successfully", "deletedId": form_id}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete form {form_id} error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{form_id}/has-responses")
async def has_responses(form_id: str, responses: ResponseStore = Depends(get_response_store)):
    try:
        return {"hasResponses": await responses.count_for_form(form_id) > 0}
    except Exception as e:
        logger.error(f"Has-responses check for form {form_id} error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{form_id}/responses", response_model=PaginatedResponses)
async def list_form_responses(
    form_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    auth_data: Dict = Depends(require_admin),
    responses: ResponseStore = Depends(get_response_store)
):
    """Paginated responses of a form (admin only)"""
    try:
        rows, total = await responses.list_form_responses(form_id, page, limit)
        logger.info(f"{len(rows)} responses fetched for form {form_id} (page {page}, limit {limit})")
        return {
            "responses": rows,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit)
            }
        }
    except Exception as e:
        logger.error(f"List responses for form {form_id} error: {e}")
        raise HTTPException(status_code=500, detail="Error while fetching responses")


@router.post("/{form_id}/submit", status_code=201, response_model=ResponseSubmitResponse)
async def submit_form(
    form_id: str,
    body: FormSubmitRequest,
    auth_data: Dict = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service)
):
    """Submit a response, form id taken from the path"""
    try:
        record = await service.submit(form_id, body.response_data, auth_data)
        return ResponseSubmitResponse(message="Response submitted successfully", response=record)
    except BibformsError:
        raise
    except Exception as e:
        logger.error(f"Form {form_id} submission error: {e}")
        raise HTTPException(status_code=500, detail="Error while submitting the response")
