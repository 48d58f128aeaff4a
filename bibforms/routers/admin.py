"""Admin dashboard endpoints"""
from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import Response
from typing import Dict
from datetime import datetime, timezone
import logging

from bibforms.dependencies import get_form_store, get_profile_store, get_response_store
from bibforms.middleware.auth import require_admin
from bibforms.services.admin_service import responses_to_csv, summarize_stats
from bibforms.services.form_store import FormStore, ProfileStore
from bibforms.services.response_store import ResponseStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/stats")
async def get_stats(
    auth_data: Dict = Depends(require_admin),
    forms: FormStore = Depends(get_form_store),
    responses: ResponseStore = Depends(get_response_store),
    profiles: ProfileStore = Depends(get_profile_store)
):
    """Form, response and user counts"""
    try:
        return summarize_stats(
            await forms.list_statuses(),
            await responses.count_all(),
            await profiles.list_roles()
        )
    except Exception as e:
        logger.error(f"Admin stats error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/forms/{form_id}/export")
async def export_form_responses(
    form_id: str,
    auth_data: Dict = Depends(require_admin),
    responses: ResponseStore = Depends(get_response_store)
):
    """Download a form's responses as CSV"""
    try:
        rows = await responses.list_responses(form_id=form_id)
        if not rows:
            raise HTTPException(status_code=404, detail="No responses found for this form")

        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        logger.info(f"Exporting {len(rows)} responses of form {form_id}")
        return Response(
            content=responses_to_csv(rows),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename=responses-{form_id}-{stamp}.csv"}
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"CSV export error for form {form_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
