"""FastAPI dependencies wiring stores and the notification pipeline"""
from fastapi import Depends, Request

from bibforms.config import Settings, get_settings
from bibforms.database import get_supabase_admin
from bibforms.services.form_store import FormStore, ProfileStore
from bibforms.services.response_store import ResponseStore
from bibforms.services.notification_dispatcher import NotificationDispatcher
from bibforms.services.scheduler import NotificationScheduler
from bibforms.services.submission_service import SubmissionService


def get_response_store() -> ResponseStore:
    return ResponseStore(get_supabase_admin())


def get_form_store() -> FormStore:
    return FormStore(get_supabase_admin())


def get_profile_store() -> ProfileStore:
    return ProfileStore(get_supabase_admin())


def get_dispatcher(
    settings: Settings = Depends(get_settings),
    store: ResponseStore = Depends(get_response_store)
) -> NotificationDispatcher:
    return NotificationDispatcher.from_settings(store, settings)


def get_scheduler(request: Request) -> NotificationScheduler:
    """Application-wide scheduler holding detached dispatch tasks"""
    return request.app.state.notification_scheduler


def get_submission_service(
    forms: FormStore = Depends(get_form_store),
    responses: ResponseStore = Depends(get_response_store),
    scheduler: NotificationScheduler = Depends(get_scheduler),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
) -> SubmissionService:
    return SubmissionService(forms, responses, scheduler=scheduler, dispatcher=dispatcher)
