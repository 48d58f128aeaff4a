"""Accessor for the form_responses and form_file_uploads tables"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from supabase import Client

from bibforms.utils.retry import retry_supabase_query
from bibforms.utils.serialization import encode_json_field, decode_json_field

logger = logging.getLogger(__name__)

RESPONSES_TABLE = "form_responses"
FILE_UPLOADS_TABLE = "form_file_uploads"

# Left joins through the form_id / user_id foreign keys
WITH_FORM_TITLE = "*, forms(title)"
WITH_FORM_AND_PROFILE = "*, forms(title), profiles(email)"


def normalize_response_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten a response row read from Supabase.

    Decodes response_data, lifts the embedded form title and profile email
    to form_title / user_email, and keeps the nested form / profile objects
    the frontend reads.
    """
    record = dict(row)
    record["response_data"] = decode_json_field(record.get("response_data"))

    form = record.pop("forms", None) or {}
    profile = record.pop("profiles", None) or {}
    if "form_title" not in record:
        record["form_title"] = form.get("title")
    if "user_email" not in record:
        record["user_email"] = profile.get("email")

    record["form"] = {"title": record["form_title"]} if record["form_title"] else None
    record["profile"] = {"email": record["user_email"]} if record["user_email"] else None
    return record


class ResponseStore:
    """Form responses persisted in Supabase.

    All methods run the blocking Supabase client in a worker thread so the
    event loop keeps serving other requests while a query is in flight.
    """

    def __init__(self, client: Client):
        self.client = client

    async def _run(self, query_func):
        return await asyncio.to_thread(retry_supabase_query, query_func)

    async def insert_response(self, form_id: str, user_id: Optional[str], data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a response; data is stored as JSON text"""
        result = await self._run(
            lambda: self.client.table(RESPONSES_TABLE).insert({
                "form_id": form_id,
                "user_id": user_id,
                "response_data": encode_json_field(data)
            }).execute()
        )
        row = dict(result.data[0])
        row["response_data"] = decode_json_field(row.get("response_data"))
        return row

    async def get_response_with_form(self, response_id: str) -> Optional[Dict[str, Any]]:
        """Point lookup joined with the parent form title, None when not visible"""
        result = await self._run(
            lambda: self.client.table(RESPONSES_TABLE).select(
                WITH_FORM_TITLE
            ).eq("id", response_id).limit(1).execute()
        )
        if not result.data:
            return None
        return normalize_response_row(result.data[0])

    async def get_response(self, response_id: str) -> Optional[Dict[str, Any]]:
        """Point lookup with form title and submitter email"""
        result = await self._run(
            lambda: self.client.table(RESPONSES_TABLE).select(
                WITH_FORM_AND_PROFILE
            ).eq("id", response_id).limit(1).execute()
        )
        if not result.data:
            return None
        return normalize_response_row(result.data[0])

    async def list_responses(self, form_id: Optional[str] = None, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """All responses, newest first, optionally narrowed to a form and/or owner"""
        def query():
            q = self.client.table(RESPONSES_TABLE).select(WITH_FORM_AND_PROFILE)
            if form_id:
                q = q.eq("form_id", form_id)
            if user_id:
                q = q.eq("user_id", user_id)
            return q.order("submitted_at", desc=True).execute()

        result = await self._run(query)
        return [normalize_response_row(row) for row in (result.data or [])]

    async def list_form_responses(self, form_id: str, page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        """One page of a form's responses plus the form's total response count"""
        offset = (page - 1) * limit
        result = await self._run(
            lambda: self.client.table(RESPONSES_TABLE).select(
                "*, profiles(email)", count="exact"
            ).eq("form_id", form_id).order(
                "submitted_at", desc=True
            ).range(offset, offset + limit - 1).execute()
        )
        rows = [normalize_response_row(row) for row in (result.data or [])]
        total = result.count if result.count is not None else len(rows)
        return rows, total

    async def count_for_form(self, form_id: str) -> int:
        result = await self._run(
            lambda: self.client.table(RESPONSES_TABLE).select(
                "id", count="exact"
            ).eq("form_id", form_id).limit(1).execute()
        )
        return result.count or 0

    async def count_all(self) -> int:
        result = await self._run(
            lambda: self.client.table(RESPONSES_TABLE).select(
                "id", count="exact"
            ).limit(1).execute()
        )
        return result.count or 0

    async def delete_response(self, response_id: str) -> None:
        await self._run(
            lambda: self.client.table(RESPONSES_TABLE).delete().eq("id", response_id).execute()
        )

    async def insert_file_metadata(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Record where an uploaded answer file lives; the file itself is stored elsewhere"""
        result = await self._run(
            lambda: self.client.table(FILE_UPLOADS_TABLE).insert(metadata).execute()
        )
        return result.data[0]
