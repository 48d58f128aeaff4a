"""Accessor for the forms and profiles tables"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from bibforms.utils.retry import retry_supabase_query
from bibforms.utils.serialization import encode_json_field, decode_json_field

logger = logging.getLogger(__name__)

FORMS_TABLE = "forms"
PROFILES_TABLE = "profiles"
FORM_COLUMNS = "id, title, description, json_schema, status, created_at, updated_at"


def normalize_form_row(row: Dict[str, Any]) -> Dict[str, Any]:
    form = dict(row)
    if "json_schema" in form:
        form["json_schema"] = decode_json_field(form["json_schema"])
    return form


class FormStore:
    """Forms authored by administrators"""

    def __init__(self, client: Client):
        self.client = client

    async def _run(self, query_func):
        return await asyncio.to_thread(retry_supabase_query, query_func)

    async def get_form(self, form_id: str) -> Optional[Dict[str, Any]]:
        result = await self._run(
            lambda: self.client.table(FORMS_TABLE).select(FORM_COLUMNS).eq(
                "id", form_id
            ).limit(1).execute()
        )
        if not result.data:
            return None
        return normalize_form_row(result.data[0])

    async def list_forms(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        def query():
            q = self.client.table(FORMS_TABLE).select(FORM_COLUMNS)
            if status:
                q = q.eq("status", status)
            return q.order("created_at", desc=True).execute()

        result = await self._run(query)
        return [normalize_form_row(row) for row in (result.data or [])]

    async def list_statuses(self) -> List[Dict[str, Any]]:
        result = await self._run(
            lambda: self.client.table(FORMS_TABLE).select("id, status").execute()
        )
        return result.data or []

    async def create_form(
        self,
        title: str,
        description: str,
        json_schema: Dict[str, Any],
        status: str,
        created_by: Optional[str]
    ) -> Dict[str, Any]:
        result = await self._run(
            lambda: self.client.table(FORMS_TABLE).insert({
                "title": title,
                "description": description or "",
                "json_schema": encode_json_field(json_schema),
                "status": status,
                "created_by": created_by
            }).execute()
        )
        return normalize_form_row(result.data[0])

    async def update_form(self, form_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply only the given columns; updated_at is refreshed"""
        update = dict(changes)
        if "json_schema" in update:
            update["json_schema"] = encode_json_field(update["json_schema"])
        update["updated_at"] = datetime.now(timezone.utc).isoformat()

        result = await self._run(
            lambda: self.client.table(FORMS_TABLE).update(update).eq("id", form_id).execute()
        )
        if not result.data:
            return None
        return normalize_form_row(result.data[0])

    async def delete_form(self, form_id: str) -> bool:
        result = await self._run(
            lambda: self.client.table(FORMS_TABLE).delete().eq("id", form_id).execute()
        )
        return bool(result.data)


class ProfileStore:
    """User profiles carrying the application role (admin or client)"""

    def __init__(self, client: Client):
        self.client = client

    async def get_role(self, user_id: str) -> Optional[str]:
        result = await asyncio.to_thread(
            retry_supabase_query,
            lambda: self.client.table(PROFILES_TABLE).select("role").eq(
                "id", user_id
            ).limit(1).execute()
        )
        if not result.data:
            return None
        return result.data[0].get("role")

    async def list_roles(self) -> List[Dict[str, Any]]:
        result = await asyncio.to_thread(
            retry_supabase_query,
            lambda: self.client.table(PROFILES_TABLE).select("id, role").execute()
        )
        return result.data or []
