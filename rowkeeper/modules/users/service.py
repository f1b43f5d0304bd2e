import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from fastapi import HTTPException
from pydantic import ValidationError
from supabase import Client

from rowkeeper.modules.users.schemas import (
    UserRow, UserRowInput, UserRowForm, RowIntent, MutationResult
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Row not found, or you are not allowed to change it."


class UserRowService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_rows(self, identity_id: str, is_admin: bool = False) -> List[UserRow]:
        """Rows newest first. Non-admins only get rows they own."""
        try:
            query = self.supabase.table("users").select("*")
            if not is_admin:
                query = query.eq("user_id", identity_id)
            result = query.order("created_at", desc=True).execute()
        except Exception:
            logger.exception("Failed to load rows for %s", identity_id)
            raise HTTPException(status_code=500, detail="Failed to load rows")
        return [UserRow(**row) for row in result.data or []]

    def add_row(self, identity_id: str, row_input: UserRowInput) -> MutationResult:
        try:
            result = self.supabase.table("users").insert([{
                "name": row_input.name,
                "email": row_input.email,
                "user_id": identity_id
            }]).execute()
        except Exception as e:
            logger.error(f"Error adding row for {identity_id}: {e}")
            return MutationResult(intent=RowIntent.ADD, ok=False, message=f"Could not add row: {_error_text(e)}")
        affected = len(result.data or [])
        if not affected:
            return MutationResult(intent=RowIntent.ADD, ok=False, message="Could not add row.")
        return MutationResult(intent=RowIntent.ADD, ok=True, affected=affected, message="Row added.")

    def update_row(
        self,
        row_id: str,
        row_input: UserRowInput,
        identity_id: str,
        is_admin: bool = False
    ) -> MutationResult:
        try:
            query = self.supabase.table("users")\
                .update({
                    "name": row_input.name,
                    "email": row_input.email,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", row_id)
            if not is_admin:
                query = query.eq("user_id", identity_id)
            result = query.execute()
        except Exception as e:
            logger.error(f"Error updating row {row_id}: {e}")
            return MutationResult(intent=RowIntent.UPDATE, ok=False, message=f"Could not update row: {_error_text(e)}")
        affected = len(result.data or [])
        if not affected:
            return MutationResult(intent=RowIntent.UPDATE, ok=False, message=NOT_FOUND_MESSAGE)
        return MutationResult(intent=RowIntent.UPDATE, ok=True, affected=affected, message="Row updated.")

    def delete_row(self, row_id: str, identity_id: str, is_admin: bool = False) -> MutationResult:
        try:
            query = self.supabase.table("users")\
                .delete()\
                .eq("id", row_id)
            if not is_admin:
                query = query.eq("user_id", identity_id)
            result = query.execute()
        except Exception as e:
            logger.error(f"Error deleting row {row_id}: {e}")
            return MutationResult(intent=RowIntent.DELETE, ok=False, message=f"Could not delete row: {_error_text(e)}")
        affected = len(result.data or [])
        if not affected:
            return MutationResult(intent=RowIntent.DELETE, ok=False, message=NOT_FOUND_MESSAGE)
        return MutationResult(intent=RowIntent.DELETE, ok=True, affected=affected, message="Row deleted.")

    def apply(self, form: UserRowForm, identity_id: str, is_admin: bool = False) -> MutationResult:
        """Run the submitted intent, scoped to the identity unless admin."""
        try:
            intent = RowIntent(form.intent)
        except ValueError:
            return MutationResult(ok=False, message=f"Unknown action: {form.intent or '(none)'}")

        if intent in (RowIntent.UPDATE, RowIntent.DELETE) and not (form.id or "").strip():
            return MutationResult(intent=intent, ok=False, message="Missing row id.")

        if intent == RowIntent.DELETE:
            return self.delete_row(form.id.strip(), identity_id, is_admin)

        row_input, error = _parse_row_input(form)
        if row_input is None:
            return MutationResult(intent=intent, ok=False, message=error)
        if intent == RowIntent.ADD:
            return self.add_row(identity_id, row_input)
        return self.update_row(form.id.strip(), row_input, identity_id, is_admin)


def _error_text(e: Exception) -> str:
    return getattr(e, "message", None) or str(e)


def _parse_row_input(form: UserRowForm) -> Tuple[Optional[UserRowInput], Optional[str]]:
    name = form.name.strip()
    email = form.email.strip()
    if not name or not email:
        return None, "Name and email are required."
    try:
        return UserRowInput(name=name, email=email), None
    except ValidationError:
        return None, "Enter a valid email address."
