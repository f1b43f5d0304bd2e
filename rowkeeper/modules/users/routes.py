from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse
from rowkeeper.core.dependencies import get_current_identity, get_current_role, get_session_client
from rowkeeper.database.supabase_client import SessionClient
from rowkeeper.modules.auth.schemas import Identity
from rowkeeper.modules.profiles.schemas import Role
from rowkeeper.modules.users.schemas import UserRowForm
from rowkeeper.modules.users.service import UserRowService
from rowkeeper.utils.templates import render_users_page
from typing import Optional
from urllib.parse import urlencode
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def get_user_row_service(session_client: SessionClient = Depends(get_session_client)) -> UserRowService:
    return UserRowService(session_client.supabase)


@router.get("", response_class=HTMLResponse)
async def list_user_rows(
    notice: Optional[str] = None,
    error: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    role: Role = Depends(get_current_role),
    service: UserRowService = Depends(get_user_row_service)
):
    """Rows page: admins see every row, users only their own"""
    rows = service.list_rows(identity.id, is_admin=role == Role.ADMIN)
    return HTMLResponse(render_users_page(rows, role, email=identity.email, notice=notice, error=error))


@router.post("")
async def submit_user_row(
    intent: str = Form(""),
    id: Optional[str] = Form(None),
    name: str = Form(""),
    email: str = Form(""),
    identity: Identity = Depends(get_current_identity),
    role: Role = Depends(get_current_role),
    service: UserRowService = Depends(get_user_row_service)
):
    """Add, update or delete a row, then redirect back with the outcome"""
    form = UserRowForm(intent=intent, id=id, name=name, email=email)
    result = service.apply(form, identity.id, is_admin=role == Role.ADMIN)
    if not result.ok:
        logger.info(f"Row {intent or 'action'} by {identity.id} failed: {result.message}")
    outcome = {"notice": result.message} if result.ok else {"error": result.message}
    return RedirectResponse(url=f"/users?{urlencode(outcome)}", status_code=status.HTTP_303_SEE_OTHER)
