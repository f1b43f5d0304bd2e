from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from rowkeeper.config import settings
from rowkeeper.core.dependencies import get_session_client
from rowkeeper.core.limiter import limiter
from rowkeeper.database.supabase_client import SessionClient
from rowkeeper.modules.auth.schemas import LoginRequest, RegisterRequest
from rowkeeper.modules.auth.service import AuthService
from rowkeeper.utils.templates import render_login_page, render_signup_page

router = APIRouter(tags=["auth"])


def get_auth_service(session_client: SessionClient = Depends(get_session_client)) -> AuthService:
    return AuthService(session_client)


@router.get("/login", response_class=HTMLResponse)
async def login_page():
    """Sign-in form"""
    return HTMLResponse(render_login_page())


@router.post("/login")
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    service: AuthService = Depends(get_auth_service)
):
    """Sign in and redirect to the rows page; provider errors are shown as-is"""
    email = email.strip()
    try:
        service.login(LoginRequest(email=email, password=password))
    except HTTPException as e:
        return HTMLResponse(render_login_page(error=e.detail, email=email), status_code=e.status_code)
    return RedirectResponse(url="/users", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/signup", response_class=HTMLResponse)
async def signup_page():
    """Sign-up form"""
    return HTMLResponse(render_signup_page())


@router.post("/signup")
@limiter.limit(settings.login_rate_limit)
async def signup(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    service: AuthService = Depends(get_auth_service)
):
    """Register; without a session (email confirmation on) ask the user to check their inbox"""
    email = email.strip()
    try:
        result = service.register(RegisterRequest(email=email, password=password))
    except HTTPException as e:
        return HTMLResponse(render_signup_page(error=e.detail, email=email), status_code=e.status_code)
    if result.needs_confirmation:
        return HTMLResponse(render_signup_page(email=email, check_email=True))
    return RedirectResponse(url="/users", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
async def logout(service: AuthService = Depends(get_auth_service)):
    """Sign out and go back to the sign-in page"""
    service.logout()
    return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
