import logging

from fastapi import HTTPException
from supabase_auth.errors import AuthError

from rowkeeper.database.supabase_client import SessionClient
from rowkeeper.modules.auth.schemas import LoginRequest, RegisterRequest, RegisterResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session_client: SessionClient):
        self.session_client = session_client
        self.supabase = session_client.supabase

    def login(self, login_data: LoginRequest) -> None:
        """Sign in with password. The new session is written to cookies by the auth storage."""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except AuthError as e:
            logger.info(f"Sign in failed for {login_data.email}: {e.message}")
            raise HTTPException(status_code=400, detail=e.message)

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=400, detail="Invalid login credentials")
        logger.info(f"Signed in {auth_response.user.id}")

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up. No session comes back when email confirmation is enabled."""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password
            })
        except AuthError as e:
            logger.info(f"Sign up failed for {register_data.email}: {e.message}")
            raise HTTPException(status_code=400, detail=e.message)

        user_id = auth_response.user.id if auth_response.user else None
        logger.info(f"Registered {user_id or register_data.email}")
        return RegisterResponse(
            user_id=user_id,
            email=register_data.email,
            needs_confirmation=auth_response.session is None
        )

    def logout(self) -> None:
        """Sign out. Session cookies are cleared even if the provider call fails."""
        try:
            self.supabase.auth.sign_out()
        except Exception as e:
            logger.warning(f"Sign out call failed, clearing session cookies anyway: {e}")
            self.session_client.clear_session()
