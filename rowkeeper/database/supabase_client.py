import logging
from typing import List, Optional

from fastapi import Request
from supabase import Client, ClientOptions, create_client
from supabase_auth import SyncSupportedStorage
from supabase_auth.constants import STORAGE_KEY
from supabase_auth.errors import AuthError

from rowkeeper.config import settings
from rowkeeper.core.cookies import RequestCookieStore
from rowkeeper.database.session_storage import CookieSessionStorage
from rowkeeper.modules.auth.schemas import Identity

logger = logging.getLogger(__name__)


def _create_supabase(storage: SyncSupportedStorage) -> Client:
    options = ClientOptions(
        storage=storage,
        persist_session=True,
        auto_refresh_token=False,
    )
    return create_client(settings.supabase_url, settings.supabase_anon_key, options=options)


class SessionClient:
    """Supabase client bound to one request's cookies. Never share across requests."""

    def __init__(self, supabase: Client, cookie_store: RequestCookieStore, storage: SyncSupportedStorage):
        self.supabase = supabase
        self.cookie_store = cookie_store
        self.storage = storage

    def get_user(self) -> Optional[Identity]:
        """Return the signed-in identity, or None. May refresh the session cookies."""
        try:
            session = self.supabase.auth.get_session()
            if not session:
                return None
            user_response = self.supabase.auth.get_user(session.access_token)
        except AuthError as e:
            logger.info("Session rejected by auth provider: %s", e)
            return None
        if not user_response or not user_response.user:
            return None
        # Data requests run as the signed-in user so row level security applies
        self.supabase.postgrest.auth(session.access_token)
        user = user_response.user
        return Identity(id=user.id, email=user.email)

    def clear_session(self) -> None:
        """Expire the session cookies without contacting the auth provider."""
        self.storage.remove_item(STORAGE_KEY)

    def get_set_cookie_headers(self) -> List[str]:
        return self.cookie_store.get_set_cookie_headers()

    def close(self) -> None:
        """Close the auth and PostgREST HTTP connections opened for this request."""
        self.supabase.auth.close()
        self.supabase.postgrest.aclose()


def create_session_client(request: Request) -> SessionClient:
    cookie_store = RequestCookieStore(request.headers.get("cookie"))
    storage = CookieSessionStorage(
        cookie_store,
        cookie_name=settings.get_auth_cookie_name(),
        cookie_options={
            "path": "/",
            "samesite": "lax",
            "httponly": True,
            "secure": settings.get_cookie_secure(),
            "max_age": settings.session_cookie_max_age,
        },
    )
    return SessionClient(_create_supabase(storage), cookie_store, storage)
