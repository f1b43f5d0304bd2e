"""
Core dependencies for session handling and route protection
"""

from fastapi import Depends, Request
from rowkeeper.database.supabase_client import SessionClient, create_session_client
from rowkeeper.modules.auth.schemas import Identity
from rowkeeper.modules.profiles.schemas import Role
from rowkeeper.modules.profiles.service import ProfileService
from typing import Iterator
import logging

logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """Raised when a protected route is requested without a valid session."""


def get_session_client(request: Request) -> Iterator[SessionClient]:
    """Build this request's session client and register it so its cookies reach the response."""
    client = create_session_client(request)
    request.state.session_client = client
    try:
        yield client
    finally:
        client.close()


def get_current_identity(client: SessionClient = Depends(get_session_client)) -> Identity:
    identity = client.get_user()
    if identity is None:
        raise AuthenticationRequired()
    return identity


def get_current_role(
    identity: Identity = Depends(get_current_identity),
    client: SessionClient = Depends(get_session_client)
) -> Role:
    """Resolve the role on every request; profile lookup failures fall back to USER."""
    return ProfileService(client.supabase).get_role(identity.id)
