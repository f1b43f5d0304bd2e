from __future__ import annotations

from rowkeeper.modules.profiles.schemas import Role
from rowkeeper.modules.profiles.service import ProfileService


def test_admin_profile_resolves_to_admin(backend, fake_supabase) -> None:
    backend.add_account("b", "b@x.com", role="admin")
    assert ProfileService(fake_supabase).get_role("b") == Role.ADMIN


def test_user_profile_resolves_to_user(backend, fake_supabase) -> None:
    backend.add_account("a", "a@x.com", role="user")
    assert ProfileService(fake_supabase).get_role("a") == Role.USER


def test_missing_profile_resolves_to_user(backend, fake_supabase) -> None:
    backend.add_account("a", "a@x.com", role=None)
    assert ProfileService(fake_supabase).get_role("a") == Role.USER


def test_unrecognised_role_resolves_to_user(backend, fake_supabase) -> None:
    backend.add_account("a", "a@x.com", role="superuser")
    assert ProfileService(fake_supabase).get_role("a") == Role.USER


def test_lookup_error_never_grants_admin(backend, fake_supabase) -> None:
    backend.add_account("c", "c@x.com", role="admin")
    backend.failing_tables.add("profiles")
    assert ProfileService(fake_supabase).get_role("c") == Role.USER
