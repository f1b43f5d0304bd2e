# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - Credential verification and session issuance
# - Session refresh

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_session() / auth.get_user() - Load and verify the current session
- auth.sign_out() - Revoke the session

Sessions are persisted in cookies through CookieSessionStorage, so every call
above reads and writes the current request's cookies.
"""
