# Supabase table: profiles
# This file documents the expected database schema
# Profiles are read-only from this application

"""
Expected Supabase table structure:
- id: uuid (primary key, references auth.users.id)
- role: text (not null, default 'user') - 'admin' | 'user'
- created_at: timestamp (default: now())

Row level security: each identity may select its own profile.
"""
