# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Rows are records managed through the /users page, not auth accounts

"""
Expected Supabase table structure:
- id: bigint (primary key, generated)
- name: text (not null)
- email: text (not null)
- user_id: uuid (foreign key to auth.users.id, not null) - owner
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Every row has exactly one owner. Regular users read and write only rows whose
user_id is their own id; admins (profiles.role = 'admin') read and write all.
"""
