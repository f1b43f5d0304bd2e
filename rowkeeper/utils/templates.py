"""
HTML Templates - server-rendered pages for sign in, sign up and row management.
All dynamic text goes through html.escape.
"""

from html import escape
from typing import List, Optional

from rowkeeper.modules.profiles.schemas import Role
from rowkeeper.modules.users.schemas import UserRow

_STYLE = """
    :root {
        --bg: #f9fafb; --card: #ffffff; --text: #111827; --muted: #6b7280;
        --border: #e5e7eb; --accent: #4f46e5; --accent-hover: #4338ca;
        --error-bg: #fef2f2; --error-text: #b91c1c;
        --ok-bg: #ecfdf5; --ok-text: #047857;
    }
    @media (prefers-color-scheme: dark) {
        :root {
            --bg: #030712; --card: #111827; --text: #f9fafb; --muted: #9ca3af;
            --border: #1f2937; --accent: #6366f1; --accent-hover: #818cf8;
            --error-bg: #450a0a; --error-text: #fca5a5;
            --ok-bg: #022c22; --ok-text: #6ee7b7;
        }
    }
    * { box-sizing: border-box; }
    body { margin: 0; background: var(--bg); color: var(--text);
           font-family: -apple-system, system-ui, sans-serif; }
    main { max-width: 960px; margin: 0 auto; padding: 32px 16px; }
    .narrow { max-width: 420px; margin-top: 10vh; }
    .card { background: var(--card); border: 1px solid var(--border);
            border-radius: 16px; padding: 24px; margin-bottom: 24px; }
    h1 { font-size: 1.6rem; margin: 0 0 4px; }
    h2 { font-size: 1.1rem; margin: 0 0 16px; }
    .muted { color: var(--muted); font-size: 0.9rem; margin: 0; }
    label { display: block; font-size: 0.85rem; margin-bottom: 6px; }
    input { width: 100%; padding: 10px 12px; border: 1px solid var(--border);
            border-radius: 8px; background: transparent; color: inherit; }
    input[readonly] { opacity: 0.6; }
    button { padding: 10px 16px; border-radius: 8px; border: 1px solid var(--border);
             background: var(--card); color: inherit; cursor: pointer; }
    button.primary { background: var(--accent); border-color: var(--accent); color: #fff; }
    button.primary:hover { background: var(--accent-hover); }
    button.danger { color: var(--error-text); }
    button:disabled { opacity: 0.6; cursor: not-allowed; }
    .stack > * + * { margin-top: 16px; }
    .row { display: flex; gap: 12px; align-items: flex-end; flex-wrap: wrap; }
    .row > .field { flex: 1 1 200px; }
    .banner { padding: 12px 16px; border-radius: 8px; font-size: 0.9rem; margin-bottom: 16px; }
    .banner.error { background: var(--error-bg); color: var(--error-text); }
    .banner.ok { background: var(--ok-bg); color: var(--ok-text); }
    .header { display: flex; justify-content: space-between; align-items: flex-start;
              gap: 16px; margin-bottom: 24px; }
    .list-header { display: flex; justify-content: space-between; align-items: center; }
    .empty { text-align: center; padding: 32px 0; }
    .item { border: 1px solid var(--border); border-radius: 12px; padding: 16px; margin-top: 12px; }
    a { color: var(--accent); }
"""

# Marks a submitting form busy. The submitter's name/value is copied into a
# hidden input first because disabled buttons are left out of the form data.
_BUSY_SCRIPT = """
    document.addEventListener("submit", function (event) {
        var form = event.target;
        if (form.dataset.busy === "1") { event.preventDefault(); return; }
        form.dataset.busy = "1";
        var submitter = event.submitter;
        if (submitter && submitter.name) {
            var hidden = document.createElement("input");
            hidden.type = "hidden";
            hidden.name = submitter.name;
            hidden.value = submitter.value;
            form.appendChild(hidden);
        }
        form.querySelectorAll("input:not([type=hidden])").forEach(function (el) { el.readOnly = true; });
        form.querySelectorAll("button").forEach(function (el) { el.disabled = true; });
        if (submitter && submitter.dataset.busyLabel) { submitter.textContent = submitter.dataset.busyLabel; }
    });
"""


def _layout(title: str, body: str, narrow: bool = False) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <style>{_STYLE}</style>
</head>
<body>
<main{' class="narrow"' if narrow else ''}>
{body}
</main>
<script>{_BUSY_SCRIPT}</script>
</body>
</html>"""


def _banner(message: Optional[str], kind: str) -> str:
    if not message:
        return ""
    return f'<div class="banner {kind}" role="status">{escape(message)}</div>'


def _credentials_form(action: str, email: str, submit_label: str, busy_label: str,
                      password_autocomplete: str, disabled: bool = False) -> str:
    off = " disabled" if disabled else ""
    return f"""
    <form method="post" action="{action}" class="stack">
        <div>
            <label for="email">Email</label>
            <input id="email" name="email" type="email" autocomplete="email" required
                   placeholder="you@example.com" value="{escape(email)}"{off}>
        </div>
        <div>
            <label for="password">Password</label>
            <input id="password" name="password" type="password" autocomplete="{password_autocomplete}"
                   required{off}>
        </div>
        <button type="submit" class="primary" data-busy-label="{escape(busy_label)}"{off}>{escape(submit_label)}</button>
    </form>"""


def render_login_page(error: str = "", email: str = "") -> str:
    body = f"""
<div class="card">
    <h1>Sign in</h1>
    <p class="muted">Enter your credentials to continue</p>
    <div class="stack">
        {_banner(error, "error")}
        {_credentials_form("/login", email, "Sign in", "Signing in...", "current-password")}
    </div>
    <p class="muted">No account? <a href="/signup">Sign up</a></p>
</div>"""
    return _layout("Sign in", body, narrow=True)


def render_signup_page(error: str = "", email: str = "", check_email: bool = False) -> str:
    notice = ""
    if check_email:
        notice = _banner(
            "Account created. Please check your email to confirm your account, "
            "then come back and sign in.",
            "ok",
        )
    body = f"""
<div class="card">
    <h1>Create account</h1>
    <p class="muted">Sign up to get started. Use at least 8 characters for your password.</p>
    <div class="stack">
        {_banner(error, "error")}
        {notice}
        {_credentials_form("/signup", email, "Sign up", "Signing up...", "new-password", disabled=check_email)}
    </div>
    <p class="muted">Already have an account? <a href="/login">Sign in</a></p>
</div>"""
    return _layout("Create account", body, narrow=True)


def _render_row(row: UserRow) -> str:
    row_id = escape(str(row.id))
    return f"""
        <div class="item">
            <form method="post" action="/users" class="row">
                <input type="hidden" name="id" value="{row_id}">
                <div class="field">
                    <label>Name</label>
                    <input name="name" value="{escape(row.name)}" required>
                </div>
                <div class="field">
                    <label>Email</label>
                    <input name="email" type="email" value="{escape(row.email)}" required>
                </div>
                <button type="submit" name="intent" value="update" data-busy-label="Saving...">Save</button>
                <button type="submit" name="intent" value="delete" class="danger"
                        data-busy-label="Deleting..." formnovalidate>Delete</button>
            </form>
        </div>"""


def render_users_page(
    rows: List[UserRow],
    role: Role,
    email: Optional[str] = None,
    notice: Optional[str] = None,
    error: Optional[str] = None,
) -> str:
    is_admin = role == Role.ADMIN
    view = (
        "Admin view: you can see and manage all users."
        if is_admin
        else "User view: you can only see and manage your own users."
    )
    if rows:
        listing = "".join(_render_row(row) for row in rows)
    else:
        listing = '<p class="muted empty">No rows yet. Add your first user above.</p>'
    signed_in = f'<p class="muted">Signed in as {escape(email)}</p>' if email else ""
    heading = "All People" if is_admin else "Your People"

    body = f"""
<div class="header">
    <div>
        <h1>User Management</h1>
        <p class="muted">{view}</p>
        {signed_in}
    </div>
    <form method="post" action="/logout">
        <button type="submit" data-busy-label="Logging out...">Logout</button>
    </form>
</div>
{_banner(error, "error")}
{_banner(notice, "ok")}
<div class="card">
    <h2>Add a user row</h2>
    <form method="post" action="/users" class="row">
        <input type="hidden" name="intent" value="add">
        <div class="field">
            <label for="add-name">Name</label>
            <input id="add-name" name="name" placeholder="Jane Doe" required>
        </div>
        <div class="field">
            <label for="add-email">Email</label>
            <input id="add-email" name="email" type="email" placeholder="jane@example.com" required>
        </div>
        <button type="submit" class="primary" data-busy-label="Adding...">Add</button>
    </form>
</div>
<div class="card">
    <div class="list-header">
        <h2>{heading}</h2>
        <span class="muted">{len(rows)} total</span>
    </div>
    {listing}
</div>"""
    return _layout("User Management", body)
