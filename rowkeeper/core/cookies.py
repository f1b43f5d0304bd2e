"""
Request-scoped cookie store.

Reads the incoming Cookie header and accumulates cookies to be set on the
response. Nothing is written until get_set_cookie_headers() is called.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from starlette.requests import cookie_parser
from starlette.datastructures import MutableHeaders
from starlette.responses import Response

DEFAULT_COOKIE_OPTIONS: Dict[str, Any] = {"path": "/", "samesite": "lax"}


@dataclass
class CookieToGet:
    name: str
    value: str


@dataclass
class CookieToSet:
    name: str
    value: str
    options: Dict[str, Any] = field(default_factory=dict)


def serialize_cookie(name: str, value: str, options: Optional[Dict[str, Any]] = None) -> str:
    """Build a single Set-Cookie value with Starlette's Response.set_cookie."""
    opts = {**DEFAULT_COOKIE_OPTIONS, **(options or {})}
    response = Response()
    response.set_cookie(
        name,
        value,
        max_age=opts.get("max_age"),
        expires=opts.get("expires"),
        path=opts.get("path"),
        domain=opts.get("domain"),
        secure=bool(opts.get("secure")),
        httponly=bool(opts.get("httponly")),
        samesite=opts.get("samesite"),
    )
    return response.headers.getlist("set-cookie")[-1]


class RequestCookieStore:
    def __init__(self, cookie_header: Optional[str]):
        self._cookie_header = cookie_header or ""
        self._to_set: List[CookieToSet] = []

    def get_all(self) -> List[CookieToGet]:
        parsed = cookie_parser(self._cookie_header)
        return [CookieToGet(name=name, value=value or "") for name, value in parsed.items()]

    def set_all(self, cookies: List[CookieToSet]) -> None:
        self._to_set.extend(cookies)

    def get_set_cookie_headers(self) -> List[str]:
        return [serialize_cookie(c.name, c.value, c.options) for c in self._to_set]


def append_set_cookie_headers(headers: MutableHeaders, set_cookie_strings: List[str]) -> None:
    for value in set_cookie_strings:
        headers.append("set-cookie", value)
