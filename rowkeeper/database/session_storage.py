"""
Supabase auth storage backed by request cookies.

The auth client persists its session through get_item/set_item/remove_item.
Here those calls read the incoming request cookies and queue Set-Cookie
instructions on the RequestCookieStore, so a refreshed or newly issued session
travels back to the browser with the response.

Values are stored as "base64-" + unpadded base64url and split into numbered
chunk cookies (<name>.0, <name>.1, ...) when they exceed MAX_CHUNK_SIZE.
"""

import base64
import logging
from typing import Any, Dict, List, Optional

from supabase_auth import SyncSupportedStorage
from supabase_auth.constants import STORAGE_KEY

from rowkeeper.core.cookies import CookieToSet, RequestCookieStore

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 3180
BASE64_PREFIX = "base64-"


def encode_cookie_value(value: str) -> str:
    encoded = base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")
    return BASE64_PREFIX + encoded.rstrip("=")


def decode_cookie_value(value: str) -> str:
    if not value.startswith(BASE64_PREFIX):
        return value
    encoded = value[len(BASE64_PREFIX):]
    padded = encoded + "=" * (-len(encoded) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")


def split_chunks(name: str, value: str, chunk_size: int = MAX_CHUNK_SIZE) -> Dict[str, str]:
    if len(value) <= chunk_size:
        return {name: value}
    return {
        f"{name}.{i}": value[start:start + chunk_size]
        for i, start in enumerate(range(0, len(value), chunk_size))
    }


def combine_chunks(name: str, cookies: Dict[str, str]) -> Optional[str]:
    if name in cookies:
        return cookies[name]
    parts: List[str] = []
    i = 0
    while f"{name}.{i}" in cookies:
        parts.append(cookies[f"{name}.{i}"])
        i += 1
    return "".join(parts) if parts else None


class CookieSessionStorage(SyncSupportedStorage):
    def __init__(
        self,
        cookie_store: RequestCookieStore,
        cookie_name: str,
        cookie_options: Optional[Dict[str, Any]] = None,
    ):
        self.cookie_store = cookie_store
        self.cookie_name = cookie_name
        self.cookie_options = cookie_options or {}
        # Current cookie values: the request's, overlaid by writes made during this request
        self._cookies: Dict[str, str] = {c.name: c.value for c in cookie_store.get_all()}

    def _cookie_name_for(self, key: str) -> str:
        if key.startswith(STORAGE_KEY):
            return self.cookie_name + key[len(STORAGE_KEY):]
        return key

    def _names_for(self, name: str) -> List[str]:
        return [n for n in self._cookies if n == name or n.startswith(f"{name}.")]

    def get_item(self, key: str) -> Optional[str]:
        raw = combine_chunks(self._cookie_name_for(key), self._cookies)
        if raw is None:
            return None
        try:
            return decode_cookie_value(raw)
        except ValueError:
            logger.warning("Discarding undecodable auth cookie for %s", key)
            return None

    def set_item(self, key: str, value: str) -> None:
        name = self._cookie_name_for(key)
        chunks = split_chunks(name, encode_cookie_value(value))
        stale = [n for n in self._names_for(name) if n not in chunks]

        to_set = [CookieToSet(n, "", {**self.cookie_options, "max_age": 0}) for n in stale]
        to_set.extend(CookieToSet(n, v, dict(self.cookie_options)) for n, v in chunks.items())
        self.cookie_store.set_all(to_set)

        for n in stale:
            del self._cookies[n]
        self._cookies.update(chunks)

    def remove_item(self, key: str) -> None:
        name = self._cookie_name_for(key)
        names = self._names_for(name)
        if not names:
            return
        self.cookie_store.set_all(
            [CookieToSet(n, "", {**self.cookie_options, "max_age": 0}) for n in names]
        )
        for n in names:
            del self._cookies[n]
