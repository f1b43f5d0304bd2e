from slowapi import Limiter
from slowapi.util import get_remote_address

from rowkeeper.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
