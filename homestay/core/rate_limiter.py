"""
Rate limiter configuration module.

Separated to avoid circular imports between main.py and the routers.
Import `limiter` from here to use the @limiter.limit() decorator; the
killswitch is applied from settings in `create_app`.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

AUTH_RATE_LIMIT = "20/minute"

# - key_func: Uses client IP for rate limiting
limiter = Limiter(key_func=get_remote_address)
