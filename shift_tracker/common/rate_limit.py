"""Rate limiting configuration using slowapi.

Provides a module-level Limiter instance that routers import for
per-endpoint limits (the login gates), wired into the FastAPI app in main.py.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# default_limits only apply where SlowAPIMiddleware is mounted; the login
# routes carry explicit @limiter.limit(settings.LOGIN_RATE_LIMIT) decorators.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["120/minute"],
)
