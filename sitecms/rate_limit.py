"""
Request rate limits keyed by client address.

The public contact form has its own limit. Every route that accepts a
submission form (and therefore uploads) shares one "uploads" limit.
Limits are read from settings on each request.
"""
from typing import Callable

from slowapi import Limiter
from slowapi.util import get_remote_address

from sitecms.config import settings

CONTACT_LIMIT_MESSAGE = "Too many contact form submissions, please try again later."
UPLOAD_LIMIT_MESSAGE = "Too many file uploads, please try again later."

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def contact_limit(func: Callable) -> Callable:
    return limiter.limit(lambda: settings.RATE_LIMIT_CONTACT, error_message=CONTACT_LIMIT_MESSAGE)(func)


def upload_limit(name: str) -> Callable[[Callable], Callable]:
    """
    Apply the shared uploads limit to a route.

    Limits are registered by function name, so routes built by a factory
    pass a distinct ``name``.
    """
    def decorator(func: Callable) -> Callable:
        func.__name__ = func.__qualname__ = name
        return limiter.shared_limit(
            lambda: settings.RATE_LIMIT_UPLOADS,
            scope="uploads",
            error_message=UPLOAD_LIMIT_MESSAGE,
        )(func)
    return decorator
