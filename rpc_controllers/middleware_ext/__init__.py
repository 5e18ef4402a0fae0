"""
Middleware factories for controller procedures.

- create_auth_middleware: authorization guard
- create_rate_limit_middleware: fixed-window request counter
"""

from .guard import create_auth_middleware
from .rate_limit import (
    FixedWindowStore,
    WindowEntry,
    create_rate_limit_middleware,
    get_default_store,
)

__all__ = [
    "create_auth_middleware",
    "create_rate_limit_middleware",
    "FixedWindowStore",
    "WindowEntry",
    "get_default_store",
]
