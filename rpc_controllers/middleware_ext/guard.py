"""
Guard Middleware - authorization predicate as a middleware unit.

The predicate receives ``(ctx, input)`` and may be sync or async:

    True            -> continue the chain
    "FORBIDDEN"     -> AuthorizationFault(code="FORBIDDEN")
    "UNAUTHORIZED"  -> AuthorizationFault(code="UNAUTHORIZED")
    anything else   -> AuthorizationFault(code="UNAUTHORIZED")
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from ..faults import AuthorizationFault

if TYPE_CHECKING:
    from ..controller.base import Guard, Middleware, MiddlewareCall

logger = logging.getLogger("rpc_controllers.middleware.guard")


def create_auth_middleware(guard: "Guard") -> "Middleware":
    """Wrap ``guard`` into a middleware unit."""
    guard_name = getattr(guard, "__qualname__", repr(guard))

    async def auth_middleware(call: "MiddlewareCall") -> Any:
        result = guard(call.ctx, call.input)
        if inspect.isawaitable(result):
            result = await result

        if result is True:
            return await call.next()

        code = "FORBIDDEN" if result == "FORBIDDEN" else "UNAUTHORIZED"
        logger.info("Guard %s denied %s (%s)", guard_name, call.path, code)
        raise AuthorizationFault(code, path=call.path)

    auth_middleware.guard = guard
    return auth_middleware
