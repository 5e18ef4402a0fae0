"""
Guard middleware (middleware_ext/guard.py).
"""

import logging

import pytest

from rpc_controllers.controller.base import MiddlewareCall
from rpc_controllers.controller.compiler import controller_to_router
from rpc_controllers.controller.decorators import Auth, Query
from rpc_controllers.faults import AuthorizationFault, FaultDomain
from rpc_controllers.middleware_ext.guard import create_auth_middleware


async def reached(ctx=None):
    return "reached"


def make_call(ctx=None, input=None):
    return MiddlewareCall(ctx=ctx, input=input, path="users.get", type="query", next=reached)


class TestCreateAuthMiddleware:

    @pytest.mark.asyncio
    async def test_true_continues(self):
        mw = create_auth_middleware(lambda ctx, input: True)
        assert await mw(make_call()) == "reached"

    @pytest.mark.asyncio
    async def test_async_guard(self):
        async def guard(ctx, input):
            return ctx["role"] == "admin"

        mw = create_auth_middleware(guard)
        assert await mw(make_call(ctx={"role": "admin"})) == "reached"
        with pytest.raises(AuthorizationFault):
            await mw(make_call(ctx={"role": "guest"}))

    @pytest.mark.asyncio
    async def test_false_is_unauthorized(self):
        mw = create_auth_middleware(lambda ctx, input: False)
        with pytest.raises(AuthorizationFault) as exc_info:
            await mw(make_call())
        fault = exc_info.value
        assert fault.code == "UNAUTHORIZED"
        assert fault.domain == FaultDomain.SECURITY
        assert fault.metadata["path"] == "users.get"

    @pytest.mark.asyncio
    async def test_forbidden(self):
        mw = create_auth_middleware(lambda ctx, input: "FORBIDDEN")
        with pytest.raises(AuthorizationFault) as exc_info:
            await mw(make_call())
        assert exc_info.value.code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_explicit_unauthorized(self):
        mw = create_auth_middleware(lambda ctx, input: "UNAUTHORIZED")
        with pytest.raises(AuthorizationFault) as exc_info:
            await mw(make_call())
        assert exc_info.value.code == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_truthy_non_true_is_rejected(self):
        mw = create_auth_middleware(lambda ctx, input: "yes")
        with pytest.raises(AuthorizationFault) as exc_info:
            await mw(make_call())
        assert exc_info.value.code == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_guard_receives_ctx_and_input(self):
        seen = []

        def guard(ctx, input):
            seen.append((ctx, input))
            return True

        await create_auth_middleware(guard)(make_call(ctx="c", input="i"))
        assert seen == [("c", "i")]

    @pytest.mark.asyncio
    async def test_denial_is_logged(self, caplog):
        mw = create_auth_middleware(lambda ctx, input: False)
        with caplog.at_level(logging.INFO, logger="rpc_controllers.middleware.guard"):
            with pytest.raises(AuthorizationFault):
                await mw(make_call())
        assert "users.get" in caplog.text


class TestAuthMarker:

    @pytest.mark.asyncio
    async def test_resolver_not_reached_when_denied(self, local_root):
        calls = []

        class Admin:
            @Query()
            @Auth(lambda ctx, input: ctx.get("admin", False))
            def wipe(self, call):
                calls.append(call)
                return "wiped"

        router = controller_to_router(local_root, Admin()).router

        with pytest.raises(AuthorizationFault):
            await local_root.create_caller(router, ctx={}).call("wipe")
        assert calls == []

        caller = local_root.create_caller(router, ctx={"admin": True})
        assert await caller.call("wipe") == "wiped"
