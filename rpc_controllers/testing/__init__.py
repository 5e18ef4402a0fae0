"""
rpc_controllers testing utilities.

Usage:
    from rpc_controllers.testing import LocalRoot, FakeClock, override_settings

    async def test_double():
        root = LocalRoot()
        router = controller_to_router(root, MathController()).router
        caller = root.create_caller(router)
        assert await caller.call("double", {"x": 2}) == 4

Components:
    - LocalRoot:          In-process RPC root recording builder steps
    - FakeClock:          Manually advanced clock for rate-limit windows
    - override_settings:  Context manager / decorator for config overrides
"""

from .clock import FakeClock
from .config import override_settings
from .root import (
    Caller,
    LocalProcedure,
    LocalProcedureBuilder,
    LocalRoot,
    LocalRouter,
    run_validator,
)

__all__ = [
    "Caller",
    "FakeClock",
    "LocalProcedure",
    "LocalProcedureBuilder",
    "LocalRoot",
    "LocalRouter",
    "override_settings",
    "run_validator",
]
