"""
Shared test fixtures and helpers for the rpc_controllers test suite.
"""

import pytest

from rpc_controllers.config import ControllersConfig, set_config
from rpc_controllers.middleware_ext.rate_limit import get_default_store

# Import fixtures so pytest can discover them
from rpc_controllers.testing.fixtures import (  # noqa: F401
    local_root,
    fake_clock,
    rate_limit_store,
)


@pytest.fixture(autouse=True)
def _isolated_settings():
    """Every test starts from default settings and an empty shared limiter."""
    set_config(ControllersConfig())
    get_default_store().clear()
    yield
    set_config(None)
    get_default_store().clear()


# ============================================================================
# Middleware helpers
# ============================================================================

def recorder(log, label):
    """Middleware that appends ``label`` to ``log`` and continues."""
    async def middleware(call):
        log.append(label)
        return await call.next()

    middleware.label = label
    return middleware


class Schema:
    """Validator exposing ``parse``; records every value it sees."""

    def __init__(self, transform=None):
        self.seen = []
        self._transform = transform or (lambda value: value)

    def parse(self, value):
        self.seen.append(value)
        return self._transform(value)
