"""
Testing - Pytest Fixtures.

Import the fixtures in your ``conftest.py`` to register them::

    from rpc_controllers.testing.fixtures import *  # noqa: F401,F403
"""

from __future__ import annotations

import pytest

from ..config import ControllersConfig, set_config
from ..middleware_ext.rate_limit import FixedWindowStore
from .clock import FakeClock
from .root import LocalRoot


@pytest.fixture
def local_root():
    """A fresh :class:`LocalRoot`."""
    return LocalRoot()


@pytest.fixture
def fake_clock():
    """A :class:`FakeClock` starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def rate_limit_store(fake_clock):
    """An empty :class:`FixedWindowStore` driven by ``fake_clock``."""
    return FixedWindowStore(clock=fake_clock)


@pytest.fixture
def default_config():
    """Install default settings for the test, unaffected by the environment."""
    config = ControllersConfig()
    set_config(config)
    yield config
    set_config(None)


__all__ = ["local_root", "fake_clock", "rate_limit_store", "default_config"]
