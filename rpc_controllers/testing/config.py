"""
Testing - Config Override Utilities.

Provides ``override_settings`` context manager / decorator for
replacing ``ControllersConfig`` fields during tests.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
from typing import Any, Callable, Optional

from .. import config as config_module
from ..config import ControllersConfig, get_config, set_config


class override_settings:
    """
    Temporarily override active config fields.

    Context manager::

        with override_settings(strict_markers=True):
            ...

    Decorator::

        @override_settings(min_rate_limit_window=0.5)
        async def test_short_windows():
            ...

    Keys are field names of ``ControllersConfig``; upper-case names are
    accepted (``STRICT_MARKERS``).
    """

    def __init__(self, **overrides: Any):
        self._overrides = {key.lower(): value for key, value in overrides.items()}
        self._saved: Optional[ControllersConfig] = None
        self._had_config = False

    # -- Context manager -------------------------------------------------

    def __enter__(self):
        self._apply()
        return self

    def __exit__(self, *exc_info):
        self._restore()

    # -- Async context manager -------------------------------------------

    async def __aenter__(self):
        self._apply()
        return self

    async def __aexit__(self, *exc_info):
        self._restore()

    # -- Decorator -------------------------------------------------------

    def __call__(self, func: Callable):
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                self._apply()
                try:
                    return await func(*args, **kwargs)
                finally:
                    self._restore()

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            self._apply()
            try:
                return func(*args, **kwargs)
            finally:
                self._restore()

        return sync_wrapper

    # -- Internals -------------------------------------------------------

    def _apply(self):
        self._had_config = config_module._active_config is not None
        self._saved = get_config()
        set_config(dataclasses.replace(self._saved, **self._overrides))

    def _restore(self):
        set_config(self._saved if self._had_config else None)
        self._saved = None
