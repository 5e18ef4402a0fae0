"""
rpcc - inspection CLI for rpc_controllers.

Usage:
    rpcc routes app.controllers:controllers
    rpcc routes app.controllers:UsersController --json
    rpcc check app.controllers:controllers
"""

from .. import __version__

__cli_name__ = "rpcc"
