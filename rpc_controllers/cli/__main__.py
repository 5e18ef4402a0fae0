"""rpcc CLI - Main Entry Point.

Commands:
    routes - List the procedures declared by controllers
    check  - Validate controller registration (exits non-zero on failure)
"""

import importlib
import json
import logging
import os
import sys
from typing import Any, Dict, List

import click

from . import __version__, __cli_name__
from ..controller.router import describe_controllers
from ..faults import Fault, RegistrationFault
from .utils.output import dim, error, section, success, table


def load_target(spec: str) -> Any:
    """
    Import ``MODULE:ATTR`` (``ATTR`` may be dotted).

    Raises:
        click.BadParameter: Malformed spec or missing module/attribute
    """
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise click.BadParameter(f"expected MODULE:ATTR, got {spec!r}")

    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise click.BadParameter(f"{module_name!r} has no attribute {attr_path!r}") from None
    return target


def as_controllers(target: Any) -> Any:
    """A single controller becomes a one-element list; lists and mappings pass through."""
    if isinstance(target, (list, tuple, dict)):
        return target
    return [target]


def _describe(spec: str) -> Dict[str, List[Any]]:
    return describe_controllers(as_controllers(load_target(spec)))


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose: bool):
    """Inspect declarative RPC controllers.

    \b
    Examples:
      rpcc routes app.controllers:controllers
      rpcc check app.controllers:UsersController
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@cli.command('routes')
@click.argument('target')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
def routes(target: str, as_json: bool):
    """List declared procedures for TARGET (MODULE:ATTR)."""
    try:
        described = _describe(target)
    except Fault as e:
        error(f"{e.code}: {e.message}")
        sys.exit(1)

    if as_json:
        payload = {
            namespace: [route.to_dict() for route in descriptions]
            for namespace, descriptions in described.items()
        }
        click.echo(json.dumps(payload, indent=2, default=str))
        return

    for namespace, descriptions in described.items():
        section(namespace)
        if not descriptions:
            dim("  (no procedures)")
            continue
        rows = [
            (
                f"{namespace}.{d.route}",
                d.kind,
                d.middlewares,
                d.to_dict()["input"] or "-",
                d.to_dict()["output"] or "-",
            )
            for d in descriptions
        ]
        table(["Path", "Kind", "Middleware", "Input", "Output"], rows)
        click.echo()


@cli.command('check')
@click.argument('target')
def check(target: str):
    """Validate registration of TARGET (MODULE:ATTR)."""
    try:
        described = _describe(target)
    except RegistrationFault as e:
        error(f"{e.code}: {e.message}")
        sys.exit(1)

    total = sum(len(descriptions) for descriptions in described.values())
    success(f"{len(described)} controller(s), {total} procedure(s) OK")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
