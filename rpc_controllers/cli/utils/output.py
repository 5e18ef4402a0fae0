"""
CLI output helpers built on Click styling.

Respects NO_COLOR / TERM=dumb through ``click.style``.
"""

from __future__ import annotations

import shutil
from typing import Sequence

import click

_RULE = "─"   # ─
_CHECK = "✓"  # ✓
_CROSS = "✗"  # ✗


def _width() -> int:
    return max(40, min(shutil.get_terminal_size((80, 24)).columns, 120))


def success(message: str) -> None:
    click.echo(click.style(f"{_CHECK} {message}", fg="green"))


def error(message: str) -> None:
    click.echo(click.style(f"{_CROSS} {message}", fg="red"), err=True)


def dim(message: str) -> None:
    click.echo(click.style(message, dim=True))


def section(title: str) -> None:
    """
    Print a ruled section header.

        ── users ─────────────────────────
    """
    tail = max(4, _width() - len(title) - 4)
    click.echo(click.style(f"{_RULE}{_RULE} {title} {_RULE * tail}", fg="cyan", bold=True))


def table(headers: Sequence[str], rows: Sequence[Sequence[object]], *, indent: int = 2) -> None:
    """Print rows aligned under ``headers``."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [w + 2 for w in widths]

    prefix = " " * indent
    header = "".join(h.ljust(w) for h, w in zip(headers, widths))
    click.echo(prefix + click.style(header, fg="cyan", bold=True))
    click.echo(prefix + click.style(_RULE * sum(widths), dim=True))
    for row in rows:
        click.echo(prefix + "".join(str(cell).ljust(w) for cell, w in zip(row, widths)))
