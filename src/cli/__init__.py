"""CLI entry point for the Goal Analysis Engine."""

from __future__ import annotations

import click

from src.cli.commands import analyze, categories, simulate


@click.group()
def cli() -> None:
    """Goal Analysis Engine."""


cli.add_command(analyze)
cli.add_command(categories)
cli.add_command(simulate)
