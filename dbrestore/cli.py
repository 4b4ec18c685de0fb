#!/usr/bin/env python3
"""
dbrestore – put a dev/test database back into the state of a dump.

• Dumps live in the environment's *assets_dir* (default ``assets/``)
• Default dump name:   database.sql.gz
• Accepted formats:    .sql or .gz (gzip‑compressed .sql)

The dump must come from ``mysqldump --extended-insert=FALSE``; every
existing table in the target database is dropped first.
"""
from __future__ import annotations

import pathlib
import sys

import click
import sqlparse

from dbrestore import __version__
from dbrestore.config import ConfigurationError, Environment, ImportSettings, load
from dbrestore.errors import RestoreError
from dbrestore.restore import NORMAL, QUIET, VERBOSE, preview, restore


def _load_env(ctx, _param, value) -> tuple[Environment, ImportSettings]:
    try:
        return load(ctx.obj["config_path"], value)
    except ConfigurationError as exc:
        click.echo(f"Config error: {exc}", err=True)
        sys.exit(1)


def _fail(exc: RestoreError) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@click.group()
@click.option(
    "-c", "--config", "config_path", type=click.Path(), help="env config YAML/TOML"
)
@click.pass_context
def main(ctx, config_path):
    ctx.obj = {"config_path": pathlib.Path(config_path) if config_path else None}


@main.command()
def version():
    click.echo(__version__)


@main.command("restore")
@click.option("-e", "--env", "loaded", callback=_load_env, expose_value=True)
@click.option("--db", "dump_name", help="dump file name inside the assets directory")
@click.option("--assets", "assets_dir", type=click.Path(file_okay=False))
@click.option("--delimiter", help="statement delimiter; empty = one statement per line")
@click.option("--chunk-size", type=click.IntRange(min=1), help="bytes per read")
@click.option("--dry-run", is_flag=True, help="print statements, touch nothing")
@click.option("--reindent", is_flag=True, help="pretty‑print statements with --dry-run")
@click.option("-v", "--verbose", is_flag=True, help="echo every statement")
@click.option("-q", "--quiet", is_flag=True, help="only show errors")
def restore_cmd(loaded, dump_name, assets_dir, delimiter, chunk_size, dry_run, reindent, verbose, quiet):
    env, settings = loaded
    verbosity = QUIET if quiet else VERBOSE if verbose else NORMAL
    try:
        settings = settings.override(delimiter=delimiter, chunk_size=chunk_size)

        if dry_run:
            for stmt in preview(env, dump_name, settings, assets_dir=assets_dir):
                text = stmt.strip()
                if reindent:
                    text = sqlparse.format(text, reindent=True, keyword_case="upper")
                click.echo(f"{text}{settings.delimiter}")
            click.echo("\n-- DRY‑RUN complete (no changes executed)")
            return

        result = restore(env, dump_name, settings, assets_dir=assets_dir, verbosity=verbosity)
    except RestoreError as exc:
        _fail(exc)
        return

    if verbosity >= NORMAL:
        click.echo(f"✅  Restored {result}")
