#!/usr/bin/env python3
"""
dbscript – run SQL script directories against MariaDB / MySQL.

• create   runs the inline ``create_statements`` with the admin account
• schema   runs every file of ``schema_dirs`` with the application account
• data     same for ``data_dirs``
• update   same for ``update_dirs``

Files run in name order; ``*.gz`` files are gunzipped on the fly.  The
first failing statement stops the run and nothing is rolled back.
"""
from __future__ import annotations

import logging
import pathlib
import sys

import click
import mysql.connector
import sqlparse

from dbscript import __version__
from dbscript.config import ConfigError, Environment, load
from dbscript.errors import ScriptReadError, StatementExecutionError
from dbscript.goals import plan_script_set, run_script_set, script_set
from dbscript.scripts.runner import DirectoryResult


def _load_env(ctx, _param, value) -> Environment:
    try:
        return load(ctx.obj["config_path"], value)
    except ConfigError as exc:
        click.echo(f"Config error: {exc}", err=True)
        sys.exit(1)


def _apply_overrides(env: Environment, batch, batch_size, delimiter, encoding) -> None:
    opts = env.options
    if batch is not None:
        opts.use_batch = batch
    if batch_size is not None:
        opts.batch_size = batch_size
    if delimiter is not None:
        if not delimiter:
            raise click.BadParameter("must not be empty", param_hint="--delimiter")
        opts.delimiter = delimiter
    if encoding is not None:
        opts.encoding = encoding


def _statement_kind(sql: str) -> str:
    parsed = sqlparse.parse(sql)
    return parsed[0].get_type() if parsed else "UNKNOWN"


def _run_goal(goal: str, env: Environment, dry_run: bool) -> None:
    try:
        scripts = script_set(env, goal)
        if dry_run:
            for name, statements in plan_script_set(env, scripts):
                click.echo(f"-- {name}: {len(statements)} statement(s)")
                for i, sql in enumerate(statements):
                    click.echo(f"--   [{i}] {_statement_kind(sql)}")
                    click.echo(sql.strip())
            click.echo("\n-- DRY‑RUN complete (no changes executed)")
            return

        results = run_script_set(env, scripts)
    except ConfigError as exc:
        click.echo(f"Config error: {exc}", err=True)
        sys.exit(1)
    except ScriptReadError as exc:
        click.echo(f"Script error: {exc}", err=True)
        sys.exit(1)
    except StatementExecutionError as exc:
        click.echo(f"Error executing database scripts: {exc}", err=True)
        sys.exit(1)
    except mysql.connector.Error as exc:
        click.echo(f"Error executing database scripts: {exc}", err=True)
        sys.exit(1)

    files = statements = 0
    for res in results:
        if isinstance(res, DirectoryResult):
            files += len(res.files)
            statements += res.statements
        else:
            files += 1
            statements += res.statements
    click.echo(f"✅  {goal}: {statements} statement(s) from {files} script(s).")


def _common_opts(fn):
    opts = [
        click.option("-e", "--env", callback=_load_env, expose_value=True),
        click.option("--batch/--no-batch", default=None, help="use SQL batches"),
        click.option("--batch-size", type=click.IntRange(min=1), default=None),
        click.option("--delimiter", default=None, help="statement delimiter"),
        click.option("--encoding", default=None, help="script file encoding"),
        click.option("--dry-run", is_flag=True),
    ]
    for opt in reversed(opts):
        fn = opt(fn)
    return fn


@click.group()
@click.option(
    "-c", "--config", "config_path", type=click.Path(), help="env config YAML"
)
@click.option("-v", "--verbose", is_flag=True, help="log every statement")
@click.pass_context
def main(ctx, config_path, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    ctx.obj = {"config_path": pathlib.Path(config_path) if config_path else None}


@main.command()
def version():
    click.echo(__version__)


def _goal_command(goal: str, help_text: str):
    @main.command(goal, help=help_text)
    @_common_opts
    def command(env, batch, batch_size, delimiter, encoding, dry_run):
        _apply_overrides(env, batch, batch_size, delimiter, encoding)
        _run_goal(goal, env, dry_run)

    return command


create = _goal_command("create", "Run create_statements with the admin account.")
schema = _goal_command("schema", "Run the scripts in schema_dirs.")
data = _goal_command("data", "Run the scripts in data_dirs.")
update = _goal_command("update", "Run the scripts in update_dirs.")
