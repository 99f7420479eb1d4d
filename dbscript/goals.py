"""
The four goals (create, schema, data, update) as plain values.

Each goal is a :class:`ScriptSet`: which connection it uses and where its
SQL comes from.  :func:`run_script_set` is the one runner shared by all.
"""
from __future__ import annotations
import logging
import pathlib
import time
import typing as t
from dataclasses import dataclass

from dbscript.config import ConfigError, ConnectionSettings, Environment, ScriptOptions
from dbscript.driver import connection
from dbscript.scripts.executor import execute_statement
from dbscript.scripts.reader import resolve_encoding
from dbscript.scripts.runner import (
    DirectoryResult,
    FileResult,
    StatementFactory,
    plan_directory,
    run_directory,
)
from dbscript.scripts.splitter import split_sql
from dbscript.scripts.statement import DBAPIStatement

log = logging.getLogger(__name__)

ADMIN = "admin"
APP = "app"

Connect = t.Callable[[ConnectionSettings], t.ContextManager[t.Any]]


@dataclass(frozen=True)
class ScriptSet:
    name: str
    role: str
    directories: tuple[pathlib.Path, ...] = ()
    inline_sql: str | None = None


def script_set(env: Environment, goal: str) -> ScriptSet:
    """Build the :class:`ScriptSet` for *goal* from *env*."""
    if goal == "create":
        if not env.create_statements.strip():
            raise ConfigError("No create_statements defined!")
        return ScriptSet("create", ADMIN, inline_sql=env.create_statements)

    dirs = {
        "schema": env.schema_dirs,
        "data": env.data_dirs,
        "update": env.update_dirs,
    }
    if goal not in dirs:
        raise ConfigError(f"Unknown goal {goal!r}")
    if not dirs[goal]:
        raise ConfigError(f"No {goal}_dirs defined!")
    return ScriptSet(goal, APP, directories=dirs[goal])


def _run_inline(
    conn: t.Any,
    sql: str,
    options: ScriptOptions,
    statement_factory: StatementFactory,
) -> FileResult:
    result = FileResult("<create_statements>")
    start = time.perf_counter()
    st = statement_factory(conn)
    try:
        for stmt in split_sql(sql, options.delimiter, strip_lines=options.strip_lines):
            execute_statement(st, stmt)
            result.statements += 1
    finally:
        st.close()
    result.elapsed = time.perf_counter() - start
    log.info(" %d statements executed from %s", result.statements, result.name)
    return result


def run_script_set(
    env: Environment,
    scripts: ScriptSet,
    *,
    connect: Connect | None = None,
    statement_factory: StatementFactory = DBAPIStatement,
) -> list[DirectoryResult | FileResult]:
    """
    Validate *env*, open the connection for *scripts* once and execute
    everything it names, in order.  Inline SQL always runs one statement
    at a time; directories follow ``env.options``.
    """
    env.check()
    connect = connect or connection
    settings = env.admin if scripts.role == ADMIN else env.app
    options = env.options
    log.info("Running goal %r on environment %r", scripts.name, env.name)

    encoding = resolve_encoding(options.encoding) if scripts.directories else None

    results: list[DirectoryResult | FileResult] = []
    with connect(settings) as conn:
        if scripts.inline_sql is not None:
            results.append(
                _run_inline(conn, scripts.inline_sql, options, statement_factory)
            )
        for directory in scripts.directories:
            results.append(
                run_directory(
                    directory,
                    conn,
                    options,
                    encoding=encoding,
                    statement_factory=statement_factory,
                )
            )
    return results


def plan_script_set(env: Environment, scripts: ScriptSet) -> list[tuple[str, list[str]]]:
    """Statements *scripts* would execute, per file; no connection is opened."""
    options = env.options
    if scripts.inline_sql is not None:
        return [("<create_statements>", split_sql(scripts.inline_sql, options.delimiter,
                                                        strip_lines=options.strip_lines))]
    encoding = resolve_encoding(options.encoding)
    plan: list[tuple[str, list[str]]] = []
    for directory in scripts.directories:
        plan.extend(plan_directory(directory, options, encoding=encoding))
    return plan
