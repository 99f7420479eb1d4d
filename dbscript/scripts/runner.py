from __future__ import annotations
import logging
import pathlib
import time
import typing as t
from dataclasses import dataclass, field

from dbscript.config import ConfigError, ScriptOptions
from dbscript.scripts.executor import execute_batch, execute_statement
from dbscript.scripts.reader import ScriptSource, open_script
from dbscript.scripts.splitter import split_statements
from dbscript.scripts.statement import DBAPIStatement, StatementHandle

log = logging.getLogger(__name__)

StatementFactory = t.Callable[[t.Any], StatementHandle]


@dataclass
class FileResult:
    name: str
    statements: int = 0
    batches: int = 0
    elapsed: float = 0.0


@dataclass
class DirectoryResult:
    directory: pathlib.Path
    files: list[FileResult] = field(default_factory=list)

    @property
    def statements(self) -> int:
        return sum(f.statements for f in self.files)


def script_files(directory: pathlib.Path) -> list[pathlib.Path]:
    """
    Regular files directly inside *directory*, ordered by name so that
    ``01_create.sql`` always runs before ``02_seed.sql``.
    """
    if not directory.is_dir():
        raise ConfigError(f"{directory.name} is not a directory")
    return [p for p in sorted(directory.iterdir(), key=lambda p: p.name) if p.is_file()]


def run_script(
    st: StatementHandle,
    source: ScriptSource,
    options: ScriptOptions,
) -> FileResult:
    """
    Execute every statement of one script through *st*, batched or not
    depending on *options*.  Returns the statement / batch counts.
    """
    result = FileResult(source.path.name)
    mode = "batch executing" if options.use_batch else "executing"
    log.info("%s script: %s", mode.capitalize(), source.path.name)

    batch: list[str] = []

    def flush() -> None:
        try:
            execute_batch(st, batch)
        finally:
            batch.clear()
        result.batches += 1

    with open_script(source) as lines:
        for sql in split_statements(lines, options.delimiter, strip_lines=options.strip_lines):
            if options.use_batch:
                batch.append(sql)
                if len(batch) >= options.batch_size:
                    flush()
            else:
                execute_statement(st, sql)
            result.statements += 1

        if batch:
            flush()

    log.info(" %d statements %s from %s", result.statements,
             "batch executed" if options.use_batch else "executed", source.path.name)
    return result


def run_directory(
    directory: pathlib.Path,
    conn: t.Any,
    options: ScriptOptions,
    *,
    encoding: str,
    statement_factory: StatementFactory = DBAPIStatement,
) -> DirectoryResult:
    """
    Run every script in *directory* on the open connection *conn*.

    The first failure stops the run; scripts (and statements) executed
    before it stay applied.
    """
    directory = pathlib.Path(directory)
    log.info("Executing scripts in: %s", directory.name)
    result = DirectoryResult(directory)

    for path in script_files(directory):
        source = ScriptSource.from_path(path, encoding)
        start = time.perf_counter()
        st = statement_factory(conn)
        try:
            file_result = run_script(st, source, options)
        finally:
            st.close()
        file_result.elapsed = time.perf_counter() - start
        log.info(" script completed execution in %.3f second(s)", file_result.elapsed)
        result.files.append(file_result)

    return result


def plan_directory(
    directory: pathlib.Path,
    options: ScriptOptions,
    *,
    encoding: str,
) -> list[tuple[str, list[str]]]:
    """Read and split every script in *directory* without executing anything."""
    plan: list[tuple[str, list[str]]] = []
    for path in script_files(pathlib.Path(directory)):
        with open_script(ScriptSource.from_path(path, encoding)) as lines:
            plan.append(
                (path.name, list(split_statements(lines, options.delimiter,
                                                  strip_lines=options.strip_lines)))
            )
    return plan
