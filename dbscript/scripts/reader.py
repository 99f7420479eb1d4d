"""
Turn a script file into decoded text lines.

Files whose name ends in ``GZ`` (any case) are gunzipped on the fly.  The
text encoding is resolved once per run by :func:`resolve_encoding` and
handed to every :class:`ScriptSource`.
"""
from __future__ import annotations
import codecs
import gzip
import io
import locale
import logging
import os
import pathlib
import typing as t
import zlib
from contextlib import contextmanager
from dataclasses import dataclass

from dbscript.config import ConfigError
from dbscript.errors import ScriptReadError

log = logging.getLogger(__name__)


def resolve_encoding(encoding: str | None) -> str:
    """
    Return the codec name scripts are decoded with.

    ``None`` falls back to the platform default, which makes the outcome
    depend on the machine running the scripts, hence the warning.
    """
    if encoding is None:
        encoding = locale.getpreferredencoding(False)
        log.warning(
            "Using platform encoding (%s) for executing script, "
            "i.e. build is platform dependent!",
            encoding,
        )
    else:
        log.info("Setting encoding for executing script: %s", encoding)

    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise ConfigError(f"Unknown script encoding {encoding!r}") from exc
    return encoding


def is_gzipped(path: pathlib.Path) -> bool:
    return path.name.upper().endswith("GZ")


@dataclass(frozen=True)
class ScriptSource:
    path: pathlib.Path
    encoding: str
    gzipped: bool

    @classmethod
    def from_path(cls, path: pathlib.Path | str, encoding: str) -> "ScriptSource":
        path = pathlib.Path(path)
        return cls(path=path, encoding=encoding, gzipped=is_gzipped(path))


def _check_readable(path: pathlib.Path) -> None:
    if not path.is_file() or not os.access(path, os.R_OK):
        raise ConfigError(f"{path.name} is not a file")


def _lines(source: ScriptSource, text: t.TextIO) -> t.Iterator[str]:
    try:
        for line in text:
            yield line.rstrip("\n")
    except UnicodeDecodeError as exc:
        raise ScriptReadError(
            source.path, f"cannot decode as {source.encoding}: {exc.reason}"
        ) from exc
    except (OSError, EOFError, zlib.error) as exc:
        raise ScriptReadError(source.path, f"cannot read: {exc}") from exc


@contextmanager
def open_script(source: ScriptSource) -> t.Iterator[t.Iterator[str]]:
    """
    Yield an iterator over the decoded lines of *source*, without line
    terminators.  The file and any gzip layer are closed on exit, error
    or not.
    """
    _check_readable(source.path)
    log.info("Reading script: %s", source.path.name)

    try:
        raw = source.path.open("rb")
    except OSError as exc:
        raise ConfigError(f"{source.path.name} is not readable: {exc}") from exc

    stream: t.BinaryIO = raw
    text: io.TextIOWrapper | None = None
    try:
        if source.gzipped:
            log.info(" file is gz compressed, using gzip stream")
            stream = gzip.GzipFile(fileobj=raw, mode="rb")
        text = io.TextIOWrapper(stream, encoding=source.encoding)
        yield _lines(source, text)
    finally:
        if text is not None:
            text.close()
        elif stream is not raw:
            stream.close()
        # GzipFile never closes a fileobj it was handed
        raw.close()
