from __future__ import annotations
import pathlib

DEFAULT_CONFIG_PATH = pathlib.Path("dbscript.config.yml")

DEFAULT_DELIMITER = ";"
DEFAULT_BATCH_SIZE = 20
DEFAULT_USE_BATCH = True

# Per-statement status codes returned by a batch submission (JDBC values).
SUCCESS_NO_INFO = -2
EXECUTE_FAILED = -3

# Sentinel update count meaning "no more results".
NO_MORE_RESULTS = -1
