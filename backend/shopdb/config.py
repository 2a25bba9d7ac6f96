# backend/shopdb/config.py
"""
Data directory configuration for shopdb.

Key goals:
- One data directory holds every table as a delimiter-separated text file.
- File extension and delimiter are configurable, defaults match the shop's CSV exports.
- Values are read from env at call time so tests and jobs can override them.
"""

import os
from pathlib import Path

# -------------------------------------------------------------------
# CONFIG FROM ENV
# -------------------------------------------------------------------
#
# SHOPDB_DATA_DIR    default directory for the API and jobs
# SHOPDB_FILE_EXT    table file extension (csv, tsv, txt ...)
# SHOPDB_DELIMITER   field delimiter (defaults from the extension)
#
# Example:
#   SHOPDB_DATA_DIR=/srv/shop/data SHOPDB_FILE_EXT=csv
# -------------------------------------------------------------------

DEFAULT_DATA_DIR = "data"
DEFAULT_FILE_EXT = "csv"

_DELIMITERS_BY_EXT = {
    "csv": ",",
    "tsv": "\t",
}


def data_dir() -> Path:
    return Path(os.getenv("SHOPDB_DATA_DIR", "") or DEFAULT_DATA_DIR)


def file_ext() -> str:
    ext = (os.getenv("SHOPDB_FILE_EXT", "") or DEFAULT_FILE_EXT).strip().lstrip(".")
    return ext or DEFAULT_FILE_EXT


def delimiter() -> str:
    raw = os.getenv("SHOPDB_DELIMITER", "")
    if raw:
        # "\t" is awkward to export in a shell, accept the escaped form.
        return "\t" if raw == "\\t" else raw[0]
    return _DELIMITERS_BY_EXT.get(file_ext().lower(), ",")
