from __future__ import annotations

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from shopdb import config
from shopdb.errors import DataIOError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# One lock per resolved data directory. Writers to the same directory are
# serialised inside this process; other processes are not coordinated.
_DIRECTORY_LOCKS: dict[str, threading.RLock] = {}
_DIRECTORY_LOCKS_GUARD = threading.Lock()

# How much of a log's end is read when looking for a recent record.
TAIL_BYTES = 64 * 1024


def table_path(directory: PathLike, stem: str) -> Path:
    return Path(directory) / f"{stem}.{config.file_ext()}"


def ensure_directory(directory: PathLike) -> Path:
    path = Path(directory)
    if not path.is_dir():
        raise DataIOError(f"Data directory does not exist: {path}", path=path)
    return path


def _lock_key(directory: PathLike) -> str:
    return str(Path(directory).resolve())


def lock_for(directory: PathLike) -> threading.RLock:
    key = _lock_key(directory)
    with _DIRECTORY_LOCKS_GUARD:
        lock = _DIRECTORY_LOCKS.get(key)
        if lock is None:
            lock = threading.RLock()
            _DIRECTORY_LOCKS[key] = lock
        return lock


@contextmanager
def directory_lock(directory: PathLike) -> Iterator[Path]:
    """Hold the single-writer lock for ``directory`` for the duration of the block."""
    path = Path(directory)
    with lock_for(path):
        yield path


def replace_file(target: PathLike, content: str) -> None:
    """
    Replace ``target`` with ``content`` without exposing a half-written file.

    The text goes to a temp file in the same directory, is fsynced, then
    os.replace()d over the target. Readers see either the old or the new file.
    """
    target = Path(target)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except OSError as exc:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise DataIOError(f"Failed to write {target}", path=target, cause=exc) from exc


def _ends_with_newline(target: Path) -> bool:
    with open(target, "rb") as handle:
        handle.seek(0, os.SEEK_END)
        if handle.tell() == 0:
            return True
        handle.seek(-1, os.SEEK_END)
        return handle.read(1) == b"\n"


def append_text(target: PathLike, header: str, line: str) -> bool:
    """
    Append one line to ``target``, writing ``header`` first if the file is new or empty.

    A file whose last line was saved without a newline gets one before the
    appended line. Returns True when the header was written.
    """
    target = Path(target)
    try:
        with open(target, "a", encoding="utf-8", newline="") as handle:
            needs_header = handle.tell() == 0
            if needs_header:
                text = header + line
            elif not _ends_with_newline(target):
                text = "\n" + line
            else:
                text = line
            # One write call per append; O_APPEND keeps it contiguous.
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        raise DataIOError(f"Failed to append to {target}", path=target, cause=exc) from exc
    if needs_header:
        logger.info("Initialised log file", extra={"path": str(target)})
    return needs_header


def read_tail(target: PathLike, size: int = TAIL_BYTES) -> str:
    """
    The last ``size`` bytes of ``target`` as text, starting at a line boundary.

    Returns "" for a missing file.
    """
    target = Path(target)
    try:
        with open(target, "rb") as handle:
            handle.seek(0, os.SEEK_END)
            end = handle.tell()
            start = max(0, end - size)
            handle.seek(start)
            chunk = handle.read()
    except FileNotFoundError:
        return ""
    except OSError as exc:
        raise DataIOError(f"Failed to read {target}", path=target, cause=exc) from exc
    if start > 0:
        # Drop the partial first line.
        chunk = chunk.partition(b"\n")[2]
    return chunk.decode("utf-8", errors="replace")
