"""File primitives shared by the alias store and the registries.

Whole-file rewrites go through a temporary file in the target directory that
is flushed, fsynced and moved into place with ``os.replace``, so readers see
either the old or the new content. JSON-Lines appends take an exclusive
``flock`` for the duration of a single write.
"""

import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union

from loguru import logger

from .errors import StorageError

PathLike = Union[str, Path]


def dumps_line(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


@contextmanager
def exclusive_lock(path: PathLike) -> Iterator[None]:
    """Holds an exclusive advisory lock on ``<path>.lock`` for a read-modify-write."""
    lock_path = Path(f"{path}.lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "a", encoding="utf-8") as fh:
        fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


def read_json_file(path: PathLike) -> Any:
    """Parsed JSON content, or None when the file does not exist.

    Unreadable files raise StorageError; undecodable UTF-8 surfaces as
    ``UnicodeDecodeError`` and bad JSON as ``json.JSONDecodeError``, both
    ``ValueError`` subclasses.
    """
    p = Path(path)
    if not p.exists():
        return None
    try:
        with open(p, "r", encoding="utf-8") as fh:
            text = fh.read()
    except OSError as e:
        raise StorageError(f"Failed to read {p}: {e}") from e
    if not text.strip():
        return None
    return json.loads(text)


def atomic_write_json(path: PathLike, payload: Any) -> None:
    """Replaces ``path`` with ``payload`` as pretty JSON without a partial state."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            json.dump(payload, tmp, ensure_ascii=False, indent=2)
            tmp.write("\n")
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        raise StorageError(f"Failed to write {target}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    logger.debug(f"Wrote {target}")


def append_jsonl(path: PathLike, payload: Dict[str, Any]) -> None:
    """Appends one JSON object as a single line under an exclusive lock."""
    target = Path(path)
    line = dumps_line(payload) + "\n"
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "a", encoding="utf-8") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                fh.write(line)
                fh.flush()
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    except OSError as e:
        raise StorageError(f"Cannot append to {target}: {e}") from e


def read_jsonl(path: PathLike) -> List[Dict[str, Any]]:
    """All complete JSON objects in ``path``; a trailing partial line is skipped."""
    p = Path(path)
    if not p.exists():
        return []
    rows: List[Dict[str, Any]] = []
    with open(p, "r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                row = json.loads(line)
            except json.JSONDecodeError:
                logger.warning(f"Skipping unreadable line {lineno} in {p}")
                continue
            if isinstance(row, dict):
                rows.append(row)
    return rows
