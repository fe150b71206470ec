# scoresheet/utils/misc_utils.py
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from scoresheet.config.settings import settings

_NATURAL_CHUNK = re.compile(r"(\d+)")


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with a trailing Z, second precision."""
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def resolve_path(path: Union[str, Path], root: Union[str, Path, None] = None) -> Path:
    """Absolute paths pass through; relative ones are anchored at the project root."""
    p = Path(path)
    if p.is_absolute():
        return p
    return Path(root if root is not None else settings.project_root) / p


def natural_key(text: str) -> tuple:
    """Sort key ordering embedded numbers numerically ("a2" before "a10")."""
    return tuple(
        (0, int(chunk), "") if chunk.isdigit() else (1, 0, chunk)
        for chunk in _NATURAL_CHUNK.split(text)
        if chunk
    )
