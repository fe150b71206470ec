import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from scoresheet.config.settings import settings
from scoresheet.models.alias import AliasMap
from scoresheet.models.enums import Category
from scoresheet.utils.misc_utils import resolve_path

from .errors import AliasFileError, StorageError
from .files import read_json_file

_ALIAS_MAP = TypeAdapter(Dict[str, Dict[str, str]])


def parse_alias_layer(data: Any, source: Union[str, Path]) -> AliasMap:
    """Validates a decoded layer; anything but str -> str -> str is fatal."""
    if data is None:
        return {}
    try:
        return _ALIAS_MAP.validate_python(data, strict=True)
    except ValidationError as e:
        raise AliasFileError(
            f"Alias file must contain a category -> raw -> canonical mapping: {source}"
        ) from e


def load_alias_layer(path: Union[str, Path]) -> AliasMap:
    """Reads one layer. A missing or empty file is an empty mapping."""
    try:
        data = read_json_file(path)
    except UnicodeDecodeError as e:
        raise AliasFileError(f"Alias file is not valid UTF-8: {path} ({e})") from e
    except json.JSONDecodeError as e:
        raise AliasFileError(f"Alias file is not valid JSON: {path} ({e})") from e
    except StorageError as e:
        raise AliasFileError(f"Alias file could not be read: {path} ({e})") from e
    return parse_alias_layer(data, path)


def merge_layers(base: AliasMap, local: AliasMap) -> AliasMap:
    """``merged[cat][raw] = local[cat][raw] ?? base[cat][raw]``."""
    merged: AliasMap = {cat: dict(section) for cat, section in base.items()}
    for cat, section in local.items():
        merged.setdefault(cat, {}).update(section)
    return merged


class AliasStore:
    """Two-layer alias map: the base layer overridden by the local layer.

    The merged view is cached on the instance until ``invalidate_cache()``;
    callers that write either layer must invalidate before the next lookup.
    """

    def __init__(self, base_file: Union[str, Path], local_file: Union[str, Path]):
        self.base_file = Path(base_file)
        self.local_file = Path(local_file)
        self._cache: Optional[AliasMap] = None

    @classmethod
    def from_settings(cls) -> "AliasStore":
        return cls(
            resolve_path(settings.alias_base_file),
            resolve_path(settings.alias_local_file),
        )

    def load(self) -> AliasMap:
        """Merged map. Returns a copy; the cached view is never handed out."""
        if self._cache is None:
            base = self.load_base()
            local = self.load_local()
            self._cache = merge_layers(base, local)
            logger.debug(
                f"Loaded aliases: {sum(len(s) for s in base.values())} base, "
                f"{sum(len(s) for s in local.values())} local"
            )
        return {cat: dict(section) for cat, section in self._cache.items()}

    def load_base(self) -> AliasMap:
        return load_alias_layer(self.base_file)

    def load_local(self) -> AliasMap:
        return load_alias_layer(self.local_file)

    def load_for(self, category: Union[Category, str]) -> Dict[str, str]:
        cat = category.value if isinstance(category, Category) else category
        return self.load().get(cat, {})

    def resolve(self, category: Union[Category, str], raw: str) -> Optional[str]:
        """Exact-string lookup in the merged map (no canonicalization)."""
        if self._cache is None:
            self.load()
        cat = category.value if isinstance(category, Category) else category
        return self._cache.get(cat, {}).get(raw)

    def invalidate_cache(self) -> None:
        self._cache = None
