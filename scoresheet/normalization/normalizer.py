from typing import Dict, Mapping, Optional, Union

from loguru import logger

from scoresheet.models.alias import AliasMap
from scoresheet.models.enums import Category, CompetitionLevel
from scoresheet.normalization.text import canonicalize
from scoresheet.storage.alias_store import AliasStore


class AliasNormalizer:
    """Maps loosely formatted names to canonical names through the alias map.

    Every lookup is keyed by the canonicalized input. Stored alias keys are
    indexed by their canonical form too, so an alias stored as ``"阪神 "`` and
    one stored as ``"阪神"`` are found by the same lookups. A miss returns
    ``None``; the alias map is never modified.
    """

    def __init__(self, aliases: Optional[Mapping[str, Mapping[str, str]]] = None):
        self._index: Dict[str, Dict[str, str]] = {}
        for category, section in (aliases or {}).items():
            index: Dict[str, str] = {}
            for raw, canonical in section.items():
                key = canonicalize(raw)
                if key in index and index[key] != canonical:
                    logger.warning(
                        f"Alias keys collide after canonicalization in '{category}': "
                        f"'{raw}' -> '{canonical}' replaces '{index[key]}'"
                    )
                index[key] = canonical
            cat = category.value if isinstance(category, Category) else category
            self._index[cat] = index
        logger.debug(
            f"AliasNormalizer initialized with "
            f"{sum(len(s) for s in self._index.values())} aliases."
        )

    @classmethod
    def from_store(cls, store: AliasStore) -> "AliasNormalizer":
        """Snapshot of the store's merged (local over base) map."""
        return cls(store.load())

    def normalize_team_first(self, raw: Optional[str]) -> Optional[str]:
        return self.normalize_by(Category.TEAMS_FIRST, raw)

    def normalize_team_farm(self, raw: Optional[str]) -> Optional[str]:
        return self.normalize_by(Category.TEAMS_FARM, raw)

    def normalize_team(
        self, raw: Optional[str], level: Union[CompetitionLevel, str]
    ) -> Optional[str]:
        return self.normalize_by(Category.for_level(level), raw)

    def normalize_stadium(self, raw: Optional[str]) -> Optional[str]:
        return self.normalize_by(Category.STADIUMS, raw)

    def normalize_club(self, raw: Optional[str]) -> Optional[str]:
        return self.normalize_by(Category.CLUBS, raw)

    def normalize_by(
        self, category: Union[Category, str], raw: Optional[str]
    ) -> Optional[str]:
        """Canonical name for ``raw`` in ``category``, or None if no alias exists."""
        key = canonicalize(raw)
        if not key:
            return None
        cat = category.value if isinstance(category, Category) else category
        return self._index.get(cat, {}).get(key)

    def snapshot(self) -> AliasMap:
        """Copy of the canonicalized index, for inspection."""
        return {cat: dict(section) for cat, section in self._index.items()}
