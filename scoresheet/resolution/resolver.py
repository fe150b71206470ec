from typing import Dict, Iterable, List, Optional, Union

from loguru import logger

from scoresheet.models.enums import CompetitionLevel
from scoresheet.models.reference import ReferenceCatalog, TeamEntry
from scoresheet.models.team import ResolvedName
from scoresheet.normalization.normalizer import AliasNormalizer
from scoresheet.normalization.text import canonicalize


def _index_by_name(entries: Iterable) -> Dict[str, int]:
    index: Dict[str, int] = {}
    for entry in entries:
        key = canonicalize(entry.name)
        if key in index:
            logger.warning(
                f"Duplicate reference name '{entry.name}' (ids {index[key]}, {entry.id}); keeping {index[key]}"
            )
            continue
        index[key] = entry.id
    return index


class ReferenceResolver:
    """Maps scraped names to dictionary IDs.

    Strict matching compares canonicalized names against the catalog. The
    fuzzy variants widen the search tier by tier and stop at the first hit:

    1. strict match of the raw text
    2. alias lookup (category chosen by competition level for teams), then strict
    3. teams only: resolve the text as a club and pick that club's team at
       the requested level

    A miss is ``None``. Nothing here raises on an unknown name.
    """

    def __init__(
        self, catalog: ReferenceCatalog, normalizer: Optional[AliasNormalizer] = None
    ):
        self.catalog = catalog
        self.alias = normalizer or AliasNormalizer()
        self._teams = _index_by_name(catalog.teams)
        self._stadiums = _index_by_name(catalog.stadiums)
        self._clubs = _index_by_name(catalog.clubs)
        self._team_names = catalog.team_names()
        self._stadium_names = catalog.stadium_names()
        self._club_names = catalog.club_names()

    # --- strict -------------------------------------------------------------

    def resolve_team_id_strict(self, name: Optional[str]) -> Optional[int]:
        return self._teams.get(canonicalize(name)) if name else None

    def resolve_stadium_id_strict(self, name: Optional[str]) -> Optional[int]:
        return self._stadiums.get(canonicalize(name)) if name else None

    def resolve_club_id_strict(self, name: Optional[str]) -> Optional[int]:
        return self._clubs.get(canonicalize(name)) if name else None

    # --- fuzzy --------------------------------------------------------------

    def resolve_team_id_fuzzy(
        self, name: Optional[str], level: Union[CompetitionLevel, str]
    ) -> Optional[int]:
        level = CompetitionLevel(level)

        team_id = self.resolve_team_id_strict(name)
        if team_id is not None:
            return team_id

        team_id = self.resolve_team_id_strict(self.alias.normalize_team(name, level))
        if team_id is not None:
            return team_id

        club_id = self.resolve_club_id_fuzzy(name)
        if club_id is not None:
            team_id = self._pick_team_by_club_and_level(club_id, level)
            if team_id is not None:
                return team_id

        logger.debug(f"No team match for '{name}' ({level.value})")
        return None

    def resolve_stadium_id_fuzzy(self, name: Optional[str]) -> Optional[int]:
        stadium_id = self.resolve_stadium_id_strict(name)
        if stadium_id is not None:
            return stadium_id
        stadium_id = self.resolve_stadium_id_strict(self.alias.normalize_stadium(name))
        if stadium_id is None:
            logger.debug(f"No stadium match for '{name}'")
        return stadium_id

    def resolve_club_id_fuzzy(self, name: Optional[str]) -> Optional[int]:
        club_id = self.resolve_club_id_strict(name)
        if club_id is not None:
            return club_id
        return self.resolve_club_id_strict(self.alias.normalize_club(name))

    def _pick_team_by_club_and_level(
        self, club_id: int, level: CompetitionLevel
    ) -> Optional[int]:
        candidates: List[TeamEntry] = [
            t for t in self.catalog.teams if t.club_id == club_id and t.level == level
        ]
        if len(candidates) == 1:
            return candidates[0].id
        if len(candidates) > 1:
            logger.warning(
                f"Club {club_id} has {len(candidates)} {level.value} teams "
                f"({[t.id for t in candidates]}); not picking one"
            )
        return None

    # --- ResolvedName helpers ----------------------------------------------

    def resolve_team(
        self, name: str, level: Union[CompetitionLevel, str]
    ) -> ResolvedName:
        team_id = self.resolve_team_id_fuzzy(name, level)
        return ResolvedName(
            raw_name=name,
            ref_id=team_id,
            canonical_name=self._team_names.get(team_id) if team_id is not None else None,
        )

    def resolve_stadium(self, name: str) -> ResolvedName:
        stadium_id = self.resolve_stadium_id_fuzzy(name)
        return ResolvedName(
            raw_name=name,
            ref_id=stadium_id,
            canonical_name=(
                self._stadium_names.get(stadium_id) if stadium_id is not None else None
            ),
        )

    def resolve_club(self, name: str) -> ResolvedName:
        club_id = self.resolve_club_id_fuzzy(name)
        return ResolvedName(
            raw_name=name,
            ref_id=club_id,
            canonical_name=self._club_names.get(club_id) if club_id is not None else None,
        )
