from typing import Any, Dict, List, Optional, Union

from loguru import logger
from pydantic import BaseModel

from scoresheet.models.enums import Category, CompetitionLevel
from scoresheet.models.team import ResolvedName
from scoresheet.resolution.resolver import ReferenceResolver
from scoresheet.storage.unknown_registry import UnknownRegistry


class GameNames(BaseModel):
    """Names scraped from one game page, after resolution."""

    level: CompetitionLevel
    home_team: Optional[ResolvedName] = None
    away_team: Optional[ResolvedName] = None
    stadium: Optional[ResolvedName] = None
    # slot ("home_team", "away_team", "stadium") -> raw text that did not resolve
    unresolved: Dict[str, str] = {}

    @property
    def is_complete(self) -> bool:
        """True when every scraped name resolved and the game may be stored."""
        return not self.unresolved

    def unresolved_by_category(self) -> Dict[str, List[str]]:
        team_category = Category.for_level(self.level).value
        slot_category = {
            "home_team": team_category,
            "away_team": team_category,
            "stadium": Category.STADIUMS.value,
        }
        grouped: Dict[str, List[str]] = {}
        for slot, raw in self.unresolved.items():
            names = grouped.setdefault(slot_category[slot], [])
            if raw not in names:
                names.append(raw)
        return grouped


def resolve_game_names(
    resolver: ReferenceResolver,
    registry: Optional[UnknownRegistry],
    home_raw: Optional[str],
    away_raw: Optional[str],
    stadium_raw: Optional[str],
    level: Union[CompetitionLevel, str],
    context: Optional[Dict[str, Any]] = None,
) -> GameNames:
    """Resolves the team and stadium names of one game.

    Each name that fails every tier is recorded once per game in the unknown
    registry (when one is given), and a game-level event lists the misses.
    Empty raw values are skipped rather than reported.
    """
    level = CompetitionLevel(level)
    result = GameNames(level=level)

    if home_raw:
        result.home_team = resolver.resolve_team(home_raw, level)
    if away_raw:
        result.away_team = resolver.resolve_team(away_raw, level)
    if stadium_raw:
        result.stadium = resolver.resolve_stadium(stadium_raw)

    for slot in ("home_team", "away_team", "stadium"):
        resolved: Optional[ResolvedName] = getattr(result, slot)
        if resolved is not None and not resolved.is_resolved:
            result.unresolved[slot] = resolved.raw_name

    if result.is_complete:
        return result

    grouped = result.unresolved_by_category()
    logger.warning(f"Unresolved names ({level.value}): {grouped}")
    if registry is not None:
        ctx = {"level": level.value, **(context or {})}
        for category, names in grouped.items():
            for raw in names:
                registry.record(category, raw, ctx)
        registry.record_game_event(
            {
                "event": "game_skipped_unresolved",
                "level": level.value,
                "unresolved": grouped,
                **{k: v for k, v in ctx.items() if k != "level"},
            }
        )
    return result
