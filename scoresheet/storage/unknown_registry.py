from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from loguru import logger
from pydantic import ValidationError

from scoresheet.config.settings import settings
from scoresheet.models.alias import PendingSummary, ResolutionMarker, UnknownEntry
from scoresheet.models.enums import Category, CompetitionLevel
from scoresheet.normalization.text import canonicalize
from scoresheet.utils.misc_utils import resolve_path, utc_now_iso

from .files import append_jsonl, read_jsonl

RESOLVED_FILE = "resolved.jsonl"
EVENTS_FILE = "events.jsonl"
DEFAULT_MAX_EXAMPLES = 3


def canonical_category(
    category: Union[Category, str], context: Optional[Mapping[str, Any]] = None
) -> str:
    """Folds singular spellings onto alias-map categories.

    ``team`` becomes ``teams_<level>`` when the context carries a level.
    """
    cat = category.value if isinstance(category, Category) else str(category)
    if cat == "stadium":
        return Category.STADIUMS.value
    if cat == "club":
        return Category.CLUBS.value
    if cat == "team":
        level = (context or {}).get("level", "")
        if isinstance(level, CompetitionLevel):
            level = level.value
        level = str(level).lower()
        return f"teams_{level}" if level else cat
    return cat


class UnknownRegistry:
    """Append-only JSON-Lines queue of names no resolution tier could map.

    One file per category under ``pending_dir``. Entries are never rewritten
    or deduplicated on write; ``mark_resolved`` appends to a separate log that
    ``pending`` subtracts at report time.
    """

    def __init__(self, pending_dir: Union[str, Path]):
        self.pending_dir = Path(pending_dir)
        self.pending_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls) -> "UnknownRegistry":
        return cls(resolve_path(settings.pending_dir))

    @staticmethod
    def file_for(category: Union[Category, str], context: Optional[Mapping[str, Any]] = None) -> str:
        cat = canonical_category(category, context)
        return "teams.jsonl" if cat == "team" else f"{cat}.jsonl"

    def path_for(self, category: Union[Category, str], context: Optional[Mapping[str, Any]] = None) -> Path:
        return self.pending_dir / self.file_for(category, context)

    def record(
        self,
        category: Union[Category, str],
        raw: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> UnknownEntry:
        cat = canonical_category(category, context)
        entry = UnknownEntry(category=cat, raw=raw, context=context or {})
        append_jsonl(self.path_for(cat), entry.model_dump(mode="json"))
        logger.debug(f"Recorded unknown {cat} name '{raw}'")
        return entry

    def mark_resolved(
        self,
        category: Union[Category, str],
        raw: str,
        canonical: Optional[str] = None,
        note: Optional[str] = None,
    ) -> ResolutionMarker:
        cat = canonical_category(category)
        marker = ResolutionMarker(category=cat, raw=raw, canonical=canonical, note=note)
        append_jsonl(self.pending_dir / RESOLVED_FILE, marker.model_dump(mode="json"))
        logger.info(f"Marked {cat} name '{raw}' as resolved")
        return marker

    def record_game_event(self, event: Dict[str, Any]) -> None:
        """Game-level line for a game held back because names were unresolved."""
        append_jsonl(self.pending_dir / EVENTS_FILE, {"ts": utc_now_iso(), **event})

    def entries(self, category: Union[Category, str]) -> List[UnknownEntry]:
        rows: List[UnknownEntry] = []
        for row in read_jsonl(self.path_for(category)):
            try:
                rows.append(UnknownEntry.model_validate(row))
            except ValidationError:
                logger.warning(f"Skipping malformed pending entry: {row}")
        return rows

    def resolved_keys(self, category: Union[Category, str]) -> Set[str]:
        """Canonicalized raw texts already curated for ``category``."""
        cat = canonical_category(category)
        keys: Set[str] = set()
        for row in read_jsonl(self.pending_dir / RESOLVED_FILE):
            if row.get("category") == cat and isinstance(row.get("raw"), str):
                keys.add(canonicalize(row["raw"]))
        return keys

    def pending(
        self,
        category: Union[Category, str],
        max_examples: int = DEFAULT_MAX_EXAMPLES,
        include_resolved: bool = False,
    ) -> List[PendingSummary]:
        """Entries grouped by canonicalized raw text, most frequent first."""
        cat = canonical_category(category)
        skip = set() if include_resolved else self.resolved_keys(cat)
        groups: Dict[str, PendingSummary] = {}
        for entry in self.entries(cat):
            key = canonicalize(entry.raw)
            if not key or key in skip:
                continue
            summary = groups.get(key)
            if summary is None:
                summary = groups[key] = PendingSummary(
                    category=cat, raw=key, count=0, first_seen=entry.ts, last_seen=entry.ts
                )
            summary.count += 1
            if len(summary.examples) < max_examples:
                summary.examples.append(entry.context)
            summary.first_seen = _earliest(summary.first_seen, entry.ts)
            summary.last_seen = _latest(summary.last_seen, entry.ts)
        return sorted(groups.values(), key=lambda s: (-s.count, s.raw))


def _earliest(a: Optional[datetime], b: datetime) -> datetime:
    return b if a is None or b < a else a


def _latest(a: Optional[datetime], b: datetime) -> datetime:
    return b if a is None or b > a else a
