from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# category -> raw/alias text -> canonical name
AliasMap = Dict[str, Dict[str, str]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class UnknownEntry(BaseModel):
    """One failed resolution, as appended to the pending registry."""

    ts: datetime = Field(default_factory=_utcnow)
    category: str
    raw: str
    context: Dict[str, Any] = {}


class ResolutionMarker(BaseModel):
    """Marks a raw text as curated so reports can drop it from the pending set."""

    ts: datetime = Field(default_factory=_utcnow)
    category: str
    raw: str
    canonical: Optional[str] = None
    note: Optional[str] = None


class PendingSummary(BaseModel):
    """Occurrences of one unresolved raw text within a category."""

    category: str
    raw: str  # Canonicalized raw text used as the grouping key
    count: int
    examples: List[Dict[str, Any]] = []
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None


class PromotionRecord(BaseModel):
    category: str
    raw: str
    canonical: str
    previous: Optional[str] = None  # Base value replaced by the promotion


class PromotionReport(BaseModel):
    promoted: List[PromotionRecord] = []

    @property
    def categories(self) -> List[str]:
        return sorted({p.category for p in self.promoted})

    def __len__(self) -> int:
        return len(self.promoted)
