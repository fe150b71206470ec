# scoresheet/models/team.py
from typing import Optional
from pydantic import BaseModel


class ResolvedName(BaseModel):
    """Represents a scraped name with its canonical name/ID, if one was found."""

    raw_name: str
    canonical_name: Optional[str] = None  # Determined during resolution
    ref_id: Optional[int] = None  # Dictionary ID (team, stadium or club)

    @property
    def is_resolved(self) -> bool:
        return self.ref_id is not None
