from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import CompetitionLevel


class TeamEntry(BaseModel):
    """A team as published by the dictionary API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(..., alias="team_id")
    name: str = Field(..., alias="team_name")
    league: Optional[str] = None
    level: CompetitionLevel
    club_id: int


class StadiumEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(..., alias="stadium_id")
    name: str = Field(..., alias="stadium_name")
    is_dome: bool = False


class ClubEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(..., alias="club_id")
    name: str = Field(..., alias="club_name")


class ReferenceCatalog(BaseModel):
    """Read-only reference lists loaded once per scrape run."""

    model_config = ConfigDict(frozen=True)

    teams: List[TeamEntry] = []
    stadiums: List[StadiumEntry] = []
    clubs: List[ClubEntry] = []

    def team_names(self) -> Dict[int, str]:
        return {t.id: t.name for t in self.teams}

    def stadium_names(self) -> Dict[int, str]:
        return {s.id: s.name for s in self.stadiums}

    def club_names(self) -> Dict[int, str]:
        return {c.id: c.name for c in self.clubs}
