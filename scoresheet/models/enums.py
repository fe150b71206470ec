from enum import Enum
from typing import Union


class CompetitionLevel(str, Enum):
    FIRST = "First"  # Top team
    FARM = "Farm"  # Developmental team


class Category(str, Enum):
    """Partitions of the alias map and of the reference catalog."""

    TEAMS_FIRST = "teams_first"
    TEAMS_FARM = "teams_farm"
    STADIUMS = "stadiums"
    CLUBS = "clubs"

    @classmethod
    def for_level(cls, level: Union["CompetitionLevel", str]) -> "Category":
        """Team alias category matching a competition level."""
        if CompetitionLevel(level) == CompetitionLevel.FARM:
            return cls.TEAMS_FARM
        return cls.TEAMS_FIRST


class RegistrationResult(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    NOOP = "noop"  # Same mapping already stored
    CONFLICT = "conflict"  # Different value stored, overwrite not requested
