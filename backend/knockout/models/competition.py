from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from knockout.models.bracket_match import BracketMatch
    from knockout.models.team import Team


class CompetitionFormat(str, Enum):
    league = "league"  # single round-robin, 8 qualifiers
    divisional = "divisional"  # sub-divided group stage, 16 qualifiers


QUALIFIER_COUNTS = {
    CompetitionFormat.league.value: 8,
    CompetitionFormat.divisional.value: 16,
}


class Competition(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    format: CompetitionFormat = Field(sa_column=Column(String, nullable=False))
    subdivisions: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    teams: List["Team"] = Relationship(back_populates="competition")
    bracket_matches: List["BracketMatch"] = Relationship(back_populates="competition")

    @property
    def qualifier_count(self) -> int:
        return QUALIFIER_COUNTS[CompetitionFormat(self.format).value]
