from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from knockout.models.competition import Competition


class BracketRound(str, Enum):
    round_of_16 = "round_of_16"
    quarterfinals = "quarterfinals"
    semifinals = "semifinals"
    final = "final"


# Positional order; a match in ROUND_ORDER[i] feeds ROUND_ORDER[i + 1]
ROUND_ORDER: List[str] = [r.value for r in BracketRound]

SLOT_HOME = "home"
SLOT_AWAY = "away"


def next_round(round_name: str) -> Optional[str]:
    """Round that winners of `round_name` advance into, or None for the final."""
    idx = ROUND_ORDER.index(round_name)
    if idx + 1 >= len(ROUND_ORDER):
        return None
    return ROUND_ORDER[idx + 1]


class BracketMatch(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("competition_id", "round", "match_number", name="uq_bracket_round_match"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competition.id", index=True)
    round: str = Field(sa_column=Column(String, nullable=False))  # BracketRound value
    match_number: int  # 1-based within round

    # Team slots (null = TBD until seeded or propagated)
    home_team_id: Optional[int] = Field(default=None, foreign_key="team.id")
    home_team_name: Optional[str] = Field(default=None)
    away_team_id: Optional[int] = Field(default=None, foreign_key="team.id")
    away_team_name: Optional[str] = Field(default=None)

    # Result
    home_score: Optional[int] = Field(default=None)
    away_score: Optional[int] = Field(default=None)
    completed: bool = Field(default=False)
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")
    winner_name: Optional[str] = Field(default=None)

    # Forward edge (null only on the final)
    next_match_number: Optional[int] = Field(default=None)
    slot_in_next_match: Optional[str] = Field(default=None)  # "home" | "away"

    # Calendar event that carried the result (traceability only)
    external_event_id: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    competition: "Competition" = Relationship(back_populates="bracket_matches")

    def team_in_slot(self, slot: str):
        """(team_id, team_name) currently in `slot`."""
        if slot == SLOT_HOME:
            return self.home_team_id, self.home_team_name
        return self.away_team_id, self.away_team_name

    def set_slot(self, slot: str, team_id: Optional[int], team_name: Optional[str]) -> None:
        if slot == SLOT_HOME:
            self.home_team_id = team_id
            self.home_team_name = team_name
        else:
            self.away_team_id = team_id
            self.away_team_name = team_name
