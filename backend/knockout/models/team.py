from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from knockout.models.competition import Competition


class Team(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("competition_id", "name", name="uq_competition_team_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competition.id", index=True)
    name: str
    subdivision: Optional[str] = Field(default=None, index=True)

    # League table stats (aggregated by match recording, read-only here)
    points: int = Field(default=0)
    played: int = Field(default=0)
    wins: int = Field(default=0)
    draws: int = Field(default=0)
    losses: int = Field(default=0)
    goals_for: int = Field(default=0)
    goals_against: int = Field(default=0)
    goal_difference: Optional[int] = Field(default=None)  # computed from GF/GA when null

    # Finals phase: null = league phase, False = qualified, True = eliminated
    eliminated: Optional[bool] = Field(default=None)
    knockout_seed: Optional[int] = Field(default=None)  # 1-based, set at bracket build

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    competition: "Competition" = Relationship(back_populates="teams")
