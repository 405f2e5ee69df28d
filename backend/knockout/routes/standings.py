from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from knockout.database import get_session
from knockout.models.competition import Competition
from knockout.services.qualifier_service import get_competition_teams
from knockout.services.standings import build_standings

router = APIRouter()


class StandingRowResponse(BaseModel):
    rank: int
    team_id: int
    team_name: str
    subdivision: Optional[str] = None
    points: int
    played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: int
    eliminated: Optional[bool] = None


class StandingsResponse(BaseModel):
    competition_id: int
    subdivision: Optional[str] = None
    qualifier_count: int
    finals_started: bool
    rows: List[StandingRowResponse]


@router.get("/competitions/{competition_id}/standings", response_model=StandingsResponse)
def get_standings(
    competition_id: int,
    subdivision: Optional[str] = Query(None, description="Restrict the table to one subdivision"),
    session: Session = Depends(get_session),
):
    """
    League table ordered by points, goal difference, goals for.

    finals_started is true once kickoff has flagged any team of the
    competition (regardless of the subdivision filter).
    """
    competition = session.get(Competition, competition_id)
    if not competition:
        raise HTTPException(status_code=404, detail="Competition not found")
    if subdivision is not None and subdivision not in (competition.subdivisions or []):
        raise HTTPException(status_code=404, detail="Subdivision not found")

    teams = get_competition_teams(session, competition_id)
    finals_started = any(t.eliminated is not None for t in teams)
    if subdivision is not None:
        teams = [t for t in teams if t.subdivision == subdivision]

    rows = [StandingRowResponse(**vars(row)) for row in build_standings(teams)]
    return StandingsResponse(
        competition_id=competition_id,
        subdivision=subdivision,
        qualifier_count=competition.qualifier_count,
        finals_started=finals_started,
        rows=rows,
    )
