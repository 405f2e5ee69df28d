"""
Team roster API Routes
CRUD for teams within a competition, including the league stats written by
match recording.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from knockout.database import get_session
from knockout.models.bracket_match import BracketMatch
from knockout.models.competition import Competition
from knockout.models.team import Team
from knockout.services.qualifier_service import get_competition_teams

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamStats(BaseModel):
    points: int = 0
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: Optional[int] = None


class TeamCreateRequest(BaseModel):
    name: str
    subdivision: Optional[str] = None
    stats: Optional[TeamStats] = None


class TeamUpdateRequest(BaseModel):
    name: Optional[str] = None
    subdivision: Optional[str] = None
    stats: Optional[TeamStats] = None


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    competition_id: int
    name: str
    subdivision: Optional[str] = None
    points: int
    played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: Optional[int] = None
    eliminated: Optional[bool] = None
    knockout_seed: Optional[int] = None
    created_at: datetime


def _get_competition_or_404(session: Session, competition_id: int) -> Competition:
    competition = session.get(Competition, competition_id)
    if not competition:
        raise HTTPException(status_code=404, detail="Competition not found")
    return competition


def _validate_subdivision(competition: Competition, subdivision: Optional[str]) -> None:
    if subdivision is None:
        return
    if subdivision not in (competition.subdivisions or []):
        raise HTTPException(
            status_code=422,
            detail=f"Subdivision '{subdivision}' does not exist in competition '{competition.name}'",
        )


def _apply_stats(team: Team, stats: TeamStats) -> None:
    for key, value in stats.model_dump().items():
        setattr(team, key, value)


def _get_team_or_404(session: Session, competition_id: int, team_id: int) -> Team:
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    if team.competition_id != competition_id:
        raise HTTPException(status_code=400, detail="Team does not belong to this competition")
    return team


def _commit_team(session: Session, team: Team) -> Team:
    try:
        session.add(team)
        session.commit()
        session.refresh(team)
        return team
    except IntegrityError:
        session.rollback()
        raise HTTPException(
            status_code=409, detail=f"Team with name '{team.name}' already exists in this competition"
        )


# ============================================================================
# Team CRUD Endpoints
# ============================================================================


@router.get("/competitions/{competition_id}/teams", response_model=List[TeamResponse])
def get_teams(competition_id: int, session: Session = Depends(get_session)):
    """Get all teams of a competition in id order."""
    _get_competition_or_404(session, competition_id)
    return get_competition_teams(session, competition_id)


@router.post("/competitions/{competition_id}/teams", response_model=TeamResponse, status_code=201)
def create_team(competition_id: int, request: TeamCreateRequest, session: Session = Depends(get_session)):
    """
    Create a team in a competition.

    Constraints:
    - (competition_id, name) must be unique
    - subdivision must be one of the competition's subdivisions
    """
    competition = _get_competition_or_404(session, competition_id)
    _validate_subdivision(competition, request.subdivision)

    team = Team(competition_id=competition_id, name=request.name, subdivision=request.subdivision)
    if request.stats is not None:
        _apply_stats(team, request.stats)
    return _commit_team(session, team)


@router.patch("/competitions/{competition_id}/teams/{team_id}", response_model=TeamResponse)
def update_team(
    competition_id: int, team_id: int, request: TeamUpdateRequest, session: Session = Depends(get_session)
):
    """Update a team's name, subdivision, or stats."""
    competition = _get_competition_or_404(session, competition_id)
    team = _get_team_or_404(session, competition_id, team_id)

    if request.name is not None:
        team.name = request.name
    if request.subdivision is not None:
        _validate_subdivision(competition, request.subdivision)
        team.subdivision = request.subdivision
    if request.stats is not None:
        _apply_stats(team, request.stats)

    return _commit_team(session, team)


@router.delete("/competitions/{competition_id}/teams/{team_id}", status_code=204)
def delete_team(competition_id: int, team_id: int, session: Session = Depends(get_session)):
    """Delete a team. Teams placed in the knockout bracket cannot be deleted until it is rebuilt without them."""
    team = _get_team_or_404(session, competition_id, team_id)

    in_bracket = session.exec(
        select(BracketMatch.id).where(
            BracketMatch.competition_id == competition_id,
            or_(
                BracketMatch.home_team_id == team_id,
                BracketMatch.away_team_id == team_id,
                BracketMatch.winner_id == team_id,
            ),
        )
    ).first()
    if in_bracket is not None:
        raise HTTPException(status_code=409, detail="Team is placed in the knockout bracket; rebuild the bracket first")

    try:
        session.delete(team)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Team is still referenced and cannot be deleted")
    return None
