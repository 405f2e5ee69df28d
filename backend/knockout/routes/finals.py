"""
Finals API Routes
Kickoff (qualifier split), bracket (re)build, bracket read side and manual
draw resolution.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session

from knockout.database import get_session
from knockout.models.competition import Competition
from knockout.services.bracket_builder import BracketBuildError, build_bracket
from knockout.services.bracket_view import get_bracket, get_champion
from knockout.services.qualifier_service import KickoffError, kickoff_finals
from knockout.services.result_propagator import PropagationError, PropagationOutcome, declare_winner

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class BracketMatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    competition_id: int
    round: str
    match_number: int
    home_team_id: Optional[int] = None
    home_team_name: Optional[str] = None
    away_team_id: Optional[int] = None
    away_team_name: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    completed: bool
    winner_id: Optional[int] = None
    winner_name: Optional[str] = None
    next_match_number: Optional[int] = None
    slot_in_next_match: Optional[str] = None
    external_event_id: Optional[str] = None


class ChampionResponse(BaseModel):
    team_id: int
    team_name: str


class BracketRoundResponse(BaseModel):
    round: str
    matches: List[BracketMatchResponse]


class BracketResponse(BaseModel):
    competition_id: int
    rounds: List[BracketRoundResponse]
    champion: Optional[ChampionResponse] = None


class KickoffResponse(BaseModel):
    competition_id: int
    qualifier_count: int
    qualified_team_ids: List[int]
    eliminated_team_ids: List[int]
    warnings: List[str]


class BracketBuildResponse(BaseModel):
    competition_id: int
    bracket_size: int
    qualifiers_count: int
    matches: List[BracketMatchResponse]
    warnings: List[str]


class DeclareWinnerRequest(BaseModel):
    slot: str  # "home" | "away"


class MatchOutcomeResponse(BaseModel):
    status: str
    match: Optional[BracketMatchResponse] = None
    next_match: Optional[BracketMatchResponse] = None
    detail: Optional[str] = None


def _match_response(match) -> Optional[BracketMatchResponse]:
    if match is None:
        return None
    return BracketMatchResponse.model_validate(match)


def outcome_response(outcome: PropagationOutcome) -> MatchOutcomeResponse:
    return MatchOutcomeResponse(
        status=outcome.status,
        match=_match_response(outcome.match),
        next_match=_match_response(outcome.next_match),
        detail=outcome.detail,
    )


def _ensure_competition(session: Session, competition_id: int) -> Competition:
    competition = session.get(Competition, competition_id)
    if not competition:
        raise HTTPException(status_code=404, detail="Competition not found")
    return competition


# ============================================================================
# Commands
# ============================================================================


@router.post("/competitions/{competition_id}/finals/kickoff", response_model=KickoffResponse)
def kickoff(competition_id: int, session: Session = Depends(get_session)):
    """
    Start the finals phase: top N teams qualify, the rest are eliminated.

    N is 8 for league competitions and 16 for divisional ones.
    """
    _ensure_competition(session, competition_id)
    try:
        result = kickoff_finals(session, competition_id)
    except KickoffError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return KickoffResponse(**vars(result))


@router.post("/competitions/{competition_id}/bracket", response_model=BracketBuildResponse)
def rebuild_bracket(competition_id: int, session: Session = Depends(get_session)):
    """
    Build (or rebuild) the knockout bracket from current qualifiers.

    Destructive and idempotent: the previous bracket is replaced in one transaction.
    """
    _ensure_competition(session, competition_id)
    try:
        result = build_bracket(session, competition_id)
    except BracketBuildError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return BracketBuildResponse(
        competition_id=result.competition_id,
        bracket_size=result.bracket_size,
        qualifiers_count=result.qualifiers_count,
        matches=[BracketMatchResponse.model_validate(m) for m in result.matches],
        warnings=result.warnings,
    )


@router.post(
    "/competitions/{competition_id}/bracket/matches/{match_id}/winner",
    response_model=MatchOutcomeResponse,
)
def resolve_draw(
    competition_id: int,
    match_id: int,
    payload: DeclareWinnerRequest,
    session: Session = Depends(get_session),
):
    """Declare the winner of a drawn knockout match and advance them."""
    _ensure_competition(session, competition_id)
    try:
        outcome = declare_winner(session, competition_id, match_id, payload.slot)
    except PropagationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return outcome_response(outcome)


# ============================================================================
# Read side
# ============================================================================


@router.get("/competitions/{competition_id}/bracket", response_model=BracketResponse)
def read_bracket(competition_id: int, session: Session = Depends(get_session)):
    """Bracket grouped by round (round_of_16 -> final) with the champion once decided."""
    _ensure_competition(session, competition_id)
    rounds = get_bracket(session, competition_id)
    champion = get_champion(session, competition_id)
    return BracketResponse(
        competition_id=competition_id,
        rounds=[
            BracketRoundResponse(
                round=r.round,
                matches=[BracketMatchResponse.model_validate(m) for m in r.matches],
            )
            for r in rounds
        ],
        champion=ChampionResponse(**vars(champion)) if champion else None,
    )


@router.get("/competitions/{competition_id}/bracket/champion", response_model=ChampionResponse)
def read_champion(competition_id: int, session: Session = Depends(get_session)):
    _ensure_competition(session, competition_id)
    champion = get_champion(session, competition_id)
    if not champion:
        raise HTTPException(status_code=404, detail="Champion not decided yet")
    return ChampionResponse(**vars(champion))
