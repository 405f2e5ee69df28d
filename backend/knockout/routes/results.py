"""
Match-result intake from the scheduling calendar.
Applies a completed knockout score to the bracket and advances the winner.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from knockout.database import get_session
from knockout.routes.finals import MatchOutcomeResponse, outcome_response
from knockout.services.result_propagator import MatchResultEvent, PropagationError, apply_match_result

router = APIRouter()


@router.post("/bracket/results", response_model=MatchOutcomeResponse)
def receive_match_result(event: MatchResultEvent, session: Session = Depends(get_session)):
    """
    Apply a calendar completion event.

    Events that are not completed bracket results, or that point at a bracket
    match that no longer exists, are acknowledged with status "ignored" /
    "not_found" rather than an error.
    """
    try:
        outcome = apply_match_result(session, event)
    except PropagationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return outcome_response(outcome)
