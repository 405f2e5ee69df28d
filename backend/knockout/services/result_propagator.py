"""
Knockout result propagation.

When a calendar event tagged with (competition, round, match_number) reports a
finished game, store the score on the bracket match, decide the winner and
write the winner into the linked slot of the next-round match.

Outcomes:
- ignored: event is not a completed bracket result
- not_found: no bracket match for the tag (stale event or rebuilt bracket)
- tied: scores saved, no winner, nothing advanced (manual resolution needed)
- advanced: winner written into the next match
- champion: final decided
- unseeded: decisive score for a slot that holds no team; nothing advanced
- target_missing: winner decided but the next match does not exist

Retrying is safe: winner and target slot are re-derived from the stored match.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field
from sqlmodel import Session, select

from knockout.models.bracket_match import SLOT_AWAY, SLOT_HOME, BracketMatch, next_round
from knockout.services.tie_policy import DEFAULT_TIE_POLICY, TiePolicy

logger = logging.getLogger(__name__)

OUTCOME_IGNORED = "ignored"
OUTCOME_NOT_FOUND = "not_found"
OUTCOME_TIED = "tied"
OUTCOME_ADVANCED = "advanced"
OUTCOME_CHAMPION = "champion"
OUTCOME_UNSEEDED = "unseeded"
OUTCOME_TARGET_MISSING = "target_missing"


class PropagationError(Exception):
    """Raised when a result cannot be applied to the bracket"""

    pass


class MatchResultEvent(BaseModel):
    """Completion event raised by the scheduling calendar."""

    competition_id: Optional[int] = None
    round: Optional[str] = None
    match_number: Optional[int] = None
    home_score: Optional[int] = Field(default=None, ge=0)
    away_score: Optional[int] = Field(default=None, ge=0)
    completed: bool = False
    external_event_id: Optional[str] = None

    def is_bracket_result(self) -> bool:
        return (
            self.competition_id is not None
            and bool(self.round)
            and self.match_number is not None
            and self.completed
            and self.home_score is not None
            and self.away_score is not None
        )


@dataclass
class PropagationOutcome:
    status: str
    match: Optional[BracketMatch] = None
    next_match: Optional[BracketMatch] = None
    detail: Optional[str] = None


def find_bracket_match(session: Session, competition_id: int, round_name: str, match_number: int, lock: bool = False):
    query = select(BracketMatch).where(
        BracketMatch.competition_id == competition_id,
        BracketMatch.round == round_name,
        BracketMatch.match_number == match_number,
    )
    if lock:
        query = query.with_for_update()
    return session.exec(query).first()


def determine_winner_slot(match: BracketMatch, tie_policy: TiePolicy = DEFAULT_TIE_POLICY) -> Optional[str]:
    """Slot of the strictly higher score; on a draw defer to the tie policy."""
    if match.home_score > match.away_score:
        return SLOT_HOME
    if match.away_score > match.home_score:
        return SLOT_AWAY
    return tie_policy.resolve(match)


def apply_match_result(
    session: Session,
    event: MatchResultEvent,
    tie_policy: TiePolicy = DEFAULT_TIE_POLICY,
) -> PropagationOutcome:
    """
    Apply a finished-game event to the bracket and advance the winner.

    The source match and the next-round slot are written in one commit.

    Raises:
        PropagationError: the next-round slot already holds a different team
            in a match that has itself been completed, or a correction to a
            draw would pull the old winner out of a completed match
    """
    if not event.is_bracket_result():
        return PropagationOutcome(status=OUTCOME_IGNORED, detail="Event is not a completed bracket result")

    match = find_bracket_match(session, event.competition_id, event.round, event.match_number, lock=True)
    if not match:
        logger.warning(
            "No bracket match for competition %s %s match %s",
            event.competition_id,
            event.round,
            event.match_number,
        )
        return PropagationOutcome(status=OUTCOME_NOT_FOUND, detail="Bracket match not found")

    # A re-sent draw must not undo a winner declared for that same draw
    repeated_draw = (
        match.completed
        and match.home_score == match.away_score
        and (event.home_score, event.away_score) == (match.home_score, match.away_score)
    )
    previous_winner_id = match.winner_id

    match.home_score = event.home_score
    match.away_score = event.away_score
    match.completed = True
    if event.external_event_id is not None:
        match.external_event_id = event.external_event_id

    winner_slot = determine_winner_slot(match, tie_policy)
    if winner_slot is None and repeated_draw and previous_winner_id is not None:
        winner_slot = SLOT_HOME if match.home_team_id == previous_winner_id else SLOT_AWAY

    if winner_slot is None:
        _withdraw_winner(session, match, previous_winner_id)
        match.winner_id = None
        match.winner_name = None
        _commit(session, match)
        logger.warning(
            "Draw in knockout match %s %d (competition %d); scores saved, winner not advanced",
            match.round,
            match.match_number,
            match.competition_id,
        )
        return PropagationOutcome(status=OUTCOME_TIED, match=match, detail="Draw; winner must be declared manually")

    return _advance_winner(session, match, winner_slot)


def declare_winner(session: Session, competition_id: int, match_id: int, slot: str) -> PropagationOutcome:
    """
    Manually settle a drawn knockout match and advance the chosen side.

    Raises:
        PropagationError: match missing, not completed, not drawn, or slot invalid
    """
    if slot not in (SLOT_HOME, SLOT_AWAY):
        raise PropagationError(f"Invalid slot: {slot}")

    match = session.get(BracketMatch, match_id)
    if not match or match.competition_id != competition_id:
        raise PropagationError("Bracket match not found")
    if not match.completed:
        raise PropagationError("Match has no result yet")
    if match.home_score != match.away_score:
        raise PropagationError("Match was not drawn; winner follows the score")
    if match.winner_id is not None and match.team_in_slot(slot)[0] != match.winner_id:
        raise PropagationError("Match already has a different winner")

    return _advance_winner(session, match, slot)


def _advance_winner(session: Session, match: BracketMatch, winner_slot: str) -> PropagationOutcome:
    winner_id, winner_name = match.team_in_slot(winner_slot)
    if winner_id is None:
        # Scoreline came in for a slot that was never filled
        _withdraw_winner(session, match, match.winner_id)
        match.winner_id = None
        match.winner_name = None
        _commit(session, match)
        logger.warning(
            "Winning slot %s of %s %d (competition %d) is empty; nothing to advance",
            winner_slot,
            match.round,
            match.match_number,
            match.competition_id,
        )
        return PropagationOutcome(status=OUTCOME_UNSEEDED, match=match, detail="Winning slot has no team")

    match.winner_id = winner_id
    match.winner_name = winner_name

    target_round = next_round(match.round)
    if match.next_match_number is None or not match.slot_in_next_match or target_round is None:
        _commit(session, match)
        logger.info("Competition %d champion: %s", match.competition_id, winner_name)
        return PropagationOutcome(status=OUTCOME_CHAMPION, match=match)

    target = find_bracket_match(session, match.competition_id, target_round, match.next_match_number, lock=True)
    if not target:
        _commit(session, match)
        logger.error(
            "Next bracket match %s %d not found for competition %d",
            target_round,
            match.next_match_number,
            match.competition_id,
        )
        return PropagationOutcome(status=OUTCOME_TARGET_MISSING, match=match, detail="Next bracket match not found")

    current_id, _ = target.team_in_slot(match.slot_in_next_match)
    if current_id is not None and current_id != winner_id and target.completed:
        session.rollback()
        raise PropagationError(
            f"{target_round} match {target.match_number} is already completed with another team "
            f"in the {match.slot_in_next_match} slot"
        )

    target.set_slot(match.slot_in_next_match, winner_id, winner_name)
    session.add(target)
    _commit(session, match)
    session.refresh(target)
    return PropagationOutcome(status=OUTCOME_ADVANCED, match=match, next_match=target)


def _withdraw_winner(session: Session, match: BracketMatch, previous_winner_id: Optional[int]) -> None:
    """Clear the next-round slot still holding a winner this match no longer has."""
    target_round = next_round(match.round)
    if previous_winner_id is None or match.next_match_number is None or target_round is None:
        return

    target = find_bracket_match(session, match.competition_id, target_round, match.next_match_number, lock=True)
    if not target or target.team_in_slot(match.slot_in_next_match)[0] != previous_winner_id:
        return

    if target.completed:
        session.rollback()
        raise PropagationError(
            f"{target_round} match {target.match_number} is already completed with the previous winner "
            f"in the {match.slot_in_next_match} slot"
        )

    target.set_slot(match.slot_in_next_match, None, None)
    session.add(target)
    logger.info(
        "Withdrew team %d from %s %d (competition %d)",
        previous_winner_id,
        target_round,
        target.match_number,
        match.competition_id,
    )


def _commit(session: Session, match: BracketMatch) -> None:
    try:
        session.add(match)
        session.commit()
        session.refresh(match)
    except Exception:
        session.rollback()
        raise
