"""Read-only bracket structure for rendering, grouped by round."""
from dataclasses import dataclass, field
from typing import List, Optional

from sqlmodel import Session, select

from knockout.models.bracket_match import BracketMatch, BracketRound
from knockout.services.bracket_builder import get_bracket_matches


@dataclass
class BracketRoundView:
    round: str
    matches: List[BracketMatch] = field(default_factory=list)


@dataclass
class Champion:
    team_id: int
    team_name: str


def get_champion(session: Session, competition_id: int) -> Optional[Champion]:
    """Winner of the completed final, if any."""
    final = session.exec(
        select(BracketMatch).where(
            BracketMatch.competition_id == competition_id,
            BracketMatch.round == BracketRound.final.value,
            BracketMatch.match_number == 1,
        )
    ).first()
    if not final or not final.completed or final.winner_id is None:
        return None
    return Champion(team_id=final.winner_id, team_name=final.winner_name)


def get_bracket(session: Session, competition_id: int) -> List[BracketRoundView]:
    """Rounds in play order; rounds without matches are omitted."""
    rounds: List[BracketRoundView] = []
    for match in get_bracket_matches(session, competition_id):
        if not rounds or rounds[-1].round != match.round:
            rounds.append(BracketRoundView(round=match.round))
        rounds[-1].matches.append(match)
    return rounds
