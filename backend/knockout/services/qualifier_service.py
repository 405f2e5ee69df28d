"""
Finals kickoff: split a competition into qualifiers and eliminated teams.

The top `qualifier_count` teams of the whole competition (sub-divisions are
ranked together) get eliminated=False, everyone else eliminated=True.
Does not create bracket matches.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from sqlmodel import Session, select

from knockout.models.competition import Competition
from knockout.models.team import Team
from knockout.services.standings import rank_teams

logger = logging.getLogger(__name__)


class KickoffError(Exception):
    """Raised when finals cannot be kicked off"""

    pass


@dataclass
class KickoffResult:
    competition_id: int
    qualifier_count: int
    qualified_team_ids: List[int] = field(default_factory=list)
    eliminated_team_ids: List[int] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def get_competition_teams(session: Session, competition_id: int) -> List[Team]:
    """Teams of a competition in stable id order (the ranking's input order)."""
    return list(
        session.exec(select(Team).where(Team.competition_id == competition_id).order_by(Team.id)).all()
    )


def kickoff_finals(session: Session, competition_id: int) -> KickoffResult:
    """
    Mark the top N teams qualified and the rest eliminated, in one commit.

    N comes from the competition format. With fewer than N teams every team
    qualifies and a warning is reported.

    Raises:
        KickoffError: competition missing or has no teams
    """
    competition = session.get(Competition, competition_id)
    if not competition:
        raise KickoffError(f"Competition {competition_id} not found")

    teams = get_competition_teams(session, competition_id)
    if not teams:
        logger.warning("Kickoff requested for competition %d with no teams", competition_id)
        raise KickoffError("No teams found in this competition")

    qualifier_count = competition.qualifier_count
    ranked = rank_teams(teams)
    result = KickoffResult(competition_id=competition_id, qualifier_count=qualifier_count)

    if len(ranked) < qualifier_count:
        msg = f"Only {len(ranked)} teams for {qualifier_count} qualifier places; all teams qualify"
        logger.warning("Competition %d: %s", competition_id, msg)
        result.warnings.append(msg)

    try:
        for index, team in enumerate(ranked):
            team.eliminated = index >= qualifier_count
            session.add(team)
            if team.eliminated:
                result.eliminated_team_ids.append(team.id)
            else:
                result.qualified_team_ids.append(team.id)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        "Finals kicked off for competition %d: %d qualified, %d eliminated",
        competition_id,
        len(result.qualified_team_ids),
        len(result.eliminated_team_ids),
    )
    return result
