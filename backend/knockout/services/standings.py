"""
Standings ranking.

Orders teams by competitive merit from a snapshot of their league stats:
1. points (descending)
2. goal difference (descending; stored value, else goals_for - goals_against)
3. goals_for (descending)

Teams tied on all three keys keep their input order (stable sort).
No further tie-break is applied.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from knockout.models.team import Team


def effective_goal_difference(team: Team) -> int:
    """Stored goal difference, or goals_for - goals_against when not stored."""
    if team.goal_difference is not None:
        return team.goal_difference
    return (team.goals_for or 0) - (team.goals_against or 0)


def standings_key(team: Team) -> tuple:
    """Sort key for merit ranking. Lower = better."""
    return (
        -(team.points or 0),
        -effective_goal_difference(team),
        -(team.goals_for or 0),
    )


def rank_teams(teams: Iterable[Team]) -> List[Team]:
    """Return teams ordered most meritorious first. Pure; does not touch the session."""
    return sorted(teams, key=standings_key)


@dataclass
class StandingRow:
    rank: int
    team_id: int
    team_name: str
    subdivision: Optional[str]
    points: int
    played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: int
    eliminated: Optional[bool]


def build_standings(teams: Iterable[Team]) -> List[StandingRow]:
    """Ranked standings table rows (rank is 1-based)."""
    return [
        StandingRow(
            rank=index + 1,
            team_id=team.id,
            team_name=team.name,
            subdivision=team.subdivision,
            points=team.points,
            played=team.played,
            wins=team.wins,
            draws=team.draws,
            losses=team.losses,
            goals_for=team.goals_for,
            goals_against=team.goals_against,
            goal_difference=effective_goal_difference(team),
            eliminated=team.eliminated,
        )
        for index, team in enumerate(rank_teams(teams))
    ]
