"""
Knockout bracket builder.

Builds the single-elimination match tree for a competition from its current
qualifiers and persists it, replacing any previous bracket.

Topologies:
- 16 entrants: round_of_16 (8) -> quarterfinals (4) -> semifinals (2) -> final (1)
- 8 entrants: quarterfinals (4) -> semifinals (2) -> final (1)

First round pairs seed i with seed (size + 1 - i). Match m of a round with n
matches feeds match m of the next round (home) when m <= n / 2, otherwise match
n + 1 - m (away). This gives R16 1/8 -> QF1, 2/7 -> QF2, 3/6 -> QF3, 4/5 -> QF4,
QF 1/4 -> SF1, 2/3 -> SF2, SF 1/2 -> Final, so seeds 1 and 2 can only meet in
the final. No third-place match.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from sqlmodel import Session, select

from knockout.models.bracket_match import ROUND_ORDER, SLOT_AWAY, SLOT_HOME, BracketMatch, BracketRound
from knockout.models.competition import Competition
from knockout.models.team import Team
from knockout.services.qualifier_service import get_competition_teams
from knockout.services.standings import rank_teams

logger = logging.getLogger(__name__)

SUPPORTED_SIZES = (8, 16)

ROUNDS_BY_SIZE: Dict[int, List[str]] = {
    16: [
        BracketRound.round_of_16.value,
        BracketRound.quarterfinals.value,
        BracketRound.semifinals.value,
        BracketRound.final.value,
    ],
    8: [
        BracketRound.quarterfinals.value,
        BracketRound.semifinals.value,
        BracketRound.final.value,
    ],
}

ArenaKey = Tuple[str, int]  # (round, match_number)


class BracketBuildError(Exception):
    """Raised when a bracket cannot be built"""

    pass


@dataclass
class BracketPlan:
    competition_id: int
    bracket_size: int
    seeds: List[Team]  # seeds[0] is seed 1
    matches: Dict[ArenaKey, BracketMatch] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


@dataclass
class BracketBuildResult:
    competition_id: int
    bracket_size: int
    qualifiers_count: int
    matches: List[BracketMatch]
    warnings: List[str] = field(default_factory=list)


def bracket_size_for(qualifiers_count: int) -> Tuple[int, List[str]]:
    """
    Pick the bracket topology for a qualifier count.

    8 and 16 map to themselves. Anything else is tolerated with a warning:
    the smallest supported bracket that holds every qualifier is used (empty
    seed positions become byes), capped at 16 (extra qualifiers are left out).
    """
    warnings: List[str] = []
    if qualifiers_count in SUPPORTED_SIZES:
        return qualifiers_count, warnings

    size = 8 if qualifiers_count <= 8 else 16
    msg = f"Expected 8 or 16 qualified teams, got {qualifiers_count}; using {size}-team bracket"
    warnings.append(msg)
    if qualifiers_count > size:
        warnings.append(f"Only the top {size} qualifiers are seeded; {qualifiers_count - size} left out")
    return size, warnings


def feed_target(match_number: int, matches_in_round: int) -> Tuple[int, str]:
    """(next_match_number, slot) that the winner of `match_number` advances into."""
    if match_number <= matches_in_round // 2:
        return match_number, SLOT_HOME
    return matches_in_round + 1 - match_number, SLOT_AWAY


def first_round_pairings(bracket_size: int) -> List[Tuple[int, int, int]]:
    """(home_seed, away_seed, match_number) for the opening round: 1 v N, 2 v N-1, ..."""
    return [(i, bracket_size + 1 - i, i) for i in range(1, bracket_size // 2 + 1)]


def plan_bracket(competition_id: int, qualifiers: Sequence[Team]) -> BracketPlan:
    """
    Build the in-memory bracket arena keyed by (round, match_number).

    Pure: reads team snapshots only. Qualifiers are re-ranked here so the seed
    order reflects current standings.
    """
    ranked = rank_teams(qualifiers)
    bracket_size, warnings = bracket_size_for(len(ranked))
    seeds = ranked[:bracket_size]
    plan = BracketPlan(
        competition_id=competition_id,
        bracket_size=bracket_size,
        seeds=seeds,
        warnings=warnings,
    )

    rounds = ROUNDS_BY_SIZE[bracket_size]
    matches_in_round = bracket_size // 2
    for round_index, round_name in enumerate(rounds):
        is_final = round_index == len(rounds) - 1
        for match_number in range(1, matches_in_round + 1):
            match = BracketMatch(
                competition_id=competition_id,
                round=round_name,
                match_number=match_number,
                completed=False,
            )
            if not is_final:
                match.next_match_number, match.slot_in_next_match = feed_target(match_number, matches_in_round)
            plan.matches[(round_name, match_number)] = match
        matches_in_round //= 2

    first_round = rounds[0]
    for home_seed, away_seed, match_number in first_round_pairings(bracket_size):
        match = plan.matches[(first_round, match_number)]
        home = _seed(seeds, home_seed)
        away = _seed(seeds, away_seed)
        if home:
            match.set_slot(SLOT_HOME, home.id, home.name)
        if away:
            match.set_slot(SLOT_AWAY, away.id, away.name)
        _apply_bye(plan, match, home, away)

    for msg in plan.warnings:
        logger.warning("Competition %d bracket: %s", competition_id, msg)
    return plan


def _seed(seeds: Sequence[Team], seed_number: int) -> Optional[Team]:
    if seed_number <= len(seeds):
        return seeds[seed_number - 1]
    return None


def _apply_bye(plan: BracketPlan, match: BracketMatch, home: Optional[Team], away: Optional[Team]) -> None:
    """A first-round match with a single entrant advances that entrant straight away."""
    if home and away:
        return
    if not home and not away:
        plan.warnings.append(f"{match.round} match {match.match_number} has no entrants")
        return

    entrant = home or away
    match.completed = True
    match.winner_id = entrant.id
    match.winner_name = entrant.name
    plan.warnings.append(f"{entrant.name} receives a bye in {match.round} match {match.match_number}")

    next_round_name = ROUND_ORDER[ROUND_ORDER.index(match.round) + 1]
    target = plan.matches[(next_round_name, match.next_match_number)]
    target.set_slot(match.slot_in_next_match, entrant.id, entrant.name)


def get_bracket_matches(session: Session, competition_id: int) -> List[BracketMatch]:
    """All bracket matches of a competition, in round order then match number."""
    matches = session.exec(select(BracketMatch).where(BracketMatch.competition_id == competition_id)).all()
    return sorted(matches, key=lambda m: (ROUND_ORDER.index(m.round), m.match_number))


def replace_bracket(session: Session, plan: BracketPlan) -> List[BracketMatch]:
    """
    Atomically swap the competition's bracket for `plan`.

    Deletes every existing BracketMatch of the competition, inserts the planned
    matches and rewrites knockout seeds, all in a single commit. The competition
    row is locked first so concurrent rebuilds are serialized (no-op on SQLite).
    """
    competition_id = plan.competition_id
    try:
        session.exec(select(Competition).where(Competition.id == competition_id).with_for_update()).one()

        existing = session.exec(select(BracketMatch).where(BracketMatch.competition_id == competition_id)).all()
        for match in existing:
            session.delete(match)
        # Deletes must hit the table before inserts reuse (round, match_number)
        session.flush()

        for match in plan.matches.values():
            session.add(match)

        seed_by_team = {team.id: index + 1 for index, team in enumerate(plan.seeds)}
        for team in get_competition_teams(session, competition_id):
            seed = seed_by_team.get(team.id)
            if team.knockout_seed != seed:
                team.knockout_seed = seed
                session.add(team)

        session.commit()
    except Exception as e:
        session.rollback()
        logger.exception("Bracket rebuild failed for competition %d", competition_id)
        raise BracketBuildError(f"Bracket rebuild failed: {e}") from e

    logger.info(
        "Rebuilt bracket for competition %d: %d matches (replaced %d)",
        competition_id,
        len(plan.matches),
        len(existing),
    )
    return get_bracket_matches(session, competition_id)


def build_bracket(session: Session, competition_id: int) -> BracketBuildResult:
    """
    (Re)build the knockout bracket from the competition's current qualifiers.

    Qualifiers are teams whose `eliminated` flag is not True (so before kickoff
    every team counts). Safe to retry: each call fully replaces the bracket.

    Raises:
        BracketBuildError: competition missing, no teams, or no qualifiers
    """
    competition = session.get(Competition, competition_id)
    if not competition:
        raise BracketBuildError(f"Competition {competition_id} not found")

    teams = get_competition_teams(session, competition_id)
    if not teams:
        raise BracketBuildError("No teams found in this competition")

    qualifiers = [t for t in teams if t.eliminated is not True]
    if not qualifiers:
        raise BracketBuildError("No qualified teams found (all are eliminated)")

    plan = plan_bracket(competition_id, qualifiers)
    matches = replace_bracket(session, plan)
    return BracketBuildResult(
        competition_id=competition_id,
        bracket_size=plan.bracket_size,
        qualifiers_count=len(qualifiers),
        matches=matches,
        warnings=plan.warnings,
    )
