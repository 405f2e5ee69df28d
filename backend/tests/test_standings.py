"""Standings ranking: points, goal difference, goals for; stable for full ties."""
import random

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from knockout.models.competition import Competition
from knockout.models.team import Team
from knockout.services.standings import build_standings, effective_goal_difference, rank_teams


def _team(team_id, name, points=0, goals_for=0, goals_against=0, goal_difference=None):
    return Team(
        id=team_id,
        competition_id=1,
        name=name,
        points=points,
        goals_for=goals_for,
        goals_against=goals_against,
        goal_difference=goal_difference,
    )


def test_points_rank_first():
    teams = [_team(1, "Low", points=3), _team(2, "High", points=9), _team(3, "Mid", points=6)]
    assert [t.name for t in rank_teams(teams)] == ["High", "Mid", "Low"]


def test_goal_difference_breaks_points_tie():
    teams = [
        _team(1, "A", points=6, goals_for=5, goals_against=5),
        _team(2, "B", points=6, goals_for=4, goals_against=1),
    ]
    assert [t.name for t in rank_teams(teams)] == ["B", "A"]


def test_goals_for_breaks_goal_difference_tie():
    teams = [
        _team(1, "A", points=6, goals_for=3, goals_against=1),
        _team(2, "B", points=6, goals_for=7, goals_against=5),
    ]
    assert [t.name for t in rank_teams(teams)] == ["B", "A"]


def test_stored_goal_difference_takes_precedence():
    team = _team(1, "A", goals_for=2, goals_against=8, goal_difference=4)
    assert effective_goal_difference(team) == 4
    assert effective_goal_difference(_team(2, "B", goals_for=2, goals_against=8)) == -6


def test_full_tie_keeps_input_order():
    teams = [_team(i, f"T{i}", points=3, goals_for=2, goals_against=2) for i in range(1, 6)]
    assert [t.id for t in rank_teams(teams)] == [1, 2, 3, 4, 5]
    assert [t.id for t in rank_teams(list(reversed(teams)))] == [5, 4, 3, 2, 1]


@pytest.mark.xfail(strict=True, reason="Known gap: no tie-break is defined beyond goals_for")
def test_full_tie_order_is_independent_of_input_order():
    teams = [_team(i, f"T{i}", points=3, goals_for=2, goals_against=2) for i in range(1, 6)]
    assert [t.id for t in rank_teams(teams)] == [t.id for t in rank_teams(list(reversed(teams)))]


def test_ranking_matches_reference_sort_for_random_tables():
    rng = random.Random(20261019)
    for _ in range(25):
        teams = [
            _team(
                i,
                f"T{i}",
                points=rng.randint(0, 12),
                goals_for=rng.randint(0, 8),
                goals_against=rng.randint(0, 8),
            )
            for i in range(1, 13)
        ]
        expected = sorted(
            teams,
            key=lambda t: (t.points, t.goals_for - t.goals_against, t.goals_for),
            reverse=True,
        )
        ranked = rank_teams(teams)
        keys = [(t.points, t.goals_for - t.goals_against, t.goals_for) for t in ranked]
        assert keys == [(t.points, t.goals_for - t.goals_against, t.goals_for) for t in expected]
        # Deterministic on re-run with unchanged stats
        assert [t.id for t in rank_teams(teams)] == [t.id for t in ranked]


def test_build_standings_numbers_rows():
    teams = [_team(1, "A", points=1), _team(2, "B", points=4, goals_for=3, goals_against=1)]
    rows = build_standings(teams)
    assert [(r.rank, r.team_name, r.goal_difference) for r in rows] == [(1, "B", 2), (2, "A", 0)]


@pytest.fixture
def divisional_competition(session: Session):
    competition = Competition(name="MSL A", format="divisional", subdivisions=["Monday", "Tuesday"])
    session.add(competition)
    session.commit()
    session.refresh(competition)

    teams = [
        Team(competition_id=competition.id, name="Mon-1", subdivision="Monday", points=9),
        Team(competition_id=competition.id, name="Mon-2", subdivision="Monday", points=3),
        Team(competition_id=competition.id, name="Tue-1", subdivision="Tuesday", points=7),
        Team(competition_id=competition.id, name="Tue-2", subdivision="Tuesday", points=1),
    ]
    for team in teams:
        session.add(team)
    session.commit()
    return competition


def test_standings_endpoint_orders_whole_competition(client: TestClient, divisional_competition):
    resp = client.get(f"/api/competitions/{divisional_competition.id}/standings")
    assert resp.status_code == 200
    data = resp.json()
    assert data["qualifier_count"] == 16
    assert data["finals_started"] is False
    assert [r["team_name"] for r in data["rows"]] == ["Mon-1", "Tue-1", "Mon-2", "Tue-2"]
    assert [r["rank"] for r in data["rows"]] == [1, 2, 3, 4]


def test_standings_endpoint_subdivision_filter(client: TestClient, divisional_competition):
    resp = client.get(
        f"/api/competitions/{divisional_competition.id}/standings",
        params={"subdivision": "Tuesday"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["subdivision"] == "Tuesday"
    assert [r["team_name"] for r in data["rows"]] == ["Tue-1", "Tue-2"]


def test_standings_endpoint_unknown_subdivision(client: TestClient, divisional_competition):
    resp = client.get(
        f"/api/competitions/{divisional_competition.id}/standings",
        params={"subdivision": "Sunday"},
    )
    assert resp.status_code == 404


def test_standings_endpoint_missing_competition(client: TestClient):
    assert client.get("/api/competitions/999999/standings").status_code == 404
