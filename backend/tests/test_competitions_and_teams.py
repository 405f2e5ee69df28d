"""Competition and roster endpoints."""
from fastapi.testclient import TestClient


def _create_competition(client: TestClient, **payload):
    resp = client.post("/api/competitions", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_competition_sets_qualifier_count(client: TestClient):
    league = _create_competition(client, name="Dream League", format="league")
    divisional = _create_competition(
        client, name="Division A", format="divisional", subdivisions=["Monday", "Tuesday", "Wednesday"]
    )

    assert league["qualifier_count"] == 8
    assert league["subdivisions"] == []
    assert divisional["qualifier_count"] == 16
    assert divisional["subdivisions"] == ["Monday", "Tuesday", "Wednesday"]

    fetched = client.get(f"/api/competitions/{divisional['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Division A"

    ids = [c["id"] for c in client.get("/api/competitions").json()]
    assert league["id"] in ids and divisional["id"] in ids


def test_create_competition_validation(client: TestClient):
    assert client.post("/api/competitions", json={"name": " ", "format": "league"}).status_code == 422
    assert client.post("/api/competitions", json={"name": "X", "format": "cup"}).status_code == 422
    resp = client.post("/api/competitions", json={"name": "X", "format": "league", "subdivisions": ["Monday"]})
    assert resp.status_code == 422
    assert client.get("/api/competitions/999999").status_code == 404


def test_team_crud_and_stats(client: TestClient):
    competition = _create_competition(client, name="Roster Cup", format="divisional", subdivisions=["Monday"])
    base = f"/api/competitions/{competition['id']}/teams"

    resp = client.post(base, json={"name": "Rovers", "subdivision": "Monday"})
    assert resp.status_code == 201
    team = resp.json()
    assert team["points"] == 0
    assert team["eliminated"] is None

    resp = client.patch(
        f"{base}/{team['id']}",
        json={"stats": {"points": 9, "played": 3, "wins": 3, "goals_for": 7, "goals_against": 2}},
    )
    assert resp.status_code == 200
    assert resp.json()["points"] == 9
    assert resp.json()["goals_for"] == 7

    assert client.post(base, json={"name": "Rovers"}).status_code == 409
    assert client.post(base, json={"name": "Drifters", "subdivision": "Friday"}).status_code == 422

    listed = client.get(base).json()
    assert [t["name"] for t in listed] == ["Rovers"]

    assert client.delete(f"{base}/{team['id']}").status_code == 204
    assert client.get(base).json() == []


def test_team_must_belong_to_competition(client: TestClient):
    first = _create_competition(client, name="First", format="league")
    second = _create_competition(client, name="Second", format="league")
    team = client.post(f"/api/competitions/{first['id']}/teams", json={"name": "Wanderers"}).json()

    resp = client.patch(f"/api/competitions/{second['id']}/teams/{team['id']}", json={"name": "Moved"})
    assert resp.status_code == 400
    assert client.delete(f"/api/competitions/{second['id']}/teams/999999").status_code == 404


def test_health(client: TestClient):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_team_in_bracket_cannot_be_deleted(client: TestClient):
    competition = _create_competition(client, name="Bracket Cup", format="league")
    base = f"/api/competitions/{competition['id']}/teams"
    teams = [
        client.post(base, json={"name": f"Club {i}", "stats": {"points": 20 - i}}).json() for i in range(1, 10)
    ]
    client.post(f"/api/competitions/{competition['id']}/finals/kickoff")
    assert client.post(f"/api/competitions/{competition['id']}/bracket").status_code == 200

    resp = client.delete(f"{base}/{teams[0]['id']}")
    assert resp.status_code == 409
    assert "bracket" in resp.json()["detail"]
    assert len(client.get(base).json()) == 9

    # Ninth place was eliminated at kickoff and never seeded
    assert client.delete(f"{base}/{teams[8]['id']}").status_code == 204
