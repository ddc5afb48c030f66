# /// script
# requires-python = ">=3.12"
# dependencies = ["flask>=3.0", "pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for the scorebook Flask API.

Validates:
  1. Sessions start from a validated setup and report their state
  2. Events, undo and end update the session
  3. Refused events and bad input map to 4xx responses
  4. Finishing saves the game and career stats
  5. Saved games and player stats can be browsed and deleted
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

import app as app_module
from app import SESSIONS, app, reset_stores
from storage import PlayerStore, StoreError


SETUP = {
    "homeTeam": "Sharks",
    "awayTeam": "Jets",
    "homeAbbreviation": "SHK",
    "awayAbbreviation": "JET",
    "homePlayers": ["Hank", "Hal"],
    "awayPlayers": ["Abe", "Amy"],
    "maxInnings": 3,
}


@pytest.fixture
def client(tmp_path):
    app.config["TESTING"] = True
    app.config["DATA_DIR"] = tmp_path
    reset_stores()
    SESSIONS.clear()
    with app.test_client() as c:
        yield c
    reset_stores()
    SESSIONS.clear()
    app.config.pop("DATA_DIR", None)


def start(client, setup=SETUP):
    resp = client.post("/api/sessions", json=setup)
    assert resp.status_code == 201
    return resp.get_json()["data"]["sessionId"]


def post_event(client, session_id, event_type, base=None):
    body = {"type": event_type}
    if base:
        body["base"] = base
    return client.post(f"/api/sessions/{session_id}/events", json=body)


def finish_short_game(client):
    sid = start(client)
    post_event(client, sid, "single")
    client.post(f"/api/sessions/{sid}/end")
    resp = client.post(f"/api/sessions/{sid}/finish")
    assert resp.status_code == 201
    return resp.get_json()["data"]["gameId"]


# -----------------------------------------------------------------------
# Sessions
# -----------------------------------------------------------------------


class TestSessions:
    def test_start_session(self, client):
        resp = client.post("/api/sessions", json=SETUP)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        data = body["data"]
        assert data["sessionId"] in SESSIONS
        assert data["state"]["currentBatter"] == "Abe"
        assert data["state"]["isTopInning"] is True
        assert data["state"]["maxInnings"] == 3
        assert data["canUndo"] is False
        assert data["canDoublePlay"] is False
        assert data["setup"]["homeAbbreviation"] == "SHK"
        assert data["situation"].startswith("Top 1st")

    def test_start_session_invalid_setup(self, client):
        resp = client.post("/api/sessions", json={**SETUP, "homeAbbreviation": "TOOLONG"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert "homeAbbreviation" in body["message"]

    def test_start_session_no_body(self, client):
        resp = client.post("/api/sessions")
        assert resp.status_code == 400

    def test_get_session(self, client):
        sid = start(client)
        resp = client.get(f"/api/sessions/{sid}")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["sessionId"] == sid

    def test_session_not_found(self, client):
        assert client.get("/api/sessions/nope").status_code == 404
        assert post_event(client, "nope", "single").status_code == 404
        assert client.post("/api/sessions/nope/undo").status_code == 404
        assert client.post("/api/sessions/nope/end").status_code == 404
        assert client.post("/api/sessions/nope/finish").status_code == 404


class TestEvents:
    def test_record_hit(self, client):
        sid = start(client)
        resp = post_event(client, sid, "double")
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["state"]["secondBase"] == "Abe"
        assert data["state"]["currentBatter"] == "Amy"
        assert data["canUndo"] is True
        assert data["canDoublePlay"] is True
        assert data["playLog"] == ["Abe doubles"]

    def test_unknown_event_type(self, client):
        sid = start(client)
        resp = post_event(client, sid, "walk")
        assert resp.status_code == 400
        assert "type" in resp.get_json()["message"]

    def test_refused_double_play(self, client):
        sid = start(client)
        resp = post_event(client, sid, "double_play")
        assert resp.status_code == 409
        assert resp.get_json()["success"] is False

    def test_double_play_with_base(self, client):
        sid = start(client)
        post_event(client, sid, "single")
        post_event(client, sid, "single")
        state = client.get(f"/api/sessions/{sid}").get_json()["data"]
        assert state["doublePlayNeedsBase"] is True
        assert post_event(client, sid, "double_play").status_code == 409
        resp = post_event(client, sid, "double_play", base="1B")
        assert resp.status_code == 200
        data = resp.get_json()["data"]["state"]
        assert data["outs"] == 2
        assert data["firstBase"] is None
        assert data["secondBase"] == "Abe"

    def test_undo(self, client):
        sid = start(client)
        post_event(client, sid, "home_run")
        resp = client.post(f"/api/sessions/{sid}/undo")
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["state"]["awayScore"] == 0
        assert data["canUndo"] is False
        assert client.post(f"/api/sessions/{sid}/undo").status_code == 409

    def test_end_game(self, client):
        sid = start(client)
        resp = client.post(f"/api/sessions/{sid}/end")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["state"]["gameEnded"] is True
        assert post_event(client, sid, "single").status_code == 409


# -----------------------------------------------------------------------
# Finishing and saved games
# -----------------------------------------------------------------------


class TestFinish:
    def test_finish_before_game_over(self, client):
        sid = start(client)
        resp = client.post(f"/api/sessions/{sid}/finish")
        assert resp.status_code == 409
        assert sid in SESSIONS

    def test_finish_saves_game(self, client, tmp_path):
        sid = start(client)
        post_event(client, sid, "home_run")
        client.post(f"/api/sessions/{sid}/end")
        resp = client.post(f"/api/sessions/{sid}/finish")
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["gameSummary"]["winner"] == "away"
        assert data["gameSummary"]["gameEndReason"] == "regulation"
        assert sid not in SESSIONS
        assert (tmp_path / "games" / f"{data['gameId']}.json").exists()
        assert (tmp_path / "players.json").exists()

    def test_finish_store_error_keeps_session(self, client, monkeypatch):
        class BrokenStore:
            def save(self, record, game_id=None):
                raise StoreError("disk full")

        monkeypatch.setattr(app_module, "get_game_store", lambda: BrokenStore())
        sid = start(client)
        client.post(f"/api/sessions/{sid}/end")
        resp = client.post(f"/api/sessions/{sid}/finish")
        assert resp.status_code == 500
        assert "disk full" in resp.get_json()["message"]
        assert sid in SESSIONS

    def test_finish_retry_after_career_failure_saves_one_game(self, client, monkeypatch):
        real_apply = PlayerStore.apply_game
        calls = []

        def flaky_apply(self, game_id, deltas):
            calls.append(game_id)
            if len(calls) == 1:
                raise StoreError("players.json locked")
            return real_apply(self, game_id, deltas)

        monkeypatch.setattr(PlayerStore, "apply_game", flaky_apply)
        sid = start(client)
        post_event(client, sid, "single")
        client.post(f"/api/sessions/{sid}/end")

        assert client.post(f"/api/sessions/{sid}/finish").status_code == 500
        resp = client.post(f"/api/sessions/{sid}/finish")
        assert resp.status_code == 201
        game_id = resp.get_json()["data"]["gameId"]

        assert calls == [game_id, game_id]
        games = client.get("/api/games").get_json()
        assert games["count"] == 1
        assert games["data"][0]["id"] == game_id
        player = client.get("/api/players/abe").get_json()["data"]
        assert player["gamesPlayed"] == 1

    def test_finish_twice_after_success(self, client):
        sid = start(client)
        client.post(f"/api/sessions/{sid}/end")
        assert client.post(f"/api/sessions/{sid}/finish").status_code == 201
        assert client.post(f"/api/sessions/{sid}/finish").status_code == 404
        assert client.get("/api/games").get_json()["count"] == 1


class TestGames:
    def test_list_and_get_game(self, client):
        game_id = finish_short_game(client)
        resp = client.get("/api/games")
        body = resp.get_json()
        assert body["count"] == 1
        assert body["data"][0]["id"] == game_id

        resp = client.get(f"/api/games/{game_id}")
        assert resp.status_code == 200
        game = resp.get_json()["data"]
        assert game["awayTeam"] == "Jets"
        assert game["gameHistoryCount"] == 3
        assert game["finalGameState"]["firstBase"] == "Abe"

    def test_game_not_found(self, client):
        assert client.get("/api/games/missing").status_code == 404
        assert client.delete("/api/games/missing").status_code == 404

    def test_delete_game(self, client):
        game_id = finish_short_game(client)
        resp = client.delete(f"/api/games/{game_id}")
        assert resp.status_code == 200
        assert client.get(f"/api/games/{game_id}").status_code == 404


# -----------------------------------------------------------------------
# Players
# -----------------------------------------------------------------------


class TestPlayers:
    def test_list_players(self, client):
        finish_short_game(client)
        body = client.get("/api/players").get_json()
        assert body["count"] == 4
        assert [p["name"] for p in body["data"]] == ["Abe", "Amy", "Hal", "Hank"]

        body = client.get("/api/players?team=Jets&sortBy=hits&order=desc").get_json()
        assert [p["name"] for p in body["data"]] == ["Abe", "Amy"]

    def test_get_player(self, client):
        finish_short_game(client)
        resp = client.get("/api/players/abe")
        assert resp.status_code == 200
        player = resp.get_json()["data"]
        assert player["hits"] == 1
        assert player["battingAverage"] == 1.0
        assert player["teams"] == ["Jets"]
        assert client.get("/api/players/nobody").status_code == 404

    def test_team_players(self, client):
        finish_short_game(client)
        body = client.get("/api/players/team/Sharks").get_json()
        assert body["count"] == 2

    def test_leaders(self, client):
        finish_short_game(client)
        body = client.get("/api/players/stats/leaders?stat=hits&limit=5").get_json()
        assert body["stat"] == "hits"
        assert [p["name"] for p in body["data"]] == ["Abe"]

    def test_leaders_bad_params(self, client):
        assert client.get("/api/players/stats/leaders?stat=steals").status_code == 400
        assert client.get("/api/players/stats/leaders?limit=ten").status_code == 400

    def test_delete_player(self, client):
        finish_short_game(client)
        assert client.delete("/api/players/Abe").status_code == 200
        assert client.delete("/api/players/Abe").status_code == 404

    def test_finish_applies_career_once_per_game(self, client):
        finish_short_game(client)
        finish_short_game(client)
        player = client.get("/api/players/abe").get_json()["data"]
        assert player["gamesPlayed"] == 2
        assert player["atBats"] == 2
