# /// script
# requires-python = ">=3.12"
# dependencies = ["flask>=3.0", "pydantic>=2.0"]
# ///
"""JSON API for the party-baseball scorebook.

Lets a scoring client start a game, record plays, undo, end the game and
save it, then browse saved games and career player statistics.

Every response uses the same envelope::

    {"success": true, "data": ...}
    {"success": false, "message": "..."}

Usage:
    uv run app.py
"""

from __future__ import annotations

import logging
import threading
import uuid

from flask import Flask, jsonify, request
from pydantic import ValidationError

from config import configure_logging, get_data_dir, get_port
from engine import game_state_to_dict
from models import ScoringEvent
from session import GameNotOverError, GameSession
from storage import GameStore, PlayerStore, StoreError
from storage.store import LEADER_STATS
from summary import career_deltas
from validation import format_validation_error, validate_setup

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = Flask(__name__)

# In-memory store for games being scored
SESSIONS: dict[str, GameSession] = {}

_stores: dict[str, object] = {}

# serializes finish so a double-submitted request saves the game once
_finish_lock = threading.Lock()


def get_game_store() -> GameStore:
    if "games" not in _stores:
        _stores["games"] = GameStore(app.config.get("DATA_DIR") or get_data_dir())
    return _stores["games"]


def get_player_store() -> PlayerStore:
    if "players" not in _stores:
        _stores["players"] = PlayerStore(app.config.get("DATA_DIR") or get_data_dir())
    return _stores["players"]


def reset_stores() -> None:
    """Forget cached stores so a new DATA_DIR takes effect (used by tests)."""
    _stores.clear()


def _ok(data, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def _error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def _session_payload(session_id: str, session: GameSession) -> dict:
    return {
        "sessionId": session_id,
        "setup": session.setup.to_document(),
        "state": game_state_to_dict(session.state),
        "situation": session.situation(),
        "canUndo": session.can_undo,
        "canDoublePlay": session.can_double_play(),
        "doublePlayNeedsBase": session.double_play_needs_base(),
        "playLog": list(session.play_log),
    }


# ---------------------------------------------------------------------------
# Scoring sessions
# ---------------------------------------------------------------------------


@app.route("/api/sessions", methods=["POST"])
def api_start_session():
    data = request.get_json(silent=True) or {}
    setup, error = validate_setup(data)
    if setup is None:
        return _error(error, 400)
    session_id = uuid.uuid4().hex[:12]
    SESSIONS[session_id] = GameSession(setup)
    return _ok(_session_payload(session_id, SESSIONS[session_id]), 201)


@app.route("/api/sessions/<session_id>")
def api_get_session(session_id: str):
    session = SESSIONS.get(session_id)
    if session is None:
        return _error("Session not found", 404)
    return _ok(_session_payload(session_id, session))


@app.route("/api/sessions/<session_id>/events", methods=["POST"])
def api_record_event(session_id: str):
    session = SESSIONS.get(session_id)
    if session is None:
        return _error("Session not found", 404)
    try:
        event = ScoringEvent.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return _error(format_validation_error(e), 400)
    if not session.dispatch(event):
        return _error(f"Event '{event.type.value}' is not allowed now", 409)
    return _ok(_session_payload(session_id, session))


@app.route("/api/sessions/<session_id>/undo", methods=["POST"])
def api_undo(session_id: str):
    session = SESSIONS.get(session_id)
    if session is None:
        return _error("Session not found", 404)
    if not session.undo():
        return _error("Nothing to undo", 409)
    return _ok(_session_payload(session_id, session))


@app.route("/api/sessions/<session_id>/end", methods=["POST"])
def api_end_game(session_id: str):
    session = SESSIONS.get(session_id)
    if session is None:
        return _error("Session not found", 404)
    session.call_game()
    return _ok(_session_payload(session_id, session))


@app.route("/api/sessions/<session_id>/finish", methods=["POST"])
def api_finish(session_id: str):
    with _finish_lock:
        session = SESSIONS.get(session_id)
        if session is None:
            return _error("Session not found", 404)
        try:
            record = session.finish()
        except GameNotOverError as e:
            return _error(str(e), 409)

        try:
            game_id = get_game_store().save(record, game_id=session.game_id)
            get_player_store().apply_game(game_id, career_deltas(record))
        except StoreError as e:
            # session stays in memory so the scorer can retry under the same game id
            logger.error("Saving session %s failed: %s", session_id, e)
            return _error(f"Error saving game: {e}", 500)

        del SESSIONS[session_id]
    return _ok({"gameId": game_id, "gameSummary": record.game_summary.to_document()}, 201)


# ---------------------------------------------------------------------------
# Saved games
# ---------------------------------------------------------------------------


@app.route("/api/games")
def api_list_games():
    games = get_game_store().list()
    return jsonify({"success": True, "count": len(games), "data": games})


@app.route("/api/games/<game_id>")
def api_get_game(game_id: str):
    game = get_game_store().get(game_id)
    if game is None:
        return _error("Game not found", 404)
    return _ok(game)


@app.route("/api/games/<game_id>", methods=["DELETE"])
def api_delete_game(game_id: str):
    if not get_game_store().delete(game_id):
        return _error("Game not found", 404)
    return jsonify({"success": True, "message": "Game deleted successfully"})


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------


@app.route("/api/players")
def api_list_players():
    team = request.args.get("team")
    sort_by = request.args.get("sortBy", "name")
    descending = request.args.get("order", "asc") == "desc"
    players = get_player_store().list(team=team, sort_by=sort_by, descending=descending)
    return jsonify({"success": True, "count": len(players), "data": players})


@app.route("/api/players/stats/leaders")
def api_leaders():
    stat = request.args.get("stat", "battingAverage")
    if stat not in LEADER_STATS:
        return _error("Invalid stat parameter", 400)
    try:
        limit = int(request.args.get("limit", 10))
    except ValueError:
        return _error("Invalid limit parameter", 400)
    leaders = get_player_store().leaders(stat, limit)
    return jsonify({"success": True, "stat": stat, "count": len(leaders), "data": leaders})


@app.route("/api/players/team/<team_name>")
def api_team_players(team_name: str):
    players = get_player_store().by_team(team_name)
    return jsonify({"success": True, "count": len(players), "data": players})


@app.route("/api/players/<name>")
def api_get_player(name: str):
    player = get_player_store().get(name)
    if player is None:
        return _error("Player not found", 404)
    return _ok(player)


@app.route("/api/players/<name>", methods=["DELETE"])
def api_delete_player(name: str):
    if not get_player_store().delete(name):
        return _error("Player not found", 404)
    return jsonify({"success": True, "message": "Player deleted successfully"})


@app.errorhandler(StoreError)
def handle_store_error(e: StoreError):
    logger.error("Store error: %s", e)
    return _error(str(e), 500)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    configure_logging()
    app.run(debug=True, host="0.0.0.0", port=get_port(), threaded=True)
