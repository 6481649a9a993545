#!/usr/bin/env python
"""HTTP surface of the leaderboard: score submission, top scores, player best."""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from core import Core, EventBus, config
from modules.errors import StorageError, ValidationError
from modules.leaderboard import LeaderboardModule, LeaderboardStore


logger = logging.getLogger("leaderboard.web")

app = Flask(__name__)
CORS(app, supports_credentials=True)

_core: Optional[Core] = None


def build_core(
    store: Optional[LeaderboardStore] = None,
    *,
    event_bus: Optional[EventBus] = None,
) -> Core:
    """Wire a leaderboard store (configured from the environment by default) into a core."""
    if store is None:
        store = LeaderboardStore(
            config.leaderboard_file(),
            max_entries=config.max_entries(),
            top_n=config.top_n(),
        )
    return Core([LeaderboardModule(store)], event_bus=event_bus)


def install_core(new_core: Core) -> Core:
    """Make ``new_core`` serve requests, shutting down the previous one."""
    global _core
    if _core is not None and _core is not new_core:
        _core.shutdown()
    _core = new_core
    return _core


def get_core() -> Core:
    global _core
    if _core is None:
        _core = build_core()
    return _core


def _scores_etag(payload) -> str:
    data = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha1(data).hexdigest()


@app.errorhandler(ValidationError)
def handle_validation_error(exc: ValidationError):
    logger.debug({"evt": "score_rejected", "error": exc.message})
    return jsonify({"error": exc.message}), exc.status_code


@app.errorhandler(StorageError)
def handle_storage_error(exc: StorageError):
    logger.error({"evt": "score_save_failed", "error": exc.message})
    return jsonify({"error": exc.message}), exc.status_code


@app.route('/api/scores', methods=['GET', 'POST'])
def scores_api():
    if request.method == 'GET':
        top_scores = get_core().require("leaderboard.top")
        etag = _scores_etag(top_scores)
        if request.if_none_match.contains(etag):
            resp = Response(status=304)
            resp.set_etag(etag)
            return resp
        resp = jsonify(top_scores)
        resp.set_etag(etag)
        return resp

    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid data")
    result = get_core().require("leaderboard.submit", payload)
    return jsonify(result)


@app.route('/api/scores/player/<player_id>')
def player_best(player_id):
    best = get_core().require("leaderboard.player_best", {"playerId": player_id})
    return jsonify(best)


@app.route('/api/events')
def sse_events():
    """Server-sent events stream of leaderboard updates."""
    current = get_core()
    # Listen before reading the board so no update falls between the two.
    queue = current.event_bus.listen()
    try:
        snapshot = current.require("leaderboard.top")
    except Exception:
        current.event_bus.remove(queue)
        raise

    def stream():
        try:
            yield f"event: leaderboard_snapshot\ndata: {json.dumps({'top': snapshot})}\n\n"
            while True:
                message = queue.get()
                event_type = message.get("type", "message")
                payload = message.get("payload", {})
                yield f"event: {event_type}\ndata: {json.dumps(payload)}\n\n"
        finally:
            current.event_bus.remove(queue)

    resp = Response(stream(), mimetype='text/event-stream')
    resp.call_on_close(lambda: current.event_bus.remove(queue))
    return resp


__all__ = ["app", "build_core", "install_core", "get_core"]
