import logging

import pytest

from core import EventBus
from modules.leaderboard import LeaderboardStore
from web import app as web_app


def _submit(client, **body):
    return client.post("/api/scores", json=body)


def test_empty_board(client):
    resp = client.get("/api/scores")
    assert resp.status_code == 200
    assert resp.get_json() == []
    assert resp.headers.get("ETag")


def test_submit_score(client):
    resp = _submit(client, name="Ann", score=42.9, playerId="p1")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["rank"] == 1
    assert body["entry"]["name"] == "Ann"
    assert body["entry"]["score"] == 42
    assert body["entry"]["playerId"] == "p1"
    assert body["entry"]["date"].endswith("Z")


def test_top_scores_ordered(client):
    _submit(client, name="Ann", score=42.9, playerId="p1")
    _submit(client, name="Bob", score=50, playerId="p2")
    names = [entry["name"] for entry in client.get("/api/scores").get_json()]
    assert names == ["Bob", "Ann"]


@pytest.mark.parametrize(
    "body, message",
    [
        ({"name": "", "score": 1, "playerId": "p1"}, "Invalid data"),
        ({"name": "Ann", "playerId": "p1"}, "Invalid data"),
        ({"name": "Ann", "score": "lots", "playerId": "p1"}, "Invalid data"),
        ({"name": "Ann", "score": 1}, "Invalid data"),
        ({"name": "   ", "score": 1, "playerId": "p1"}, "Name is required"),
    ],
)
def test_invalid_submission_returns_400(client, body, message):
    resp = client.post("/api/scores", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": message}


def test_non_object_body_returns_400(client):
    assert client.post("/api/scores", json=[1, 2]).status_code == 400
    resp = client.post("/api/scores", data="not json", content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid data"}


def test_save_failure_returns_500(tmp_path, client):
    broken = web_app.build_core(LeaderboardStore(tmp_path), event_bus=EventBus())
    web_app.install_core(broken)
    try:
        resp = _submit(client, name="Ann", score=1, playerId="p1")
    finally:
        broken.shutdown()
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to save score"}


def test_etag_allows_conditional_get(client):
    first = client.get("/api/scores")
    etag = first.headers["ETag"]
    again = client.get("/api/scores", headers={"If-None-Match": etag})
    assert again.status_code == 304

    _submit(client, name="Ann", score=1, playerId="p1")
    changed = client.get("/api/scores", headers={"If-None-Match": etag})
    assert changed.status_code == 200
    assert changed.headers["ETag"] != etag


def test_player_best(client):
    _submit(client, name="Ann", score=5, playerId="p1")
    _submit(client, name="Ann", score=8, playerId="p1")
    resp = client.get("/api/scores/player/p1")
    assert resp.status_code == 200
    assert resp.get_json()["score"] == 8


def test_player_best_unknown_is_null(client):
    resp = client.get("/api/scores/player/nobody")
    assert resp.status_code == 200
    assert resp.data.strip() == b"null"


def test_cors_headers_present(client):
    resp = client.get("/api/scores", headers={"Origin": "http://example.com"})
    assert "Access-Control-Allow-Origin" in resp.headers


def test_event_stream_sends_snapshot_then_updates(core, bus):
    with web_app.app.test_request_context("/api/events"):
        resp = web_app.sse_events()
    assert resp.mimetype == "text/event-stream"

    stream = resp.response
    snapshot = next(stream)
    assert snapshot.startswith("event: leaderboard_snapshot\n")
    assert bus.listener_count == 1

    core.require("leaderboard.submit", {"name": "Ann", "score": 2, "playerId": "p1"})
    update = next(stream)
    assert update.startswith("event: leaderboard_update\n")
    assert '"rank": 1' in update

    stream.close()
    assert bus.listener_count == 0


def test_event_stream_keeps_update_made_before_first_read(core, bus):
    with web_app.app.test_request_context("/api/events"):
        resp = web_app.sse_events()
    core.require("leaderboard.submit", {"name": "Ann", "score": 4, "playerId": "p1"})

    stream = resp.response
    snapshot = next(stream)
    update = next(stream)
    assert snapshot.startswith("event: leaderboard_snapshot\n")
    assert update.startswith("event: leaderboard_update\n")
    assert '"name": "Ann"' in update

    stream.close()
    assert bus.listener_count == 0


def test_unread_event_stream_releases_listener(core, bus):
    with web_app.app.test_request_context("/api/events"):
        resp = web_app.sse_events()
    assert bus.listener_count == 1
    resp.close()
    assert bus.listener_count == 0


def test_rejected_submission_is_not_logged_as_fault(client, caplog):
    with caplog.at_level(logging.DEBUG):
        resp = _submit(client, name="   ", score=1, playerId="p1")
    assert resp.status_code == 400
    assert [record for record in caplog.records if record.levelno >= logging.WARNING] == []


def test_save_failure_is_logged_as_error(tmp_path, client, caplog):
    broken = web_app.build_core(LeaderboardStore(tmp_path), event_bus=EventBus())
    web_app.install_core(broken)
    try:
        with caplog.at_level(logging.DEBUG):
            resp = _submit(client, name="Ann", score=1, playerId="p1")
    finally:
        broken.shutdown()
    assert resp.status_code == 500
    error_events = {
        record.msg["evt"]
        for record in caplog.records
        if record.levelno == logging.ERROR and isinstance(record.msg, dict)
    }
    assert {"leaderboard_save_error", "score_save_failed"} <= error_events
