import random
from datetime import datetime, timezone

import pytest

from blockzone.worker import create_app
from blockzone.worker.config import WorkerConfig
from blockzone.worker.sessions import daily_seed
from blockzone.worker.store import Namespaces

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def client():
    app = create_app(WorkerConfig(), Namespaces.in_memory(), clock=lambda: NOW, rng=random.Random(0))
    return app.test_client()


def test_health_has_cors_headers(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json()["status"] == "ok"
    assert r.headers["Access-Control-Allow-Origin"] == "*"


def test_preflight_is_answered(client):
    r = client.open("/api/scores", method="OPTIONS",
                    headers={"Origin": "http://game.test", "Access-Control-Request-Method": "POST"})
    assert r.status_code == 200
    assert "POST" in r.headers["Access-Control-Allow-Methods"]


def test_unknown_route_is_json_404(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.get_json() == {"error": "Not found"}
    assert r.headers["Access-Control-Allow-Origin"] == "*"


def test_second_game_start_requires_payment(client):
    first = client.post("/api/game/start", json={"playerId": "p1"})
    assert first.status_code == 200
    assert first.get_json()["gameSession"]["creditUsed"] == "free_game"

    second = client.post("/api/game/start", json={"playerId": "p1"})
    assert second.status_code == 402
    assert second.get_json()["canPlay"] is False

    status = client.get("/api/players/status?player_id=p1").get_json()
    assert status["has_used_free_game"] is True
    assert status["requires_payment"] is True


def test_payment_unlocks_play_until_reset(client):
    client.post("/api/game/start", json={"playerId": "p1"})
    r = client.post("/api/payment/process",
                    json={"playerId": "p1", "paymentType": "unlimited_pass", "transactionId": "tx1"})
    assert r.status_code == 200
    assert r.get_json()["expiry"] == "2026-03-11T04:00:00Z"

    again = client.post("/api/game/start", json={"playerId": "p1"})
    assert again.status_code == 200
    assert again.get_json()["gameSession"]["creditUsed"] == "unlimited_pass"


def test_unknown_payment_type_is_rejected(client):
    r = client.post("/api/payment/process",
                    json={"playerId": "p1", "paymentType": "coins", "transactionId": "tx1"})
    assert r.status_code == 400


def test_complete_game_submits_score_and_ends_session(client):
    client.post("/api/player/register", json={"deviceId": "abcdef123456", "name": "NeonAce1"})
    start = client.post("/api/game/start", json={"playerId": "player_abcdef123456"}).get_json()
    session_id = start["sessionId"]

    r = client.post("/api/game/complete", json={"sessionId": session_id, "score": 1200, "lines": 4, "time": 90})
    body = r.get_json()
    assert r.status_code == 200
    assert body["playerRank"] == 1
    assert body["leaderboard"]["top10"][0]["name"] == "NeonAce1"
    assert body["playerStats"]["gamesPlayed"] == 1
    assert body["playerStats"]["bestScore"] == 1200

    replay = client.post("/api/game/complete", json={"sessionId": session_id, "score": 1})
    assert replay.status_code == 404
    assert replay.get_json()["error"] == "Invalid session"


@pytest.mark.parametrize("score", [None, "abc", -5, 12.9, True])
def test_invalid_scores_are_rejected(client, score):
    r = client.post("/api/scores", json={"player_id": "p1", "score": score})
    assert r.status_code == 400


def test_score_submission_and_leaderboard_views(client):
    client.post("/api/scores", json={"player_id": "p1", "player_name": "One", "score": 500})
    r = client.post("/api/scores", json={"player_id": "p2", "player_name": "Two", "score": 0})
    assert r.get_json()["rank"] == 2
    assert r.get_json()["total_scores"] == 2

    board = client.get("/api/leaderboard").get_json()
    assert [s["player_id"] for s in board["scores"]] == ["p1", "p2"]
    all_time = client.get("/api/leaderboard?period=all").get_json()
    assert len(all_time["scores"]) == 2

    daily = client.get("/api/leaderboard/daily").get_json()
    assert daily["date"] == "2026-03-10"
    assert daily["totalPlayers"] == 2

    assert client.get("/api/leaderboard/top/1").get_json() == [{"name": "One", "score": 500, "rank": 1}]
    assert len(client.get("/api/leaderboard/top/bad").get_json()) == 2
    assert client.get("/api/leaderboard/rank/p2").get_json()["position"] == 2


def test_empty_leaderboard_has_message(client):
    body = client.get("/api/leaderboard").get_json()
    assert body["scores"] == []
    assert "message" in body


def test_game_over_bundles_rank_top3_and_access(client):
    r = client.post("/api/game-over", json={"playerId": "p9", "score": 77, "gameData": {"playerName": "Nine"}})
    body = r.get_json()
    assert body["scoreSubmission"]["newRank"] == 1
    assert body["leaderboard"]["top3"][0] == {"id": "p9", "name": "Nine", "score": 77, "rank": 1}
    assert body["playerAccess"]["canPlayAgain"] is True
    assert body["metadata"]["scope"] == "daily"


def test_player_create_conflict_and_fingerprint_lookup(client):
    payload = {"device_fingerprint": "fp12345678", "wallet_address": "0xabc1234"}
    created = client.post("/api/player/create", json=payload)
    assert created.status_code == 200
    assert created.get_json()["player"]["displayName"] == "Player#1234"
    assert created.get_json()["player"]["quark_balance"] == 10

    dup = client.post("/api/player/create", json=payload)
    assert dup.status_code == 409
    assert dup.get_json()["existing_player"]["id"] == "player_fp12345678"

    assert client.get("/api/player/fingerprint/fp12345678").status_code == 200
    assert client.get("/api/player/fingerprint/short").status_code == 400
    missing = client.get("/api/player/fingerprint/unknown-fp")
    assert missing.status_code == 404
    assert missing.get_json()["fingerprint"] == "unknown-fp"


def test_update_stats_keeps_stored_values_for_missing_fields(client):
    client.post("/api/player/create", json={"device_fingerprint": "fp12345678", "wallet_address": "0xabc1234"})
    r = client.post("/api/player/update-stats",
                    json={"device_fingerprint": "fp12345678", "high_score": 900, "displayName": "Renamed"})
    player = r.get_json()["player"]
    assert player["high_score"] == 900
    assert player["quark_balance"] == 10
    assert player["displayName"] == "Renamed"


def test_register_is_idempotent(client):
    first = client.post("/api/player/register", json={"deviceId": "dev12345", "name": "A"}).get_json()
    second = client.post("/api/player/register", json={"deviceId": "dev12345", "name": "B"}).get_json()
    assert second["player"]["id"] == first["player"]["id"]
    assert second["player"]["displayName"] == "A"


def test_daily_seed_is_deterministic(client):
    r = client.post("/api/daily-seed", json={"date": "2026-03-10", "game": "neon_drop"})
    assert r.get_json()["seed"] == daily_seed("neon_drop", "2026-03-10", "blockzone_default_salt")
    assert client.post("/api/daily-seed", json={"date": "2026-03-10"}).status_code == 400


def test_non_object_body_is_rejected(client):
    r = client.post("/api/scores", json=[1, 2])
    assert r.status_code == 400


def test_whole_number_float_score_is_accepted(client):
    r = client.post("/api/scores", json={"player_id": "p1", "score": 300.0})
    assert r.status_code == 200
    board = client.get("/api/leaderboard").get_json()
    assert board["scores"][0]["score"] == 300


def test_top_with_non_positive_count_uses_default(client):
    for i in range(5):
        client.post("/api/scores", json={"player_id": f"p{i}", "score": 10 * i})
    assert len(client.get("/api/leaderboard/top/-3").get_json()) == 3
    assert len(client.get("/api/leaderboard/top/0").get_json()) == 3
    assert len(client.get("/api/leaderboard/top/5").get_json()) == 5


def test_profile_register_then_fetch_with_status(client):
    r = client.post("/api/players/register", json={
        "playerId": "p7", "gameName": "NeonAce", "displayName": "Ace", "walletAddress": "0xfeed",
    })
    assert r.status_code == 200
    assert r.get_json() == {
        "success": True, "player_id": "p7", "display_name": "Ace", "message": "Player registered successfully",
    }

    client.post("/api/game/start", json={"playerId": "p7"})
    body = client.get("/api/players/profile?player_id=p7").get_json()
    profile = body["profile"]
    assert body["success"] is True
    assert profile["game_name"] == "NeonAce"
    assert profile["wallet_address"] == "0xfeed"
    assert profile["tier"] == "player"
    assert profile["status"]["has_used_free_game"] is True


def test_profile_errors(client):
    assert client.post("/api/players/register", json={"playerId": "p7"}).status_code == 400
    assert client.get("/api/players/profile").status_code == 400
    missing = client.get("/api/players/profile?player_id=nobody")
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "Profile not found"}
