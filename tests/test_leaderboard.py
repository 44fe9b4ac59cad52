from datetime import datetime, timezone

from blockzone.worker.config import WorkerConfig
from blockzone.worker.leaderboard import LeaderboardService, rank_label
from blockzone.worker.store import MemoryKV

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_service(size: int = 100) -> LeaderboardService:
    return LeaderboardService(MemoryKV(), WorkerConfig(leaderboard_size=size), clock=lambda: NOW)


def test_board_is_sorted_descending_and_ties_keep_submission_order():
    service = make_service()
    service.submit("p1", 100)
    service.submit("p2", 300)
    result = service.submit("p3", 100)
    players = [e["player_id"] for e in result.board["scores"]]
    assert players == ["p2", "p1", "p3"]
    assert result.rank == 3


def test_board_is_stored_under_the_day_bucket_and_all_time():
    service = make_service()
    service.submit("p1", 42, display_name="Ada")
    assert service.scores.get_json("leaderboard:neon_drop:2026-03-10")["scores"][0]["display_name"] == "Ada"
    assert service.scores.get_json("leaderboard:neon_drop:all")["scores"][0]["score"] == 42
    assert service.scores.list_keys("score:p1:")


def test_zero_score_is_accepted():
    service = make_service()
    assert service.submit("p1", 0).rank == 1


def test_truncated_player_has_no_rank():
    service = make_service(size=3)
    for i in range(3):
        service.submit(f"p{i}", 1000 + i)
    result = service.submit("late", 5)
    assert result.rank is None
    assert result.total == 3


def test_top_and_ranked_views():
    service = make_service()
    service.submit("a", 10, display_name="A")
    service.submit("b", 30, display_name="B")
    assert service.top("neon_drop", 1) == [{"name": "B", "score": 30, "rank": 1}]
    ranked = service.ranked("neon_drop")
    assert [r["rank"] for r in ranked] == [1, 2]
    assert ranked[1]["player_name"] == "A"


def test_rank_of_reports_percentile_band():
    service = make_service()
    for i in range(20):
        service.submit(f"p{i}", i)
    assert service.rank_of("p19", "neon_drop") == {"rank": "Top 1%", "position": 1, "total": 20}
    assert service.rank_of("ghost", "neon_drop")["rank"] == "Not ranked"


def test_rank_labels():
    assert rank_label(1, 100) == "Top 1%"
    assert rank_label(8, 100) == "Top 5%"
    assert rank_label(30, 100) == "Top 25%"
    assert rank_label(90, 100) == "Top 75%"


def test_low_score_on_a_full_board_is_dropped():
    service = make_service()
    for i in range(100):
        service.submit(f"p{i}", 1000 + i)
    result = service.submit("late", 500)
    scores = [e["score"] for e in result.board["scores"]]
    assert result.rank is None
    assert len(scores) == 100
    assert scores == sorted(scores, reverse=True)
