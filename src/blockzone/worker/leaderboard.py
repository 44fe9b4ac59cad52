"""Day-bucketed leaderboards stored as a single JSON value per board.

Submission is read, append, sort, truncate, write. Two concurrent submitters
can both read the same list and the later write discards the earlier entry;
the board is therefore only eventually consistent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import WorkerConfig
from .daily import Clock, day_bucket, iso, to_ms, utc_now
from .store import KVStore

logger = logging.getLogger(__name__)

ALL_TIME = "all"


@dataclass
class SubmitResult:
    score_id: str
    entry: Dict[str, Any]
    rank: Optional[int]
    board: Dict[str, Any]

    @property
    def total(self) -> int:
        return len(self.board["scores"])


def rank_label(position: int, total: int) -> str:
    percentile = round((1 - position / total) * 100)
    if percentile >= 95:
        return "Top 1%"
    if percentile >= 90:
        return "Top 5%"
    if percentile >= 80:
        return "Top 10%"
    if percentile >= 60:
        return "Top 25%"
    if percentile >= 40:
        return "Top 50%"
    return "Top 75%"


def find_rank(scores: List[Dict[str, Any]], player_id: str) -> Optional[int]:
    for index, entry in enumerate(scores):
        if entry.get("player_id") == player_id:
            return index + 1
    return None


class LeaderboardService:
    def __init__(self, scores: KVStore, config: WorkerConfig, clock: Clock = utc_now) -> None:
        self.scores = scores
        self.config = config
        self.clock = clock

    def today(self) -> str:
        return day_bucket(self.clock(), self.config.utc_offset_hours, self.config.reset_hour)

    def key(self, game_type: str, period: str = "daily") -> str:
        bucket = ALL_TIME if period == ALL_TIME else self.today()
        return f"leaderboard:{game_type}:{bucket}"

    def load(self, game_type: str, period: str = "daily") -> Dict[str, Any]:
        board = self.scores.get_json(self.key(game_type, period))
        if not board:
            return {"scores": [], "last_updated": iso(self.clock())}
        board.setdefault("scores", [])
        return board

    def _insert(self, key: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        board = self.scores.get_json(key) or {"scores": []}
        board["scores"].append(entry)
        # Stable sort keeps earlier submissions ahead on ties
        board["scores"].sort(key=lambda s: s["score"], reverse=True)
        board["scores"] = board["scores"][: self.config.leaderboard_size]
        board["last_updated"] = iso(self.clock())
        self.scores.put_json(key, board)
        return board

    def submit(
        self,
        player_id: str,
        score: int,
        display_name: Optional[str] = None,
        game_type: Optional[str] = None,
        seed: Optional[int] = None,
        timestamp: Optional[int] = None,
        **extra: Any,
    ) -> SubmitResult:
        now = self.clock()
        game_type = game_type or self.config.default_game_type
        entry: Dict[str, Any] = {
            "player_id": player_id,
            "display_name": display_name or f"Player {player_id}",
            "score": int(score),
            "game_type": game_type,
            "seed": seed,
            "timestamp": timestamp or to_ms(now),
            "submitted_at": iso(now),
        }
        entry.update(extra)

        score_id = f"score:{player_id}:{to_ms(now)}"
        self.scores.put_json(score_id, entry)

        board = self._insert(self.key(game_type), entry)
        self._insert(self.key(game_type, ALL_TIME), entry)
        rank = find_rank(board["scores"], player_id)
        logger.info("Score %d submitted for %s (rank %s)", entry["score"], player_id, rank)
        return SubmitResult(score_id=score_id, entry=entry, rank=rank, board=board)

    def ranked(self, game_type: str, period: str = "daily") -> List[Dict[str, Any]]:
        return [
            {
                "id": entry["player_id"],
                "player_id": entry["player_id"],
                "display_name": entry["display_name"],
                "player_name": entry["display_name"],
                "name": entry["display_name"],
                "score": entry["score"],
                "timestamp": entry.get("timestamp"),
                "submitted_at": entry.get("submitted_at"),
                "rank": index + 1,
            }
            for index, entry in enumerate(self.load(game_type, period)["scores"])
        ]

    def top(self, game_type: str, limit: int) -> List[Dict[str, Any]]:
        scores = sorted(self.load(game_type)["scores"], key=lambda s: s["score"], reverse=True)
        return [
            {"name": entry.get("display_name") or f"Player{index + 1}", "score": entry["score"], "rank": index + 1}
            for index, entry in enumerate(scores[:limit])
        ]

    def summary(self, board: Dict[str, Any], limit: int) -> List[Dict[str, Any]]:
        return [
            {"rank": index + 1, "name": entry["display_name"], "score": entry["score"], "playerId": entry["player_id"]}
            for index, entry in enumerate(board["scores"][:limit])
        ]

    def rank_of(self, player_id: str, game_type: str) -> Dict[str, Any]:
        scores = self.load(game_type)["scores"]
        position = find_rank(scores, player_id)
        if position is None:
            return {"rank": "Not ranked", "position": None, "total": len(scores)}
        return {"rank": rank_label(position, len(scores)), "position": position, "total": len(scores)}
