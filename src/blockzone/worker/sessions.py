from __future__ import annotations

import hashlib
import logging
import random
import secrets
from typing import Any, Dict, Optional

from .config import WorkerConfig
from .daily import Clock, iso, to_ms, utc_now
from .errors import NotFoundError, PaymentRequiredError, ValidationError
from .leaderboard import LeaderboardService
from .players import PlayerService
from .store import KVStore

logger = logging.getLogger(__name__)


def parse_score(value: Any) -> int:
    if value is None or value == "":
        raise ValidationError("Missing required field: score")
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("Invalid score", details=f"score must be an integer, got {value!r}")
    try:
        score = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid score", details=f"score must be an integer, got {value!r}")
    if score < 0:
        raise ValidationError("Invalid score", details="score must be non-negative")
    return score


def daily_seed(game: str, date: str, salt: str) -> int:
    digest = hashlib.sha256(f"{game}_{date}_{salt}".encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


class SessionService:
    """Game sessions: credit consumption on start, scoring on completion."""

    def __init__(
        self,
        sessions: KVStore,
        players: PlayerService,
        leaderboard: LeaderboardService,
        config: WorkerConfig,
        clock: Clock = utc_now,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.sessions = sessions
        self.players = players
        self.leaderboard = leaderboard
        self.config = config
        self.clock = clock
        self.rng = rng or random.Random()

    def start(self, player_id: str, game_type: Optional[str] = None) -> Dict[str, Any]:
        if not player_id:
            raise ValidationError("Missing playerId")
        game_type = game_type or self.config.default_game_type
        access = self.players.access_status(player_id)
        if not access.can_play:
            raise PaymentRequiredError(
                "Payment required", payload={"canPlay": False, "reason": "payment_required"}
            )
        if not access.has_unlimited_pass:
            self.players.use_free_game(player_id)

        now = self.clock()
        session_id = f"session_{to_ms(now)}_{secrets.token_hex(5)[:9]}"
        session = {
            "sessionId": session_id,
            "playerId": player_id,
            "gameType": game_type,
            "startTime": iso(now),
            "seed": self.rng.randrange(1_000_000),
            "creditUsed": "unlimited_pass" if access.has_unlimited_pass else "free_game",
        }
        self.sessions.put_json(session_id, session)
        logger.info("Session %s started for %s (%s)", session_id, player_id, session["creditUsed"])
        return session

    def complete(self, session_id: str, score: Any, lines: int = 0, time: int = 0,
                 player_name: Optional[str] = None) -> Dict[str, Any]:
        if not session_id:
            raise ValidationError("Missing required fields: sessionId, score")
        score = parse_score(score)
        session = self.sessions.get_json(session_id)
        if not session:
            raise NotFoundError("Invalid session")

        player_id = session["playerId"]
        player = self.players.record_game(player_id, score)
        display_name = player_name or (player or {}).get("displayName") or f"Player {player_id}"
        result = self.leaderboard.submit(
            player_id,
            score,
            display_name=display_name,
            game_type=session.get("gameType"),
            seed=session.get("seed"),
            lines=lines or 0,
            time=time or 0,
        )
        self.sessions.delete(session_id)

        rank = result.rank
        return {
            "success": True,
            "scoreSubmitted": True,
            "playerRank": rank,
            "leaderboard": {
                "top10": self.leaderboard.summary(result.board, self.config.daily_view_size),
                "totalPlayers": result.total,
                "playerPosition": rank,
                "playerScore": score,
            },
            "playerStats": _stats(player),
            "message": f"Game complete! You ranked #{rank} today." if rank else "Game complete!",
        }

    def game_over(self, player_id: str, score: Any, game_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Score submission, leaderboard snapshot and access check in one call."""
        started = self.clock()
        if not player_id:
            raise ValidationError("Missing required fields: score, playerId")
        score = parse_score(score)
        game_data = game_data or {}

        result = self.leaderboard.submit(
            player_id,
            score,
            display_name=game_data.get("playerName"),
            game_type=game_data.get("gameType"),
            seed=game_data.get("seed"),
            timestamp=game_data.get("timestamp"),
        )
        access = self.players.access_status(player_id)
        finished = self.clock()
        return {
            "scoreSubmission": {
                "accepted": True,
                "newRank": result.rank,
                "submittedAt": result.entry["submitted_at"],
                "success": True,
                "score_id": result.score_id,
                "total_scores": result.total,
            },
            "leaderboard": {
                "top3": [
                    {"id": e["playerId"], "name": e["name"], "score": e["score"], "rank": e["rank"]}
                    for e in self.leaderboard.summary(result.board, self.config.top_count)
                ],
                "totalPlayers": result.total,
                "lastUpdated": result.board["last_updated"],
                "playerPosition": result.rank,
                "playerScore": score,
            },
            "playerAccess": access_payload(access),
            "metadata": {
                "responseTime": f"{to_ms(finished) - to_ms(started)}ms",
                "dataFreshness": "real-time",
                "scope": "daily",
                "timestamp": iso(finished),
            },
        }


def access_payload(access) -> Dict[str, Any]:
    return {
        "canPlayAgain": access.can_play,
        "reason": access.reason,
        "hasUnlimitedPass": access.has_unlimited_pass,
        "canPlayFree": access.can_play_free,
        "requiresPayment": access.requires_payment,
        "nextReset": iso(access.next_reset),
    }


def _stats(player: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not player:
        return {}
    return {
        "gamesPlayed": player.get("games_played", 0),
        "bestScore": player.get("high_score", 0),
        "totalScore": player.get("total_score", 0),
        "averageScore": player.get("average_score", 0),
    }
