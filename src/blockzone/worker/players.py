"""Player records keyed by device fingerprint, plus daily access control.

A player is stored twice: under ``fingerprint:<fp>`` (primary) and under
``player:<id>`` (secondary lookup by id). Access is one free game per day
bucket unless an unlimited pass is active.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .config import WorkerConfig
from .daily import Clock, day_bucket, iso, next_reset, to_ms, utc_now
from .errors import ConflictError, NotFoundError, ValidationError
from .store import KVStore

logger = logging.getLogger(__name__)

STAT_FIELDS = ("games_played", "high_score", "total_score", "quark_balance")


@dataclass
class AccessStatus:
    player_id: str
    day: str
    has_unlimited_pass: bool
    has_used_free_game: bool
    next_reset: datetime

    @property
    def can_play(self) -> bool:
        return self.has_unlimited_pass or not self.has_used_free_game

    @property
    def can_play_free(self) -> bool:
        return not self.has_used_free_game and not self.has_unlimited_pass

    @property
    def requires_payment(self) -> bool:
        return self.has_used_free_game and not self.has_unlimited_pass

    @property
    def reason(self) -> str:
        if self.has_unlimited_pass:
            return "unlimited_pass"
        if self.has_used_free_game:
            return "payment_required"
        return "free_game_available"


def player_id_for(fingerprint: str) -> str:
    return f"player_{fingerprint}"


class PlayerService:
    def __init__(self, players: KVStore, config: WorkerConfig, clock: Clock = utc_now) -> None:
        self.players = players
        self.config = config
        self.clock = clock

    # -- records ---------------------------------------------------------
    def _save(self, player: Dict[str, Any]) -> None:
        self.players.put_json(f"fingerprint:{player['device_fingerprint']}", player)
        self.players.put_json(f"player:{player['id']}", player)

    def _new_record(self, fingerprint: str, display_name: str, wallet_address: Optional[str],
                    quark_balance: Optional[int]) -> Dict[str, Any]:
        now = to_ms(self.clock())
        return {
            "id": player_id_for(fingerprint),
            "device_fingerprint": fingerprint,
            "wallet_address": wallet_address,
            "displayName": display_name,
            "created_at": now,
            "last_seen": now,
            "quark_balance": quark_balance or self.config.welcome_quarks,
            "games_played": 0,
            "high_score": 0,
            "total_score": 0,
            "average_score": 0,
        }

    def create(self, fingerprint: str, wallet_address: str, display_name: Optional[str] = None,
               quark_balance: Optional[int] = None) -> Dict[str, Any]:
        if not fingerprint or not wallet_address:
            raise ValidationError("Missing required fields: device_fingerprint, wallet_address")
        existing = self.players.get_json(f"fingerprint:{fingerprint}")
        if existing:
            raise ConflictError("Player already exists for this device", payload={"existing_player": existing})
        name = display_name or f"Player#{wallet_address[-4:].upper()}"
        player = self._new_record(fingerprint, name, wallet_address, quark_balance)
        self._save(player)
        logger.info("Created player %s", player["id"])
        return player

    def register(self, device_id: str, name: str) -> tuple[Dict[str, Any], bool]:
        """Idempotent registration; returns (player, created)."""
        if not device_id or not name:
            raise ValidationError("Missing required fields: deviceId, name")
        existing = self.players.get_json(f"fingerprint:{device_id}")
        if existing:
            return existing, False
        player = self._new_record(device_id, name, None, None)
        self._save(player)
        return player, True

    def by_fingerprint(self, fingerprint: str) -> Dict[str, Any]:
        if not fingerprint or len(fingerprint) < self.config.min_fingerprint_length:
            raise ValidationError("Invalid fingerprint format")
        player = self.players.get_json(f"fingerprint:{fingerprint}")
        if not player:
            raise NotFoundError("Player not found", payload={"fingerprint": fingerprint})
        player["last_seen"] = to_ms(self.clock())
        self.players.put_json(f"fingerprint:{fingerprint}", player)
        return player

    def get(self, player_id: str) -> Optional[Dict[str, Any]]:
        return self.players.get_json(f"player:{player_id}")

    def register_profile(self, player_id: str, game_name: str, display_name: str,
                         wallet_address: Optional[str] = None,
                         is_account_abstraction: bool = False) -> Dict[str, Any]:
        """Store a per-game profile under ``profile:<id>``, replacing any previous one."""
        if not player_id or not game_name or not display_name:
            raise ValidationError("Missing required fields: playerId, gameName, displayName")
        now = to_ms(self.clock())
        profile = {
            "player_id": player_id,
            "game_name": game_name,
            "display_name": display_name,
            "wallet_address": wallet_address or None,
            "is_account_abstraction": bool(is_account_abstraction),
            "created_at": now,
            "last_activity": now,
            "tier": "player",
            "current_high_score": 0,
        }
        self.players.put_json(f"profile:{player_id}", profile)
        logger.info("Registered profile for %s", player_id)
        return profile

    def profile(self, player_id: str) -> Dict[str, Any]:
        if not player_id:
            raise ValidationError("Missing player_id parameter")
        profile = self.players.get_json(f"profile:{player_id}")
        if not profile:
            raise NotFoundError("Profile not found")
        profile["last_activity"] = to_ms(self.clock())
        return profile

    def update_stats(self, fingerprint: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if not fingerprint:
            raise ValidationError("Missing required field: device_fingerprint")
        player = self.players.get_json(f"fingerprint:{fingerprint}")
        if not player:
            raise NotFoundError("Player not found for fingerprint", payload={"fingerprint": fingerprint})
        for field in STAT_FIELDS:
            # Falsy values keep the stored figure
            player[field] = changes.get(field) or player.get(field) or 0
        for field, key in (("displayName", "displayName"), ("username", "username"),
                           ("wallet_address", "wallet_address")):
            if changes.get(field):
                player[key] = changes[field]
        player["last_seen"] = to_ms(self.clock())
        self._save(player)
        return player

    def record_game(self, player_id: str, score: int) -> Optional[Dict[str, Any]]:
        player = self.get(player_id)
        if not player:
            return None
        player["games_played"] = player.get("games_played", 0) + 1
        player["total_score"] = player.get("total_score", 0) + score
        player["average_score"] = player["total_score"] // player["games_played"]
        player["high_score"] = max(player.get("high_score", 0), score)
        player["last_seen"] = to_ms(self.clock())
        self._save(player)
        return player

    # -- access ----------------------------------------------------------
    def today(self) -> str:
        return day_bucket(self.clock(), self.config.utc_offset_hours, self.config.reset_hour)

    def access_status(self, player_id: str) -> AccessStatus:
        now = self.clock()
        day = self.today()
        unlimited = self.players.get_json(f"unlimited_pass:{player_id}")
        used = self.players.get(f"free_game:{player_id}:{day}")
        return AccessStatus(
            player_id=player_id,
            day=day,
            has_unlimited_pass=bool(unlimited and unlimited.get("expiry", 0) > to_ms(now)),
            has_used_free_game=used is not None,
            next_reset=next_reset(now, self.config.utc_offset_hours, self.config.reset_hour),
        )

    def use_free_game(self, player_id: str) -> str:
        if not player_id:
            raise ValidationError("Missing player_id parameter")
        day = self.today()
        self.players.put_json(
            f"free_game:{player_id}:{day}",
            {"player_id": player_id, "used_at": to_ms(self.clock()), "day": day},
        )
        return day

    def grant_unlimited_pass(self, player_id: str, expiry: Optional[datetime] = None, **extra: Any) -> datetime:
        if not player_id:
            raise ValidationError("Missing player_id parameter")
        now = self.clock()
        expiry = expiry or now + timedelta(hours=self.config.unlimited_pass_hours)
        record = {"player_id": player_id, "expiry": to_ms(expiry), "granted_at": to_ms(now)}
        record.update(extra)
        self.players.put_json(f"unlimited_pass:{player_id}", record)
        logger.info("Unlimited pass granted to %s until %s", player_id, iso(expiry))
        return expiry

    def process_payment(self, player_id: str, payment_type: str, transaction_id: str,
                        amount: Optional[float] = None) -> datetime:
        if not player_id or not payment_type or not transaction_id:
            raise ValidationError("Missing required fields: playerId, paymentType, transactionId")
        if payment_type != "unlimited_pass":
            raise ValidationError("Invalid payment type")
        # Day passes run out at the next daily reset
        expiry = next_reset(self.clock(), self.config.utc_offset_hours, self.config.reset_hour)
        return self.grant_unlimited_pass(
            player_id,
            expiry,
            transaction_id=transaction_id,
            amount=amount or self.config.default_pass_amount,
        )
