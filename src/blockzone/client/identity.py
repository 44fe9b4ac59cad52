"""Device-fingerprint player identity.

The player record is cached in a local JSON file; the backend is told about
new players on a best-effort basis. When nothing works a temporary,
local-only player is used so the game can always start.
"""

from __future__ import annotations

import hashlib
import json
import locale
import logging
import platform
import random
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from .api import ApiClientError, BlockZoneClient

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_FILE = Path.home() / ".blockzone" / "player.json"

ADJECTIVES = ["Quantum", "Neon", "Cyber", "Digital", "Electric", "Plasma",
              "Stellar", "Cosmic", "Atomic", "Neural", "Photon", "Matrix"]
NOUNS = ["Gamer", "Player", "Pilot", "Warrior", "Master", "Champion",
         "Legend", "Hero", "Ace", "Pro", "Elite", "Ninja"]


def device_fingerprint() -> str:
    """Short stable id derived from host attributes (not a secret)."""
    attributes = {
        "node": uuid.getnode(),
        "platform": platform.platform(),
        "machine": platform.machine(),
        "language": locale.getlocale()[0],
        "timezone": time.tzname[0],
    }
    digest = hashlib.sha256(json.dumps(attributes, sort_keys=True).encode("utf-8")).hexdigest()
    return digest[:12]


def new_stats() -> Dict[str, int]:
    return {"gamesPlayed": 0, "totalScore": 0, "averageScore": 0, "bestScore": 0}


def generate_player_name(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return f"{rng.choice(ADJECTIVES)}{rng.choice(NOUNS)}{rng.randint(1, 999)}"


class IdentityService:
    def __init__(self, client: Optional[BlockZoneClient] = None, player_file: Path = DEFAULT_PLAYER_FILE,
                 fingerprint: Optional[str] = None, rng: Optional[random.Random] = None) -> None:
        self.client = client
        self.player_file = Path(player_file)
        self.fingerprint = fingerprint
        self.rng = rng or random.Random()
        self.player: Optional[Dict[str, Any]] = None

    def initialize(self) -> Dict[str, Any]:
        if self.player is not None:
            return self.player
        try:
            self.fingerprint = self.fingerprint or device_fingerprint()
            self.player = self._load_local() or self._lookup_remote() or self._create()
        except OSError as exc:
            logger.error("Identity initialization failed, using temporary player: %s", exc)
            self.player = self._temporary()
        logger.info("Player identity ready: %s", self.player["name"])
        return self.player

    def update_game_stats(self, score: int, lines: int = 0, time: int = 0) -> Optional[Dict[str, int]]:
        """Fold one finished game into the locally cached stats."""
        if self.player is None:
            return None
        stats = self.player.setdefault("stats", new_stats())
        stats["gamesPlayed"] = stats.get("gamesPlayed", 0) + 1
        stats["totalScore"] = stats.get("totalScore", 0) + score
        stats["averageScore"] = stats["totalScore"] // stats["gamesPlayed"]
        stats["bestScore"] = max(stats.get("bestScore", 0), score)
        if self.player.get("isTemporary"):
            return stats
        try:
            self._save_local(self.player)
        except OSError as exc:
            logger.warning("Could not save local stats: %s", exc)
        logger.debug("Local stats after game (lines=%d, time=%ds): %s", lines, time, stats)
        return stats

    def _load_local(self) -> Optional[Dict[str, Any]]:
        if not self.player_file.exists():
            return None
        try:
            with open(self.player_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except ValueError:
            logger.warning("Invalid local player data, creating new")
            return None

    def _lookup_remote(self) -> Optional[Dict[str, Any]]:
        if self.client is None:
            return None
        try:
            remote = self.client.player_by_fingerprint(self.fingerprint)
        except (requests.RequestException, ApiClientError) as exc:
            logger.info("Backend lookup failed, proceeding with local creation: %s", exc)
            return None
        player = {
            "id": remote["id"],
            "name": remote.get("displayName") or generate_player_name(self.rng),
            "deviceId": self.fingerprint,
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "stats": new_stats(),
        }
        self._save_local(player)
        return player

    def _create(self) -> Dict[str, Any]:
        player = {
            "id": f"player_{self.fingerprint}",
            "name": generate_player_name(self.rng),
            "deviceId": self.fingerprint,
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "stats": new_stats(),
        }
        self._save_local(player)
        self._register(player)
        return player

    def _register(self, player: Dict[str, Any]) -> None:
        if self.client is None:
            return
        try:
            self.client.register_player(player["deviceId"], player["name"])
        except (requests.RequestException, ApiClientError) as exc:
            logger.warning("Player registration failed, will stay local: %s", exc)

    def _save_local(self, player: Dict[str, Any]) -> None:
        self.player_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.player_file, "w", encoding="utf-8") as f:
            json.dump(player, f, indent=2)

    def _temporary(self) -> Dict[str, Any]:
        return {
            "id": f"temp_{int(time.time() * 1000)}",
            "name": "TempPlayer",
            "deviceId": self.fingerprint or "unknown",
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "isTemporary": True,
        }
