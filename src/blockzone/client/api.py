from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.getenv("BLOCKZONE_API_URL", "http://localhost:8787")


class ApiClientError(Exception):
    def __init__(self, message: str, status: Optional[int] = None, body: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body or {}


class PaymentRequiredError(ApiClientError):
    pass


class BlockZoneClient:
    """Thin JSON client for the worker's REST surface.

    Transport problems surface as ``requests.RequestException``; HTTP error
    statuses as :class:`ApiClientError` (402 as :class:`PaymentRequiredError`).
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 2.0,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        r = self.http.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        try:
            body = r.json()
        except ValueError:
            raise ApiClientError(f"Non-JSON response from {path}", status=r.status_code)
        if r.status_code == 402:
            raise PaymentRequiredError(body.get("error", "Payment required"), status=402, body=body)
        if r.status_code >= 400:
            message = body.get("error", f"HTTP {r.status_code}") if isinstance(body, dict) else f"HTTP {r.status_code}"
            raise ApiClientError(message, status=r.status_code, body=body if isinstance(body, dict) else None)
        return body

    def start_game(self, player_id: str, game_type: str = "neon_drop") -> Dict[str, Any]:
        return self._request("POST", "/api/game/start", json={"playerId": player_id, "gameType": game_type})

    def complete_game(self, session_id: str, score: int, lines: int, time: int,
                      player_name: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", "/api/game/complete", json={
            "sessionId": session_id,
            "score": score,
            "lines": lines,
            "time": time,
            "playerName": player_name,
        })

    def submit_score(self, player_id: str, score: int, player_name: Optional[str] = None,
                     game_type: str = "neon_drop", seed: Optional[int] = None,
                     timestamp: Optional[int] = None) -> Dict[str, Any]:
        return self._request("POST", "/api/scores", json={
            "player_id": player_id,
            "player_name": player_name,
            "score": score,
            "game_type": game_type,
            "seed": seed,
            "timestamp": timestamp,
        })

    def game_over(self, player_id: str, score: int, game_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("POST", "/api/game-over", json={"playerId": player_id, "score": score,
                                                              "gameData": game_data or {}})

    def leaderboard(self, game_type: str = "neon_drop", period: str = "daily") -> Dict[str, Any]:
        return self._request("GET", "/api/leaderboard", params={"game_type": game_type, "period": period})

    def top(self, n: int = 3) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/leaderboard/top/{n}")

    def rank(self, player_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/leaderboard/rank/{player_id}")

    def player_status(self, player_id: str) -> Dict[str, Any]:
        return self._request("GET", "/api/players/status", params={"player_id": player_id})

    def register_player(self, device_id: str, name: str) -> Dict[str, Any]:
        return self._request("POST", "/api/player/register", json={"deviceId": device_id, "name": name})

    def player_by_fingerprint(self, fingerprint: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/player/fingerprint/{fingerprint}")
