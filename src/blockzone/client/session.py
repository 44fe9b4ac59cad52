"""Online game session with a one-shot offline fallback.

Starting and finishing a game each make a single call to the worker. When a
call fails for any transport or server reason the game carries on locally:
start falls back to an ``offline_<ms>`` id and a random seed, finish logs and
returns ``None``. A 402 from the worker is not a failure; it propagates as
:class:`PaymentRequiredError` so the caller can prompt for payment.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from blockzone.game import NeonDropGame
from .api import ApiClientError, BlockZoneClient, PaymentRequiredError
from .identity import IdentityService

logger = logging.getLogger(__name__)


@dataclass
class SessionTicket:
    session_id: str
    seed: int
    offline: bool


class OnlineSession:
    def __init__(self, client: Optional[BlockZoneClient], player_id: str, player_name: Optional[str] = None,
                 game_type: str = "neon_drop", identity: Optional[IdentityService] = None) -> None:
        self.client = client
        self.identity = identity
        self.player_id = player_id
        self.player_name = player_name
        self.game_type = game_type
        self.ticket: Optional[SessionTicket] = None
        self.result: Optional[Dict[str, Any]] = None

    def _offline_ticket(self) -> SessionTicket:
        return SessionTicket(
            session_id=f"offline_{int(time.time() * 1000)}",
            seed=random.randrange(1_000_000),
            offline=True,
        )

    def start(self) -> SessionTicket:
        if self.client is None:
            self.ticket = self._offline_ticket()
            return self.ticket
        try:
            body = self.client.start_game(self.player_id, self.game_type)
            self.ticket = SessionTicket(session_id=body["sessionId"], seed=int(body["gameSession"]["seed"]),
                                        offline=False)
            logger.info("Game session started: %s", body.get("message", self.ticket.session_id))
        except PaymentRequiredError:
            raise
        except (requests.RequestException, ApiClientError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Backend game start failed, continuing offline: %s", exc)
            self.ticket = self._offline_ticket()
        return self.ticket

    def start_game(self, game: NeonDropGame, now_ms: int = 0) -> SessionTicket:
        ticket = self.start()
        game.start(now_ms, seed=ticket.seed)
        return ticket

    def finish(self, game: NeonDropGame) -> Optional[Dict[str, Any]]:
        return self.submit(game.score, game.lines, game.elapsed_s)

    def submit(self, score: int, lines: int, elapsed_s: int,
               ticket: Optional[SessionTicket] = None) -> Optional[Dict[str, Any]]:
        """Record a finished game locally, then report it to the worker if online."""
        ticket = ticket or self.ticket
        if self.identity is not None:
            self.identity.update_game_stats(score, lines, elapsed_s)
        if self.client is None or ticket is None or ticket.offline:
            logger.info("No online session, skipping score submission")
            return None
        try:
            self.result = self.client.complete_game(
                ticket.session_id, score, lines, elapsed_s, self.player_name
            )
        except (requests.RequestException, ApiClientError) as exc:
            logger.warning("Score submission failed: %s", exc)
            return None
        logger.info("Score submitted, rank #%s today", self.result.get("playerRank"))
        return self.result
