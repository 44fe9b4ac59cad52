"""Leaderboard and player worker.

A Flask application exposing the JSON REST surface used by the NeonDrop
client: game sessions, score submission, day-bucketed leaderboards, player
records keyed by device fingerprint, and free-game/unlimited-pass access.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from flask import Flask
from flask_cors import CORS

from .config import WorkerConfig
from .daily import Clock, utc_now
from .errors import register_error_handlers
from .leaderboard import LeaderboardService
from .players import PlayerService
from .routes import api_bp
from .sessions import SessionService
from .store import Namespaces


@dataclass
class WorkerServices:
    config: WorkerConfig
    store: Namespaces
    clock: Clock
    players: PlayerService
    leaderboard: LeaderboardService
    sessions: SessionService


def build_services(
    config: WorkerConfig,
    store: Optional[Namespaces] = None,
    clock: Clock = utc_now,
    rng: Optional[random.Random] = None,
) -> WorkerServices:
    if store is None:
        store = Namespaces.on_disk(config.store_path) if config.store_path else Namespaces.in_memory()
    players = PlayerService(store.players, config, clock)
    leaderboard = LeaderboardService(store.scores, config, clock)
    sessions = SessionService(store.sessions, players, leaderboard, config, clock, rng)
    return WorkerServices(config, store, clock, players, leaderboard, sessions)


def create_app(
    config: Optional[WorkerConfig] = None,
    store: Optional[Namespaces] = None,
    clock: Clock = utc_now,
    rng: Optional[random.Random] = None,
) -> Flask:
    config = config or WorkerConfig.from_env()
    app = Flask(__name__)
    app.extensions["blockzone"] = build_services(config, store, clock, rng)
    app.register_blueprint(api_bp)
    register_error_handlers(app)
    CORS(app, resources={r"/api/*": {"origins": "*"}}, allow_headers=["Content-Type", "Authorization"])
    return app


__all__ = ["create_app", "build_services", "WorkerConfig", "WorkerServices", "Namespaces"]
