from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional


@dataclass
class WorkerConfig:
    """Configuration for the leaderboard/player worker.

    Every field can be overridden from the environment with a
    ``BLOCKZONE_<FIELD>`` variable, e.g. ``BLOCKZONE_LEADERBOARD_SIZE=50``.
    """

    service_name: str = "blockzone-api"
    version: str = "2.0.0"
    default_game_type: str = "neon_drop"
    # Fixed offset approximation of US Eastern time, no DST
    utc_offset_hours: int = -5
    reset_hour: int = 23
    leaderboard_size: int = 100
    top_count: int = 3
    daily_view_size: int = 10
    unlimited_pass_hours: int = 24
    default_pass_amount: float = 2.50
    welcome_quarks: int = 10
    min_fingerprint_length: int = 8
    seed_salt: str = "blockzone_default_salt"
    store_path: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WorkerConfig":
        environ = os.environ if environ is None else environ
        config = cls()
        for f in fields(cls):
            raw = environ.get(f"BLOCKZONE_{f.name.upper()}")
            if raw is None:
                continue
            current = getattr(config, f.name)
            if isinstance(current, bool):
                value = raw.lower() in ("1", "true", "yes")
            elif isinstance(current, int):
                value = int(raw)
            elif isinstance(current, float):
                value = float(raw)
            else:
                value = raw
            setattr(config, f.name, value)
        return config
