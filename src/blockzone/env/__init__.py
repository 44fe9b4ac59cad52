"""Gymnasium environments for NeonDrop."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .neondrop_env import NeonDropEnv

register(
    id="NeonDrop-v0",
    entry_point="blockzone.env.neondrop_env:NeonDropEnv",
)

__all__ = ["NeonDropEnv"]
