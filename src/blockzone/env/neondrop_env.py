from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockzone.game import Action, GameConfig, NeonDropGame, TetrominoType


class NeonDropEnv(gym.Env):
    """NeonDrop as a Gymnasium environment.

    One step applies one player action; every ``gravity_every`` steps an
    automatic drop follows, standing in for the frame-driven gravity tick.
    Reward is the engine's score delta, so it follows the game's own rules.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 gravity_every: int = 4, max_episode_steps: int = 10_000) -> None:
        super().__init__()
        config = replace(config or GameConfig(), countdown_s=0)
        self.game = NeonDropGame(config)
        self.render_mode = render_mode
        self.gravity_every = int(gravity_every)
        self.max_episode_steps = int(max_episode_steps)

        h, w = self.game.grid.height, self.game.grid.width
        n_types = len(TetrominoType)
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_types, high=n_types, shape=(h, w), dtype=np.int8),
                "next": spaces.Box(low=0, high=n_types, shape=(config.lookahead,), dtype=np.int8),
                "hold": spaces.Discrete(n_types + 1),
            }
        )
        self.action_space = spaces.Discrete(len(Action))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        nxt = np.zeros((self.game.config.lookahead,), dtype=np.int8)
        for i, piece in enumerate(list(self.game.next_pieces)[: self.game.config.lookahead]):
            nxt[i] = int(piece.kind)
        return {
            "board": self.game.get_board().astype(np.int8),
            "next": nxt,
            "hold": int(self.game.hold_piece.kind) if self.game.hold_piece is not None else 0,
        }

    def _get_info(self) -> Dict[str, Any]:
        info = self.game.get_info()
        info["holes"] = self.game.grid.count_holes()
        info["max_height"] = self.game.grid.get_max_height()
        return info

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 1_000_000))
        self.game.start(0, seed=seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        _, reward, terminated, info = self.game.step(Action(int(action)))
        self._steps += 1
        if not terminated and self._steps % self.gravity_every == 0:
            before = self.game.score
            self.game.move(0, 1)
            reward += self.game.score - before
            terminated = self.game.is_over
        truncated = self._steps >= self.max_episode_steps
        return self._get_obs(), float(reward), bool(terminated), truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        from blockzone.game.pieces import color_rgb

        board = self.game.get_board()
        cell = 12
        h, w = board.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                color = color_rgb(abs(int(board[y, x]))) if board[y, x] else (30, 30, 36)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
