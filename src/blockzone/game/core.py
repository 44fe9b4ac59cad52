from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Deque, Dict, Optional, Tuple

import numpy as np

from blockzone.events import EventBus, GameOver, LinesCleared, PhaseChanged, PieceLocked
from .grid import GameGrid
from .pieces import Piece, PieceGenerator, make_generator
from .rules import ScoringRules

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    READY = "READY"
    COUNTDOWN = "COUNTDOWN"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    GAME_OVER = "GAME_OVER"


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    HOLD = 5
    NONE = 6


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    lookahead: int = 5
    random_seed: Optional[int] = None
    randomizer: str = "uniform"
    countdown_s: int = 3


class NeonDropGame:
    """NeonDrop session: board, current/next/hold pieces, scoring and phase.

    Time is passed in explicitly (milliseconds, any monotonic origin) so the
    engine can be driven by a frame loop, an environment step or a test.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        events: Optional[EventBus] = None,
        generator: Optional[PieceGenerator] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.events = events or EventBus()
        self.generator = generator or make_generator(self.config.randomizer, self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.phase = Phase.READY
        self.score = 0
        self.level = 1
        self.lines = 0
        self.current_piece: Optional[Piece] = None
        self.next_pieces: Deque[Piece] = deque()
        self.hold_piece: Optional[Piece] = None
        self.can_hold = True
        self._start_ms = 0
        self._now_ms = 0
        self._last_drop_ms = 0
        self._countdown_end_ms = 0

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.generator = make_generator(self.config.randomizer, seed)
        self.grid.reset()
        self.score = 0
        self.level = 1
        self.lines = 0
        self.current_piece = None
        self.next_pieces.clear()
        self.hold_piece = None
        self.can_hold = True
        self._start_ms = 0
        self._last_drop_ms = 0
        self._set_phase(Phase.READY)

    def start(self, now_ms: int = 0, seed: Optional[int] = None) -> None:
        """Reset and enter the countdown (or play directly when it is zero)."""
        self.reset(seed)
        self._now_ms = now_ms
        if self.config.countdown_s <= 0:
            self._begin_play(now_ms)
            return
        self._countdown_end_ms = now_ms + self.config.countdown_s * 1000
        self._set_phase(Phase.COUNTDOWN)

    def _begin_play(self, now_ms: int) -> None:
        self._start_ms = now_ms
        self._last_drop_ms = now_ms
        self._set_phase(Phase.PLAYING)
        logger.info("NeonDrop game started")
        self._spawn_next()

    def tick(self, now_ms: int) -> None:
        """Advance countdown and gravity; called once per frame."""
        self._now_ms = now_ms
        if self.phase == Phase.COUNTDOWN and now_ms >= self._countdown_end_ms:
            self._begin_play(now_ms)
            return
        if self.phase != Phase.PLAYING:
            return
        if now_ms - self._last_drop_ms > self.drop_interval_ms:
            self.move(0, 1)
            self._last_drop_ms = now_ms

    def toggle_pause(self, now_ms: Optional[int] = None) -> None:
        if now_ms is not None:
            self._now_ms = now_ms
        if self.phase == Phase.PLAYING:
            self._set_phase(Phase.PAUSED)
        elif self.phase == Phase.PAUSED:
            # Missed gravity is not replayed
            self._last_drop_ms = self._now_ms
            self._set_phase(Phase.PLAYING)

    @property
    def drop_interval_ms(self) -> int:
        return self.rules.drop_interval_ms(self.level)

    @property
    def elapsed_s(self) -> int:
        if self.phase in (Phase.READY, Phase.COUNTDOWN):
            return 0
        return max(0, (self._now_ms - self._start_ms) // 1000)

    @property
    def countdown_remaining_s(self) -> int:
        if self.phase != Phase.COUNTDOWN:
            return 0
        return max(0, (self._countdown_end_ms - self._now_ms + 999) // 1000)

    @property
    def is_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    # ------------------------------------------------------------------
    # Collision and movement
    # ------------------------------------------------------------------
    def collides(self, piece: Piece, dx: int = 0, dy: int = 0) -> bool:
        return self.grid.collides(piece.cells(dx, dy))

    def move(self, dx: int, dy: int) -> bool:
        if self.phase != Phase.PLAYING or self.current_piece is None:
            return False
        if not self.collides(self.current_piece, dx, dy):
            self.current_piece = self.current_piece.moved(dx, dy)
            return True
        if dy > 0:
            self._lock_piece()
        return False

    def soft_drop(self) -> bool:
        return self.move(0, 1)

    def rotate(self) -> bool:
        if self.phase != Phase.PLAYING or self.current_piece is None:
            return False
        rotated = self.current_piece.rotated(1)
        if self.collides(rotated):
            return False
        self.current_piece = rotated
        return True

    def hard_drop(self) -> int:
        if self.phase != Phase.PLAYING or self.current_piece is None:
            return 0
        distance = 0
        while self.move(0, 1):
            distance += 1
        self.score += distance * self.rules.hard_drop_per_cell
        return distance

    def hold(self) -> bool:
        if self.phase != Phase.PLAYING or self.current_piece is None or not self.can_hold:
            return False
        stashed = Piece(kind=self.current_piece.kind)
        if self.hold_piece is None:
            self.hold_piece = stashed
            self._spawn_next()
        else:
            swapped = Piece(kind=self.hold_piece.kind)
            self.hold_piece = stashed
            self._place_at_spawn(swapped)
        self.can_hold = False
        return True

    def ghost_y(self) -> Optional[int]:
        if self.current_piece is None:
            return None
        dy = 0
        while not self.collides(self.current_piece, 0, dy + 1):
            dy += 1
        return self.current_piece.y + dy

    # ------------------------------------------------------------------
    # Lock, clear, spawn
    # ------------------------------------------------------------------
    def _lock_piece(self) -> None:
        assert self.current_piece is not None
        piece = self.current_piece
        written = self.grid.lock(piece.cells(), int(piece.kind))
        self.events.emit(PieceLocked(kind=int(piece.kind), cells=written))
        self._apply_line_clear(self.grid.clear_full_lines())
        self._spawn_next()
        self.can_hold = True

    def _apply_line_clear(self, cleared: int) -> None:
        if cleared <= 0:
            return
        delta = self.rules.score_for_lines(cleared, self.level)
        self.score += delta
        self.lines += cleared
        self.level = self.rules.level_for_lines(self.lines)
        self.events.emit(LinesCleared(count=cleared, score_delta=delta, total_lines=self.lines, level=self.level))

    def _refill_queue(self) -> None:
        while len(self.next_pieces) < self.config.lookahead:
            self.next_pieces.append(self.generator.next())

    def _spawn_next(self) -> None:
        self._refill_queue()
        piece = self.next_pieces.popleft()
        self._refill_queue()
        self._place_at_spawn(piece)

    def _place_at_spawn(self, piece: Piece) -> None:
        self.current_piece = Piece(kind=piece.kind, rotation=0, x=self.grid.width // 2 - 1, y=0)
        if self.collides(self.current_piece):
            self._game_over()

    def _game_over(self) -> None:
        self._set_phase(Phase.GAME_OVER)
        logger.info("NeonDrop game over: score=%d lines=%d level=%d", self.score, self.lines, self.level)
        self.events.emit(GameOver(score=self.score, lines=self.lines, level=self.level, elapsed_s=self.elapsed_s))

    def _set_phase(self, phase: Phase) -> None:
        if phase == self.phase:
            return
        previous = self.phase
        self.phase = phase
        self.events.emit(PhaseChanged(previous=previous.value, current=phase.value))

    # ------------------------------------------------------------------
    # Input and stepping
    # ------------------------------------------------------------------
    def handle_input(self, code: str, now_ms: Optional[int] = None) -> bool:
        """Apply a browser-style key code; returns whether it was consumed."""
        if code in ("KeyP", "Escape"):
            if self.phase in (Phase.PLAYING, Phase.PAUSED):
                self.toggle_pause(now_ms)
                return True
            return False
        if self.phase == Phase.COUNTDOWN:
            if code == "ArrowLeft":
                return self.move(-1, 0)
            if code == "ArrowRight":
                return self.move(1, 0)
            return False
        if self.phase != Phase.PLAYING:
            return False
        if code == "ArrowLeft":
            return self.move(-1, 0)
        if code == "ArrowRight":
            return self.move(1, 0)
        if code == "ArrowDown":
            return self.soft_drop()
        if code in ("ArrowUp", "KeyX"):
            return self.rotate()
        if code == "Space":
            self.hard_drop()
            return True
        if code == "KeyC":
            return self.hold()
        return False

    def step(self, action: Action) -> Tuple[np.ndarray, int, bool, Dict[str, Any]]:
        if self.phase != Phase.PLAYING:
            return self.get_board(), 0, self.is_over, self.get_info()

        before = self.score
        if action == Action.LEFT:
            self.move(-1, 0)
        elif action == Action.RIGHT:
            self.move(1, 0)
        elif action == Action.ROTATE:
            self.rotate()
        elif action == Action.SOFT_DROP:
            self.soft_drop()
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.HOLD:
            self.hold()
        elif action == Action.NONE:
            pass

        return self.get_board(), self.score - before, self.is_over, self.get_info()

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def get_board(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None and self.phase in (Phase.PLAYING, Phase.PAUSED):
            for x, y in self.current_piece.cells():
                if 0 <= y < self.grid.height and 0 <= x < self.grid.width:
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(self.current_piece.kind)
        return state

    def get_info(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "score": self.score,
            "level": self.level,
            "lines": self.lines,
            "time": self.elapsed_s,
            "next": [int(p.kind) for p in self.next_pieces],
            "hold": int(self.hold_piece.kind) if self.hold_piece is not None else None,
            "can_hold": self.can_hold,
        }
