from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray


def _rot90(shape: Shape, k: int) -> Shape:
    k = k % 4
    if k == 0:
        return shape
    return np.rot90(shape, k, axes=(1, 0))  # rotate clockwise when k>0


BASE_SHAPES = {
    TetrominoType.I: np.array([[1, 1, 1, 1]], dtype=np.int8),
    TetrominoType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    TetrominoType.T: np.array([[0, 1, 0], [1, 1, 1]], dtype=np.int8),
    TetrominoType.S: np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8),
    TetrominoType.Z: np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8),
    TetrominoType.J: np.array([[1, 0, 0], [1, 1, 1]], dtype=np.int8),
    TetrominoType.L: np.array([[0, 0, 1], [1, 1, 1]], dtype=np.int8),
}

# Neon palette, bound to the piece type
COLORS: Dict[TetrominoType, str] = {
    TetrominoType.I: "#00d4ff",
    TetrominoType.O: "#ffd700",
    TetrominoType.T: "#ff6b6b",
    TetrominoType.S: "#00ff00",
    TetrominoType.Z: "#ff4444",
    TetrominoType.J: "#4169e1",
    TetrominoType.L: "#ffa500",
}


def color_rgb(kind: int) -> Tuple[int, int, int]:
    value = COLORS[TetrominoType(kind)].lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


@dataclass
class Piece:
    kind: TetrominoType
    rotation: int = 0  # 0..3
    x: int = 0
    y: int = 0

    @property
    def color(self) -> str:
        return COLORS[self.kind]

    def shape(self) -> Shape:
        base = BASE_SHAPES[self.kind]
        return _rot90(base, self.rotation)

    def rotated(self, delta: int = 1) -> "Piece":
        return replace(self, rotation=(self.rotation + delta) % 4)

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def cells(self, dx: int = 0, dy: int = 0) -> List[Tuple[int, int]]:
        """Board coordinates of the occupied cells, optionally shifted."""
        s = self.shape()
        h, w = s.shape
        cells: List[Tuple[int, int]] = []
        for row in range(h):
            for col in range(w):
                if s[row, col]:
                    cells.append((self.x + dx + col, self.y + dy + row))
        return cells


class PieceGenerator:
    """Independent uniform draw per piece.

    Streaks are possible; use :class:`BagGenerator` for the 7-bag guarantee.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)
        self._kinds = list(TetrominoType)

    def next(self) -> Piece:
        return Piece(kind=self.rng.choice(self._kinds))


class BagGenerator(PieceGenerator):
    """Deals every type exactly once per shuffled batch of seven."""

    def __init__(self, seed: Optional[int] = None) -> None:
        super().__init__(seed)
        self._bag: List[TetrominoType] = []

    def next(self) -> Piece:
        if not self._bag:
            self._bag = list(self._kinds)
            self.rng.shuffle(self._bag)
        return Piece(kind=self._bag.pop())


def make_generator(randomizer: str, seed: Optional[int] = None) -> PieceGenerator:
    if randomizer == "uniform":
        return PieceGenerator(seed)
    if randomizer == "bag":
        return BagGenerator(seed)
    raise ValueError(f"Unknown randomizer: {randomizer!r}")
