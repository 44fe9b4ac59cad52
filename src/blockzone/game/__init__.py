"""NeonDrop game engine.

Exports the core engine and supporting classes:
- GameGrid: Board representation, collision and line clearing
- Piece: Falling tetromino with position and rotation
- TetrominoType: Enum of available piece types
- PieceGenerator / BagGenerator: Uniform and 7-bag randomizers
- ScoringRules: Line-clear table, level and speed curve
- NeonDropGame: Drop/lock loop, hold, phase state machine
"""

from .grid import GameGrid
from .pieces import COLORS, BagGenerator, Piece, PieceGenerator, TetrominoType, make_generator
from .rules import ScoringRules, drop_interval_ms
from .core import Action, GameConfig, NeonDropGame, Phase

__all__ = [
    "GameGrid",
    "Piece",
    "TetrominoType",
    "COLORS",
    "PieceGenerator",
    "BagGenerator",
    "make_generator",
    "ScoringRules",
    "drop_interval_ms",
    "GameConfig",
    "NeonDropGame",
    "Phase",
    "Action",
]
