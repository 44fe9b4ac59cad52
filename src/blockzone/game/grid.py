from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np


Coordinate = Tuple[int, int]


class GameGrid:
    """Fixed-size NeonDrop board.

    The grid uses 0 for empty cells and the tetromino type value for filled
    cells, so the colour of a locked block can be recovered from the cell.
    Row 0 is the top of the board. Coordinates above the board (y < 0) are
    legal for a falling piece and are never stored.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def collides(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if x < 0 or x >= self.width or y >= self.height:
                return True
            if y >= 0 and self.grid[y, x] != 0:
                return True
        return False

    def lock(self, cells: Iterable[Coordinate], value: int) -> int:
        """Write `value` into every visible cell; returns how many were written."""
        written = 0
        for x, y in cells:
            if y < 0:
                continue
            self.grid[y, x] = value
            written += 1
        return written

    def clear_full_lines(self) -> int:
        """Remove full rows, bottom to top, and pad with empty rows at the top."""
        cleared = 0
        y = self.height - 1
        while y >= 0:
            if np.all(self.grid[y] != 0):
                self.grid = np.vstack(
                    (np.zeros((1, self.width), dtype=np.int8), np.delete(self.grid, y, axis=0))
                )
                cleared += 1
            else:
                y -= 1
        return cleared

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        top_index = int(non_empty_rows[0])
        return self.height - top_index

    def count_holes(self) -> int:
        filled = self.grid != 0
        block_above = np.maximum.accumulate(filled, axis=0)
        return int((block_above & ~filled).sum())

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
