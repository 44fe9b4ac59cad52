from __future__ import annotations

from typing import Optional, Tuple

import pygame

from blockzone.game import NeonDropGame, Phase
from blockzone.game.pieces import Piece, color_rgb

BACKGROUND = (10, 10, 14)
BOARD_BG = (20, 20, 26)
TEXT = (230, 230, 230)
ACCENT = (0, 255, 65)


def _dim(color: Tuple[int, int, int], factor: float = 0.25) -> Tuple[int, int, int]:
    return tuple(int(c * factor) for c in color)  # type: ignore[return-value]


class Renderer:
    def __init__(self, cell_size: int = 28, margin: int = 20, panel_cells: int = 7) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_w = panel_cells * cell_size
        self._font: Optional[pygame.font.Font] = None
        self._big: Optional[pygame.font.Font] = None

    def window_size(self, game: NeonDropGame) -> Tuple[int, int]:
        w = self.margin * 3 + game.grid.width * self.cell_size + self.panel_w
        h = self.margin * 2 + game.grid.height * self.cell_size
        return w, h

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 26)
            self._big = pygame.font.SysFont(None, 56)
        return self._font, self._big  # type: ignore[return-value]

    def _cell(self, surf: pygame.Surface, x: int, y: int, color, ox: int, oy: int) -> None:
        rect = pygame.Rect(ox + x * self.cell_size, oy + y * self.cell_size, self.cell_size - 1, self.cell_size - 1)
        pygame.draw.rect(surf, color, rect)

    def _mini_piece(self, surf: pygame.Surface, piece: Piece, ox: int, oy: int, scale: float = 0.6) -> None:
        size = int(self.cell_size * scale)
        shape = piece.shape()
        for row in range(shape.shape[0]):
            for col in range(shape.shape[1]):
                if shape[row, col]:
                    pygame.draw.rect(surf, color_rgb(piece.kind),
                                     pygame.Rect(ox + col * size, oy + row * size, size - 1, size - 1))

    def draw(self, screen: pygame.Surface, game: NeonDropGame) -> None:
        font, big = self._fonts()
        screen.fill(BACKGROUND)
        ox, oy = self.margin, self.margin
        board_w = game.grid.width * self.cell_size
        board_h = game.grid.height * self.cell_size
        pygame.draw.rect(screen, BOARD_BG, pygame.Rect(ox, oy, board_w, board_h))

        grid = game.grid.grid
        for y in range(game.grid.height):
            for x in range(game.grid.width):
                if grid[y, x]:
                    self._cell(screen, x, y, color_rgb(int(grid[y, x])), ox, oy)

        piece = game.current_piece
        if piece is not None and game.phase == Phase.PLAYING:
            ghost = game.ghost_y()
            color = color_rgb(piece.kind)
            for x, y in piece.cells(0, ghost - piece.y if ghost is not None else 0):
                if y >= 0:
                    self._cell(screen, x, y, _dim(color), ox, oy)
            for x, y in piece.cells():
                if y >= 0:
                    self._cell(screen, x, y, color, ox, oy)

        # Side panel
        px = ox + board_w + self.margin
        lines = [
            f"Score {game.score:,}",
            f"Level {game.level}",
            f"Lines {game.lines}",
            f"Time {game.elapsed_s // 60}:{game.elapsed_s % 60:02d}",
        ]
        for i, text in enumerate(lines):
            screen.blit(font.render(text, True, TEXT), (px, oy + i * 26))
        ny = oy + len(lines) * 26 + 12
        screen.blit(font.render("Next", True, TEXT), (px, ny))
        for i, nxt in enumerate(list(game.next_pieces)[:5]):
            self._mini_piece(screen, nxt, px, ny + 24 + i * int(self.cell_size * 1.6))
        hy = ny + 24 + 5 * int(self.cell_size * 1.6) + 8
        screen.blit(font.render("Hold", True, TEXT), (px, hy))
        if game.hold_piece is not None:
            self._mini_piece(screen, game.hold_piece, px, hy + 24)

        banner = {
            Phase.READY: "Press Enter",
            Phase.PAUSED: "Paused",
            Phase.GAME_OVER: "Game Over",
        }.get(game.phase)
        if game.phase == Phase.COUNTDOWN:
            remaining = game.countdown_remaining_s
            banner = str(remaining) if remaining > 0 else "GO!"
        if banner:
            text = big.render(banner, True, ACCENT)
            screen.blit(text, text.get_rect(center=(ox + board_w // 2, oy + board_h // 2)))
        pygame.display.flip()
