from __future__ import annotations

import argparse
import logging
import threading
from typing import Dict, Optional

import pygame

from blockzone.client import BlockZoneClient, IdentityService, OnlineSession, PaymentRequiredError
from blockzone.client.api import DEFAULT_BASE_URL
from blockzone.events import GameOver
from blockzone.game import GameConfig, NeonDropGame, Phase
from .renderer import Renderer

logger = logging.getLogger(__name__)


KEY_TO_CODE: Dict[int, str] = {
    pygame.K_LEFT: "ArrowLeft",
    pygame.K_RIGHT: "ArrowRight",
    pygame.K_DOWN: "ArrowDown",
    pygame.K_UP: "ArrowUp",
    pygame.K_x: "KeyX",
    pygame.K_SPACE: "Space",
    pygame.K_c: "KeyC",
    pygame.K_p: "KeyP",
    pygame.K_ESCAPE: "Escape",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play NeonDrop with the keyboard")
    p.add_argument("--api", type=str, default=None, help="Worker base URL (default: BLOCKZONE_API_URL)")
    p.add_argument("--offline", action="store_true", help="Do not contact the backend")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--randomizer", choices=["uniform", "bag"], default="uniform")
    return p


def run(client: Optional[BlockZoneClient] = None, config: Optional[GameConfig] = None) -> None:
    identity = IdentityService(client)
    player = identity.initialize()
    session = OnlineSession(client, player_id=player["id"], player_name=player["name"], identity=identity)

    game = NeonDropGame(config or GameConfig())
    renderer = Renderer(cell_size=28)

    def on_game_over(event: GameOver) -> None:
        # Submission runs off the frame loop; the ticket is pinned before a restart replaces it
        threading.Thread(
            target=session.submit,
            args=(event.score, event.lines, event.elapsed_s, session.ticket),
            daemon=True,
        ).start()

    game.events.on(GameOver, on_game_over)

    def new_game() -> None:
        try:
            session.start_game(game, pygame.time.get_ticks())
        except PaymentRequiredError as exc:
            logger.warning("Daily free game used: %s", exc)
            game.reset()

    pygame.init()
    try:
        clock = pygame.time.Clock()
        screen = pygame.display.set_mode(renderer.window_size(game))
        pygame.display.set_caption(f"NeonDrop - {player['name']}")

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    now = pygame.time.get_ticks()
                    if game.phase in (Phase.READY, Phase.GAME_OVER):
                        if event.key in (pygame.K_RETURN, pygame.K_r):
                            new_game()
                        elif event.key == pygame.K_ESCAPE:
                            running = False
                        continue
                    code = KEY_TO_CODE.get(event.key)
                    if code is not None:
                        game.handle_input(code, now)

            game.tick(pygame.time.get_ticks())
            renderer.draw(screen, game)
            clock.tick(60)
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    client = None if args.offline else BlockZoneClient(args.api or DEFAULT_BASE_URL)
    run(client, GameConfig(random_seed=args.seed, randomizer=args.randomizer))


if __name__ == "__main__":  # pragma: no cover
    main()
