import random

from blockzone.events import GameOver, LinesCleared, PhaseChanged, PieceLocked
from blockzone.game import Action, GameConfig, NeonDropGame, Phase, Piece, TetrominoType


def make_game(countdown_s: int = 0, seed: int = 1) -> NeonDropGame:
    game = NeonDropGame(GameConfig(random_seed=seed, countdown_s=countdown_s))
    game.start(0, seed=seed)
    return game


def test_spawned_piece_is_placed_at_the_top_centre():
    game = make_game()
    assert game.phase == Phase.PLAYING
    assert game.current_piece is not None
    assert (game.current_piece.x, game.current_piece.y) == (4, 0)
    assert not game.collides(game.current_piece)
    assert len(game.next_pieces) == 5


def test_blocked_downward_move_locks_and_spawns_queue_head():
    game = make_game()
    game.current_piece = Piece(TetrominoType.O, x=4, y=10)
    game.grid.grid[12, 4] = 1
    game.grid.grid[12, 5] = 1
    head = game.next_pieces[0].kind

    assert not game.move(0, 1)
    assert game.grid.filled_count() == 6
    assert game.current_piece.kind == head
    assert len(game.next_pieces) == 5


def test_blocked_sideways_move_does_not_lock():
    game = make_game()
    game.current_piece = Piece(TetrominoType.O, x=0, y=0)
    assert not game.move(-1, 0)
    assert game.grid.filled_count() == 0
    assert game.current_piece.x == 0


def test_rotation_against_the_wall_is_refused():
    game = make_game()
    game.current_piece = Piece(TetrominoType.I, rotation=1, x=9, y=0)
    assert not game.rotate()
    assert game.current_piece.rotation == 1


def test_hard_drop_awards_two_points_per_cell():
    game = make_game()
    game.current_piece = Piece(TetrominoType.O, x=4, y=0)
    assert game.hard_drop() == 18
    assert game.score == 36
    assert game.grid.grid[19, 4] == int(TetrominoType.O)


def test_hold_only_once_per_locked_piece():
    game = make_game()
    first = game.current_piece.kind
    assert game.hold()
    assert game.hold_piece.kind == first
    assert not game.hold()
    game.hard_drop()
    assert game.can_hold
    assert game.hold()
    assert game.current_piece.kind == first


def test_single_line_at_level_one():
    game = make_game()
    cleared = []
    game.events.on(LinesCleared, cleared.append)
    game.grid.grid[19, :] = 1
    game.grid.grid[19, 4:8] = 0
    game.current_piece = Piece(TetrominoType.I, x=4, y=0)

    game.hard_drop()

    assert game.lines == 1
    assert game.score == 19 * 2 + 100
    assert game.grid.filled_count() == 0
    assert cleared == [LinesCleared(count=1, score_delta=100, total_lines=1, level=1)]


def test_double_uses_the_level_before_the_clear():
    game = make_game()
    game.lines, game.level = 10, 2
    game.grid.grid[18:20, :] = 1
    game.grid.grid[18:20, 4:6] = 0
    game.current_piece = Piece(TetrominoType.O, x=4, y=0)

    game.hard_drop()

    assert game.score == 18 * 2 + 600
    assert game.lines == 12
    assert game.level == 2


def test_clear_that_crosses_a_level_boundary():
    game = make_game()
    game.lines = 9
    game.grid.grid[19, :] = 1
    game.grid.grid[19, 0:2] = 0
    game.current_piece = Piece(TetrominoType.O, x=0, y=0)

    game.hard_drop()

    assert game.score == 18 * 2 + 100
    assert game.level == 2
    assert game.drop_interval_ms == 950


def test_score_never_decreases():
    game = make_game(seed=5)
    rng = random.Random(5)
    previous = 0
    for i in range(2000):
        if game.is_over:
            break
        game.step(Action(rng.randrange(len(Action))))
        game.tick(i * 100)
        assert game.score >= previous
        previous = game.score


def test_countdown_then_play():
    game = NeonDropGame(GameConfig(random_seed=2, countdown_s=3))
    game.start(1000)
    assert game.phase == Phase.COUNTDOWN
    assert game.current_piece is None
    assert not game.handle_input("Space", 1500)
    game.tick(3999)
    assert game.phase == Phase.COUNTDOWN
    assert game.countdown_remaining_s == 1
    game.tick(4000)
    assert game.phase == Phase.PLAYING
    assert game.current_piece is not None
    assert game.elapsed_s == 0


def test_gravity_follows_the_drop_interval():
    game = make_game()
    game.tick(1000)
    assert game.current_piece.y == 0
    game.tick(1001)
    assert game.current_piece.y == 1


def test_pause_freezes_gravity_and_resets_the_drop_timer():
    game = make_game()
    game.toggle_pause(500)
    assert game.phase == Phase.PAUSED
    game.tick(5000)
    assert game.current_piece.y == 0
    assert not game.move(1, 0)

    assert game.handle_input("KeyP", 5000)
    assert game.phase == Phase.PLAYING
    game.tick(5900)
    assert game.current_piece.y == 0
    game.tick(6001)
    assert game.current_piece.y == 1


def test_spawn_collision_ends_the_game():
    game = make_game()
    overs = []
    game.events.on(GameOver, overs.append)
    game.grid.grid[0:2, 4:8] = 3
    game.current_piece = Piece(TetrominoType.O, x=0, y=18)

    game.move(0, 1)

    assert game.phase == Phase.GAME_OVER
    assert len(overs) == 1
    assert overs[0].score == game.score
    assert game.step(Action.LEFT)[2] is True


def test_events_follow_the_lifecycle():
    game = NeonDropGame(GameConfig(random_seed=4, countdown_s=0))
    phases, locks = [], []
    game.events.on(PhaseChanged, lambda e: phases.append(e.current))
    game.events.on(PieceLocked, locks.append)
    game.start(0)
    game.hard_drop()
    assert phases == ["PLAYING"]
    assert len(locks) == 1
    assert locks[0].cells == 4


def test_board_observation_marks_the_falling_piece_negative():
    game = make_game()
    game.current_piece = Piece(TetrominoType.T, x=4, y=0)
    board = game.get_board()
    assert board[0, 5] == -int(TetrominoType.T)
    assert (board < 0).sum() == 4
    assert game.grid.filled_count() == 0


def test_info_reports_queue_and_hold():
    game = make_game()
    info = game.get_info()
    assert info["phase"] == "PLAYING"
    assert len(info["next"]) == 5
    assert info["hold"] is None
    assert info["can_hold"] is True
