import pytest

from blockzone.game import BagGenerator, Piece, PieceGenerator, TetrominoType, make_generator
from blockzone.game.pieces import color_rgb


def test_four_rotations_return_to_the_start():
    piece = Piece(TetrominoType.T, x=3, y=2)
    assert piece.rotated(4).cells() == piece.cells()


def test_i_piece_rotates_to_a_column():
    piece = Piece(TetrominoType.I, x=2, y=0)
    assert piece.shape().shape == (1, 4)
    vertical = piece.rotated()
    assert vertical.shape().shape == (4, 1)
    assert vertical.cells() == [(2, 0), (2, 1), (2, 2), (2, 3)]


def test_every_piece_has_four_cells():
    for kind in TetrominoType:
        for rotation in range(4):
            assert len(Piece(kind, rotation=rotation).cells()) == 4


def test_color_is_bound_to_type():
    assert Piece(TetrominoType.I).color == "#00d4ff"
    assert color_rgb(TetrominoType.I) == (0, 212, 255)


def test_seeded_generators_are_reproducible():
    a = PieceGenerator(7)
    b = PieceGenerator(7)
    assert [a.next().kind for _ in range(20)] == [b.next().kind for _ in range(20)]


def test_bag_deals_each_type_once_per_seven():
    gen = BagGenerator(3)
    for _ in range(3):
        batch = {gen.next().kind for _ in range(7)}
        assert batch == set(TetrominoType)


def test_unknown_randomizer_is_rejected():
    assert isinstance(make_generator("bag"), BagGenerator)
    with pytest.raises(ValueError):
        make_generator("fair")
