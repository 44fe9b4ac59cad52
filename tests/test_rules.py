from blockzone.game import ScoringRules, drop_interval_ms


def test_line_clear_table_scales_with_level():
    rules = ScoringRules()
    assert rules.score_for_lines(0, 3) == 0
    assert rules.score_for_lines(1, 1) == 100
    assert rules.score_for_lines(2, 2) == 600
    assert rules.score_for_lines(4, 1) == 800


def test_level_from_total_lines():
    rules = ScoringRules()
    assert rules.level_for_lines(0) == 1
    assert rules.level_for_lines(9) == 1
    assert rules.level_for_lines(10) == 2
    assert rules.level_for_lines(25) == 3


def test_drop_interval_speeds_up_and_clamps():
    assert drop_interval_ms(1) == 1000
    assert drop_interval_ms(2) == 950
    assert drop_interval_ms(19) == 100
    assert drop_interval_ms(20) == 50
    assert drop_interval_ms(40) == 50
