from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    # Indexed by simultaneous clear count
    line_clear_scores: tuple[int, int, int, int, int] = (0, 100, 300, 500, 800)
    hard_drop_per_cell: int = 2
    lines_per_level: int = 10
    base_interval_ms: int = 1000
    interval_step_ms: int = 50
    min_interval_ms: int = 50

    def score_for_lines(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        index = min(lines, len(self.line_clear_scores) - 1)
        return self.line_clear_scores[index] * level

    def level_for_lines(self, total_lines: int) -> int:
        return total_lines // self.lines_per_level + 1

    def drop_interval_ms(self, level: int) -> int:
        return max(self.min_interval_ms, self.base_interval_ms - (level - 1) * self.interval_step_ms)


DEFAULT_RULES = ScoringRules()


def drop_interval_ms(level: int) -> int:
    """Gravity interval for `level` under the default rules."""
    return DEFAULT_RULES.drop_interval_ms(level)
