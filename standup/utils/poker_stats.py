"""Planning poker vote values and derived statistics."""

import math
from dataclasses import dataclass
from statistics import mean, median

FIBONACCI_VALUES = ("0", "1", "2", "3", "5", "8", "13", "21", "34")
COFFEE = "☕"
ALL_VOTE_VALUES = (*FIBONACCI_VALUES, COFFEE)

_FIBONACCI_NUMBERS = tuple(int(v) for v in FIBONACCI_VALUES)


@dataclass
class VoteStats:
    average: float | None
    median: float | None
    recommendation: int | None
    has_coffee: bool
    numeric_count: int

    def to_dict(self) -> dict:
        return {
            "average": self.average,
            "median": self.median,
            "recommendation": self.recommendation,
            "hasCoffee": self.has_coffee,
            "numericCount": self.numeric_count,
        }


def round_half_up(value: float) -> float:
    """Two decimals, exact halves rounded up (0.125 -> 0.13)."""
    return math.floor(value * 100 + 0.5) / 100


def nearest_fibonacci(value: float) -> int:
    """Closest value of the fixed scale; ties go to the smaller one."""
    best = _FIBONACCI_NUMBERS[0]
    best_diff = abs(value - best)
    for candidate in _FIBONACCI_NUMBERS:
        diff = abs(value - candidate)
        if diff < best_diff:
            best, best_diff = candidate, diff
    return best


def calculate_stats(values: list[str]) -> VoteStats:
    """
    Mean, median and recommended estimate for a set of revealed votes.

    Only the Fibonacci values count towards the numbers; the coffee card
    just sets ``has_coffee``. The recommendation is taken from the
    unrounded median.
    """
    numeric = sorted(int(v) for v in values if v in FIBONACCI_VALUES)
    has_coffee = COFFEE in values

    if not numeric:
        return VoteStats(average=None, median=None, recommendation=None,
                         has_coffee=has_coffee, numeric_count=0)

    mid = median(numeric)
    return VoteStats(
        average=round_half_up(mean(numeric)),
        median=round_half_up(mid),
        recommendation=nearest_fibonacci(mid),
        has_coffee=has_coffee,
        numeric_count=len(numeric),
    )
