"""
Pick the best puzzle to do next.

Puzzles completed within the cooldown window are skipped, the rest are
ranked by XP or by XP per unit of size.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from puzzle_loader import PuzzleDifficulty, PuzzleRecord

COOLDOWN_DAYS = 31
COOLDOWN = timedelta(days=COOLDOWN_DAYS)


class Order(Enum):
    XP = "xp"
    XP_BY_SIZE = "xp_by_size"


class PuzzleFilter(Enum):
    ALL = "all"
    TRUE_NONOGRAM_ONLY = "true_nonogram_only"


@dataclass
class Recommendation:
    puzzle: Optional[PuzzleRecord]
    eligible: int
    total: int


def _sort_key(order: Order):
    if order is Order.XP:
        return lambda p: p.xp
    if order is Order.XP_BY_SIZE:
        return lambda p: p.xp_per_size
    raise ValueError(f"Invalid order: {order}")


def recommend(
    puzzles: List[PuzzleRecord],
    order: Order,
    puzzle_filter: PuzzleFilter,
    now: Optional[datetime] = None,
    cooldown: timedelta = COOLDOWN,
) -> List[PuzzleRecord]:
    """
    Return the eligible puzzles, best first.

    Args:
        puzzles: Candidate records (not modified)
        order: Ranking used for the descending sort
        puzzle_filter: Optional restriction to true nonograms
        now: Reference time, defaults to the current time
        cooldown: Puzzles done less than this long ago are excluded

    Returns:
        New list of eligible records
    """
    if now is None:
        now = datetime.now()
    cutoff = now - cooldown

    eligible = [p for p in puzzles if p.last_done < cutoff]

    if puzzle_filter is PuzzleFilter.TRUE_NONOGRAM_ONLY:
        eligible = [p for p in eligible if p.difficulty is PuzzleDifficulty.TRUE_NONOGRAM]
    elif puzzle_filter is not PuzzleFilter.ALL:
        raise ValueError(f"Invalid filter: {puzzle_filter}")

    # sorted() is stable, ties keep their input order
    return sorted(eligible, key=_sort_key(order), reverse=True)


def best(
    puzzles: List[PuzzleRecord],
    order: Order,
    puzzle_filter: PuzzleFilter,
    now: Optional[datetime] = None,
    cooldown: timedelta = COOLDOWN,
) -> Recommendation:
    """Top recommendation along with the eligible and total counts."""
    ranked = recommend(puzzles, order, puzzle_filter, now=now, cooldown=cooldown)
    return Recommendation(
        puzzle=ranked[0] if ranked else None,
        eligible=len(ranked),
        total=len(puzzles),
    )
