import argparse
import logging
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
import sys
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from completion_ledger import CompletionLedger
from puzzle_loader import PuzzleRecord, load_catalogs
from recommender import COOLDOWN, COOLDOWN_DAYS, Order, PuzzleFilter, Recommendation, best

logger = logging.getLogger(__name__)

LEDGER_FILE = "LastDonePuzzles.csv"
PROMPT = "Enter Puzzle Name to mark as done:"

# (label, catalog, order, filter) for each line shown per iteration
VIEWS = [
    ("color (XP)", "colors", Order.XP, PuzzleFilter.ALL),
    ("color (XP/Size)", "colors", Order.XP_BY_SIZE, PuzzleFilter.ALL),
    ("B&W (XP)", "bws", Order.XP, PuzzleFilter.ALL),
    ("B&W (XP/Size)", "bws", Order.XP_BY_SIZE, PuzzleFilter.ALL),
    ("true nonogram (XP)", "bws", Order.XP, PuzzleFilter.TRUE_NONOGRAM_ONLY),
    ("true nonogram (XP/Size)", "bws", Order.XP_BY_SIZE, PuzzleFilter.TRUE_NONOGRAM_ONLY),
]
LABEL_WIDTH = 25


class InputResult(Enum):
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    UPDATED = "updated"


def format_recommendation(label: str, rec: Recommendation) -> str:
    """One console line for a view."""
    puzzle = rec.puzzle
    if puzzle is None:
        description = "NONE"
    else:
        description = (
            f"{puzzle.name:<50}, XP:{puzzle.xp}, XP/Size:{puzzle.xp_per_size:.2f}, "
            f"Size: {puzzle.width}x{puzzle.height}"
        )
    return f"Best {label:<{LABEL_WIDTH}} ({rec.eligible:4}/{rec.total:4} eligible): {description}"


class RecommendationSession:
    """Owns the loaded catalogs and ledger for the interactive loop."""

    def __init__(
        self,
        colors: List[PuzzleRecord],
        bws: List[PuzzleRecord],
        ledger: CompletionLedger,
        clock: Callable[[], datetime] = datetime.now,
        cooldown: timedelta = COOLDOWN,
        out: Optional[TextIO] = None,
    ):
        self.colors = colors
        self.bws = bws
        self.ledger = ledger
        self.clock = clock
        self.cooldown = cooldown
        self.out = out if out is not None else sys.stdout

    def views(self) -> List[Tuple[str, Recommendation]]:
        now = self.clock()
        catalogs = {"colors": self.colors, "bws": self.bws}
        return [
            (label, best(catalogs[catalog], order, puzzle_filter, now=now, cooldown=self.cooldown))
            for label, catalog, order, puzzle_filter in VIEWS
        ]

    def display(self) -> None:
        print(file=self.out)
        for label, rec in self.views():
            print(format_recommendation(label, rec), file=self.out)

    def find(self, name: str) -> Optional[PuzzleRecord]:
        for puzzle in self.colors + self.bws:
            if puzzle.name == name:
                return puzzle
        return None

    def handle_input(self, line: str) -> InputResult:
        """
        Mark the named puzzle as done.

        Args:
            line: Raw line typed by the user, matched by exact name

        Returns:
            Which of the three outcomes occurred
        """
        if not line:
            return InputResult.EMPTY

        puzzle = self.find(line)
        if puzzle is None:
            print("Puzzle not found.", file=self.out)
            return InputResult.NOT_FOUND

        puzzle.last_done = self.clock()
        self.ledger.record_completion(puzzle.name, puzzle.last_done)
        logger.info(f"Marked {puzzle.name} as done at {puzzle.last_done}")
        return InputResult.UPDATED

    def run(self, read_line: Optional[Callable[[], str]] = None) -> None:
        """Display, prompt, update; until input ends or the user interrupts."""
        if read_line is None:
            read_line = input
        while True:
            self.display()
            print(PROMPT, file=self.out)
            try:
                line = read_line()
            except (EOFError, KeyboardInterrupt):
                print(file=self.out)
                return
            self.handle_input(line.rstrip("\r\n"))


def parse_arguments(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(description='Recommend the next nonogram puzzle to solve')
    parser.add_argument('--config-dir', type=Path, default=Path("config"),
                       help='Directory holding Colors.csv, BWs.csv and LastDonePuzzles.csv (default: config)')
    parser.add_argument('--cooldown-days', type=int, default=COOLDOWN_DAYS,
                       help=f'Days before a completed puzzle is recommended again (default: {COOLDOWN_DAYS})')
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_arguments(argv)

    # Any failure here is fatal: let it propagate
    ledger = CompletionLedger.load(args.config_dir / LEDGER_FILE)
    colors, bws = load_catalogs(args.config_dir, ledger)

    session = RecommendationSession(colors, bws, ledger, cooldown=timedelta(days=args.cooldown_days))
    session.run()


if __name__ == "__main__":
    main()
