from datetime import datetime

import pandas as pd
import pytest

from completion_ledger import CompletionLedger
from puzzle_loader import PuzzleCategory, PuzzleDifficulty, PuzzleRecord

CATALOG_HEADER = ["Puzzle ID:Puzzle Name", "Author", "Added", "Rating", "XP", "Size", "Puzzle<br>type"]
TRUE_TYPE = '<img src="/images/True_nonogram_icon.png" alt="True nonogram">'
OTHER_TYPE = '<img src="/images/Triddler_icon.png" alt="Triddler">'

NOW = datetime(2026, 10, 15, 12, 0, 0)


def write_catalog(path, rows, header=CATALOG_HEADER):
    """Write catalog rows given as (name, xp, size, type) tuples."""
    records = []
    for name, xp, size, puzzle_type in rows:
        records.append(dict(zip(header, [name, "someone", "2024-01-01", "4.5", xp, size, puzzle_type])))
    pd.DataFrame(records, columns=header).to_csv(path, index=False)
    return path


def write_ledger(path, rows):
    path.write_text("Name,LastDone\n" + "".join(f"{name},{ts}\n" for name, ts in rows), encoding="utf-8")
    return path


def make_puzzle(name, xp, width=10, height=10, true_nonogram=False,
                category=PuzzleCategory.BW, last_done=datetime.min):
    return PuzzleRecord(
        name=name,
        xp=xp,
        width=width,
        height=height,
        difficulty=PuzzleDifficulty.TRUE_NONOGRAM if true_nonogram else PuzzleDifficulty.OTHER_NONOGRAM,
        category=category,
        last_done=last_done,
    )


@pytest.fixture
def config_dir(tmp_path):
    """A config directory with both catalogs and an empty ledger."""
    write_catalog(tmp_path / "Colors.csv", [
        ("101:Parrot", "~120", "20x25", OTHER_TYPE),
        ("102:Tulip", "80", "10x10", OTHER_TYPE),
    ])
    write_catalog(tmp_path / "BWs.csv", [
        ("A", "~50", "5x10", TRUE_TYPE),
        ("B", "30", "10x10", OTHER_TYPE),
    ])
    write_ledger(tmp_path / "LastDonePuzzles.csv", [])
    return tmp_path


@pytest.fixture
def empty_ledger(tmp_path):
    return CompletionLedger(tmp_path / "LastDonePuzzles.csv")
