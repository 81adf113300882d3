"""
Puzzle Catalog Loader

Reads a puzzle catalog exported as CSV and converts each row into a
PuzzleRecord, using a declarative list of (field, column, extractor) rules.
Last completion times are merged in from the completion ledger.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from completion_ledger import NEVER_DONE, CompletionLedger
from utils_parse import contains_marker, parse_size, parse_xp

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

NAME_COLUMN = "Puzzle ID:Puzzle Name"
XP_COLUMN = 4  # by position; the header of this column varies between exports
SIZE_COLUMN = "Size"
TYPE_COLUMN = "Puzzle<br>type"

TRUE_NONOGRAM_MARKER = "True_nonogram_icon.png"


class PuzzleCategory(Enum):
    COLOR = "color"
    BW = "bw"


class PuzzleDifficulty(Enum):
    TRUE_NONOGRAM = "true_nonogram"
    OTHER_NONOGRAM = "other_nonogram"


CATALOG_FILES = {
    PuzzleCategory.COLOR: "Colors.csv",
    PuzzleCategory.BW: "BWs.csv",
}


class CatalogFormatError(ValueError):
    """Raised when a catalog is missing a column or holds a malformed value."""


@dataclass
class PuzzleRecord:
    name: str
    xp: int
    width: int
    height: int
    difficulty: PuzzleDifficulty
    category: PuzzleCategory
    last_done: datetime = NEVER_DONE

    @property
    def size(self) -> int:
        """The shorter of the two dimensions."""
        return min(self.width, self.height)

    @property
    def xp_per_size(self) -> float:
        return self.xp / self.size


ColumnRef = Union[str, int]


@dataclass(frozen=True)
class FieldRule:
    """Extract one record field from one catalog column."""
    field: str
    column: ColumnRef
    extract: Callable[[str], Any]


def _classify_difficulty(value: str) -> PuzzleDifficulty:
    if contains_marker(value, TRUE_NONOGRAM_MARKER):
        return PuzzleDifficulty.TRUE_NONOGRAM
    return PuzzleDifficulty.OTHER_NONOGRAM


CATALOG_FIELDS: Tuple[FieldRule, ...] = (
    FieldRule("name", NAME_COLUMN, str),
    FieldRule("xp", XP_COLUMN, parse_xp),
    FieldRule("dimensions", SIZE_COLUMN, parse_size),
    FieldRule("difficulty", TYPE_COLUMN, _classify_difficulty),
)


class PuzzleCatalogLoader:
    """Loads one category of puzzles from a CSV catalog."""

    def __init__(self, fields: Optional[Sequence[FieldRule]] = None):
        """
        Initialize the loader.

        Args:
            fields: Field rules applied to every row, defaults to CATALOG_FIELDS
        """
        self.fields = tuple(fields) if fields is not None else CATALOG_FIELDS

    def validate_columns(self, columns: List[str], source: Union[str, Path]) -> None:
        """
        Check that every column referenced by a field rule exists.

        Args:
            columns: Header of the catalog
            source: Catalog path, used in the error message

        Raises:
            CatalogFormatError: if a named column is absent or a positional
                column is beyond the header width
        """
        missing = []
        for rule in self.fields:
            if isinstance(rule.column, int):
                if rule.column >= len(columns):
                    missing.append(f"#{rule.column}")
            elif rule.column not in columns:
                missing.append(rule.column)

        if missing:
            raise CatalogFormatError(f"Catalog {source} missing required columns: {missing}")

    def decode_row(self, row: List[str], columns: List[str], row_number: int) -> Dict[str, Any]:
        """Apply every field rule to one row."""
        values = {}
        for rule in self.fields:
            index = rule.column if isinstance(rule.column, int) else columns.index(rule.column)
            cell = row[index]
            try:
                values[rule.field] = rule.extract(cell)
            except ValueError as e:
                raise CatalogFormatError(f"Row {row_number}, column {rule.column!r}: {e}")
        return values

    def load(
        self,
        file_path: Union[str, Path],
        category: PuzzleCategory,
        ledger: CompletionLedger,
    ) -> List[PuzzleRecord]:
        """
        Load a catalog file into PuzzleRecords.

        Args:
            file_path: Path to the CSV catalog
            category: Category tag given to every record in this file
            ledger: Source of last completion times

        Returns:
            List of records, in file order
        """
        file_path = Path(file_path)
        logger.info(f"Reading csv file : {file_path}")

        try:
            df = pd.read_csv(file_path, dtype=str, keep_default_na=False, encoding='utf-8')
        except Exception as e:
            logger.error(f"Failed to read catalog {file_path}: {e}")
            raise

        columns = list(df.columns)
        self.validate_columns(columns, file_path)

        records = []
        for i, row in enumerate(df.itertuples(index=False, name=None)):
            values = self.decode_row(list(row), columns, i)
            width, height = values["dimensions"]
            records.append(PuzzleRecord(
                name=values["name"],
                xp=values["xp"],
                width=width,
                height=height,
                difficulty=values["difficulty"],
                category=category,
                last_done=ledger.last_done(values["name"], default=NEVER_DONE),
            ))

        logger.info(f"Loaded {len(records)} {category.value} puzzles from {file_path}")
        return records


def load_catalog(
    file_path: Union[str, Path],
    category: PuzzleCategory,
    ledger: CompletionLedger,
) -> List[PuzzleRecord]:
    """Load a single catalog with the default field rules."""
    return PuzzleCatalogLoader().load(file_path, category, ledger)


def load_catalogs(
    config_dir: Union[str, Path],
    ledger: CompletionLedger,
) -> Tuple[List[PuzzleRecord], List[PuzzleRecord]]:
    """
    Load the color and black & white catalogs from *config_dir*.

    Returns:
        Tuple of (colors, bws)
    """
    config_dir = Path(config_dir)
    colors = load_catalog(config_dir / CATALOG_FILES[PuzzleCategory.COLOR], PuzzleCategory.COLOR, ledger)
    bws = load_catalog(config_dir / CATALOG_FILES[PuzzleCategory.BW], PuzzleCategory.BW, ledger)
    return colors, bws
