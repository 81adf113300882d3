"""
Completion Ledger

Keeps track of when each puzzle was last completed. The ledger is a small
two-column CSV (Name, LastDone) that is rewritten in full on every update.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

import pandas as pd

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

NAME_COLUMN = "Name"
LAST_DONE_COLUMN = "LastDone"

# Stands in for "never completed"; older than any real timestamp
NEVER_DONE = datetime.min


class LedgerFormatError(ValueError):
    """Raised when the ledger file does not have the expected shape."""


@dataclass
class CompletionEntry:
    name: str
    last_done: datetime


class CompletionLedger:
    """Name -> last completion time, backed by a CSV file."""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize an empty ledger.

        Args:
            path: File the ledger is persisted to
        """
        self.path = Path(path)
        self._entries: Dict[str, CompletionEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[CompletionEntry]:
        return iter(self._entries.values())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CompletionLedger":
        """
        Load a ledger from a CSV file with Name and LastDone columns.

        Duplicate names are merged, keeping the latest timestamp.

        Args:
            path: Path to the ledger CSV

        Returns:
            The loaded ledger
        """
        ledger = cls(path)
        logger.info(f"Reading csv file : {ledger.path}")

        try:
            df = pd.read_csv(ledger.path, dtype=str, keep_default_na=False, encoding='utf-8')
        except Exception as e:
            logger.error(f"Failed to read ledger file {ledger.path}: {e}")
            raise

        missing_columns = {NAME_COLUMN, LAST_DONE_COLUMN} - set(df.columns)
        if missing_columns:
            raise LedgerFormatError(f"Ledger {ledger.path} missing required columns: {sorted(missing_columns)}")

        for i, (name, raw_timestamp) in enumerate(zip(df[NAME_COLUMN], df[LAST_DONE_COLUMN])):
            try:
                timestamp = pd.to_datetime(raw_timestamp)
            except (ValueError, TypeError) as e:
                raise LedgerFormatError(f"Row {i} of {ledger.path} has invalid LastDone '{raw_timestamp}': {e}")
            if pd.isna(timestamp):
                raise LedgerFormatError(f"Row {i} of {ledger.path} has no LastDone")
            last_done = timestamp.to_pydatetime()
            if last_done.tzinfo is not None:
                # Stored as naive local time, like datetime.now()
                last_done = last_done.astimezone().replace(tzinfo=None)

            existing = ledger._entries.get(name)
            if existing is None or last_done > existing.last_done:
                ledger.upsert(name, last_done)

        logger.info(f"Loaded {len(ledger)} ledger entries from {ledger.path}")
        return ledger

    def last_done(self, name: str, default: Optional[datetime] = NEVER_DONE) -> Optional[datetime]:
        """Return when *name* was last completed, or *default* if never."""
        entry = self._entries.get(name)
        return entry.last_done if entry is not None else default

    def upsert(self, name: str, when: datetime) -> None:
        """Add an entry for *name*, or overwrite the timestamp of the existing one."""
        entry = self._entries.get(name)
        if entry is None:
            self._entries[name] = CompletionEntry(name=name, last_done=when)
        else:
            entry.last_done = when

    def save(self) -> None:
        """Rewrite the whole ledger file."""
        df = pd.DataFrame(
            [{NAME_COLUMN: e.name, LAST_DONE_COLUMN: e.last_done.isoformat()} for e in self],
            columns=[NAME_COLUMN, LAST_DONE_COLUMN],
        )
        try:
            df.to_csv(self.path, index=False, encoding='utf-8')
            logger.info(f"Saved {len(df)} ledger entries to {self.path}")
        except Exception as e:
            logger.error(f"Failed to save ledger file {self.path}: {e}")
            raise

    def record_completion(self, name: str, when: datetime) -> None:
        """Upsert *name* and persist the ledger."""
        self.upsert(name, when)
        self.save()
