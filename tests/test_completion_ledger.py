from datetime import datetime, timezone

import pytest

from completion_ledger import NEVER_DONE, CompletionLedger, LedgerFormatError
from conftest import NOW, make_puzzle, write_ledger
from recommender import Order, PuzzleFilter, recommend


def test_lookup_returns_default_for_unknown_name(empty_ledger):
    assert empty_ledger.last_done("A") == NEVER_DONE
    sentinel = datetime(2000, 1, 1)
    assert empty_ledger.last_done("A", default=sentinel) == sentinel


def test_upsert_twice_keeps_one_entry(empty_ledger):
    first = datetime(2026, 1, 1, 8, 0)
    second = datetime(2026, 2, 1, 8, 0)

    empty_ledger.upsert("A", first)
    empty_ledger.upsert("A", second)

    assert len(empty_ledger) == 1
    assert empty_ledger.last_done("A") == second


def test_upsert_same_value_is_idempotent(empty_ledger):
    when = datetime(2026, 1, 1, 8, 0)
    empty_ledger.upsert("A", when)
    empty_ledger.upsert("A", when)
    assert [(e.name, e.last_done) for e in empty_ledger] == [("A", when)]


def test_save_then_load_reproduces_mapping(tmp_path):
    path = tmp_path / "LastDonePuzzles.csv"
    ledger = CompletionLedger(path)
    ledger.upsert("101:Parrot", datetime(2026, 1, 2, 3, 4, 5, 678901))
    ledger.upsert("B, with comma", datetime(2026, 3, 4, 5, 6, 7))
    ledger.save()

    reloaded = CompletionLedger.load(path)

    assert {e.name: e.last_done for e in reloaded} == {e.name: e.last_done for e in ledger}


def test_save_writes_header_for_empty_ledger(empty_ledger):
    empty_ledger.save()
    assert empty_ledger.path.read_text(encoding="utf-8").splitlines() == ["Name,LastDone"]


def test_load_empty_ledger(tmp_path):
    ledger = CompletionLedger.load(write_ledger(tmp_path / "ledger.csv", []))
    assert len(ledger) == 0


def test_load_merges_duplicate_names(tmp_path):
    path = write_ledger(tmp_path / "ledger.csv", [
        ("A", "2026-01-01T10:00:00"),
        ("B", "2026-01-05T10:00:00"),
        ("A", "2026-03-01T10:00:00"),
        ("A", "2026-02-01T10:00:00"),
    ])

    ledger = CompletionLedger.load(path)

    assert len(ledger) == 2
    assert ledger.last_done("A") == datetime(2026, 3, 1, 10, 0)


def test_load_accepts_month_first_timestamps(tmp_path):
    ledger = CompletionLedger.load(write_ledger(tmp_path / "ledger.csv", [("A", "10/15/2026 14:03:22")]))
    assert ledger.last_done("A") == datetime(2026, 10, 15, 14, 3, 22)


def test_record_completion_persists(empty_ledger):
    when = datetime(2026, 10, 15, 9, 30)
    empty_ledger.record_completion("A", when)

    assert CompletionLedger.load(empty_ledger.path).last_done("A") == when


def test_load_rejects_missing_column(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("Name,When\nA,2026-01-01\n", encoding="utf-8")
    with pytest.raises(LedgerFormatError, match="LastDone"):
        CompletionLedger.load(path)


def test_load_rejects_bad_timestamp(tmp_path):
    path = write_ledger(tmp_path / "ledger.csv", [("A", "not a date")])
    with pytest.raises(LedgerFormatError, match="Row 0"):
        CompletionLedger.load(path)


def test_load_missing_file_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError):
        CompletionLedger.load(tmp_path / "nope.csv")


def test_load_converts_offset_timestamps_to_naive_local_time(tmp_path):
    path = write_ledger(tmp_path / "ledger.csv", [
        ("A", "2026-01-01T10:00:00+02:00"),
        ("B", "2026-01-01T10:00:00Z"),
    ])

    ledger = CompletionLedger.load(path)

    expected_a = datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    expected_b = datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert ledger.last_done("A") == expected_a
    assert ledger.last_done("B") == expected_b
    assert ledger.last_done("A").tzinfo is None


def test_offset_timestamps_can_be_ranked(tmp_path):
    path = write_ledger(tmp_path / "ledger.csv", [("A", "2026-01-01T10:00:00+02:00")])
    ledger = CompletionLedger.load(path)
    puzzle = make_puzzle("A", 50, last_done=ledger.last_done("A"))

    assert recommend([puzzle], Order.XP, PuzzleFilter.ALL, now=NOW) == [puzzle]


def test_load_merges_naive_and_offset_duplicates(tmp_path):
    path = write_ledger(tmp_path / "ledger.csv", [
        ("A", "2025-06-01T10:00:00"),
        ("A", "2026-06-01T10:00:00+02:00"),
    ])

    ledger = CompletionLedger.load(path)

    assert len(ledger) == 1
    assert ledger.last_done("A").year == 2026
