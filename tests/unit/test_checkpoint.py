from __future__ import annotations

from pathlib import Path

from sheetsync.services.checkpoint import Checkpoint, CheckpointStore, Deadline


def test_save_load_clear(tmp_path: Path):
    store = CheckpointStore(tmp_path / "state" / "cp.json")
    assert store.load("push", "wb.xlsx") is None
    store.save(Checkpoint("push", "wb.xlsx", "Menu", 2, 5))
    cp = store.load("push", "wb.xlsx")
    assert cp == Checkpoint("push", "wb.xlsx", "Menu", 2, 5)
    assert cp.position() == (2, 5)
    assert not (tmp_path / "state" / "cp.tmp").exists()
    store.clear()
    assert not store.path.exists()
    store.clear()  # no-op when already gone


def test_load_ignores_other_operation_or_workbook(tmp_path: Path):
    store = CheckpointStore(tmp_path / "cp.json")
    store.save(Checkpoint("push", "wb.xlsx", "Menu", 2, 5))
    assert store.load("pull", "wb.xlsx") is None
    assert store.load("push", "other.xlsx") is None


def test_load_ignores_corrupt_file(tmp_path: Path):
    path = tmp_path / "cp.json"
    path.write_text("{not json", encoding="utf-8")
    assert CheckpointStore(path).load("push", "wb.xlsx") is None
    path.write_text('{"operation": "push"}', encoding="utf-8")
    assert CheckpointStore(path).load("push", "wb.xlsx") is None


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_deadline():
    clock = FakeClock()
    d = Deadline(5, clock=clock)
    assert not d.expired()
    clock.now = 104.9
    assert not d.expired()
    clock.now = 105.0
    assert d.expired()


def test_unlimited_deadline_never_expires():
    clock = FakeClock()
    d = Deadline(None, clock=clock)
    clock.now = 1e12
    assert not d.expired()
