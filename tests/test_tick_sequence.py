from __future__ import annotations

import pickle

import pytest

from market_data import tick_sequence
from market_data.tick_sequence import TickSequence
from shared.models.models import Tick


def _ticks(n: int) -> list[Tick]:
    return [Tick(ts=1_000 + i, price=100.0 + i, volume=i) for i in range(n)]


def test_append_grows_by_doubling_and_keeps_order():
    seq = TickSequence(initial_capacity=2)
    for t in _ticks(5):
        seq.append(t)

    assert len(seq) == 5
    assert seq.capacity == 8
    assert [t.price for t in seq] == [100.0, 101.0, 102.0, 103.0, 104.0]
    assert seq.at(3) == Tick(ts=1_003, price=103.0, volume=3)
    assert seq[0] == seq.first()
    assert seq.last() == Tick(ts=1_004, price=104.0, volume=4)


def test_at_out_of_range_raises_index_error():
    seq = TickSequence.from_ticks(_ticks(3))
    with pytest.raises(IndexError):
        seq.at(3)
    with pytest.raises(IndexError):
        seq.at(-1)


def test_sealed_sequence_rejects_append():
    seq = TickSequence.from_ticks(_ticks(2))
    assert seq.sealed
    with pytest.raises(RuntimeError):
        seq.append(Tick(ts=1, price=1.0))


def test_iterate_yields_index_and_restarts():
    seq = TickSequence.from_ticks(_ticks(4))
    first = [(t.ts, i) for t, i in seq.iterate()]
    second = [(t.ts, i) for t, i in seq.iterate()]
    assert first == second == [(1_000, 0), (1_001, 1), (1_002, 2), (1_003, 3)]


def test_empty_sequence():
    seq = TickSequence.from_ticks([])
    assert len(seq) == 0
    assert seq.first() is None
    assert seq.last() is None
    assert list(seq.iterate()) == []
    assert seq.to_frame().empty


def test_invalid_initial_capacity():
    with pytest.raises(ValueError):
        TickSequence(initial_capacity=0)


def test_view_is_read_only_and_frame_has_columns():
    seq = TickSequence.from_ticks(_ticks(3))
    v = seq.view()
    assert not v.flags.writeable
    with pytest.raises(ValueError):
        v["price"][0] = 1.0

    df = seq.to_frame()
    assert list(df.columns) == ["ts", "price", "volume"]
    assert df["price"].tolist() == [100.0, 101.0, 102.0]


def test_pickle_keeps_content_for_worker_processes():
    seq = TickSequence.from_ticks(_ticks(10))
    restored = pickle.loads(pickle.dumps(seq))
    assert len(restored) == 10
    assert restored.sealed
    assert list(restored) == list(seq)


def test_iterate_walks_chunk_boundaries_lazily(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(tick_sequence, "ITER_CHUNK", 2)
    seq = TickSequence.from_ticks(_ticks(5))

    it = seq.iterate()
    assert next(it) == (Tick(ts=1_000, price=100.0, volume=0), 0)
    rest = [(t.ts, i) for t, i in it]
    assert rest == [(1_001, 1), (1_002, 2), (1_003, 3), (1_004, 4)]


def test_getitem_rejects_slices():
    seq = TickSequence.from_ticks(_ticks(3))
    assert seq[2] == seq.at(2)
    with pytest.raises(TypeError, match="must be integers"):
        seq[1:3]
    with pytest.raises(IndexError):
        seq[3]
