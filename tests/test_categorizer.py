"""Tests for personality bucketing."""

import random
import threading

from teammate.domain.roster import BALANCED, CATEGORIES, LEADER, THINKER, UNKNOWN, Pool
from teammate.engine import categorizer
from teammate.engine.categorizer import categorize, categorize_concurrently


def _mixed_pool(make_candidate, size=40):
    scores = [95, 80, 60, 30]
    return Pool([make_candidate(scores[i % 4], skill=1 + i % 10) for i in range(size)])


def test_categorize_partitions_pool(make_candidate):
    """Test every candidate lands in exactly one bucket of its category."""
    pool = _mixed_pool(make_candidate)
    buckets = categorize(pool, random.Random(1))

    assert set(buckets) == set(CATEGORIES)
    flat = [i for indices in buckets.values() for i in indices]
    assert sorted(flat) == list(pool.indices())
    for category, indices in buckets.items():
        assert all(pool[i].category == category for i in indices)


def test_categorize_all_keys_present_for_single_category(make_candidate):
    """Test empty categories still have a bucket."""
    pool = Pool([make_candidate(80) for _ in range(3)])
    buckets = categorize(pool, random.Random(0))

    assert len(buckets[BALANCED]) == 3
    assert buckets[LEADER] == []
    assert buckets[THINKER] == []
    assert buckets[UNKNOWN] == []


def test_categorize_is_reproducible_with_seed(make_candidate):
    """Test the same seed gives the same shuffle."""
    pool = _mixed_pool(make_candidate)
    assert categorize(pool, random.Random(42)) == categorize(pool, random.Random(42))


def test_categorize_shuffles(make_candidate):
    """Test different seeds give different orders."""
    pool = Pool([make_candidate(80) for _ in range(50)])
    first = categorize(pool, random.Random(1))[BALANCED]
    second = categorize(pool, random.Random(2))[BALANCED]
    assert sorted(first) == sorted(second)
    assert first != second


def test_concurrent_matches_sequential(make_candidate):
    """Test the thread pool version gives the sequential result for a seed."""
    pool = _mixed_pool(make_candidate, size=101)
    sequential = categorize(pool, random.Random(7))
    concurrent = categorize_concurrently(pool, random.Random(7), workers=4)
    assert concurrent == sequential


def test_concurrent_small_pool(make_candidate):
    """Test more workers than candidates still works."""
    pool = _mixed_pool(make_candidate, size=3)
    assert categorize_concurrently(pool, random.Random(3), workers=8) == categorize(pool, random.Random(3))


def test_concurrent_timeout_falls_back(make_candidate, monkeypatch, capsys):
    """Test unfinished batches trigger the sequential fallback."""
    pool = _mixed_pool(make_candidate)
    monkeypatch.setattr(categorizer, "wait", lambda futures, timeout: (set(), set(futures)))

    buckets = categorize_concurrently(pool, random.Random(5), workers=2, timeout=0.01)

    assert buckets == categorize(pool, random.Random(5))
    assert "[WARN] Concurrent categorization failed" in capsys.readouterr().out


def test_concurrent_batch_failure_falls_back(make_candidate, monkeypatch, capsys):
    """Test a batch raising in a worker thread triggers the sequential fallback."""
    pool = _mixed_pool(make_candidate)
    bucket_batch = categorizer._bucket_batch

    def failing_in_workers(pool, indices):
        if threading.current_thread() is not threading.main_thread():
            raise RuntimeError("batch failed")
        return bucket_batch(pool, indices)

    monkeypatch.setattr(categorizer, "_bucket_batch", failing_in_workers)

    buckets = categorize_concurrently(pool, random.Random(5), workers=2)

    monkeypatch.undo()
    assert buckets == categorize(pool, random.Random(5))
    assert "batch failed" in capsys.readouterr().out
