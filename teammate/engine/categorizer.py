"""Bucket a pool by personality category."""

from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Dict, List, Sequence

from teammate.domain.roster import CATEGORIES, UNKNOWN, Pool


def _empty_buckets() -> Dict[str, List[int]]:
    return {category: [] for category in CATEGORIES}


def _bucket_batch(pool: Pool, indices: Sequence[int]) -> Dict[str, List[int]]:
    buckets = _empty_buckets()
    for i in indices:
        category = pool[i].category
        if category not in buckets:
            category = UNKNOWN
        buckets[category].append(i)
    return buckets


def _shuffle(buckets: Dict[str, List[int]], rng: random.Random) -> Dict[str, List[int]]:
    # Fixed category order so a seed reproduces the same draws.
    for category in CATEGORIES:
        rng.shuffle(buckets[category])
    return buckets


def categorize(pool: Pool, rng: random.Random) -> Dict[str, List[int]]:
    """
    Split the pool into category buckets of pool indices.

    Every category key is present. Buckets are shuffled with `rng` so
    repeated runs differ unless the caller fixes the seed.

    Args:
        pool: Candidate arena
        rng: Random source used for the shuffle

    Returns:
        Dict of category -> list of pool indices
    """
    return _shuffle(_bucket_batch(pool, pool.indices()), rng)


def categorize_concurrently(
    pool: Pool,
    rng: random.Random,
    workers: int = 4,
    timeout: float = 30.0,
) -> Dict[str, List[int]]:
    """
    Same result as `categorize`, computed over index batches on a thread pool.

    Batches are merged in batch order before shuffling, so the output is
    identical to the sequential version for the same seed. If a batch fails
    or the timeout elapses, the sequential version is used instead.
    """
    workers = max(1, workers)
    batch_size = max(1, len(pool) // workers)
    batches = [
        range(start, min(len(pool), start + batch_size))
        for start in range(0, len(pool), batch_size)
    ]

    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [executor.submit(_bucket_batch, pool, batch) for batch in batches]
        done, not_done = wait(futures, timeout=timeout)
        if not_done:
            raise TimeoutError(f"{len(not_done)} categorization batches did not finish in {timeout}s")

        merged = _empty_buckets()
        for future in futures:
            for category, indices in future.result().items():
                merged[category].extend(indices)
    except Exception as e:
        print(f"[WARN] Concurrent categorization failed ({e}), using sequential fallback")
        return categorize(pool, rng)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return _shuffle(merged, rng)
