"""
Scoring many queries against one collection.

Queries are independent of each other and only read the collection
statistics (whose arrays are non-writeable), so they can run on a thread pool.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from lssm.collection import CollectionStatistics
from lssm.query import QueryResult, score_query

# Default number of workers for parallel query processing
DEFAULT_NUM_WORKERS = 32

# Minimum queries before enabling parallelism
MIN_QUERIES_FOR_PARALLEL = 10


def batch_score(
    term_bags: Sequence[Mapping[str, int] | Iterable[str]],
    statistics: CollectionStatistics,
    num_workers: int = DEFAULT_NUM_WORKERS,
    min_queries_for_parallel: int = MIN_QUERIES_FOR_PARALLEL,
    zero_cosine: float | None = None,
) -> list[QueryResult]:
    """
    Score each term bag against `statistics`.

    Args:
        term_bags: Term bags of the query models.
        statistics: Shared collection statistics.
        num_workers: Number of parallel workers.
        min_queries_for_parallel: Minimum queries before enabling parallelism.
        zero_cosine: Cosine used for zero-length vectors; defaults to `Config.zero_cosine`.

    Returns:
        One QueryResult per term bag, in input order.
    """
    if not term_bags:
        return []

    # Built once before any worker reads it
    statistics.scaled_document_matrix

    def score_single(term_bag) -> QueryResult:
        return score_query(term_bag, statistics, zero_cosine=zero_cosine)

    if len(term_bags) < min_queries_for_parallel:
        return [score_single(term_bag) for term_bag in term_bags]

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        results = list(executor.map(score_single, term_bags))

    return results
