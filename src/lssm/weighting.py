"""
Term-frequency alignment and log-entropy weighting of a query.

The query is placed into the vector space of an existing collection: its
frequencies are aligned to the collection vocabulary and weighted with the
collection's df/gf statistics, which are never updated by the query.

    w_i = log2(f_i + 1) * (1 + df_i * (p_i * log2(p_i)) / log2(N)),   p_i = f_i / gf_i

Terms absent from the query (f_i = 0) get weight 0.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

import numpy as np

from lssm.errors import DimensionMismatchError, PreconditionError

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)

LN2 = np.log(2.0)


def log2(x: ArrayLike) -> NDArray[np.float64]:
    """Base-2 logarithm as ln(x) / ln(2)."""
    return np.log(np.asarray(x, dtype=np.float64)) / LN2


def align_term_frequencies(vocabulary: Sequence[str], term_bag: Mapping[str, int]) -> NDArray[np.float64]:
    """
    Count vector of `term_bag` in vocabulary order.

    Terms that are not part of the vocabulary have no coordinate in the
    collection's space and are dropped.

    Args:
        vocabulary: Ordered terms of the collection.
        term_bag: Term -> occurrence count of the query model.

    Returns:
        Frequencies (len(vocabulary),), 0 for vocabulary terms missing from the bag.
    """
    frequencies = np.array([term_bag.get(term, 0) for term in vocabulary], dtype=np.float64)
    if np.any(frequencies < 0):
        negative = [vocabulary[i] for i in np.flatnonzero(frequencies < 0)]
        raise PreconditionError("alignment", f"negative term counts for {negative}")

    if not np.any(frequencies):
        logger.debug("query shares no terms with the vocabulary (%d query terms)", len(term_bag))
    else:
        known = set(vocabulary)
        dropped = sum(1 for term in term_bag if term not in known)
        if dropped:
            logger.debug("dropped %d query terms outside the vocabulary", dropped)
    return frequencies


def log_entropy_weights(
    term_frequencies: ArrayLike,
    df: ArrayLike,
    gf: ArrayLike,
    document_count: int,
) -> NDArray[np.float64]:
    """
    Log-entropy weights of a query against fixed collection statistics.

    Args:
        term_frequencies: Aligned query term frequencies (V,).
        df: Document frequency of each vocabulary term (V,).
        gf: Global frequency of each vocabulary term (V,).
        document_count: Size N of the collection the statistics come from.

    Returns:
        Weighted frequencies (V,), zero wherever the frequency is zero.
    """
    tf = np.asarray(term_frequencies, dtype=np.float64)
    df = np.asarray(df, dtype=np.float64)
    gf = np.asarray(gf, dtype=np.float64)
    if df.shape != tf.shape:
        raise DimensionMismatchError("weighting", "df", tf.shape, df.shape)
    if gf.shape != tf.shape:
        raise DimensionMismatchError("weighting", "gf", tf.shape, gf.shape)
    if document_count < 2:
        raise PreconditionError(
            "weighting", f"collection size must be at least 2 (log2(N) is the divisor), got {document_count}"
        )

    present = tf != 0
    unseen = present & (gf <= 0)
    if np.any(unseen):
        raise PreconditionError(
            "weighting",
            f"global frequency is 0 for query terms at indices {np.flatnonzero(unseen).tolist()}",
        )

    weights = np.zeros_like(tf)
    f = tf[present]
    p = f / gf[present]
    weights[present] = log2(f + 1) * (1 + df[present] * (p * log2(p)) / log2(document_count))
    return weights
