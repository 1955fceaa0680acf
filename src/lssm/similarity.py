"""
Cosine scoring of a pseudo-document against the documents of a collection.

Each collection document is a column of Sk · Vtk. The cosine between the
pseudo-document and a column is mapped from [-1, 1] to [0, 1] by (cos + 1) / 2,
so 1 is identical direction, 0.5 orthogonal and 0 opposite.

A zero-length vector has no direction; its cosine is taken as `zero_cosine`
(0.0 by default), which scores as 0.5.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from lssm.errors import DimensionMismatchError

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)

STAGE = "scoring"
ZERO_COSINE = 0.0


def scale_document_matrix(Sk: ArrayLike, Vtk: ArrayLike) -> NDArray[np.float64]:
    """Sk · Vtk (k x N)."""
    Sk = np.asarray(Sk, dtype=np.float64)
    Vtk = np.asarray(Vtk, dtype=np.float64)
    if Sk.ndim != 2 or Vtk.ndim != 2 or Sk.shape[1] != Vtk.shape[0]:
        raise DimensionMismatchError(STAGE, "Vtk rows against Sk", (Sk.shape[-1], "N"), Vtk.shape)
    scaled = Sk @ Vtk
    scaled.setflags(write=False)
    return scaled


def cosine_similarities(
    pseudo_document: ArrayLike,
    scaled: ArrayLike,
    zero_cosine: float = ZERO_COSINE,
) -> NDArray[np.float64]:
    """
    Cosine between `pseudo_document` and every column of `scaled`.

    Args:
        pseudo_document: Query in concept space (k,).
        scaled: Scaled concept-document matrix (k x N).
        zero_cosine: Cosine reported when either vector has zero length.

    Returns:
        Cosines (N,), clipped to [-1, 1].
    """
    q = np.asarray(pseudo_document, dtype=np.float64)
    scaled = np.asarray(scaled, dtype=np.float64)
    if scaled.ndim != 2 or q.shape != (scaled.shape[0],):
        raise DimensionMismatchError(STAGE, "pseudo-document against Sk·Vtk rows", (scaled.shape[0],), q.shape)

    dots = q @ scaled
    column_norms = np.linalg.norm(scaled, axis=0)
    query_norm = np.linalg.norm(q)

    cosines = np.full(scaled.shape[1], zero_cosine, dtype=np.float64)
    if query_norm == 0:
        logger.debug("zero pseudo-document, all cosines set to %s", zero_cosine)
        return np.clip(cosines, -1.0, 1.0)

    mask = column_norms > 0
    cosines[mask] = dots[mask] / (column_norms[mask] * query_norm)
    return np.clip(cosines, -1.0, 1.0)


def similarity_scores(
    pseudo_document: ArrayLike,
    Sk: ArrayLike,
    Vtk: ArrayLike,
    zero_cosine: float = ZERO_COSINE,
) -> NDArray[np.float64]:
    """
    Similarity in [0, 1] of the pseudo-document to each collection document.

    Args:
        pseudo_document: Query in concept space (k,).
        Sk: Singular value matrix (k x k).
        Vtk: Concept-document matrix (k x N).
        zero_cosine: Cosine reported for zero-length vectors.

    Returns:
        Scores (N,) in the column order of Vtk.
    """
    return scores_from_scaled(pseudo_document, scale_document_matrix(Sk, Vtk), zero_cosine)


def scores_from_scaled(
    pseudo_document: ArrayLike,
    scaled: ArrayLike,
    zero_cosine: float = ZERO_COSINE,
) -> NDArray[np.float64]:
    """Same as `similarity_scores` with Sk · Vtk already computed."""
    return (cosine_similarities(pseudo_document, scaled, zero_cosine) + 1.0) / 2.0
