"""Projection of a weighted query vector into the collection's concept space."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy import linalg

from lssm.errors import DimensionMismatchError, PreconditionError, SingularMatrixError

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

STAGE = "projection"


def project_pseudo_document(weighted: ArrayLike, Uk: ArrayLike, Sk: ArrayLike) -> NDArray[np.float64]:
    """
    Pseudo-document q^T · Uk · Sk^-1.

    The weighted vector is multiplied as a row with Uk first; the resulting
    length-k vector is then multiplied with the inverse of Sk.

    Args:
        weighted: Weighted term frequencies (V,).
        Uk: Term-concept matrix (V x k).
        Sk: Singular value matrix (k x k), non-singular.

    Returns:
        Pseudo-document (k,), not normalized.
    """
    q = np.asarray(weighted, dtype=np.float64)
    Uk = np.asarray(Uk, dtype=np.float64)
    Sk = np.asarray(Sk, dtype=np.float64)

    if Sk.ndim != 2 or Sk.shape[0] != Sk.shape[1]:
        raise DimensionMismatchError(STAGE, "Sk must be square", (Sk.shape[0], Sk.shape[0]), Sk.shape)
    if Uk.ndim != 2 or q.shape != (Uk.shape[0],):
        raise DimensionMismatchError(STAGE, "weighted vector against Uk rows", (Uk.shape[0],), q.shape)
    if Uk.shape[1] != Sk.shape[0]:
        raise DimensionMismatchError(STAGE, "Uk columns against Sk", (Uk.shape[0], Sk.shape[0]), Uk.shape)

    if not np.all(np.isfinite(Sk)):
        raise PreconditionError(STAGE, "Sk contains non-finite values")

    try:
        inverse_Sk = linalg.inv(Sk)
    except linalg.LinAlgError as exc:
        raise SingularMatrixError(STAGE, f"Sk is not invertible: {exc}") from exc

    return (q @ Uk) @ inverse_Sk
