"""
Read-only statistics of a process model collection.

The term-document matrix, its frequency arrays and its truncated SVD are built
elsewhere; this module only validates that the pieces fit together and freezes
them so that any number of queries can share one instance.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import cached_property
from typing import TYPE_CHECKING

import numpy as np
from scipy import sparse

from lssm.errors import DimensionMismatchError, PreconditionError
from lssm.similarity import scale_document_matrix

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

STAGE = "collection"


def _frozen_array(values: ArrayLike, name: str, ndim: int) -> NDArray[np.float64]:
    if sparse.issparse(values):
        values = values.toarray()
    array = np.array(values, dtype=np.float64)
    if array.ndim != ndim:
        raise PreconditionError(STAGE, f"{name} must be {ndim}-dimensional, got shape {array.shape}")
    if not np.all(np.isfinite(array)):
        raise PreconditionError(STAGE, f"{name} contains non-finite values")
    array.setflags(write=False)
    return array


class CollectionStatistics:
    """
    Vocabulary, frequency arrays and rank-k SVD factors of a model collection.

    Args:
        vocabulary: Ordered, duplicate-free terms; row order of the term-document matrix.
        df: Document frequency per vocabulary term.
        gf: Global frequency per vocabulary term.
        Uk: Term-concept matrix (V x k).
        Sk: Singular values as a k x k (diagonal) matrix.
        Vtk: Concept-document matrix (k x N).
        document_ids: Optional identifiers of the N collection documents, in column order.
        collection_size: Number of documents the term statistics were computed over.
            Defaults to the number of columns of Vtk.

    Attributes:
        document_count (int): Number of documents scored against (columns of Vtk).
        rank (int): Reduced rank k.
    """

    def __init__(
        self,
        vocabulary: Iterable[str],
        df: ArrayLike,
        gf: ArrayLike,
        Uk: ArrayLike,
        Sk: ArrayLike,
        Vtk: ArrayLike,
        document_ids: Sequence[str] | None = None,
        collection_size: int | None = None,
    ):
        self.vocabulary = tuple(vocabulary)
        if not self.vocabulary:
            raise PreconditionError(STAGE, "vocabulary is empty")
        if len(set(self.vocabulary)) != len(self.vocabulary):
            raise PreconditionError(STAGE, "vocabulary contains duplicate terms")

        self.df = _frozen_array(df, "df", 1)
        self.gf = _frozen_array(gf, "gf", 1)
        self.Uk = _frozen_array(Uk, "Uk", 2)
        self.Sk = _frozen_array(Sk, "Sk", 2)
        self.Vtk = _frozen_array(Vtk, "Vtk", 2)

        V = len(self.vocabulary)
        k = self.Uk.shape[1]
        if self.df.shape != (V,):
            raise DimensionMismatchError(STAGE, "df", (V,), self.df.shape)
        if self.gf.shape != (V,):
            raise DimensionMismatchError(STAGE, "gf", (V,), self.gf.shape)
        if self.Uk.shape[0] != V:
            raise DimensionMismatchError(STAGE, "Uk", (V, k), self.Uk.shape)
        if self.Sk.shape != (k, k):
            raise DimensionMismatchError(STAGE, "Sk", (k, k), self.Sk.shape)
        if self.Vtk.shape[0] != k:
            raise DimensionMismatchError(STAGE, "Vtk", (k, self.Vtk.shape[1]), self.Vtk.shape)

        self.rank = k
        self.document_count = self.Vtk.shape[1]
        self.collection_size = self.document_count if collection_size is None else int(collection_size)
        if self.collection_size < max(self.document_count, 1):
            raise PreconditionError(
                STAGE,
                f"collection_size {self.collection_size} is smaller than the {self.document_count} documents of Vtk",
            )

        self.document_ids = list(document_ids) if document_ids is not None else None
        if self.document_ids is not None:
            if len(self.document_ids) != self.document_count:
                raise DimensionMismatchError(
                    STAGE, "document_ids", (self.document_count,), (len(self.document_ids),)
                )
            if len(set(self.document_ids)) != len(self.document_ids):
                raise PreconditionError(STAGE, "document_ids contains duplicates")

    def __len__(self) -> int:
        return self.document_count

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    @cached_property
    def map_id_to_idx(self) -> dict[str, int]:
        return {id_: idx for idx, id_ in enumerate(self.document_ids)} if self.document_ids else {}

    @cached_property
    def scaled_document_matrix(self) -> NDArray[np.float64]:
        """Sk · Vtk: document coordinates scaled by the singular values (k x N)."""
        return scale_document_matrix(self.Sk, self.Vtk)

    def id_to_idx(self, ids: list[str]) -> list[int]:
        if not self.document_ids:
            raise ValueError("Collection does not have document IDs.")
        return [self.map_id_to_idx[id_] for id_ in ids]

    def select_documents(self, documents: Sequence[int] | Sequence[str]) -> "CollectionStatistics":
        """
        Restrict scoring to a subset of the collection's documents, given as
        column indices or as document ids.

        Term statistics and the SVD factors are shared; only the columns of Vtk
        (and the matching document ids) are narrowed. The collection size used
        for weighting stays that of the full collection.
        """
        documents = list(documents)
        if documents and all(isinstance(document, str) for document in documents):
            documents = self.id_to_idx(documents)
        columns = np.asarray(documents, dtype=np.int64)
        ids = [self.document_ids[i] for i in columns] if self.document_ids else None
        return CollectionStatistics(
            self.vocabulary,
            self.df,
            self.gf,
            self.Uk,
            self.Sk,
            self.Vtk[:, columns],
            document_ids=ids,
            collection_size=self.collection_size,
        )
