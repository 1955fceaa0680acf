"""
A query process model represented as a pseudo-document.

The query's term frequencies are aligned to a collection's vocabulary,
log-entropy weighted, projected with q^T · Uk · Sk^-1 and finally compared to
every document of the collection. The four stages run strictly in order:

    EXTRACTED -> ALIGNED -> WEIGHTED -> PROJECTED -> SCORED

Each transition is a method that is only valid from the preceding stage.
`run` executes whatever stages remain and returns an immutable `QueryResult`.
"""

from __future__ import annotations

import enum
import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from lssm.collection import CollectionStatistics
from lssm.documents import ExtractionResult, to_counter
from lssm.errors import DimensionMismatchError, PreconditionError, StageOrderError
from lssm.projection import project_pseudo_document
from lssm.similarity import ZERO_COSINE, scores_from_scaled
from lssm.weighting import align_term_frequencies, log_entropy_weights

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class Config:
    zero_cosine: float = ZERO_COSINE  # cosine used for zero-length vectors (similarity 0.5)
    allow_failed_extraction: bool = False  # failed extraction -> empty query instead of ExtractionError


class Stage(enum.IntEnum):
    EXTRACTED = 0
    ALIGNED = 1
    WEIGHTED = 2
    PROJECTED = 3
    SCORED = 4


# Pipeline step that produces the vectors of each stage
STAGE_NAMES = {
    Stage.ALIGNED: "alignment",
    Stage.WEIGHTED: "weighting",
    Stage.PROJECTED: "projection",
    Stage.SCORED: "scoring",
}


def _readonly(array: NDArray[np.float64]) -> NDArray[np.float64]:
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class QueryResult:
    """All vectors computed for one query against one collection."""

    term_frequencies: NDArray[np.float64]
    weighted_term_frequencies: NDArray[np.float64]
    pseudo_document: NDArray[np.float64]
    similarities: NDArray[np.float64]
    document_ids: list[str] | None = None

    def as_dict(self) -> dict[str | int, float]:
        """Document id (column index if the collection has no ids) -> similarity."""
        keys = self.document_ids if self.document_ids is not None else range(len(self.similarities))
        return {key: float(value) for key, value in zip(keys, self.similarities)}


class Query:
    """
    Query model as a pseudo-document of a collection.

    Args:
        term_bag: Term occurrences of the query model (count mapping or flat iterable).
        name: Optional label, e.g. the source path.
        zero_cosine: Cosine used for zero-length vectors; defaults to `Config.zero_cosine`.
    """

    def __init__(
        self,
        term_bag: Mapping[str, int] | Iterable[str],
        name: str | None = None,
        zero_cosine: float | None = None,
    ):
        self.name = name
        self.zero_cosine = Config.zero_cosine if zero_cosine is None else float(zero_cosine)
        self.terms: Counter[str] = to_counter(term_bag)
        self.stage = Stage.EXTRACTED
        self._vocabulary: tuple[str, ...] | None = None
        self._term_frequencies: NDArray[np.float64] | None = None
        self._weighted_term_frequencies: NDArray[np.float64] | None = None
        self._pseudo_document: NDArray[np.float64] | None = None
        self._similarities: NDArray[np.float64] | None = None
        self._document_ids: list[str] | None = None

    @classmethod
    def from_extraction(
        cls,
        result: ExtractionResult,
        allow_failure: bool | None = None,
        zero_cosine: float | None = None,
    ) -> "Query":
        """
        Build a query from a term extraction outcome.

        A failed extraction raises ExtractionError unless `allow_failure`
        (default `Config.allow_failed_extraction`) is set, in which case the
        query starts from an empty term bag and scores 0.5 against every document.
        """
        if allow_failure is None:
            allow_failure = Config.allow_failed_extraction
        if result.ok:
            return cls(result.unwrap(), name=str(result.source), zero_cosine=zero_cosine)
        if not allow_failure:
            result.unwrap()
        logger.warning("continuing with an empty query for %r after failed extraction", result.source)
        return cls(Counter(), name=str(result.source), zero_cosine=zero_cosine)

    def __repr__(self) -> str:
        return f"Query(name={self.name!r}, terms={len(self.terms)}, stage={self.stage.name})"

    # TermBagProvider

    @property
    def term_counts(self) -> Mapping[str, int]:
        return self.terms

    def term_frequency(self, term: str) -> int:
        return self.terms.get(term, 0)

    # Stage transitions

    def _advance(self, expected: Stage, stage_name: str) -> None:
        if self.stage is not expected:
            raise StageOrderError(
                stage_name, f"requires stage {expected.name}, query is at {self.stage.name}"
            )

    def calculate_term_frequencies(self, vocabulary: Sequence[str]) -> "Query":
        """Align the term bag to `vocabulary`; terms outside it are left out."""
        self._advance(Stage.EXTRACTED, "alignment")
        self._vocabulary = tuple(vocabulary)
        self._term_frequencies = _readonly(align_term_frequencies(self._vocabulary, self.terms))
        self.stage = Stage.ALIGNED
        return self

    def calculate_weighted_frequencies(self, statistics: CollectionStatistics) -> "Query":
        """Log-entropy weighting with the collection's df/gf, which stay untouched."""
        self._advance(Stage.ALIGNED, "weighting")
        if statistics.vocabulary != self._vocabulary:
            raise PreconditionError("weighting", "collection vocabulary differs from the one used for alignment")
        self._weighted_term_frequencies = _readonly(
            log_entropy_weights(
                self._term_frequencies, statistics.df, statistics.gf, statistics.collection_size
            )
        )
        self.stage = Stage.WEIGHTED
        return self

    def calculate_pseudo_document(self, statistics: CollectionStatistics) -> "Query":
        """Pseudo-document q^T · Uk · Sk^-1."""
        self._advance(Stage.WEIGHTED, "projection")
        self._pseudo_document = _readonly(
            project_pseudo_document(self._weighted_term_frequencies, statistics.Uk, statistics.Sk)
        )
        self.stage = Stage.PROJECTED
        return self

    def calculate_similarities(self, statistics: CollectionStatistics) -> "Query":
        """Similarity values with respect to the documents of `statistics`."""
        self._advance(Stage.PROJECTED, "scoring")
        self._similarities = _readonly(self._score(statistics))
        self._document_ids = statistics.document_ids
        self.stage = Stage.SCORED
        logger.debug("scored %r against %d documents", self.name, statistics.document_count)
        return self

    def _score(self, statistics: CollectionStatistics) -> NDArray[np.float64]:
        if statistics.rank != len(self._pseudo_document):
            raise DimensionMismatchError(
                "scoring", "collection rank", (len(self._pseudo_document),), (statistics.rank,)
            )
        return scores_from_scaled(self._pseudo_document, statistics.scaled_document_matrix, self.zero_cosine)

    def run(self, statistics: CollectionStatistics) -> QueryResult:
        """Run every remaining stage against `statistics`."""
        if self.stage < Stage.ALIGNED:
            self.calculate_term_frequencies(statistics.vocabulary)
        if self.stage < Stage.WEIGHTED:
            self.calculate_weighted_frequencies(statistics)
        if self.stage < Stage.PROJECTED:
            self.calculate_pseudo_document(statistics)
        if self.stage < Stage.SCORED:
            self.calculate_similarities(statistics)
        return self.result()

    def rescore(self, statistics: CollectionStatistics) -> NDArray[np.float64]:
        """
        Score the pseudo-document against another document set of the same space,
        e.g. `statistics.select_documents(...)`. The query's own state is unchanged.
        """
        if self.stage < Stage.PROJECTED:
            raise StageOrderError("scoring", f"requires stage PROJECTED, query is at {self.stage.name}")
        return _readonly(self._score(statistics))

    def result(self) -> QueryResult:
        if self.stage is not Stage.SCORED:
            raise StageOrderError("scoring", f"query is at {self.stage.name}, not SCORED")
        return QueryResult(
            term_frequencies=self._term_frequencies,
            weighted_term_frequencies=self._weighted_term_frequencies,
            pseudo_document=self._pseudo_document,
            similarities=self._similarities,
            document_ids=self._document_ids,
        )

    # Computed vectors

    def _computed(self, value, stage: Stage):
        if self.stage < stage:
            raise StageOrderError(STAGE_NAMES[stage], f"not computed yet, query is at {self.stage.name}")
        return value

    @property
    def term_frequencies(self) -> NDArray[np.float64]:
        return self._computed(self._term_frequencies, Stage.ALIGNED)

    @property
    def weighted_term_frequencies(self) -> NDArray[np.float64]:
        return self._computed(self._weighted_term_frequencies, Stage.WEIGHTED)

    @property
    def pseudo_document(self) -> NDArray[np.float64]:
        return self._computed(self._pseudo_document, Stage.PROJECTED)

    @property
    def similarities(self) -> NDArray[np.float64]:
        return self._computed(self._similarities, Stage.SCORED)


def score_query(
    term_bag: Mapping[str, int] | Iterable[str],
    statistics: CollectionStatistics,
    zero_cosine: float | None = None,
) -> QueryResult:
    """Score a term bag against a collection in one call."""
    return Query(term_bag, zero_cosine=zero_cosine).run(statistics)
