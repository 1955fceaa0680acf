"""Latent semantic similarity of process models against a reference collection."""

from lssm.batch import batch_score
from lssm.collection import CollectionStatistics
from lssm.documents import (
    ExtractedTerms,
    ExtractionFailure,
    ExtractionResult,
    ModelDocument,
    TermBagProvider,
    TermExtractor,
    extract_terms,
)
from lssm.errors import (
    DimensionMismatchError,
    ExtractionError,
    PreconditionError,
    SingularMatrixError,
    StageOrderError,
)
from lssm.projection import project_pseudo_document
from lssm.query import Config, Query, QueryResult, Stage, score_query
from lssm.similarity import cosine_similarities, similarity_scores
from lssm.weighting import align_term_frequencies, log_entropy_weights

__all__ = [
    "CollectionStatistics",
    "Config",
    "DimensionMismatchError",
    "ExtractedTerms",
    "ExtractionError",
    "ExtractionFailure",
    "ExtractionResult",
    "ModelDocument",
    "PreconditionError",
    "Query",
    "QueryResult",
    "SingularMatrixError",
    "Stage",
    "StageOrderError",
    "TermBagProvider",
    "TermExtractor",
    "align_term_frequencies",
    "batch_score",
    "cosine_similarities",
    "extract_terms",
    "log_entropy_weights",
    "project_pseudo_document",
    "score_query",
    "similarity_scores",
]
