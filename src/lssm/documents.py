"""
Process models seen as bags of structural terms.

Anything that can answer "which terms do you contain, and how often" takes part
in the pipeline: collection documents and queries alike implement the
`TermBagProvider` protocol rather than sharing a base class.

Term extraction from native model files is delegated to a `TermExtractor`.
Its outcome is returned as a value (`ExtractedTerms` or `ExtractionFailure`)
so that callers decide explicitly what a failed extraction means.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

from lssm.errors import ExtractionError, PreconditionError

logger = logging.getLogger(__name__)


class TermBagProvider(Protocol):
    """Protocol for objects exposing a multiset of terms."""

    @property
    def term_counts(self) -> Mapping[str, int]: ...

    def term_frequency(self, term: str) -> int: ...


class TermExtractor(Protocol):
    """Produces the term occurrences of a model source (file path, parsed tree, ...)."""

    def extract(self, source: Any) -> Mapping[str, int] | Iterable[str]: ...


def to_counter(terms: Mapping[str, int] | Iterable[str]) -> Counter[str]:
    """Normalize term occurrences (a count mapping or a flat iterable) into a Counter."""
    if isinstance(terms, Mapping):
        fractional = sorted(term for term, count in terms.items() if not float(count).is_integer())
        if fractional:
            raise PreconditionError("alignment", f"term counts must be whole numbers, got fractions for {fractional}")
        return Counter({term: int(count) for term, count in terms.items()})
    return Counter(terms)


@dataclass
class ModelDocument:
    """
    A process model of the collection, represented by its term multiset.

    Args:
        name: Identifier of the model (typically its source path).
        terms: Term -> occurrence count.
    """

    name: str
    terms: Counter[str] = field(default_factory=Counter)

    @classmethod
    def from_terms(cls, name: str, terms: Mapping[str, int] | Iterable[str]) -> "ModelDocument":
        return cls(name=name, terms=to_counter(terms))

    @property
    def term_counts(self) -> Mapping[str, int]:
        return self.terms

    def term_frequency(self, term: str) -> int:
        return self.terms.get(term, 0)

    def __contains__(self, term: str) -> bool:
        return self.terms.get(term, 0) > 0

    def __len__(self) -> int:
        return sum(self.terms.values())


@dataclass(frozen=True)
class ExtractedTerms:
    """Successful extraction: the term bag of `source`."""

    source: Any
    terms: Counter[str]

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Counter[str]:
        return self.terms


@dataclass(frozen=True)
class ExtractionFailure:
    """Failed extraction: `error` is what the extractor raised for `source`."""

    source: Any
    error: Exception

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Counter[str]:
        raise ExtractionError(self.source, self.error) from self.error


ExtractionResult = Union[ExtractedTerms, ExtractionFailure]


def extract_terms(extractor: TermExtractor, source: Any) -> ExtractionResult:
    """
    Run `extractor` on `source` and capture the outcome.

    Args:
        extractor: Term extractor for the model format at hand.
        source: Whatever the extractor accepts.

    Returns:
        ExtractedTerms on success, ExtractionFailure carrying the raised error otherwise.
    """
    try:
        terms = to_counter(extractor.extract(source))
    except Exception as exc:
        logger.warning("term extraction failed for %r: %s", source, exc)
        return ExtractionFailure(source=source, error=exc)
    logger.debug("extracted %d distinct terms from %r", len(terms), source)
    return ExtractedTerms(source=source, terms=terms)
