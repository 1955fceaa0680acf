"""Errors raised by the similarity pipeline.

Every precondition violation names the stage it was detected in, so that a
corrupted collection build can be traced back to the offending input.
"""

from __future__ import annotations


class PreconditionError(ValueError):
    """An input contract was violated; the query computation is aborted."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"[{stage}] {message}")


class DimensionMismatchError(PreconditionError):
    """Vector and matrix shapes of two pipeline inputs do not agree."""

    def __init__(self, stage: str, what: str, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(stage, f"{what}: expected shape {expected}, got {actual}")


class SingularMatrixError(PreconditionError):
    """The singular value matrix Sk cannot be inverted."""


class StageOrderError(PreconditionError):
    """A pipeline stage was requested before its predecessor completed."""


class ExtractionError(Exception):
    """Term extraction failed for a query model source."""

    def __init__(self, source, cause: BaseException):
        self.source = source
        self.cause = cause
        super().__init__(f"term extraction failed for {source!r}: {cause}")
