"""
Exceptions raised by protocol generation.

All input problems are reported as ValidationError before any day is
generated, so callers never see a partial protocol.
"""


class ChronoshiftError(Exception):
    """Base class for engine errors."""


class ValidationError(ChronoshiftError, ValueError):
    """Malformed or inconsistent input."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class ScoreOutOfRangeError(ValidationError):
    """MEQ score outside the questionnaire's 16-86 range."""

    def __init__(self, score: int, minimum: int = 16, maximum: int = 86):
        self.score = score
        super().__init__(
            f"MEQ score must be between {minimum} and {maximum}, got {score}",
            field="meq_score",
        )
