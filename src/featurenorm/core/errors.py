"""
Fatal error kinds raised by the trim-and-normalize pipeline.

Every error here aborts the run: no partial result is returned and nothing
is persisted. Non-fatal conditions are reported through logging instead.
"""

from __future__ import annotations

__all__ = [
    'FeatureNormError',
    'InvalidThreshold',
    'ThresholdTooStrict',
    'AllFeaturesDegenerate',
    'AllFeaturesClassDegenerate',
    'InsufficientObservations',
    'AllColumnsBadAfterNormalization',
    'UnknownNormalization',
]


class FeatureNormError(Exception):
    """Base class for all fatal pipeline errors."""
    pass


class InvalidThreshold(FeatureNormError, ValueError):
    """Raised when a good-value proportion threshold lies outside [0, 1]."""
    pass


class ThresholdTooStrict(FeatureNormError):
    """Raised when no row (or no column) satisfies the good-value threshold."""

    def __init__(self, axis: str, threshold: float):
        self.axis = axis
        self.threshold = threshold
        super().__init__(
            f"No {axis} had at least {threshold * 100:.2f}% good values. "
            f"Set a more lenient threshold."
        )


class AllFeaturesDegenerate(FeatureNormError):
    """Raised when every remaining feature is (near-)constant across observations."""
    pass


class AllFeaturesClassDegenerate(FeatureNormError):
    """Raised when every remaining feature is (near-)constant within some class."""
    pass


class InsufficientObservations(FeatureNormError):
    """Raised when a single observation remains, so normalization is meaningless."""
    pass


class AllColumnsBadAfterNormalization(FeatureNormError):
    """Raised when the normalizing transform leaves every column entirely missing."""
    pass


class UnknownNormalization(FeatureNormError, KeyError):
    """Raised by a transform registry asked for a name it does not hold."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
