"""
Base transformation framework for immutable matrix operations.

Every stage of the trim-and-normalize pipeline (masking, threshold
filtering, degeneracy filtering, normalization, post-normalization
stabilization) is a Transform: a named, parameterized, pure function from
one FeatureMatrix to a new FeatureMatrix.

Engineering Design:
    Pure Functions:
        - No side effects (don't modify inputs)
        - Deterministic (same input + params -> same output)
        - Composable (chain transformations)

    Parameters are recorded on the instance so that a run can be described
    in logs and in the persisted normalization record.

Examples:
    >>> from featurenorm.core.transform import Transform
    >>>
    >>> class Negate(Transform):
    ...     def __init__(self):
    ...         super().__init__(name="Negate", params={})
    ...
    ...     def apply(self, matrix):
    ...         return matrix.with_data(-matrix.data)
    >>>
    >>> negated = Negate().apply(matrix)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from featurenorm.core.featurematrix import FeatureMatrix

__all__ = ['Transform']


class Transform(ABC):
    """
    Abstract base class for all matrix transformations.

    Attributes:
        name: Human-readable transformation name (e.g., "ThresholdFilter")
        params: Dictionary of parameters used for this transformation
        timestamp: When this transform instance was created (for audit trail)
    """

    def __init__(self, name: str, params: dict[str, Any]) -> None:
        """
        Initialize transformation with name and parameters.

        Args:
            name: Human-readable transformation name
            params: Dictionary of parameters. Must be JSON-serializable for provenance tracking.
        """
        self.name = name
        self.params = params
        self.timestamp = datetime.now()

    @abstractmethod
    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        """
        Execute transformation and return new matrix.

        Must never modify the input matrix; stages either select a smaller
        matrix or rewrite values through ``matrix.with_data``.

        Raises:
            FeatureNormError: If the stage cannot produce a valid result
        """
        pass

    def validate(self, matrix: FeatureMatrix) -> list[str]:
        """
        Check preconditions before applying transformation.

        Subclasses should override and call super().validate() first.

        Returns:
            List of error messages (empty list = valid, transformation can proceed)
        """
        errors: list[str] = []

        if matrix.data.size == 0:
            errors.append("Cannot process empty matrix")

        return errors

    def __repr__(self) -> str:
        """String like "ThresholdFilter(threshold=0.7, axis=0)"."""
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.name}({params_str})"
