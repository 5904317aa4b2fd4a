"""
Errors raised by the PCA regression workflow.

Every fatal error is a ValueError: the input data is what's wrong, not the
code. The out-of-distribution signal is a Warning, so the caller gets a
prediction AND a heads-up.
"""

from typing import Iterable, List


class PCRegressionError(ValueError):
    """Base class for all fatal PCA / regression errors."""


class InvalidFeatureMatrixError(PCRegressionError):
    """Feature matrix is not a clean numeric table (NaNs, strings, too few rows)."""


class DegenerateInputError(PCRegressionError):
    """
    A feature column has zero variance.

    Scaling divides by the standard deviation, so a constant column
    would turn into NaN/Inf. We refuse instead.
    """

    def __init__(self, columns: Iterable[str]):
        self.columns: List[str] = list(columns)
        super().__init__(
            f"Zero-variance column(s), cannot scale: {', '.join(self.columns)}"
        )


class RankDeficientError(PCRegressionError):
    """Regression predictors are linearly dependent - no unique least-squares fit."""

    def __init__(self, columns: Iterable[str], rank: int):
        self.columns: List[str] = list(columns)
        self.rank = rank
        super().__init__(
            f"Design matrix has rank {rank} < {len(self.columns)} columns "
            f"({', '.join(self.columns)}); predictors are collinear"
        )


class FeatureMismatchError(PCRegressionError):
    """Observation features don't match the features the PCA was trained on."""

    def __init__(self, missing: Iterable[str], unexpected: Iterable[str]):
        self.missing: List[str] = sorted(missing)
        self.unexpected: List[str] = sorted(unexpected)
        parts = []
        if self.missing:
            parts.append(f"missing: {', '.join(self.missing)}")
        if self.unexpected:
            parts.append(f"unexpected: {', '.join(self.unexpected)}")
        super().__init__("Feature mismatch (" + "; ".join(parts) + ")")


class OutOfDistributionWarning(UserWarning):
    """
    Advisory: a raw feature value lies outside the training range.

    PCA and OLS are linear, so they happily extrapolate. The prediction
    is still returned - this only tells you to trust it less.
    """

    def __init__(self, features: Iterable[str]):
        self.features: List[str] = list(features)
        super().__init__(
            f"Value(s) outside the training range for: {', '.join(self.features)}"
        )
