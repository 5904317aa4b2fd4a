"""PCA on tabular data, OLS on the components, and prediction for new rows."""

import logging

from .errors import (
    DegenerateInputError,
    FeatureMismatchError,
    InvalidFeatureMatrixError,
    OutOfDistributionWarning,
    PCRegressionError,
    RankDeficientError,
)
from .linear_regression import LinearModel
from .pca import PCATransform
from .pipeline import PCRegression, predict_observation

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.1.0'

__all__ = [
    'DegenerateInputError',
    'FeatureMismatchError',
    'InvalidFeatureMatrixError',
    'LinearModel',
    'OutOfDistributionWarning',
    'PCATransform',
    'PCRegression',
    'PCRegressionError',
    'RankDeficientError',
    'predict_observation',
]
