"""Input checks shared by the PCA and regression fits."""

from typing import Iterable, Tuple

import numpy as np
import pandas as pd

from .errors import FeatureMismatchError, InvalidFeatureMatrixError


def check_feature_matrix(features, min_rows=1, name='features'):
    """
    Validate a feature matrix and return it as a float DataFrame.

    Raises InvalidFeatureMatrixError for anything that isn't a clean,
    finite, all-numeric table with at least `min_rows` rows.
    """
    if not isinstance(features, pd.DataFrame):
        raise InvalidFeatureMatrixError(
            f"{name} must be a pandas DataFrame, got {type(features).__name__}"
        )
    if features.shape[1] == 0:
        raise InvalidFeatureMatrixError(f"{name} has no columns")
    if len(features) < min_rows:
        raise InvalidFeatureMatrixError(
            f"{name} needs at least {min_rows} rows, got {len(features)}"
        )

    non_numeric = [str(c) for c in features.columns
                   if not pd.api.types.is_numeric_dtype(features[c])]
    if non_numeric:
        raise InvalidFeatureMatrixError(
            f"{name} has non-numeric column(s): {', '.join(non_numeric)}"
        )

    values = features.to_numpy(dtype=float)
    bad = ~np.isfinite(values).all(axis=0)
    if bad.any():
        cols = [str(c) for c, b in zip(features.columns, bad) if b]
        raise InvalidFeatureMatrixError(
            f"{name} has missing or non-finite values in: {', '.join(cols)}"
        )

    out = features.astype(float)
    out.columns = [str(c) for c in features.columns]
    return out


def match_features(given: Iterable[str], expected: Tuple[str, ...]):
    """Names must match exactly (order doesn't matter)."""
    given = {str(g) for g in given}
    missing = set(expected) - given
    unexpected = given - set(expected)
    if missing or unexpected:
        raise FeatureMismatchError(missing, unexpected)
