"""
PRINCIPAL COMPONENT REGRESSION - fit PCA → fit OLS → predict

===============================================================
THE IDEA
===============================================================

Correlated predictors (cyl, disp, hp, wt all say "big engine") make
OLS coefficients unstable. PCA rotates them into uncorrelated scores;
regressing on the first few scores keeps the signal and drops the
redundancy.

PREDICTING A NEW CAR:
    1. z = (x - center) / scale       per feature, matched by name
    2. s = z @ rotation               full component coordinates
    3. s_k = s[components]            the subset the model was fit on
    4. ŷ = intercept + s_k · coef

A new car has to go through the SAME center/scale/rotation the
training cars did - refitting PCA on it would give a different basis.
===============================================================
"""

import logging
import warnings
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .errors import InvalidFeatureMatrixError, OutOfDistributionWarning
from .linear_regression import LinearModel
from .pca import PCATransform
from .validation import check_feature_matrix, match_features

logger = logging.getLogger(__name__)


def select_components(pca, components):
    """
    Resolve a component selection into names.

    None → every component, int k → PC1..PCk, iterable → those names.
    """
    names = pca.component_names
    if components is None:
        return list(names)
    if isinstance(components, (int, np.integer)):
        if not 1 <= components <= len(names):
            raise ValueError(f"components must be between 1 and {len(names)}, "
                             f"got {components}")
        return list(names[:components])

    selected = list(components)
    if not selected:
        raise ValueError("components must name at least one component")
    unknown = [c for c in selected if c not in names]
    if unknown:
        raise ValueError(f"Unknown component(s): {', '.join(map(str, unknown))}")
    if len(set(selected)) != len(selected):
        raise ValueError("components must not repeat")
    return selected


def _out_of_range(pca, X):
    """Features where any row falls outside the training [min, max]."""
    outside = (X < pca.feature_min) | (X > pca.feature_max)
    return [name for name, bad in zip(pca.feature_names, outside.any(axis=0)) if bad]


def _observation_vector(pca, observation):
    """Observation mapping → float vector in the PCA's feature order."""
    if not isinstance(observation, (Mapping, pd.Series)):
        raise TypeError("observation must be a mapping or pandas Series, "
                        f"got {type(observation).__name__}")
    values = {str(k): v for k, v in observation.items()}
    match_features(values, pca.feature_names)
    try:
        x = np.array([float(values[name]) for name in pca.feature_names])
    except (TypeError, ValueError) as e:
        raise InvalidFeatureMatrixError(f"observation has a non-numeric value: {e}") from e
    if not np.isfinite(x).all():
        raise InvalidFeatureMatrixError("observation has missing or non-finite values")
    return x


def predict_observation(pca, model, observation):
    """
    Predict the target for one raw observation.

    Args:
        pca: PCATransform the model's training scores came from
        model: LinearModel fit on a subset of pca's components
        observation: mapping of feature name → raw value (target excluded)

    Returns:
        float prediction

    Raises:
        FeatureMismatchError if the observation's feature names differ
        from the PCA training set (order doesn't matter).

    Warns:
        OutOfDistributionWarning if any value lies outside the training
        range. The prediction is returned anyway.
    """
    x = _observation_vector(pca, observation)

    outside = _out_of_range(pca, x[np.newaxis, :])
    if outside:
        warnings.warn(OutOfDistributionWarning(outside), stacklevel=2)

    coords = pca.project(x)
    idx = [pca.component_names.index(c) for c in model.predictor_names]
    return float(model.predict_values(coords[idx]))


@dataclass(frozen=True, eq=False)
class PCRegression:
    """
    Principal component regression: a PCA transform plus an OLS model
    fit on some of its components.

    Attributes:
    -----------
    pca : PCATransform
    model : LinearModel - predictors are component names (e.g. PC1, PC2)
    scores : DataFrame - training scores on every component
    """

    pca: PCATransform
    model: LinearModel
    scores: pd.DataFrame

    @classmethod
    def fit(cls, features, target, components=None, center=True, scale=True):
        """
        Fit PCA on the features, then OLS of the target on chosen components.

        Args:
            features: DataFrame of numeric columns
            target: column name in `features` (dropped before PCA),
                    or a Series / array aligned with the rows
            components: None (all), int k (first k), or list of names
            center, scale: passed to PCATransform.fit
        """
        if isinstance(target, str):
            if not isinstance(features, pd.DataFrame) or target not in features.columns:
                raise InvalidFeatureMatrixError(f"target column {target!r} not in features")
            y = features[target]
            features = features.drop(columns=[target])
        else:
            y = target

        pca, scores = PCATransform.fit_transform(features, center=center, scale=scale)
        selected = select_components(pca, components)
        model = LinearModel.fit(scores[selected], y)

        logger.debug("PCR on %s: RSE=%.4f, adj R²=%.4f",
                     ', '.join(selected), model.residual_standard_error,
                     model.adj_r_squared)
        return cls(pca=pca, model=model, scores=scores)

    @property
    def components(self):
        return list(self.model.predictor_names)

    @property
    def feature_names(self):
        return list(self.pca.feature_names)

    def predict_observation(self, observation):
        """One raw observation → scalar prediction (see module `predict_observation`)."""
        return predict_observation(self.pca, self.model, observation)

    def predict(self, features):
        """
        Score every row of a raw feature table.

        Same checks as predict_observation; one warning lists every
        feature that was out of range in any row.
        """
        df = check_feature_matrix(features)
        match_features(df.columns, self.pca.feature_names)
        X = df[self.feature_names].to_numpy()

        outside = _out_of_range(self.pca, X)
        if outside:
            warnings.warn(OutOfDistributionWarning(outside), stacklevel=2)

        return pd.Series(self._predict_array(X), index=df.index,
                         name=self.model.target_name)

    def _predict_array(self, X):
        coords = self.pca.project(X)
        idx = [self.pca.component_names.index(c) for c in self.components]
        return self.model.predict_values(coords[:, idx])
