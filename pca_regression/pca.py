"""
PRINCIPAL COMPONENT ANALYSIS (PCA) - Paradigm: LINEAR PROJECTION

===============================================================
WHAT IT IS (THE CORE IDEA)
===============================================================

Find the directions where data VARIES MOST. Rotate onto them.

THE ALGORITHM:
    1. Center each feature (subtract its mean)
    2. Scale each feature (divide by its standard deviation)
    3. SVD of the standardized matrix: Z = U Σ V^T
    4. Rotation = V (columns = principal axes, descending variance)
    5. Scores = Z V

WHY SCALE?
    mtcars mixes displacement (~100s of cu.in.) with rear axle ratio
    (~3-5). Without scaling, disp dominates PC1 just because it's big.

===============================================================
THE MATHEMATICS
===============================================================

STANDARDIZATION:
    z_ij = (x_ij - μ_j) / s_j      s_j uses n-1 (sample std)

SVD:
    Z = U Σ V^T
    sdev_i = σ_i / sqrt(n-1)       std of the i-th score column
    Σ_i sdev_i² = Σ_j var(z_j)     variance is conserved under rotation

PROJECTION / RECONSTRUCTION:
    scores = Z V
    Z = scores V^T                 V is orthonormal, so V^-1 = V^T
    x = z * s + μ

PROPORTION OF VARIANCE:
    ratio_i = sdev_i² / Σ_j sdev_j²

===============================================================
"""

import logging
from dataclasses import dataclass, fields
from typing import Tuple

import numpy as np
import pandas as pd

from .errors import DegenerateInputError
from .validation import check_feature_matrix, match_features

logger = logging.getLogger(__name__)

# Relative threshold below which a column's std counts as zero
DEFAULT_TOL = 1e-12

SUMMARY_ROWS = ['Standard deviation', 'Proportion of Variance', 'Cumulative Proportion']


def component_names(n):
    return [f'PC{i + 1}' for i in range(n)]


@dataclass(frozen=True, eq=False)
class PCATransform:
    """
    A fitted PCA transform - immutable once built.

    Attributes:
    -----------
    feature_names : tuple of str
        Training columns, in the order the arrays below use.
    center : (n_features,) - per-feature mean (zeros if not centered)
    scale : (n_features,) - per-feature std (ones if not scaled)
    rotation : (n_features, n_features) - orthonormal, columns = PC1..PCp
    sdev : (n_features,) - std of each component's scores, descending
    feature_min, feature_max : (n_features,) - observed training range
    n_samples : int
    """

    feature_names: Tuple[str, ...]
    center: np.ndarray
    scale: np.ndarray
    rotation: np.ndarray
    sdev: np.ndarray
    feature_min: np.ndarray
    feature_max: np.ndarray
    n_samples: int

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                value.flags.writeable = False

    # ------------------------------------------------------------
    # Fitting
    # ------------------------------------------------------------

    @classmethod
    def fit(cls, features, center=True, scale=True, tol=DEFAULT_TOL):
        """
        Fit PCA on a feature matrix.

        Args:
            features: DataFrame, shape (n_samples, n_features), numeric, no NaNs
            center: subtract column means first
            scale: divide by column standard deviations
            tol: relative tolerance for the zero-variance check

        Returns:
            PCATransform

        Raises:
            DegenerateInputError if scaling and any column is constant.
        """
        pca, _ = cls._fit(features, center, scale, tol)
        return pca

    @classmethod
    def fit_transform(cls, features, center=True, scale=True, tol=DEFAULT_TOL):
        """Fit and return (transform, training scores as a DataFrame)."""
        return cls._fit(features, center, scale, tol)

    @classmethod
    def _fit(cls, features, center, scale, tol):
        df = check_feature_matrix(features, min_rows=2)
        X = df.to_numpy()
        n, d = X.shape

        # Step 1: Center
        mean = X.mean(axis=0) if center else np.zeros(d)
        X_centered = X - mean

        # Step 2: Scale
        if scale:
            # Uncentered data is scaled by its root-mean-square (same as prcomp)
            std = np.sqrt(np.sum(X_centered ** 2, axis=0) / (n - 1))
            magnitude = np.maximum(1.0, np.abs(X).max(axis=0))
            degenerate = ~(std > tol * magnitude)
            if degenerate.any():
                raise DegenerateInputError(
                    [c for c, bad in zip(df.columns, degenerate) if bad]
                )
        else:
            std = np.ones(d)
        Z = X_centered / std

        # Step 3: SVD
        # With fewer samples than features the reduced Vt is (n, d);
        # ask for the full basis so the rotation stays square.
        U, S, Vt = np.linalg.svd(Z, full_matrices=(n < d))
        rotation = Vt.T

        # Step 4: Deterministic signs - largest loading of each axis is positive
        idx = np.argmax(np.abs(rotation), axis=0)
        signs = np.sign(rotation[idx, np.arange(d)])
        signs[signs == 0] = 1.0
        rotation = rotation * signs

        # Step 5: Per-component std. Axes beyond rank n have zero variance.
        sdev = np.zeros(d)
        sdev[:len(S)] = S / np.sqrt(n - 1)

        pca = cls(
            feature_names=tuple(df.columns),
            center=mean,
            scale=std,
            rotation=rotation,
            sdev=sdev,
            feature_min=X.min(axis=0),
            feature_max=X.max(axis=0),
            n_samples=n,
        )
        logger.debug("Fitted PCA on %d x %d matrix; PC1 explains %.3f of variance",
                     n, d, pca.explained_variance_ratio[0])

        scores = pd.DataFrame(Z @ rotation, index=df.index,
                              columns=pca.component_names)
        return pca, scores

    # ------------------------------------------------------------
    # Fitted properties
    # ------------------------------------------------------------

    @property
    def n_features(self):
        return len(self.feature_names)

    @property
    def n_components(self):
        return self.rotation.shape[1]

    @property
    def component_names(self):
        return component_names(self.n_components)

    @property
    def explained_variance(self):
        """Variance of each component's scores (eigenvalues of the correlation matrix)."""
        return self.sdev ** 2

    @property
    def explained_variance_ratio(self):
        total = np.sum(self.explained_variance)
        if total == 0:
            # Unscaled all-constant data → no meaningful variance
            return np.zeros(self.n_components)
        return self.explained_variance / total

    @property
    def cumulative_variance_ratio(self):
        return np.cumsum(self.explained_variance_ratio)

    @property
    def loadings(self):
        """Rotation as a DataFrame: rows = features, columns = components."""
        return pd.DataFrame(np.array(self.rotation), index=list(self.feature_names),
                            columns=self.component_names)

    def summary(self):
        """
        Importance of components - the table `summary(prcomp(x))` prints.

            rows    = Standard deviation / Proportion of Variance / Cumulative Proportion
            columns = PC1 .. PCp
        """
        return pd.DataFrame(
            [self.sdev, self.explained_variance_ratio, self.cumulative_variance_ratio],
            index=SUMMARY_ROWS,
            columns=self.component_names,
        )

    # ------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------

    def standardize(self, X):
        """Center and scale raw values laid out in `feature_names` order."""
        return (np.asarray(X, dtype=float) - self.center) / self.scale

    def project(self, X):
        """Raw values (rows in `feature_names` order) → full component coordinates."""
        return self.standardize(X) @ self.rotation

    def transform(self, features):
        """
        Project new rows onto the principal components.

        Columns are matched by name, so order doesn't matter - but the set
        must be exactly the training set (FeatureMismatchError otherwise).
        """
        df = check_feature_matrix(features)
        match_features(df.columns, self.feature_names)
        X = df[list(self.feature_names)].to_numpy()
        return pd.DataFrame(self.project(X), index=df.index,
                            columns=self.component_names)

    def inverse_transform(self, scores):
        """
        Map component scores back to raw feature values.

        X = (scores @ V_k^T) * scale + center

        With every component this is exact. With a subset (DataFrame with
        only some PC columns, or an array with the first k columns) it's
        the best rank-k reconstruction.
        """
        if isinstance(scores, pd.DataFrame):
            unknown = [c for c in scores.columns if c not in self.component_names]
            if unknown:
                raise ValueError(f"Unknown component(s): {', '.join(map(str, unknown))}")
            cols = [self.component_names.index(c) for c in scores.columns]
            values, index = scores.to_numpy(dtype=float), scores.index
        else:
            values = np.atleast_2d(np.asarray(scores, dtype=float))
            if values.shape[1] > self.n_components:
                raise ValueError(f"Expected at most {self.n_components} score columns, "
                                 f"got {values.shape[1]}")
            cols, index = list(range(values.shape[1])), None

        X = (values @ self.rotation[:, cols].T) * self.scale + self.center
        return pd.DataFrame(X, index=index, columns=list(self.feature_names))

    def reconstruction_error(self, features, k):
        """
        Mean squared reconstruction error (in standardized units) using k components.

        Equals the sum of the dropped components' variances, scaled by (n-1)/n.
        """
        scores = self.transform(features)
        recon = self.inverse_transform(scores.iloc[:, :k])
        Z = scores.to_numpy() @ self.rotation.T
        Z_hat = self.standardize(recon.to_numpy())
        return float(np.mean(np.sum((Z - Z_hat) ** 2, axis=1)))
