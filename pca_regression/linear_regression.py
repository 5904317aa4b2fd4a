"""
LINEAR REGRESSION - Paradigm: PROJECTION

You believe: y ≈ Xw + b + noise

Ordinary least squares finds the w and b that minimize squared error:
    w* = argmin_w ||y - Xw||²

SOLVER: QR instead of the normal equation.
    X_b = [1 | X] = Q R
    R w = Q^T y

    Same answer as w = (X'X)⁻¹ X'y, but never squares the condition
    number of X. That matters once predictors are even mildly correlated.

NO MULTICOLLINEARITY:
    If the columns of X_b are linearly dependent, R is singular and
    infinitely many w fit equally well. We refuse (RankDeficientError)
    rather than quietly pick one.

RESIDUAL STANDARD ERROR:
    RSE = sqrt(RSS / (n - p - 1))
    The typical size of a prediction error, in units of y.
"""

import logging
from dataclasses import dataclass, fields
from typing import Tuple

import numpy as np
import pandas as pd
from scipy import linalg, stats

from .errors import InvalidFeatureMatrixError, RankDeficientError
from .validation import check_feature_matrix, match_features

logger = logging.getLogger(__name__)

INTERCEPT = '(Intercept)'


@dataclass(frozen=True, eq=False)
class LinearModel:
    """
    A fitted OLS model with intercept - immutable once built.

    coefficients / std_errors / t_values / p_values are aligned with
    `term_names` (intercept first). Inferential statistics are NaN when
    there are zero residual degrees of freedom (the fit is exact).
    """

    predictor_names: Tuple[str, ...]
    target_name: str
    intercept: float
    coefficients: np.ndarray
    fitted_values: pd.Series
    residuals: pd.Series
    df_residual: int
    residual_standard_error: float
    std_errors: np.ndarray
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_pvalue: float

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                value.flags.writeable = False

    @classmethod
    def fit(cls, predictors, target):
        """
        Least-squares fit of `target` on `predictors` plus an intercept.

        Args:
            predictors: DataFrame (n_samples, p), numeric
            target: Series / array of length n_samples

        Raises:
            RankDeficientError if predictor columns (with the intercept)
            are linearly dependent.
        """
        X_df = check_feature_matrix(predictors, name='predictors')
        y, target_name = _as_target(target, X_df.index)
        n, p = X_df.shape

        # Bias column makes the intercept just another weight
        X_b = np.column_stack([np.ones(n), X_df.to_numpy()])
        terms = [INTERCEPT] + list(X_df.columns)

        rank = np.linalg.matrix_rank(X_b)
        if rank < X_b.shape[1]:
            raise RankDeficientError(terms, rank)

        # R w = Q^T y
        Q, R = np.linalg.qr(X_b)
        w = linalg.solve_triangular(R, Q.T @ y)

        fitted = X_b @ w
        residuals = y - fitted
        rss = float(residuals @ residuals)
        tss = float(np.sum((y - y.mean()) ** 2))
        df_resid = n - p - 1

        r_squared = 1.0 - rss / tss if tss > 0 else np.nan

        if df_resid > 0:
            sigma2 = rss / df_resid
            rse = float(np.sqrt(sigma2))
            # Cov(w) = σ² (X'X)⁻¹ = σ² R⁻¹ R⁻ᵀ
            R_inv = linalg.solve_triangular(R, np.eye(p + 1))
            std_errors = np.sqrt(sigma2 * np.sum(R_inv ** 2, axis=1))
            adj_r_squared = 1.0 - (1.0 - r_squared) * (n - 1) / df_resid
            if rss > 0:
                f_stat = ((tss - rss) / p) / sigma2
                f_pvalue = float(stats.f.sf(f_stat, p, df_resid))
            else:
                f_stat, f_pvalue = np.inf, 0.0
        else:
            logger.warning("Zero residual degrees of freedom (n=%d, p=%d): "
                           "exact fit, RSE undefined", n, p)
            rse = np.nan
            std_errors = np.full(p + 1, np.nan)
            adj_r_squared, f_stat, f_pvalue = np.nan, np.nan, np.nan

        model = cls(
            predictor_names=tuple(X_df.columns),
            target_name=target_name,
            intercept=float(w[0]),
            coefficients=w[1:],
            fitted_values=pd.Series(fitted, index=X_df.index, name=target_name),
            residuals=pd.Series(residuals, index=X_df.index, name=target_name),
            df_residual=df_resid,
            residual_standard_error=rse,
            std_errors=std_errors,
            r_squared=float(r_squared),
            adj_r_squared=float(adj_r_squared),
            f_statistic=float(f_stat),
            f_pvalue=f_pvalue,
        )
        logger.debug("Fitted OLS %s ~ %s: RSE=%.4f on %d df",
                     target_name, ' + '.join(model.predictor_names), rse, df_resid)
        return model

    @property
    def term_names(self):
        return [INTERCEPT] + list(self.predictor_names)

    @property
    def params(self):
        """Intercept + coefficients as a named Series."""
        return pd.Series(np.concatenate([[self.intercept], self.coefficients]),
                         index=self.term_names)

    @property
    def t_values(self):
        return self.params.to_numpy() / self.std_errors

    @property
    def p_values(self):
        if self.df_residual <= 0:
            return np.full(len(self.term_names), np.nan)
        return 2 * stats.t.sf(np.abs(self.t_values), self.df_residual)

    def coefficient_table(self):
        """Estimate / Std. Error / t value / Pr(>|t|), one row per term."""
        return pd.DataFrame({
            'Estimate': self.params.to_numpy(),
            'Std. Error': np.array(self.std_errors),
            't value': self.t_values,
            'Pr(>|t|)': self.p_values,
        }, index=self.term_names)

    def predict_values(self, X):
        """Predict from predictor values already laid out in `predictor_names` order."""
        return np.asarray(X, dtype=float) @ self.coefficients + self.intercept

    def predict(self, predictors):
        """Predict y for a table of predictors (columns matched by name)."""
        X_df = check_feature_matrix(predictors, name='predictors')
        match_features(X_df.columns, self.predictor_names)
        y_hat = self.predict_values(X_df[list(self.predictor_names)].to_numpy())
        return pd.Series(y_hat, index=X_df.index, name=self.target_name)


def _as_target(target, index):
    """Target as a float vector aligned with the predictors, plus its name."""
    if isinstance(target, pd.Series):
        name = str(target.name) if target.name is not None else 'y'
        if not target.index.equals(index):
            if len(target) != len(index) or not target.index.isin(index).all():
                raise InvalidFeatureMatrixError(
                    "target index does not line up with the predictors"
                )
            target = target.reindex(index)
        y = target.to_numpy(dtype=float)
    else:
        name = 'y'
        y = np.asarray(target, dtype=float).ravel()

    if len(y) != len(index):
        raise InvalidFeatureMatrixError(
            f"target has {len(y)} values but predictors have {len(index)} rows"
        )
    if not np.isfinite(y).all():
        raise InvalidFeatureMatrixError("target has missing or non-finite values")
    return y, name
