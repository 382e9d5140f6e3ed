"""Ordinary least squares regression with fit diagnostics."""

import logging
from typing import Any, List, Optional, Tuple
import numpy as np
from scipy import stats
from scipy.linalg import solve_triangular

from . import formatting
from .base_models import RegressionResult, RegressionType
from .config import AnalyticsConfig
from .exceptions import ConvergenceError, SingularMatrixError
from .validation import SampleValidator, clamp_probability

logger = logging.getLogger(__name__)

# Scales the median absolute deviation to the standard deviation of a normal sample
MAD_SCALE = 1.4826


class RegressionAnalyzer:
    """
    Linear regression solved through a QR decomposition of the design matrix.

    An intercept column is always prepended; ``coefficients[0]`` is the
    intercept and ``coefficients[i]`` belongs to predictor column ``i - 1``.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize regression analyzer.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()
        self.validator = SampleValidator()

    def multiple_regression(self, y: Any, X: Any) -> RegressionResult:
        """
        Fit y = b0 + b1*x1 + ... + bp*xp by least squares.

        Args:
            y: Response, one value per observation
            X: Predictor matrix with one row per observation; a flat sequence
                is treated as a single predictor

        Returns:
            RegressionResult with coefficients, fit statistics and outliers

        Raises:
            ValidationError: If shapes disagree or observations < predictors + 2
            SingularMatrixError: If the design matrix is rank-deficient
            ConvergenceError: If iterative refinement exceeds max_iterations
        """
        y_arr, X_arr = self.validator.validate_design(y, X)
        n, p = X_arr.shape
        design = np.column_stack([np.ones(n), X_arr])

        coefficients, r_factor = self._solve(design, y_arr)
        predictions = design @ coefficients
        residuals = y_arr - predictions

        ss_res = float(np.sum(residuals ** 2))
        ss_tot = float(np.sum((y_arr - y_arr.mean()) ** 2))
        df_model = p
        df_resid = n - p - 1
        mse = ss_res / df_resid

        if ss_tot > 0:
            r_squared = 1.0 - ss_res / ss_tot
            if ss_res > np.finfo(float).eps * ss_tot:
                f_statistic = ((ss_tot - ss_res) / df_model) / mse
                p_value = clamp_probability(stats.f.sf(f_statistic, df_model, df_resid))
            else:
                # Residuals at rounding level: an exact fit
                f_statistic = float("inf")
                p_value = 0.0
        else:
            # Constant response: nothing to explain
            r_squared = 0.0
            f_statistic = 0.0
            p_value = 1.0

        adjusted_r_squared = 1.0 - (1.0 - r_squared) * (n - 1) / df_resid

        r_inverse = solve_triangular(r_factor, np.eye(r_factor.shape[0]))
        covariance = mse * (r_inverse @ r_inverse.T)
        standard_errors = np.sqrt(np.clip(np.diag(covariance), 0.0, None))

        outliers = self._find_outliers(residuals, mse, y_arr)

        logger.debug(
            "OLS fit: n=%d p=%d r2=%.4f F=%.4g p=%.4g outliers=%s",
            n, p, r_squared, f_statistic, p_value, outliers
        )

        return RegressionResult(
            type=RegressionType.SIMPLE if p == 1 else RegressionType.MULTIPLE,
            coefficients=coefficients.tolist(),
            r_squared=float(r_squared),
            adjusted_r_squared=float(adjusted_r_squared),
            f_statistic=float(f_statistic),
            p_value=p_value,
            is_significant=p_value < self.config.significance_level,
            equation=formatting.format_equation(coefficients),
            outliers=outliers,
            residuals=residuals.tolist(),
            standard_errors=standard_errors.tolist(),
            predictions=predictions.tolist(),
            degrees_of_freedom=(df_model, df_resid)
        )

    def _solve(self, design: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Least squares through QR, refined by repeated residual correction.

        Refinement stops once the correction is below tolerance relative to
        the coefficients, or stops shrinking (floating point floor reached).

        Returns:
            Tuple of (coefficients, R factor)
        """
        q, r = np.linalg.qr(design)

        diagonal = np.abs(np.diag(r))
        if diagonal.min() <= self.config.tolerance * diagonal.max():
            rank = int(np.sum(diagonal > self.config.tolerance * diagonal.max()))
            raise SingularMatrixError(
                f"Design matrix is rank-deficient: rank {rank} < {design.shape[1]} columns "
                "(collinear or constant predictors)"
            )

        coefficients = solve_triangular(r, q.T @ y)
        previous = np.inf

        for iteration in range(1, self.config.max_iterations + 1):
            correction = solve_triangular(r, q.T @ (y - design @ coefficients))
            size = float(np.linalg.norm(correction))
            coefficients = coefficients + correction

            converged = size <= self.config.tolerance * max(1.0, float(np.linalg.norm(coefficients)))
            if converged or size >= previous / 2:
                logger.debug("QR refinement finished after %d iteration(s)", iteration)
                return coefficients, r
            previous = size

        raise ConvergenceError(
            f"Least squares refinement did not converge within {self.config.max_iterations} iterations",
            iterations=self.config.max_iterations
        )

    def _find_outliers(
        self,
        residuals: np.ndarray,
        mse: float,
        y: np.ndarray
    ) -> List[int]:
        """Indices whose standardized residual exceeds the outlier threshold."""
        residual_std = np.sqrt(mse)
        # Perfect fits leave only rounding noise in the residuals
        if residual_std <= self.config.tolerance * max(1.0, float(np.std(y))):
            return []

        scores = np.abs(standardize(residuals, residual_std, self.config.robust_methods, center=0.0))
        return np.flatnonzero(scores > self.config.outlier_threshold).tolist()


def standardize(
    values: np.ndarray,
    fallback_scale: float,
    robust: bool,
    center: Optional[float] = None
) -> np.ndarray:
    """
    Signed z-scores of ``values``.

    Robust mode centres on the median and scales by the normal-consistent
    MAD; a zero MAD (more than half the values identical) falls back to the
    classic centre and ``fallback_scale``.
    """
    if robust:
        median = float(np.median(values))
        mad = float(np.median(np.abs(values - median)))
        if mad > 0:
            return (values - median) / (MAD_SCALE * mad)

    if center is None:
        center = float(values.mean())
    if fallback_scale <= 0:
        return np.zeros_like(values)
    return (values - center) / fallback_scale
