"""Input validation for analytics samples."""

from typing import Any, Tuple
import numpy as np
import pandas as pd

from .exceptions import ValidationError


class SampleValidator:
    """Coerces caller input into float arrays and enforces size constraints."""

    def validate_sample(
        self,
        values: Any,
        name: str = "sample",
        min_size: int = 1
    ) -> np.ndarray:
        """
        Validate a one-dimensional numeric sample.

        Args:
            values: Sequence, numpy array or pandas Series of numbers
            name: Name used in error messages
            min_size: Minimum number of observations

        Returns:
            1-D float array

        Raises:
            ValidationError: If the sample is not numeric, not finite or too small
        """
        if values is None:
            raise ValidationError(f"{name} is required")

        if isinstance(values, pd.Series):
            values = values.to_numpy()

        try:
            arr = np.asarray(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"{name} must contain only numbers: {e}") from e

        if arr.ndim != 1:
            raise ValidationError(f"{name} must be one-dimensional, got shape {arr.shape}")

        if not np.all(np.isfinite(arr)):
            bad = np.flatnonzero(~np.isfinite(arr)).tolist()
            raise ValidationError(f"{name} contains non-finite values at indices {bad}")

        if arr.size < min_size:
            raise ValidationError(
                f"{name} too small: {arr.size} observations (need {min_size})"
            )

        return arr

    def validate_paired(
        self,
        x: Any,
        y: Any,
        min_size: int = 1,
        names: Tuple[str, str] = ("x", "y")
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Validate two samples that must align element by element.

        Raises:
            ValidationError: If either sample is invalid or lengths differ
        """
        x_arr = self.validate_sample(x, names[0], min_size)
        y_arr = self.validate_sample(y, names[1], min_size)

        if x_arr.size != y_arr.size:
            raise ValidationError(
                f"{names[0]} and {names[1]} must have the same length "
                f"({x_arr.size} != {y_arr.size})"
            )

        return x_arr, y_arr

    def validate_design(
        self,
        y: Any,
        X: Any
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Validate a response vector and a predictor matrix (rows = observations).

        Args:
            y: Response values
            X: Predictor rows; a flat sequence is read as a single predictor

        Returns:
            Tuple of (y, X) with X shaped (n_observations, n_predictors)

        Raises:
            ValidationError: If shapes disagree or there are too few observations
        """
        y_arr = self.validate_sample(y, "y")

        if isinstance(X, pd.DataFrame):
            X = X.to_numpy()

        try:
            X_arr = np.asarray(X, dtype=float)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"X must be a numeric matrix: {e}") from e

        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if X_arr.ndim != 2 or X_arr.shape[1] == 0:
            raise ValidationError(f"X must be a 2-D matrix with at least one column, got shape {X_arr.shape}")

        if not np.all(np.isfinite(X_arr)):
            raise ValidationError("X contains non-finite values")

        if X_arr.shape[0] != y_arr.size:
            raise ValidationError(
                f"X has {X_arr.shape[0]} rows but y has {y_arr.size} observations"
            )

        # intercept + predictors, plus at least one residual degree of freedom
        min_required = X_arr.shape[1] + 2
        if y_arr.size < min_required:
            raise ValidationError(
                f"Insufficient observations for regression: {y_arr.size} obs, "
                f"{X_arr.shape[1]} predictors (need {min_required})"
            )

        return y_arr, X_arr

    def validate_probability(self, value: float, name: str) -> float:
        """Validate a probability strictly between 0 and 1."""
        if not np.isfinite(value) or not 0 < value < 1:
            raise ValidationError(f"{name} must be between 0 and 1, got {value}")
        return float(value)


def clamp_probability(value: float) -> float:
    """Keep a probability inside [0, 1] against floating point drift."""
    return float(min(1.0, max(0.0, value)))
