"""Exception hierarchy for the analytics engine."""

import numpy as np


class AnalyticsError(Exception):
    """Base class for all errors raised by the analytics engine."""


class ValidationError(AnalyticsError, ValueError):
    """Input is malformed or too small for the requested analysis."""


class SingularMatrixError(AnalyticsError, np.linalg.LinAlgError):
    """Regression design matrix is rank-deficient within tolerance."""


class ConvergenceError(AnalyticsError, RuntimeError):
    """An iterative routine exceeded max_iterations without converging."""

    def __init__(self, message: str, iterations: int):
        super().__init__(message)
        self.iterations = iterations
