from __future__ import annotations


class BayesLinRegError(Exception):
    """Base exception for bayeslinreg."""


class ConfigError(BayesLinRegError, ValueError):
    """Invalid estimator configuration."""


class ShapeError(BayesLinRegError, ValueError):
    """Invalid shape or dimension mismatch."""


class NotFittedError(BayesLinRegError, RuntimeError):
    """Posterior state requested before a successful train()."""


class DegenerateDataError(BayesLinRegError, ValueError):
    """Training data cannot be fitted: constant feature, constant response, NaN/inf."""


class NumericalFailureError(BayesLinRegError, RuntimeError):
    """Eigendecomposition failed or produced non-finite values."""


class NearSingularWarning(RuntimeWarning):
    """Gram matrix is close to singular (colinear features)."""


class DegenerateConvergenceWarning(RuntimeWarning):
    """Evidence iteration stopped early on a degenerate update."""
