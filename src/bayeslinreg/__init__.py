from bayeslinreg.api import __version__
from bayeslinreg.config import EstimatorConfig
from bayeslinreg.exceptions import (
    BayesLinRegError,
    ConfigError,
    DegenerateConvergenceWarning,
    DegenerateDataError,
    NearSingularWarning,
    NotFittedError,
    NumericalFailureError,
    ShapeError,
)
from bayeslinreg.io import load, save
from bayeslinreg.models.blr import BayesianLinearRegression
from bayeslinreg.results import BayesianFit

__all__ = [
    "BayesianLinearRegression",
    "BayesianFit",
    "EstimatorConfig",
    "save",
    "load",
    "BayesLinRegError",
    "ConfigError",
    "ShapeError",
    "NotFittedError",
    "DegenerateDataError",
    "NumericalFailureError",
    "NearSingularWarning",
    "DegenerateConvergenceWarning",
    "__version__",
]
