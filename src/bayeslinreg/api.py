# src/bayeslinreg/api.py
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from bayeslinreg.config import EstimatorConfig
from bayeslinreg.models.blr import BayesianLinearRegression

__all__ = ["BayesianLinearRegression", "EstimatorConfig", "__version__"]

try:
    __version__ = version("bayeslinreg")
except PackageNotFoundError:  # editable/local
    __version__ = "0.0.0"
