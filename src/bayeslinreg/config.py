from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bayeslinreg.exceptions import ConfigError


@dataclass(frozen=True)
class EstimatorConfig:
    """Options of BayesianLinearRegression.

    - center_data : subtract per-feature means from X and the mean from y
    - scale_data  : divide centered features by their population std dev
    - max_iter    : cap on evidence iterations (>= 1)
    - tol         : stop when the relative change of alpha and beta is <= tol
    """

    center_data: bool = True
    scale_data: bool = False
    max_iter: int = 50
    tol: float = 1e-4

    def __post_init__(self) -> None:
        if not isinstance(self.center_data, bool) or not isinstance(self.scale_data, bool):
            raise ConfigError("center_data and scale_data must be bool")
        if isinstance(self.max_iter, bool) or not isinstance(self.max_iter, int):
            raise ConfigError(f"max_iter must be an int. Got {type(self.max_iter).__name__}")
        if self.max_iter < 1:
            raise ConfigError(f"max_iter must be >= 1. Got {self.max_iter}")
        if not self.tol > 0.0:
            raise ConfigError(f"tol must be > 0. Got {self.tol}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "center_data": bool(self.center_data),
            "scale_data": bool(self.scale_data),
            "max_iter": int(self.max_iter),
            "tol": float(self.tol),
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "EstimatorConfig":
        unknown = set(d) - {"center_data", "scale_data", "max_iter", "tol"}
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return EstimatorConfig(**d)
