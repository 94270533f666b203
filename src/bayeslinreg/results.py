# src/bayeslinreg/results.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

import scipy.stats as st
import torch

from bayeslinreg.exceptions import ShapeError
from bayeslinreg.typing import as_query


def _fmt(x: float, digits: int = 4) -> str:
    """Format a float in fixed or scientific notation depending on magnitude."""
    if x != 0.0 and (abs(x) >= 1e5 or abs(x) < 10.0 ** (-digits)):
        return f"{x:.{digits}e}"
    return f"{x:.{digits}f}"


@dataclass(frozen=True)
class BayesianFit:
    """
    Fitted state of a Bayesian linear regression.

    Preprocessing parameters map raw query columns into the space where
    weight_mean lives:  x' = (x - feature_offset) / feature_scale.
    """

    # Preprocessing parameters
    feature_offset: torch.Tensor  # (p,)
    feature_scale: torch.Tensor   # (p,)
    response_offset: float

    # Posterior state
    alpha: float
    beta: float
    gamma: float
    weight_mean: torch.Tensor     # (p,)
    posterior_cov: torch.Tensor   # (p,p)

    # Diagnostics
    n_samples: int = 0
    n_iter: int = 0
    status: str = "converged"
    log_evidence: float = float("nan")
    rmse: float = float("nan")
    crit_history: list[float] = field(default_factory=list)
    feature_names: Optional[list[str]] = None

    @property
    def p(self) -> int:
        return int(self.weight_mean.shape[0])

    @property
    def variance(self) -> float:
        """Noise variance 1/beta."""
        return 1.0 / self.beta

    @property
    def converged(self) -> bool:
        return self.status == "converged"

    @property
    def weight_std(self) -> torch.Tensor:
        """Posterior std dev of each weight, (p,)."""
        return torch.sqrt(torch.diagonal(self.posterior_cov).clamp_min(0.0))

    # --------------------------
    # Prediction
    # --------------------------
    def _transform(self, X: Any) -> torch.Tensor:
        Xq = as_query(X, p=self.p, ref=self.weight_mean)
        return (Xq - self.feature_offset.unsqueeze(-1)) / self.feature_scale.unsqueeze(-1)

    def predict(self, X: Any) -> torch.Tensor:
        """
        Point predictions y_hat = w' (X - offset) / scale + response_offset.

        X: (p,m) -> (m,)
        """
        Xs = self._transform(X)
        return self.weight_mean @ Xs + self.response_offset

    def predict_with_std(self, X: Any) -> tuple[torch.Tensor, torch.Tensor]:
        """
        Predictions and predictive std devs.

        sigma^2 = 1/beta + x'^T Sigma x' per column, X: (p,m) -> ((m,), (m,))
        """
        Xs = self._transform(X)
        yhat = self.weight_mean @ Xs + self.response_offset
        quad = (Xs * (self.posterior_cov @ Xs)).sum(dim=0)
        std = torch.sqrt((self.variance + quad).clamp_min(0.0))
        return yhat, std

    def predict_point(self, x: Any) -> float:
        """Prediction for a single column vector x: (p,) or (p,1)."""
        xq = self._single(x)
        return float(self.predict(xq)[0].item())

    def predict_point_with_std(self, x: Any) -> tuple[float, float]:
        xq = self._single(x)
        yhat, std = self.predict_with_std(xq)
        return float(yhat[0].item()), float(std[0].item())

    def _single(self, x: Any) -> torch.Tensor:
        xq = as_query(x, p=self.p, ref=self.weight_mean)
        if xq.shape[1] != 1:
            raise ShapeError(f"Expected a single point (p,) or (p,1). Got {tuple(xq.shape)}")
        return xq

    def predict_interval(
        self,
        X: Any,
        level: float = 0.95,
    ) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        Central predictive interval from the Gaussian predictive distribution.

        Returns (y_hat, lower, upper), each (m,).
        """
        if not 0.0 < level < 1.0:
            raise ValueError(f"level must be in (0,1). Got {level}")
        yhat, std = self.predict_with_std(X)
        crit = float(st.norm.ppf(0.5 + 0.5 * level))
        half = crit * std
        return yhat, yhat - half, yhat + half

    def rmse_on(self, X: Any, y: Any) -> float:
        """sqrt(mean((y - predict(X))^2))."""
        yhat = self.predict(X)
        yt = y if isinstance(y, torch.Tensor) else torch.as_tensor(y)
        yt = yt.to(device=yhat.device, dtype=yhat.dtype)
        if yt.ndim == 2 and yt.shape[0] == 1:
            yt = yt.squeeze(0)
        if yt.shape != yhat.shape:
            raise ShapeError(f"y must be ({yhat.shape[0]},). Got {tuple(yt.shape)}")
        err = yt - yhat
        return float(torch.sqrt((err * err).mean()).item())

    # --------------------------
    # Persistence
    # --------------------------
    def to_state(self) -> dict[str, Any]:
        return {
            "feature_offset": self.feature_offset,
            "feature_scale": self.feature_scale,
            "response_offset": float(self.response_offset),
            "alpha": float(self.alpha),
            "beta": float(self.beta),
            "gamma": float(self.gamma),
            "weight_mean": self.weight_mean,
            "posterior_cov": self.posterior_cov,
            "n_samples": int(self.n_samples),
            "n_iter": int(self.n_iter),
            "status": str(self.status),
            "log_evidence": float(self.log_evidence),
            "rmse": float(self.rmse),
            "crit_history": [float(c) for c in self.crit_history],
            "feature_names": None if self.feature_names is None else list(self.feature_names),
        }

    @staticmethod
    def from_state(state: dict[str, Any]) -> "BayesianFit":
        w = torch.as_tensor(state["weight_mean"])
        p = int(w.shape[0]) if w.ndim == 1 else -1
        cov = torch.as_tensor(state["posterior_cov"], dtype=w.dtype, device=w.device)
        offset = torch.as_tensor(state["feature_offset"], dtype=w.dtype, device=w.device)
        scale = torch.as_tensor(state["feature_scale"], dtype=w.dtype, device=w.device)
        if p < 0 or tuple(cov.shape) != (p, p) or tuple(offset.shape) != (p,) or tuple(scale.shape) != (p,):
            raise ShapeError(
                "Inconsistent state shapes: "
                f"weight_mean {tuple(w.shape)}, posterior_cov {tuple(cov.shape)}, "
                f"feature_offset {tuple(offset.shape)}, feature_scale {tuple(scale.shape)}"
            )
        return BayesianFit(
            feature_offset=offset,
            feature_scale=scale,
            response_offset=float(state["response_offset"]),
            alpha=float(state["alpha"]),
            beta=float(state["beta"]),
            gamma=float(state["gamma"]),
            weight_mean=w,
            posterior_cov=cov,
            n_samples=int(state.get("n_samples", 0)),
            n_iter=int(state.get("n_iter", 0)),
            status=str(state.get("status", "converged")),
            log_evidence=float(state.get("log_evidence", float("nan"))),
            rmse=float(state.get("rmse", float("nan"))),
            crit_history=[float(c) for c in state.get("crit_history", [])],
            feature_names=state.get("feature_names"),
        )

    # --------------------------
    # Summary
    # --------------------------
    def summary(
        self,
        feature_names: Optional[Sequence[str]] = None,
        digits: int = 4,
        level: float = 0.95,
    ) -> str:
        """
        Plain-text summary of the fit.

        Header: hyperparameters (alpha, beta, gamma), noise variance, log
        evidence, RMSE and convergence info.

        Weight table (standardized feature space):
          - mean    : posterior mean
          - std     : posterior std dev sqrt(diag(Sigma))
          - [lo, hi]: central posterior credible interval at `level`
        """
        if not 0.0 < level < 1.0:
            raise ValueError(f"level must be in (0,1). Got {level}")

        width = 78
        line = "=" * width
        dash = "-" * width

        if feature_names is None:
            if self.feature_names is not None:
                feature_names = self.feature_names
            else:
                feature_names = [f"w[{j}]" for j in range(self.p)]
        if len(feature_names) != self.p:
            raise ValueError(f"feature_names must have length p={self.p}. Got {len(feature_names)}")

        now = datetime.now().strftime("%a, %d %b %Y  %H:%M:%S")
        crit = float(st.norm.ppf(0.5 + 0.5 * level))

        left = [
            ("Model:", "Bayesian linear regression"),
            ("Date:", now),
            ("No. observations:", str(self.n_samples)),
            ("No. features:", str(self.p)),
            ("Iterations:", str(self.n_iter)),
            ("Status:", self.status),
        ]
        right = [
            ("alpha:", _fmt(self.alpha, digits)),
            ("beta:", _fmt(self.beta, digits)),
            ("gamma:", _fmt(self.gamma, digits)),
            ("Noise variance:", _fmt(self.variance, digits)),
            ("Log evidence:", _fmt(self.log_evidence, digits) if math.isfinite(self.log_evidence) else "n/a"),
            ("RMSE:", _fmt(self.rmse, digits) if math.isfinite(self.rmse) else "n/a"),
        ]

        out = [line, "Bayesian Linear Regression Results".center(width), line]
        for (lk, lv), (rk, rv) in zip(left, right):
            out.append(f"{lk:<20}{lv:>18}  {rk:<18}{rv:>18}")
        out.append(dash)

        q_lo = f"[{(1.0 - level) / 2.0:.3f}"
        q_hi = f"{(1.0 + level) / 2.0:.3f}]"
        name_w = max(12, max(len(str(nm)) for nm in feature_names) + 2)
        out.append(f"{'':<{name_w}}{'mean':>14}{'std':>14}{q_lo:>14}{q_hi:>14}")
        out.append(dash)

        mean = self.weight_mean.detach().cpu()
        std = self.weight_std.detach().cpu()
        for j, nm in enumerate(feature_names):
            m = float(mean[j].item())
            s = float(std[j].item())
            out.append(
                f"{str(nm):<{name_w}}{_fmt(m, digits):>14}{_fmt(s, digits):>14}"
                f"{_fmt(m - crit * s, digits):>14}{_fmt(m + crit * s, digits):>14}"
            )
        out.append(line)
        return "\n".join(out)
