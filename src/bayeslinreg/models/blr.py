# src/bayeslinreg/models/blr.py
from __future__ import annotations

import copy as _copy
import dataclasses
from typing import Any, Optional, Union

import torch

from bayeslinreg.config import EstimatorConfig
from bayeslinreg.evidence import maximize_evidence
from bayeslinreg.exceptions import ConfigError, NotFittedError
from bayeslinreg.linalg.spectral import build_spectral_cache
from bayeslinreg.preprocess import center_scale
from bayeslinreg.results import BayesianFit
from bayeslinreg.typing import as_design_xy


class BayesianLinearRegression:
    """Bayesian linear regression with evidence-maximized hyperparameters.

    Model
    - prior:      w ~ N(0, alpha^{-1} I)
    - likelihood: y | X, w ~ N(w' phi, beta^{-1} I)

    Data layout: X is (p,n) with features as rows and samples as columns,
    y is (n,).

    Example
    -------
    >>> est = BayesianLinearRegression(center_data=True, scale_data=True)
    >>> rmse = est.train(X, y)
    >>> yhat, std = est.predict_with_std(X_new)
    """

    def __init__(
        self,
        center_data: bool = True,
        scale_data: bool = False,
        max_iter: int = 50,
        tol: float = 1e-4,
    ) -> None:
        self._config = EstimatorConfig(
            center_data=center_data,
            scale_data=scale_data,
            max_iter=max_iter,
            tol=tol,
        )
        self._fit: Optional[BayesianFit] = None

    @classmethod
    def from_config(cls, config: EstimatorConfig) -> "BayesianLinearRegression":
        if not isinstance(config, EstimatorConfig):
            raise ConfigError(f"config must be an EstimatorConfig. Got {type(config).__name__}")
        return cls(**config.to_dict())

    def __repr__(self) -> str:
        c = self._config
        return (
            f"BayesianLinearRegression(center_data={c.center_data}, scale_data={c.scale_data}, "
            f"max_iter={c.max_iter}, tol={c.tol}, fitted={self.is_fitted})"
        )

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def train(
        self,
        X,
        y,
        *,
        dtype: Optional[torch.dtype] = None,
        device: Optional[Union[str, torch.device]] = None,
    ) -> float:
        """Fit hyperparameters and the weight posterior; return the training RMSE.

        Inputs
        - X: (p,n) or pandas.DataFrame with features as rows
        - y: (n,) or (1,n) or pandas.Series

        Any previous fit is discarded before the new one starts, so a failed
        call leaves the estimator untrained.
        """
        self._fit = None

        X, y, feature_names = as_design_xy(X, y, dtype=dtype, device=device)
        cfg = self._config

        pre = center_scale(X, y, center_data=cfg.center_data, scale_data=cfg.scale_data)
        cache = build_spectral_cache(pre.phi, pre.t)
        ev = maximize_evidence(cache, pre.phi, pre.t, max_iter=cfg.max_iter, tol=cfg.tol)

        fit = BayesianFit(
            feature_offset=pre.feature_offset,
            feature_scale=pre.feature_scale,
            response_offset=pre.response_offset,
            alpha=ev.alpha,
            beta=ev.beta,
            gamma=ev.gamma,
            weight_mean=ev.weight_mean,
            posterior_cov=ev.posterior_cov,
            n_samples=int(X.shape[1]),
            n_iter=ev.n_iter,
            status=ev.status,
            log_evidence=ev.log_evidence,
            crit_history=list(ev.crit_history),
            feature_names=feature_names,
        )
        rmse = fit.rmse_on(X, y)
        self._fit = dataclasses.replace(fit, rmse=rmse)
        return rmse

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def predict(self, X) -> torch.Tensor:
        """X: (p,m) -> y_hat (m,)."""
        return self.fit_.predict(X)

    def predict_with_std(self, X) -> tuple[torch.Tensor, torch.Tensor]:
        """X: (p,m) -> (y_hat (m,), std (m,))."""
        return self.fit_.predict_with_std(X)

    def predict_point(self, x) -> float:
        return self.fit_.predict_point(x)

    def predict_point_with_std(self, x) -> tuple[float, float]:
        return self.fit_.predict_point_with_std(x)

    def predict_interval(self, X, level: float = 0.95) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        return self.fit_.predict_interval(X, level=level)

    def rmse(self, X, y) -> float:
        return self.fit_.rmse_on(X, y)

    def summary(self, **kwargs: Any) -> str:
        return self.fit_.summary(**kwargs)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def config(self) -> EstimatorConfig:
        return self._config

    @property
    def center_data(self) -> bool:
        return self._config.center_data

    @property
    def scale_data(self) -> bool:
        return self._config.scale_data

    @property
    def max_iter(self) -> int:
        return self._config.max_iter

    @property
    def tol(self) -> float:
        return self._config.tol

    @property
    def is_fitted(self) -> bool:
        return self._fit is not None

    @property
    def fit_(self) -> BayesianFit:
        if self._fit is None:
            raise NotFittedError("BayesianLinearRegression is not trained. Call train(X, y) first.")
        return self._fit

    @property
    def alpha(self) -> float:
        return self.fit_.alpha

    @property
    def beta(self) -> float:
        return self.fit_.beta

    @property
    def gamma(self) -> float:
        return self.fit_.gamma

    @property
    def variance(self) -> float:
        """Estimated noise variance 1/beta."""
        return self.fit_.variance

    @property
    def weight_mean(self) -> torch.Tensor:
        return self.fit_.weight_mean

    @property
    def posterior_cov(self) -> torch.Tensor:
        return self.fit_.posterior_cov

    @property
    def feature_offset(self) -> torch.Tensor:
        return self.fit_.feature_offset

    @property
    def feature_scale(self) -> torch.Tensor:
        return self.fit_.feature_scale

    @property
    def response_offset(self) -> float:
        return self.fit_.response_offset

    # ------------------------------------------------------------------
    # Copy / move / persistence
    # ------------------------------------------------------------------
    def copy(self) -> "BayesianLinearRegression":
        """Independent copy: same configuration, cloned fitted state."""
        return _copy.deepcopy(self)

    def __deepcopy__(self, memo: dict) -> "BayesianLinearRegression":
        other = type(self).from_config(self._config)
        if self._fit is not None:
            other._fit = BayesianFit.from_state(_clone_state(self._fit.to_state()))
        return other

    def reset(self) -> None:
        """Drop the fitted state; the configuration is kept."""
        self._fit = None

    def take_fit(self) -> BayesianFit:
        """Hand over the fitted state and leave this estimator untrained."""
        fit = self.fit_
        self._fit = None
        return fit

    def state_dict(self) -> dict[str, Any]:
        """Serializable form: {"config": ..., "fit": ... or None}."""
        return {
            "config": self._config.to_dict(),
            "fit": None if self._fit is None else self._fit.to_state(),
        }

    def load_state_dict(self, state: dict[str, Any]) -> None:
        """Restore configuration and fitted state produced by state_dict()."""
        config = EstimatorConfig.from_dict(dict(state["config"]))
        fit = None if state.get("fit") is None else BayesianFit.from_state(state["fit"])
        self._config = config
        self._fit = fit

    @classmethod
    def from_state_dict(cls, state: dict[str, Any]) -> "BayesianLinearRegression":
        est = cls.from_config(EstimatorConfig.from_dict(dict(state["config"])))
        est.load_state_dict(state)
        return est


def _clone_state(state: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.clone() if isinstance(v, torch.Tensor) else _copy.deepcopy(v)) for k, v in state.items()}
