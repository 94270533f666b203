# src/bayeslinreg/evidence.py
from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field
from typing import Literal

import torch

from bayeslinreg.exceptions import DegenerateConvergenceWarning, DegenerateDataError, ShapeError
from bayeslinreg.linalg.spectral import SpectralCache

FitStatus = Literal["converged", "max_iter", "degenerate"]

# Initial prior precision: an (almost) infinitely broad prior.
ALPHA_INIT = 1e-6


@dataclass(frozen=True)
class EvidenceResult:
    alpha: float
    beta: float
    gamma: float
    weight_mean: torch.Tensor    # (p,)
    posterior_cov: torch.Tensor  # (p,p)
    n_iter: int
    status: FitStatus
    log_evidence: float
    crit_history: list[float] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.status == "converged"


def log_evidence(
    cache: SpectralCache,
    phi: torch.Tensor,
    t: torch.Tensor,
    *,
    alpha: float,
    beta: float,
) -> float:
    """
    Log marginal likelihood ln p(t | alpha, beta):

      p/2 ln a + n/2 ln b - (b/2 ||t - m'phi||^2 + a/2 m'm) - 1/2 ln|A| - n/2 ln(2 pi)

    with A = a I + b phi phi' and m the posterior mean under (a, b).
    """
    p = cache.p
    n = int(t.shape[0])
    m = cache.weight_mean(alpha, beta)
    resid = t - m @ phi
    ssr = float(torch.dot(resid, resid).item())
    ww = float(torch.dot(m, m).item())
    e_m = 0.5 * beta * ssr + 0.5 * alpha * ww
    return (
        0.5 * p * math.log(alpha)
        + 0.5 * n * math.log(beta)
        - e_m
        - 0.5 * cache.log_det_precision(alpha, beta)
        - 0.5 * n * math.log(2.0 * math.pi)
    )


def maximize_evidence(
    cache: SpectralCache,
    phi: torch.Tensor,
    t: torch.Tensor,
    *,
    max_iter: int,
    tol: float,
) -> EvidenceResult:
    """Fixed-point evidence maximization over (alpha, beta).

    Inputs
    - cache: spectral cache of phi phi'
    - phi:   (p,n)
    - t:     (n,)

    Each iteration computes the posterior mean under the current (alpha, beta),
    then

      gamma = sum_i beta lam_i / (alpha + beta lam_i)
      alpha = gamma / w'w
      beta  = (n - gamma) / ||t - w'phi||^2

    and stops when |d_alpha/alpha + d_beta/beta| <= tol or after max_iter
    iterations. A vanishing w'w or a saturated model (n - gamma <= 0) stops
    early with status "degenerate".

    beta starts at 1 / (0.1 var(t)), or 1 / (0.1 mean(t^2)) when t is
    constant. An identically zero t raises DegenerateDataError.
    """
    if phi.ndim != 2 or t.ndim != 1 or phi.shape[1] != t.shape[0]:
        raise ShapeError(f"Expected phi (p,n) and t (n,). Got phi {tuple(phi.shape)}, t {tuple(t.shape)}")
    if phi.shape[0] != cache.p:
        raise ShapeError(f"phi has p={phi.shape[0]} but cache has p={cache.p}")

    n = int(t.shape[0])
    # A constant nonzero response (uncentered, or n == 1) has no spread; its
    # mean square sets the initial noise scale instead.
    scale_t = float(t.var(correction=0).item())
    if not scale_t > 0.0:
        scale_t = float((t * t).mean().item())
    if not scale_t > 0.0:
        raise DegenerateDataError("Response is identically zero; the noise precision is undefined.")

    tiny = torch.finfo(t.dtype).tiny

    alpha = ALPHA_INIT
    beta = 1.0 / (0.1 * scale_t)
    gamma = 0.0

    status: FitStatus = "max_iter"
    crit_history: list[float] = []
    weight_mean = torch.zeros(cache.p, device=t.device, dtype=t.dtype)
    i = 0

    while i < max_iter:
        old_alpha, old_beta = alpha, beta
        i += 1

        weight_mean = cache.weight_mean(alpha, beta)
        gamma = cache.effective_dof(alpha, beta)

        resid = t - weight_mean @ phi
        ssr = float(torch.dot(resid, resid).item())

        ww = float(torch.dot(weight_mean, weight_mean).item())
        if not math.isfinite(ww) or ww <= tiny or not gamma > 0.0:
            warnings.warn(
                f"Posterior mean collapsed to zero at iteration {i} (w'w={ww:.3e}); stopping early.",
                DegenerateConvergenceWarning,
                stacklevel=3,
            )
            status = "degenerate"
            break

        alpha = gamma / ww

        if n - gamma <= 0.0 or not (math.isfinite(ssr) and ssr > 0.0):
            warnings.warn(
                f"Saturated model at iteration {i} (n - gamma = {n - gamma:.3e}, ssr = {ssr:.3e}); "
                "keeping the previous noise precision and stopping early.",
                DegenerateConvergenceWarning,
                stacklevel=3,
            )
            status = "degenerate"
            break

        beta = (n - gamma) / ssr

        crit = abs((alpha - old_alpha) / alpha + (beta - old_beta) / beta)
        crit_history.append(crit)
        if crit <= tol:
            status = "converged"
            break

    posterior_cov = cache.covariance(alpha, beta)
    lev = log_evidence(cache, phi, t, alpha=alpha, beta=beta)

    return EvidenceResult(
        alpha=alpha,
        beta=beta,
        gamma=gamma,
        weight_mean=weight_mean,
        posterior_cov=posterior_cov,
        n_iter=i,
        status=status,
        log_evidence=lev,
        crit_history=crit_history,
    )
