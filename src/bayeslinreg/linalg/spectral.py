from __future__ import annotations

import warnings
from dataclasses import dataclass

import torch

from bayeslinreg.exceptions import NearSingularWarning, NumericalFailureError, ShapeError

# Smallest eigenvalue below this fraction of max(largest, 1) is reported as near-singular.
NEAR_SINGULAR_RTOL = 1e-10


def symmetrize(A: torch.Tensor) -> torch.Tensor:
    return 0.5 * (A + A.transpose(-1, -2))


def inv_via_solve(A: torch.Tensor) -> torch.Tensor:
    """Compute inverse via solve against identity. A: (k,k)."""
    k = A.shape[-1]
    I = torch.eye(k, dtype=A.dtype, device=A.device)
    return torch.linalg.solve(A, I)


@dataclass(frozen=True)
class SpectralCache:
    """
    Eigendecomposition of G = phi phi' plus the projected target.

    With V, lam the eigenvectors/eigenvalues of G:

      (alpha I + beta G)^{-1}             = V diag(1/(alpha + beta lam)) V^{-1}
      (alpha I + beta G)^{-1} beta phi t' = V diag(1/(lam + alpha/beta)) V^{-1} phi t'

    so every quantity the evidence iteration needs is O(p^2) once the cache
    exists.
    """

    eig_vals: torch.Tensor          # (p,) ascending, >= 0
    eig_vecs: torch.Tensor          # (p,p)
    eig_vecs_inv: torch.Tensor      # (p,p)
    projected_target: torch.Tensor  # (p,) = V^{-1} phi t'

    @property
    def p(self) -> int:
        return int(self.eig_vals.shape[0])

    def weight_mean(self, alpha: float, beta: float) -> torch.Tensor:
        """Posterior mean of the weights, (p,)."""
        return self.eig_vecs @ (self.projected_target / (self.eig_vals + alpha / beta))

    def effective_dof(self, alpha: float, beta: float) -> float:
        """gamma = sum_i beta lam_i / (alpha + beta lam_i), in [0,p]."""
        scaled = beta * self.eig_vals
        return float((scaled / (alpha + scaled)).sum().item())

    def covariance(self, alpha: float, beta: float) -> torch.Tensor:
        """Posterior covariance (alpha I + beta G)^{-1}, (p,p), symmetrized."""
        d = 1.0 / (beta * self.eig_vals + alpha)
        S = (self.eig_vecs * d.unsqueeze(0)) @ self.eig_vecs_inv
        return symmetrize(S)

    def log_det_precision(self, alpha: float, beta: float) -> float:
        """log|alpha I + beta G|."""
        return float(torch.log(alpha + beta * self.eig_vals).sum().item())


def build_spectral_cache(phi: torch.Tensor, t: torch.Tensor) -> SpectralCache:
    """
    Inputs
    - phi: (p,n) preprocessed features
    - t:   (n,)  preprocessed responses
    """
    if phi.ndim != 2 or t.ndim != 1 or phi.shape[1] != t.shape[0]:
        raise ShapeError(f"Expected phi (p,n) and t (n,). Got phi {tuple(phi.shape)}, t {tuple(t.shape)}")

    G = symmetrize(phi @ phi.transpose(0, 1))

    try:
        eig_vals, eig_vecs = torch.linalg.eigh(G)
    except RuntimeError as e:
        raise NumericalFailureError(f"Eigendecomposition of the Gram matrix failed: {e}") from e

    if not torch.isfinite(eig_vals).all() or not torch.isfinite(eig_vecs).all():
        raise NumericalFailureError("Eigendecomposition of the Gram matrix produced inf/nan")

    lam_min = float(eig_vals[0].item())
    lam_max = float(eig_vals[-1].item())
    if lam_min <= NEAR_SINGULAR_RTOL * max(lam_max, 1.0):
        warnings.warn(
            f"Gram matrix is near-singular (smallest eigenvalue {lam_min:.3e}, largest {lam_max:.3e}). "
            "Two or more features are (nearly) colinear.",
            NearSingularWarning,
            stacklevel=3,
        )

    # eigh is exact only up to rounding; G is PSD
    eig_vals = eig_vals.clamp_min(0.0)

    try:
        eig_vecs_inv = inv_via_solve(eig_vecs)
    except RuntimeError as e:
        raise NumericalFailureError(f"Eigenvector matrix is not invertible: {e}") from e

    projected_target = eig_vecs_inv @ (phi @ t)

    return SpectralCache(
        eig_vals=eig_vals,
        eig_vecs=eig_vecs,
        eig_vecs_inv=eig_vecs_inv,
        projected_target=projected_target,
    )
