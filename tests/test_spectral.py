import pytest
import torch

from bayeslinreg.exceptions import NearSingularWarning, ShapeError
from bayeslinreg.linalg import build_spectral_cache, symmetrize


def test_cache_reconstructs_gram(torch_dtype, make_problem):
    X, _, y = make_problem(6, 40, sigma=0.3, dtype=torch_dtype)
    cache = build_spectral_cache(X, y)

    G = X @ X.T
    G_rec = cache.eig_vecs @ torch.diag(cache.eig_vals) @ cache.eig_vecs_inv
    assert torch.max(torch.abs(G - G_rec)).item() < 1e-9

    assert torch.all(cache.eig_vals[1:] >= cache.eig_vals[:-1])
    assert torch.all(cache.eig_vals >= 0.0)

    eye = torch.eye(6, dtype=torch_dtype)
    assert torch.max(torch.abs(cache.eig_vecs_inv @ cache.eig_vecs - eye)).item() < 1e-10
    assert torch.max(torch.abs(cache.projected_target - cache.eig_vecs_inv @ (X @ y))).item() < 1e-9


def test_helpers_match_direct_formulas(torch_dtype, make_problem):
    X, _, y = make_problem(5, 30, sigma=0.5, dtype=torch_dtype)
    cache = build_spectral_cache(X, y)
    alpha, beta = 0.7, 3.0

    A = alpha * torch.eye(5, dtype=torch_dtype) + beta * (X @ X.T)
    S = torch.linalg.inv(A)
    m = beta * S @ (X @ y)

    assert torch.max(torch.abs(cache.covariance(alpha, beta) - S)).item() < 1e-10
    assert torch.max(torch.abs(cache.weight_mean(alpha, beta) - m)).item() < 1e-9
    assert abs(cache.log_det_precision(alpha, beta) - torch.logdet(A).item()) < 1e-8

    lam = torch.linalg.eigvalsh(X @ X.T)
    gamma = (beta * lam / (alpha + beta * lam)).sum().item()
    assert abs(cache.effective_dof(alpha, beta) - gamma) < 1e-10
    assert 0.0 <= cache.effective_dof(alpha, beta) <= 5.0


def test_covariance_is_symmetric(torch_dtype, make_problem):
    X, _, y = make_problem(8, 20, sigma=0.5, dtype=torch_dtype)
    cache = build_spectral_cache(X, y)
    S = cache.covariance(1e-3, 10.0)
    assert torch.equal(S, S.T)
    assert torch.all(torch.linalg.eigvalsh(S) > 0.0)


def test_colinear_rows_warn(torch_dtype, make_colinear):
    X, y = make_colinear(dtype=torch_dtype)
    with pytest.warns(NearSingularWarning):
        cache = build_spectral_cache(X, y)
    assert torch.all(torch.isfinite(cache.eig_vecs_inv))


def test_shape_mismatch_raises(torch_dtype, make_problem):
    X, _, y = make_problem(3, 10, dtype=torch_dtype)
    with pytest.raises(ShapeError):
        build_spectral_cache(X, y[:-1])


def test_symmetrize():
    A = torch.tensor([[1.0, 2.0], [4.0, 3.0]])
    assert torch.equal(symmetrize(A), torch.tensor([[1.0, 3.0], [3.0, 3.0]]))
