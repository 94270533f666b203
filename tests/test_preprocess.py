import pytest
import torch

from bayeslinreg.exceptions import DegenerateDataError
from bayeslinreg.preprocess import center_scale


def test_neutral_values_when_flags_off(torch_dtype, make_problem):
    X, _, y = make_problem(30, 100, sigma=0.5, dtype=torch_dtype)
    pre = center_scale(X, y, center_data=False, scale_data=False)

    assert torch.sum(pre.feature_offset).item() == 0.0
    assert pre.response_offset == 0.0
    assert torch.sum(pre.feature_scale).item() == 30.0
    assert torch.equal(pre.phi, X)
    assert torch.equal(pre.t, y)


def test_statistics_when_flags_on(torch_dtype, make_problem):
    X, _, y = make_problem(30, 100, sigma=0.5, dtype=torch_dtype)
    pre = center_scale(X, y, center_data=True, scale_data=True)

    assert torch.max(torch.abs(pre.feature_offset - X.mean(dim=1))).item() < 1e-12
    assert torch.max(torch.abs(pre.feature_scale - X.std(dim=1, correction=0))).item() < 1e-12
    assert abs(pre.response_offset - y.mean().item()) < 1e-12

    # phi rows are centered with unit population variance
    assert torch.max(torch.abs(pre.phi.mean(dim=1))).item() < 1e-10
    assert torch.max(torch.abs(pre.phi.var(dim=1, correction=0) - 1.0)).item() < 1e-10
    assert abs(pre.t.mean().item()) < 1e-10


def test_scale_without_center_keeps_zero_offset(torch_dtype, make_problem):
    X, _, y = make_problem(4, 50, sigma=0.5, dtype=torch_dtype)
    pre = center_scale(X + 3.0, y, center_data=False, scale_data=True)

    assert torch.sum(pre.feature_offset).item() == 0.0
    assert torch.max(torch.abs(pre.phi * pre.feature_scale.unsqueeze(-1) - (X + 3.0))).item() < 1e-12


def test_constant_feature_with_scaling_raises(torch_dtype, make_problem):
    X, _, y = make_problem(3, 20, dtype=torch_dtype)
    X[1] = 2.5
    with pytest.raises(DegenerateDataError, match=r"\[1\]"):
        center_scale(X, y, center_data=True, scale_data=True)


def test_constant_feature_without_scaling_is_fine(torch_dtype, make_problem):
    X, _, y = make_problem(3, 20, dtype=torch_dtype)
    X[1] = 2.5
    pre = center_scale(X, y, center_data=True, scale_data=False)
    assert torch.all(pre.phi[1] == 0.0)
