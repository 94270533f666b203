import pytest
import torch

import bayeslinreg
from bayeslinreg import BayesianLinearRegression, NotFittedError, ShapeError
from bayeslinreg.results import BayesianFit


def test_state_dict_round_trip(torch_dtype, make_problem):
    X, _, y = make_problem(5, 60, sigma=0.5, dtype=torch_dtype)
    est = BayesianLinearRegression(center_data=True, scale_data=True, max_iter=80, tol=1e-6)
    est.train(X, y)

    other = BayesianLinearRegression.from_state_dict(est.state_dict())

    assert other.config == est.config
    assert other.alpha == est.alpha and other.beta == est.beta and other.gamma == est.gamma
    assert other.response_offset == est.response_offset
    assert torch.equal(other.posterior_cov, est.posterior_cov)
    assert torch.equal(other.predict(X), est.predict(X))


def test_save_and_load(tmp_path, torch_dtype, make_problem):
    X, _, y = make_problem(4, 50, sigma=0.5, dtype=torch_dtype)
    est = BayesianLinearRegression(center_data=True, scale_data=False)
    est.train(X, y)

    path = tmp_path / "blr.pt"
    bayeslinreg.save(est, path)
    loaded = bayeslinreg.load(path)

    y0, s0 = est.predict_with_std(X)
    y1, s1 = loaded.predict_with_std(X)
    assert torch.equal(y0, y1)
    assert torch.equal(s0, s1)
    assert loaded.fit_.n_iter == est.fit_.n_iter
    assert loaded.fit_.status == est.fit_.status


def test_untrained_state_round_trip():
    est = BayesianLinearRegression(center_data=False, max_iter=7)
    other = BayesianLinearRegression.from_state_dict(est.state_dict())

    assert other.config == est.config
    with pytest.raises(NotFittedError):
        _ = other.alpha


def test_inconsistent_state_rejected(torch_dtype, make_problem):
    X, _, y = make_problem(3, 20, sigma=0.5, dtype=torch_dtype)
    est = BayesianLinearRegression()
    est.train(X, y)

    state = est.fit_.to_state()
    state["posterior_cov"] = torch.eye(4, dtype=torch_dtype)
    with pytest.raises(ShapeError):
        BayesianFit.from_state(state)
