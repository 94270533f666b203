import pytest

pd = pytest.importorskip("pandas")

import torch
from bayeslinreg import BayesianLinearRegression


def test_feature_names_from_dataframe():
    n = 12
    X = pd.DataFrame(
        [[float(i) for i in range(n)], [float((i * 7) % 5) for i in range(n)]],
        index=["x1", "x2"],
    )
    y = pd.Series([2.0 * i - 1.0 + 0.1 * ((i * 3) % 4) for i in range(n)])

    est = BayesianLinearRegression()
    est.train(X, y)

    assert est.fit_.feature_names == ["x1", "x2"]
    assert est.weight_mean.shape == (2,)
    assert "x1" in est.summary()

    yhat = est.predict(X)
    assert yhat.shape == (n,)
    assert torch.all(torch.isfinite(yhat))
