"""
Persistence and colinear inputs.

This script:
- Builds a design with an exactly duplicated feature (near-singular Gram matrix)
- Trains without preprocessing; a NearSingularWarning is emitted but the fit succeeds
- Saves the estimator, reloads it and checks that predictions match
"""

import tempfile
import warnings
from pathlib import Path

import torch

import bayeslinreg
from bayeslinreg import BayesianLinearRegression, NearSingularWarning


def main() -> None:
    torch.set_default_dtype(torch.float64)
    g = torch.Generator().manual_seed(7)

    base = torch.randn(3, 60, generator=g)
    X = torch.cat([base, base[:1] + base[1:2]], dim=0)  # row 3 = row 0 + row 1
    y = torch.tensor([0.5, -1.0, 2.0, 0.0]) @ X + 0.1 * torch.randn(60, generator=g)

    est = BayesianLinearRegression(center_data=False, scale_data=False)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        est.train(X, y)
    print("near-singular warning:", any(issubclass(w.category, NearSingularWarning) for w in caught))
    print(f"alpha={est.alpha:.4e} beta={est.beta:.4e} gamma={est.gamma:.3f} status={est.fit_.status}")

    with tempfile.TemporaryDirectory() as d:
        path = Path(d) / "blr.pt"
        bayeslinreg.save(est, path)
        est2 = bayeslinreg.load(path)

    diff = torch.max(torch.abs(est.predict(X) - est2.predict(X))).item()
    print(f"max |pred - reloaded pred| = {diff:.3e}")


if __name__ == "__main__":
    main()
