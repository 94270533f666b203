"""
Basic example: fit a Bayesian linear regression and inspect the predictive
distribution.

This script:
- Generates a noisy linear problem with features as rows
- Trains the estimator with centering and scaling
- Reports hyperparameters and 95% predictive intervals on new points
"""

import torch

from bayeslinreg import BayesianLinearRegression


def main() -> None:
    torch.set_default_dtype(torch.float64)
    torch.manual_seed(0)

    # -----------------------------
    # Design
    # -----------------------------
    p, n = 5, 120
    X = 3.0 + 2.0 * torch.randn(p, n)
    w_true = torch.tensor([1.0, -0.5, 0.0, 0.25, 2.0])
    y = w_true @ X + 0.3 * torch.randn(n)

    # -----------------------------
    # Fit
    # -----------------------------
    est = BayesianLinearRegression(center_data=True, scale_data=True, max_iter=100, tol=1e-6)
    rmse = est.train(X, y)

    print(est.summary())
    print(f"train RMSE      : {rmse:.4f}")
    print(f"noise std (est) : {est.variance ** 0.5:.4f}")

    # -----------------------------
    # Predictive intervals
    # -----------------------------
    X_new = 3.0 + 2.0 * torch.randn(p, 4)
    yhat, lo, hi = est.predict_interval(X_new, level=0.95)
    for i in range(X_new.shape[1]):
        print(f"x[{i}]: {yhat[i].item():8.3f}  [{lo[i].item():8.3f}, {hi[i].item():8.3f}]")


if __name__ == "__main__":
    main()
