from bayeslinreg.models.blr import BayesianLinearRegression

__all__ = ["BayesianLinearRegression"]
