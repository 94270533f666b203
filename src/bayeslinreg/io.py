# src/bayeslinreg/io.py
from __future__ import annotations

import os
from typing import Union

import torch

from bayeslinreg.models.blr import BayesianLinearRegression

PathLike = Union[str, "os.PathLike[str]"]


def save(estimator: BayesianLinearRegression, path: PathLike) -> None:
    """Write estimator.state_dict() with torch.save."""
    torch.save(estimator.state_dict(), path)


def load(path: PathLike, *, map_location: Union[str, torch.device, None] = None) -> BayesianLinearRegression:
    """Rebuild an estimator written by save()."""
    state = torch.load(path, map_location=map_location, weights_only=True)
    return BayesianLinearRegression.from_state_dict(state)
