# src/bayeslinreg/preprocess.py
from __future__ import annotations

from dataclasses import dataclass

import torch

from bayeslinreg.exceptions import DegenerateDataError, ShapeError


@dataclass(frozen=True)
class Preprocessed:
    phi: torch.Tensor             # (p,n)
    t: torch.Tensor               # (n,)
    feature_offset: torch.Tensor  # (p,)
    feature_scale: torch.Tensor   # (p,)
    response_offset: float


def center_scale(
    X: torch.Tensor,
    y: torch.Tensor,
    *,
    center_data: bool,
    scale_data: bool,
) -> Preprocessed:
    """
    Center and optionally scale training data.

    Inputs
    - X: (p,n)
    - y: (n,)

    Offsets start at their neutral values (0 offsets, unit scales) and are
    only replaced by sample statistics when the matching flag is set. The
    scale is the population std dev (1/n) of each feature.
    """
    if X.ndim != 2 or y.ndim != 1 or X.shape[1] != y.shape[0]:
        raise ShapeError(f"Expected X (p,n) and y (n,). Got X {tuple(X.shape)}, y {tuple(y.shape)}")

    p = X.shape[0]
    feature_offset = torch.zeros(p, device=X.device, dtype=X.dtype)
    feature_scale = torch.ones(p, device=X.device, dtype=X.dtype)
    response_offset = 0.0

    if center_data:
        feature_offset = X.mean(dim=1)
        response_offset = float(y.mean().item())

    if scale_data:
        feature_scale = X.std(dim=1, correction=0)
        zero = torch.nonzero(feature_scale == 0).flatten().tolist()
        if zero:
            raise DegenerateDataError(
                f"Features {zero} have zero standard deviation; cannot scale constant features."
            )

    phi = (X - feature_offset.unsqueeze(-1)) / feature_scale.unsqueeze(-1)
    t = y - response_offset

    return Preprocessed(
        phi=phi,
        t=t,
        feature_offset=feature_offset,
        feature_scale=feature_scale,
        response_offset=response_offset,
    )
