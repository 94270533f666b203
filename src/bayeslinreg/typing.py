# src/bayeslinreg/typing.py
from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np
import torch

from bayeslinreg.exceptions import DegenerateDataError, ShapeError

if TYPE_CHECKING:  # pragma: no cover
    import pandas as pd


ArrayLike = Union[torch.Tensor, np.ndarray, Sequence[Any]]


def _is_pandas_df(x: Any) -> bool:
    try:
        import pandas as pd  # type: ignore
        return isinstance(x, pd.DataFrame)
    except ImportError:
        return False


def _is_pandas_series(x: Any) -> bool:
    try:
        import pandas as pd  # type: ignore
        return isinstance(x, pd.Series)
    except ImportError:
        return False


def as_torch(
    x: Any,
    *,
    dtype: Optional[torch.dtype] = None,
    device: Optional[Union[str, torch.device]] = None,
) -> torch.Tensor:
    """
    Convert common array-likes to a floating torch.Tensor.

    Supports:
    - torch.Tensor
    - numpy.ndarray
    - Python lists/tuples (nested)
    - pandas.DataFrame / pandas.Series (if pandas installed)

    Integer and boolean inputs are promoted to float64 unless dtype is given.
    """
    if _is_pandas_df(x) or _is_pandas_series(x):
        x = x.to_numpy()  # type: ignore[attr-defined]

    t = x if isinstance(x, torch.Tensor) else torch.as_tensor(x)
    if dtype is not None:
        t = t.to(dtype=dtype)
    elif not torch.is_floating_point(t):
        t = t.to(dtype=torch.float64)
    if device is not None:
        t = t.to(device=device)
    return t


def as_design_xy(
    X: Any,
    y: Any,
    *,
    dtype: Optional[torch.dtype] = None,
    device: Optional[Union[str, torch.device]] = None,
) -> Tuple[torch.Tensor, torch.Tensor, Optional[list[str]]]:
    """
    Standardize training inputs to:
      X: (p,n)  features as rows, samples as columns
      y: (n,)

    Accept:
      X: (p,n)
      y: (n,) or (1,n)

    If X is a pandas.DataFrame (rows = features), its index labels are
    returned as feature_names. Otherwise feature_names=None.
    """
    feature_names: Optional[list[str]] = None

    if _is_pandas_df(X):
        feature_names = [str(c) for c in X.index]  # type: ignore[attr-defined]
        X = X.to_numpy()  # type: ignore[attr-defined]

    if _is_pandas_df(y):
        y_np = y.to_numpy()  # type: ignore[attr-defined]
        if y_np.ndim != 2 or y_np.shape[0] != 1:
            raise ShapeError("If y is a DataFrame, it must have exactly one row.")
        y = y_np[0]

    Xt = as_torch(X, dtype=dtype, device=device)
    yt = as_torch(y, dtype=Xt.dtype, device=Xt.device)

    if Xt.ndim != 2:
        raise ShapeError(f"X must be 2D (p,n). Got {tuple(Xt.shape)}")
    if yt.ndim == 2 and yt.shape[0] == 1:
        yt = yt.squeeze(0)
    if yt.ndim != 1:
        raise ShapeError(f"y must be (n,) or (1,n). Got {tuple(yt.shape)}")

    p, n = Xt.shape
    if p < 1 or n < 1:
        raise ShapeError(f"X must have at least one feature and one sample. Got {tuple(Xt.shape)}")
    if yt.shape[0] != n:
        raise ShapeError(f"Sample dims mismatch: X {tuple(Xt.shape)}, y {tuple(yt.shape)}")

    if not torch.isfinite(Xt).all():
        raise DegenerateDataError("X contains inf/nan")
    if not torch.isfinite(yt).all():
        raise DegenerateDataError("y contains inf/nan")

    if feature_names is not None and len(feature_names) != p:
        feature_names = None

    return Xt, yt, feature_names


def as_query(
    X: Any,
    *,
    p: int,
    ref: torch.Tensor,
) -> torch.Tensor:
    """
    Coerce query points to (p,m) on the device/dtype of `ref`.

    A 1D input of length p is treated as a single column.
    """
    if _is_pandas_df(X) or _is_pandas_series(X):
        X = X.to_numpy()  # type: ignore[attr-defined]

    Xq = X if isinstance(X, torch.Tensor) else torch.as_tensor(X)
    Xq = Xq.to(device=ref.device, dtype=ref.dtype)

    if Xq.ndim == 1:
        Xq = Xq.unsqueeze(-1)
    if Xq.ndim != 2:
        raise ShapeError(f"X must be 2D (p,m) or 1D (p,). Got {tuple(Xq.shape)}")
    if Xq.shape[0] != p:
        raise ShapeError(f"X has p={Xq.shape[0]} features but model has p={p}")
    return Xq
