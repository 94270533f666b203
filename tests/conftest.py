import torch
import pytest

@pytest.fixture(scope="session")
def torch_dtype():
    # Use float64 in tests for numerical stability.
    return torch.float64

def _make_problem(p: int, n: int, *, sigma: float = 0.0, seed: int = 4, dtype=torch.float64):
    """
    Seeded linear problem with features as rows.
    Returns:
      X : (p,n) standard normal
      w : (p,)  standard normal
      y : (n,)  w'X + sigma * noise
    """
    g = torch.Generator().manual_seed(seed)
    X = torch.randn((p, n), generator=g, dtype=dtype)
    w = torch.randn((p,), generator=g, dtype=dtype)
    noise = torch.randn((n,), generator=g, dtype=dtype) * sigma
    y = w @ X + noise
    return X, w, y

def _make_colinear(n: int = 40, *, seed: int = 11, dtype=torch.float64):
    """
    Design whose rows are linearly dependent:
      row 2 = row 0 + row 1, row 4 = 2 * row 3
    """
    g = torch.Generator().manual_seed(seed)
    base = torch.randn((3, n), generator=g, dtype=dtype)
    X = torch.stack([base[0], base[1], base[0] + base[1], base[2], 2.0 * base[2]], dim=0)
    y = torch.tensor([1.0, -2.0, 0.5, 0.3, 0.1], dtype=dtype) @ X
    y = y + 0.05 * torch.randn((n,), generator=g, dtype=dtype)
    return X, y

@pytest.fixture(scope="session")
def make_problem():
    return _make_problem

@pytest.fixture(scope="session")
def make_colinear():
    return _make_colinear
