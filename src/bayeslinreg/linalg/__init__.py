"""
bayeslinreg.linalg

Spectral helpers for the evidence iteration.

Conventions
-----------
- Feature axis: p
- Observation axis: n

Shapes
------
- phi: (p, n)
- t:   (n,)
"""
from .spectral import SpectralCache, build_spectral_cache, inv_via_solve, symmetrize

__all__ = [
    "SpectralCache",
    "build_spectral_cache",
    "inv_via_solve",
    "symmetrize",
]
