"""Seeded 2D simplex noise and fractal Brownian motion over it."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

_F2 = 0.5 * (math.sqrt(3.0) - 1.0)
_G2 = (3.0 - math.sqrt(3.0)) / 6.0
_GRAD = np.array(
    [[1, 1], [-1, 1], [1, -1], [-1, -1], [1, 0], [-1, 0],
     [1, 0], [-1, 0], [0, 1], [0, -1], [0, 1], [0, -1]],
    dtype=np.float64,
)


def _corner(x: np.ndarray, y: np.ndarray, gradient: np.ndarray) -> np.ndarray:
    falloff = 0.5 - x * x - y * y
    g = _GRAD[gradient]
    dot = g[..., 0] * x + g[..., 1] * y
    return np.where(falloff < 0.0, 0.0, falloff ** 4 * dot)


def _result(values):
    values = np.asarray(values, dtype=np.float64)
    return float(values) if values.ndim == 0 else values


@dataclass
class Simplex:
    """2D simplex noise in roughly [-1, 1], determined by ``seed``."""

    seed: int
    _perm: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        table = np.random.default_rng(self.seed).permutation(256).astype(np.int64)
        self._perm = np.concatenate([table, table])

    def sample(self, point):
        """Noise at ``point`` = (x, y); coordinates may be scalars or arrays."""
        x, y = np.broadcast_arrays(*(np.asarray(c, dtype=np.float64) for c in point))
        skew = (x + y) * _F2
        i = np.floor(x + skew)
        j = np.floor(y + skew)
        unskew = (i + j) * _G2
        x0 = x - (i - unskew)
        y0 = y - (j - unskew)
        i1 = (x0 > y0).astype(np.int64)
        j1 = 1 - i1
        x1 = x0 - i1 + _G2
        y1 = y0 - j1 + _G2
        x2 = x0 - 1.0 + 2.0 * _G2
        y2 = y0 - 1.0 + 2.0 * _G2
        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        perm = self._perm
        g0 = perm[ii + perm[jj]] % 12
        g1 = perm[ii + i1 + perm[jj + j1]] % 12
        g2 = perm[ii + 1 + perm[jj + 1]] % 12
        total = _corner(x0, y0, g0) + _corner(x1, y1, g1) + _corner(x2, y2, g2)
        return _result(70.0 * total)


@dataclass
class Fbm:
    """Sum of octaves of a source, normalised by the total amplitude."""

    source: Simplex
    octaves: int
    frequency: float
    lacunarity: float
    persistence: float

    def __post_init__(self) -> None:
        if self.octaves < 1:
            raise ValueError("fbm needs at least one octave")

    def sample(self, point):
        """Fractal noise at ``point`` = (x, y); coordinates may be arrays."""
        x, y = (np.asarray(c, dtype=np.float64) for c in point)
        total = 0.0
        norm = 0.0
        amplitude = 1.0
        frequency = self.frequency
        for _ in range(self.octaves):
            total = total + amplitude * np.asarray(self.source.sample((x * frequency, y * frequency)))
            norm += amplitude
            frequency *= self.lacunarity
            amplitude *= self.persistence
        return _result(total / norm)


def simplex_fbm(seed: int, octaves: int, frequency: float, lacunarity: float,
                persistence: float) -> Fbm:
    """Fractal Brownian motion over simplex noise with the given seed."""
    return Fbm(Simplex(seed), octaves, frequency, lacunarity, persistence)