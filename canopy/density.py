"""
Density field and discrete sampler for attraction point placement.

The density at each canvas cell is the absolute value of multi-octave noise,
shaped by a fade policy that suppresses points near the canvas edges.
Points are drawn with probability proportional to density.

Fade policies:
- superellipse: sine-eased falloff over a superellipse distance
- power_law: inverse-distance power falloff with a hard cutoff at the edge
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image

from .noise import PerlinNoise
from .profiling import profile


@dataclass(frozen=True)
class SuperellipseFade:
    """
    1 inside ``fade_start`` of the half-extent, 0 at the half-extent, with a
    sine easing in between. Distance is measured as |dx|^p + |dy|^p.
    """
    edge_pow: float = 3.5
    fade_start: float = 0.8

    def __call__(self, xs: np.ndarray, ys: np.ndarray, width: int, height: int) -> np.ndarray:
        dx = np.abs(xs - width / 2.0)
        dy = np.abs(ys - height / 2.0)

        dist = dx ** self.edge_pow + dy ** self.edge_pow
        fade0 = (0.5 * min(width, height)) ** self.edge_pow
        fade1 = self.fade_start ** self.edge_pow * fade0

        v = np.clip((dist - fade0) / (fade1 - fade0), 0.0, 1.0)
        # sin curve mapping [0, 1] onto [0, 1] with zero slope at both ends
        return (np.sin((v - 0.5) * np.pi) + 1.0) * 0.5


@dataclass(frozen=True)
class PowerLawFade:
    """
    1 inside ``fade_start`` of the half-extent, then (core / d)^exponent,
    and exactly 0 from the half-extent outwards.
    """
    exponent: float = 1.5
    fade_start: float = 0.8

    def __call__(self, xs: np.ndarray, ys: np.ndarray, width: int, height: int) -> np.ndarray:
        d = np.hypot(xs - width / 2.0, ys - height / 2.0)
        half = 0.5 * min(width, height)
        core = self.fade_start * half

        value = np.minimum(1.0, ((core + 1.0) / (d + 1.0)) ** self.exponent)
        value[d >= half] = 0.0
        return value


def make_fade(config):
    """Build the fade policy named by ``config.fade``."""
    if config.fade == 'superellipse':
        return SuperellipseFade(edge_pow=config.fade_edge_pow, fade_start=config.fade_start)
    if config.fade == 'power_law':
        return PowerLawFade(exponent=config.fade_exponent, fade_start=config.fade_start)
    raise ValueError(f"Unknown fade policy '{config.fade}'")


class DensitySampler:
    """
    Discrete distribution over canvas cells.

    ``buf[x, y]`` holds the density of cell (x, y), ``rows[x]`` the total of
    column x and ``sum`` the grand total. A sample walks the columns, then the
    cells of the chosen column.
    """

    def __init__(self, density: np.ndarray):
        density = np.asarray(density, dtype=np.float64)
        if density.ndim != 2 or density.size == 0:
            raise ValueError(f"Density map must be a non-empty 2D array, got shape {density.shape}")
        if not np.all(np.isfinite(density)) or np.any(density < 0):
            raise ValueError("Density map must be finite and non-negative")

        self.buf = density
        self.rows = density.sum(axis=1)
        self.sum = float(self.rows.sum())
        self._row_cumsum = np.cumsum(self.rows)
        self._cell_cumsum = np.cumsum(density, axis=1)

    @classmethod
    @profile
    def from_noise(cls, width: int, height: int, fade=None, octaves: int = 3,
                   persistence: float = 0.5, frequency: float = 0.003,
                   rng: np.random.Generator = None) -> 'DensitySampler':
        fade = fade if fade is not None else SuperellipseFade()
        xs, ys = np.meshgrid(np.arange(width, dtype=np.float64),
                             np.arange(height, dtype=np.float64), indexing='ij')

        noise = PerlinNoise(rng)
        values = np.abs(noise.octave_noise(xs, ys, octaves, persistence, frequency))
        return cls(values * fade(xs, ys, width, height))

    @classmethod
    def from_config(cls, config, rng: np.random.Generator = None) -> 'DensitySampler':
        return cls.from_noise(
            int(config.width), int(config.height),
            fade=make_fade(config),
            octaves=config.noise_octaves,
            persistence=config.noise_persistence,
            frequency=config.noise_frequency,
            rng=rng,
        )

    @property
    def width(self) -> int:
        return self.buf.shape[0]

    @property
    def height(self) -> int:
        return self.buf.shape[1]

    def sample(self, u: float) -> Tuple[int, int]:
        """
        Map a uniform value ``u`` in [0, 1) to a cell (x, y).

        Zero-density columns and cells are skipped. Summation drift that runs
        past the end is clamped to the last column / cell.
        """
        if not 0.0 <= u < 1.0:
            raise ValueError(f"Sample value must lie in [0, 1), got {u}")
        if self.sum <= 0.0:
            raise ValueError("Cannot sample from a density map with no mass")

        remainder = u * self.sum

        x = int(np.searchsorted(self._row_cumsum, remainder, side='right'))
        x = min(x, self.width - 1)
        if x > 0:
            remainder -= self._row_cumsum[x - 1]

        cells = self._cell_cumsum[x]
        y = int(np.searchsorted(cells, remainder, side='right'))
        y = min(y, self.height - 1)

        return x, y

    def draw(self, n: int, rng: np.random.Generator = None) -> np.ndarray:
        """Draw ``n`` cell positions as a float (n, 2) array of (x, y)."""
        rng = rng if rng is not None else np.random.default_rng()
        if n == 0:
            return np.empty((0, 2), dtype=np.float64)

        positions = [self.sample(float(u)) for u in rng.random(n)]
        return np.asarray(positions, dtype=np.float64)


def save_density_visualization(sampler: DensitySampler, save_path: str):
    """Save the density map as a grayscale image (y axis pointing up)."""
    density = sampler.buf
    peak = density.max()
    normalized = density / peak if peak > 0 else density

    # buf is indexed [x, y]; images are indexed [row, col] with row 0 on top
    img = (np.flipud(normalized.T) * 255).astype(np.uint8)

    Path(save_path).parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(img).save(save_path)
    print(f"Saved density map to: {save_path}")
