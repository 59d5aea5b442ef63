"""
2D Perlin gradient noise, vectorized with numpy.

Evaluates at arbitrary float coordinates so the density field can be sampled
directly in canvas space. Single octave values lie roughly in [-1, 1].
"""

import numpy as np


def fade(t):
    # 6t^5 - 15t^4 + 10t^3
    return t * t * t * (t * (t * 6 - 15) + 10)


def lerp(a, b, t):
    return a + t * (b - a)


class PerlinNoise:
    def __init__(self, rng: np.random.Generator = None, table_size: int = 256):
        if table_size & (table_size - 1):
            raise ValueError(f"table_size must be a power of two, got {table_size}")
        rng = rng if rng is not None else np.random.default_rng()

        perm = rng.permutation(table_size)
        self._perm = np.concatenate([perm, perm])
        angles = rng.random(table_size) * 2 * np.pi
        self._gradients = np.stack([np.cos(angles), np.sin(angles)], axis=1)
        self._mask = table_size - 1

    def _corner(self, ix, iy, dx, dy):
        h = self._perm[self._perm[ix] + iy]
        g = self._gradients[h]
        return g[..., 0] * dx + g[..., 1] * dy

    def noise(self, x, y) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        x0 = np.floor(x).astype(np.int64)
        y0 = np.floor(y).astype(np.int64)
        xf = x - x0
        yf = y - y0

        # wrap lattice coordinates onto the permutation table
        xi = x0 & self._mask
        yi = y0 & self._mask

        n00 = self._corner(xi, yi, xf, yf)
        n10 = self._corner(xi + 1, yi, xf - 1, yf)
        n01 = self._corner(xi, yi + 1, xf, yf - 1)
        n11 = self._corner(xi + 1, yi + 1, xf - 1, yf - 1)

        u = fade(xf)
        v = fade(yf)
        nx0 = lerp(n00, n10, u)
        nx1 = lerp(n01, n11, u)
        return lerp(nx0, nx1, v) * np.sqrt(2)

    def octave_noise(self, x, y, octaves: int = 3, persistence: float = 0.5,
                     frequency: float = 1.0) -> np.ndarray:
        """
        Sum of ``octaves`` noise layers, each at double the frequency and
        ``persistence`` times the amplitude of the previous one, normalized by
        the total amplitude.
        """
        if octaves < 1:
            raise ValueError(f"octaves must be at least 1, got {octaves}")

        total = np.zeros(np.broadcast(np.asarray(x), np.asarray(y)).shape)
        amplitude = 1.0
        max_amplitude = 0.0
        for _ in range(octaves):
            total += self.noise(np.multiply(x, frequency), np.multiply(y, frequency)) * amplitude
            max_amplitude += amplitude
            amplitude *= persistence
            frequency *= 2.0
        return total / max_amplitude
