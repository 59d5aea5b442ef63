"""
Small 2D vector used for node positions and growth directions.
"""

import numpy as np


class Vector2D:
    __slots__ = ('x', 'y')

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.x = float(x)
        self.y = float(y)

    @classmethod
    def from_array(cls, arr) -> 'Vector2D':
        return cls(arr[0], arr[1])

    def __add__(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Vector2D':
        return Vector2D(self.x * scalar, self.y * scalar)

    def __eq__(self, other: 'Vector2D') -> bool:
        return bool(np.isclose(self.x, other.x) and np.isclose(self.y, other.y))

    def __repr__(self) -> str:
        return f"Vector2D({self.x:.2f}, {self.y:.2f})"

    def normalize(self) -> 'Vector2D':
        # a zero pull stays zero and produces no offset
        length = float(np.hypot(self.x, self.y))
        if length < 1e-10:
            return Vector2D(0.0, 0.0)
        return self * (1.0 / length)

    def lerp(self, other: 'Vector2D', t: float) -> 'Vector2D':
        """t=0 gives self, t=1 gives other."""
        return self + (other - self) * t

    def to_tuple(self) -> tuple:
        return (self.x, self.y)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y])
