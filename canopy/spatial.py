"""
Spatial partitioning for neighbor queries over nodes and attraction points.
Uses scipy's KDTree for O(log n) lookups instead of O(n) brute force.

All radius queries are strict (distance < radius); the KD-tree ball query is
inclusive, so its candidates are filtered once more on squared distance.
"""

import numpy as np
from scipy.spatial import cKDTree
from typing import List, Optional, Union


class SpatialIndex:
    """KD-Tree index over a fixed set of 2D positions."""

    def __init__(self, positions: Optional[np.ndarray] = None):
        self._positions: np.ndarray = np.empty((0, 2))
        self._tree: Optional[cKDTree] = None
        if positions is not None:
            self.rebuild(positions)

    def rebuild(self, positions: np.ndarray):
        self._positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        if len(self._positions) == 0:
            self._tree = None
            return
        self._tree = cKDTree(self._positions)

    def query_radius(self, centers: np.ndarray,
                     radius: Union[float, np.ndarray]) -> List[np.ndarray]:
        """
        For each center, indices of the indexed positions strictly within
        ``radius`` (a scalar or one radius per center).
        """
        centers = np.asarray(centers, dtype=np.float64).reshape(-1, 2)
        radii = np.broadcast_to(np.asarray(radius, dtype=np.float64), (len(centers),))
        if self._tree is None or len(centers) == 0:
            return [np.empty(0, dtype=np.intp) for _ in range(len(centers))]

        candidates = self._tree.query_ball_point(centers, r=radii)

        result = []
        for center, r, idx in zip(centers, radii, candidates):
            idx = np.asarray(idx, dtype=np.intp)
            if len(idx):
                d2 = np.sum((self._positions[idx] - center) ** 2, axis=1)
                idx = np.sort(idx[d2 < r * r])
            result.append(idx)
        return result

    def nearest_distances(self, queries: np.ndarray) -> np.ndarray:
        """Distance from each query to its nearest indexed position."""
        queries = np.asarray(queries, dtype=np.float64).reshape(-1, 2)
        if self._tree is None:
            return np.full(len(queries), np.inf)
        if len(queries) == 0:
            return np.empty(0)
        distances, _ = self._tree.query(queries)
        return np.asarray(distances, dtype=np.float64)

    def any_within(self, point, radius: float) -> bool:
        if self._tree is None:
            return False
        return len(self.query_radius(np.asarray(point).reshape(1, 2), radius)[0]) > 0
