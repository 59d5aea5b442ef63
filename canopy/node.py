"""
Node class - one branch segment/tip in the tree arena.

Nodes reference their parent by arena index rather than by object, so the arena
stays a flat list and a child's index is always larger than its parent's.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .vector import Vector2D


class Node:
    __slots__ = ('alive', 'position', 'z', 'parent', 'child_count', 'depth', 'weight')

    def __init__(self, position: Vector2D, parent: Optional[int] = None,
                 depth: int = 0, z: float = 0.0):
        self.alive = True
        self.position = position
        self.z = z
        self.parent = parent
        self.child_count = 0
        self.depth = depth
        self.weight = 1  # subtree size, dead descendants included

    @classmethod
    def new_root(cls, position: Vector2D) -> 'Node':
        return cls(position)

    @classmethod
    def new_branch(cls, position: Vector2D, parent_index: int, parent: 'Node',
                   config, rng: np.random.Generator) -> 'Node':
        """
        Create a child proposal of ``parent``.

        The depth-axis value is a bounded random walk from the parent's value.
        """
        z_change = (2.0 * rng.random() - 1.0) * config.node_depth_change
        z = min(max(parent.z + z_change, 0.0), float(config.node_depth_max))
        return cls(position, parent=parent_index, depth=parent.depth + 1, z=z)

    def kill(self):
        self.alive = False

    def __repr__(self) -> str:
        status = "alive" if self.alive else "dead"
        return f"Node({self.position}, parent={self.parent}, w={self.weight}, {status})"


@dataclass(frozen=True)
class NodeView:
    """Read-only record of a node handed to renderers and exporters."""
    index: int
    x: float
    y: float
    z: float
    parent: Optional[int]
    alive: bool
    weight: int
    depth: int
    radius: float
