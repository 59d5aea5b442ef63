"""
Tree class - owns the node arena and drives the space colonization cycle.

One cycle (grow_step) runs, in order:
1. every alive node with room for children proposes one child, pulled towards
   the attraction points within attraction_radius and blended with the
   direction it grew from its parent
2. attraction points within kill_distance of any existing node are consumed
3. proposals are accepted one after another; a proposal is rejected by depth,
   by too little vertical growth, or by any node within node_min_dist,
   including nodes accepted earlier in the same cycle
4. small nodes close to much bigger ones are pruned along with their subtrees
5. subtree weights are recomputed from scratch

All proposals of a cycle are computed from the arena as it was before the cycle.
"""

from typing import List, Optional, Callable, Tuple, Union
import numpy as np

from .config import GrowthConfig
from .vector import Vector2D
from .node import Node, NodeView
from .density import DensitySampler
from .spatial import SpatialIndex
from .profiling import profile, profile_block


class Tree:
    def __init__(self, config: GrowthConfig, attraction_points: Optional[np.ndarray] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config
        self.rng = rng if rng is not None else config.make_rng()
        self.nodes: List[Node] = [Node.new_root(Vector2D(*config.root_position))]
        self.growing = True
        self.iteration = 0
        self.regenerations = 0

        if attraction_points is None:
            attraction_points = self._sample_points()
        self.points = np.array(attraction_points, dtype=np.float64).reshape(-1, 2)

    def _sample_points(self) -> np.ndarray:
        if self.config.num_points == 0:
            return np.empty((0, 2))
        sampler = DensitySampler.from_config(self.config, self.rng)
        with profile_block('DensitySampler.draw'):
            return sampler.draw(self.config.num_points, self.rng)

    # ==================== ARENA ====================
    @property
    def root(self) -> Node:
        return self.nodes[0]

    def add_node(self, node: Node) -> int:
        """Append a non-root node and count it as a child of its parent."""
        if node.parent is None:
            raise ValueError("The arena already has a root")
        if not 0 <= node.parent < len(self.nodes):
            raise ValueError(
                f"Parent index {node.parent} must refer to an existing node "
                f"(arena size {len(self.nodes)})"
            )
        self.nodes[node.parent].child_count += 1
        self.nodes.append(node)
        return len(self.nodes) - 1

    def _node_positions(self) -> np.ndarray:
        return np.array([n.position.to_tuple() for n in self.nodes], dtype=np.float64)

    # ==================== GROWTH ====================
    @profile
    def _propose(self) -> List[Node]:
        cfg = self.config
        eligible = [
            idx for idx, node in enumerate(self.nodes)
            if node.alive and node.child_count < cfg.max_children
        ]
        if not eligible or len(self.points) == 0:
            return []

        point_index = SpatialIndex(self.points)
        centers = np.array([self.nodes[idx].position.to_tuple() for idx in eligible])
        nearby = point_index.query_radius(centers, cfg.attraction_radius)

        proposals = []
        for node_idx, center, near in zip(eligible, centers, nearby):
            if len(near) == 0:
                continue
            node = self.nodes[node_idx]

            pull = Vector2D.from_array(np.sum(self.points[near] - center, axis=0))
            avg_dir = pull.normalize() * cfg.growth_step

            # keep growing roughly the way the parent grew
            if node.parent is not None:
                prev_dir = node.position - self.nodes[node.parent].position
            else:
                prev_dir = Vector2D(0.0, cfg.growth_step)
            delta = avg_dir.lerp(prev_dir, cfg.parent_dir_factor)

            proposals.append(
                Node.new_branch(node.position + delta, node_idx, node, cfg, self.rng)
            )
        return proposals

    @profile
    def _consume_points(self, node_index: SpatialIndex) -> int:
        if len(self.points) == 0:
            return 0
        distances = node_index.nearest_distances(self.points)
        keep = distances >= self.config.kill_distance
        consumed = int(len(self.points) - np.count_nonzero(keep))
        self.points = self.points[keep]
        return consumed

    @profile
    def _accept(self, proposals: List[Node], node_index: SpatialIndex) -> int:
        cfg = self.config
        min_dist_sq = cfg.node_min_dist ** 2
        accepted_positions = []

        for proposal in proposals:
            parent = self.nodes[proposal.parent]
            if proposal.depth > cfg.max_depth:
                continue
            if proposal.position.y - parent.position.y < cfg.min_y_growth:
                continue

            pos = proposal.position.to_array()
            if node_index.any_within(pos, cfg.node_min_dist):
                continue
            if accepted_positions:
                d2 = np.sum((np.asarray(accepted_positions) - pos) ** 2, axis=1)
                if np.any(d2 < min_dist_sq):
                    continue

            self.add_node(proposal)
            accepted_positions.append(pos)

        return len(accepted_positions)

    @profile
    def grow_step(self) -> bool:
        """
        Perform one growth cycle (grow, prune, reweight).
        Returns True if any node was added. Once a cycle adds nothing the tree
        stops growing and further calls do nothing.
        """
        if not self.growing:
            return False

        node_index = SpatialIndex(self._node_positions())
        proposals = self._propose()
        self._consume_points(node_index)
        accepted = self._accept(proposals, node_index)
        self.growing = accepted > 0

        self.prune()
        self.recalculate_weight()
        self.iteration += 1

        return self.growing

    # ==================== PRUNING ====================
    @profile
    def prune(self) -> List[int]:
        """
        Kill nodes that are much lighter than a nearby node, plus everything
        below them. A node is dominated by ``conflict`` when

            node.weight < prune_size_ratio * conflict.weight
            distance(node, conflict) < conflict.weight ** prune_pow

        Decisions use the weights from the last recalculation and are applied
        only after the whole pass. Returns the indices killed by this pass.
        """
        cfg = self.config
        n = len(self.nodes)
        positions = self._node_positions()
        weights = np.array([node.weight for node in self.nodes], dtype=np.float64)
        thresholds = cfg.prune_size_ratio * weights
        doomed = np.zeros(n, dtype=bool)

        # only nodes heavy enough to dominate someone need a neighbor query
        conflicts = np.nonzero(thresholds > weights.min())[0]
        if len(conflicts):
            index = SpatialIndex(positions)
            radii = weights[conflicts] ** cfg.prune_pow
            nearby = index.query_radius(positions[conflicts], radii)
            for conflict, near in zip(conflicts, nearby):
                doomed[near[weights[near] < thresholds[conflict]]] = True

        # parents precede children, so one forward pass covers whole chains
        for idx in range(n):
            parent = self.nodes[idx].parent
            if parent is not None and (doomed[parent] or not self.nodes[parent].alive):
                doomed[idx] = True

        killed = []
        for idx in np.nonzero(doomed)[0]:
            node = self.nodes[idx]
            if node.alive:
                node.kill()
                killed.append(int(idx))
        return killed

    # ==================== WEIGHT ====================
    @profile
    def recalculate_weight(self):
        """
        weight = 1 + sum of children's weights, dead children included.
        Weight drives branch thickness, so a pruned subtree still thickens
        the branch it hangs from.
        """
        for node in self.nodes:
            node.weight = 1

        for node in reversed(self.nodes):
            if node.parent is not None:
                self.nodes[node.parent].weight += node.weight

    # ==================== CONTROLLER ====================
    def grow(self, max_iterations: Optional[int] = None,
             callback: Optional[Callable[['Tree', int], None]] = None) -> int:
        """
        Run growth cycles until the tree stagnates or ``max_iterations``
        further cycles have run. Optional callback is called after each
        productive cycle with (tree, iteration). Returns the total number
        of iterations.
        """
        if max_iterations is None:
            max_iterations = self.config.max_iterations

        print(f"Starting growth with {len(self.points)} attraction points...")

        start = self.iteration
        while self.iteration - start < max_iterations:
            if not self.grow_step():
                break

            if callback:
                callback(self, self.iteration)

            if self.iteration % 50 == 0:
                print(f"  Iteration {self.iteration}: {len(self.nodes)} nodes "
                      f"({len(self.alive_nodes)} alive), "
                      f"{len(self.points)} attraction points remaining")

        if not self.growing:
            print("Growth stopped: last cycle accepted no new nodes")
        print(f"Growth complete after {self.iteration} iterations")
        print(f"  Final nodes: {len(self.nodes)} ({len(self.alive_nodes)} alive)")
        print(f"  Remaining attraction points: {len(self.points)}")

        return self.iteration

    @classmethod
    def new_min_growth(cls, config: GrowthConfig, iterations: Optional[int] = None,
                       min_nodes: Optional[int] = None,
                       rng: Optional[np.random.Generator] = None) -> 'Tree':
        """
        Build a tree and run ``iterations`` cycles; start over with a fresh
        set of attraction points while it has fewer than ``min_nodes`` nodes.
        """
        if iterations is None:
            iterations = config.min_growth_iterations
        if min_nodes is None:
            min_nodes = config.min_node_count
        rng = rng if rng is not None else config.make_rng()

        tree = None
        for attempt in range(config.max_regenerations):
            tree = cls(config, rng=rng)
            tree.regenerations = attempt
            for _ in range(iterations):
                tree.grow_step()

            if len(tree.nodes) >= min_nodes:
                if attempt:
                    print(f"Regenerated tree {attempt} time(s) to reach {min_nodes} nodes")
                return tree

            print(f"  Only {len(tree.nodes)} nodes after {iterations} iterations, regenerating...")

        print(f"Warning: no tree reached {min_nodes} nodes in "
              f"{config.max_regenerations} attempts, keeping the last one")
        return tree

    # ==================== READ-ONLY VIEWS ====================
    def radius_of(self, node: Union[Node, NodeView]) -> float:
        return 0.5 + node.weight ** self.config.weight_display_pow

    def snapshot(self) -> Tuple[NodeView, ...]:
        return tuple(
            NodeView(
                index=idx,
                x=node.position.x,
                y=node.position.y,
                z=node.z,
                parent=node.parent,
                alive=node.alive,
                weight=node.weight,
                depth=node.depth,
                radius=self.radius_of(node),
            )
            for idx, node in enumerate(self.nodes)
        )

    @property
    def alive_nodes(self) -> List[Node]:
        return [n for n in self.nodes if n.alive]

    def get_segments(self, alive_only: bool = False) -> List[tuple]:
        """Return parent->node segments as ((x1,y1), (x2,y2)) tuples for drawing."""
        return [
            (self.nodes[n.parent].position.to_tuple(), n.position.to_tuple())
            for n in self.nodes
            if n.parent is not None and (n.alive or not alive_only)
        ]
