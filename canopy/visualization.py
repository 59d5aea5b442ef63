"""
Visualization utilities for grown trees.

Renderers only read the tree (through snapshot() / radius_of()); they never
mutate it. Canvas coordinates have y pointing up.

Draw modes:
- pretty: alive nodes only, colored by branch thickness, with leaf halos
- debug: attraction points, alive nodes in one color and dead nodes in another
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection, PatchCollection
from matplotlib.animation import FuncAnimation
from matplotlib.patches import Circle
from typing import List, Optional, Tuple
from pathlib import Path

from .tree import Tree
from .config import GrowthConfig


def _points_per_unit(ax, config: GrowthConfig) -> float:
    """
    Matplotlib linewidths are in points; canvas radii are in canvas units.
    Measured on the drawn axes box, so call it after the layout is final.
    """
    ax.apply_aspect()
    width_in = ax.get_window_extent().width / ax.figure.dpi
    return width_in * 72.0 / config.width


def _thickness_color(config: GrowthConfig, radius: float) -> str:
    if radius < config.leaf_max_width:
        return config.colors.leaf
    if radius < config.sprout_max_width:
        return config.colors.new_branch
    return config.colors.old_branch


def _pretty_layers(tree: Tree, points_per_unit: float):
    """Segments, colors and widths for the alive part of the tree, plus leaf centers."""
    config = tree.config
    views = tree.snapshot()

    segments, colors, widths, leaves = [], [], [], []
    for view in views:
        if not view.alive:
            continue
        color = _thickness_color(config, view.radius)
        if view.radius < config.leaf_max_width:
            leaves.append((view.x, view.y))
        if view.parent is None:
            continue
        parent = views[view.parent]
        segments.append([(parent.x, parent.y), (view.x, view.y)])
        colors.append(color)
        widths.append(2.0 * view.radius * points_per_unit)

    return segments, colors, widths, leaves


def _debug_layers(tree: Tree):
    config = tree.config
    views = tree.snapshot()

    segments, colors, circles = [], [], []
    for view in views:
        color = config.colors.alive if view.alive else config.colors.dead
        circles.append(Circle((view.x, view.y), view.radius, fill=False,
                              edgecolor=color, linewidth=0.5))
        if view.parent is not None:
            parent = views[view.parent]
            segments.append([(parent.x, parent.y), (view.x, view.y)])
            colors.append(color)

    return segments, colors, circles


def _setup_axes(ax, config: GrowthConfig):
    ax.set_xlim(0, config.width)
    ax.set_ylim(0, config.height)
    ax.set_aspect('equal')
    ax.axis('off')


def visualize_tree(
    tree: Tree,
    mode: Optional[str] = None,
    show_attractors: Optional[bool] = None,
    figsize: Tuple[int, int] = (10, 10),
    save_path: Optional[str] = None,
    show: bool = True
):
    """Visualize the current state of the tree."""
    config = tree.config
    mode = mode or config.draw_mode
    if show_attractors is None:
        show_attractors = config.show_attractors or mode == 'debug'

    fig, ax = plt.subplots(figsize=figsize)
    _setup_axes(ax, config)
    plt.tight_layout()

    if show_attractors and len(tree.points):
        ax.scatter(tree.points[:, 0], tree.points[:, 1],
                   c=config.colors.attractor, s=1, alpha=0.5)

    if mode == 'debug':
        segments, colors, circles = _debug_layers(tree)
        if segments:
            ax.add_collection(LineCollection(segments, colors=colors, linewidths=0.8))
        ax.add_collection(PatchCollection(circles, match_original=True))
    elif mode == 'pretty':
        segments, colors, widths, leaves = _pretty_layers(tree, _points_per_unit(ax, config))
        if leaves:
            halos = [Circle(center, config.leaf_size) for center in leaves]
            ax.add_collection(PatchCollection(halos, facecolor=config.colors.leaf,
                                              edgecolor='none', alpha=0.1))
        if segments:
            ax.add_collection(LineCollection(segments, colors=colors, linewidths=widths,
                                             capstyle='round'))
    else:
        raise ValueError(f"Unknown draw mode '{mode}'")

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor='white', edgecolor='none')
        print(f"Saved visualization to {save_path}")

    if show:
        plt.show()
    return fig, ax


def animate_growth(
    config: GrowthConfig,
    interval: int = 50,
    show_attractors: Optional[bool] = None,
    figsize: Tuple[int, int] = (10, 10),
    save_path: Optional[str] = None,
    frame_skip: int = 1,
    show: bool = True
) -> FuncAnimation:
    """
    Create an animation of the tree growth process (pretty mode).

    frame_skip: Only record every Nth iteration. Higher = faster, fewer frames.
    """
    if show_attractors is None:
        show_attractors = config.show_attractors

    tree = Tree.new_min_growth(config)

    fig, ax = plt.subplots(figsize=figsize)
    _setup_axes(ax, config)

    branch_collection = LineCollection([], capstyle='round')
    ax.add_collection(branch_collection)

    if show_attractors:
        attractor_scatter = ax.scatter([], [], c=config.colors.attractor, s=1, alpha=0.3)

    title = ax.set_title('Iteration: 0')
    fig.tight_layout()
    points_per_unit = _points_per_unit(ax, config)

    frames_data: List[dict] = []

    def collect_frame():
        segments, colors, widths, _ = _pretty_layers(tree, points_per_unit)
        frames_data.append({
            'segments': segments,
            'colors': colors,
            'widths': widths,
            'attractors': tree.points.copy(),
            'iteration': tree.iteration
        })

    collect_frame()

    while tree.grow_step():
        if tree.iteration % frame_skip == 0:
            collect_frame()
        if tree.iteration >= config.max_iterations:
            break

    collect_frame()

    print(f"Collected {len(frames_data)} frames for animation")

    def init():
        branch_collection.set_segments([])
        if show_attractors:
            attractor_scatter.set_offsets(np.empty((0, 2)))
        return [branch_collection]

    def update(frame_idx):
        data = frames_data[frame_idx]
        branch_collection.set_segments(data['segments'])
        if data['segments']:
            branch_collection.set_color(data['colors'])
            branch_collection.set_linewidths(data['widths'])

        if show_attractors:
            if len(data['attractors']) > 0:
                attractor_scatter.set_offsets(data['attractors'])
            else:
                attractor_scatter.set_offsets(np.empty((0, 2)))

        title.set_text(f"Iteration: {data['iteration']}")
        return [branch_collection]

    anim = FuncAnimation(
        fig, update,
        frames=len(frames_data),
        init_func=init,
        interval=interval,
        blit=False,
        repeat=True
    )

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        print(f"Saving animation ({len(frames_data)} frames)...")
        anim.save(save_path, writer='pillow', fps=20)
        print(f"Saved animation to {save_path}")

    if show:
        plt.show()
    return anim


def plot_growth_statistics(tree: Tree, save_path: Optional[str] = None, show: bool = True):
    """Plot statistics about the grown tree."""
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    views = tree.snapshot()

    radii = [v.radius for v in views if v.alive]
    axes[0].hist(radii, bins=30, color='saddlebrown', edgecolor='black')
    axes[0].set_xlabel('Branch Radius')
    axes[0].set_ylabel('Count')
    axes[0].set_title('Alive Branch Thickness')

    depths = np.array([v.depth for v in views], dtype=int)
    alive = np.array([v.alive for v in views], dtype=bool)
    max_depth = int(depths.max()) if len(depths) else 0
    alive_counts = np.bincount(depths[alive], minlength=max_depth + 1)
    dead_counts = np.bincount(depths[~alive], minlength=max_depth + 1)

    axes[1].bar(range(max_depth + 1), alive_counts, color='forestgreen',
                edgecolor='black', label='alive')
    axes[1].bar(range(max_depth + 1), dead_counts, bottom=alive_counts,
                color='firebrick', edgecolor='black', label='pruned')
    axes[1].set_xlabel('Tree Depth')
    axes[1].set_ylabel('Node Count')
    axes[1].set_title('Nodes per Depth Level')
    axes[1].legend()

    plt.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Saved statistics to {save_path}")

    if show:
        plt.show()
    return fig, axes
