"""
Configuration for the tree growth engine.

A GrowthConfig is frozen: it is read-only for the whole generation run.
Settings can be loaded from / saved to JSON, missing fields fall back to defaults.
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Tuple, Optional, Literal
from pathlib import Path
import json

import numpy as np

FadePolicy = Literal['superellipse', 'power_law']
DrawMode = Literal['pretty', 'debug']

FADE_POLICIES = ('superellipse', 'power_law')
DRAW_MODES = ('pretty', 'debug')


@dataclass(frozen=True)
class ColorPalette:
    leaf: str = 'limegreen'
    new_branch: str = 'limegreen'
    old_branch: str = 'saddlebrown'
    alive: str = 'royalblue'
    dead: str = 'crimson'
    attractor: str = 'black'


@dataclass(frozen=True)
class GrowthConfig:
    # ==================== GROWTH ====================
    attraction_radius: float = 20.0
    kill_distance: float = 13.0
    growth_step: float = 10.0
    node_min_dist: float = 8.0
    width: float = 500.0
    height: float = 500.0
    max_children: int = 3
    max_depth: int = 5000
    num_points: int = 10_000
    min_y_growth: float = 0.0
    parent_dir_factor: float = 0.1  # 0 = follow attractors, 1 = follow parent
    root_pos: Optional[Tuple[float, float]] = None

    # ==================== PRUNING / WEIGHT ====================
    weight_display_pow: float = 0.35
    prune_pow: float = 0.35
    prune_size_ratio: float = 0.2

    # Depth-axis random walk for the pseudo-3D offset
    node_depth_change: float = 1.0
    node_depth_max: int = 5

    # ==================== DENSITY FIELD ====================
    noise_octaves: int = 3
    noise_persistence: float = 0.5
    noise_frequency: float = 0.003
    fade: FadePolicy = 'superellipse'
    fade_edge_pow: float = 3.5
    fade_start: float = 0.8   # fraction of the half-extent where fading begins
    fade_exponent: float = 1.5

    # ==================== CONTROLLER ====================
    min_growth_iterations: int = 5
    min_node_count: int = 5
    max_regenerations: int = 100
    max_iterations: int = 800

    # ==================== RENDERING (read-only for renderers) ====================
    leaf_max_width: float = 3.0    # max branch radius that still carries leaves
    sprout_max_width: float = 3.5  # max branch radius drawn as a green sprout
    leaf_size: float = 25.0
    colors: ColorPalette = field(default_factory=ColorPalette)
    draw_mode: DrawMode = 'pretty'
    animate: bool = False
    show_attractors: bool = False

    # ==================== MISC ====================
    output_dir: str = 'outputs/canopy'
    random_seed: Optional[int] = None

    def __post_init__(self):
        for name in ('attraction_radius', 'kill_distance', 'growth_step', 'width', 'height'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.node_min_dist < 0:
            raise ValueError(f"node_min_dist must be non-negative, got {self.node_min_dist}")
        if self.max_children < 1:
            raise ValueError(f"max_children must be at least 1, got {self.max_children}")
        if self.num_points < 0:
            raise ValueError(f"num_points must be non-negative, got {self.num_points}")
        if not 0.0 <= self.parent_dir_factor <= 1.0:
            raise ValueError(f"parent_dir_factor must be in [0, 1], got {self.parent_dir_factor}")
        if self.fade not in FADE_POLICIES:
            raise ValueError(f"Unknown fade policy '{self.fade}', expected one of {FADE_POLICIES}")
        if self.draw_mode not in DRAW_MODES:
            raise ValueError(f"Unknown draw mode '{self.draw_mode}', expected one of {DRAW_MODES}")
        if self.max_regenerations < 1:
            raise ValueError(f"max_regenerations must be at least 1, got {self.max_regenerations}")
        if not 0.0 < self.fade_start < 1.0:
            raise ValueError(f"fade_start must be in (0, 1), got {self.fade_start}")

    @property
    def root_position(self) -> Tuple[float, float]:
        if self.root_pos is not None:
            return tuple(self.root_pos)
        return (self.width / 2.0, self.height / 10.0)

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.random_seed)

    @classmethod
    def from_dict(cls, data: dict) -> 'GrowthConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        data = dict(data)
        if 'colors' in data and isinstance(data['colors'], dict):
            data['colors'] = ColorPalette(**data['colors'])
        if data.get('root_pos') is not None:
            data['root_pos'] = tuple(data['root_pos'])
        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: str = 'config/canopy.json') -> GrowthConfig:
    """Load config from JSON file, with defaults for missing fields."""
    config_path = Path(path)
    if not config_path.exists():
        return GrowthConfig()

    with open(config_path, 'r') as f:
        data = json.load(f)

    return GrowthConfig.from_dict(data)


def save_config(config: GrowthConfig, path: str = 'config/canopy.json'):
    """Save config to JSON file."""
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    print(f"Saved config to {config_path}")
