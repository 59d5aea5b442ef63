"""
Space colonization growth of 2D branching trees.

Attraction points are drawn from a noise-shaped density field; branches grow
towards them, overgrown side branches are pruned, and subtree weights give each
branch its thickness.
"""

from .config import GrowthConfig, ColorPalette, load_config, save_config
from .density import DensitySampler, SuperellipseFade, PowerLawFade, make_fade
from .node import Node, NodeView
from .tree import Tree
from .exporters import export_tree_data, load_tree_data
from .visualization import visualize_tree, animate_growth, plot_growth_statistics

__all__ = [
    'GrowthConfig',
    'ColorPalette',
    'load_config',
    'save_config',
    'DensitySampler',
    'SuperellipseFade',
    'PowerLawFade',
    'make_fade',
    'Node',
    'NodeView',
    'Tree',
    'export_tree_data',
    'load_tree_data',
    'visualize_tree',
    'animate_growth',
    'plot_growth_statistics'
]
