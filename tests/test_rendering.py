import dataclasses
import os
import tempfile
import unittest

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from canopy.config import GrowthConfig
from canopy.density import DensitySampler, save_density_visualization
from canopy.exporters import export_tree_data, load_tree_data
from canopy.tree import Tree
from canopy.visualization import (visualize_tree, plot_growth_statistics, animate_growth,
                                  _points_per_unit, _setup_axes)


def make_tree():
    config = GrowthConfig(width=200, height=200, num_points=0, attraction_radius=20,
                          kill_distance=6, growth_step=5, node_min_dist=4)
    points = np.random.default_rng(2).uniform((40, 25), (160, 190), size=(600, 2))
    tree = Tree(config, attraction_points=points)
    for _ in range(25):
        tree.grow_step()
    return tree


def state_of(tree):
    return [(n.position.to_tuple(), n.alive, n.weight, n.child_count) for n in tree.nodes]


class TestSnapshot(unittest.TestCase):

    def setUp(self):
        self.tree = make_tree()

    def test_snapshot_mirrors_arena(self):
        views = self.tree.snapshot()
        self.assertEqual(len(views), len(self.tree.nodes))
        for view, node in zip(views, self.tree.nodes):
            self.assertEqual(view.parent, node.parent)
            self.assertEqual(view.alive, node.alive)
            self.assertEqual(view.weight, node.weight)
            self.assertAlmostEqual(view.radius, self.tree.radius_of(node))

    def test_snapshot_is_read_only(self):
        view = self.tree.snapshot()[0]
        with self.assertRaises(dataclasses.FrozenInstanceError):
            view.alive = False

    def test_segments(self):
        all_segments = self.tree.get_segments()
        alive_segments = self.tree.get_segments(alive_only=True)
        self.assertEqual(len(all_segments), len(self.tree.nodes) - 1)
        self.assertLessEqual(len(alive_segments), len(all_segments))


class TestExporters(unittest.TestCase):

    def test_export_and_load(self):
        tree = make_tree()
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'out', 'tree.json')
            exported = export_tree_data(tree, path)
            loaded = load_tree_data(path)

        self.assertEqual(loaded, exported)
        self.assertEqual(loaded['source_width'], 200)
        self.assertEqual(len(loaded['nodes']), len(tree.nodes))
        self.assertIsNone(loaded['nodes'][0]['parent'])
        self.assertEqual(loaded['nodes'][0]['weight'], len(tree.nodes))


class TestVisualization(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        plt.close('all')
        self.tmpdir.cleanup()

    def test_draw_modes_do_not_mutate(self):
        tree = make_tree()
        before = state_of(tree)

        for mode in ('pretty', 'debug'):
            path = os.path.join(self.tmpdir.name, f'{mode}.png')
            visualize_tree(tree, mode=mode, save_path=path, show=False)
            self.assertTrue(os.path.exists(path))

        self.assertEqual(state_of(tree), before)

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            visualize_tree(make_tree(), mode='sketch', show=False)

    def test_line_width_scale_uses_drawn_axes(self):
        config = GrowthConfig(width=200, height=400, num_points=0)
        fig, ax = plt.subplots(figsize=(10, 10))
        _setup_axes(ax, config)
        fig.tight_layout()

        # a canvas twice as tall as wide only fills about half the figure width
        full_width = 10 * 72.0 / config.width
        self.assertLess(_points_per_unit(ax, config), 0.6 * full_width)
        self.assertGreater(_points_per_unit(ax, config), 0.4 * full_width)

    def test_statistics_plot(self):
        path = os.path.join(self.tmpdir.name, 'stats.png')
        plot_growth_statistics(make_tree(), save_path=path, show=False)
        self.assertTrue(os.path.exists(path))

    def test_animation_frames(self):
        config = GrowthConfig(width=80, height=80, num_points=150, random_seed=5,
                              max_iterations=10, max_regenerations=2)
        anim = animate_growth(config, frame_skip=2, show=False)
        self.assertIsNotNone(anim)

    def test_density_map_image(self):
        sampler = DensitySampler(np.random.default_rng(0).random((30, 20)))
        path = os.path.join(self.tmpdir.name, 'density.png')
        save_density_visualization(sampler, path)
        self.assertTrue(os.path.exists(path))


if __name__ == '__main__':
    unittest.main()
