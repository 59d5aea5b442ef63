import unittest

from canopy.config import GrowthConfig
from canopy.profiling import profiler, profile_block
from canopy.tree import Tree


class TestProfiler(unittest.TestCase):

    def tearDown(self):
        profiler.enabled = False
        profiler.stats.clear()

    def test_disabled_profiler_records_nothing(self):
        with profile_block('idle'):
            pass
        Tree(GrowthConfig(width=40, height=40, num_points=20, random_seed=1))

        self.assertEqual(len(profiler.stats), 0)

    def test_enabled_profiler_times_point_sampling(self):
        profiler.enable(report_at_exit=False)
        tree = Tree(GrowthConfig(width=40, height=40, num_points=20, random_seed=1))
        tree.grow_step()

        self.assertEqual(profiler.stats['DensitySampler.from_noise']['calls'], 1)
        self.assertEqual(profiler.stats['DensitySampler.draw']['calls'], 1)
        self.assertEqual(profiler.stats['Tree.grow_step']['calls'], 1)
        self.assertGreaterEqual(profiler.stats['DensitySampler.draw']['total_time'], 0.0)


if __name__ == '__main__':
    unittest.main()
