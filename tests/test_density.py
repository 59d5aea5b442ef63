import unittest

import numpy as np

from canopy.config import GrowthConfig
from canopy.density import DensitySampler, SuperellipseFade, PowerLawFade, make_fade
from canopy.noise import PerlinNoise


class TestDensitySampler(unittest.TestCase):

    def test_single_cell_mass_always_sampled(self):
        density = np.zeros((10, 8))
        density[3, 5] = 2.0
        sampler = DensitySampler(density)

        for u in (0.0, 0.25, 0.5, 0.75, 0.999999):
            self.assertEqual(sampler.sample(u), (3, 5))

    def test_zero_columns_and_cells_are_skipped(self):
        density = np.array([[1.0, 0.0],
                            [0.0, 0.0],
                            [0.0, 1.0]])
        sampler = DensitySampler(density)

        self.assertEqual(sampler.sample(0.25), (0, 0))
        self.assertEqual(sampler.sample(0.5), (2, 1))
        self.assertEqual(sampler.sample(0.9), (2, 1))

    def test_column_totals(self):
        density = np.arange(12, dtype=float).reshape(4, 3)
        sampler = DensitySampler(density)

        np.testing.assert_allclose(sampler.rows, density.sum(axis=1))
        self.assertAlmostEqual(sampler.sum, density.sum())
        self.assertEqual(sampler.width, 4)
        self.assertEqual(sampler.height, 3)

    def test_upper_end_stays_in_bounds(self):
        sampler = DensitySampler(np.ones((4, 4)))
        self.assertEqual(sampler.sample(np.nextafter(1.0, 0.0)), (3, 3))

    def test_sample_value_outside_unit_interval_is_fatal(self):
        sampler = DensitySampler(np.ones((2, 2)))
        for u in (-0.1, 1.0, 1.5):
            with self.assertRaises(ValueError):
                sampler.sample(u)

    def test_map_without_mass_cannot_be_sampled(self):
        sampler = DensitySampler(np.zeros((3, 3)))
        with self.assertRaises(ValueError):
            sampler.sample(0.5)

    def test_invalid_maps_rejected(self):
        with self.assertRaises(ValueError):
            DensitySampler(np.array([[1.0, -1.0]]))
        with self.assertRaises(ValueError):
            DensitySampler(np.ones(5))
        with self.assertRaises(ValueError):
            DensitySampler(np.array([[np.nan]]))

    def test_draw_is_reproducible_and_in_bounds(self):
        sampler = DensitySampler(np.random.default_rng(0).random((20, 10)))

        a = sampler.draw(200, np.random.default_rng(42))
        b = sampler.draw(200, np.random.default_rng(42))

        self.assertEqual(a.shape, (200, 2))
        np.testing.assert_array_equal(a, b)
        self.assertTrue(np.all((a[:, 0] >= 0) & (a[:, 0] < 20)))
        self.assertTrue(np.all((a[:, 1] >= 0) & (a[:, 1] < 10)))

    def test_draw_zero_points(self):
        sampler = DensitySampler(np.ones((2, 2)))
        self.assertEqual(sampler.draw(0).shape, (0, 2))

    def test_from_config_suppresses_edges(self):
        config = GrowthConfig(width=64, height=64)
        sampler = DensitySampler.from_config(config, np.random.default_rng(1))

        self.assertEqual(sampler.buf.shape, (64, 64))
        self.assertTrue(np.all(sampler.buf >= 0))
        self.assertGreater(sampler.sum, 0)
        np.testing.assert_allclose(sampler.buf[0, :], 0.0, atol=1e-12)
        np.testing.assert_allclose(sampler.buf[:, 0], 0.0, atol=1e-12)


class TestFadePolicies(unittest.TestCase):

    def _ray(self, fade, size=100):
        xs = np.linspace(size / 2, size, 200)
        ys = np.full_like(xs, size / 2)
        return fade(xs, ys, size, size)

    def test_superellipse_contract(self):
        values = self._ray(SuperellipseFade())
        self.assertAlmostEqual(values[0], 1.0)
        self.assertAlmostEqual(values[-1], 0.0)
        self.assertTrue(np.all(np.diff(values) <= 1e-12))

    def test_power_law_contract(self):
        values = self._ray(PowerLawFade())
        self.assertAlmostEqual(values[0], 1.0)
        self.assertEqual(values[-1], 0.0)
        self.assertTrue(np.all(np.diff(values) <= 1e-12))

    def test_make_fade_follows_config(self):
        self.assertIsInstance(make_fade(GrowthConfig()), SuperellipseFade)
        fade = make_fade(GrowthConfig(fade='power_law', fade_exponent=2.0))
        self.assertIsInstance(fade, PowerLawFade)
        self.assertEqual(fade.exponent, 2.0)


class TestPerlinNoise(unittest.TestCase):

    def test_zero_on_lattice_points(self):
        noise = PerlinNoise(np.random.default_rng(3))
        values = noise.noise(np.array([0.0, 3.0, -2.0]), np.array([0.0, 7.0, 5.0]))
        np.testing.assert_allclose(values, 0.0, atol=1e-12)

    def test_octave_noise_bounded_and_seeded(self):
        xs, ys = np.meshgrid(np.linspace(0, 20, 50), np.linspace(0, 20, 50), indexing='ij')
        a = PerlinNoise(np.random.default_rng(5)).octave_noise(xs, ys, octaves=3, frequency=0.3)
        b = PerlinNoise(np.random.default_rng(5)).octave_noise(xs, ys, octaves=3, frequency=0.3)

        np.testing.assert_array_equal(a, b)
        self.assertLessEqual(np.abs(a).max(), 1.0 + 1e-9)
        self.assertGreater(np.abs(a).max(), 0.0)

    def test_rejects_bad_parameters(self):
        with self.assertRaises(ValueError):
            PerlinNoise(table_size=100)
        with self.assertRaises(ValueError):
            PerlinNoise().octave_noise(0.5, 0.5, octaves=0)


if __name__ == '__main__':
    unittest.main()
