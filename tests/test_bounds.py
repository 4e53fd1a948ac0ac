import unittest
import numpy as np
from numpy.testing import assert_allclose

from l_systems_mesh.bounds import Bounds, height_colors


class TestBounds(unittest.TestCase):

    def setUp(self):
        self.bounds = Bounds()

    def test_empty(self):
        self.assertTrue(self.bounds.is_empty)
        assert_allclose(self.bounds.size, [0, 0, 0])
        assert_allclose(self.bounds.center, [0, 0, 0])
        self.assertEqual(self.bounds.auto_scale_factor(), 1.0)

    def test_update(self):
        self.bounds.update(np.array([1.0, -2.0, 3.0]))
        self.bounds.update(np.array([-1.0, 4.0, 0.0]))
        self.assertFalse(self.bounds.is_empty)
        assert_allclose(self.bounds.min, [-1, -2, 0])
        assert_allclose(self.bounds.max, [1, 4, 3])
        assert_allclose(self.bounds.center, [0, 1, 1.5])
        self.assertEqual(self.bounds.height, 6.0)
        self.assertEqual(self.bounds.as_tuple(), ((-1.0, -2.0, 0.0), (1.0, 4.0, 3.0)))

    def test_single_point_is_degenerate_not_empty(self):
        self.bounds.update(np.zeros(3))
        self.assertFalse(self.bounds.is_empty)
        self.assertEqual(self.bounds.height, 0.0)
        self.assertEqual(self.bounds.auto_scale_factor(60), 1.0)

    def test_auto_scale(self):
        self.bounds.update(np.zeros(3))
        self.bounds.update(np.array([0.0, 10.0, 0.0]))
        self.assertEqual(self.bounds.auto_scale_factor(60), 6.0)


class TestHeightColors(unittest.TestCase):

    def test_interpolation(self):
        bounds = Bounds()
        bounds.update(np.zeros(3))
        bounds.update(np.array([0.0, 2.0, 0.0]))
        colors = height_colors([0.0, 1.0, 2.0, 3.0, -1.0], bounds, "#000000", "#ffffff")
        assert_allclose(colors[:, 0], [0.0, 0.5, 1.0, 1.0, 0.0])
        self.assertEqual(colors.shape, (5, 3))
        self.assertEqual(colors.dtype, np.float32)

    def test_offset_minimum(self):
        bounds = Bounds()
        bounds.update(np.array([0.0, 4.0, 0.0]))
        bounds.update(np.array([0.0, 8.0, 0.0]))
        colors = height_colors([6.0], bounds, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert_allclose(colors[0], [0.5, 0.0, 0.0])

    def test_zero_height_uses_base_color(self):
        bounds = Bounds()
        bounds.update(np.zeros(3))
        colors = height_colors([0.0, 0.0], bounds, "red", "blue")
        assert_allclose(colors, [[1, 0, 0], [1, 0, 0]])

    def test_empty_inputs(self):
        self.assertEqual(height_colors([], Bounds(), "red", "blue").shape, (0, 3))


if __name__ == "__main__":
    unittest.main()
