import math
import os
import tempfile
import unittest

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from numpy.testing import assert_allclose

from l_systems_mesh.bounds import Bounds
from l_systems_mesh.config import LSystemConfig
from l_systems_mesh.generator import LSystemGenerator
from l_systems_mesh.render import (
    fit_camera,
    instance_primitive,
    instances_to_polydata,
    leaves_to_polydata,
    mesh_to_polydata,
    plot_result,
    segment_endpoints,
    segments_to_polydata,
    to_polydata,
)


class TestFitCamera(unittest.TestCase):

    def test_auto_scale_to_target_height(self):
        bounds = Bounds()
        bounds.update(np.zeros(3))
        bounds.update(np.array([0.0, 10.0, 0.0]))
        camera = fit_camera(bounds)
        self.assertEqual(camera.scale, 6.0)
        assert_allclose(camera.size, [0, 60, 0])
        assert_allclose(camera.center, [0, 30, 0])
        self.assertAlmostEqual(camera.distance, 30 / math.tan(math.radians(30)) * 1.5)
        self.assertEqual(camera.far, 2000.0)

    def test_without_auto_scale(self):
        bounds = Bounds()
        bounds.update(np.zeros(3))
        bounds.update(np.array([4.0, 10.0, 0.0]))
        camera = fit_camera(bounds, auto_scale=False)
        self.assertEqual(camera.scale, 1.0)
        assert_allclose(camera.size, [4, 10, 0])

    def test_flat_structure_is_not_scaled(self):
        bounds = Bounds()
        bounds.update(np.zeros(3))
        bounds.update(np.array([3.0, 0.0, 0.0]))
        camera = fit_camera(bounds)
        self.assertEqual(camera.scale, 1.0)
        self.assertGreater(camera.distance, 0.0)


class TestPolyData(unittest.TestCase):

    def setUp(self):
        self.config = LSystemConfig(axiom="F", rules="F=F[+FL][-FL]", iterations=1, angle=30.0)
        self.generator = LSystemGenerator()

    def test_mesh_to_polydata(self):
        result = self.generator.generate(self.config)
        poly = mesh_to_polydata(result)
        self.assertEqual(poly.n_points, len(result.mesh.positions))
        self.assertEqual(poly.n_cells, len(result.mesh.indices))
        self.assertEqual(poly.point_data["RGB"].shape, (poly.n_points, 3))

    def test_discrete_has_no_mesh(self):
        result = self.generator.generate(self.config.replace(mode="discrete"))
        with self.assertRaises(ValueError):
            mesh_to_polydata(result)

    def test_segment_endpoints(self):
        result = self.generator.generate(self.config.replace(axiom="FF", rules="", mode="discrete", step_length=2.0))
        ends = segment_endpoints(result)
        self.assertEqual(ends.shape, (2, 2, 3))
        assert_allclose(ends[0], [[0, 0, 0], [0, 2, 0]], atol=1e-9)
        assert_allclose(ends[1], [[0, 2, 0], [0, 4, 0]], atol=1e-9)

    def test_segments_to_polydata(self):
        result = self.generator.generate(self.config.replace(mode="discrete"))
        poly = segments_to_polydata(result)
        self.assertEqual(poly.n_points, 2 * result.segment_count)
        self.assertEqual(poly.n_cells, result.segment_count)
        self.assertEqual(len(poly.cell_data["height"]), result.segment_count)

    def test_to_polydata_dispatches_on_mode(self):
        continuous = self.generator.generate(self.config)
        discrete = self.generator.generate(self.config.replace(mode="discrete"))
        self.assertEqual(to_polydata(continuous).n_cells, len(continuous.mesh.indices))
        primitive = instance_primitive(discrete.instance_shape)
        self.assertEqual(to_polydata(discrete).n_points, discrete.segment_count * primitive.n_points)

    def test_instances_use_stored_shape(self):
        for shape in ("box", "cylinder"):
            config = self.config.replace(axiom="F", rules="", mode="discrete", instance_shape=shape,
                                         width=0.5, step_length=1.0)
            result = self.generator.generate(config)
            poly = instances_to_polydata(result)
            primitive = instance_primitive(shape)
            self.assertEqual(poly.n_points, primitive.n_points)
            self.assertEqual(poly.n_cells, primitive.n_cells)
            self.assertEqual(poly.point_data["RGB"].shape, (poly.n_points, 3))
            bounds = np.array(poly.bounds)
            assert_allclose(bounds[2:4], [0.0, 1.0], atol=1e-6)
            if shape == "box":
                assert_allclose(bounds[[0, 1, 4, 5]], [-0.25, 0.25, -0.25, 0.25], atol=1e-6)

    def test_instances_of_empty_structure(self):
        result = self.generator.generate(self.config.replace(axiom="X", rules="", mode="discrete"))
        self.assertEqual(instances_to_polydata(result).n_points, 0)

    def test_leaves_to_polydata(self):
        result = self.generator.generate(self.config)
        poly = leaves_to_polydata(result)
        self.assertEqual(poly.n_points, 2)


class TestPlotResult(unittest.TestCase):

    def tearDown(self):
        plt.close('all')

    def test_saves_preview_in_both_modes(self):
        config = LSystemConfig(axiom="F", rules="F=F[+FL][-FL]", iterations=2, angle=25.0)
        generator = LSystemGenerator()
        with tempfile.TemporaryDirectory() as tmp:
            for mode in ("continuous", "discrete"):
                path = os.path.join(tmp, f"{mode}.png")
                fig = plot_result(generator.generate(config.replace(mode=mode)), save_path=path)
                self.assertIsNotNone(fig)
                self.assertTrue(os.path.getsize(path) > 0)

    def test_empty_structure(self):
        result = LSystemGenerator().generate(LSystemConfig(axiom="X", rules="", iterations=1))
        self.assertIsNotNone(plot_result(result))


if __name__ == "__main__":
    unittest.main()
