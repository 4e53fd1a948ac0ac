import os
import tempfile
import unittest

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from l_systems_mesh.cli import build_parser, config_from_args, main
from l_systems_mesh.config import RenderMode


class TestConfigFromArgs(unittest.TestCase):

    def test_preset_with_override(self):
        args = build_parser().parse_args(['--preset', 'pine', '--iterations', '2', '--mode', 'discrete'])
        config = config_from_args(args)
        self.assertEqual(config.axiom, "FX")
        self.assertEqual(config.iterations, 2)
        self.assertIs(config.mode, RenderMode.DISCRETE)

    def test_literal_newlines_in_rules(self):
        args = build_parser().parse_args(['--axiom', 'X', '--rules', 'X=F[+X]\\nF=FF', '--tips-only'])
        config = config_from_args(args)
        self.assertEqual(config.rules, "X=F[+X]\nF=FF")
        self.assertTrue(config.tips_only)

    def test_step_maps_to_step_length(self):
        config = config_from_args(build_parser().parse_args(['--step', '0.25']))
        self.assertEqual(config.step_length, 0.25)

    def test_width_slider(self):
        config = config_from_args(build_parser().parse_args(['--width-slider', '1']))
        self.assertAlmostEqual(config.width, 50.0)
        # An explicit width wins over the slider
        config = config_from_args(build_parser().parse_args(['--width-slider', '1', '--width', '0.3']))
        self.assertEqual(config.width, 0.3)


class TestMain(unittest.TestCase):

    def tearDown(self):
        plt.close('all')

    def test_writes_mesh_and_preview(self):
        with tempfile.TemporaryDirectory() as tmp:
            output = os.path.join(tmp, "plant.vtk")
            plot = os.path.join(tmp, "plant.png")
            code = main(['--axiom', 'F', '--rules', 'F=F[+F]F', '--iterations', '2',
                         '--seed', '0', '--output', output, '--plot', plot])
            self.assertEqual(code, 0)
            self.assertTrue(os.path.exists(output))
            self.assertTrue(os.path.exists(plot))

    def test_discrete_output(self):
        with tempfile.TemporaryDirectory() as tmp:
            output = os.path.join(tmp, "plant.vtk")
            code = main(['--axiom', 'F', '--rules', 'F=FF', '--iterations', '2',
                         '--mode', 'discrete', '--output', output])
            self.assertEqual(code, 0)
            self.assertTrue(os.path.exists(output))


if __name__ == "__main__":
    unittest.main()
