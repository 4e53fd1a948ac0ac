import argparse
import logging
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from tqdm import tqdm

from l_systems_mesh.config import LSystemConfig, RenderMode, width_from_slider
from l_systems_mesh.generator import LSystemGenerator
from l_systems_mesh.presets import LSYSTEM_PRESETS, config_from_preset
from l_systems_mesh.render import fit_camera, plot_result, to_polydata

logger = logging.getLogger(__name__)

# argparse dest -> config field
OVERRIDES = {
    "axiom": "axiom",
    "rules": "rules",
    "iterations": "iterations",
    "angle": "angle",
    "angle_variance": "angle_variance",
    "step": "step_length",
    "width": "width",
    "taper": "taper",
    "leaf_scale": "leaf_scale",
    "mode": "mode",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate L-system plant geometry")
    parser.add_argument('--preset', choices=sorted(LSYSTEM_PRESETS), default=None)
    parser.add_argument('--axiom', default=None)
    parser.add_argument('--rules', default=None, help="Rule lines, separated by newlines or literal \\n")
    parser.add_argument('--iterations', type=int, default=None)
    parser.add_argument('--angle', type=float, default=None, help="Rotation angle in degrees")
    parser.add_argument('--angle-variance', dest='angle_variance', type=float, default=None)
    parser.add_argument('--step', type=float, default=None)
    parser.add_argument('--width', type=float, default=None)
    parser.add_argument('--width-slider', dest='width_slider', type=float, default=None,
                        help="Width as a 0-1 position on the logarithmic width range")
    parser.add_argument('--taper', type=float, default=None)
    parser.add_argument('--leaf-scale', dest='leaf_scale', type=float, default=None)
    parser.add_argument('--tips-only', dest='tips_only', action='store_true')
    parser.add_argument('--mode', choices=[m.value for m in RenderMode], default=None)
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--output', default=None, help="Mesh file to write (.vtk, .ply, ...)")
    parser.add_argument('--plot', default=None, help="PNG preview path")
    parser.add_argument('--all-presets', dest='all_presets', default=None, metavar='DIR',
                        help="Render every preset into DIR")
    parser.add_argument('--verbose', action='store_true')
    return parser


def config_from_args(args: argparse.Namespace) -> LSystemConfig:
    overrides = {}
    for dest, name in OVERRIDES.items():
        value = getattr(args, dest)
        if value is not None:
            overrides[name] = value
    if "rules" in overrides:
        overrides["rules"] = overrides["rules"].replace("\\n", "\n")
    if args.tips_only:
        overrides["tips_only"] = True
    if args.width_slider is not None and "width" not in overrides:
        overrides["width"] = width_from_slider(args.width_slider)

    if args.preset:
        return config_from_preset(args.preset, **overrides)
    return LSystemConfig.from_dict(overrides)


def render_all_presets(output_dir: str, seed: int = None, mode: str = None):
    """Write a mesh file and a preview image for every preset."""
    os.makedirs(output_dir, exist_ok=True)
    generator = LSystemGenerator()

    for name in tqdm(sorted(LSYSTEM_PRESETS), desc="Presets"):
        config = config_from_preset(name, **({"mode": mode} if mode else {}))
        result = generator.generate(config, np.random.default_rng(seed))
        to_polydata(result).save(os.path.join(output_dir, f"{name}.vtk"))
        plot_result(result, save_path=os.path.join(output_dir, f"{name}.png"))
        plt.close('all')
        logger.info(f"{name}: {result.stats()}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if args.all_presets:
        render_all_presets(args.all_presets, seed=args.seed, mode=args.mode)
        return 0

    config = config_from_args(args)
    result = LSystemGenerator().generate(config, np.random.default_rng(args.seed))

    camera = fit_camera(result.bounds)
    logger.info(f"L-string length: {len(result.lstring)}, bounds: {result.bounds.as_tuple()}")
    logger.info(f"Auto-scale {camera.scale:.3f}, camera distance {camera.distance:.2f}")
    if result.truncated:
        logger.warning("Output was truncated at a safety limit")

    if args.output:
        to_polydata(result).save(args.output)
        logger.info(f"Saved mesh to: {args.output}")
    if args.plot:
        plot_result(result, save_path=args.plot)
        logger.info(f"Saved preview to: {args.plot}")

    print(result.stats())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
