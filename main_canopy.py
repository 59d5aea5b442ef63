"""
Main entry point for tree growth.

Grows a tree with the space colonization algorithm, regenerating it when the
first cycles produce almost nothing, then saves a preview, growth statistics
and the node data for external renderers.

Configuration is loaded from config/canopy.json when present; command line
flags override individual settings.
"""

import argparse
import dataclasses
from pathlib import Path

from canopy import (
    Tree,
    DensitySampler,
    load_config,
    visualize_tree,
    animate_growth,
    plot_growth_statistics,
    export_tree_data
)
from canopy.density import save_density_visualization
from canopy.profiling import profiler


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Grow a tree with space colonization")
    parser.add_argument('--config', default='config/canopy.json',
                        help='JSON config file (defaults are used if missing)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed')
    parser.add_argument('--points', type=int, default=None, help='Number of attraction points')
    parser.add_argument('--iterations', type=int, default=None, help='Maximum growth iterations')
    parser.add_argument('--mode', choices=['pretty', 'debug'], default=None, help='Draw mode')
    parser.add_argument('--fade', choices=['superellipse', 'power_law'], default=None,
                        help='Edge fade policy of the density field')
    parser.add_argument('--output-dir', default=None, help='Directory for outputs')
    parser.add_argument('--name', default='tree', help='Base name of output files')
    parser.add_argument('--animate', action='store_true', help='Save a growth GIF instead')
    parser.add_argument('--density-map', action='store_true',
                        help='Also save the attraction density map')
    parser.add_argument('--no-show', action='store_true', help='Do not open plot windows')
    parser.add_argument('--profile', action='store_true', help='Print phase timings at exit')
    return parser.parse_args(argv)


def build_config(args):
    config = load_config(args.config)

    overrides = {
        'random_seed': args.seed,
        'num_points': args.points,
        'max_iterations': args.iterations,
        'draw_mode': args.mode,
        'fade': args.fade,
        'output_dir': args.output_dir,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if args.animate:
        overrides['animate'] = True

    return dataclasses.replace(config, **overrides)


def main(argv=None):
    args = parse_args(argv)
    if args.profile:
        profiler.enable()

    config = build_config(args)
    show = not args.no_show

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"Growing tree on a {config.width:g}x{config.height:g} canvas")
    print(f"  Attraction points: {config.num_points}")
    print(f"  Max iterations: {config.max_iterations}")
    print()

    if args.density_map:
        sampler = DensitySampler.from_config(config, config.make_rng())
        save_density_visualization(sampler, str(output_dir / f"{args.name}_density.png"))

    if config.animate:
        save_path = str(output_dir / f"{args.name}_growth.gif")
        animate_growth(config, save_path=save_path, frame_skip=5, show=show)
        return

    tree = Tree.new_min_growth(config)
    tree.grow()

    visualize_tree(tree, save_path=str(output_dir / f"{args.name}_{config.draw_mode}.png"),
                   show=show)
    plot_growth_statistics(tree, save_path=str(output_dir / f"{args.name}_stats.png"),
                           show=show)

    data_path = output_dir / f"{args.name}_render_data.json"
    export_tree_data(tree, str(data_path))
    print(f"Exported render data to: {data_path}")


if __name__ == '__main__':
    main()
