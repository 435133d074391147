"""
Command-Line Interface

Generates a tree from a JSON description and writes it as a GLB file.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.config import ConfigError
from .core.rng import MAX_SEED
from .specs import load_tree_spec, compile_branch_config, compile_tree_config, tree_materials
from .api.generate import TreeAssembler, AttachmentMode
from .api.sink import TrimeshSceneSink
from .api.export import export_scene, write_report
from .ops.archetypes import generate_archetype

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tree-maker",
        description="Generate 3D tree models from JSON configuration files",
    )
    parser.add_argument(
        "config_file",
        type=str,
        help="Path to the JSON configuration file",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default="tree.glb",
        help="Output file path (default: tree.glb)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides the seed in the config file)",
    )
    parser.add_argument(
        "--archetype",
        action="store_true",
        help="Build the simple primitive tree for the config's type instead of the branch hierarchy",
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=[m.value for m in AttachmentMode],
        default=AttachmentMode.PATH.value,
        help="Child branch placement (default: path)",
    )
    parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Write a JSON generation report to this path",
    )
    up = parser.add_mutually_exclusive_group()
    up.add_argument(
        "--y-up",
        dest="up_axis",
        action="store_const",
        const="y",
        help="Convert to the glTF Y-up frame (default)",
    )
    up.add_argument(
        "--z-up",
        dest="up_axis",
        action="store_const",
        const="z",
        help="Keep the generator's Z-up frame",
    )
    parser.set_defaults(up_axis="y")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config_path = Path(args.config_file)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 2

    if args.seed is not None and not 0 <= args.seed < MAX_SEED:
        print(f"Error: --seed must be in [0, 2**64), got {args.seed}", file=sys.stderr)
        return 2

    try:
        spec = load_tree_spec(config_path)
        seed = args.seed if args.seed is not None else spec.seed

        if args.archetype:
            tree_config = compile_tree_config(spec)
            tree_config.seed = seed
            sink = TrimeshSceneSink(materials=tree_config.materials(), up_axis=args.up_axis)
            generate_archetype(tree_config, sink)
            report = {
                "success": True,
                "archetype": tree_config.tree_type.value,
                "seed": seed,
                "node_count": len(sink.nodes),
            }
        else:
            branch_config = compile_branch_config(spec)
            sink = TrimeshSceneSink(materials=tree_materials(spec), up_axis=args.up_axis)
            assembler = TreeAssembler(sink, seed=seed, attachment_mode=args.mode)
            assembler.build(branch_config)
            report = assembler.report
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    output = export_scene(sink, args.output)
    if args.report:
        write_report(report, args.report)

    print(f"Tree generated and saved to: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
