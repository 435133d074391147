"""
Attachment Modes Demo

This script builds the same tree with both child placement strategies and
prints a per-level summary of each:

1. PATH: children start at a sampled interior frame of the parent's growth path
2. ANGLE: children start on the parent's straight axis, fanned out by ``angle``

Usage:
    python attachment_modes_demo.py
    python attachment_modes_demo.py --config trees/oak.json --seed 5
    python attachment_modes_demo.py --export ./outputs
"""

import sys
import os

sys.path.insert(0, os.path.abspath(".."))

from treemaker import (
    AttachmentMode,
    SceneGraphSink,
    TreeAssembler,
    TrimeshSceneSink,
    compile_branch_config,
    load_tree_spec,
)
from treemaker.analysis.hierarchy import validate_hierarchy


def demo_attachment_modes(config_path: str, seed=None):
    """Build the tree in each mode and print node statistics."""
    spec = load_tree_spec(config_path)
    config = compile_branch_config(spec)
    seed = seed if seed is not None else spec.seed

    print("=" * 60)
    print(f"  Attachment Modes Demo: {config_path}")
    print("=" * 60)
    print()

    for mode in AttachmentMode:
        sink = SceneGraphSink()
        assembler = TreeAssembler(sink, seed=seed, attachment_mode=mode)
        assembler.build(config)
        report = assembler.report

        print(f"  {mode.value}")
        print(f"    nodes: {report.node_count}  vertices: {report.vertex_count}  "
              f"triangles: {report.triangle_count}")
        for level, count in sorted(report.nodes_per_level.items()):
            print(f"    level {level}: {count} branches")
        errors = validate_hierarchy(sink)
        print(f"    hierarchy: {'ok' if not errors else errors}")
        print()

    print("-" * 60)
    print()


def export_modes(config_path: str, output_dir: str, seed=None):
    """Write one GLB per attachment mode."""
    spec = load_tree_spec(config_path)
    config = compile_branch_config(spec)
    seed = seed if seed is not None else spec.seed
    os.makedirs(output_dir, exist_ok=True)

    stem = os.path.splitext(os.path.basename(config_path))[0]
    for mode in AttachmentMode:
        sink = TrimeshSceneSink()
        TreeAssembler(sink, seed=seed, attachment_mode=mode).build(config)
        path = sink.export(os.path.join(output_dir, f"{stem}_{mode.value}.glb"))
        print(f"Saved {path}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Attachment Modes Demo")
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=os.path.join(os.path.dirname(os.path.abspath(__file__)), "trees", "oak.json"),
        help="Tree JSON file",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed override",
    )
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        help="Directory to write one GLB per mode",
    )

    args = parser.parse_args()

    demo_attachment_modes(args.config, args.seed)

    if args.export:
        export_modes(args.config, args.export, args.seed)


if __name__ == "__main__":
    main()
