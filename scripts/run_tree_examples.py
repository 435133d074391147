#!/usr/bin/env python3
"""
Runner script for the example trees.

Generates every JSON file in a directory (default: examples/trees) as a
branch hierarchy and, optionally, as its primitive archetype. Writes one GLB
and one JSON report per tree and prints a summary table.

Usage:
    python scripts/run_tree_examples.py --out ./output
    python scripts/run_tree_examples.py --trees examples/trees --out ./output --archetypes
"""

import argparse
import sys
import time
from pathlib import Path

from treemaker.core.config import ConfigError
from treemaker.specs import load_tree_spec, compile_branch_config, compile_tree_config, tree_materials
from treemaker.api.generate import TreeAssembler
from treemaker.api.sink import TrimeshSceneSink
from treemaker.api.export import export_scene, write_report
from treemaker.ops.archetypes import generate_archetype


def parse_args():
    parser = argparse.ArgumentParser(
        description="Generate the example trees to GLB.",
    )
    parser.add_argument(
        "--trees",
        type=str,
        default=str(Path(__file__).resolve().parent.parent / "examples" / "trees"),
        help="Directory of tree JSON files",
    )
    parser.add_argument(
        "--out",
        type=str,
        required=True,
        help="Output directory for artifacts",
    )
    parser.add_argument(
        "--archetypes",
        action="store_true",
        help="Also build the primitive archetype for each tree",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser.parse_args()


def run_one(path: Path, out_dir: Path, archetype: bool, verbose: bool) -> dict:
    spec = load_tree_spec(path)
    start = time.time()

    if archetype:
        tree_config = compile_tree_config(spec)
        sink = TrimeshSceneSink(materials=tree_config.materials())
        generate_archetype(tree_config, sink)
        name = f"{path.stem}_archetype"
        report = {"success": True, "seed": spec.seed, "node_count": len(sink.nodes)}
    else:
        sink = TrimeshSceneSink(materials=tree_materials(spec))
        assembler = TreeAssembler(sink, seed=spec.seed)
        assembler.build(compile_branch_config(spec))
        name = path.stem
        report = assembler.report.to_dict()

    glb = export_scene(sink, out_dir / f"{name}.glb")
    write_report(report, out_dir / f"{name}_report.json")
    elapsed = time.time() - start

    if verbose:
        print(f"  {name}: {report['node_count']} nodes in {elapsed:.2f}s -> {glb}")
    return {"name": name, "nodes": report["node_count"], "seconds": elapsed}


def main():
    args = parse_args()
    trees_dir = Path(args.trees)
    out_dir = Path(args.out)

    paths = sorted(trees_dir.glob("*.json"))
    if not paths:
        print(f"No tree files found in {trees_dir}", file=sys.stderr)
        return 1

    rows = []
    failures = 0
    for path in paths:
        for archetype in ([False, True] if args.archetypes else [False]):
            try:
                rows.append(run_one(path, out_dir, archetype, args.verbose))
            except ConfigError as e:
                failures += 1
                print(f"FAILED {path.name}: {e}", file=sys.stderr)

    print()
    print(f"{'tree':<24} {'nodes':>6} {'time':>8}")
    print("-" * 40)
    for row in rows:
        print(f"{row['name']:<24} {row['nodes']:>6} {row['seconds']:>7.2f}s")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
