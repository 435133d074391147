"""
Smoke tests for the example trees.

Every file in examples/trees must load, compile and generate a valid single
rooted hierarchy, both as a branch tree and as its primitive archetype.

Usage:
    pytest -q tests/integration/test_examples_smoke.py
"""

import pytest
from pathlib import Path

from treemaker.analysis.hierarchy import validate_hierarchy
from treemaker.api.generate import TreeAssembler
from treemaker.api.sink import SceneGraphSink
from treemaker.ops.archetypes import generate_archetype
from treemaker.specs import load_tree_spec, compile_branch_config, compile_tree_config


EXAMPLES_DIR = Path(__file__).parent.parent.parent / "examples" / "trees"

EXAMPLES = sorted(p.name for p in EXAMPLES_DIR.glob("*.json"))


def test_examples_present():
    assert {"oak.json", "pine.json", "willow.json", "palm.json"} <= set(EXAMPLES)


@pytest.mark.parametrize("name", EXAMPLES)
def test_branch_tree(name):
    spec = load_tree_spec(EXAMPLES_DIR / name)
    sink = SceneGraphSink()
    assembler = TreeAssembler(sink, seed=spec.seed)
    assembler.build(compile_branch_config(spec))

    assert assembler.report.success
    assert assembler.report.warnings == []
    assert validate_hierarchy(sink) == []
    for record in sink.meshes:
        assert record.mesh.validate() == []


@pytest.mark.parametrize("name", EXAMPLES)
def test_archetype(name):
    spec = load_tree_spec(EXAMPLES_DIR / name)
    sink = SceneGraphSink()
    generate_archetype(compile_tree_config(spec), sink)

    assert validate_hierarchy(sink) == []
