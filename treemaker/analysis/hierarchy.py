"""
Structural checks for generated scene hierarchies.

Converts a SceneGraphSink's node records into a networkx DiGraph
(parent -> child) and verifies it forms a single rooted tree.
"""

from typing import Dict, List, Optional
import networkx as nx

from ..api.sink import SceneGraphSink


def hierarchy_graph(sink: SceneGraphSink) -> nx.DiGraph:
    """
    Build a directed graph of the sink's nodes.

    Nodes are handles with ``name`` and ``mesh`` attributes; edges point
    from parent to child.
    """
    G = nx.DiGraph()
    for node in sink.nodes:
        G.add_node(node.handle, name=node.name, mesh=node.mesh)
    for node in sink.nodes:
        for child in node.children:
            G.add_edge(node.handle, child)
    return G


def validate_hierarchy(sink: SceneGraphSink) -> List[str]:
    """
    Check that the sink holds exactly one connected tree.

    Returns
    -------
    List[str]
        Error messages (empty if the hierarchy is a single arborescence)
    """
    G = hierarchy_graph(sink)
    errors = []

    if G.number_of_nodes() == 0:
        return ["Scene has no nodes"]

    roots = [n for n in G.nodes if G.in_degree(n) == 0]
    if len(roots) != 1:
        names = [G.nodes[n]["name"] for n in roots]
        errors.append(f"Expected exactly one root, found {len(roots)}: {names}")

    multi_parent = [n for n in G.nodes if G.in_degree(n) > 1]
    for n in multi_parent:
        errors.append(f"Node {G.nodes[n]['name']} has {G.in_degree(n)} parents")

    if not errors and not nx.is_arborescence(G):
        errors.append("Scene hierarchy is not a tree")

    return errors


def level_counts(sink: SceneGraphSink, root: Optional[int] = None) -> Dict[int, int]:
    """
    Count nodes per depth below ``root`` (default: the single root).

    Returns
    -------
    Dict[int, int]
        depth -> node count
    """
    G = hierarchy_graph(sink)
    if root is None:
        roots = [n for n in G.nodes if G.in_degree(n) == 0]
        if not roots:
            return {}
        root = roots[0]

    depths = nx.single_source_shortest_path_length(G, root)
    counts: Dict[int, int] = {}
    for depth in depths.values():
        counts[depth] = counts.get(depth, 0) + 1
    return counts
