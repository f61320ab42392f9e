"""
Operator-tree utilities
Print and analyse the graph reachable from a node.
"""

import numpy as np
from typing import Dict, List
from collections import Counter

from .node import Node


def collect_nodes(root: Node) -> List[Node]:
    """All nodes reachable from `root` (root included), sorted by id."""
    seen = {}
    stack = [root]
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen[node.id] = node
        stack.extend(a for a in node.arguments if a is not None)
    return sorted(seen.values(), key=lambda n: n.id)


def _op_name(node: Node) -> str:
    return node.operator_type.name if node.operator_type is not None else "LEAF"


def get_graph_stats(root: Node) -> Dict:
    """
    Graph statistics (nothing printed).

    Fan-in counts the differentiable arguments of a node, fan-out the number
    of reachable nodes using it.
    """
    nodes = collect_nodes(root)
    n_nodes = len(nodes)

    fan_ins = [sum(1 for a in node.arguments if a is not None) for node in nodes]
    fan_out_counter = Counter(a.id for node in nodes for a in node.arguments if a is not None)
    fan_outs = [fan_out_counter.get(node.id, 0) for node in nodes]

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'leaves': sum(1 for node in nodes if node.is_leaf()),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(Counter(_op_name(node) for node in nodes)),
    }


def print_graph_summary(root: Node, detailed: bool = False) -> Dict:
    """
    Print a summary of the graph reachable from `root`.

    Args:
        root: node of the dependent value (e.g. `y.node`)
        detailed: also list the nodes (graphs of at most 100 nodes)

    Returns:
        the statistics of `get_graph_stats`
    """
    stats = get_graph_stats(root)
    n_nodes = stats['nodes']

    print("\n" + "="*70)
    print("OPERATOR TREE SUMMARY")
    print("="*70)
    print(f"Total nodes:        {n_nodes:,}")
    print(f"Leaf nodes:         {stats['leaves']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / n_nodes
        print(f"  {op_type:24s}: {count:6,} ({pct:5.1f}%)")

    if detailed and n_nodes <= 100:
        print()
        print("="*70)
        print("DETAILED NODE LIST")
        print("="*70)
        print_computation_graph(root, max_nodes=100, _framed=False)

    print("="*70 + "\n")
    return stats


def print_computation_graph(root: Node, max_nodes: int = 20, _framed: bool = True) -> None:
    """
    Print the nodes reachable from `root` in id order, one line each.

    Args:
        root: node of the dependent value
        max_nodes: maximal number of nodes printed
    """
    nodes = collect_nodes(root)
    if _framed:
        print("\n" + "="*70)
        print("OPERATOR TREE STRUCTURE")
        print("="*70)

    for node in nodes[:max_nodes]:
        if node.is_leaf():
            print(f"Node {node.id:6d}: {'LEAF':24s} [leaf/input]")
        else:
            args = ", ".join("const" if a is None else f"Node{a.id}" for a in node.arguments)
            print(f"Node {node.id:6d}: {_op_name(node):24s} <- [{args}]")

    if len(nodes) > max_nodes:
        print(f"... ({len(nodes) - max_nodes} more nodes)")

    if _framed:
        print("="*70 + "\n")
