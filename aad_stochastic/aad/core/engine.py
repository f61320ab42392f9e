# aad/core/engine.py
from __future__ import annotations
import heapq
import logging
from typing import Any, Dict, Iterable, Optional

from ...stochastic.random_variable import RandomVariable
from .node import Node

logger = logging.getLogger(__name__)


def get_gradient(root: Node, independent_ids: Optional[Iterable[int]] = None) -> Dict[int, Any]:
    """
    Run a single reverse pass from `root`.

    Args:
        root: node of the dependent value; it is seeded with dy/dy = 1.
        independent_ids: if given, only the derivatives with respect to these
            ids are returned.

    Returns:
        {id: derivative}. With leaf retention (the root's config) only the
        entries of leaf nodes survive; with `independent_ids` exactly the
        entries of those ids reached by the pass.

    Notes:
        - Nodes are processed in decreasing id order. Every dependent of a
          node has a larger id, so a node's derivative is complete when it
          is popped.
        - Each node enters the frontier once, however many dependents it has.
    """
    retain_leaves_only = root.config.gradient_retains_leaf_nodes_only
    wanted = set(independent_ids) if independent_ids is not None else None

    derivatives: Dict[int, Any] = {root.id: RandomVariable(1.0)}
    gradient: Dict[int, Any] = {} if wanted is not None else derivatives

    # max-heap of ids via negation; `pending` holds the nodes by id
    frontier = [-root.id]
    pending = {root.id: root}
    n_processed = 0

    while frontier:
        node = pending.pop(-heapq.heappop(frontier))
        node.propagate_derivatives_from_result_to_argument(derivatives)
        n_processed += 1

        for argument in node.arguments:
            if argument is not None and argument.id not in pending:
                pending[argument.id] = argument
                heapq.heappush(frontier, -argument.id)

        if wanted is not None:
            if node.id in wanted:
                gradient[node.id] = derivatives.pop(node.id)
            else:
                derivatives.pop(node.id, None)
        elif retain_leaves_only and not node.is_leaf():
            del derivatives[node.id]

    logger.debug("Reverse pass from node %d processed %d nodes, %d derivatives returned.",
                 root.id, n_processed, len(gradient))
    return gradient
