"""Review propagation over the knowledge graph.

A review on one node reinforces (or weakens) related knowledge: the strength
change spreads outward along edges, attenuated by edge weight and halved per
hop. Edges are treated as undirected for spreading; relationship direction
(prerequisite, depends_on, ...) is not consulted.
"""

import logging
from collections import defaultdict
from typing import Iterable

from mindgraph.core.errors import UnknownSubject, require_rating
from mindgraph.learning_engine.config import NEUTRAL_RATING, PROPAGATION_DECAY, RATING_DELTA_STEP
from mindgraph.learning_engine.contracts import (
    GraphEdge,
    GraphSnapshot,
    Identifier,
    PropagationDelta,
    id_sort_key,
)
from mindgraph.learning_engine.mastery.normalizer import clamp_strength

logger = logging.getLogger(__name__)


def rating_to_delta(rating: int) -> float:
    """Strength change implied by a rating: 5 -> +0.2, 3 -> 0, 1 -> -0.2."""
    rating = require_rating(rating)
    return round((rating - NEUTRAL_RATING.value) * RATING_DELTA_STEP.value, 10)


def hop_decay(hops: int) -> float:
    """Attenuation at hop distance ``hops`` (1-indexed)."""
    return PROPAGATION_DECAY.value**hops


def build_adjacency(edges: Iterable[GraphEdge]) -> dict[Identifier, list[tuple[Identifier, GraphEdge]]]:
    """
    Undirected multigraph adjacency.

    Every edge appears once under each endpoint; self-loops are dropped.
    """
    adjacency: dict[Identifier, list[tuple[Identifier, GraphEdge]]] = defaultdict(list)
    for edge in edges:
        if edge.is_self_loop:
            continue
        adjacency[edge.source_node_id].append((edge.target_node_id, edge))
        adjacency[edge.target_node_id].append((edge.source_node_id, edge))
    return adjacency


def neighbours(graph: GraphSnapshot, node_id: Identifier) -> list[Identifier]:
    """Distinct neighbouring node ids, direction ignored."""
    seen = {other for other, _ in build_adjacency(graph.edges).get(node_id, [])}
    return sorted(seen, key=id_sort_key)


def propagate_review(
    reviewed_node_id: Identifier,
    rating_delta: float,
    graph: GraphSnapshot,
    depth: int,
) -> list[PropagationDelta]:
    """
    Spread a review's strength change to neighbouring nodes.

    Breadth-first with an explicit frontier and visited set: a node is credited
    only at the hop distance where it is first reached; all edges from the
    previous frontier into it at that distance are summed (parallel edges
    included). Hop d contributes ``rating_delta * edge.weight * 0.5**d``.

    Args:
        reviewed_node_id: Node that was reviewed
        rating_delta: Strength change for the reviewed node itself
        graph: Graph snapshot
        depth: Hop limit; 0 or negative updates the reviewed node only

    Returns:
        Reviewed node first (hops=0), then neighbours by hop distance and id

    Raises:
        UnknownSubject: If the reviewed node is not in the graph
    """
    nodes_by_id = graph.node_map()
    if reviewed_node_id not in nodes_by_id:
        raise UnknownSubject(
            f"Node {reviewed_node_id} is not in the graph",
            details={"node_id": reviewed_node_id},
        )

    deltas = [PropagationDelta(node_id=reviewed_node_id, strength_delta=rating_delta, hops=0)]
    if depth <= 0 or rating_delta == 0:
        return deltas

    adjacency = build_adjacency(graph.edges)
    visited: set[Identifier] = {reviewed_node_id}
    frontier: list[Identifier] = [reviewed_node_id]

    for hops in range(1, depth + 1):
        decay = hop_decay(hops)
        level: dict[Identifier, float] = defaultdict(float)

        for current in frontier:
            for other, edge in adjacency.get(current, []):
                if other in visited or other not in nodes_by_id:
                    continue
                level[other] += rating_delta * edge.weight * decay

        if not level:
            break

        next_frontier = sorted(level, key=id_sort_key)
        for node_id in next_frontier:
            deltas.append(PropagationDelta(node_id=node_id, strength_delta=level[node_id], hops=hops))
        visited.update(next_frontier)
        frontier = next_frontier

    logger.debug(
        f"Propagated delta {rating_delta:+.3f} from node {reviewed_node_id}: "
        f"{len(deltas) - 1} neighbours within {depth} hops"
    )
    return deltas


def apply_propagation(graph: GraphSnapshot, deltas: Iterable[PropagationDelta]) -> GraphSnapshot:
    """
    Apply strength deltas and return a new graph.

    Deltas for the same node are summed and added to the stored strength,
    clamped to [0, 1]. Stored strengths are already canonical, so a sum above
    1 is saturation, not a legacy percentage.
    Nodes without deltas are carried over unchanged.
    """
    totals: dict[Identifier, float] = defaultdict(float)
    for delta in deltas:
        totals[delta.node_id] += delta.strength_delta

    nodes = []
    for node in graph.nodes:
        if node.id in totals:
            node = node.model_copy(update={"strength": clamp_strength(node.strength + totals[node.id])})
        nodes.append(node)
    return graph.model_copy(update={"nodes": nodes})
