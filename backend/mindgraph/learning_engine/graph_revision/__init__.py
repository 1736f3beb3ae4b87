"""Graph-aware review propagation.

Spreads the strength change of a node review to related nodes in the
knowledge graph, attenuated by edge weight and hop distance.
"""

from mindgraph.learning_engine.graph_revision.propagation import (
    apply_propagation,
    propagate_review,
    rating_to_delta,
)

__all__ = [
    "apply_propagation",
    "propagate_review",
    "rating_to_delta",
]
