"""The ordered layer stack and its traversal.

Layers are matched by path prefix at segment boundaries and visited in
registration order, split into a normal track and an error track.
"""

from strata.routing.layer import HandlerKind, Layer, LayerMatch
from strata.routing.traversal import Continuation, Traversal

__all__ = [
    "Continuation",
    "HandlerKind",
    "Layer",
    "LayerMatch",
    "Traversal",
]
