"""Chain offset engine."""

from chainoffset.engine.config import DEFAULT_CHAIN_OFFSET_PARAMETERS, ChainOffsetParameters
from chainoffset.engine.connectivity import validate_chain_connectivity
from chainoffset.engine.fill import fill_gap_between_shapes
from chainoffset.engine.intersect import find_shape_intersections
from chainoffset.engine.offset import offset_shape
from chainoffset.engine.pipeline import ChainOffsetPipeline, offset_chain
from chainoffset.engine.registry import get_registry, intersector
from chainoffset.engine.side_detection import detect_chain_side
from chainoffset.engine.trim import trim_consecutive_shapes

__all__ = [
    "DEFAULT_CHAIN_OFFSET_PARAMETERS",
    "ChainOffsetParameters",
    "ChainOffsetPipeline",
    "detect_chain_side",
    "fill_gap_between_shapes",
    "find_shape_intersections",
    "get_registry",
    "intersector",
    "offset_chain",
    "offset_shape",
    "trim_consecutive_shapes",
    "validate_chain_connectivity",
]
