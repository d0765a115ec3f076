"""Chain offsetting for kerf-compensated cut paths."""

from chainoffset.engine.config import DEFAULT_CHAIN_OFFSET_PARAMETERS, ChainOffsetParameters
from chainoffset.engine.pipeline import offset_chain
from chainoffset.kerf import OffsetWarningsStore, calculate_chain_offset, compensate_chain
from chainoffset.models.offset import ChainOffsetResult, OffsetDirection, OffsetSide
from chainoffset.models.shapes import Arc, Chain, Circle, Ellipse, Line, Polyline, Spline

__all__ = [
    "DEFAULT_CHAIN_OFFSET_PARAMETERS",
    "Arc",
    "Chain",
    "ChainOffsetParameters",
    "ChainOffsetResult",
    "Circle",
    "Ellipse",
    "Line",
    "OffsetDirection",
    "OffsetSide",
    "OffsetWarningsStore",
    "Polyline",
    "Spline",
    "calculate_chain_offset",
    "compensate_chain",
    "offset_chain",
]
