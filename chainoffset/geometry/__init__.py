"""Shape geometry: evaluation, tessellation, lengths and chain-level queries."""

from chainoffset.geometry.chain import (
    closest_point_on_chain,
    determine_chain_orientation,
    is_chain_closed,
    is_point_inside_chain,
    resolve_chain_closure,
)
from chainoffset.geometry.functions import (
    LengthResult,
    distance_to_shape,
    end_point,
    point_at,
    shape_length,
    start_point,
    tangent_at,
    tessellate,
)
from chainoffset.geometry.spline import validate_spline_geometry

__all__ = [
    "LengthResult",
    "closest_point_on_chain",
    "determine_chain_orientation",
    "distance_to_shape",
    "end_point",
    "is_chain_closed",
    "is_point_inside_chain",
    "point_at",
    "resolve_chain_closure",
    "shape_length",
    "start_point",
    "tangent_at",
    "tessellate",
    "validate_spline_geometry",
]
