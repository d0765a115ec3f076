"""Side classification of offset shapes relative to their source chain.

Closed chains: sample points on the offset are tested for containment with
the winding number; the majority decides ``inner``/``outer``.
Open chains: each sample is compared with the local direction of the chain
at its nearest point; the cross-product sign decides ``left``/``right``.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from chainoffset.geometry.chain import (
    chain_points,
    chain_signed_area,
    closest_point_on_chain,
    determine_chain_orientation,
    distance_to_chain,
)
from chainoffset.geometry.functions import point_at, start_point, tangent_at
from chainoffset.models.offset import OffsetSide
from chainoffset.models.shapes import Chain, ShapeBase
from chainoffset.utils.geometry import point_in_polygon
from chainoffset.utils.math_helpers import EPSILON, cross2

logger = logging.getLogger(__name__)

CLOSED_CHAIN_SAMPLES = 10
OPEN_CHAIN_SAMPLES = 10


@dataclass(frozen=True)
class SideDetectionResult:
    side: OffsetSide
    confidence: float
    method: Literal["winding", "orientation"]


@dataclass(frozen=True)
class GeneratedOffset:
    shape: ShapeBase
    original_index: int
    # +|d| for outset, -|d| for inset
    offset: float


@dataclass(frozen=True)
class ClassifiedOffset:
    generated: GeneratedOffset
    detection: SideDetectionResult


@dataclass
class SideGroups:
    groups: dict[OffsetSide, list[ShapeBase]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def get(self, side: OffsetSide) -> list[ShapeBase]:
        return self.groups.get(side, [])


def _sample_parameters(n: int) -> list[float]:
    # Interior samples keep away from endpoints shared with neighbours
    return [(i + 0.5) / n for i in range(n)]


def detect_chain_side(
    offset_shape: ShapeBase,
    offset: float,
    chain: Chain,
    tolerance: float,
    is_closed: bool,
) -> SideDetectionResult:
    if is_closed:
        return _detect_closed(offset_shape, offset, chain)
    return _detect_open(offset_shape, offset, chain, tolerance)


def _detect_closed(shape: ShapeBase, offset: float, chain: Chain) -> SideDetectionResult:
    polygon = chain_points(chain)
    ts = _sample_parameters(CLOSED_CHAIN_SAMPLES)
    inside = sum(1 for t in ts if point_in_polygon(point_at(shape, t), polygon))
    half = len(ts) / 2.0
    mid = point_at(shape, 0.5)

    if inside == half:
        side = OffsetSide.INNER if point_in_polygon(mid, polygon) else OffsetSide.OUTER
        return SideDetectionResult(side=side, confidence=0.0, method="winding")

    consensus = abs(inside - half) / half
    margin = min(1.0, distance_to_chain(mid, chain) / abs(offset)) if abs(offset) > EPSILON else 1.0
    return SideDetectionResult(
        side=OffsetSide.INNER if inside > half else OffsetSide.OUTER,
        confidence=consensus * (0.5 + 0.5 * margin),
        method="winding",
    )


def _detect_open(shape: ShapeBase, offset: float, chain: Chain, tolerance: float) -> SideDetectionResult:
    left = right = 0
    ts = _sample_parameters(OPEN_CHAIN_SAMPLES)
    for t in ts:
        p = point_at(shape, t)
        nearest = closest_point_on_chain(p, chain)
        tx, ty = tangent_at(chain.shapes[nearest.shape_index], nearest.parameter)
        cross = cross2(tx, ty, p[0] - nearest.point[0], p[1] - nearest.point[1])
        if cross > tolerance:
            left += 1
        elif cross < -tolerance:
            right += 1

    if left != right:
        side = OffsetSide.LEFT if left > right else OffsetSide.RIGHT
        return SideDetectionResult(side=side, confidence=abs(left - right) / len(ts), method="orientation")

    # Tie: fall back to the head-to-tail direction, then to the offset sign
    ox, oy = determine_chain_orientation(chain, tolerance)
    sx, sy = start_point(chain.shapes[0])
    mx, my = point_at(shape, 0.5)
    cross = cross2(ox, oy, mx - sx, my - sy)
    if abs(cross) > tolerance:
        side = OffsetSide.LEFT if cross > 0 else OffsetSide.RIGHT
    else:
        side = OffsetSide.RIGHT if offset > 0 else OffsetSide.LEFT
    return SideDetectionResult(side=side, confidence=0.0, method="orientation")


def _side_from_sign(offset: float, is_closed: bool, counter_clockwise: bool) -> OffsetSide:
    """Positive offsets lie right of the drawn direction."""
    if not is_closed:
        return OffsetSide.RIGHT if offset > 0 else OffsetSide.LEFT
    right_is_outer = counter_clockwise
    return OffsetSide.OUTER if (offset > 0) == right_is_outer else OffsetSide.INNER


def group_offsets_by_side(
    offsets: Sequence[GeneratedOffset],
    chain: Chain,
    tolerance: float,
    is_closed: bool,
    confidence_threshold: float = 0.5,
) -> SideGroups:
    """Classify every offset, then make each source shape contribute one offset per side."""
    classified = [
        ClassifiedOffset(
            generated=g,
            detection=detect_chain_side(g.shape, g.offset, chain, tolerance, is_closed),
        )
        for g in offsets
    ]

    result = SideGroups()
    counter_clockwise: bool | None = None
    ordered = sorted(classified, key=lambda c: c.generated.original_index)
    for index, members in itertools.groupby(ordered, key=lambda c: c.generated.original_index):
        members = list(members)
        sides = [c.detection.side for c in members]

        if len(members) == 2 and sides[0] == sides[1]:
            best = max(members, key=lambda c: c.detection.confidence)
            if best.detection.confidence >= confidence_threshold:
                sides = [s if c is best else s.opposite for c, s in zip(members, sides)]
                logger.debug("Shape %d: both offsets on %s, flipped the weaker one", index, sides[0].value)
            else:
                if counter_clockwise is None:
                    counter_clockwise = chain_signed_area(chain) > 0 if is_closed else True
                sides = [_side_from_sign(c.generated.offset, is_closed, counter_clockwise) for c in members]
                result.warnings.append(
                    f"Ambiguous side classification for shape {index}; resolved by chain winding"
                )

        for member, side in zip(members, sides):
            result.groups.setdefault(side, []).append(member.generated.shape)

    return result
