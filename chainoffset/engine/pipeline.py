"""Chain offset orchestrator — generate, classify, intersect, trim, fill.

One call is a single linear pass:
    1. offset every shape both ways (outset and inset)
    2. resolve closure (explicit polyline flag, else geometric)
    3. group offsets by side (inner/outer or left/right)
    4. per side: collect corner intersections → trim → fill gaps → OffsetChain
    5. aggregate metrics
A failure inside one side degrades that side to its raw offsets.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from chainoffset.engine.config import DEFAULT_CHAIN_OFFSET_PARAMETERS, ChainOffsetParameters
from chainoffset.engine.connectivity import validate_chain_connectivity
from chainoffset.engine.fill import FillOptions, detect_gap, fill_gap_between_shapes
from chainoffset.engine.intersect import (
    find_polyline_self_intersections,
    find_shape_intersections,
    select_best_intersection,
)
from chainoffset.engine.offset import normalized_direction, offset_shape
from chainoffset.engine.side_detection import GeneratedOffset, group_offsets_by_side
from chainoffset.engine.trim import calculate_trim_amount, trim_consecutive_shapes
from chainoffset.geometry.chain import resolve_chain_closure
from chainoffset.geometry.spline import validate_spline_geometry
from chainoffset.models.offset import (
    ChainOffsetMetrics,
    ChainOffsetResult,
    GapFillingResult,
    GapLocation,
    IntersectionResult,
    OffsetChain,
    OffsetDirection,
    OffsetSide,
    TrimPoint,
)
from chainoffset.models.shapes import Chain, Polyline, ShapeBase, Spline

logger = logging.getLogger(__name__)


@dataclass
class TrimmingOutcome:
    shapes: list[ShapeBase]
    trim_points: list[TrimPoint] = field(default_factory=list)
    failures: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass
class FillingOutcome:
    shapes: list[ShapeBase]
    gap_fills: list[GapFillingResult] = field(default_factory=list)
    unresolved: int = 0
    warnings: list[str] = field(default_factory=list)


def consecutive_pairs(count: int, closed: bool) -> list[tuple[int, int]]:
    pairs = [(i, i + 1) for i in range(count - 1)]
    if closed and count >= 2:
        pairs.append((count - 1, 0))
    return pairs


def _accept_offset(shape: ShapeBase) -> ShapeBase | None:
    """Splines are validated and repaired before use; irreparable ones are dropped."""
    if isinstance(shape, Spline):
        return validate_spline_geometry(shape).spline
    return shape


def generate_all_offsets(chain: Chain, distance: float) -> list[GeneratedOffset]:
    magnitude = abs(distance)
    generated: list[GeneratedOffset] = []
    for index, shape in enumerate(chain.shapes):
        for direction, signed in ((OffsetDirection.OUTSET, magnitude), (OffsetDirection.INSET, -magnitude)):
            result = offset_shape(shape, magnitude, normalized_direction(shape, direction))
            if not result.success:
                logger.debug("Shape %d %s offset dropped: %s", index, direction.value, "; ".join(result.errors))
                continue
            for produced in result.shapes:
                accepted = _accept_offset(produced)
                if accepted is not None:
                    generated.append(GeneratedOffset(shape=accepted, original_index=index, offset=signed))
    return generated


class ChainOffsetPipeline:
    """Runs one chain offset with a fixed parameter set."""

    def __init__(self, params: ChainOffsetParameters | None = None) -> None:
        self.params = params or DEFAULT_CHAIN_OFFSET_PARAMETERS

    def run(self, chain: Chain, distance: float) -> ChainOffsetResult:
        start = time.perf_counter()
        warnings: list[str] = []
        logger.info("Chain offset %s: %d shapes at distance %.4f", chain.id, len(chain.shapes), distance)

        try:
            offsets = generate_all_offsets(chain, distance)
            if not offsets:
                return ChainOffsetResult(
                    success=False,
                    errors=("No valid offsets could be generated",),
                    metrics=self._metrics(chain, [], start),
                )

            tolerance = self.params.tolerance
            is_closed = resolve_chain_closure(chain, tolerance)
            grouped = group_offsets_by_side(
                offsets,
                chain,
                tolerance,
                is_closed,
                self.params.side_confidence_threshold,
            )
            warnings.extend(grouped.warnings)

            first_side, second_side = (
                (OffsetSide.INNER, OffsetSide.OUTER) if is_closed else (OffsetSide.LEFT, OffsetSide.RIGHT)
            )
            processed: dict[OffsetSide, OffsetChain] = {}
            for side in (first_side, second_side):
                shapes = grouped.get(side)
                if shapes:
                    processed[side] = self._process_side(shapes, side, chain, is_closed, warnings)

            result = ChainOffsetResult(
                success=True,
                inner_chain=processed.get(first_side),
                outer_chain=processed.get(second_side),
                warnings=tuple(warnings),
                metrics=self._metrics(chain, list(processed.values()), start),
            )
        except Exception as e:
            logger.error("Chain offset %s FAILED: %s", chain.id, e)
            return ChainOffsetResult(
                success=False,
                warnings=tuple(warnings),
                errors=(f"Chain offset failed: {e}",),
                metrics=self._metrics(chain, [], start),
            )

        logger.info(
            "Chain offset %s complete: %d intersections, %d gaps filled in %.1fms",
            chain.id,
            result.metrics.intersections_found,
            result.metrics.gaps_filled,
            result.metrics.processing_time_ms,
        )
        return result

    def _metrics(self, chain: Chain, chains: list[OffsetChain], start: float) -> ChainOffsetMetrics:
        return ChainOffsetMetrics(
            total_shapes=len(chain.shapes),
            intersections_found=sum(len(c.intersection_points) for c in chains),
            gaps_filled=sum(len(c.gap_fills) for c in chains),
            processing_time_ms=(time.perf_counter() - start) * 1000,
        )

    def _process_side(
        self,
        shapes: list[ShapeBase],
        side: OffsetSide,
        chain: Chain,
        is_closed: bool,
        warnings: list[str],
    ) -> OffsetChain:
        t0 = time.perf_counter()
        try:
            corners, self_hits = self.collect_intersections(shapes, is_closed)
            trimmed = self.apply_trimming(shapes, corners, is_closed)
            filled = self.apply_gap_filling(trimmed.shapes, is_closed)
            report = validate_chain_connectivity(filled.shapes, self.params.tolerance, is_closed)
        except Exception as e:
            logger.warning("  %s side FAILED: %s", side.value, e)
            warnings.append(f"{side.value}: processing failed ({e}); raw offsets returned")
            return OffsetChain(
                original_chain_id=chain.id,
                side=side,
                shapes=tuple(shapes),
                closed=is_closed,
                continuous=False,
            )

        warnings.extend(f"{side.value}: {w}" for w in trimmed.warnings + filled.warnings)
        continuous = report.is_connected and trimmed.failures == 0 and filled.unresolved == 0
        logger.debug(
            "  %s side: %d shapes, %d trims, %d fills, continuous=%s in %.1fms",
            side.value,
            len(filled.shapes),
            len(trimmed.trim_points),
            len(filled.gap_fills),
            continuous,
            (time.perf_counter() - t0) * 1000,
        )
        return OffsetChain(
            original_chain_id=chain.id,
            side=side,
            shapes=tuple(filled.shapes),
            closed=is_closed,
            continuous=continuous,
            gap_fills=tuple(filled.gap_fills),
            trim_points=tuple(trimmed.trim_points),
            intersection_points=tuple(list(corners.values()) + self_hits),
        )

    def collect_intersections(
        self,
        shapes: list[ShapeBase],
        is_closed: bool,
    ) -> tuple[dict[tuple[int, int], IntersectionResult], list[IntersectionResult]]:
        """Best corner intersection per consecutive pair, plus polyline self-crossings."""
        corners: dict[tuple[int, int], IntersectionResult] = {}
        for i, j in consecutive_pairs(len(shapes), is_closed):
            hits = find_shape_intersections(
                shapes[i],
                shapes[j],
                self.params.tolerance,
                allow_extensions=True,
                max_extension_length=self.params.max_extension,
                intersection_mode=self.params.intersection_type,
            )
            best = select_best_intersection(hits, shapes[i], shapes[j])
            if best is not None:
                corners[(i, j)] = best

        self_hits: list[IntersectionResult] = []
        if self.params.polyline_intersections:
            for shape in shapes:
                if isinstance(shape, Polyline):
                    self_hits.extend(find_polyline_self_intersections(shape))
        return corners, self_hits

    def apply_trimming(
        self,
        shapes: list[ShapeBase],
        corners: dict[tuple[int, int], IntersectionResult],
        is_closed: bool,
    ) -> TrimmingOutcome:
        outcome = TrimmingOutcome(shapes=list(shapes))
        current = outcome.shapes
        for i, j in consecutive_pairs(len(current), is_closed):
            hit = corners.get((i, j))
            if hit is None:
                continue
            result = trim_consecutive_shapes(current[i], current[j], [hit], self.params.tolerance)
            if not (result.shape1_result.success and result.shape2_result.success):
                outcome.failures += 1
                errors = result.shape1_result.errors + result.shape2_result.errors
                outcome.warnings.append(f"trim failed between shapes {i} and {j}: {'; '.join(errors)}")
                continue
            new1, new2 = result.shape1_result.shape, result.shape2_result.shape
            outcome.trim_points.append(
                TrimPoint(
                    point=hit.point,
                    shape_index1=i,
                    shape_index2=j,
                    trim_amount1=calculate_trim_amount(current[i], new1),
                    trim_amount2=calculate_trim_amount(current[j], new2),
                    corner_type="tangent" if hit.type == "tangent" else "sharp",
                )
            )
            current[i], current[j] = new1, new2
        return outcome

    def apply_gap_filling(self, shapes: list[ShapeBase], is_closed: bool) -> FillingOutcome:
        outcome = FillingOutcome(shapes=list(shapes))
        current = outcome.shapes
        options = FillOptions(
            max_extension=self.params.gap_fill_extension,
            tolerance=self.params.tolerance,
            snap_threshold=self.params.snap_threshold,
        )
        for i, j in consecutive_pairs(len(current), is_closed):
            gap = detect_gap(current[i], current[j], i, j, self.params.tolerance)
            if gap is None:
                continue
            fill = fill_gap_between_shapes(gap, options)
            if not fill.success:
                outcome.unresolved += 1
                outcome.warnings.append("; ".join(fill.errors) or f"gap between shapes {i} and {j} not filled")
                continue
            outcome.gap_fills.append(
                GapFillingResult(
                    method=fill.method,
                    original_shape1=current[i],
                    original_shape2=current[j],
                    modified_shape1=fill.shape1,
                    modified_shape2=fill.shape2,
                    gap_size=gap.gap_size,
                    gap_location=GapLocation(shape_index1=i, shape_index2=j, point=gap.gap_location),
                )
            )
            current[i], current[j] = fill.shape1, fill.shape2
        return outcome


def offset_chain(
    chain: Chain,
    distance: float,
    params: ChainOffsetParameters = DEFAULT_CHAIN_OFFSET_PARAMETERS,
) -> ChainOffsetResult:
    """Offset ``chain`` by ``|distance|`` on both sides."""
    return ChainOffsetPipeline(params).run(chain, distance)
