"""Engine configuration — tolerances and limits for one offset_chain call."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from chainoffset.config import Settings

IntersectionMode = Literal["infinite", "bounded"]


class ChainOffsetParameters(BaseModel):
    """Immutable parameter set passed explicitly into the orchestrator."""

    model_config = ConfigDict(frozen=True)

    # Endpoint coincidence / closure tolerance (drawing units)
    tolerance: float = Field(0.1, gt=0)
    # Longest virtual extension used when searching for intersections
    max_extension: float = Field(50.0, gt=0)
    # Gaps at or below this size may be closed by snapping a line endpoint
    snap_threshold: float = Field(0.5, ge=0)
    # Also record self-intersections inside polyline offsets
    polyline_intersections: bool = False
    # "bounded" only reports intersections inside both spans
    intersection_type: IntersectionMode = "infinite"
    # Separate gap-fill reach; None reuses max_extension
    gap_max_extension: float | None = Field(None, gt=0)
    # Below this confidence a same-side conflict falls back to chain winding
    side_confidence_threshold: float = Field(0.5, ge=0, le=1)

    @property
    def gap_fill_extension(self) -> float:
        return self.gap_max_extension if self.gap_max_extension is not None else self.max_extension

    @classmethod
    def from_settings(cls, settings: Settings) -> ChainOffsetParameters:
        return cls(
            tolerance=settings.chainoffset_tolerance,
            max_extension=settings.chainoffset_max_extension,
            snap_threshold=settings.chainoffset_snap_threshold,
        )


DEFAULT_CHAIN_OFFSET_PARAMETERS = ChainOffsetParameters()
