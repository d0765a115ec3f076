"""Kerf compensation — picks the offset side a cut needs and records its warnings."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from chainoffset.config import settings
from chainoffset.engine.config import ChainOffsetParameters
from chainoffset.engine.pipeline import offset_chain
from chainoffset.models.kerf import CalculatedOffset, OffsetWarning
from chainoffset.models.offset import OffsetDirection
from chainoffset.models.shapes import Chain

logger = logging.getLogger(__name__)


def calculate_chain_offset(
    chain: Chain,
    direction: OffsetDirection,
    kerf_width: float,
    params: ChainOffsetParameters | None = None,
) -> CalculatedOffset | None:
    """Offset by half the kerf; INSET takes the inner/left chain, OUTSET the outer/right one."""
    if direction == OffsetDirection.NONE or kerf_width <= 0:
        return None

    params = params or ChainOffsetParameters.from_settings(settings)
    result = offset_chain(chain, kerf_width / 2.0, params)
    if not result.success:
        logger.warning("Kerf offset for chain %s failed: %s", chain.id, "; ".join(result.errors))
        return None

    selected = result.inner_chain if direction == OffsetDirection.INSET else result.outer_chain
    if selected is None:
        logger.warning("Kerf offset for chain %s produced no %s side", chain.id, direction.value)
        return None

    return CalculatedOffset(
        offset_shapes=list(selected.shapes),
        original_shapes=list(chain.shapes),
        direction=direction,
        kerf_width=kerf_width,
        gap_fills=list(selected.gap_fills),
        continuous=selected.continuous,
        warnings=list(result.warnings),
    )


class OffsetWarningsStore:
    """In-memory offset warnings keyed by (operation id, chain id)."""

    def __init__(self) -> None:
        self._warnings: dict[tuple[str, str], list[OffsetWarning]] = {}

    def add(
        self,
        operation_id: str,
        chain_id: str,
        messages: Iterable[str],
        type: str = "offset",
    ) -> list[OffsetWarning]:
        added = [
            OffsetWarning(operation_id=operation_id, chain_id=chain_id, type=type, message=m) for m in messages
        ]
        if added:
            self._warnings.setdefault((operation_id, chain_id), []).extend(added)
        return added

    def get(self, operation_id: str, chain_id: str) -> list[OffsetWarning]:
        return list(self._warnings.get((operation_id, chain_id), []))

    def clear(self, operation_id: str, chain_id: str) -> None:
        self._warnings.pop((operation_id, chain_id), None)

    def clear_operation(self, operation_id: str) -> None:
        for key in [k for k in self._warnings if k[0] == operation_id]:
            del self._warnings[key]

    def clear_chain(self, chain_id: str) -> None:
        for key in [k for k in self._warnings if k[1] == chain_id]:
            del self._warnings[key]

    def all(self) -> list[OffsetWarning]:
        return [w for batch in self._warnings.values() for w in batch]

    @property
    def count(self) -> int:
        return sum(len(batch) for batch in self._warnings.values())


def compensate_chain(
    operation_id: str,
    chain: Chain,
    direction: OffsetDirection,
    kerf_width: float,
    store: OffsetWarningsStore,
    params: ChainOffsetParameters | None = None,
) -> CalculatedOffset | None:
    """Calculate a kerf offset for one chain of an operation, replacing its stored warnings."""
    store.clear(operation_id, chain.id)
    calculated = calculate_chain_offset(chain, direction, kerf_width, params)
    if calculated is None:
        if direction != OffsetDirection.NONE and kerf_width > 0:
            store.add(operation_id, chain.id, [f"Failed to calculate offset for chain {chain.id}"])
        return None

    messages = list(calculated.warnings)
    if not calculated.continuous:
        messages.append(f"Offset for chain {chain.id} is not continuous")
    store.add(operation_id, chain.id, messages)
    return calculated
