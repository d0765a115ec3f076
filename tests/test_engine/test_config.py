"""Tests for engine parameters and environment settings."""

import logging

import pytest
from pydantic import ValidationError

from chainoffset.config import Settings, configure_logging
from chainoffset.engine.config import DEFAULT_CHAIN_OFFSET_PARAMETERS, ChainOffsetParameters


def test_defaults():
    params = DEFAULT_CHAIN_OFFSET_PARAMETERS
    assert params.tolerance == 0.1
    assert params.max_extension == 50.0
    assert params.snap_threshold == 0.5
    assert params.intersection_type == "infinite"
    assert params.polyline_intersections is False


def test_gap_fill_extension_defaults_to_max_extension():
    assert ChainOffsetParameters(max_extension=20.0).gap_fill_extension == 20.0
    assert ChainOffsetParameters(max_extension=20.0, gap_max_extension=5.0).gap_fill_extension == 5.0


@pytest.mark.parametrize(
    "field,value",
    [
        ("tolerance", 0.0),
        ("max_extension", -1.0),
        ("snap_threshold", -0.1),
        ("side_confidence_threshold", 1.5),
        ("intersection_type", "sideways"),
    ],
)
def test_invalid_parameters_rejected(field, value):
    with pytest.raises(ValidationError):
        ChainOffsetParameters(**{field: value})


def test_parameters_are_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_CHAIN_OFFSET_PARAMETERS.tolerance = 1.0


def test_from_settings(monkeypatch):
    monkeypatch.setenv("CHAINOFFSET_TOLERANCE", "0.25")
    monkeypatch.setenv("CHAINOFFSET_MAX_EXTENSION", "12")
    params = ChainOffsetParameters.from_settings(Settings())
    assert params.tolerance == 0.25
    assert params.max_extension == 12.0


def test_configure_logging_accepts_level_names():
    configure_logging("debug")
    configure_logging("not-a-level")
    assert logging.getLogger().handlers
