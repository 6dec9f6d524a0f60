"""Tests for FOV resolution rules."""

import pytest

from fovtool.contracts import (
    ContractViolation,
    MultipleSeries,
    SingleScreeningOnly,
    TooManyPlates,
    TooManyWells,
    UsageFailure,
)
from fovtool.pipeline.resolver import FOVAssignment, resolve_source, resolve_sources

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


class TestScreeningDatasets:
    """plate_count > 0"""

    def test_every_field_becomes_a_fov(self, open_fake):
        source = open_fake({"plates": 1, "fields": 3})
        assignments = resolve_source(source, position=0, input_count=1)
        assert [(a.series, a.fov) for a in assignments] == [(0, 0), (1, 1), (2, 2)]

    def test_offset_applies_to_series(self, open_fake):
        source = open_fake({"plates": 1, "fields": 2})
        assignments = resolve_source(source, position=0, input_count=1, fov_offset=10)
        assert [a.fov for a in assignments] == [10, 11]

    def test_explicit_series_ignored(self, open_fake):
        source = open_fake({"plates": 1, "fields": 2})
        assignments = resolve_source(source, position=0, input_count=1, explicit_series=1)
        assert len(assignments) == 2

    def test_single_screening_only(self, open_fake):
        source = open_fake({"plates": 1})
        with pytest.raises(SingleScreeningOnly):
            resolve_source(source, position=0, input_count=2)

    def test_too_many_plates(self, open_fake):
        source = open_fake({"plates": 2})
        with pytest.raises(TooManyPlates, match="count=2"):
            resolve_source(source, position=0, input_count=1)

    def test_too_many_wells(self, open_fake):
        source = open_fake({"plates": 1, "plateRows": 2})
        with pytest.raises(TooManyWells, match="count=2"):
            resolve_source(source, position=0, input_count=1)

    def test_input_count_checked_before_plate_count(self, open_fake):
        source = open_fake({"plates": 2})
        with pytest.raises(SingleScreeningOnly):
            resolve_source(source, position=0, input_count=2)


class TestOtherDatasets:

    def test_single_series(self, open_fake):
        source = open_fake()
        assert resolve_source(source, position=0, input_count=1) == [
            FOVAssignment(source.path, 0, 0)
        ]

    def test_fov_follows_position(self, open_fake):
        source = open_fake()
        [assignment] = resolve_source(source, position=3, input_count=4, fov_offset=1)
        assert assignment.fov == 4

    def test_multiple_series_need_selection(self, open_fake):
        source = open_fake({"series": 2})
        with pytest.raises(MultipleSeries) as excinfo:
            resolve_source(source, position=0, input_count=1)
        assert excinfo.value.count == 2

    def test_explicit_series_selected(self, open_fake):
        source = open_fake({"series": 3})
        [assignment] = resolve_source(source, position=0, input_count=1, explicit_series=2)
        assert (assignment.series, assignment.fov) == (2, 0)

    def test_series_out_of_range(self, open_fake):
        source = open_fake({"series": 2})
        with pytest.raises(UsageFailure, match="out of range"):
            resolve_source(source, position=0, input_count=1, explicit_series=5)

    def test_format_carried(self, open_fake):
        source = open_fake()
        [assignment] = resolve_source(source, position=0, input_count=1, format="fake")
        assert assignment.format == "fake"


def test_resolve_sources_in_input_order(open_fake):
    sources = [open_fake(name="a"), open_fake(name="b"), open_fake(name="c")]
    assignments = resolve_sources(sources, fov_offset=2)
    assert [a.fov for a in assignments] == [2, 3, 4]
    assert [a.path for a in assignments] == [s.path for s in sources]


def test_resolve_sources_rejects_mixed_screening(open_fake):
    sources = [open_fake(name="a"), open_fake({"plates": 1}, name="b")]
    with pytest.raises(SingleScreeningOnly):
        resolve_sources(sources)


def test_unique_fovs_contract_holds(open_fake):
    """Input positions never collide, so the uniqueness contract is not hit."""
    sources = [open_fake(name=f"s{i}") for i in range(5)]
    try:
        resolve_sources(sources)
    except ContractViolation:
        pytest.fail("resolver produced duplicate FOVs")
