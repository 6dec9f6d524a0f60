"""Tests for the --info dataset summary."""

import math

import pytest

from fovtool.info import INFO_COLUMNS, dataset_info, format_info

pytestmark = pytest.mark.unit


def test_one_row_per_series(make_fake):
    table = dataset_info([make_fake({"sizeX": 4, "sizeY": 2, "series": 3})])
    assert list(table.columns) == INFO_COLUMNS
    assert list(table["series"]) == [0, 1, 2]
    assert set(table["size_x"]) == {4}


def test_screening_structure(make_fake):
    table = dataset_info([make_fake({"plates": 1, "plateCols": 2})])
    assert set(table["plates"]) == {1}
    assert set(table["wells"]) == {2}
    assert len(table) == 2


def test_positions_in_micrometers(make_fake):
    path = make_fake(series={0: {"PositionX_0": 1, "PositionXUnit_0": "mm"}})
    row = dataset_info([path]).iloc[0]
    assert row["position_x"] == 1000.0
    assert math.isnan(row["position_y"])


def test_several_inputs_concatenated(make_fake):
    table = dataset_info([make_fake(name="a"), make_fake(name="b")])
    assert len(table) == 2
    assert table["file"].str.startswith("a").iloc[0]


def test_format_info_renders_missing(make_fake):
    text = format_info(dataset_info([make_fake()]))
    assert "position_x" in text
    assert " -" in text
