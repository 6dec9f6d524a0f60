"""Tests for backend selection."""

import pytest

from fovtool.backends import FakeImageSource, check_format, open_source
from fovtool.contracts import ExitCode, UnknownFormat

pytestmark = pytest.mark.unit


def test_fake_detected_from_path(make_fake):
    with open_source(make_fake()) as source:
        assert isinstance(source, FakeImageSource)


def test_sidecar_detected_as_fake(make_fake):
    path = make_fake(series={0: {"PositionX_0": 1}})
    assert path.name.endswith(".fake.ini")
    with open_source(path) as source:
        assert isinstance(source, FakeImageSource)


def test_forced_fake_format(make_fake):
    with open_source(make_fake(), format="fake") as source:
        assert source.format_name == "fake"


@pytest.mark.parametrize("name", [None, "fake", "bioio"])
def test_known_formats_pass(name):
    check_format(name)


def test_unknown_format():
    with pytest.raises(UnknownFormat) as excinfo:
        check_format("no_such_reader_module")
    assert excinfo.value.code == ExitCode.UNKNOWN_FORMAT
