import pytest

from fovtool.backends import open_source


@pytest.fixture
def open_fake(make_fake):
    """Open a fake dataset; closed after the test."""
    opened = []

    def _open(options=None, series=None, name="image"):
        source = open_source(make_fake(options, series=series, name=name))
        opened.append(source)
        return source

    yield _open
    for source in opened:
        source.close()


@pytest.fixture
def fov_dir(temp_dir):
    """Existing output directory for stage-level tests."""
    d = temp_dir / "fileset"
    d.mkdir()
    return d
