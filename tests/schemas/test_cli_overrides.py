"""Tests for CLIConfig schema and conversion to internal overrides."""

import pytest
from pydantic import ValidationError

from fovtool.schemas.cli import CLIConfig

pytestmark = pytest.mark.unit


def test_cli_to_internal_overrides_empty():
    """No flags, no overrides."""
    assert CLIConfig().to_internal_overrides() == {}


def test_cli_to_internal_overrides_with_multiple_fields():
    cli = CLIConfig(inputs=["a.fake"], output="out", fov_offset=2, workers=4, naming="standard")
    overrides = cli.to_internal_overrides()
    assert overrides["inputs"] == ["a.fake"]
    assert overrides["output"] == "out"
    assert overrides["fov_offset"] == 2
    assert overrides["workers"] == 4
    assert overrides["naming"] == "standard"


def test_no_tiles_disables_tile_writing():
    overrides = CLIConfig(no_tiles=True).to_internal_overrides()
    assert overrides["write_tiles"] is False


def test_tiles_are_not_overridden_by_default():
    assert "write_tiles" not in CLIConfig(output="out").to_internal_overrides()


def test_logging_overrides_are_nested():
    overrides = CLIConfig(log_level="debug", log_file="run.log").to_internal_overrides()
    assert overrides["logging"] == {"level": "DEBUG", "file": "run.log"}


def test_warn_is_accepted_as_warning():
    assert CLIConfig(log_level="warn").log_level == "WARNING"


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        CLIConfig(radar_id="KHTX")


class TestActionInference:
    """The action is derived from the flags."""

    def test_output_means_convert(self):
        assert CLIConfig(output="out").action == "convert"

    def test_info_wins_over_output(self):
        assert CLIConfig(output="out", info=True).action == "info"

    def test_info_wins_over_guess(self):
        assert CLIConfig(info=True, guess=True).action == "info"

    def test_guess_with_pattern_output(self):
        assert CLIConfig(guess=True, output="x.pattern").action == "guess"

    def test_no_flags_no_action(self):
        assert CLIConfig(inputs=["a.fake"]).action is None

    def test_action_reaches_overrides(self):
        assert CLIConfig(guess=True).to_internal_overrides()["action"] == "guess"
