"""End-to-end runs of the command-line tool.

Each test builds synthetic inputs, runs the tool like a user would, and
checks the exit code and the files written.
"""

import json

import pytest

from tests.helpers.fake_dataset import find, grep, matches

pytestmark = pytest.mark.integration

SMALL = {"sizeX": 16, "sizeY": 8}


def small(**options):
    return {**SMALL, **options}


class TestExitCodes:

    def test_input_does_not_exist(self, run_tool, make_fake, out_dir):
        fake = make_fake(small())
        fake.unlink()
        assert run_tool("-o", out_dir, fake) == 1

    def test_output_exists(self, run_tool, make_fake, out_dir):
        out_dir.mkdir()
        assert run_tool("-o", out_dir, make_fake(small())) == 3

    def test_multiple_series_without_choice(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small(series=2))) == 4

    def test_multiple_series_with_choice(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small(series=2)), "-s", "0") == 0

    def test_negative_fov(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small()), "-f", "-1") == 5
        assert not out_dir.exists()

    def test_too_many_plates(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small(plates=2))) == 6

    def test_too_many_wells(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small(plates=1, plateRows=2))) == 7

    def test_two_screening_inputs(self, run_tool, make_fake, out_dir):
        a = make_fake(small(plates=1), name="a")
        b = make_fake(small(plates=1), name="b")
        assert run_tool("-o", out_dir, a, b) == 8

    def test_pattern_suffix(self, run_tool, make_fake, temp_dir):
        assert run_tool("--guess", "-o", temp_dir / "out.txt", make_fake(small())) == 9

    def test_no_action(self, run_tool, make_fake):
        assert run_tool(make_fake(small())) == 10

    def test_unknown_format(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small()), "--format", "no_such_reader_module") == 11

    def test_bad_argument_is_usage_failure(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small()), "-j", "many") == 2

    def test_zero_workers_is_usage_failure(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small()), "-j", "0") == 2

    def test_series_with_several_inputs(self, run_tool, make_fake, out_dir):
        a = make_fake(small(), name="a")
        b = make_fake(small(), name="b")
        assert run_tool("-o", out_dir, a, b, "-s", "0") == 2

    def test_unknown_naming(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small()), "-n", "fancy") == 2

    def test_error_banner_on_stderr(self, run_tool, make_fake, out_dir, capsys):
        run_tool("-o", out_dir, make_fake(small(series=2)))
        err = capsys.readouterr().err
        assert "=" * 60 in err
        assert "Error 4:" in err
        assert "Please choose one." in err


class TestConversion:

    def test_5d_image(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small(sizeZ=5, sizeT=4, sizeC=3))) == 0
        assert matches("fov_000_Z4_T3_C2.ome.tiff", out_dir) == 1
        assert matches(".ome.tiff", out_dir) == 60

        doc = json.loads((out_dir / "primary_image-fov_000.json").read_text(encoding="utf-8"))
        assert len(doc["tiles"]) == 60
        assert doc["tiles"][-1]["file"] == "primary_image-fov_000_Z4_T3_C2.ome.tiff"
        assert doc["shape"] == {"c": 3, "r": 4, "z": 5}

    def test_non_default_fov(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small()), "-f", "001") == 0
        assert matches("fov_001_Z0_T0_C0.ome.tiff", out_dir) == 1

    def test_all_fields_of_one_well(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small(plates=1, fields=2))) == 0
        assert matches("fov_000_Z0_T0_C0.ome.tiff", out_dir) == 1
        assert matches("fov_001_Z0_T0_C0.ome.tiff", out_dir) == 1
        assert matches("primary_image-fov_000.json", out_dir) == 1
        assert matches("primary_image-fov_001.json", out_dir) == 1
        assert matches("codebook.json", out_dir) == 1
        assert matches("experiment.json", out_dir) == 1
        assert matches("primary_image-fov.json", out_dir) == 1

    def test_position_of_field(self, run_tool, make_fake, out_dir):
        fake = make_fake(small(plates=1), series={0: {"PositionX_0": 444, "PositionY_0": 555}})
        assert run_tool("-o", out_dir, fake) == 0
        assert grep("primary_image-fov_000.companion.ome", 'PositionX="444.0"', out_dir) == 1
        assert grep("primary_image-fov_000.json", "444", out_dir) >= 1

    def test_two_ambiguous_inputs(self, run_tool, make_fake, out_dir):
        a = make_fake(small(series=2), name="a")
        b = make_fake(small(series=2), name="b")
        assert run_tool("-o", out_dir, a, b) == 4

    def test_two_ordinary_inputs(self, run_tool, make_fake, out_dir):
        a = make_fake(small(), name="a")
        b = make_fake(small(), name="b")
        assert run_tool("-o", out_dir, a, b, "-j", "2") == 0
        assert matches("fov_000_Z0_T0_C0.ome.tiff", out_dir) == 1
        assert matches("fov_001_Z0_T0_C0.ome.tiff", out_dir) == 1

    def test_no_tiles(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small(sizeC=2)), "--no-tiles") == 0
        assert matches(".ome.tiff", out_dir) == 0
        assert matches(".companion.ome", out_dir) == 0
        doc = json.loads((out_dir / "primary_image-fov_000.json").read_text(encoding="utf-8"))
        assert len(doc["tiles"]) == 2
        assert {tile["sha256"] for tile in doc["tiles"]} == {"does-not-exist"}

    def test_codebook_copied(self, run_tool, make_fake, out_dir, temp_dir):
        codebook = temp_dir / "cb.json"
        codebook.write_text('[{"codeword": [{"r": 0, "c": 0, "v": 1}], "target": "GAPDH"}]', encoding="utf-8")
        assert run_tool("-o", out_dir, make_fake(small()), "-c", codebook) == 0
        assert grep("codebook.json", "GAPDH", out_dir) == 1

    def test_log_file(self, run_tool, make_fake, out_dir, temp_dir):
        log = temp_dir / "logs" / "run.log"
        assert run_tool("-o", out_dir, make_fake(small()), "--log-level", "info", "--log-file", log) == 0
        assert "FOV 0" in log.read_text(encoding="utf-8")

    def test_all_files_flat_in_output(self, run_tool, make_fake, out_dir):
        assert run_tool("-o", out_dir, make_fake(small())) == 0
        assert all(p.parent == out_dir for p in find("", out_dir))


class TestOtherActions:

    def test_info(self, run_tool, make_fake, capsys):
        assert run_tool("--info", make_fake(small(series=2, sizeZ=3))) == 0
        out = capsys.readouterr().out
        assert "size_z" in out
        assert len(out.strip().splitlines()) == 3

    def test_guess_prints_pattern(self, run_tool, input_dir, capsys):
        for t in (1, 2, 3):
            (input_dir / f"scan_t0{t}.tif").touch()
        assert run_tool("--guess", input_dir / "scan_t01.tif") == 0
        assert capsys.readouterr().out.strip().endswith("scan_t<01-03>.tif")

    def test_guess_writes_pattern_file(self, run_tool, input_dir, temp_dir):
        files = [input_dir / f"well_{i}.tif" for i in (0, 1)]
        for f in files:
            f.touch()
        target = temp_dir / "wells.pattern"
        assert run_tool("--guess", "-o", target, *files) == 0
        assert target.read_text(encoding="utf-8").strip().endswith("well_<0-1>.tif")

    def test_guess_target_exists(self, run_tool, input_dir, temp_dir):
        (input_dir / "a_1.tif").touch()
        target = temp_dir / "x.pattern"
        target.touch()
        assert run_tool("--guess", "-o", target, input_dir / "a_1.tif") == 3
