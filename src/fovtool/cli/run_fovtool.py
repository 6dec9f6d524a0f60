"""Core fovtool execution logic.

This module contains the actual tool runner, separated from the console
script. ``main()`` is the ``fovtool`` entry point; ``run_fovtool()`` is the
same run returning its exit code, for embedding and tests.

A run moves through fixed stages::

    PARSE_ARGS -> VALIDATE -> {GUESS_PATTERN | INFO | CONVERT} -> TERMINATE

Any usage error ends the run with its exit code after printing a banner with
the code and message.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from fovtool.backends import check_format
from fovtool.contracts import (
    InputMissing,
    NeedAction,
    NegativeFOV,
    UsageError,
    UsageFailure,
    format_usage_error,
)
from fovtool.info import dataset_info, format_info
from fovtool.naming import NAMING_SCHEMES, get_naming
from fovtool.pattern import guess_pattern, write_pattern
from fovtool.pipeline.orchestrator import ConversionOrchestrator
from fovtool.schemas import CLIConfig, InternalConfig, ParamConfig, resolve_config
from fovtool.setup_directories import (
    check_output_directory,
    check_pattern_file,
    setup_output_directory,
)

__all__ = ['build_parser', 'validate_config', 'reset_logging', 'run_fovtool', 'main']

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

# Handlers installed by this module; replaced on every run so repeated runs
# in one process do not stack them.
_installed_handlers: List[logging.Handler] = []


class ToolArgumentParser(argparse.ArgumentParser):
    """ArgumentParser reporting bad arguments as a usage error instead of exiting."""

    def error(self, message):
        raise UsageFailure(message)


def build_parser() -> ToolArgumentParser:
    parser = ToolArgumentParser(
        prog="fovtool",
        description="Convert microscopy datasets into FOV-indexed filesets",
    )
    parser.add_argument("inputs", nargs="+", help="Dataset entry file(s)")
    parser.add_argument("-o", "--output",
                        help="Output directory (must not exist), or the .pattern file with --guess")
    parser.add_argument("-f", "--fov", dest="fov_offset", type=int,
                        help="Base FOV index (default: 0)")
    parser.add_argument("-s", "--series", type=int,
                        help="Series to convert from a multi-series input")
    parser.add_argument("-j", "--jobs", dest="workers", type=int,
                        help="Number of worker threads (default: 1)")
    parser.add_argument("-n", "--naming",
                        help=f"Naming scheme ({', '.join(sorted(NAMING_SCHEMES))})")
    parser.add_argument("-c", "--codebook", help="Codebook JSON to copy into the fileset")
    parser.add_argument("--no-tiles", action="store_true",
                        help="Write JSON only, no tiles or companion files")
    parser.add_argument("--guess", action="store_true",
                        help="Guess a file pattern for the inputs and exit")
    parser.add_argument("--info", action="store_true",
                        help="Print dataset metadata and exit")
    parser.add_argument("--format", help="Force a backend format (fake, bioio, or a bioio plugin)")
    parser.add_argument("--log-level", help="Logging level (default: $FOVTOOL_LOGLEVEL or WARNING)")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def reset_logging() -> None:
    """Remove and close the handlers installed by a previous run."""
    root = logging.getLogger()
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()


def _setup_logging(config: InternalConfig) -> None:
    """Configure the root logger from the logging section of the config."""
    log_level = getattr(logging, config.logging.level, logging.WARNING)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(log_level)
    reset_logging()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    _installed_handlers.append(console_handler)

    if config.logging.file:
        log_path = Path(config.logging.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        _installed_handlers.append(file_handler)

    for handler in _installed_handlers:
        root.addHandler(handler)


def _parse(parser: ToolArgumentParser, argv) -> InternalConfig:
    """PARSE_ARGS: argv -> InternalConfig (Param < CLI)."""
    args = parser.parse_args(argv)

    log_level = args.log_level
    if args.verbose and log_level is None:
        log_level = "DEBUG"

    cli_cfg = CLIConfig.model_validate({
        k: v
        for k, v in {
            "inputs": args.inputs,
            "output": args.output,
            "fov_offset": args.fov_offset,
            "series": args.series,
            "workers": args.workers,
            "naming": args.naming,
            "no_tiles": args.no_tiles,
            "format": args.format,
            "codebook": args.codebook,
            "info": args.info,
            "guess": args.guess,
            "log_level": log_level,
            "log_file": args.log_file,
        }.items()
        if v is not None
    })
    if cli_cfg.action is None:
        raise NeedAction()

    return resolve_config(ParamConfig(), cli_cfg)


def validate_config(config: InternalConfig) -> None:
    """VALIDATE: checks that run before any input is opened for conversion.

    Order matters; the first failing check decides the exit code.

    Raises
    ------
    InputMissing, UnknownFormat, NegativeFOV, UsageFailure, PatternSuffix, OutputExists
    """
    for path in config.inputs:
        if not Path(path).exists():
            raise InputMissing(path)

    check_format(config.format)

    if config.fov_offset < 0:
        raise NegativeFOV(config.fov_offset)

    if config.series is not None and len(config.inputs) > 1:
        raise UsageFailure("-s can only be used with a single input")

    get_naming(config.naming)

    if config.codebook is not None and not Path(config.codebook).is_file():
        raise InputMissing(config.codebook)

    if config.action == "guess":
        if config.output is not None:
            check_pattern_file(config.output)
    elif config.action == "convert":
        check_output_directory(config.output)


def _guess(config: InternalConfig) -> int:
    pattern = guess_pattern(config.inputs)
    if config.output is None:
        print(pattern)
    else:
        write_pattern(pattern, check_pattern_file(config.output))
    return 0


def _info(config: InternalConfig) -> int:
    table = dataset_info(config.inputs, config.format)
    print(format_info(table))
    return 0


def _convert(config: InternalConfig) -> int:
    naming = get_naming(config.naming)
    out_dir = setup_output_directory(config.output)

    logger.info("=" * 60)
    logger.info("fovtool conversion")
    logger.info("=" * 60)
    logger.info("Inputs:  %s", ", ".join(config.inputs))
    logger.info("Output:  %s", out_dir)
    logger.info("Naming:  %s", config.naming)
    logger.info("Workers: %d", config.workers)
    logger.debug("Full internal configuration:\n%s", json.dumps(config.model_dump(), indent=2))

    result = ConversionOrchestrator(config, naming, out_dir).run()
    if result.error is not None:
        raise result.error
    return result.code


ACTIONS = {
    "guess": _guess,
    "info": _info,
    "convert": _convert,
}


def _report(error: UsageError, parser: Optional[ToolArgumentParser] = None) -> int:
    print(format_usage_error(error), file=sys.stderr)
    if parser is not None:
        parser.print_usage(sys.stderr)
    return int(error.code)


def run_fovtool(argv: Optional[List[str]] = None) -> int:
    """Execute one fovtool run.

    Parameters
    ----------
    argv : list of str, optional
        Command-line arguments without the program name. ``sys.argv[1:]``
        when None.

    Returns
    -------
    int
        Process exit code: 0 on success, the number of failed conversions,
        or the code of the usage error that ended the run.

    Examples
    --------
    Convert a single image::

        run_fovtool(["image.ome.tiff", "-o", "out"])

    Convert both fields of a screening dataset with two workers::

        run_fovtool(["plate.fake", "-o", "out", "-j", "2"])
    """
    parser = build_parser()

    try:
        config = _parse(parser, argv)
    except UsageError as e:
        return _report(e, parser)
    except ValidationError as e:
        return _report(UsageFailure(f"invalid arguments: {e.error_count()} error(s)\n{e}"), parser)

    _setup_logging(config)

    try:
        validate_config(config)
        return ACTIONS[config.action](config)
    except UsageError as e:
        return _report(e)
    except Exception as exc:
        logger.exception("Unexpected failure")
        return _report(UsageFailure(f"unexpected error: {exc!r}"))


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point."""
    return run_fovtool(argv)


if __name__ == "__main__":
    sys.exit(main())
