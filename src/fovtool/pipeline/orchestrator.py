"""Concurrent conversion orchestration.

Runs the conversion of every input on a fixed-size worker pool and reduces
the per-task results into one exit code.
"""

import logging
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, List, Optional

from fovtool.backends import ImageSource, open_source
from fovtool.contracts import UsageError, UsageFailure, assert_unique_fovs
from fovtool.naming import NamingScheme
from fovtool.pipeline.converter import (
    ConversionStats,
    InstrumentedTileWriter,
    TileWriter,
    convert_series,
    stats_hook,
)
from fovtool.pipeline.experiment import ExperimentWriter
from fovtool.pipeline.resolver import FOVAssignment, resolve_source
from fovtool.pipeline.tiles import build_fov_manifest, write_fov_manifest

__all__ = ['ConversionOrchestrator', 'TaskResult', 'RunResult']

logger = logging.getLogger(__name__)


@dataclass
class TaskResult:
    """Outcome of one task.

    ``code`` is 0 on success and 1 when conversion failed. A discovery task
    that found several fields returns them in ``fanout`` instead of
    converting them itself.
    """
    code: int = 0
    fovs: List[int] = field(default_factory=list)
    stats: ConversionStats = field(default_factory=ConversionStats)
    fanout: List[FOVAssignment] = field(default_factory=list)


@dataclass
class RunResult:
    """Outcome of a whole run."""
    code: int
    fovs: List[int]
    stats: ConversionStats
    error: Optional[UsageError] = None


class ConversionOrchestrator:
    """Converts all inputs of a run on a bounded worker pool.

    **Task model:**

    1. One discovery task per input opens the source and resolves it into
       FOV assignments. A single assignment is converted right away, reusing
       the discovery handle.

    2. A screening dataset with several fields fans out: the collector
       submits one conversion task per field. Fan-out tasks are submitted
       from the collecting thread, never from a worker, so a pool of size 1
       cannot deadlock.

    3. Every conversion task writes tiles and companion (unless tiles are
       disabled), builds and writes the FOV manifest, then records the FOV
       with ``ExperimentWriter.add_fov_and_flush()``, which is the only
       shared state and is serialized by the writer's lock.

    **Handles:**

    Backend handles are not thread-safe. Each task opens its own and closes
    it when done; handles are never passed between workers.

    **Results:**

    Futures are collected in submission order. The exit code is the sum of
    the per-task codes, unless a task raised a usage error: then the first
    such error (in submission order) decides the code. Once the run has an
    error, queued tasks that have not started are cancelled and no further
    fan-out is submitted; tasks already running are not interrupted and
    their results are still collected.

    Example usage::

        orch = ConversionOrchestrator(config, naming, out_dir)
        result = orch.run()
        sys.exit(result.code)
    """

    def __init__(self, config, naming: NamingScheme, out_dir,
                 experiment: Optional[ExperimentWriter] = None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Validated runtime configuration. Reads ``inputs``, ``series``,
            ``fov_offset``, ``workers``, ``write_tiles``, ``format``,
            ``codebook`` and ``output_options``.
        naming : NamingScheme
            File naming scheme.
        out_dir : str or Path
            Existing output directory.
        experiment : ExperimentWriter, optional
            Assembler for the aggregate documents. Created when None.
        """
        self.config = config
        self.naming = naming
        self.out_dir = Path(out_dir)
        self.experiment = experiment or ExperimentWriter(
            naming, self.out_dir,
            codebook=config.codebook,
            indent=config.output_options.json_indent,
        )
        self.executor: Optional[ThreadPoolExecutor] = None

    def run(self) -> RunResult:
        """Convert every input and return the reduced result."""
        inputs = self.config.inputs
        start = time.time()

        logger.info("=" * 60)
        logger.info("Converting %d input(s) with %d worker(s)", len(inputs), self.config.workers)
        logger.info("=" * 60)

        self.executor = ThreadPoolExecutor(
            max_workers=self.config.workers, thread_name_prefix="fovtool"
        )
        pending: Deque[Future] = deque(
            self.executor.submit(self._discover, position, path)
            for position, path in enumerate(inputs)
        )

        code = 0
        fovs: List[int] = []
        stats = ConversionStats()
        error: Optional[UsageError] = None
        interrupted = False
        try:
            while pending:
                future = pending.popleft()
                if future.cancelled():
                    continue
                try:
                    result = future.result()
                except UsageError as e:
                    logger.error("Task failed: %s", e.message)
                    if error is None:
                        error = e
                        self._cancel_queued(pending)
                    continue
                except Exception as exc:
                    logger.exception("Unexpected failure in conversion task")
                    if error is None:
                        error = UsageFailure(f"unexpected error: {exc!r}")
                        error.__cause__ = exc
                        self._cancel_queued(pending)
                    continue

                code += result.code
                fovs.extend(result.fovs)
                stats = stats.merge(result.stats)
                if result.fanout and error is None:
                    for assignment in result.fanout:
                        pending.append(self.executor.submit(self._convert_assignment, assignment))
        except KeyboardInterrupt:
            interrupted = True
            logger.warning("Interrupted; cancelling queued tasks")
            raise
        finally:
            self.executor.shutdown(wait=True, cancel_futures=interrupted or error is not None)

        elapsed = time.time() - start
        if error is not None:
            return RunResult(code=int(error.code), fovs=sorted(fovs), stats=stats, error=error)

        assert_unique_fovs(fovs)
        self.experiment.flush()

        logger.info("=" * 60)
        logger.info("Finished %d FOV(s) in %.1f seconds (rc=%d)", len(fovs), elapsed, code)
        logger.info("Tiles: %d, %d bytes (Avg. %.3f MB/s)",
                    stats.calls, stats.bytes, stats.throughput)
        logger.info("=" * 60)
        return RunResult(code=code, fovs=sorted(fovs), stats=stats)

    @staticmethod
    def _cancel_queued(pending: Deque[Future]) -> None:
        """Cancel every task that has not started yet; running ones finish."""
        cancelled = sum(1 for future in pending if future.cancel())
        if cancelled:
            logger.warning("Cancelled %d queued task(s) after a fatal error", cancelled)

    # -- tasks ---------------------------------------------------------------

    def _discover(self, position: int, path: str) -> TaskResult:
        """Open one input, resolve it, and convert it if it is a single FOV."""
        with open_source(path, self.config.format) as source:
            assignments = resolve_source(
                source,
                position=position,
                input_count=len(self.config.inputs),
                explicit_series=self.config.series,
                fov_offset=self.config.fov_offset,
                format=self.config.format,
            )
            if len(assignments) == 1:
                return self._convert(source, assignments[0])

        logger.info("%s: fanning out %d fields", Path(path).name, len(assignments))
        return TaskResult(fanout=assignments)

    def _convert_assignment(self, assignment: FOVAssignment) -> TaskResult:
        with open_source(assignment.path, assignment.format) as source:
            return self._convert(source, assignment)

    def _convert(self, source: ImageSource, assignment: FOVAssignment) -> TaskResult:
        """Convert one assignment with an already opened source."""
        fov = assignment.fov
        stats = ConversionStats()
        source.set_series(assignment.series)

        if self.config.write_tiles:
            writer = InstrumentedTileWriter(
                TileWriter(self.config.output_options.tile_compression),
                stats_hook(stats),
            )
            ok = convert_series(
                source,
                assignment.series,
                self.out_dir,
                self.naming.tile_pattern(fov),
                self.naming.companion_filename(fov),
                writer,
            )
            if not ok:
                logger.error("Conversion failed for FOV %d (%s series %d)",
                             fov, source.path.name, assignment.series)
                return TaskResult(code=1, stats=stats)

        manifest = build_fov_manifest(source, fov, self.naming, self.out_dir)
        write_fov_manifest(manifest, fov, self.naming, self.out_dir,
                           indent=self.config.output_options.json_indent)
        self.experiment.add_fov_and_flush(fov)

        logger.info("✓ FOV %d: %s series %d (%d tiles)",
                    fov, source.path.name, assignment.series, len(manifest.tiles))
        return TaskResult(code=0, fovs=[fov], stats=stats)
