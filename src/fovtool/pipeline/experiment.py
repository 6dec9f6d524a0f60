"""Experiment assembler.

Owns the aggregate documents of a fileset: the dataset manifest (FOV key ->
per-FOV JSON), ``experiment.json`` and ``codebook.json``. They are rewritten
in full every time a FOV completes, so an interrupted run still leaves a
consistent fileset describing the FOVs finished so far.

This is the only state shared between conversion workers. ``add_fov()`` and
``flush()`` take the same lock; ``add_fov_and_flush()`` holds it across
both steps so concurrent workers never interleave a rewrite.
"""

import json
import logging
import threading
from pathlib import Path
from typing import List, Optional

from fovtool.naming import NamingScheme
from fovtool.pipeline.io import write_json
from fovtool.schemas.documents import (
    DatasetManifest,
    ExperimentDescriptor,
    placeholder_codebook,
)

__all__ = ['ExperimentWriter', 'EXPERIMENT_FILENAME', 'CODEBOOK_FILENAME']

logger = logging.getLogger(__name__)

EXPERIMENT_FILENAME = "experiment.json"
CODEBOOK_FILENAME = "codebook.json"


class ExperimentWriter:
    """Accumulates completed FOVs and writes the aggregate documents.

    Parameters
    ----------
    naming : NamingScheme
        Scheme used for the manifest and per-FOV file names.
    out_dir : str or Path
        Output directory of the fileset.
    codebook : str or Path, optional
        Existing codebook JSON to copy into the fileset. The placeholder
        codebook is written when None.
    indent : int
        JSON indentation.

    Example usage::

        writer = ExperimentWriter(StandardNaming(), "out")
        writer.add_fov_and_flush(0)
        writer.add_fov_and_flush(1)
    """

    def __init__(self, naming: NamingScheme, out_dir, codebook=None, indent: int = 2):
        self.naming = naming
        self.out_dir = Path(out_dir)
        self.codebook_source = Path(codebook) if codebook is not None else None
        self.indent = indent
        self._fovs: List[int] = []
        self._lock = threading.Lock()
        self._codebook: Optional[list] = None

    @property
    def fovs(self) -> List[int]:
        with self._lock:
            return sorted(self._fovs)

    def add_fov(self, fov: int) -> None:
        with self._lock:
            self._add(fov)

    def flush(self) -> None:
        with self._lock:
            self._flush()

    def add_fov_and_flush(self, fov: int) -> None:
        """Record a completed FOV and rewrite the documents as one step."""
        with self._lock:
            self._add(fov)
            self._flush()

    def _add(self, fov: int) -> None:
        if fov in self._fovs:
            logger.warning("FOV %d added twice; keeping one entry", fov)
            return
        self._fovs.append(fov)

    def manifest(self) -> DatasetManifest:
        # sorted so the document does not depend on completion order
        contents = {
            self.naming.fov_key(fov): self.naming.json_filename(fov)
            for fov in sorted(self._fovs)
        }
        return DatasetManifest(contents=contents)

    def experiment(self) -> ExperimentDescriptor:
        return ExperimentDescriptor(
            images={"primary": self.naming.manifest_filename()},
            codebook=CODEBOOK_FILENAME,
        )

    def codebook(self) -> list:
        if self._codebook is None:
            if self.codebook_source is not None:
                with open(self.codebook_source, encoding="utf-8") as fh:
                    self._codebook = json.load(fh)
                logger.info("Using codebook %s", self.codebook_source)
            else:
                self._codebook = [entry.model_dump() for entry in placeholder_codebook()]
        return self._codebook

    def _flush(self) -> None:
        write_json(self.out_dir / self.naming.manifest_filename(),
                   self.manifest().model_dump(mode="json"), self.indent)
        write_json(self.out_dir / EXPERIMENT_FILENAME,
                   self.experiment().model_dump(mode="json"), self.indent)
        write_json(self.out_dir / CODEBOOK_FILENAME, self.codebook(), self.indent)
        logger.debug("Flushed experiment documents (%d FOVs)", len(self._fovs))
