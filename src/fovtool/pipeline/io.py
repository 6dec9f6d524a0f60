"""File helpers shared by the pipeline stages."""

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any

HASH_CHUNK_SIZE = 1 << 20


def sha256_file(path) -> str:
    """Hex SHA-256 digest of a file's bytes, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_json(path, data: Any, indent: int = 2) -> Path:
    """Write ``data`` as JSON, replacing ``path`` atomically.

    The document is written to a temporary file in the same directory and
    renamed over the target, so readers never see a partial file.
    """
    path = Path(path)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=indent, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return path
