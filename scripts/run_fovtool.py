#!/usr/bin/env python3
"""``fovtool`` runner for a source checkout.

Usage:
    python scripts/run_fovtool.py image.ome.tiff -o out
    python scripts/run_fovtool.py plate.fake -o out -j 4
    python scripts/run_fovtool.py scan_t01.tif --guess

Installed copies provide the same as the ``fovtool`` console script.
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from fovtool.cli import main


if __name__ == "__main__":
    sys.exit(main())
