"""FOV manifest contracts.

Enforces the guarantees the tile manifest builder makes: one tile per
(z, t, c) combination, enumerated z outermost and c innermost, with unique
file names, and unique output FOV indices across a run.
"""

from typing import Iterable

from fovtool.contracts.base import require
from fovtool.schemas.documents import FOVManifest


def assert_fov_manifest(manifest: FOVManifest, size_z: int, size_t: int, size_c: int) -> None:
    """Enforce the FOV manifest contract.

    Called right after a manifest is built and before it is written.

    Parameters
    ----------
    manifest : FOVManifest
        Manifest from ``build_fov_manifest()``.
    size_z, size_t, size_c : int
        Dimensions reported by the backend for the FOV's series.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    expected = size_z * size_t * size_c
    require(
        len(manifest.tiles) == expected,
        f"FOV contract violated: {len(manifest.tiles)} tiles, expected {expected}"
    )
    require(
        manifest.shape == {"c": size_c, "r": size_t, "z": size_z},
        f"FOV contract violated: shape {manifest.shape} does not match "
        f"(c={size_c}, r={size_t}, z={size_z})"
    )

    files = [tile.file for tile in manifest.tiles]
    require(
        len(set(files)) == len(files),
        "FOV contract violated: duplicate tile file names"
    )

    order = [(tile.indices["z"], tile.indices["r"], tile.indices["c"]) for tile in manifest.tiles]
    require(
        order == sorted(order),
        "FOV contract violated: tiles are not enumerated z, then t, then c"
    )


def assert_unique_fovs(fovs: Iterable[int]) -> None:
    """Output FOV indices must be unique within a run."""
    seen = set()
    for fov in fovs:
        require(fov not in seen, f"FOV contract violated: output FOV {fov} assigned twice")
        seen.add(fov)
