"""File pattern guessing for grouped inputs.

Related acquisitions are often stored one file per position, channel or time
point, with the varying index embedded in the file name::

    scan_t01_c0.tif, scan_t01_c1.tif, scan_t02_c0.tif, ...

``guess_pattern()`` collapses such a group into a single pattern where each
varying number becomes a block::

    scan_t<01-02>_c<0-1>.tif

Block syntax
------------
``<a-b>``     contiguous range, zero padded when the inputs are
``<a-b:s>``   range with step ``s``
``<v1,v2>``   explicit list, for values that do not form a range
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from fovtool.contracts import UsageFailure

__all__ = ['split_name', 'guess_pattern', 'write_pattern']

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"(\d+)")


def split_name(name: str) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Split a file name into its text parts and its numbers.

    Examples
    --------
    >>> split_name("scan_t01_c0.tif")
    (('scan_t', '_c', '.tif'), ('01', '0'))
    """
    tokens = _NUMBER.split(name)
    return tuple(tokens[0::2]), tuple(tokens[1::2])


def _block(values: Sequence[str]) -> str:
    """Render the block for one numeric slot."""
    unique = sorted(set(values), key=int)
    if len(unique) == 1:
        return unique[0]

    numbers = [int(v) for v in unique]
    widths = {len(v) for v in unique}
    padded = len(widths) == 1 and any(v.startswith("0") for v in unique)
    width = widths.pop() if padded else 0

    steps = {b - a for a, b in zip(numbers, numbers[1:])}
    # two values only form a range when adjacent
    if steps == {1} or (len(steps) == 1 and len(numbers) > 2):
        step = steps.pop()
        first, last = str(numbers[0]).zfill(width), str(numbers[-1]).zfill(width)
        if step == 1:
            return f"<{first}-{last}>"
        return f"<{first}-{last}:{step}>"
    return "<" + ",".join(unique) + ">"


def _siblings(path: Path) -> List[Path]:
    """Files next to ``path`` sharing its name structure, ``path`` included."""
    text, _ = split_name(path.name)
    group = [
        p for p in sorted(path.parent.iterdir())
        if p.is_file() and split_name(p.name)[0] == text
    ]
    return group or [path]


def guess_pattern(paths: Sequence) -> str:
    """Derive a file pattern covering ``paths``.

    Parameters
    ----------
    paths : sequence of str or Path
        The grouped inputs. A single input is expanded to the sibling files
        in its directory that share its name structure.

    Returns
    -------
    str
        Pattern including the inputs' directory.

    Raises
    ------
    UsageFailure
        If the inputs live in different directories or do not share a common
        name structure.
    """
    paths = [Path(p) for p in paths]
    if not paths:
        raise UsageFailure("no inputs to guess a pattern from")

    if len(paths) == 1:
        paths = _siblings(paths[0])
        logger.info("Guessing pattern from %d sibling file(s)", len(paths))

    parents = {p.parent for p in paths}
    if len(parents) > 1:
        raise UsageFailure("inputs must share one directory to guess a pattern")

    text, _ = split_name(paths[0].name)
    slots: Dict[int, List[str]] = {i: [] for i in range(len(text) - 1)}
    for path in paths:
        other_text, numbers = split_name(path.name)
        if other_text != text:
            raise UsageFailure(
                f"{path.name} does not match the name structure of {paths[0].name}"
            )
        for i, number in enumerate(numbers):
            slots[i].append(number)

    parts = [text[0]]
    for i in range(len(text) - 1):
        parts.append(_block(slots[i]))
        parts.append(text[i + 1])
    pattern = "".join(parts)

    return str(parents.pop() / pattern)


def write_pattern(pattern: str, target: Path) -> Path:
    """Write ``pattern`` as the single line of a ``.pattern`` file."""
    target = Path(target)
    target.write_text(pattern + "\n", encoding="utf-8")
    logger.info("Wrote pattern %s to %s", pattern, target)
    return target
