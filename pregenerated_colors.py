"""
Read and write pre-generated lists of distinct color sets.

Optimizing a color set is slow, so sets are often computed once and stored.
The file format is plain text: line i holds the i-color set as whitespace
separated, signed 32-bit ARGB integers. An optional ``# generator=<name>``
line records which color generator produced the sets.

Sets of 1 to 50 colors for each built-in generator ship with the package
and are loaded with ``pregenerated(name)``.
"""

import functools
import logging
from importlib import resources
from pathlib import Path

from color_set_generator import GENERATORS, RGB

logger = logging.getLogger(__name__)

PREGENERATED_SIZE = 50

_INT32_MIN = -(1 << 31)
_UINT32_MAX = (1 << 32) - 1
_GENERATOR_HEADER = "# generator="


def parse_color_set(line):
    """Parse one line of packed integers into a list of colors."""
    colors = []
    for token in line.split():
        value = int(token)
        if not _INT32_MIN <= value <= _UINT32_MAX:
            raise ValueError(f"{token} does not fit in 32 bits")
        colors.append(RGB.from_int(value))
    return colors


def format_color_set(colors):
    """Format colors as space separated signed packed integers."""
    return " ".join(str(color.to_signed_int()) for color in colors)


def _parse_lines(lines, source):
    """Return (generator name or None, color sets). Blank and comment lines are skipped."""
    generator = None
    color_sets = []
    for lineno, line in enumerate(lines, 1):
        stripped = line.strip()
        if stripped.startswith(_GENERATOR_HEADER):
            generator = stripped[len(_GENERATOR_HEADER):].strip() or None
            continue
        if not stripped or stripped.startswith("#"):
            continue
        try:
            color_sets.append(parse_color_set(stripped))
        except ValueError as e:
            raise ValueError(f"{source}:{lineno}: invalid color value ({e})") from e
    return generator, color_sets


def read_colors(path):
    """Read all color sets from a file."""
    with open(path, encoding="utf-8") as f:
        _, color_sets = _parse_lines(f, path)
    logger.debug("Read %d color sets from %s", len(color_sets), path)
    return color_sets


def read_generator(path):
    """Return the generator name recorded in a color set file, or None."""
    with open(path, encoding="utf-8") as f:
        generator, _ = _parse_lines(f, path)
    return generator


def write_colors(path, color_sets, generator=None):
    """Write color sets, one line per set."""
    lines = [] if generator is None else [f"{_GENERATOR_HEADER}{generator}\n"]
    lines += [format_color_set(colors) + "\n" for colors in color_sets]
    Path(path).write_text("".join(lines), encoding="utf-8")
    logger.debug("Wrote %d color sets to %s", len(color_sets), path)


def check_color_sets(color_sets, max_colors=None):
    """Check that set i (1-based) holds exactly i colors."""
    if max_colors is not None and len(color_sets) != max_colors:
        raise ValueError(f"Expected {max_colors} color sets, found {len(color_sets)}")
    for i, colors in enumerate(color_sets, 1):
        if len(colors) != i:
            raise ValueError(f"Color set {i} holds {len(colors)} colors, expected {i}")


@functools.lru_cache(maxsize=None)
def _load_pregenerated(name):
    resource = resources.files("pregenerated_data").joinpath(f"{name}.dat")
    generator, color_sets = _parse_lines(resource.read_text(encoding="utf-8").splitlines(),
                                         f"pregenerated_data/{name}.dat")
    if generator != name:
        raise ValueError(f"pregenerated_data/{name}.dat was made by generator {generator!r}")
    check_color_sets(color_sets, PREGENERATED_SIZE)
    return tuple(tuple(colors) for colors in color_sets)


def pregenerated(name):
    """Return the shipped color sets (1 to 50 colors) for a generator name."""
    if name not in GENERATORS:
        raise ValueError(f"Unknown generator {name!r}, expected one of {sorted(GENERATORS)}")
    return [list(colors) for colors in _load_pregenerated(name)]


def cached_color_set(color_sets, n):
    """Return the stored n-color set, or None if there is no usable one."""
    if 1 <= n <= len(color_sets) and len(color_sets[n - 1]) == n:
        return list(color_sets[n - 1])
    return None
