#!/usr/bin/env python3
"""
Generate sets of visually distinct colors by simulated annealing in CIE Lab.

Start from n random RGB colors and repeatedly perturb one member of the
closest pair, keeping candidates that push it away from the rest of the set.
Non-improving candidates are accepted with the Metropolis probability, which
shrinks as the temperature decays (C.A. Glasbey et al., 2006).
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
from scipy.spatial.distance import cdist, pdist, squareform

logger = logging.getLogger(__name__)

# Annealing schedule
N_ITERATIONS = 100
INNER_STEPS = 2
INITIAL_TEMPERATURE = 10.0
COOLING_RATE = 0.9

# Candidates considered per step; a step also stops after 10% were accepted.
MAX_REPLACEMENTS = 25600

# Half-width of the RGB box used for local candidates (a 5x5x5 cube).
BOX_DISTANCE = 2

# Channel ranges are half-open: [min, max)
CHANNEL_MIN = 0
CHANNEL_MAX = 256
PASTEL_MIN = 128

# sRGB to XYZ (D65) matrix
_SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

# D65 reference white
_D65_WHITE = np.array([95.047, 100.000, 108.883], dtype=np.float64)


@dataclass(frozen=True, order=True)
class RGB:
    """An 8-bit per channel color with alpha. Compares equal only to other RGB values."""

    r: int
    g: int
    b: int
    alpha: int = 0xFF

    @classmethod
    def from_int(cls, packed):
        """Unpack an ARGB integer (alpha<<24 | r<<16 | g<<8 | b).

        Signed 32-bit values are accepted, so -1 is opaque white.
        """
        packed = int(packed)
        return cls((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF,
                   (packed >> 24) & 0xFF)

    def to_int(self):
        """Pack as an unsigned ARGB integer."""
        return (self.alpha << 24) | (self.r << 16) | (self.g << 8) | self.b

    def to_signed_int(self):
        """Pack as a signed 32-bit ARGB integer."""
        packed = self.to_int()
        return packed - (1 << 32) if packed & 0x80000000 else packed

    @property
    def channels(self):
        return (self.r, self.g, self.b)

    @property
    def hex(self):
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


def _as_channels(rgb):
    """Coerce an RGB, a packed integer, a list of RGBs or a channel array to floats."""
    if isinstance(rgb, RGB):
        return np.array(rgb.channels, dtype=np.float64)
    if isinstance(rgb, (int, np.integer)):
        return np.array(RGB.from_int(rgb).channels, dtype=np.float64)
    if isinstance(rgb, (list, tuple)) and rgb and isinstance(rgb[0], RGB):
        return np.array([color.channels for color in rgb], dtype=np.float64)
    return np.asarray(rgb, dtype=np.float64)


def rgb_to_xyz(rgb):
    """Convert sRGB (0-255) to XYZ (0-100). Input shape: (..., 3)."""
    c = _as_channels(rgb) / 255.0
    # Gamma decode
    linear = np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
    return (linear @ _SRGB_TO_XYZ.T) * 100.0


def xyz_to_lab(xyz):
    """Convert XYZ (0-100) to CIE Lab relative to the D65 white point."""
    xyz = np.asarray(xyz, dtype=np.float64) / _D65_WHITE
    delta = 6.0 / 29.0
    f = np.where(xyz > delta**3,
                 np.cbrt(xyz),
                 xyz / (3.0 * delta**2) + 4.0 / 29.0)
    L = 116.0 * f[..., 1] - 16.0
    a = 500.0 * (f[..., 0] - f[..., 1])
    b = 200.0 * (f[..., 1] - f[..., 2])
    return np.stack([L, a, b], axis=-1)


def rgb_to_lab(rgb):
    """Convert RGB colors to CIE Lab."""
    return xyz_to_lab(rgb_to_xyz(rgb))


def lab_distance(lab1, lab2):
    """Euclidean distance in CIE Lab (CIE76 delta E)."""
    return np.linalg.norm(np.asarray(lab1) - np.asarray(lab2), axis=-1)


def total_distance(labs):
    """Sum of pairwise Lab distances."""
    return float(pdist(np.asarray(labs).reshape(-1, 3)).sum())


def palette_distances(colors):
    """Square matrix of pairwise Lab distances between colors."""
    colors = list(colors)
    if len(colors) < 2:
        return np.zeros((len(colors), len(colors)))
    return squareform(pdist(rgb_to_lab(colors)))


def min_pairwise_distance(colors):
    """Smallest Lab distance between any two colors."""
    colors = list(colors)
    if len(colors) < 2:
        return float('inf')
    return float(pdist(rgb_to_lab(colors)).min())


class RandomRGB:
    """Draw random colors from an RGB sub-cube.

    Each channel range is half-open ([min, max)). ``rng`` may be a
    numpy Generator, a seed, or None for fresh OS entropy.
    """

    def __init__(self, rng=None, r_range=(CHANNEL_MIN, CHANNEL_MAX),
                 g_range=(CHANNEL_MIN, CHANNEL_MAX), b_range=(CHANNEL_MIN, CHANNEL_MAX)):
        ranges = [r_range, g_range, b_range]
        for name, (lo, hi) in zip("rgb", ranges):
            if not CHANNEL_MIN <= lo < hi <= CHANNEL_MAX:
                raise ValueError(
                    f"Invalid {name} range [{lo}, {hi}): expected "
                    f"{CHANNEL_MIN} <= min < max <= {CHANNEL_MAX}")
        self.rng = np.random.default_rng(rng)
        self.mins = np.array([lo for lo, _ in ranges], dtype=np.int64)
        self.maxs = np.array([hi for _, hi in ranges], dtype=np.int64)

    def __repr__(self):
        ranges = ", ".join(f"[{lo}, {hi})" for lo, hi in zip(self.mins, self.maxs))
        return f"RandomRGB({ranges})"

    def sample_any(self, size=None):
        """Pick a color anywhere in the configured ranges.

        Returns an RGB, or a (size, 3) channel array when size is given.
        """
        return self._draw(self.mins, self.maxs, size)

    def sample_within_box(self, center, max_distance, size=None):
        """Pick a color in the (2 * max_distance + 1)^3 cube centered on ``center``.

        The cube is clipped to the configured ranges.
        """
        center = np.array(center.channels if isinstance(center, RGB) else center, dtype=np.int64)
        lower = np.maximum(self.mins, center - max_distance)
        upper = np.minimum(self.maxs, center + max_distance + 1)
        return self._draw(lower, upper, size)

    def _draw(self, lower, upper, size):
        if size is None:
            r, g, b = self.rng.integers(lower, upper)
            return RGB(int(r), int(g), int(b))
        return self.rng.integers(lower, upper, size=(size, 3))


def uniform_random_rgb(rng=None):
    """Sampler over the whole RGB cube."""
    return RandomRGB(rng)


def pastel_random_rgb(rng=None):
    """Sampler restricted to light, low-saturation colors."""
    pastel = (PASTEL_MIN, CHANNEL_MAX)
    return RandomRGB(rng, pastel, pastel, pastel)


GENERATORS = {
    'uniform': uniform_random_rgb,
    'pastel': pastel_random_rgb,
}


class ColorState:
    """Colors under optimization, held in RGB and Lab side by side.

    ``rgbs[i]`` and ``labs[i]`` always describe the same color.
    """

    def __init__(self, colors):
        self.rgbs = list(colors)
        self.labs = rgb_to_lab(self.rgbs).reshape(len(self.rgbs), 3)

    def __len__(self):
        return len(self.rgbs)

    def replace(self, idx, rgb, lab):
        self.rgbs[idx] = rgb
        self.labs[idx] = lab

    def closest_pair(self):
        """Return (i, j, distance) of the closest pair.

        Ties go to the first pair in row-major order (i, then j > i).
        """
        distances = pdist(self.labs)
        k = int(np.argmin(distances))
        rows, cols = np.triu_indices(len(self.rgbs), k=1)
        return int(rows[k]), int(cols[k]), float(distances[k])

    def candidate_distances(self, candidate_labs, idx):
        """Distance from each candidate to its nearest color, ignoring the one at idx."""
        others = np.delete(self.labs, idx, axis=0)
        return cdist(np.asarray(candidate_labs).reshape(-1, 3), others).min(axis=1)

    def total_distance(self):
        return total_distance(self.labs)


class SimulatedAnnealingGenerator:
    """Find n RGB colors that are as far apart in CIE Lab as possible.

    ``color_generator`` provides the initial colors and the candidates: any
    object with ``sample_any()`` and ``sample_within_box(center, max_distance)``
    returning RGB values. RandomRGB candidates are drawn in batches. ``rng``
    drives the annealing decisions. ``callback``, if given, is called after
    every outer iteration as ``callback(palette, meta)``.
    """

    def __init__(self, color_generator, rng=None, *, n_iterations=N_ITERATIONS,
                 max_replacements=MAX_REPLACEMENTS,
                 initial_temperature=INITIAL_TEMPERATURE, callback=None):
        if n_iterations < 1:
            raise ValueError("n_iterations must be at least 1")
        if max_replacements < 1:
            raise ValueError("max_replacements must be at least 1")
        if not initial_temperature > 0:
            raise ValueError("initial_temperature must be positive")
        self.color_generator = color_generator
        self.rng = np.random.default_rng(rng)
        self.n_iterations = n_iterations
        self.max_replacements = max_replacements
        self.initial_temperature = initial_temperature
        self.callback = callback

    def generate(self, n):
        """Generate a set of n distinct colors.

        n == 0 gives an empty set. A single color is returned as drawn.
        """
        if n < 0:
            raise ValueError(f"Cannot generate a negative number of colors: {n}")
        colors = [self.color_generator.sample_any() for _ in range(n)]
        if n < 2:
            return set(colors)

        state = ColorState(colors)
        self.refine(state)
        return set(state.rgbs)

    color_set = generate

    def refine(self, state):
        """Run the full annealing schedule on ``state`` in place."""
        temperature = self.initial_temperature
        for i in range(self.n_iterations):
            distance_before = state.total_distance()

            for _ in range(INNER_STEPS):
                self.iteration(state, i, self.n_iterations, temperature)

            distance_after = state.total_distance()
            logger.info("Iteration %d: %.2f -> %.2f", i, distance_before, distance_after)
            if self.callback is not None:
                self.callback(list(state.rgbs), {
                    'iteration': i,
                    'temperature': temperature,
                    'distance_before': distance_before,
                    'distance_after': distance_after,
                })

            temperature *= COOLING_RATE
        return state

    def iteration(self, state, n, max_n, temperature):
        """Try to replace one member of the closest pair. Updates ``state`` in place."""
        p, q, distance = state.closest_pair()
        tune_idx = p if self.rng.integers(2) == 0 else q

        # Early on most candidates come from anywhere in the cube; later
        # steps mostly search the box around the current color.
        p_rule1 = (max_n - n) / max_n
        candidates = self._candidates(state.rgbs[tune_idx], p_rule1)
        candidate_labs = rgb_to_lab(candidates)
        new_distances = state.candidate_distances(candidate_labs, tune_idx)
        draws = self.rng.random(len(new_distances))

        max_accepted = self.max_replacements // 10
        accepted = 0
        best = None
        for k, (new_dist, draw) in enumerate(zip(new_distances.tolist(), draws.tolist())):
            if accepted >= max_accepted:
                break
            if new_dist <= distance:
                p_replace = min(1.0, math.exp((new_dist - distance) / temperature))
                if draw > p_replace:
                    continue
            best = k
            distance = new_dist
            accepted += 1

        if best is not None:
            r, g, b = (int(c) for c in candidates[best])
            state.replace(tune_idx, RGB(r, g, b), candidate_labs[best])

        logger.debug("Step %d: tuned color %d, accepted %d candidates, distance %.2f",
                     n, tune_idx, accepted, distance)

    def _candidates(self, center, p_rule1):
        """Draw the step's candidates: anywhere with probability p_rule1, else near ``center``."""
        anywhere = self.rng.random(self.max_replacements) <= p_rule1
        sampler = self.color_generator
        if isinstance(sampler, RandomRGB):
            n_any = int(anywhere.sum())
            candidates = np.empty((self.max_replacements, 3), dtype=np.int64)
            candidates[anywhere] = sampler.sample_any(size=n_any)
            candidates[~anywhere] = sampler.sample_within_box(
                center, BOX_DISTANCE, size=self.max_replacements - n_any)
            return candidates

        # Other samplers only promise one color per call
        colors = [sampler.sample_any() if rule else sampler.sample_within_box(center, BOX_DISTANCE)
                  for rule in anywhere.tolist()]
        return np.array([color.channels for color in colors], dtype=np.int64)


def visualize_palette(colors, path=None, show=False):
    """Draw swatches and the Lab distance matrix of a color set."""
    colors = sorted(colors, key=lambda c: rgb_to_lab(c)[0])
    n_colors = len(colors)
    labs = rgb_to_lab(colors).reshape(n_colors, 3) if n_colors else np.zeros((0, 3))

    fig, axes = plt.subplots(2, 1, figsize=(max(6, 1.5 * n_colors), 8),
                             gridspec_kw={'height_ratios': [1, 2]})

    # Top plot: Color swatches
    ax1 = axes[0]
    ax1.set_xlim(0, max(n_colors, 1))
    ax1.set_ylim(0, 1)
    for i, color in enumerate(colors):
        ax1.add_patch(Rectangle((i, 0), 1, 1, facecolor=np.array(color.channels) / 255.0,
                                    edgecolor='black', linewidth=2))
        # Use white or black text depending on lightness
        text_color = 'white' if labs[i, 0] < 50 else 'black'
        ax1.text(i + 0.5, 0.6, color.hex, ha='center', va='center',
                 fontsize=10, fontweight='bold', color=text_color, family='monospace')
        ax1.text(i + 0.5, 0.35, f"{color.r}, {color.g}, {color.b}", ha='center', va='center',
                 fontsize=8, color=text_color, family='monospace')
    ax1.set_xticks([])
    ax1.set_yticks([])
    ax1.set_title(f"Distinct Color Set ({n_colors} colors)", fontsize=14, fontweight='bold')

    # Bottom plot: Distance matrix
    ax2 = axes[1]
    distance_matrix = palette_distances(colors)
    im = ax2.imshow(distance_matrix, cmap='YlOrRd', aspect='auto')
    ax2.set_xticks(range(n_colors))
    ax2.set_yticks(range(n_colors))
    ax2.set_xticklabels([c.hex for c in colors], rotation=45, fontsize=8)
    ax2.set_yticklabels([c.hex for c in colors], fontsize=8)
    for i in range(n_colors):
        for j in range(n_colors):
            if i != j:
                ax2.text(j, i, f'{distance_matrix[i, j]:.1f}',
                         ha="center", va="center", color="black", fontsize=8)
    ax2.set_title("CIE Lab Distance Matrix", fontsize=12, fontweight='bold')
    cbar = fig.colorbar(im, ax=ax2)
    cbar.set_label('ΔE (CIE76)', rotation=270, labelpad=20)

    fig.tight_layout()
    if path is not None:
        fig.savefig(path, dpi=150, bbox_inches='tight')
        logger.info("Palette preview saved to %s", path)
    if show:
        plt.show()
    return fig
