#!/usr/bin/env python3
"""
Generate lists of visually distinct colors from the command line.

For every i in 1..N prints one line with i colors, written as signed 32-bit
ARGB integers separated by spaces.
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from color_set_generator import (
    GENERATORS, MAX_REPLACEMENTS, N_ITERATIONS,
    SimulatedAnnealingGenerator, visualize_palette
)
from pregenerated_colors import (
    cached_color_set, check_color_sets, format_color_set, pregenerated,
    read_colors, read_generator, write_colors
)

logger = logging.getLogger(__name__)

_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def _positive_int(value):
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return n


def build_parser():
    parser = argparse.ArgumentParser(
        description="Generate lists of visually distinct colors. "
                    "Line i of the output holds i colors.")
    parser.add_argument("max_colors", type=_positive_int,
                        help="Size of the largest color set")
    parser.add_argument("-g", "--generator", choices=sorted(GENERATORS), default="uniform",
                        help="Color generator to use (default: uniform)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for reproducible output")
    parser.add_argument("--iterations", type=_positive_int, default=N_ITERATIONS,
                        help=f"Annealing iterations (default: {N_ITERATIONS})")
    parser.add_argument("--replacements", type=_positive_int, default=MAX_REPLACEMENTS,
                        help=f"Candidates per annealing step (default: {MAX_REPLACEMENTS})")
    cache = parser.add_mutually_exclusive_group()
    cache.add_argument("--cache", type=Path,
                       help="File with pre-generated color sets to reuse")
    cache.add_argument("--pregenerated", action="store_true",
                       help="Reuse the color sets shipped for the chosen generator")
    parser.add_argument("--output", type=Path,
                        help="Also write the color sets to this file")
    parser.add_argument("--plot", type=Path,
                        help="Save a preview of the largest color set (PNG)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-v) or every annealing step (-vv)")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=_LOG_LEVELS[min(args.verbose, len(_LOG_LEVELS) - 1)],
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
                        stream=sys.stderr)

    cached = []
    if args.pregenerated:
        cached = pregenerated(args.generator)
    elif args.cache is not None:
        try:
            cached = read_colors(args.cache)
            check_color_sets(cached)
            made_by = read_generator(args.cache)
        except (OSError, ValueError) as e:
            parser.error(f"cannot read cache {args.cache}: {e}")
        if made_by is not None and made_by != args.generator:
            parser.error(f"cache {args.cache} holds {made_by} colors, not {args.generator}")

    # Independent streams for the sampler and the annealing decisions
    sampler_seed, anneal_seed = np.random.SeedSequence(args.seed).spawn(2)
    sampler = GENERATORS[args.generator](np.random.default_rng(sampler_seed))
    generator = SimulatedAnnealingGenerator(
        sampler, np.random.default_rng(anneal_seed),
        n_iterations=args.iterations, max_replacements=args.replacements)

    color_sets = []
    for i in range(1, args.max_colors + 1):
        colors = cached_color_set(cached, i)
        if colors is None:
            logger.info("Generating %d colors with %r", i, sampler)
            colors = sorted(generator.generate(i))
        else:
            logger.info("Using cached %d-color set", i)
        color_sets.append(colors)
        print(format_color_set(colors), flush=True)

    if args.output is not None:
        write_colors(args.output, color_sets, generator=args.generator)
    if args.plot is not None:
        visualize_palette(color_sets[-1], path=args.plot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
