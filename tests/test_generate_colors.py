"""
Tests for the command-line front-end and the Streamlit page.
"""
import contextlib
import io
import tempfile
import unittest
from pathlib import Path

import matplotlib.pyplot as plt

from color_set_generator import RGB
from generate_colors import main
from pregenerated_colors import (
    format_color_set, parse_color_set, pregenerated, read_colors, read_generator, write_colors
)

ROOT = Path(__file__).resolve().parent.parent
FAST_ARGS = ["--iterations", "3", "--replacements", "100"]


def run_cli(*argv):
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        status = main(list(argv))
    return status, out.getvalue().splitlines()


class TestGenerateColors(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()
        plt.close("all")

    def test_one_line_per_set_size(self):
        status, lines = run_cli("4", "--seed", "1", *FAST_ARGS)
        self.assertEqual(status, 0)
        self.assertEqual([len(parse_color_set(line)) for line in lines], [1, 2, 3, 4])

    def test_seed_reproduces_output(self):
        self.assertEqual(run_cli("3", "--seed", "5", *FAST_ARGS), run_cli("3", "--seed", "5", *FAST_ARGS))

    def test_pastel_generator(self):
        _, lines = run_cli("3", "-g", "pastel", "--seed", "2", *FAST_ARGS)
        for line in lines:
            for color in parse_color_set(line):
                self.assertTrue(all(c >= 128 for c in color.channels), color)

    def test_cache_is_reused_and_output_written(self):
        cache = self.tmp / "cache.dat"
        write_colors(cache, [[RGB(1, 2, 3)], [RGB(0, 0, 0), RGB(255, 255, 255)]])
        output = self.tmp / "out.dat"
        _, lines = run_cli("3", "--seed", "3", "--cache", str(cache), "--output", str(output), *FAST_ARGS)
        self.assertEqual(parse_color_set(lines[0]), [RGB(1, 2, 3)])
        self.assertEqual(parse_color_set(lines[1]), [RGB(0, 0, 0), RGB(255, 255, 255)])
        self.assertEqual(len(parse_color_set(lines[2])), 3)
        self.assertEqual([len(colors) for colors in read_colors(output)], [1, 2, 3])
        self.assertEqual(read_generator(output), "uniform")

    def test_pregenerated_sets(self):
        status, lines = run_cli("50", "-g", "pastel", "--pregenerated")
        self.assertEqual(status, 0)
        self.assertEqual(lines, [format_color_set(colors) for colors in pregenerated("pastel")])

    def test_cache_from_other_generator_is_rejected(self):
        cache = self.tmp / "uniform.dat"
        write_colors(cache, [[RGB(1, 2, 3)]], generator="uniform")
        with self.assertRaises(SystemExit) as ctx, contextlib.redirect_stderr(io.StringIO()) as err:
            main(["2", "-g", "pastel", "--cache", str(cache), *FAST_ARGS])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("uniform", err.getvalue())

    def test_malformed_cache_is_rejected(self):
        cache = self.tmp / "cache.dat"
        write_colors(cache, [[RGB(1, 2, 3)], [RGB(0, 0, 0), RGB(1, 1, 1), RGB(2, 2, 2)]])
        with self.assertRaises(SystemExit) as ctx, contextlib.redirect_stderr(io.StringIO()):
            main(["2", "--cache", str(cache), *FAST_ARGS])
        self.assertEqual(ctx.exception.code, 2)

    def test_plot(self):
        plot = self.tmp / "preview.png"
        run_cli("2", "--seed", "4", "--plot", str(plot), *FAST_ARGS)
        self.assertTrue(plot.exists())

    def test_bad_arguments_exit(self):
        for argv in (["0"], ["3", "-g", "neon"], ["3", "--cache", str(self.tmp / "missing.dat")]):
            with self.assertRaises(SystemExit) as ctx, contextlib.redirect_stderr(io.StringIO()):
                main(argv)
            self.assertEqual(ctx.exception.code, 2)


class TestApp(unittest.TestCase):
    """Smoke test of the Streamlit page."""

    def test_generate_button(self):
        from streamlit.testing.v1 import AppTest

        at = AppTest.from_file(str(ROOT / "app.py"), default_timeout=60)
        at.run()
        self.assertFalse(at.exception)

        at.slider(key="n_colors").set_value(4)
        at.number_input(key="seed").set_value(5)
        at.number_input(key="iterations").set_value(3)
        at.number_input(key="replacements").set_value(100)
        at.button(key="generate").click().run()

        self.assertFalse(at.exception)
        self.assertEqual(len(at.session_state["color_set"]), 4)
        self.assertEqual(len(at.metric), 3)
        self.assertTrue(any("distance-matrix" in md.value for md in at.markdown))


if __name__ == "__main__":
    unittest.main()
