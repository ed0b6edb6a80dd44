"""
Unit tests for the pre-generated color set file format.
"""
import tempfile
import unittest
from pathlib import Path

from color_set_generator import RGB
from pregenerated_colors import (
    PREGENERATED_SIZE, cached_color_set, check_color_sets, format_color_set,
    parse_color_set, pregenerated, read_colors, read_generator, write_colors
)

SETS = [
    [RGB(255, 0, 0)],
    [RGB(0, 0, 0), RGB(255, 255, 255)],
    [RGB(255, 0, 0), RGB(0, 255, 0), RGB(0, 0, 255)],
]


class TestPregeneratedColors(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_format_uses_signed_integers(self):
        self.assertEqual(format_color_set([RGB(255, 255, 255), RGB(0, 0, 0, 0)]), "-1 0")
        self.assertEqual(parse_color_set("-65536  -16777216\n"), [RGB(255, 0, 0), RGB(0, 0, 0)])

    def test_parse_accepts_unsigned_form(self):
        self.assertEqual(parse_color_set(str(0xFFFF0000)), [RGB(255, 0, 0)])

    def test_parse_rejects_bad_values(self):
        with self.assertRaises(ValueError):
            parse_color_set("12 abc")
        with self.assertRaises(ValueError):
            parse_color_set(str(1 << 32))

    def test_write_then_read(self):
        path = self.tmp / "uniform.dat"
        write_colors(path, SETS)
        self.assertEqual(path.read_text(encoding="utf-8").splitlines()[1], "-16777216 -1")
        self.assertEqual(read_colors(path), SETS)

    def test_generator_header(self):
        path = self.tmp / "pastel.dat"
        write_colors(path, SETS, generator="pastel")
        self.assertEqual(path.read_text(encoding="utf-8").splitlines()[0], "# generator=pastel")
        self.assertEqual(read_generator(path), "pastel")
        self.assertEqual(read_colors(path), SETS)
        write_colors(path, SETS)
        self.assertIsNone(read_generator(path))

    def test_read_skips_blank_lines_and_reports_line(self):
        path = self.tmp / "colors.dat"
        path.write_text("-65536\n\n-16777216 -1\nnot-a-number\n", encoding="utf-8")
        with self.assertRaisesRegex(ValueError, r"colors\.dat:4"):
            read_colors(path)
        path.write_text("-65536\n\n-16777216 -1\n", encoding="utf-8")
        self.assertEqual(len(read_colors(path)), 2)

    def test_check_color_sets(self):
        check_color_sets(SETS, max_colors=3)
        with self.assertRaises(ValueError):
            check_color_sets(SETS, max_colors=50)
        with self.assertRaises(ValueError):
            check_color_sets([SETS[0], SETS[2]])

    def test_cached_color_set(self):
        self.assertEqual(cached_color_set(SETS, 2), SETS[1])
        self.assertIsNone(cached_color_set(SETS, 0))
        self.assertIsNone(cached_color_set(SETS, 4))
        self.assertIsNone(cached_color_set([SETS[0], SETS[2]], 2))


class TestShippedColorSets(unittest.TestCase):
    """The color sets bundled with the package for each generator."""

    def test_uniform_sets(self):
        sets = pregenerated("uniform")
        self.assertEqual(len(sets), PREGENERATED_SIZE)
        check_color_sets(sets, PREGENERATED_SIZE)

    def test_pastel_sets(self):
        sets = pregenerated("pastel")
        check_color_sets(sets, PREGENERATED_SIZE)
        for colors in sets:
            for color in colors:
                self.assertTrue(all(c >= 128 for c in color.channels), color)

    def test_sets_are_distinct_colors(self):
        for name in ("uniform", "pastel"):
            for i, colors in enumerate(pregenerated(name), 1):
                self.assertEqual(len(set(colors)), i)

    def test_returns_copies(self):
        pregenerated("uniform")[0].clear()
        self.assertEqual(len(pregenerated("uniform")[0]), 1)

    def test_unknown_generator(self):
        with self.assertRaises(ValueError):
            pregenerated("neon")


if __name__ == "__main__":
    unittest.main()
