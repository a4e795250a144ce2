"""Tests for source map mappings built on Base64 VLQ."""
import unittest

from sourcemap import SourceMap, SourceMapping, decode_mappings, encode_mappings


def make_json(**overrides):
    smap = {
        "version": 3,
        "file": "app.min.js",
        "sources": ["a.js"],
        "sourcesContent": ["var a;\nfoo();\n"],
        "names": ["foo"],
        "mappings": "AAAA,IAAIA;AACA",
    }
    smap.update(overrides)
    return smap


class MappingsTest(unittest.TestCase):
    """Splitting and joining of the mappings field."""

    def test_decode_mappings(self):
        self.assertEqual(
            [[(0, 0, 0, 0), (4, 0, 0, 4, 0)], [(0, 0, 1, 0)]],
            decode_mappings("AAAA,IAAIA;AACA"),
        )

    def test_decode_empty_lines(self):
        self.assertEqual([[], [(0,)], []], decode_mappings(";A;"))
        self.assertEqual([[]], decode_mappings(""))

    def test_encode_mappings(self):
        self.assertEqual(
            "AAAA,IAAIA;;AACA",
            encode_mappings([[(0, 0, 0, 0), (4, 0, 0, 4, 0)], [], [(0, 0, 1, 0)]]),
        )

    def test_invalid_segment(self):
        with self.assertRaises(ValueError) as cm:
            decode_mappings("AAAA;AA!A")
        self.assertIn("generated line 1", str(cm.exception))

    def test_wrong_field_count(self):
        for mappings in ("AA", "AAA", "AAAAAA"):
            with self.subTest(mappings=mappings):
                with self.assertRaises(ValueError):
                    decode_mappings(mappings)


class SourceMapTest(unittest.TestCase):
    """Parsing, serializing and looking up source maps."""

    def test_from_json(self):
        sourcemap = SourceMap.from_json(make_json())

        self.assertEqual("app.min.js", sourcemap.file)
        self.assertIsNone(sourcemap.source_root)
        self.assertEqual(3, len(sourcemap.entries))
        self.assertEqual(
            SourceMapping(
                line=0, column=4, source="a.js", source_line=0, source_column=4,
                name="foo", source_content="var a;\nfoo();\n",
            ),
            sourcemap.entries[0, 4],
        )
        self.assertEqual("<SourceMap(file='app.min.js', len=3)>", repr(sourcemap))

    def test_iteration_order(self):
        sourcemap = SourceMap.from_json(make_json())
        self.assertEqual([(0, 0), (0, 4), (1, 0)], [(e.line, e.column) for e in sourcemap])

    def test_round_trip(self):
        smap = make_json(sourceRoot="/src/")
        self.assertEqual(smap, SourceMap.from_json(smap).to_json())

    def test_generated_only_segments(self):
        smap = make_json(mappings="A,C;;E", names=[])
        sourcemap = SourceMap.from_json(smap)
        self.assertIsNone(sourcemap[0, 1].source)
        self.assertEqual(2, sourcemap[2].column)
        self.assertEqual("A,C;;E", sourcemap.to_json()["mappings"])

    def test_closest_column(self):
        sourcemap = SourceMap.from_json(make_json())
        self.assertEqual(0, sourcemap[0, 2].column)
        self.assertEqual(4, sourcemap[0, 100].column)
        self.assertEqual(1, sourcemap[1].line)

    def test_missing_line(self):
        sourcemap = SourceMap.from_json(make_json(mappings="AAAA;;AACA"))
        with self.assertRaises(IndexError):
            sourcemap[1, 0]
        with self.assertRaises(IndexError):
            sourcemap[7]

    def test_content_line(self):
        sourcemap = SourceMap.from_json(make_json())
        self.assertEqual("foo();", sourcemap[1].content_line)

        without_content = SourceMap.from_json(make_json(sourcesContent=[]))
        self.assertIsNone(without_content[1].content_line)

    def test_content_line_negative_source_line(self):
        """A source line that lands before the start has no content."""
        sourcemap = SourceMap.from_json(make_json(mappings="AADA"))
        self.assertEqual(-1, sourcemap[0].source_line)
        self.assertIsNone(sourcemap[0].content_line)

    def test_not_an_object(self):
        for smap in ([1, 2], "AAAA", None):
            with self.subTest(smap=smap):
                with self.assertRaises(ValueError):
                    SourceMap.from_json(smap)

    def test_mappings_not_a_string(self):
        with self.assertRaises(ValueError) as cm:
            SourceMap.from_json(make_json(mappings=["AAAA"]))
        self.assertIn("mappings", str(cm.exception))

    def test_unsupported_version(self):
        with self.assertRaises(ValueError):
            SourceMap.from_json(make_json(version=2))

    def test_malformed_mappings(self):
        with self.assertRaises(ValueError):
            SourceMap.from_json(make_json(mappings="AAAA,g"))

    def test_source_index_out_of_range(self):
        with self.assertRaises(ValueError) as cm:
            SourceMap.from_json(make_json(mappings="ACAA"))
        self.assertIn("source index 1", str(cm.exception))

    def test_name_index_out_of_range(self):
        with self.assertRaises(ValueError):
            SourceMap.from_json(make_json(names=[]))


class SourceMappingTest(unittest.TestCase):
    """Validation of single mapping entries."""

    def test_source_requires_position(self):
        with self.assertRaises(TypeError):
            SourceMapping(line=0, column=0, source="a.js")

    def test_name_requires_source(self):
        with self.assertRaises(TypeError):
            SourceMapping(line=0, column=0, name="foo")


if __name__ == '__main__':
    unittest.main()
