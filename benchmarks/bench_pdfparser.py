"""Benchmarks for pdfsyntax.pdfparser module."""

import io
from typing import Any, List

from pdfsyntax.pdfparser import PDFParser


def parse_objects(data: bytes) -> List[Any]:
    parser = PDFParser(io.BytesIO(data))
    return [obj for (_, obj, _) in parser.iter_objects()]


class TestPDFParserBenchmarks:
    def test_parse_object(self, benchmark: Any, object_stream_data: bytes) -> None:
        """Benchmark parse_object() over a body of definitions."""
        result = benchmark(parse_objects, object_stream_data)
        assert len(result) == 200

    def test_parse_dict(self, benchmark: Any) -> None:
        data = b"<< /Key1 /Value1 /Key2 /Value2 /Key3 /Value3 /Key4 /Value4 >>" * 50
        result = benchmark(parse_objects, data)
        assert len(result) == 50

    def test_parse_array(self, benchmark: Any) -> None:
        """Integers in arrays go through the reference lookahead."""
        data = b"[ 1 2 3 4 5 6 7 8 9 10 ]" * 100
        result = benchmark(parse_objects, data)
        assert len(result) == 100

    def test_parse_references(self, benchmark: Any) -> None:
        data = b"[ " + b"12 0 R " * 500 + b"]"
        result = benchmark(parse_objects, data)
        assert len(result[0]) == 500

    def test_parse_streams(self, benchmark: Any) -> None:
        data = b"".join(
            b"%d 0 obj << /Length 10 >>\nstream\n0123456789\nendstream\nendobj\n"
            % i
            for i in range(1, 101)
        )

        def locate_streams() -> List[Any]:
            parser = PDFParser(io.BytesIO(data))
            streams = []
            pos = 0
            while pos < len(data):
                parser.seek(pos)
                (_, objdef, _) = parser.parse_object()
                stream = objdef.obj
                streams.append(stream)
                pos = data.index(b"endobj\n", stream.offset) + len(b"endobj\n")
            return streams

        result = benchmark(locate_streams)
        assert len(result) == 100
