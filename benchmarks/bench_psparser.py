"""Benchmarks for pdfsyntax.psparser module."""

import io
from typing import Any, List

from pdfsyntax.psparser import PSBaseParser


def tokenize(data: bytes) -> List[Any]:
    return list(PSBaseParser(io.BytesIO(data)))


class TestPSBaseParserBenchmarks:
    """Benchmarks for PSBaseParser low-level tokenization."""

    def test_nexttoken(self, benchmark: Any, object_stream_data: bytes) -> None:
        """Benchmark nexttoken() - most critical hotspot."""
        result = benchmark(tokenize, object_stream_data)
        assert len(result) > 0

    def test_hex_string_parsing(self, benchmark: Any) -> None:
        """Benchmark hex string parsing."""
        data = b"""
        <48656c6c6f>
        <576f726c64>
        <54 68 69 73 20 69 73 20 61 20 74 65 73 74>
        <0123456789ABCDEF>
        <FF00FF00FF00>
        """ * 50
        result = benchmark(tokenize, data)
        assert len(result) == 250

    def test_string_escape_parsing(self, benchmark: Any) -> None:
        """Benchmark string escape parsing."""
        data = b"""
        (Simple string)
        (String with \\n newline)
        (String with \\r carriage return)
        (String with \\t tab)
        (String with \\\\backslash)
        (String with \\(parenthesis\\))
        (String with \\101 octal)
        (Nested (parentheses) work)
        """ * 50
        result = benchmark(tokenize, data)
        assert len(result) == 400

    def test_literal_parsing(self, benchmark: Any) -> None:
        """Benchmark literal (name) parsing."""
        data = b"""
        /Type /Catalog /Pages /Names /Dests /IDS
        /Metadata /PageLabels /Nums /StructTreeRoot
        /MarkInfo /Marked /Lang /ViewerPreferences#20Escaped
        """ * 100
        result = benchmark(tokenize, data)
        assert len(result) == 1400

    def test_number_parsing(self, benchmark: Any) -> None:
        """Benchmark number parsing (integers and floats)."""
        data = b"""
        123 456 789 -123 +456
        1.23 4.56 -7.89 +1.01
        0 0.0 -0 +0
        1234567890 3.141592653589793
        """ * 100
        result = benchmark(tokenize, data)
        assert len(result) == 1500
