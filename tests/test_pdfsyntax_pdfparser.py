from io import BytesIO

import pytest

from pdfsyntax import settings
from pdfsyntax.arcfour import Arcfour
from pdfsyntax.bytesource import ByteSource
from pdfsyntax.pdfcrypto import object_key
from pdfsyntax.pdfexceptions import (
    PDFEncryptionError,
    PDFMalformedStreamStart,
    PDFMissingEndobj,
    PDFNestingTooDeep,
    PDFNonNameDictKey,
    PDFUnexpectedKeyword,
)
from pdfsyntax.pdfparser import ParseContext, PDFParser
from pdfsyntax.pdftypes import PDFObjDef, PDFObjRef, PDFStream
from pdfsyntax.psexceptions import (
    PSEOF,
    PSMalformedHexString,
    PSMalformedNameEscape,
    PSUnexpectedDelimiter,
)
from pdfsyntax.psparser import LIT


def parse_all(data, **kwargs):
    parser = PDFParser(data, **kwargs)
    return [(pos, obj) for (pos, obj, _) in parser.iter_objects()]


def parse_one(data, **kwargs):
    return PDFParser(data, **kwargs).parse_object().obj


class TestScalars:
    def test_null_and_booleans(self):
        assert parse_all(b"null true false") == [(0, None), (5, True), (10, False)]

    def test_strings_and_names(self):
        objs = [obj for (_, obj) in parse_all(b"(abc) <4142> /Name 1.5")]
        assert objs == [b"abc", b"AB", LIT("Name"), 1.5]

    def test_unexpected_keyword(self):
        parser = PDFParser(b"] 1")
        with pytest.raises(PDFUnexpectedKeyword):
            parser.parse_object()

    def test_source_offset(self):
        source = ByteSource(BytesIO(b"1 0 R"), offset=100)
        (pos, obj, _) = PDFParser(source).parse_object()
        assert pos == 100
        assert obj == PDFObjRef(1, 0)


class TestIndirect:
    def test_reference(self):
        obj = parse_one(b"1 0 R")
        assert isinstance(obj, PDFObjRef)
        assert (obj.objid, obj.genno) == (1, 0)

    def test_definition(self):
        (pos, obj, warnings) = PDFParser(
            b"1 0 obj << /Type /Catalog >> endobj"
        ).parse_object()
        assert pos == 0
        assert obj == PDFObjDef(PDFObjRef(1, 0), {"Type": LIT("Catalog")})
        assert warnings == []

    def test_definition_without_endobj(self):
        """A definition body is a single object."""
        parser = PDFParser(b"1 0 obj /Type /Catalog endobj")
        (pos, obj, warnings) = parser.parse_object()
        assert obj == PDFObjDef(PDFObjRef(1, 0), LIT("Type"))
        assert [type(w) for w in warnings] == [PDFMissingEndobj]
        assert warnings[0].pos == 14
        assert parser.parse_object().obj is LIT("Catalog")
        with pytest.raises(PDFUnexpectedKeyword):
            parser.parse_object()

    def test_definition_at_eof(self):
        (_, obj, warnings) = PDFParser(b"1 0 obj 42").parse_object()
        assert obj == PDFObjDef(PDFObjRef(1, 0), 42)
        assert [type(w) for w in warnings] == [PDFMissingEndobj]

    def test_missing_endobj_strict(self, monkeypatch):
        monkeypatch.setattr(settings, "STRICT", True)
        with pytest.raises(PDFMissingEndobj):
            PDFParser(b"1 0 obj /A /B").parse_object()

    @pytest.mark.parametrize(
        "data,expected",
        [
            (b"5 /Name", [(0, 5), (2, LIT("Name"))]),
            (b"5 6 7", [(0, 5), (2, 6), (4, 7)]),
            (b"5 6 /X", [(0, 5), (2, 6), (4, LIT("X"))]),
            (b"5 6", [(0, 5), (2, 6)]),
            (b"-1 (s)", [(0, -1), (3, b"s")]),
        ],
    )
    def test_lookahead_pushback(self, data, expected):
        assert parse_all(data) == expected

    def test_no_objptr(self):
        parser = PDFParser(b"1 0 R", allow_objptr=False)
        assert parser.parse_object().obj == 1
        assert parser.parse_object().obj == 0
        with pytest.raises(PDFUnexpectedKeyword):
            parser.parse_object()

    def test_iter_objects(self):
        objs = parse_all(b"1 0 obj 42 endobj 2 0 obj (x) endobj")
        assert objs == [
            (0, PDFObjDef(PDFObjRef(1, 0), 42)),
            (18, PDFObjDef(PDFObjRef(2, 0), b"x")),
        ]

    def test_seek_clears_pushback(self):
        parser = PDFParser(b"5 6 7")
        assert parser.parse_object().obj == 5
        parser.seek(4)
        assert parser.parse_object() == (4, 7, [])


class TestContainers:
    def test_array(self):
        obj = parse_one(b"[1 2 0 R (x) [/A] null]")
        assert obj == [1, PDFObjRef(2, 0), b"x", [LIT("A")], None]

    def test_dict(self):
        obj = parse_one(b"<< /Kids [3 0 R 4 0 R] /Count 2 /Parent 1 0 R >>")
        assert obj == {
            "Kids": [PDFObjRef(3, 0), PDFObjRef(4, 0)],
            "Count": 2,
            "Parent": PDFObjRef(1, 0),
        }

    def test_duplicate_keys(self):
        assert parse_one(b"<< /A 1 /A 2 >>") == {"A": 2}

    def test_non_name_key(self):
        (_, obj, warnings) = PDFParser(b"<< /A 1 2 /B 3 >>").parse_object()
        assert obj == {"A": 1, "B": 3}
        assert [type(w) for w in warnings] == [PDFNonNameDictKey]
        assert warnings[0].pos == 8

    def test_unterminated_array(self):
        parser = PDFParser(b"[1 2")
        with pytest.raises(PSEOF):
            parser.parse_object()

    def test_unterminated_array_allow_eof(self):
        parser = PDFParser(b"[1 2")
        parser.allow_eof = True
        assert parser.parse_object().obj == [1, 2]


class TestStreams:
    @pytest.mark.parametrize("eol", [b"\r\n", b"\n", b"\r"])
    def test_stream_start(self, eol):
        data = (
            b"1 0 obj\n<< /Length 5 >>\nstream"
            + eol
            + b"HELLO"
            + eol
            + b"endstream\nendobj\n"
        )
        parser = PDFParser(data)
        (_, objdef, warnings) = parser.parse_object()
        stream = objdef.obj
        assert isinstance(stream, PDFStream)
        assert stream.attrs == {"Length": 5}
        assert stream.ref == PDFObjRef(1, 0)
        assert stream.offset == data.index(b"HELLO")
        assert stream.get_length() == 5
        assert parser.read(stream.offset, stream.get_length()) == b"HELLO"
        assert warnings == []

    def test_stream_outside_definition(self):
        data = b"<< /Length 0 >> stream\n"
        stream = parse_one(data)
        assert isinstance(stream, PDFStream)
        assert stream.ref is None
        assert stream.objid is None
        assert stream.offset == len(data)

    def test_malformed_stream_start(self):
        with pytest.raises(PDFMalformedStreamStart):
            PDFParser(b"<< >> stream x").parse_object()

    def test_no_stream(self):
        parser = PDFParser(b"<< /A 1 >> stream\nxx", allow_stream=False)
        assert parser.parse_object().obj == {"A": 1}

    def test_indirect_length(self):
        stream = parse_one(b"<< /Length 9 0 R >> stream\n")
        assert stream["Length"] == PDFObjRef(9, 0)
        assert stream.get_length() is None


class TestNesting:
    def test_limit(self):
        assert parse_one(b"[[[1]]]", max_depth=3) == [[[1]]]
        with pytest.raises(PDFNestingTooDeep):
            parse_one(b"[[[[1]]]]", max_depth=3)

    def test_default_limit(self):
        assert parse_one(b"[" * 200 + b"]" * 200) is not None
        with pytest.raises(PDFNestingTooDeep):
            parse_one(b"[" * 300 + b"]" * 300)

    def test_setting(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_NESTING_DEPTH", 1)
        with pytest.raises(PDFNestingTooDeep):
            parse_one(b"<< /A [1] >>")

    def test_definition_counts(self):
        with pytest.raises(PDFNestingTooDeep):
            parse_one(b"1 0 obj [1] endobj", max_depth=1)


class RecordingHook:
    def __init__(self):
        self.calls = []

    def __call__(self, key, cfm, ref, data):
        self.calls.append((key, cfm, ref, data))
        return data.upper()


class TestEncryption:
    def test_strings_decrypted(self):
        hook = RecordingHook()
        parser = PDFParser(b"3 0 obj [(abc) << /K (def) >>] endobj (top)")
        parser.set_encryption(b"key", "V2", hook)
        (_, obj, _) = parser.parse_object()
        assert obj.obj == [b"ABC", {"K": b"DEF"}]
        assert hook.calls == [
            (b"key", "V2", PDFObjRef(3, 0), b"abc"),
            (b"key", "V2", PDFObjRef(3, 0), b"def"),
        ]
        # No object identity outside of a definition
        assert parser.parse_object().obj == b"top"
        assert len(hook.calls) == 2

    def test_object_zero(self):
        hook = RecordingHook()
        parser = PDFParser(b"0 0 obj (abc) endobj")
        parser.set_encryption(b"key", "V2", hook)
        assert parser.parse_object().obj.obj == b"abc"
        assert hook.calls == []

    def test_no_key(self):
        hook = RecordingHook()
        parser = PDFParser(b"3 0 obj (abc) endobj")
        parser.set_encryption(None, "V2", hook)
        assert parser.parse_object().obj.obj == b"abc"
        assert hook.calls == []

    def test_identity_restored(self):
        hook = RecordingHook()
        parser = PDFParser(b"[(a) 8 0 obj (b) endobj (c)]")
        parser.set_encryption(b"key", "V2", hook)
        parser.set_objref(PDFObjRef(7, 0))
        obj = parser.parse_object().obj
        assert obj == [b"A", PDFObjDef(PDFObjRef(8, 0), b"B"), b"C"]
        assert [ref.objid for (_, _, ref, _) in hook.calls] == [7, 8, 7]

    def test_names_not_decrypted(self):
        hook = RecordingHook()
        parser = PDFParser(b"3 0 obj << /Name /Value >> endobj")
        parser.set_encryption(b"key", "V2", hook)
        assert parser.parse_object().obj.obj == {"Name": LIT("Value")}
        assert hook.calls == []

    def test_rc4(self):
        key = b"\x01\x02\x03\x04\x05"
        ref = PDFObjRef(12, 0)
        ciphertext = Arcfour(object_key(key, ref)).encrypt(b"Hello, world")
        data = b"12 0 obj <" + ciphertext.hex().encode("ascii") + b"> endobj"
        parser = PDFParser(data)
        parser.set_encryption(key, "V2")
        assert parser.parse_object().obj.obj == b"Hello, world"

    def test_explicit_context(self):
        hook = RecordingHook()
        ctx = ParseContext(key=b"k", cfm="V2", decrypt=hook, objref=PDFObjRef(5, 1))
        (_, obj, _) = PDFParser(b"(x)").parse_object(ctx)
        assert obj == b"X"
        assert hook.calls[0][2] == PDFObjRef(5, 1)

    @pytest.mark.parametrize("cfm", ["AESV2", "AESV3"])
    def test_bad_aes_key(self, cfm):
        parser = PDFParser(b"3 0 obj <" + b"00" * 32 + b"> endobj")
        parser.set_encryption(b"12345", cfm)
        with pytest.raises(PDFEncryptionError):
            parser.parse_object()


class TestWarnings:
    def test_attached_to_result(self):
        parser = PDFParser(b"(x) <4G>")
        assert parser.parse_object() == (0, b"x", [])
        (pos, obj, warnings) = parser.parse_object()
        assert (pos, obj) == (4, b"")
        assert [type(w) for w in warnings] == [PSMalformedHexString]

    def test_not_carried_over(self):
        parser = PDFParser(b"<4G> (y)")
        assert len(parser.parse_object().warnings) == 1
        assert parser.parse_object().warnings == []

    def test_lookahead_warnings_stay_with_token(self):
        parser = PDFParser(b"5 <4G>")
        assert parser.parse_object() == (0, 5, [])
        (pos, obj, warnings) = parser.parse_object()
        assert (pos, obj) == (2, b"")
        assert [type(w) for w in warnings] == [PSMalformedHexString]

    def test_array_item_warning_reported_once(self):
        (_, obj, warnings) = PDFParser(b"[<4G> 1]").parse_object()
        assert obj == [b"", 1]
        assert [type(w) for w in warnings] == [PSMalformedHexString]

    def test_stream_peek_warning_stays_with_token(self):
        parser = PDFParser(b"<< /A 1 >> /B#4G")
        assert parser.parse_object() == (0, {"A": 1}, [])
        (_, obj, warnings) = parser.parse_object()
        assert obj is LIT("B#4G")
        assert [type(w) for w in warnings] == [PSMalformedNameEscape]


class Unseekable:
    def __init__(self, data):
        self._fp = BytesIO(data)

    def read(self, n=-1):
        return self._fp.read(n)

    def seekable(self):
        return False


class TestBadDelimiterAfterObject:
    @pytest.mark.parametrize("wrap", [BytesIO, Unseekable])
    def test_integer_kept(self, wrap):
        parser = PDFParser(ByteSource(wrap(b"5 )")))
        assert parser.parse_object() == (0, 5, [])
        with pytest.raises(PSUnexpectedDelimiter) as excinfo:
            parser.parse_object()
        assert excinfo.value.pos == 2

    def test_generation_kept(self):
        parser = PDFParser(b"5 6 )")
        assert parser.parse_object().obj == 5
        assert parser.parse_object().obj == 6
        with pytest.raises(PSUnexpectedDelimiter):
            parser.parse_object()

    def test_dict_kept(self):
        parser = PDFParser(b"<< /A 1 >> )")
        assert parser.parse_object().obj == {"A": 1}
        with pytest.raises(PSUnexpectedDelimiter):
            parser.parse_object()

    def test_definition_kept(self):
        parser = PDFParser(b"1 0 obj 5 ) endobj")
        (_, obj, warnings) = parser.parse_object()
        assert obj == PDFObjDef(PDFObjRef(1, 0), 5)
        assert [type(w) for w in warnings] == [PDFMissingEndobj]
        assert warnings[0].pos == 10
        with pytest.raises(PSUnexpectedDelimiter):
            parser.parse_object()
