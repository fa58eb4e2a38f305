import logging
from typing import (
    Any,
    BinaryIO,
    Dict,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

from pdfsyntax import settings
from pdfsyntax.bytesource import ByteSource
from pdfsyntax.pdfcrypto import DecryptHook, decrypt_string
from pdfsyntax.pdfexceptions import (
    PDFMalformedStreamStart,
    PDFMissingEndobj,
    PDFNestingTooDeep,
    PDFNonNameDictKey,
    PDFUnexpectedKeyword,
)
from pdfsyntax.pdftypes import MAX_GENNO, MAX_OBJID, PDFObjDef, PDFObjRef, PDFStream
from pdfsyntax.psexceptions import PSEOF, PSSyntaxWarning, PSUnexpectedDelimiter
from pdfsyntax.psparser import (
    KEYWORD_ARRAY_BEGIN,
    KEYWORD_ARRAY_END,
    KEYWORD_DICT_BEGIN,
    KEYWORD_DICT_END,
    KWD,
    Diagnostics,
    PSBaseParser,
    PSKeyword,
    PSLiteral,
    TokenRecord,
    keyword_name,
    literal_name,
)
from pdfsyntax.utils import describe

log = logging.getLogger(__name__)


def _is_int(x: object, maximum: int) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= maximum


class ParseContext:
    """Settings and state for one parse_object() call.

    Passed down through every nested read. Entering an object definition
    derives a child context with a new object identity, so the caller's
    identity is untouched when the definition is done.
    """

    def __init__(
        self,
        allow_objptr: bool = True,
        allow_stream: bool = True,
        key: Optional[bytes] = None,
        cfm: Optional[str] = None,
        decrypt: DecryptHook = decrypt_string,
        objref: Optional[PDFObjRef] = None,
        max_depth: Optional[int] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.allow_objptr = allow_objptr
        self.allow_stream = allow_stream
        self.key = key
        self.cfm = cfm
        self.decrypt = decrypt
        self.objref = objref
        if max_depth is None:
            max_depth = settings.MAX_NESTING_DEPTH
        self.max_depth = max_depth
        if diagnostics is None:
            diagnostics = Diagnostics()
        self.diagnostics = diagnostics

    def __repr__(self) -> str:
        return (
            f"<ParseContext: objref={self.objref!r}, "
            f"allow_objptr={self.allow_objptr}, allow_stream={self.allow_stream}>"
        )

    def with_objref(self, objref: PDFObjRef) -> "ParseContext":
        return ParseContext(
            allow_objptr=self.allow_objptr,
            allow_stream=self.allow_stream,
            key=self.key,
            cfm=self.cfm,
            decrypt=self.decrypt,
            objref=objref,
            max_depth=self.max_depth,
            diagnostics=self.diagnostics,
        )

    def decrypting(self) -> bool:
        """Whether strings read in this context go through the hook.

        Object number 0 is reserved and never encrypted.
        """
        return (
            self.key is not None
            and self.cfm is not None
            and self.objref is not None
            and self.objref.objid != 0
        )


class ParseResult(NamedTuple):
    pos: int
    obj: Any
    warnings: List[PSSyntaxWarning]


class PDFParser(PSBaseParser):
    """
    PDFParser reads PDF objects from a byte stream.

    Integers followed by a generation number and ``R`` or ``obj`` are
    folded into indirect references and object definitions, and a
    dictionary followed by ``stream`` becomes a PDFStream that records
    where the payload starts. Resolving references and reading payloads
    is left to the caller.

    Typical usage:
      parser = PDFParser(fp)
      parser.seek(offset)
      parser.set_encryption(key, "AESV2")
      (pos, obj, warnings) = parser.parse_object()

    """

    KEYWORD_R = KWD(b"R")
    KEYWORD_NULL = KWD(b"null")
    KEYWORD_OBJ = KWD(b"obj")
    KEYWORD_ENDOBJ = KWD(b"endobj")
    KEYWORD_STREAM = KWD(b"stream")

    def __init__(
        self,
        reader: Union[BinaryIO, bytes, ByteSource],
        allow_objptr: bool = True,
        allow_stream: bool = True,
        max_depth: Optional[int] = None,
    ) -> None:
        super().__init__(reader)
        self.allow_objptr = allow_objptr
        self.allow_stream = allow_stream
        self.max_depth = max_depth
        self.key: Optional[bytes] = None
        self.cfm: Optional[str] = None
        self.decrypt: DecryptHook = decrypt_string
        self.objref: Optional[PDFObjRef] = None

    def set_encryption(
        self,
        key: Optional[bytes],
        cfm: Optional[str] = None,
        decrypt: Optional[DecryptHook] = None,
    ) -> None:
        """Set the decryption key and cipher mode for string values.

        A key of None turns decryption off.
        """
        self.key = key
        self.cfm = cfm
        if decrypt is not None:
            self.decrypt = decrypt

    def set_objref(self, objref: Optional[PDFObjRef]) -> None:
        """Set the object whose body is about to be parsed."""
        self.objref = objref

    def make_context(self) -> ParseContext:
        return ParseContext(
            allow_objptr=self.allow_objptr,
            allow_stream=self.allow_stream,
            key=self.key,
            cfm=self.cfm,
            decrypt=self.decrypt,
            objref=self.objref,
            max_depth=self.max_depth,
        )

    def parse_object(self, ctx: Optional[ParseContext] = None) -> ParseResult:
        """Read the next object from the current position.

        Returns the object together with its position and the recoverable
        problems patched over while reading it. Raises PSEOF when there is
        no object left.
        """
        if ctx is None:
            ctx = self.make_context()
        (pos, obj) = self._read_object(ctx, 0)
        try:
            log.debug("parse_object: pos=%r, obj=%r", pos, obj)
        except Exception:
            log.debug("parse_object: (unprintable object)")
        return ParseResult(pos, obj, ctx.diagnostics.clear())

    def iter_objects(self) -> Iterator[ParseResult]:
        """Parse objects one after another until the input is exhausted."""
        while True:
            try:
                yield self.parse_object()
            except PSEOF:
                return

    def _read_object(self, ctx: ParseContext, depth: int) -> Tuple[int, Any]:
        if depth > ctx.max_depth:
            raise PDFNestingTooDeep(
                f"Objects nested deeper than {ctx.max_depth} at offset {self.tell()}"
            )
        (pos, token) = self.nexttoken(ctx.diagnostics)

        if isinstance(token, PSKeyword):
            if token is self.KEYWORD_NULL:
                return (pos, None)
            elif token is KEYWORD_DICT_BEGIN:
                return (pos, self._read_dict(ctx, depth))
            elif token is KEYWORD_ARRAY_BEGIN:
                return (pos, self._read_array(ctx, depth))
            raise PDFUnexpectedKeyword(
                f"Unexpected keyword {keyword_name(token)!r} parsing object "
                f"at offset {pos}"
            )

        if isinstance(token, bytes) and ctx.decrypting():
            assert ctx.key is not None and ctx.cfm is not None
            assert ctx.objref is not None
            token = ctx.decrypt(ctx.key, ctx.cfm, ctx.objref, token)

        if not ctx.allow_objptr:
            return (pos, token)

        if _is_int(token, MAX_OBJID):
            return (pos, self._read_objptr(ctx, depth, token))
        return (pos, token)

    def _peek(self, ctx: ParseContext) -> Optional[TokenRecord]:
        """Read a lookahead token.

        Returns None at end of input, or when the next bytes cannot start
        a token. Those bytes are left for the next read, so the error is
        raised there and not on the object that is already complete.
        """
        try:
            return self.nexttoken_with_warnings(ctx.diagnostics)
        except PSEOF:
            return None
        except PSUnexpectedDelimiter as e:
            self.source.seek(e.pos)
            return None

    def _unread(self, ctx: ParseContext, record: TokenRecord) -> None:
        """Push a token back together with its warnings."""
        (pos, token, warnings) = record
        ctx.diagnostics.retract(warnings)
        self.unreadtoken((pos, token), warnings)

    def _read_objptr(self, ctx: ParseContext, depth: int, objid: int) -> Any:
        """Look ahead for ``genno R`` or ``genno obj`` after an integer."""
        token2 = self._peek(ctx)
        if token2 is None:
            return objid
        genno = token2[1]
        if not _is_int(genno, MAX_GENNO):
            self._unread(ctx, token2)
            return objid
        token3 = self._peek(ctx)
        if token3 is None:
            self._unread(ctx, token2)
            return objid
        kwd = token3[1]
        if kwd is self.KEYWORD_R:
            return PDFObjRef(objid, genno)
        elif kwd is self.KEYWORD_OBJ:
            ref = PDFObjRef(objid, genno)
            (_, obj) = self._read_object(ctx.with_objref(ref), depth + 1)
            if not isinstance(obj, PDFStream):
                self._expect_endobj(ctx, ref)
            return PDFObjDef(ref, obj)
        self._unread(ctx, token3)
        self._unread(ctx, token2)
        return objid

    def _expect_endobj(self, ctx: ParseContext, ref: PDFObjRef) -> None:
        token = self._peek(ctx)
        if token is not None and token[1] is self.KEYWORD_ENDOBJ:
            return
        ctx.diagnostics.report(
            PDFMissingEndobj(
                f"Missing endobj after definition of {ref!r}",
                self.tell() if token is None else token[0],
            )
        )
        if token is not None:
            self._unread(ctx, token)

    def _read_array(self, ctx: ParseContext, depth: int) -> List[Any]:
        objs = []
        while True:
            try:
                token = self.nexttoken_with_warnings(ctx.diagnostics)
            except PSEOF:
                if self.allow_eof:
                    break
                raise
            if token[1] is KEYWORD_ARRAY_END:
                break
            self._unread(ctx, token)
            (_, obj) = self._read_object(ctx, depth + 1)
            objs.append(obj)
        return objs

    def _read_dict(
        self, ctx: ParseContext, depth: int
    ) -> Union[Dict[str, Any], PDFStream]:
        d: Dict[str, Any] = {}
        while True:
            try:
                (pos, key) = self.nexttoken(ctx.diagnostics)
            except PSEOF:
                if self.allow_eof:
                    break
                raise
            if key is KEYWORD_DICT_END:
                break
            if not isinstance(key, PSLiteral):
                ctx.diagnostics.report(
                    PDFNonNameDictKey(
                        f"Unexpected non-name key {describe(key)} parsing dictionary",
                        pos,
                    )
                )
                continue
            (_, value) = self._read_object(ctx, depth + 1)
            d[literal_name(key)] = value

        if not ctx.allow_stream:
            return d
        return self._read_stream_start(ctx, d)

    def _read_stream_start(
        self, ctx: ParseContext, d: Dict[str, Any]
    ) -> Union[Dict[str, Any], PDFStream]:
        token = self._peek(ctx)
        if token is None:
            return d
        if token[1] is not self.KEYWORD_STREAM:
            self._unread(ctx, token)
            return d

        c = self.source.readbyte()
        if c == b"\r":
            cc = self._readbyte_or_eof()
            # Put it back if it isn't \n
            if cc and cc != b"\n":
                self.source.unreadbyte()
        elif c != b"\n":
            raise PDFMalformedStreamStart(
                f"Stream keyword not followed by newline at offset {self.tell()}"
            )
        stream = PDFStream(d, ctx.objref, self.tell())
        log.debug("Stream: ref=%r, offset=%d, dic=%r", ctx.objref, stream.offset, d)
        return stream
