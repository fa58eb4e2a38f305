#!/usr/bin/env python3
import io
import logging
from typing import (
    Any,
    BinaryIO,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from pdfsyntax import psexceptions, settings
from pdfsyntax.bytesource import ByteSource
from pdfsyntax.utils import describe

log = logging.getLogger(__name__)


PSException = psexceptions.PSException
PSEOF = psexceptions.PSEOF
PSSyntaxError = psexceptions.PSSyntaxError
PSTypeError = psexceptions.PSTypeError
PSSyntaxWarning = psexceptions.PSSyntaxWarning


class PSObject:
    """Base class for all PS or PDF-related data types."""


class PSLiteral(PSObject):
    """A class that represents a PDF name.

    Names are used as identifiers, such as dictionary keys.
    They are case sensitive and denoted by a preceding
    slash sign (e.g. "/Name"), which is not part of `name`.

    Note: Do not create an instance of PSLiteral directly.
    Always use PSLiteralTable.intern().
    """

    NameType = Union[str, bytes]

    def __init__(self, name: NameType) -> None:
        self.name = name

    def __repr__(self) -> str:
        name = self.name
        return "/%r" % name


class PSKeyword(PSObject):
    """A class that represents a bare keyword.

    Keywords such as obj, endobj, R, stream or null, as well as the
    structural markers << >> [ ] { }.

    Note: Do not create an instance of PSKeyword directly.
    Always use PSKeywordTable.intern().
    """

    def __init__(self, name: bytes) -> None:
        self.name = name

    def __repr__(self) -> str:
        name = self.name
        return "/%r" % name


_SymbolT = TypeVar("_SymbolT", PSLiteral, PSKeyword)


class PSSymbolTable(Generic[_SymbolT]):
    """A utility class for storing PSLiteral/PSKeyword objects.

    Interned objects can be checked its identity with "is" operator.
    """

    def __init__(self, klass: Type[_SymbolT]) -> None:
        self.dict: Dict[PSLiteral.NameType, _SymbolT] = {}
        self.klass: Type[_SymbolT] = klass

    def intern(self, name: PSLiteral.NameType) -> _SymbolT:
        if name in self.dict:
            lit = self.dict[name]
        else:
            # Type confusion issue: PSKeyword always takes bytes as name
            #                       PSLiteral uses either str or bytes
            lit = self.klass(name)  # type: ignore[arg-type]
            self.dict[name] = lit
        return lit


PSLiteralTable = PSSymbolTable(PSLiteral)
PSKeywordTable = PSSymbolTable(PSKeyword)
LIT = PSLiteralTable.intern
KWD = PSKeywordTable.intern
KEYWORD_ARRAY_BEGIN = KWD(b"[")
KEYWORD_ARRAY_END = KWD(b"]")
KEYWORD_DICT_BEGIN = KWD(b"<<")
KEYWORD_DICT_END = KWD(b">>")


def literal_name(x: Any) -> str:
    if isinstance(x, PSLiteral):
        if isinstance(x.name, str):
            return x.name
        try:
            return str(x.name, "utf-8")
        except UnicodeDecodeError:
            return str(x.name)
    else:
        if settings.STRICT:
            raise PSTypeError(f"Literal required: {x!r}")
        return str(x)


def keyword_name(x: Any) -> Any:
    if not isinstance(x, PSKeyword):
        if settings.STRICT:
            raise PSTypeError("Keyword required: %r" % x)
        else:
            name = x
    else:
        name = str(x.name, "utf-8", "ignore")
    return name


EOL = b"\r\n"
WHITESPACE = b"\x00\t\n\x0c\r "
DELIMITER = b"()<>[]{}/%"
NUMBER = b"0123456789"
HEX = NUMBER + b"abcdef" + b"ABCDEF"
OCTAL = b"01234567"
ESC_STRING = {
    b"b": 8,
    b"t": 9,
    b"n": 10,
    b"f": 12,
    b"r": 13,
    b"(": 40,
    b")": 41,
    b"\\": 92,
}
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def ishex(c: bytes) -> bool:
    return c != b"" and c in HEX


def isinteger(s: bytes) -> bool:
    if s[:1] in (b"+", b"-"):
        s = s[1:]
    return s != b"" and all(c in NUMBER for c in s)


def isreal(s: bytes) -> bool:
    if s[:1] in (b"+", b"-"):
        s = s[1:]
    if s.count(b".") != 1:
        return False
    return all(c in NUMBER for c in s.replace(b".", b""))


PSBaseParserToken = Union[float, bool, PSLiteral, PSKeyword, bytes]


class Diagnostics:
    """Collects the recoverable syntax problems seen during a parse.

    Each problem is logged and kept, so callers can inspect everything
    that was patched over. In strict mode the problem is raised instead.
    """

    def __init__(self) -> None:
        self.warnings: List[PSSyntaxWarning] = []

    def __repr__(self) -> str:
        return f"<Diagnostics: {self.warnings!r}>"

    def __iter__(self) -> Iterator[PSSyntaxWarning]:
        return iter(self.warnings)

    def __len__(self) -> int:
        return len(self.warnings)

    def report(self, warning: PSSyntaxWarning) -> None:
        log.warning("%s at offset %d", warning, warning.pos)
        if settings.STRICT:
            raise warning
        self.warnings.append(warning)

    def extend(self, warnings: Sequence[PSSyntaxWarning]) -> None:
        """Take over warnings that were already reported elsewhere."""
        self.warnings.extend(warnings)

    def retract(self, warnings: Sequence[PSSyntaxWarning]) -> None:
        """Forget warnings that belong to a token being pushed back."""
        if warnings:
            self.warnings = [
                w for w in self.warnings if all(w is not x for x in warnings)
            ]

    def clear(self) -> List[PSSyntaxWarning]:
        """Hand over the collected warnings and start afresh."""
        warnings = self.warnings
        self.warnings = []
        return warnings


TokenRecord = Tuple[int, PSBaseParserToken, List[PSSyntaxWarning]]


class PSBaseParser:
    """Tokenizer for PDF data.

    Reads from a binary file object, a `bytes` value or a ByteSource and
    produces (pos, token) pairs. Tokens can be pushed back with
    unreadtoken() and are handed out again, last in first out, before
    any new input is consumed. A pushed back token keeps the warnings
    found while reading it, and they are reported again when the token
    is handed out.
    """

    def __init__(self, reader: Union[BinaryIO, bytes, ByteSource]) -> None:
        if isinstance(reader, bytes):
            reader = io.BytesIO(reader)
        if not isinstance(reader, ByteSource):
            reader = ByteSource(reader)
        self.source = reader
        self._tokens: List[TokenRecord] = []
        # Sink for problems found while tokenizing outside of a parse call.
        self.diagnostics = Diagnostics()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: pos={self.tell()}>"

    @property
    def allow_eof(self) -> bool:
        return self.source.allow_eof

    @allow_eof.setter
    def allow_eof(self, value: bool) -> None:
        self.source.allow_eof = value

    def seek(self, pos: int) -> None:
        """Seek to a position and drop any pushed back tokens."""
        self.source.seek(pos)
        self._tokens.clear()

    def seek_forward(self, pos: int) -> None:
        """Skip input up to a position and drop any pushed back tokens."""
        self.source.seek_forward(pos)
        self._tokens.clear()

    def tell(self) -> int:
        """Get the current position in the input."""
        return self.source.tell()

    def read(self, pos: int, objlen: int) -> bytes:
        """Read data from a specified position, moving the current
        position to the end of this data."""
        self.seek(pos)
        return self.source.read(objlen)

    def unreadtoken(
        self,
        token: Tuple[int, PSBaseParserToken],
        warnings: Sequence[PSSyntaxWarning] = (),
    ) -> None:
        (pos, value) = token
        self._tokens.append((pos, value, list(warnings)))

    def __iter__(self) -> Iterator[Tuple[int, PSBaseParserToken]]:
        """Iterate over tokens."""
        return self

    def __next__(self) -> Tuple[int, PSBaseParserToken]:
        """Get the next token in iteration, raising StopIteration when
        done."""
        try:
            return self.nexttoken()
        except PSEOF:
            raise StopIteration from None

    def nexttoken(
        self, diag: Optional[Diagnostics] = None
    ) -> Tuple[int, PSBaseParserToken]:
        """Get the next token, raising PSEOF when done."""
        (pos, token, _) = self.nexttoken_with_warnings(diag)
        return (pos, token)

    def nexttoken_with_warnings(
        self, diag: Optional[Diagnostics] = None
    ) -> TokenRecord:
        """Get the next token along with the warnings found while reading it.

        The warnings are also added to `diag`.
        """
        if diag is None:
            diag = self.diagnostics
        if self._tokens:
            record = self._tokens.pop()
        else:
            local = Diagnostics()
            (pos, token) = self._readtoken(local)
            record = (pos, token, local.clear())
        diag.extend(record[2])
        return record

    def _readtoken(self, diag: Diagnostics) -> Tuple[int, PSBaseParserToken]:
        c = self._skip_space()
        pos = self.tell() - 1
        if c == b"<":
            d = self.source.readbyte()
            if d == b"<":
                return (pos, KEYWORD_DICT_BEGIN)
            if d:
                self.source.unreadbyte()
            return (pos, self._parse_hexstring(diag))
        elif c == b"(":
            return (pos, self._parse_string(diag))
        elif c in b"[]{}":
            return (pos, KWD(c))
        elif c == b"/":
            return (pos, self._parse_literal(diag))
        elif c == b">":
            d = self.source.readbyte()
            if d == b">":
                return (pos, KEYWORD_DICT_END)
            if d:
                self.source.unreadbyte()
        if c in DELIMITER:
            raise psexceptions.PSUnexpectedDelimiter(
                f"Unexpected delimiter {c!r} at offset {pos}", pos
            )
        self.source.unreadbyte()
        return (pos, self._parse_keyword())

    def _skip_space(self) -> bytes:
        """Return the first byte that is not whitespace or comment."""
        c = self.source.readbyte()
        while True:
            if not c:
                raise PSEOF("Unexpected EOF")
            if c in WHITESPACE:
                c = self.source.readbyte()
            elif c == b"%":
                # We ignore comments.
                while c and c not in EOL:
                    c = self.source.readbyte()
            else:
                return c

    def _parse_hexstring(self, diag: Diagnostics) -> bytes:
        """Hex digit pairs up to the closing '>'."""
        digits = []
        while True:
            c = self.source.readbyte()
            if not c or c == b">":
                break
            if c in WHITESPACE:
                continue
            if c not in HEX:
                diag.report(
                    psexceptions.PSMalformedHexString(
                        f"Invalid hex digit {c!r} in hex string", self.tell() - 1
                    )
                )
                if len(digits) % 2 == 1:
                    digits.pop()
                self._skip_past(b">")
                break
            digits.append(c)
        if len(digits) % 2 == 1:
            digits.append(b"0")
        return bytes.fromhex(b"".join(digits).decode("ascii"))

    def _readbyte_or_eof(self) -> bytes:
        """Read a byte where end of input just ends the current token."""
        try:
            return self.source.readbyte()
        except PSEOF:
            return b""

    def _skip_past(self, target: bytes) -> None:
        c = self.source.readbyte()
        while c and c != target:
            c = self.source.readbyte()

    def _parse_string(self, diag: Diagnostics) -> bytes:
        """Literal string after the opening parenthesis."""
        data = bytearray()
        paren = 1
        while True:
            c = self.source.readbyte()
            if not c:
                log.warning("EOF in string %r", describe(bytes(data[-80:])))
                break
            if c == b"(":
                paren += 1
                data += c
            elif c == b")":
                paren -= 1
                if paren == 0:
                    break
                data += c
            elif c == b"\\":
                self._parse_string_esc(data, diag)
            else:
                data += c
        return bytes(data)

    def _parse_string_esc(self, data: bytearray, diag: Diagnostics) -> None:
        """Escapes in literal strings. We have seen a backslash and
        nothing else."""
        c = self.source.readbyte()
        if not c:
            log.warning("EOF inside escape %r", describe(bytes(data[-80:])))
        elif c in OCTAL:
            self._parse_string_octal(c, data, diag)
        elif c in ESC_STRING:
            data.append(ESC_STRING[c])
        elif c == b"\n":  # Skip newline after backslash
            pass
        elif c == b"\r":  # Also skip CRLF after
            cc = self.source.readbyte()
            # Put it back if it isn't \n
            if cc and cc != b"\n":
                self.source.unreadbyte()
        else:
            diag.report(
                psexceptions.PSInvalidEscapeSequence(
                    f"Invalid escape sequence \\{c.decode('latin-1')}",
                    self.tell() - 2,
                )
            )
            data += b"\\" + c

    def _parse_string_octal(
        self, first: bytes, data: bytearray, diag: Diagnostics
    ) -> None:
        """One to three octal digits, the first one already read."""
        pos = self.tell() - 2
        code = first
        while len(code) < 3:
            c = self.source.readbyte()
            if not c or c not in OCTAL:
                if c:
                    self.source.unreadbyte()
                break
            code += c
        chrcode = int(code, 8)
        if chrcode > 255:
            # Keep the low-order 8 bits, as the byte would be stored.
            diag.report(
                psexceptions.PSInvalidOctalEscape(
                    f"Invalid octal escape \\{code.decode('ascii')} ({chrcode})", pos
                )
            )
        data.append(chrcode & 0xFF)

    def _parse_literal(self, diag: Diagnostics) -> PSLiteral:
        """Name after the slash, with #xx escapes decoded."""
        name = bytearray()
        while True:
            c = self._readbyte_or_eof()
            if not c:
                break
            if c in WHITESPACE or c in DELIMITER:
                self.source.unreadbyte()
                break
            if c == b"#":
                name += self._parse_literal_hex(diag)
            else:
                name += c
        try:
            return LIT(bytes(name).decode("utf-8"))
        except UnicodeDecodeError:
            return LIT(bytes(name))

    def _parse_literal_hex(self, diag: Diagnostics) -> bytes:
        """The two hex digits after a '#' in a name."""
        pos = self.tell() - 1
        digits = b""
        while len(digits) < 2:
            c = self._readbyte_or_eof()
            if not ishex(c):
                if c:
                    self.source.unreadbyte()
                diag.report(
                    psexceptions.PSMalformedNameEscape(
                        f"Invalid hex digit {c!r} in name escape", pos
                    )
                )
                # Add the intervening junk, just in case
                return b"#" + digits
            digits += c
        return bytes((int(digits, 16),))

    def _parse_keyword(self) -> PSBaseParserToken:
        """Bare run of regular characters: boolean, number or keyword."""
        token = bytearray()
        while True:
            c = self._readbyte_or_eof()
            if not c:
                break
            if c in WHITESPACE or c in DELIMITER:
                self.source.unreadbyte()
                break
            token += c
        s = bytes(token)
        if s == b"true":
            return True
        elif s == b"false":
            return False
        elif isinteger(s):
            n = int(s)
            if not INT64_MIN <= n <= INT64_MAX:
                log.warning("Integer out of range: %r", s)
                n = max(INT64_MIN, min(n, INT64_MAX))
            return n
        elif isreal(s):
            try:
                return float(s)
            except ValueError:
                log.warning("Invalid float literal: %r", s)
                return 0.0
        return KWD(s)
