__all__ = [
    "PSException",
    "PSEOF",
    "PSIOError",
    "PSSyntaxError",
    "PSUnexpectedDelimiter",
    "PSTypeError",
    "PSSyntaxWarning",
    "PSMalformedHexString",
    "PSInvalidEscapeSequence",
    "PSInvalidOctalEscape",
    "PSMalformedNameEscape",
]


class PSException(Exception):
    """Base class for lexical-level exceptions."""


class PSEOF(PSException):
    """Raised when an unexpected end-of-file is encountered."""


class PSIOError(PSException, IOError):
    """Raised when the underlying file object fails."""


class PSSyntaxError(PSException):
    """Raised when a syntax error occurs."""


class PSUnexpectedDelimiter(PSSyntaxError):
    """Raised when a delimiter byte cannot start any token.

    `pos` is the offset of the offending byte.
    """

    def __init__(self, msg: str, pos: int = -1) -> None:
        super().__init__(msg)
        self.pos = pos


class PSTypeError(PSException):
    """Raised when an unexpected operand type is encountered."""


class PSSyntaxWarning(SyntaxWarning):
    """Base class for recoverable syntax problems.

    Parsing continues past these with a best-effort substitution or skip.
    They are collected in the diagnostics of a parse result, or raised
    when ``settings.STRICT`` is set.
    """

    def __init__(self, msg: str, pos: int = -1) -> None:
        super().__init__(msg)
        self.pos = pos

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} at {self.pos}: {self}>"


class PSMalformedHexString(PSSyntaxWarning):
    """A hex string contains a non-hex digit."""


class PSInvalidEscapeSequence(PSSyntaxWarning):
    """A literal string contains an unknown backslash escape."""


class PSInvalidOctalEscape(PSSyntaxWarning):
    """An octal escape in a literal string is larger than 255."""


class PSMalformedNameEscape(PSSyntaxWarning):
    """A ``#`` escape in a name is not followed by two hex digits."""
