from pdfsyntax.psexceptions import PSException, PSSyntaxWarning


class PDFException(PSException):
    pass


class PDFSyntaxError(PDFException):
    pass


class PDFUnexpectedKeyword(PDFSyntaxError):
    pass


class PDFMalformedStreamStart(PDFSyntaxError):
    """The ``stream`` keyword is not followed by an end-of-line marker."""


class PDFNestingTooDeep(PDFSyntaxError):
    """Arrays, dictionaries or definitions are nested beyond the limit."""


class PDFTypeError(PDFException, TypeError):
    pass


class PDFValueError(PDFException, ValueError):
    pass


class PDFEncryptionError(PDFException):
    pass


class PDFSyntaxWarning(PSSyntaxWarning):
    pass


class PDFNonNameDictKey(PDFSyntaxWarning):
    pass


class PDFMissingEndobj(PDFSyntaxWarning):
    pass
