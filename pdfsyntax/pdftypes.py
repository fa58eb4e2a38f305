import logging
from typing import Any, Dict, List, Optional, Union

from pdfsyntax import settings
from pdfsyntax.pdfexceptions import PDFTypeError, PDFValueError
from pdfsyntax.psparser import PSLiteral, PSObject

log = logging.getLogger(__name__)

MAX_OBJID = (1 << 32) - 1
MAX_GENNO = (1 << 16) - 1


class PDFObject(PSObject):
    pass


class PDFObjRef(PDFObject):
    """Pointer to an indirect object: ``objid genno R``."""

    def __init__(self, objid: int, genno: int = 0) -> None:
        if not 0 <= objid <= MAX_OBJID:
            raise PDFValueError(f"PDF object id out of range: {objid!r}")
        if not 0 <= genno <= MAX_GENNO:
            raise PDFValueError(f"PDF generation number out of range: {genno!r}")
        self.objid = objid
        self.genno = genno

    def __repr__(self) -> str:
        return "<PDFObjRef:%d %d>" % (self.objid, self.genno)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PDFObjRef):
            return NotImplemented
        return (self.objid, self.genno) == (other.objid, other.genno)

    def __hash__(self) -> int:
        return hash((self.objid, self.genno))


class PDFObjDef(PDFObject):
    """An indirect object definition: ``objid genno obj ... endobj``."""

    def __init__(self, ref: PDFObjRef, obj: Any) -> None:
        self.ref = ref
        self.obj = obj

    @property
    def objid(self) -> int:
        return self.ref.objid

    @property
    def genno(self) -> int:
        return self.ref.genno

    def __repr__(self) -> str:
        return "<PDFObjDef:%d %d %r>" % (self.objid, self.genno, self.obj)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PDFObjDef):
            return NotImplemented
        return self.ref == other.ref and self.obj == other.obj


class PDFStream(PDFObject):
    """A stream dictionary and the location of its payload.

    The payload itself is not read; `offset` is the absolute position of
    its first byte, right after the end-of-line that follows the
    ``stream`` keyword. `ref` is the enclosing object definition, if any.
    """

    def __init__(
        self,
        attrs: Dict[str, Any],
        ref: Optional[PDFObjRef],
        offset: int,
    ) -> None:
        assert isinstance(attrs, dict), str(type(attrs))
        self.attrs = attrs
        self.ref = ref
        self.offset = offset

    @property
    def objid(self) -> Optional[int]:
        return None if self.ref is None else self.ref.objid

    @property
    def genno(self) -> Optional[int]:
        return None if self.ref is None else self.ref.genno

    def __repr__(self) -> str:
        return "<PDFStream(%r): offset=%d, %r>" % (self.objid, self.offset, self.attrs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PDFStream):
            return NotImplemented
        return (self.attrs, self.ref, self.offset) == (
            other.attrs,
            other.ref,
            other.offset,
        )

    def __contains__(self, name: object) -> bool:
        return name in self.attrs

    def __getitem__(self, name: str) -> Any:
        return self.attrs[name]

    def get(self, name: str, default: object = None) -> Any:
        return self.attrs.get(name, default)

    def get_length(self) -> Optional[int]:
        """The /Length entry when it is a direct integer.

        An indirect length has to be resolved by the caller.
        """
        length = self.attrs.get("Length")
        if isinstance(length, int) and not isinstance(length, bool) and length >= 0:
            return length
        return None


PDFValue = Union[
    None,
    bool,
    int,
    float,
    bytes,
    PSLiteral,
    List[Any],
    Dict[str, Any],
    PDFObjRef,
    PDFObjDef,
    PDFStream,
]


# Type checking
def int_value(x: object) -> int:
    if not isinstance(x, int) or isinstance(x, bool):
        if settings.STRICT:
            raise PDFTypeError(f"Integer required: {x!r}")
        return 0
    return x


def num_value(x: object) -> float:
    if not isinstance(x, (int, float)) or isinstance(x, bool):
        if settings.STRICT:
            raise PDFTypeError(f"Int or Float required: {x!r}")
        return 0
    return x


def str_value(x: object) -> bytes:
    if not isinstance(x, bytes):
        if settings.STRICT:
            raise PDFTypeError(f"String required: {x!r}")
        return b""
    return x


def list_value(x: object) -> List[Any]:
    if not isinstance(x, list):
        if settings.STRICT:
            raise PDFTypeError(f"List required: {x!r}")
        return []
    return x


def dict_value(x: object) -> Dict[str, Any]:
    if not isinstance(x, dict):
        if settings.STRICT:
            log.error("PDFTypeError : Dict required: %r", x)
            raise PDFTypeError(f"Dict required: {x!r}")
        return {}
    return x


def stream_value(x: object) -> PDFStream:
    if not isinstance(x, PDFStream):
        if settings.STRICT:
            raise PDFTypeError(f"PDFStream required: {x!r}")
        return PDFStream({}, None, 0)
    return x
