import io
import logging
from typing import BinaryIO

from pdfsyntax.psexceptions import PSEOF, PSIOError

log = logging.getLogger(__name__)


class ByteSource:
    """Buffered byte cursor over a binary file object.

    Keeps track of the absolute offset of every byte it hands out and
    allows a single byte to be pushed back, including across buffer
    refills.

    `offset` is the absolute position the file object is currently at,
    which lets a source cover a window of a larger file.
    """

    BUFSIZE = 4096

    def __init__(self, fp: BinaryIO, offset: int = 0, allow_eof: bool = False) -> None:
        self.fp = fp
        self.allow_eof = allow_eof
        # Difference between absolute offsets and positions in fp.
        self.shift = offset - fp.tell() if self.seekable() else 0
        # Absolute offset of buf[0].
        self.bufpos = offset
        self.buf = b""
        self.pos = 0

    def __repr__(self) -> str:
        return f"<ByteSource: offset={self.tell()}, allow_eof={self.allow_eof}>"

    def seekable(self) -> bool:
        try:
            return self.fp.seekable()
        except (AttributeError, ValueError):
            return False

    def seek(self, offset: int) -> None:
        """Reposition to an absolute offset, discarding buffered bytes."""
        if not self.seekable():
            if self.bufpos <= offset < self.tell():
                # Still buffered
                self.pos = offset - self.bufpos
                return
            if offset < self.tell():
                raise PSIOError(
                    "Cannot seek backwards to %d on a non-seekable source" % offset
                )
            self.seek_forward(offset)
            return
        log.debug("seek: %d", offset)
        try:
            self.fp.seek(offset - self.shift, io.SEEK_SET)
        except OSError as e:
            raise PSIOError(f"Cannot seek to {offset}: {e}") from e
        self.bufpos = offset
        self.buf = b""
        self.pos = 0

    def seek_forward(self, offset: int) -> None:
        """Skip bytes up to an absolute offset by reading past them."""
        if offset < self.bufpos:
            self.seek(offset)
            return
        while self.bufpos + len(self.buf) < offset:
            if not self.fillbuf():
                if self.allow_eof:
                    self.pos = len(self.buf)
                    return
                raise PSEOF("Unexpected EOF skipping to %d" % offset)
        self.pos = offset - self.bufpos

    def tell(self) -> int:
        """Absolute offset of the next unread byte."""
        return self.bufpos + self.pos

    def fillbuf(self) -> bool:
        """Read the next block, keeping the last byte for unreadbyte().

        Returns False at end of input.
        """
        try:
            data = self.fp.read(self.BUFSIZE)
        except OSError as e:
            raise PSIOError(f"Reading at offset {self.tell()}: {e}") from e
        if not data:
            return False
        tail = self.buf[-1:]
        self.bufpos += len(self.buf) - len(tail)
        self.buf = tail + data
        self.pos = len(tail)
        return True

    def readbyte(self) -> bytes:
        """Return the next byte.

        At end of input this raises PSEOF, or returns b"" when
        `allow_eof` is set.
        """
        if self.pos >= len(self.buf) and not self.fillbuf():
            if self.allow_eof:
                return b""
            raise PSEOF("Unexpected EOF at offset %d" % self.tell())
        c = self.buf[self.pos : self.pos + 1]
        self.pos += 1
        return c

    def unreadbyte(self) -> None:
        """Push back the byte last returned by readbyte()."""
        if self.pos > 0:
            self.pos -= 1

    def read(self, n: int) -> bytes:
        """Read up to n raw bytes from the current position."""
        data = []
        while n > 0:
            if self.pos >= len(self.buf) and not self.fillbuf():
                break
            chunk = self.buf[self.pos : self.pos + n]
            self.pos += len(chunk)
            n -= len(chunk)
            data.append(chunk)
        return b"".join(data)
