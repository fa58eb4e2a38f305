"""Miscellaneous Routines."""

import charset_normalizer  # For str encoding detection


def make_compat_str(o: object) -> str:
    """Converts everything to string, if bytes guessing the encoding."""
    if isinstance(o, bytes):
        enc = charset_normalizer.detect(o)
        if enc["encoding"] is None:
            return str(o)
        try:
            return o.decode(enc["encoding"])
        except (UnicodeDecodeError, LookupError):
            return str(o)
    else:
        return str(o)


def shorten_str(s: str, size: int) -> str:
    if size < 7:
        return s[:size]
    if len(s) > size:
        length = (size - 5) // 2
        return f"{s[:length]} ... {s[-length:]}"
    else:
        return s


def describe(o: object, size: int = 40) -> str:
    """Short printable form of a token or payload for log messages."""
    return shorten_str(make_compat_str(o), size)


def unpad_aes(padded: bytes) -> bytes:
    """Remove block padding as described in PDF 1.7 section 7.6.2:

    > For an original message length of M, the pad shall consist of 16 -
    (M mod 16) bytes whose value shall also be 16 - (M mod 16).
    > Note that the pad is present when M is evenly divisible by 16;
    it contains 16 bytes of 0x10.
    """
    if len(padded) == 0:
        return padded
    # Check for a potential padding byte (bytes are unsigned)
    padding = padded[-1]
    if padding > 16 or padding == 0:
        return padded
    # A valid padding byte is the length of the padding
    if padding > len(padded):  # Obviously invalid
        return padded
    # Every byte of padding is equal to the length of padding
    if all(x == padding for x in padded[-padding:]):
        return padded[:-padding]
    return padded
