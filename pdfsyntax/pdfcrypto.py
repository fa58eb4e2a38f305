"""String decryption for the standard security handler.

The object reader calls a decryption hook with the file key, the cipher
mode (crypt filter method name), the identity of the object being read
and the raw string bytes. `decrypt_string` is the default hook; any
callable with the same signature can take its place.
"""

import logging
import struct
from hashlib import md5
from typing import Callable, Dict

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from pdfsyntax.arcfour import Arcfour
from pdfsyntax.pdfexceptions import PDFEncryptionError
from pdfsyntax.pdftypes import PDFObjRef
from pdfsyntax.utils import unpad_aes

log = logging.getLogger(__name__)

DecryptHook = Callable[[bytes, str, PDFObjRef, bytes], bytes]

CFM_RC4 = "V2"
CFM_AES128 = "AESV2"
CFM_AES256 = "AESV3"
CFM_IDENTITY = "Identity"


def object_key(key: bytes, ref: PDFObjRef, salt: bytes = b"") -> bytes:
    """Algorithm 3.1: the per-object key derived from the file key."""
    key = key + struct.pack("<L", ref.objid)[:3] + struct.pack("<L", ref.genno)[:2]
    hash = md5(key + salt)
    return hash.digest()[: min(len(key), 16)]


def decrypt_rc4(key: bytes, ref: PDFObjRef, data: bytes) -> bytes:
    return Arcfour(object_key(key, ref)).decrypt(data)


def decrypt_identity(key: bytes, ref: PDFObjRef, data: bytes) -> bytes:
    return data


def _decrypt_aes_cbc(key: bytes, data: bytes) -> bytes:
    initialization_vector = data[:16]
    ciphertext = data[16:]
    if len(initialization_vector) < 16 or len(ciphertext) % 16 != 0:
        raise PDFEncryptionError(f"Invalid AES ciphertext length: {len(data)}")
    try:
        cipher = Cipher(
            algorithms.AES(key),
            modes.CBC(initialization_vector),
            backend=default_backend(),
        )  # type: ignore
    except ValueError as e:
        raise PDFEncryptionError(f"Invalid AES key: {e}") from e
    plaintext = cipher.decryptor().update(ciphertext)  # type: ignore
    return unpad_aes(plaintext)


def decrypt_aes128(key: bytes, ref: PDFObjRef, data: bytes) -> bytes:
    return _decrypt_aes_cbc(object_key(key, ref, b"sAlT"), data)


def decrypt_aes256(key: bytes, ref: PDFObjRef, data: bytes) -> bytes:
    # Revision 5 and later use the file key as is.
    if len(key) != 32:
        raise PDFEncryptionError(f"AESV3 needs a 32 byte key, got {len(key)}")
    return _decrypt_aes_cbc(key, data)


CIPHERS: Dict[str, Callable[[bytes, PDFObjRef, bytes], bytes]] = {
    CFM_RC4: decrypt_rc4,
    CFM_AES128: decrypt_aes128,
    CFM_AES256: decrypt_aes256,
    CFM_IDENTITY: decrypt_identity,
}


def decrypt_string(key: bytes, cfm: str, ref: PDFObjRef, data: bytes) -> bytes:
    try:
        method = CIPHERS[cfm]
    except KeyError:
        raise PDFEncryptionError(f"Unknown crypt filter method: {cfm!r}") from None
    log.debug("decrypt_string: cfm=%r, ref=%r, len=%d", cfm, ref, len(data))
    return method(key, ref, data)
