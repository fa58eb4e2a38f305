"""Utilities shared across the various fuzzing harnesses"""

import logging

import atheris

from pdfsyntax.pdfcrypto import CFM_AES128, CFM_AES256, CFM_IDENTITY, CFM_RC4

CIPHER_MODES = [CFM_RC4, CFM_AES128, CFM_AES256, CFM_IDENTITY]


def prepare_pdfsyntax_fuzzing() -> None:
    """Used to disable logging of the pdfsyntax module"""
    logging.getLogger("pdfsyntax").setLevel(logging.CRITICAL)


@atheris.instrument_func  # type: ignore[misc]
def generate_cipher_mode(fdp: atheris.FuzzedDataProvider) -> str:
    return str(fdp.PickValueInList(CIPHER_MODES))


@atheris.instrument_func  # type: ignore[misc]
def is_valid_byte_stream(data: bytes) -> bool:
    """Quick check to see if this is worth of passing to atheris
    :return: Whether the byte-stream passes the basic checks
    """
    return len(data) > 1
