#!/usr/bin/env python3
import sys

import atheris

from fuzzing.fuzzed_data_provider import PdfsyntaxFuzzedDataProvider

with atheris.instrument_imports():
    from fuzzing.utils import (
        generate_cipher_mode,
        is_valid_byte_stream,
        prepare_pdfsyntax_fuzzing,
    )
    from pdfsyntax.pdfparser import PDFParser
    from pdfsyntax.psexceptions import PSException


def fuzz_one_input(data: bytes) -> None:
    if not is_valid_byte_stream(data):
        # Not worth continuing with this test case
        return

    fdp = PdfsyntaxFuzzedDataProvider(data)
    allow_objptr = fdp.ConsumeBool()
    allow_stream = fdp.ConsumeBool()
    allow_eof = fdp.ConsumeBool()
    key = fdp.ConsumeOptionalKey()
    cfm = generate_cipher_mode(fdp)

    try:
        parser = PDFParser(
            fdp.ConsumeMemoryFile(),
            allow_objptr=allow_objptr,
            allow_stream=allow_stream,
        )
        parser.allow_eof = allow_eof
        parser.set_encryption(key, cfm)
        for _ in parser.iter_objects():
            pass
    except PSException:
        return


if __name__ == "__main__":
    prepare_pdfsyntax_fuzzing()
    atheris.Setup(sys.argv, fuzz_one_input)
    atheris.Fuzz()
