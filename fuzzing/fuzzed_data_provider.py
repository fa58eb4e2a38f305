import io
from typing import Optional

from atheris import FuzzedDataProvider


class PdfsyntaxFuzzedDataProvider(FuzzedDataProvider):  # type: ignore[misc]
    def ConsumeRemainingBytes(self) -> bytes:
        return bytes(self.ConsumeBytes(self.remaining_bytes()))

    def ConsumeMemoryFile(self) -> io.BytesIO:
        return io.BytesIO(self.ConsumeRemainingBytes())

    def ConsumeOptionalKey(self) -> Optional[bytes]:
        if self.ConsumeBool():
            return bytes(self.ConsumeBytes(self.ConsumeIntInRange(5, 16)))
        return None
