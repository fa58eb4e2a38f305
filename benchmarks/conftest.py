"""pytest-benchmark configuration for pdfsyntax benchmarks."""

from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def object_stream_data() -> bytes:
    """A run of indirect object definitions resembling a PDF body."""
    objs = []
    for i in range(1, 201):
        objs.append(
            b"%d 0 obj\n<< /Type /Page /Parent 1 0 R /MediaBox [0 0 612 792]"
            b" /Contents %d 0 R /Resources << /Font << /F1 5 0 R >> >> >>\n"
            b"endobj\n" % (i, i + 1000)
        )
    return b"".join(objs)


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest-benchmark with custom settings."""
    # Set benchmark defaults
    config.option.benchmark_min_rounds = 5
    config.option.benchmark_warmup = True
    config.option.benchmark_warmup_iterations = 3

    # Create benchmarks directory for JSON exports
    benchmark_dir = Path(__file__).parent.parent / ".benchmarks"
    benchmark_dir.mkdir(exist_ok=True)
