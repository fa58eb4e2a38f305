import sys

from pathlib import Path
from setuptools import setup

root_dir = Path(__file__).parent
with open(root_dir / "README.md") as f:
    readme = f.read()

extras_require = {
    "dev": ["pytest", "nox", "ruff", "mypy"],
    "bench": ["pytest", "pytest-benchmark"],
    "fuzz": [],
}

if sys.version_info < (3, 12):
    # There is currently no atheris support for Python 3.12
    extras_require["fuzz"].append("atheris")

setup(
    name="pdfsyntax",
    version="0.1.0",
    packages=["pdfsyntax"],
    package_data={"pdfsyntax": ["py.typed"]},
    install_requires=[
        "charset-normalizer >= 2.0.0",
        "cryptography >= 36.0.0",
    ],
    extras_require=extras_require,
    description="PDF tokenizer and object reader",
    long_description=readme,
    long_description_content_type="text/markdown",
    license="MIT",
    keywords=[
        "pdf parser",
        "pdf tokenizer",
        "pdf objects",
    ],
    python_requires=">=3.9",
    classifiers=[
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: 3 :: Only",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: Text Processing",
    ],
)
