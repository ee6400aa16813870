#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/conftest.py
"""Pytest configuration and shared fixtures for the mdtex test suite."""

import os
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

# Smallest valid PNG: signature, IHDR, IDAT and IEND chunks of a 1x1 image
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def png_bytes() -> bytes:
    """Provide the bytes of a tiny PNG image."""
    return PNG_BYTES


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Provide bytes that start with a JPEG signature."""
    return JPEG_BYTES


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test inside an empty directory with no configuration in scope.

    Returns
    -------
    Path
        The temporary working directory

    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MDTEX_CONFIG", raising=False)
    monkeypatch.delenv("MDTEX_DISABLE_NETWORK", raising=False)
    return tmp_path
