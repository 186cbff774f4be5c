"""Pytest configuration and fixtures"""

import pytest
import random
import tempfile
import shutil
from pathlib import Path


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def big_payload():
    """Compressible payload well above the gzip threshold"""
    lines = [f"line {i}: the quick brown fox jumps over the lazy dog\n" for i in range(200)]
    return ''.join(lines).encode('utf-8')


@pytest.fixture
def random_payload():
    """Incompressible payload, deterministic across runs"""
    rng = random.Random(1234)
    return bytes(rng.getrandbits(8) for _ in range(5000))
