import sys
import os
from tempfile import TemporaryDirectory
import pytest
# Ensure the project root is on sys.path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

PROTO_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'proto')


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with TemporaryDirectory() as dir_path:
        yield dir_path


@pytest.fixture
def proto_dir():
    """Directory holding the .proto fixtures."""
    return PROTO_DIR


@pytest.fixture
def write_proto(temp_dir):
    """Write a .proto file below temp_dir and return its absolute path."""
    def _write(relative_path, text):
        path = os.path.join(temp_dir, relative_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
        return path
    return _write
