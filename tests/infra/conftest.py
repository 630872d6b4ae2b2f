"""
Shared fixtures for fanout/infra tests.

All tests use real filesystem operations with temporary directories.
"""

import pytest


@pytest.fixture
def input_file(tmp_path):
    """A small input file with an empty line in the middle."""
    path = tmp_path / "inputs.txt"
    path.write_text("alpha\nbeta\n\ngamma delta\n")
    return path


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config file and return its path."""
    def _write(text: str, name: str = "config.yaml"):
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write
