"""
Pytest configuration for project root.

Ensures project modules can be imported in tests and that no user-level
fanout settings (env vars, ~/.config/fanout/config.yaml) leak into a test.
"""

import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path_factory):
    """Run every test with an empty HOME and no FANOUT_* variables."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("FANOUT_THREADS", raising=False)
    monkeypatch.delenv("FANOUT_CONFIG", raising=False)
    return home
