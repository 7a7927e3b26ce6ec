"""
Pytest configuration and fixtures for the bubble chart renderer tests.
"""

import pytest
import tempfile
import os
import shutil
import sys
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from config import OUTPUT_CONFIG


@pytest.fixture
def temp_output_file():
    """Fixture that provides a temporary output file path and cleans it up after test."""
    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as tmp_file:
        output_path = tmp_file.name

    yield output_path

    # Cleanup
    if os.path.exists(output_path):
        os.unlink(output_path)


@pytest.fixture
def temp_dest_dir():
    """Fixture that provides a temporary output directory and cleans it up after test."""
    dest_dir = tempfile.mkdtemp(prefix="bubble_test_")
    yield dest_dir
    if os.path.exists(dest_dir):
        shutil.rmtree(dest_dir)


@pytest.fixture
def quiet_output():
    """Silence progress output and restore the configuration afterwards."""
    with patch.dict(OUTPUT_CONFIG, {"verbose": False, "timing_info": False}):
        yield


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "cli: marks tests as CLI functionality tests")
