"""
Pytest configuration and fixtures

This module provides shared fixtures and configuration for all tests.
"""

import pytest
import sys
from pathlib import Path

from PIL import Image

# Ensure the parent directory is in the path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(scope="session")
def project_root():
    """Provide project root directory"""
    return Path(__file__).parent.parent


@pytest.fixture
def blank_image_path(tmp_path):
    """A white page with nothing on it"""
    path = tmp_path / "blank.png"
    Image.new("RGB", (400, 200), "white").save(path)
    return path


@pytest.fixture
def make_qr_image(tmp_path):
    """Factory writing a PNG that contains a QR code for the given payload"""
    qrcode = pytest.importorskip("qrcode")

    def _make(payload: str, name: str = "qr.png", rotate: int = 0) -> Path:
        path = tmp_path / name
        qrcode.make(payload).save(str(path))
        if rotate:
            with Image.open(path) as image:
                rotated = image.convert("RGB").rotate(rotate, expand=True, fillcolor="white")
            rotated.save(path)
        return path

    return _make


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "ocr: marks tests that exercise the OCR engine"
    )
    config.addinivalue_line(
        "markers", "qr: marks tests that exercise QR decoding"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test names"""
    for item in items:
        nodeid = item.nodeid.lower()

        if "ocr" in nodeid or "recognize" in nodeid:
            item.add_marker(pytest.mark.ocr)

        if "qr" in nodeid:
            item.add_marker(pytest.mark.qr)

        # Tests that drive the real tesseract binary or zxing-cpp
        if "real_" in nodeid:
            item.add_marker(pytest.mark.slow)
