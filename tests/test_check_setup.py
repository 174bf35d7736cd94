"""
Unit tests for the setup check script
"""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

sys.path.insert(0, str(Path(__file__).parent.parent))

import check_setup


class TestChecks:

    def test_python_version(self):
        assert check_setup.check_python_version() is True

    def test_spectacle_found(self, capsys):
        with patch("check_setup.shutil.which", return_value="/usr/bin/spectacle"):
            assert check_setup.check_spectacle() is True
        assert "/usr/bin/spectacle" in capsys.readouterr().out

    def test_spectacle_missing(self):
        with patch("check_setup.shutil.which", return_value=None):
            assert check_setup.check_spectacle() is False

    def test_tesseract_on_path(self, capsys):
        result = Mock(returncode=0, stdout="tesseract 5.3.0\n leptonica-1.82.0\n", stderr="")
        with patch("check_setup.subprocess.run", return_value=result):
            assert check_setup.check_tesseract() is True
        assert "tesseract 5.3.0" in capsys.readouterr().out

    def test_tesseract_in_install_dir(self):
        with patch("check_setup.subprocess.run", side_effect=FileNotFoundError), \
                patch("check_setup.os.path.exists", return_value=True):
            assert check_setup.check_tesseract() is True

    def test_tesseract_missing(self):
        with patch("check_setup.subprocess.run", side_effect=FileNotFoundError), \
                patch("check_setup.os.path.exists", return_value=False):
            assert check_setup.check_tesseract() is False

    def test_packages_installed(self):
        with patch.dict(check_setup.PACKAGES, {"Pillow": "PIL"}, clear=True):
            assert check_setup.check_python_packages() is True

    def test_package_missing(self, capsys):
        with patch.dict(check_setup.PACKAGES, {"nothing": "no_such_module_for_spectacle_ocr"}, clear=True):
            assert check_setup.check_python_packages() is False
        assert "pip install" in capsys.readouterr().out

    def test_search_paths_are_unix(self):
        assert "/usr/bin/tesseract" in check_setup.TESSERACT_SEARCH_PATHS
        assert all(path.startswith("/") for path in check_setup.TESSERACT_SEARCH_PATHS)


class TestMain:

    def test_all_checks_pass(self):
        with patch("check_setup.check_spectacle", return_value=True), \
                patch("check_setup.check_tesseract", return_value=True), \
                patch("check_setup.check_python_packages", return_value=True):
            assert check_setup.main() == 0

    def test_failed_check(self, capsys):
        with patch("check_setup.check_spectacle", return_value=False), \
                patch("check_setup.check_tesseract", return_value=True), \
                patch("check_setup.check_python_packages", return_value=True):
            assert check_setup.main() == 1
        assert "Spectacle: ❌ FAIL" in capsys.readouterr().out
