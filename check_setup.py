#!/usr/bin/env python3
"""
Setup check for Spectacle Screenshot OCR
Run this to check that the external tools and Python packages are available.
"""

import sys
import os
import shutil
import subprocess

TESSERACT_SEARCH_PATHS = [
    "/usr/bin/tesseract",
    "/usr/local/bin/tesseract",
    "/snap/bin/tesseract",
]

PACKAGES = {
    "PyQt5": "PyQt5",
    "pytesseract": "pytesseract",
    "Pillow": "PIL",
    "zxing-cpp": "zxingcpp",
}


def check_python_version():
    """Check Python version"""
    version = sys.version_info
    print(f"Python version: {version.major}.{version.minor}.{version.micro}")

    if version < (3, 8):
        print("❌ Python 3.8+ is required!")
        return False

    print("✓ Python version OK")
    return True


def check_spectacle():
    """Check if KDE Spectacle is on PATH"""
    print("\nChecking Spectacle...")

    path = shutil.which("spectacle")
    if path:
        print(f"✓ Spectacle found at: {path}")
        return True

    print("❌ Spectacle not found!")
    print("\nPlease install Spectacle:")
    print("  Debian/Ubuntu: sudo apt install kde-spectacle")
    print("  Fedora:        sudo dnf install spectacle")
    print("  Arch:          sudo pacman -S spectacle")
    return False


def check_tesseract():
    """Check if Tesseract OCR is installed"""
    print("\nChecking Tesseract OCR...")

    try:
        result = subprocess.run(
            ["tesseract", "--version"],
            capture_output=True,
            text=True
        )
        if result.returncode == 0:
            output = result.stdout or result.stderr
            version = output.split('\n')[0] if output else "Unknown"
            print(f"✓ Tesseract found: {version}")
            return True
    except FileNotFoundError:
        pass

    for path in TESSERACT_SEARCH_PATHS:
        if os.path.exists(path):
            print(f"✓ Tesseract found at: {path}")
            print("  Note: pass --tesseract-cmd or set Config.TESSERACT_CMD if it is not on PATH")
            return True

    print("❌ Tesseract OCR not found!")
    print("\nPlease install Tesseract OCR:")
    print("  Linux:   sudo apt install tesseract-ocr")
    print("  macOS:   brew install tesseract")
    return False


def check_python_packages():
    """Check if required Python packages are installed"""
    print("\nChecking Python packages...")

    all_installed = True
    for name, import_name in PACKAGES.items():
        try:
            __import__(import_name)
            print(f"✓ {name} installed")
        except ImportError:
            print(f"❌ {name} not installed")
            all_installed = False

    if not all_installed:
        print("\nTo install missing packages, run:")
        print("  pip install -e .")

    return all_installed


def main():
    """Run setup checks"""
    print("=" * 50)
    print("Spectacle Screenshot OCR - Setup Check")
    print("=" * 50)

    checks = [
        ("Python version", check_python_version),
        ("Spectacle", check_spectacle),
        ("Tesseract OCR", check_tesseract),
        ("Python packages", check_python_packages),
    ]

    results = {}
    for name, check_func in checks:
        results[name] = check_func()

    print("\n" + "=" * 50)
    print("Setup Summary")
    print("=" * 50)

    all_passed = True
    for name, passed in results.items():
        status = "✓ PASS" if passed else "❌ FAIL"
        print(f"{name}: {status}")
        if not passed:
            all_passed = False

    if all_passed:
        print("\n✓ All checks passed! You're ready to use Spectacle OCR.")
        print("\nTo take a screenshot and extract its text, run:")
        print("  spectacle-ocr --lang eng")
        return 0

    print("\n❌ Some checks failed. Please fix the issues above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
