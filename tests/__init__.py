"""
Spectacle OCR - Unit Tests Package

Test Coverage:
- Configuration
- Screenshot capture (Spectacle subprocess)
- QR decoder (zxing-cpp)
- OCR engine and text recognizer (Tesseract)
- Decode pipeline ordering and short-circuits
- Command line front end
- Setup check script

Run tests with:
    pytest -v --cov=spectacle_ocr
"""
