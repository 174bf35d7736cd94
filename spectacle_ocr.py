#!/usr/bin/env python3
"""
Spectacle Screenshot OCR
Takes a screenshot with KDE Spectacle, decodes a QR code from it if one is
visible and otherwise falls back to Tesseract OCR. The extracted text is
printed to stdout.

Usage:
    python spectacle_ocr.py [--lang eng+deu] [--disable-qr]

Status messages go to stderr so the text can be piped into other tools.
"""

import sys
import os
import shutil
import argparse
import subprocess
import tempfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Callable, Optional, Union

from PyQt5.QtGui import QImage
from PIL import Image

# OCR imports - will gracefully handle if not installed
try:
    import pytesseract
    TESSERACT_AVAILABLE = True
except ImportError:
    TESSERACT_AVAILABLE = False

# QR decoding
try:
    import zxingcpp
    ZXING_AVAILABLE = True
except ImportError:
    ZXING_AVAILABLE = False


class Config:
    """Application configuration"""
    # Screenshot settings
    CAPTURE_COMMAND = "spectacle"
    CAPTURE_MODE = "fullscreen"
    CAPTURE_MODE_FLAGS = {
        "fullscreen": "-f",
        "current": "-m",
        "activewindow": "-a",
        "region": "-r",
    }
    # Background mode, no notification
    CAPTURE_BASE_FLAGS = ["-b", "-n"]
    SCREENSHOT_PATH = os.path.join(tempfile.gettempdir(), "screenshot.png")

    # OCR Settings
    TESSERACT_CMD: Optional[str] = None  # None means use tesseract from PATH
    TESSERACT_SEARCH_PATHS = [
        "/usr/bin/tesseract",
        "/usr/local/bin/tesseract",
        "/snap/bin/tesseract",
    ]
    LANGUAGE = "eng"  # OCR language, "+" joins several (e.g. "eng+hin")

    # Common Tesseract language codes
    SUPPORTED_LANGUAGES = {
        "English": "eng",
        "Hindi": "hin",
        "Chinese (Simplified)": "chi_sim",
        "Chinese (Traditional)": "chi_tra",
        "Japanese": "jpn",
        "Korean": "kor",
        "German": "deu",
        "French": "fra",
        "Spanish": "spa",
        "Russian": "rus",
        "Arabic": "ara",
    }


class Stage(Enum):
    """Pipeline phase a failure originated from"""
    CAPTURE = "capture"
    IMAGE_LOAD = "image_load"
    ENGINE_INIT = "engine_init"


@dataclass(frozen=True)
class QrDecoded:
    text: str

    success = True

    @property
    def status_message(self) -> str:
        return "QR code detected and decoded successfully"


@dataclass(frozen=True)
class TextRecognized:
    text: str

    success = True

    @property
    def status_message(self) -> str:
        return "Text extracted successfully."


@dataclass(frozen=True)
class Failed:
    stage: Stage
    message: str

    success = False
    text = ""

    @property
    def status_message(self) -> str:
        return self.message


@dataclass(frozen=True)
class NoQrFound:
    """Returned by the QR decoder when the image holds no readable QR code.

    This is not a pipeline outcome: the pipeline continues with OCR.
    """
    reason: str


DecodeOutcome = Union[QrDecoded, TextRecognized, Failed]


class EngineInitError(Exception):
    """Tesseract could not be started for the requested language(s)"""

    def __init__(self, language: str, reason: str):
        super().__init__(f"{reason} (language: {language})")
        self.language = language
        self.reason = reason

    @property
    def message(self) -> str:
        return f"Error initializing Tesseract OCR for language: {self.language}"


class ScreenCapture:
    """Takes screenshots by running Spectacle as a subprocess"""

    def __init__(self, mode: str = None, executable: str = None):
        self.mode = mode or Config.CAPTURE_MODE
        self.executable = executable or Config.CAPTURE_COMMAND
        if self.mode not in Config.CAPTURE_MODE_FLAGS:
            raise ValueError(
                f"Unknown capture mode {self.mode!r}, expected one of: "
                + ", ".join(Config.CAPTURE_MODE_FLAGS)
            )

    def build_command(self, destination) -> list:
        """Command line for a capture written to destination"""
        return (
            [self.executable]
            + Config.CAPTURE_BASE_FLAGS
            + [Config.CAPTURE_MODE_FLAGS[self.mode], "-o", str(destination)]
        )

    def capture(self, destination) -> bool:
        """
        Take a screenshot and block until Spectacle exits.

        Args:
            destination: Path the screenshot is written to

        Returns:
            True if Spectacle exited with status 0. The file itself is not
            checked here; the decoders report it if it cannot be loaded.
        """
        try:
            result = subprocess.run(self.build_command(destination))
        except OSError as e:
            print(f"Capture error: could not run {self.executable}: {e}", file=sys.stderr)
            return False
        return result.returncode == 0


class QRDecoder:
    """QR code detection using zxing-cpp"""

    @staticmethod
    def load_image(image_path) -> Optional[Image.Image]:
        """
        Load an image and normalize it to 32-bit RGBA.

        Returns None if the file is missing or not a readable image.
        """
        image = QImage(str(image_path))
        if image.isNull():
            return None

        # Same byte layout whatever the source encoding was
        if image.format() != QImage.Format_RGBA8888:
            image = image.convertToFormat(QImage.Format_RGBA8888)

        data = image.constBits().asstring(image.sizeInBytes())
        return Image.frombuffer(
            "RGBA", (image.width(), image.height()), data,
            "raw", "RGBA", image.bytesPerLine(), 1
        )

    @staticmethod
    def decode(image_path) -> Union[QrDecoded, NoQrFound, Failed]:
        """
        Look for a QR code in the image at image_path.

        Returns:
            QrDecoded with the payload, NoQrFound if no valid symbol was
            found, or Failed(IMAGE_LOAD) if the image could not be read.
        """
        if not ZXING_AVAILABLE:
            return NoQrFound("zxing-cpp not installed. Install with: pip install zxing-cpp")

        image = QRDecoder.load_image(image_path)
        if image is None:
            return Failed(Stage.IMAGE_LOAD, "Failed to load image for QR detection")

        # zxing-cpp already searches exhaustively by default; downscaling and
        # non-pure search are kept on explicitly.
        result = zxingcpp.read_barcode(
            image,
            formats=zxingcpp.BarcodeFormat.QRCode,
            try_rotate=True,
            try_downscale=True,
            is_pure=False,
        )

        if result is not None and result.valid:
            return QrDecoded(result.text)
        return NoQrFound("Failed to detect valid QR code")


class OCREngine:
    """
    Tesseract engine scoped to one language specification.

    Use as a context manager so the engine is released on every exit path:

        with OCREngine("eng+hin") as engine:
            text = engine.extract(image)
    """

    def __init__(self, language: str, tesseract_cmd: Optional[str] = None):
        self.language = language
        self.tesseract_cmd = tesseract_cmd or Config.TESSERACT_CMD
        self.initialized = False
        self._previous_cmd: Optional[str] = None

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.end()
        return False

    def _setup_tesseract(self):
        """Point pytesseract at the configured binary, or search common install paths"""
        self._previous_cmd = pytesseract.pytesseract.tesseract_cmd

        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
            return

        if shutil.which(self._previous_cmd):
            return

        for path in Config.TESSERACT_SEARCH_PATHS:
            if os.path.exists(path):
                pytesseract.pytesseract.tesseract_cmd = path
                break

    def init(self):
        """
        Start the engine for self.language.

        Raises:
            EngineInitError: pytesseract or the tesseract binary is missing,
                or trained data for one of the requested languages is not
                installed.
        """
        if not TESSERACT_AVAILABLE:
            raise EngineInitError(self.language, "pytesseract not installed. Install with: pip install pytesseract")

        self._setup_tesseract()
        try:
            installed = set(pytesseract.get_languages(config=""))
        except pytesseract.TesseractNotFoundError as e:
            self.end()
            raise EngineInitError(self.language, "Tesseract OCR not found") from e
        except (pytesseract.TesseractError, OSError) as e:
            self.end()
            raise EngineInitError(self.language, f"could not list languages: {e}") from e

        # Tesseract skips empty parts and accepts "~lang" exclusions
        requested = [code.lstrip("~") for code in self.language.split("+")]
        missing = [code for code in requested if code and code not in installed]
        if missing:
            self.end()
            raise EngineInitError(self.language, f"no trained data for: {', '.join(missing)}")

        self.initialized = True

    def extract(self, image: Image.Image) -> str:
        """Run full-page OCR on image and return the text, stripped"""
        if not self.initialized:
            raise RuntimeError("OCREngine.extract() called before init()")

        try:
            text = pytesseract.image_to_string(image, lang=self.language)
        except pytesseract.TesseractNotFoundError as e:
            raise EngineInitError(self.language, "Tesseract OCR not found") from e
        except pytesseract.TesseractError as e:
            raise EngineInitError(self.language, f"OCR processing failed: {e}") from e

        return text.strip()

    def end(self):
        """Release the engine and restore the previous tesseract command"""
        if TESSERACT_AVAILABLE and self._previous_cmd is not None:
            pytesseract.pytesseract.tesseract_cmd = self._previous_cmd
            self._previous_cmd = None
        self.initialized = False


def recognize_text(image_path, language: str = None, tesseract_cmd: Optional[str] = None) -> Union[TextRecognized, Failed]:
    """
    Extract text from the image at image_path with Tesseract.

    Args:
        image_path: Screenshot to read
        language: Tesseract language code(s), e.g. 'eng' or 'eng+hin'
        tesseract_cmd: Optional path to the tesseract executable

    Returns:
        TextRecognized (text may be empty) or Failed with stage ENGINE_INIT
        or IMAGE_LOAD
    """
    if language is None:
        language = Config.LANGUAGE

    try:
        with OCREngine(language, tesseract_cmd) as engine:
            try:
                with Image.open(image_path) as image:
                    image.load()
                    text = engine.extract(image)
            except OSError as e:
                print(f"OCR error: {e}", file=sys.stderr)
                return Failed(Stage.IMAGE_LOAD, "Failed to load image")
    except EngineInitError as e:
        print(f"OCR error: {e}", file=sys.stderr)
        return Failed(Stage.ENGINE_INIT, e.message)

    return TextRecognized(text)


class DecodePipeline:
    """Screenshot, then QR decode, then OCR fallback"""

    def __init__(
        self,
        image_path=None,
        capture: Callable = None,
        qr_decoder: Callable = None,
        text_recognizer: Callable = None,
    ):
        self.image_path = Path(image_path or Config.SCREENSHOT_PATH)
        self.capture = capture or ScreenCapture().capture
        self.qr_decoder = qr_decoder or QRDecoder.decode
        self.text_recognizer = text_recognizer or recognize_text

    def run(self, qr_enabled: bool = True, language: str = None) -> DecodeOutcome:
        """
        Run the pipeline once. Every stage is attempted at most once.

        Args:
            qr_enabled: Try QR decoding before OCR
            language: Tesseract language code(s)

        Returns:
            Exactly one of QrDecoded, TextRecognized or Failed
        """
        if language is None:
            language = Config.LANGUAGE

        if not self.capture(self.image_path):
            return Failed(Stage.CAPTURE, "Error occurred while taking screenshot")

        if qr_enabled:
            result = self.qr_decoder(self.image_path)
            if isinstance(result, QrDecoded):
                return result
            # Any QR-stage failure falls through; OCR reports its own load errors
            reason = result.reason if isinstance(result, NoQrFound) else result.message
            print(f"No QR code: {reason}", file=sys.stderr)

        return self.text_recognizer(self.image_path, language)


def save_text(text: str, path) -> bool:
    """Write text to path as UTF-8"""
    try:
        Path(path).write_text(text, encoding="utf-8")
        return True
    except OSError as e:
        print(f"Failed to save file: {e}", file=sys.stderr)
        return False


def save_screenshot(source, destination) -> Optional[Path]:
    """
    Copy the captured screenshot.

    If destination is a directory the copy is named Screenshot_<timestamp>.png.

    Returns:
        The path written, or None on failure
    """
    destination = Path(destination)
    if destination.is_dir():
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        destination = destination / f"Screenshot_{timestamp}.png"

    try:
        shutil.copyfile(source, destination)
        return destination
    except OSError as e:
        print(f"Failed to save screenshot: {e}", file=sys.stderr)
        return None


def build_parser() -> argparse.ArgumentParser:
    languages = "\n".join(
        f"  {code:<8} {name}" for name, code in Config.SUPPORTED_LANGUAGES.items()
    )
    parser = argparse.ArgumentParser(
        prog="spectacle-ocr",
        description="Extract text from spectacle screenshots using OCR",
        epilog=f"Common language codes:\n{languages}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--lang",
        default=Config.LANGUAGE,
        metavar="language",
        help="Language(s) for OCR (e.g., eng, hin, or eng+hin for multiple languages)"
    )
    parser.add_argument(
        "--disable-qr",
        action="store_true",
        help="Disable QR code detection and extraction."
    )
    parser.add_argument(
        "--capture-mode",
        choices=list(Config.CAPTURE_MODE_FLAGS),
        default=Config.CAPTURE_MODE,
        help="What spectacle captures (default: %(default)s)"
    )
    parser.add_argument(
        "--image",
        default=Config.SCREENSHOT_PATH,
        help="Where the screenshot is written (default: %(default)s)"
    )
    parser.add_argument(
        "--output",
        metavar="FILE",
        help="Also write the extracted text to FILE"
    )
    parser.add_argument(
        "--save-image",
        metavar="PATH",
        help="Keep a copy of the screenshot at PATH (file or directory)"
    )
    parser.add_argument(
        "--tesseract-cmd",
        default=Config.TESSERACT_CMD,
        help="Path to the tesseract executable"
    )
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    pipeline = DecodePipeline(
        image_path=args.image,
        capture=ScreenCapture(mode=args.capture_mode).capture,
        text_recognizer=partial(recognize_text, tesseract_cmd=args.tesseract_cmd),
    )
    outcome = pipeline.run(qr_enabled=not args.disable_qr, language=args.lang)

    print(outcome.status_message, file=sys.stderr)
    exit_code = 0 if outcome.success else 1

    if outcome.success:
        print(outcome.text)
        if args.output:
            if save_text(outcome.text, args.output):
                print(f"✓ Text saved to {args.output}", file=sys.stderr)
            else:
                exit_code = 1

    if args.save_image and not (isinstance(outcome, Failed) and outcome.stage == Stage.CAPTURE):
        saved = save_screenshot(pipeline.image_path, args.save_image)
        if saved is not None:
            print(f"✓ Screenshot saved to {saved}", file=sys.stderr)
        else:
            exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
