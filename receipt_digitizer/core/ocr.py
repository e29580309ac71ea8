"""
Image decoding, preprocessing and the Tesseract OCR adapter.
"""

import io
from pathlib import Path
from typing import BinaryIO, Sequence, Union

from PIL import Image, UnidentifiedImageError

from .utils import PDF_EXTS, DEFAULT_CONTRAST, DEFAULT_LANGUAGES

ImageSource = Union[str, Path, bytes, BinaryIO]


def _lazy_import_ocr_deps():
    """Lazy import heavy OCR dependencies."""
    global pytesseract, fitz
    import importlib
    pytesseract = importlib.import_module("pytesseract")
    fitz = importlib.import_module("fitz")  # pymupdf


# Initialize on first use
pytesseract = None
fitz = None


def _read_source(source: ImageSource) -> tuple:
    """Return (raw bytes, lowercase suffix) for a path, bytes or file object."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), ""
    if isinstance(source, (str, Path)):
        path = Path(source)
        return path.read_bytes(), path.suffix.lower()
    name = getattr(source, "name", "") or ""
    return source.read(), Path(str(name)).suffix.lower()


def pdf_to_image(data: bytes, zoom: float = 2.0) -> Image.Image:
    """Rasterize the first page of a PDF receipt."""
    if fitz is None:
        _lazy_import_ocr_deps()

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except RuntimeError as e:
        raise ValueError(f"Unsupported image format: {e}") from e
    try:
        if len(doc) == 0:
            raise ValueError("PDF has no pages")
        pix = doc[0].get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
    finally:
        doc.close()


def load_image(source: ImageSource) -> Image.Image:
    """
    Decode a receipt image (or the first page of a PDF) into an RGBA raster.

    Raises:
        ValueError: If the input cannot be decoded
    """
    data, ext = _read_source(source)
    if ext in PDF_EXTS or data[:4] == b"%PDF":
        img = pdf_to_image(data)
    else:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Unsupported image format: {e}") from e

    if img.mode != "RGBA":
        converted = img.convert("RGBA")
        img.close()
        img = converted
    return img


def contrast_lut(contrast: float = DEFAULT_CONTRAST) -> list:
    """
    Lookup table for a linear contrast stretch around mid-grey.

    output = clamp(0, 255, factor * (input - 128) + 128) with
    factor = 259 * (contrast + 1) / (259 - contrast).
    """
    factor = (259 * (contrast + 1)) / (259 - contrast)
    return [max(0, min(255, round(factor * (v - 128) + 128))) for v in range(256)]


def preprocess_image(image: Image.Image, scale: float,
                     contrast: float = DEFAULT_CONTRAST) -> Image.Image:
    """
    Rescale with nearest-neighbour sampling and boost contrast on RGB.

    Returns a new RGBA image; alpha is left as is. The caller owns (and
    closes) the returned raster.
    """
    size = (int(image.width * scale), int(image.height * scale))
    if image.mode != "RGBA":
        with image.convert("RGBA") as rgba:
            scaled = rgba.resize(size, Image.Resampling.NEAREST)
    else:
        scaled = image.resize(size, Image.Resampling.NEAREST)
    try:
        lut = contrast_lut(contrast)
        return scaled.point(lut * 3 + list(range(256)))
    finally:
        scaled.close()


class TesseractOCR:
    """OCR adapter backed by pytesseract."""

    def __init__(self, config: str = "", tesseract_cmd: str = None):
        self.config = config
        self.tesseract_cmd = tesseract_cmd

    def recognize(self, raster: Image.Image,
                  language_hints: Sequence[str] = DEFAULT_LANGUAGES) -> str:
        """OCR a raster; language hints are joined Tesseract-style (``kor+eng``)."""
        if pytesseract is None:
            _lazy_import_ocr_deps()
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

        # Tesseract ignores alpha; hand it a flat RGB image
        rgb = raster.convert("RGB")
        try:
            return pytesseract.image_to_string(rgb, lang="+".join(language_hints),
                                               config=self.config)
        finally:
            rgb.close()
