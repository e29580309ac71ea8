"""
Utility functions and constants for receipt digitization.
"""

import re
from typing import Optional

# File type constants
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".webp", ".gif"}
PDF_EXTS = {".pdf"}

# Scale factors in the order they are tried (empirical preference, not size)
DEFAULT_SCALES = (1.5, 2.0, 2.5, 1.2)

# Contrast boost applied to every raster (1.0 = original, 1.5 = +50%)
DEFAULT_CONTRAST = 1.5

# Tesseract language codes: Korean first, Latin script as fallback
DEFAULT_LANGUAGES = ("kor", "eng")

# Confidence reported for OCR-derived items and results
OCR_CONFIDENCE = 0.8


def normalize_amount(s: str, separators: str = r"[,.\s]") -> Optional[int]:
    """Strip thousands separators and parse an amount as a whole number."""
    if not s:
        return None
    s = re.sub(separators, "", s)
    try:
        return int(s)
    except ValueError:
        return None


def normalize_whitespace(s: str) -> str:
    """Trim and collapse runs of whitespace to a single blank."""
    return re.sub(r"\s+", " ", s.strip())


def parse_languages(value: str) -> tuple:
    """Split a Tesseract language spec such as ``kor+eng`` into codes."""
    return tuple(code.strip() for code in re.split(r"[+,]", value or "") if code.strip())


def money_fmt(v: Optional[int]) -> str:
    """Format amount as whole won."""
    return f"{v:,}원" if v is not None else ""
