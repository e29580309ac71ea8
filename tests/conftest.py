"""Shared fixtures for receipt digitizer tests."""

import io

import pytest
from PIL import Image


class ScriptedOCR:
    """OCR stand-in that answers by raster width.

    ``script`` maps raster width to the text to return, or to an exception
    to raise. Unknown widths return an empty string.
    """

    def __init__(self, script=None):
        self.script = script or {}
        self.widths = []
        self.hints = []

    def recognize(self, raster, language_hints):
        width = raster.size[0]
        self.widths.append(width)
        self.hints.append(tuple(language_hints))
        value = self.script.get(width, "")
        if isinstance(value, Exception):
            raise value
        return value


def _png_bytes(size=(100, 100), color=(255, 255, 255), mode="RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_png():
    """Factory for in-memory PNG files."""
    return _png_bytes


@pytest.fixture
def receipt_png() -> bytes:
    """A blank 100x100 receipt image; scales map to widths 150/200/250/120."""
    return _png_bytes()


@pytest.fixture
def scripted_ocr():
    """Factory for ScriptedOCR instances."""
    return ScriptedOCR
