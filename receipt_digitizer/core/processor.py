"""
Multi-scale OCR retry over a single receipt image.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from PIL import Image

from .models import AttemptOutcome, ReceiptExtractionResult, RawRecognition
from .ocr import ImageSource, TesseractOCR, load_image, preprocess_image
from .parsers import extract_total_candidate, extract_items
from .patterns import PatternBank, DEFAULT_PATTERNS
from .utils import DEFAULT_SCALES, DEFAULT_CONTRAST, DEFAULT_LANGUAGES


def select_first_success(outcomes: Iterable[AttemptOutcome]) -> Optional[AttemptOutcome]:
    """
    Return the first successful outcome.

    ``outcomes`` is consumed lazily, so attempts after the first success are
    never run.
    """
    for outcome in outcomes:
        if outcome.succeeded:
            return outcome
    return None


class ReceiptProcessor:
    """Runs preprocessing + OCR + extraction across scale factors until one finds a total."""

    def __init__(self, ocr=None,
                 scales: Sequence[float] = DEFAULT_SCALES,
                 languages: Sequence[str] = DEFAULT_LANGUAGES,
                 contrast: float = DEFAULT_CONTRAST,
                 patterns: PatternBank = DEFAULT_PATTERNS,
                 verbose: bool = False):
        """
        Initialize receipt processor.

        Args:
            ocr: Object with ``recognize(raster, language_hints) -> str``
                (defaults to Tesseract)
            scales: Scale factors in the order they are tried
            languages: Language hints handed to the OCR engine
            contrast: Contrast boost applied to every raster
            patterns: Pattern bank used by the extractors
            verbose: Whether to show verbose debugging output
        """
        self.ocr = ocr if ocr is not None else TesseractOCR()
        self.scales = tuple(scales)
        self.languages = tuple(languages)
        self.contrast = contrast
        self.patterns = patterns
        self.verbose = verbose

    def extract(self, text: str, scale: Optional[float] = None) -> ReceiptExtractionResult:
        """Extract total and items from OCR text. Items are only read once a total is found."""
        candidate = extract_total_candidate(text, self.patterns)
        if candidate is None:
            return ReceiptExtractionResult(scale=scale)

        if self.verbose:
            print(f"  [DEBUG] Total {candidate.value} from {candidate.tier} tier: "
                  f"'{candidate.origin_line}'")
        items = extract_items(text, candidate.value, self.patterns, verbose=self.verbose)
        return ReceiptExtractionResult(
            total_amount=candidate.value,
            items=tuple(items),
            scale=scale,
            tier=candidate.tier,
        )

    def attempt(self, image: Image.Image, scale: float) -> AttemptOutcome:
        """Run one scale attempt; failures are returned, not raised."""
        if self.verbose:
            print(f"  [DEBUG] Trying scale {scale}x")
        try:
            with preprocess_image(image, scale, self.contrast) as raster:
                text = self.ocr.recognize(raster, self.languages)
        except Exception as e:
            print(f"[WARN] OCR at scale {scale}x failed: {e}")
            return AttemptOutcome(scale=scale, error=str(e) or type(e).__name__)

        recognition = RawRecognition.from_text(text)
        if self.verbose:
            print(f"  [DEBUG] Recognized {len(recognition.lines)} line(s) at {scale}x")
        return AttemptOutcome(scale=scale, result=self.extract(recognition.text, scale))

    def iter_attempts(self, image: Image.Image) -> Iterable[AttemptOutcome]:
        """Yield one outcome per scale, in order."""
        for scale in self.scales:
            yield self.attempt(image, scale)

    def process_image(self, source: ImageSource) -> Tuple[ReceiptExtractionResult, List[AttemptOutcome]]:
        """
        Process a receipt image.

        Returns:
            Tuple of (result, outcomes)
            - result: the first attempt with a positive total, else an empty result
            - outcomes: every attempt that ran, in order

        Raises:
            ValueError: If the image cannot be decoded
        """
        outcomes = []

        def tracked(attempts):
            for outcome in attempts:
                outcomes.append(outcome)
                yield outcome

        with load_image(source) as image:
            winner = select_first_success(tracked(self.iter_attempts(image)))

        if winner is None:
            return ReceiptExtractionResult(), outcomes

        if self.verbose:
            print(f"  [DEBUG] Scale {winner.scale}x succeeded: total {winner.result.total_amount}")
        return winner.result, outcomes
