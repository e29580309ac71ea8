"""
Receipt analysis entry point.

Wraps the multi-scale OCR processor, reports progress and turns every
failure into data: ``analyze`` always returns a ``ReceiptAnalysisResult``.
"""

import time
from typing import Callable, List, Optional

from .models import (AnalyzedItem, AttemptOutcome, ReceiptAnalysisResult,
                     ReceiptExtractionResult, STAGE_OCR, STAGE_COMPLETE, STAGE_FAILED)
from .ocr import ImageSource
from .processor import ReceiptProcessor
from .utils import OCR_CONFIDENCE

ProgressCallback = Callable[[str, int, str], None]

USED_SERVICES = ("ocr",)


class ReceiptAnalyzer:
    """Turns a receipt image into items and a total for the caller to confirm."""

    def __init__(self, processor: Optional[ReceiptProcessor] = None, verbose: bool = False):
        self.processor = processor or ReceiptProcessor(verbose=verbose)
        self.verbose = verbose

    def _report(self, on_progress: Optional[ProgressCallback],
                stage: str, percent: int, message: str):
        if on_progress is None:
            return
        try:
            on_progress(stage, percent, message)
        except Exception as e:
            print(f"[WARN] Progress callback failed at {percent}%: {e}")

    def analyze(self, source: ImageSource,
                on_progress: Optional[ProgressCallback] = None) -> ReceiptAnalysisResult:
        """
        Analyze a receipt image.

        Args:
            source: Image path, raw bytes or binary file object
            on_progress: Optional ``(stage, percent, message)`` callback

        Returns:
            Analysis result; errors are recorded in ``errors``, never raised
        """
        start = time.perf_counter()

        try:
            self._report(on_progress, STAGE_OCR, 10, "Starting OCR...")
            extraction, outcomes = self.processor.process_image(source)
            self._report(on_progress, STAGE_OCR, 60, "OCR complete")
        except Exception as e:
            print(f"[ERROR] Receipt analysis failed: {e}")
            return ReceiptAnalysisResult(
                items=(),
                total_amount=0,
                confidence=0.0,
                errors=(str(e) or "Unknown error during receipt analysis",),
                processing_time_ms=_elapsed_ms(start),
                used_services=USED_SERVICES,
                stage=STAGE_FAILED,
            )

        items = tuple(
            AnalyzedItem(id=f"ocr-{index}", name=item.name, price=item.price,
                         confidence=OCR_CONFIDENCE)
            for index, item in enumerate(extraction.items)
        )
        warnings, suggestions = _diagnose(extraction, outcomes)

        self._report(on_progress, STAGE_COMPLETE, 100, "Analysis complete")
        return ReceiptAnalysisResult(
            items=items,
            total_amount=extraction.total_amount,
            confidence=OCR_CONFIDENCE,
            warnings=tuple(warnings),
            suggestions=tuple(suggestions),
            processing_time_ms=_elapsed_ms(start),
            used_services=USED_SERVICES,
            stage=STAGE_COMPLETE,
        )


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


def _diagnose(extraction: ReceiptExtractionResult, outcomes: List[AttemptOutcome]):
    """Warnings and suggestions describing a completed (possibly empty) analysis."""
    warnings = []
    suggestions = []
    failed = [o for o in outcomes if o.error is not None]

    if outcomes and len(failed) == len(outcomes):
        details = "; ".join(f"{o.scale}x: {o.error}" for o in failed)
        warnings.append(f"All {len(failed)} OCR attempts failed ({details})")
    elif extraction.total_amount == 0:
        warnings.append("No total amount could be recognized")

    if extraction.total_amount == 0 and not extraction.items:
        suggestions.append("Retake the photo with the whole receipt in focus and evenly lit")
    elif not extraction.items:
        suggestions.append("No items were recognized; add them manually")
    return warnings, suggestions


def analyze_receipt(source: ImageSource,
                    on_progress: Optional[ProgressCallback] = None,
                    processor: Optional[ReceiptProcessor] = None,
                    verbose: bool = False) -> ReceiptAnalysisResult:
    """Analyze one receipt with a fresh analyzer."""
    return ReceiptAnalyzer(processor, verbose=verbose).analyze(source, on_progress)
