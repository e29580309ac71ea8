"""
Data models for receipt digitization.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


TIER_KEYWORD = "keyword"
TIER_FREQUENCY = "frequency"
TIER_FALLBACK = "fallback"

STAGE_OCR = "ocr"
STAGE_COMPLETE = "complete"
STAGE_FAILED = "failed"


@dataclass(frozen=True)
class RawRecognition:
    """Text returned by the OCR engine for one raster, split into lines."""
    lines: Tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "RawRecognition":
        return cls(lines=tuple((text or "").split("\n")))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class AmountCandidate:
    """The total amount picked by one tier of the total extractor."""
    value: int
    origin_line: str
    tier: str


@dataclass(frozen=True)
class ReceiptLineItem:
    """A single product line recognized on a receipt."""
    name: str
    price: int
    correction_applied: bool = False


@dataclass(frozen=True)
class ReceiptExtractionResult:
    """Total and line items extracted from one OCR attempt."""
    total_amount: int = 0
    items: Tuple[ReceiptLineItem, ...] = ()
    scale: Optional[float] = None
    tier: Optional[str] = None


@dataclass(frozen=True)
class AttemptOutcome:
    """
    Result of one scale attempt.

    Either ``result`` is set (the attempt ran to completion, possibly finding
    nothing) or ``error`` holds the message of the failure that ended it.
    """
    scale: float
    result: Optional[ReceiptExtractionResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.result is not None and self.result.total_amount > 0


@dataclass(frozen=True)
class AnalyzedItem:
    """A line item as handed to the caller, pre-selected for confirmation."""
    id: str
    name: str
    price: int
    quantity: int = 1
    confidence: float = 0.8
    source: str = "ocr"
    is_selected: bool = True

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "confidence": self.confidence,
            "source": self.source,
            "isSelected": self.is_selected,
        }


@dataclass(frozen=True)
class ReceiptAnalysisResult:
    """Outcome of a single analyze call."""
    items: Tuple[AnalyzedItem, ...]
    total_amount: int
    confidence: float
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()
    processing_time_ms: int = 0
    used_services: Tuple[str, ...] = ("ocr",)
    stage: str = STAGE_COMPLETE

    def to_dict(self):
        """Convert to the dictionary shape consumed downstream."""
        return {
            "items": [item.to_dict() for item in self.items],
            "totalAmount": self.total_amount,
            "confidence": self.confidence,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "processingTimeMs": self.processing_time_ms,
            "usedServices": sorted(set(self.used_services)),
        }
