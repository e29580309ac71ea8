"""
Receipt Digitizer

Turns photographed receipts into structured {name, price} items and a total
amount using multi-scale OCR and heuristic text parsing.
"""

__version__ = "1.0.0"
__author__ = "Receipt Digitizer Contributors"

from receipt_digitizer.core.analyzer import ReceiptAnalyzer, analyze_receipt
from receipt_digitizer.core.models import ReceiptAnalysisResult

__all__ = ["ReceiptAnalyzer", "ReceiptAnalysisResult", "analyze_receipt"]
