"""
CSV export and console summaries of analysis results.
"""

import csv
from pathlib import Path
from typing import List, Tuple

from .models import ReceiptAnalysisResult
from .utils import money_fmt

CSV_FIELDS = ["source_file", "id", "name", "price", "quantity", "confidence", "total_amount"]


def write_csv(results: List[Tuple[str, ReceiptAnalysisResult]], out_csv: Path):
    """Write one row per analyzed item; receipts without items get a single total-only row."""
    with out_csv.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        w.writeheader()
        for source_file, result in results:
            if not result.items:
                w.writerow({"source_file": source_file, "total_amount": result.total_amount})
                continue
            for item in result.items:
                w.writerow({
                    "source_file": source_file,
                    "id": item.id,
                    "name": item.name,
                    "price": item.price,
                    "quantity": item.quantity,
                    "confidence": item.confidence,
                    "total_amount": result.total_amount,
                })


def format_summary(result: ReceiptAnalysisResult, title: str = "") -> str:
    """Human-readable summary of one analysis result."""
    lines = []
    if title:
        lines.append(title)
    if result.errors:
        for err in result.errors:
            lines.append(f"  [ERROR] {err}")
        return "\n".join(lines)

    lines.append(f"  Total: {money_fmt(result.total_amount) if result.total_amount else '(none)'}")
    for item in result.items:
        lines.append(f"  - {item.name}: {money_fmt(item.price)}")
    for warning in result.warnings:
        lines.append(f"  [WARN] {warning}")
    for suggestion in result.suggestions:
        lines.append(f"  -> {suggestion}")
    lines.append(f"  ({result.processing_time_ms} ms)")
    return "\n".join(lines)
