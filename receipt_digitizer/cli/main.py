#!/usr/bin/env python3
"""
Main CLI entrypoint for receipt digitization.
"""

import argparse
import json
import os
import sys
from pathlib import Path

from receipt_digitizer.core.analyzer import ReceiptAnalyzer
from receipt_digitizer.core.ocr import TesseractOCR
from receipt_digitizer.core.patterns import load_patterns
from receipt_digitizer.core.processor import ReceiptProcessor
from receipt_digitizer.core.reporting import write_csv, format_summary
from receipt_digitizer.core.utils import (IMAGE_EXTS, PDF_EXTS, DEFAULT_SCALES,
                                          DEFAULT_LANGUAGES, parse_languages)


def _parse_scales(value: str) -> tuple:
    try:
        scales = tuple(float(s) for s in value.split(",") if s.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid scale list: {value}")
    if not scales or any(s <= 0 for s in scales):
        raise argparse.ArgumentTypeError(f"Scales must be positive: {value}")
    return scales


def discover_files(paths):
    """Expand directories into the receipt files they contain."""
    files = []
    for p in map(Path, paths):
        if p.is_dir():
            files.extend(sorted(
                f for f in p.iterdir()
                if f.suffix.lower() in IMAGE_EXTS.union(PDF_EXTS)
            ))
        else:
            files.append(p)
    return files


def main(argv=None):
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Extract items and total amount from photographed receipts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a single receipt
  receipt-digitizer receipt.jpg

  # Analyze a folder and export items to CSV
  receipt-digitizer ./receipts --csv items.csv

  # JSON output, custom scale order, extra patterns
  receipt-digitizer receipt.png --json --scales 2.0,1.5 --patterns patterns.json
        """
    )
    parser.add_argument("paths", nargs="+",
                        help="Receipt images/PDFs or folders containing them")
    parser.add_argument("--lang",
                        help="Tesseract languages, e.g. kor+eng (default: kor+eng, or RECEIPT_OCR_LANG env var)")
    parser.add_argument("--scales", type=_parse_scales,
                        help="Comma-separated scale factors in the order tried "
                             f"(default: {','.join(str(s) for s in DEFAULT_SCALES)})")
    parser.add_argument("--patterns", default="./patterns.json",
                        help="JSON file extending the keyword/exclusion banks (default: ./patterns.json)")
    parser.add_argument("--tesseract-cmd",
                        help="Path to the tesseract binary (or TESSERACT_CMD env var)")
    parser.add_argument("--csv",
                        help="Write extracted items to this CSV file")
    parser.add_argument("--json", action="store_true",
                        help="Print each result as JSON instead of a summary")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Show detailed parsing information for debugging")

    args = parser.parse_args(argv)

    lang_spec = args.lang or os.getenv("RECEIPT_OCR_LANG")
    languages = parse_languages(lang_spec) if lang_spec else DEFAULT_LANGUAGES
    if not languages:
        print(f"[ERROR] Invalid language spec: {lang_spec}")
        return 2

    try:
        patterns = load_patterns(Path(args.patterns))
    except ValueError as e:
        print(f"[ERROR] Could not load patterns from {args.patterns}: {e}")
        return 2

    files = discover_files(args.paths)
    if not files:
        print("No receipt files found.")
        return 0

    if not args.json:
        print(f"[INFO] Analyzing {len(files)} file(s) with languages {'+'.join(languages)}")

    processor = ReceiptProcessor(
        ocr=TesseractOCR(tesseract_cmd=args.tesseract_cmd or os.getenv("TESSERACT_CMD")),
        scales=args.scales or DEFAULT_SCALES,
        languages=languages,
        patterns=patterns,
        verbose=args.verbose,
    )
    analyzer = ReceiptAnalyzer(processor, verbose=args.verbose)

    results = []
    failed = 0
    for path in files:
        result = analyzer.analyze(path)
        results.append((path.name, result))
        if result.errors:
            failed += 1
            if not args.json:
                print(f"[ERROR] Failed {path.name}: {'; '.join(result.errors)}")
        if args.json:
            print(json.dumps({"file": path.name, **result.to_dict()}, ensure_ascii=False))
        elif not result.errors:
            print(format_summary(result, title=f"[OK] {path.name}"))

    if args.csv:
        out_csv = Path(args.csv)
        write_csv(results, out_csv)
        if not args.json:
            print(f"[OK] Wrote {out_csv}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
