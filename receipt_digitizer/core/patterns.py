"""
Pattern banks and thresholds used by the receipt text parsers.

All tuned literals live in one immutable ``PatternBank`` so they can be tested
and extended without touching the parsing logic. Patterns are plain regex
strings; ``re`` caches their compiled form.
"""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class PatternBank:
    """Immutable set of keyword banks, regexes and numeric bounds."""

    # Summary-line keywords, including spaced and misrecognized spellings
    total_keywords: Tuple[str, ...] = (
        "합계", "총액", "총합", "결제금액", "지불금액",
        "합 계", "총 액", "총 합", "결제 금액", "지불 금액",
        "한 게", "합 게", "결 제",
    )

    # Amount grammar, tried in order. Group 1 is the number itself.
    amount_patterns: Tuple[str, ...] = (
        r"(\d{1,3},\d{3,})원?",     # 31,000원
        r"(\d{1,3}\.\d{3,})원?",    # 31.000 (dot read for comma)
        r"(\d{1,3}\s+\d{3,})원?",   # 31 000 (comma read as blank)
        r"(\d{4,7})원?",            # 31000
    )
    separator_pattern: str = r"[,.\s]"

    # Thousands-separated numbers counted by the frequency tier
    frequency_pattern: str = r"\d{1,3},\s*\d{3,}"

    # Shapes blanked out before amounts are read, so their digit groups
    # never turn into amounts. Card numbers go first.
    noise_patterns: Tuple[str, ...] = (
        r"\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}",
        r"\(\d{2,4}\)\s?\d{3,4}[-\s]?\d{4}",
        r"\d{2,4}[-\s]?\d{3,4}[-\s]?\d{4}",
        r"\d{8,}",
        r"\d{4}[./-]\d{1,2}[./-]\d{1,2}",
        r"\d{1,2}[./-]\d{1,2}[./-]\d{4}",
        r"\d{1,2}:\d{2}(?::\d{2})?",
    )

    # A line carrying an amount is dropped from the items if any of these match
    exclusion_patterns: Tuple[str, ...] = (
        # totals, tax
        r"합계|총액|총합|결제금액|지불금액|부\s*가\s*세|세금|한\s*게|합\s*게|결\s*제|과세|물품가액",
        # phone numbers
        r"\d{2,4}[-\s]?\d{3,4}[-\s]?\d{4}|\(\d{2,4}\)\s?\d{3,4}[-\s]?\d{4}",
        # contact
        r"세신|연락처|전화|TEL|CALL|문의",
        # dates
        r"\d{4}[./-]\d{1,2}[./-]\d{1,2}|\d{1,2}[./-]\d{1,2}[./-]\d{4}",
        # times
        r"\d{1,2}:\d{2}(:\d{2})?",
        # approval and transaction numbers
        r"\d{8,}",
        # card numbers
        r"\d{4}\s?\d{4}\s?\d{4}\s?\d{4}",
        # merchant and payment processor
        r"(?i)가맹점|승인|거래|결제|카드|SPIRIT|TING|Pay|현대카드|SOUS",
        # addresses
        r"구\s|동\s|로\d+|길\s?\d+|서울|부산|대구|인천|광주|대전|울산",
        # business registration
        r"사업자|업체|매장|지점|점포",
        # installments, loyalty points
        r"할부기간|LPOINT|키드|적립|포인트|POINT",
        r"SHAE|SH\s|ATH|AM\s",
        # receipt formatting fragments
        r"^[A-Za-z]{1,3}\s|^\d{1,3}[A-Za-z]\s|^gl\s|^Fil\s",
        r"^[A-Za-z\s]+$|^[\d\s.,:-]+$|ER,\s*SE|bl\s*=|\|\s*=|EN\s*\(|대역|Beas",
    )

    # Product-line heuristic
    product_alphabet: str = r"[가-힣]"
    numeric_only_pattern: str = r"^[\d\s,.-]+$"
    symbol_only_pattern: str = r"^[^A-Za-z0-9_가-힣]+$"
    structural_patterns: Tuple[str, ...] = (
        r"^[A-Z]{1,4}\s*[A-Z]*\s*$",   # "ATH", "SH A"
        r"^\d{1,3}[A-Za-z]\s*$",       # "2H", "310P"
        r"^[A-Za-z]\s*님\s",           # honorific fragment
    )

    # Removed from a product line to leave its name
    name_strip_patterns: Tuple[str, ...] = (
        r"\d{1,3}[,.\s]\d{3,}원?|\d{4,7}원?",
        r"[₩\\]",
    )
    name_junk_pattern: str = r"^[\s.,:-]+$"

    min_amount: int = 1000
    max_amount: int = 1_000_000
    min_item_price: int = 1000
    correction_ratio: float = 0.5
    min_product_line_length: int = 5
    max_product_line_length: int = 100
    min_name_length: int = 2
    max_name_length: int = 50


DEFAULT_PATTERNS = PatternBank()


def load_patterns(path: Path, base: PatternBank = DEFAULT_PATTERNS) -> PatternBank:
    """
    Load pattern overrides from a JSON file.

    List values extend the matching bank of ``base``; scalar values replace
    the matching threshold. Example::

        {
          "total_keywords": ["받을금액"],
          "exclusion_patterns": ["쿠폰"],
          "correction_ratio": 0.6
        }

    A missing file yields ``base`` unchanged.
    """
    if not path.exists():
        return base
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    known = {fld.name for fld in fields(PatternBank)}
    changes = {}
    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown pattern setting: {key}")
        current = getattr(base, key)
        if isinstance(current, tuple):
            if not isinstance(value, list):
                raise ValueError(f"Pattern setting {key} must be a list")
            changes[key] = current + tuple(value)
        else:
            if not _same_kind(current, value):
                raise ValueError(f"Pattern setting {key} must be {type(current).__name__}, "
                                 f"got {value!r}")
            changes[key] = type(current)(value)
    return replace(base, **changes)


def _same_kind(current, value) -> bool:
    """Whole numbers may stand in for floats; nothing else is converted."""
    if isinstance(value, bool):
        return isinstance(current, bool)
    if isinstance(current, float):
        return isinstance(value, (int, float))
    return isinstance(value, type(current))
