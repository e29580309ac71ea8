"""
Parsers for extracting the total amount and line items from receipt text.
"""

import re
from typing import Callable, Iterable, List, Optional, Sequence

from .models import (AmountCandidate, ReceiptLineItem,
                     TIER_KEYWORD, TIER_FREQUENCY, TIER_FALLBACK)
from .patterns import PatternBank, DEFAULT_PATTERNS
from .utils import normalize_amount, normalize_whitespace


TotalTier = Callable[[Sequence[str], PatternBank], Optional[AmountCandidate]]


def mask_noise(line: str, patterns: PatternBank = DEFAULT_PATTERNS) -> str:
    """Blank out phone numbers, dates, times and card numbers."""
    for pat in patterns.noise_patterns:
        line = re.sub(pat, " ", line)
    return line


def extract_amounts(line: str, patterns: PatternBank = DEFAULT_PATTERNS) -> List[int]:
    """
    Extract every plausible amount from a line of receipt text.

    Patterns of the amount grammar are tried in order; values are kept in
    first-seen order without duplicates, and only amounts within
    ``[min_amount, max_amount]`` survive.
    """
    text = mask_noise(line, patterns)
    amounts = []
    for pat in patterns.amount_patterns:
        for m in re.finditer(pat, text):
            val = normalize_amount(m.group(1), patterns.separator_pattern)
            if val is None:
                continue
            if patterns.min_amount <= val <= patterns.max_amount and val not in amounts:
                amounts.append(val)
    return amounts


def keyword_tier(lines: Sequence[str],
                 patterns: PatternBank = DEFAULT_PATTERNS) -> Optional[AmountCandidate]:
    """Largest amount on the first keyword line that carries one."""
    for line in lines:
        clean = normalize_whitespace(line)
        if not clean:
            continue
        if not any(keyword in clean for keyword in patterns.total_keywords):
            continue
        amounts = extract_amounts(clean, patterns)
        if amounts:
            return AmountCandidate(max(amounts), clean, TIER_KEYWORD)
    return None


def frequency_tier(lines: Sequence[str],
                   patterns: PatternBank = DEFAULT_PATTERNS) -> Optional[AmountCandidate]:
    """
    Most repeated comma-grouped amount across the text.

    When several amounts share the highest count, the largest one wins.
    """
    counts = {}
    origins = {}
    for line in lines:
        clean = line.strip()
        for match in re.findall(patterns.frequency_pattern, clean):
            amount = normalize_amount(match, r"[,\s]")
            if amount is None or not patterns.min_amount <= amount <= patterns.max_amount:
                continue
            counts[amount] = counts.get(amount, 0) + 1
            origins.setdefault(amount, clean)

    if not counts:
        return None

    max_count = max(counts.values())
    best = max(amount for amount, count in counts.items() if count == max_count)
    return AmountCandidate(best, origins[best], TIER_FREQUENCY)


def fallback_tier(lines: Sequence[str],
                  patterns: PatternBank = DEFAULT_PATTERNS) -> Optional[AmountCandidate]:
    """Largest plausible amount anywhere in the text."""
    best = None
    for line in lines:
        for amount in extract_amounts(line, patterns):
            if best is None or amount > best.value:
                best = AmountCandidate(amount, line.strip(), TIER_FALLBACK)
    return best


# Tried in order until one yields a candidate
TOTAL_TIERS = (keyword_tier, frequency_tier, fallback_tier)


def extract_total_candidate(text: str,
                            patterns: PatternBank = DEFAULT_PATTERNS,
                            tiers: Iterable[TotalTier] = TOTAL_TIERS) -> Optional[AmountCandidate]:
    """Run the total tiers in order and return the first candidate found."""
    lines = (text or "").split("\n")
    for tier in tiers:
        candidate = tier(lines, patterns)
        if candidate is not None:
            return candidate
    return None


def extract_total_amount(text: str, patterns: PatternBank = DEFAULT_PATTERNS) -> int:
    """Extract the receipt total, or 0 when nothing plausible is found."""
    candidate = extract_total_candidate(text, patterns)
    return candidate.value if candidate else 0


def is_excluded_line(line: str, patterns: PatternBank = DEFAULT_PATTERNS) -> bool:
    """True if the line looks like a total, contact, date, payment or layout line."""
    return any(re.search(pat, line) for pat in patterns.exclusion_patterns)


def is_likely_product(line: str, patterns: PatternBank = DEFAULT_PATTERNS) -> bool:
    """Heuristic check that a line names a product."""
    if not patterns.min_product_line_length <= len(line) <= patterns.max_product_line_length:
        return False
    if re.match(patterns.numeric_only_pattern, line):
        return False
    if re.match(patterns.symbol_only_pattern, line):
        return False
    if any(re.search(pat, line) for pat in patterns.structural_patterns):
        return False
    return re.search(patterns.product_alphabet, line) is not None


def correct_price(price: int, total_amount: int,
                  patterns: PatternBank = DEFAULT_PATTERNS) -> int:
    """
    Replace a price that strays too far from the receipt total.

    On single-item receipts a misread digit is far more likely than an item
    costing less than half (or more than one and a half times) the total.
    """
    if total_amount <= 0:
        return price
    diff_ratio = abs(price - total_amount) / total_amount
    if diff_ratio > patterns.correction_ratio:
        return total_amount
    return price


def clean_item_name(line: str, patterns: PatternBank = DEFAULT_PATTERNS) -> Optional[str]:
    """Strip amounts and currency marks from a line; None if no usable name is left."""
    name = line
    for pat in patterns.name_strip_patterns:
        name = re.sub(pat, "", name)
    name = name.strip()
    if not patterns.min_name_length <= len(name) <= patterns.max_name_length:
        return None
    if re.match(patterns.name_junk_pattern, name):
        return None
    return name


def extract_items(text: str, total_amount: int = 0,
                  patterns: PatternBank = DEFAULT_PATTERNS,
                  verbose: bool = False) -> List[ReceiptLineItem]:
    """
    Extract product lines from receipt text.

    Args:
        text: OCR'd receipt text
        total_amount: Reference total used to correct implausible prices (0 = none)
        patterns: Pattern bank to filter with
        verbose: Print why lines were dropped

    Returns:
        Line items in text order
    """
    items = []
    for line in (text or "").split("\n"):
        clean = line.strip()
        if not clean:
            continue

        amounts = extract_amounts(clean, patterns)
        if not amounts:
            continue

        if is_excluded_line(clean, patterns):
            if verbose:
                print(f"  [DEBUG] Excluded line: '{clean}'")
            continue

        if not is_likely_product(clean, patterns):
            if verbose:
                print(f"  [DEBUG] Not a product line: '{clean}'")
            continue

        prices = [amt for amt in amounts if amt >= patterns.min_item_price]
        if not prices:
            continue
        price = prices[0]

        corrected = correct_price(price, total_amount, patterns)
        if corrected != price and verbose:
            print(f"  [DEBUG] Price corrected: {price} -> {corrected}")

        name = clean_item_name(clean, patterns)
        if name is None:
            if verbose:
                print(f"  [DEBUG] No usable name in: '{clean}'")
            continue

        items.append(ReceiptLineItem(name=name, price=corrected,
                                     correction_applied=corrected != price))
    return items
