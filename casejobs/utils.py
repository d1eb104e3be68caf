from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

# Applied before lower(): str.lower() turns "İ" into "i" plus a combining dot.
TURKISH_FOLD = str.maketrans(
    {
        "ç": "c",
        "Ç": "c",
        "ğ": "g",
        "Ğ": "g",
        "ı": "i",
        "İ": "i",
        "I": "i",
        "ö": "o",
        "Ö": "o",
        "ş": "s",
        "Ş": "s",
        "ü": "u",
        "Ü": "u",
        "â": "a",
        "Â": "a",
        "î": "i",
        "Î": "i",
        "û": "u",
        "Û": "u",
    }
)

NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
WHITESPACE_RE = re.compile(r"\s+")

DEFAULT_TIERS: Dict[str, int] = {"likely": 90, "probable": 75, "possible": 60}


@dataclass
class SimilarMatch:
    value: str
    score: int
    tier: Optional[str]


def normalize_text(value: Optional[str]) -> str:
    """Comparison key for a human-entered name. Never store or display the result."""
    if not value:
        return ""
    folded = str(value).translate(TURKISH_FOLD).lower()
    folded = NON_ALNUM_RE.sub("", folded)
    return WHITESPACE_RE.sub(" ", folded).strip()


def levenshtein_distance(left: str, right: str) -> int:
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(left: Optional[str], right: Optional[str]) -> int:
    norm_left = normalize_text(left)
    norm_right = normalize_text(right)
    if norm_left == norm_right:
        return 100
    max_len = max(len(norm_left), len(norm_right))
    distance = levenshtein_distance(norm_left, norm_right)
    score = Decimal(100 * (max_len - distance)) / Decimal(max_len)
    return int(score.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def similarity_tier(score: int, thresholds: Optional[Dict[str, int]] = None) -> Optional[str]:
    tiers = thresholds or DEFAULT_TIERS
    for label, minimum in sorted(tiers.items(), key=lambda item: item[1], reverse=True):
        if score >= minimum:
            return label
    return None


def find_similar(
    value: str,
    candidates: Iterable[str],
    min_chars: int = 3,
    limit: int = 5,
    thresholds: Optional[Dict[str, int]] = None,
) -> List[SimilarMatch]:
    if not value or len(value.strip()) < min_chars:
        return []
    tiers = thresholds or DEFAULT_TIERS
    floor = min(tiers.values())
    matches: List[SimilarMatch] = []
    for candidate in candidates:
        score = similarity(value, candidate)
        if score >= floor:
            matches.append(SimilarMatch(candidate, score, similarity_tier(score, tiers)))
    # sorted() is stable, so equal scores keep candidate order
    matches = sorted(matches, key=lambda match: match.score, reverse=True)
    return matches[:limit]


__all__ = [
    "SimilarMatch",
    "normalize_text",
    "levenshtein_distance",
    "similarity",
    "similarity_tier",
    "find_similar",
    "DEFAULT_TIERS",
]
