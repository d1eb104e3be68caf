"""Extract the court name and case-file number from bank descriptions.

A typical description reads::

    GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - Antalya 5. Aile Mahkemesi-2023/770 Esas-RAMAZAN ÇATAL

Everything before the cashier marker is bank boilerplate, and the trailing
all-caps segment is the payer. What is left is ``<court>-<YYYY/N> <kind>``.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from .models import CandidateMatch

log = logging.getLogger(__name__)

COURT_PAYMENT_MARKERS = ("MAHKEMELER VEZNESİ", "İDARE MAHKEMESİ", "BÖLGE ADLİYE")
CASE_KINDS = ("Esas", "Talimat", "D.İş", "Satış")

TRANSFER_MARKER_RE = re.compile(r"^GELEN\s+(?:EFT|FAST|HAVALE)\s*-\s*")
CASHIER_MARKER_RE = re.compile(r"^.*?VEZNESİ\s*-\s*")
PAYER_SUFFIX_RE = re.compile(r"\s*-\s*[A-ZÇĞİÖŞÜ][A-ZÇĞİÖŞÜ .]*$")
FILE_NUMBER = r"(\d{4}/\d+)"
STRICT_RE = re.compile(
    r"^(?P<court>.+?)\s*-\s*" + FILE_NUMBER + r"\s+(?:" + "|".join(re.escape(kind) for kind in CASE_KINDS) + r")"
)
LOOSE_RE = re.compile(r"^(?P<court>.+?)\s*-\s*" + FILE_NUMBER)


def is_court_payment(description: object) -> bool:
    """True when the description mentions one of the court cashier offices."""
    if not isinstance(description, str):
        return False
    return any(marker in description for marker in COURT_PAYMENT_MARKERS)


class DescriptionParser:
    def __init__(self, city_prefixes: Sequence[str] = ("Antalya",), strict: bool = False):
        self.strict = strict
        self.city_prefixes = tuple(city_prefixes)
        self._prefix_re = self._compile_prefixes(self.city_prefixes)

    @staticmethod
    def _compile_prefixes(prefixes: Iterable[str]) -> Optional[re.Pattern]:
        alternatives = [re.escape(prefix) for prefix in prefixes if prefix]
        if not alternatives:
            return None
        return re.compile(r"^(?:" + "|".join(alternatives) + r")\s+", re.IGNORECASE)

    def reduce(self, description: str) -> str:
        """Strip the transfer marker, cashier boilerplate and payer suffix."""
        text = description.strip()
        text = TRANSFER_MARKER_RE.sub("", text)
        text = CASHIER_MARKER_RE.sub("", text, count=1)
        text = PAYER_SUFFIX_RE.sub("", text)
        return text.strip()

    def strip_city(self, court_name: str) -> str:
        if self._prefix_re is None:
            return court_name
        return self._prefix_re.sub("", court_name, count=1).strip()

    def parse(self, description: object) -> Optional[CandidateMatch]:
        if not isinstance(description, str) or not description.strip():
            return None
        if not is_court_payment(description):
            return None
        text = self.reduce(description)
        match = STRICT_RE.match(text)
        if match is None and not self.strict:
            match = LOOSE_RE.match(text)
        if match is None:
            log.debug("No court pattern in %r", description)
            return None
        court_name = self.strip_city(match.group("court").strip())
        if not court_name:
            return None
        return CandidateMatch(court_name=court_name, file_number=match.group(2))


def parse_description(description: object, city_prefixes: Sequence[str] = ("Antalya",)) -> Optional[CandidateMatch]:
    return DescriptionParser(city_prefixes=city_prefixes).parse(description)


__all__ = [
    "COURT_PAYMENT_MARKERS",
    "CASE_KINDS",
    "DescriptionParser",
    "is_court_payment",
    "parse_description",
]
