from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import RESOLUTION_STRATEGIES
from .db import RecordStore
from .errors import MissingPrecondition, PersistenceFailure
from .models import CourtEntry
from .utils import normalize_text, similarity

log = logging.getLogger(__name__)

NUMBERED_LINE_RE = re.compile(r"^\d+\.\s+")


@dataclass
class CourtMatch:
    court: CourtEntry
    method: str
    score: int


@dataclass
class CourtImportResult:
    created: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class CourtResolver:
    """Match an extracted court name against a registry snapshot.

    The exact lookup runs on the stored display name. The fallback depends on
    ``strategy``: ``first-contains`` takes the first entry, in registry order,
    whose normalized name contains the normalized candidate on word
    boundaries; ``best-similarity`` takes the highest scoring entry at or
    above ``min_similarity``. The resolver never creates courts.
    """

    def __init__(
        self,
        registry: Iterable[CourtEntry],
        strategy: str = "first-contains",
        min_similarity: int = 75,
    ):
        if strategy not in RESOLUTION_STRATEGIES:
            raise ValueError(f"Unknown resolution strategy: {strategy}")
        self.strategy = strategy
        self.min_similarity = min_similarity
        self.registry: List[CourtEntry] = []
        self._by_name: Dict[str, CourtEntry] = {}
        self._normalized: List[Tuple[str, CourtEntry]] = []
        for court in registry:
            self.add(court)

    def add(self, court: CourtEntry) -> None:
        self.registry.append(court)
        self._by_name.setdefault(court.name, court)
        self._normalized.append((normalize_text(court.name), court))

    def resolve(self, name: Optional[str]) -> Optional[CourtMatch]:
        if not name:
            return None
        exact = self._by_name.get(name)
        if exact is not None:
            return CourtMatch(exact, "exact", 100)
        if self.strategy == "best-similarity":
            return self._best_similarity(name)
        return self._first_contains(name)

    def _first_contains(self, name: str) -> Optional[CourtMatch]:
        needle = normalize_text(name)
        if not needle:
            return None
        padded = f" {needle} "
        for normalized, court in self._normalized:
            if padded in f" {normalized} ":
                return CourtMatch(court, "contains", similarity(name, court.name))
        return None

    def _best_similarity(self, name: str) -> Optional[CourtMatch]:
        best: Optional[CourtMatch] = None
        for court in self.registry:
            score = similarity(name, court.name)
            if score < self.min_similarity:
                continue
            if best is None or score > best.score:
                best = CourtMatch(court, "similarity", score)
        return best


def detect_city_and_district(
    name: str,
    default_city: str = "Antalya",
    districts: Sequence[str] = ("Korkuteli",),
) -> Tuple[str, Optional[str]]:
    for district in districts:
        if district and district in name:
            return default_city, district
    return default_city, None


def read_court_list(path: Path) -> List[str]:
    """Court names from a numbered list (``12. Antalya 5. Aile Mahkemesi``)."""
    path = Path(path)
    if not path.exists():
        raise MissingPrecondition(f"Court list not found: {path}")
    names: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not NUMBERED_LINE_RE.match(line):
            continue
        name = NUMBERED_LINE_RE.sub("", line).strip()
        if name:
            names.append(name)
    return names


def write_court_list(path: Path, names: Iterable[str], title: str = "Courts") -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    unique = sorted(set(names))
    lines = [f"# {title}", "", f"Total: {len(unique)}", ""]
    lines.extend(f"{index}. {name}" for index, name in enumerate(unique, start=1))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def load_registry(store: RecordStore) -> List[CourtEntry]:
    return [CourtEntry.from_row(row) for row in store.all("courts")]


def import_courts(
    store: RecordStore,
    names: Iterable[str],
    default_city: str = "Antalya",
    districts: Sequence[str] = ("Korkuteli",),
) -> CourtImportResult:
    result = CourtImportResult()
    for raw_name in names:
        name = raw_name.strip()
        if not name:
            continue
        if store.find_one("courts", name=name) is not None:
            result.existing.append(name)
            continue
        city, district = detect_city_and_district(name, default_city, districts)
        try:
            store.insert("courts", {"name": name, "city": city, "district": district})
        except PersistenceFailure as exc:
            log.warning("Could not add court %s: %s", name, exc)
            result.failed.append(name)
            continue
        log.info("Added court %s", name)
        result.created.append(name)
    return result


__all__ = [
    "CourtMatch",
    "CourtResolver",
    "CourtImportResult",
    "detect_city_and_district",
    "read_court_list",
    "write_court_list",
    "load_registry",
    "import_courts",
]
