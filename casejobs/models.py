from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Set

STATUS_PENDING = "Beklemede"
STATUS_IN_PROGRESS = "Devam Ediyor"
STATUS_COMPLETED = "Tamamlandı"
STATUS_CANCELLED = "İptal"
JOB_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED)

PAYMENT_PAID = "Ödendi"
PAYMENT_UNPAID = "Ödenmedi"
PAYMENT_STATUSES = (PAYMENT_PAID, PAYMENT_UNPAID)

INVOICE_ISSUED = "Kesildi"
INVOICE_NOT_ISSUED = "Kesilmedi"
INVOICE_PENDING = "Beklemede"
INVOICE_STATUSES = (INVOICE_ISSUED, INVOICE_NOT_ISSUED, INVOICE_PENDING)


def _from_mapping(cls, row: Mapping[str, Any]):
    names = {f.name for f in fields(cls)}
    return cls(**{key: value for key, value in dict(row).items() if key in names})


@dataclass
class CourtEntry:
    id: int
    name: str
    city: str
    district: Optional[str] = None
    type: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CourtEntry":
        return _from_mapping(cls, row)


@dataclass
class Vehicle:
    id: int
    plate: str
    brand: str
    model: str
    year: int
    type: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Vehicle":
        return _from_mapping(cls, row)


@dataclass
class CandidateMatch:
    court_name: str
    file_number: str


@dataclass
class ParsedPayment:
    payment_date: date
    description: str
    total_amount: Optional[Decimal] = None
    reference: Optional[str] = None
    received_date: Optional[date] = None
    scheduled_date: Optional[date] = None
    candidate: Optional[CandidateMatch] = None


@dataclass
class JobRecord:
    received_date: str
    scheduled_date: str
    court_id: int
    file_number: str
    total_amount: float
    base_amount: float
    vat_amount: float
    payment_status: str
    invoice_status: str
    status: str
    status_date: str
    vat_rate: int = 20
    vehicle_id: Optional[int] = None
    status_note: Optional[str] = None
    completion_date: Optional[str] = None
    payment_date: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "JobRecord":
        return _from_mapping(cls, row)

    def to_record(self) -> Dict[str, Any]:
        """Column values for the jobs table, without the id."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "id"}


@dataclass
class ImportRunSummary:
    success: int = 0
    duplicate: int = 0
    unresolved_court: int = 0
    parse_error: int = 0
    persistence_error: int = 0
    auto_created_courts: int = 0
    skipped: int = 0
    unresolved_names: Set[str] = field(default_factory=set)

    @property
    def errors(self) -> int:
        return self.unresolved_court + self.parse_error + self.persistence_error

    @property
    def total(self) -> int:
        return self.success + self.duplicate + self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "duplicate": self.duplicate,
            "unresolved_court": self.unresolved_court,
            "parse_error": self.parse_error,
            "persistence_error": self.persistence_error,
            "auto_created_courts": self.auto_created_courts,
            "skipped": self.skipped,
            "errors": self.errors,
            "total": self.total,
            "unresolved_names": sorted(self.unresolved_names),
        }

    def format(self) -> List[str]:
        lines = [
            f"Imported: {self.success}",
            f"Duplicates skipped: {self.duplicate}",
            f"Unresolved courts: {self.unresolved_court}",
            f"Parse errors: {self.parse_error}",
            f"Store errors: {self.persistence_error}",
        ]
        if self.auto_created_courts:
            lines.append(f"Courts created: {self.auto_created_courts}")
        if self.skipped:
            lines.append(f"Ineligible lines: {self.skipped}")
        lines.append(f"Total processed: {self.total}")
        if self.unresolved_names:
            lines.append("Courts missing from the registry:")
            lines.extend(f"  - {name}" for name in sorted(self.unresolved_names))
        return lines


__all__ = [
    "CourtEntry",
    "Vehicle",
    "CandidateMatch",
    "ParsedPayment",
    "JobRecord",
    "ImportRunSummary",
    "JOB_STATUSES",
    "PAYMENT_STATUSES",
    "INVOICE_STATUSES",
    "STATUS_PENDING",
    "STATUS_IN_PROGRESS",
    "STATUS_COMPLETED",
    "STATUS_CANCELLED",
    "PAYMENT_PAID",
    "PAYMENT_UNPAID",
    "INVOICE_ISSUED",
    "INVOICE_NOT_ISSUED",
    "INVOICE_PENDING",
]
