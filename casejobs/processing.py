from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from .amounts import AmountBreakdown, compose, decompose
from .config import Settings, get_settings
from .courts import CourtResolver, load_registry
from .db import RecordStore
from .errors import DuplicateRecord, MissingPrecondition, ParseFailure, PersistenceFailure, UnresolvedCourt
from .models import (
    INVOICE_ISSUED,
    PAYMENT_PAID,
    STATUS_COMPLETED,
    CandidateMatch,
    CourtEntry,
    ImportRunSummary,
    JobRecord,
    ParsedPayment,
    Vehicle,
)
from .parsing import DescriptionParser

log = logging.getLogger(__name__)

JobKey = Tuple[int, str]

SYNTHETIC_DATES_NOTE = "Received and scheduled dates estimated from the payment date"
SYNTHETIC_RECEIVED_NOTE = "Received date estimated from the payment date"
SYNTHETIC_SCHEDULED_NOTE = "Scheduled date estimated from the received date"
SYNTHETIC_AMOUNT_NOTE = "Amount estimated, statement line had none"
AUTO_CREATED_COURT_NOTE = "Created during statement import"


@dataclass
class SyntheticDates:
    received_date: date
    scheduled_date: date


class DateHeuristic:
    """Backfill received/scheduled dates that a payment does not carry."""

    def __init__(
        self,
        rng: random.Random,
        received_offset: Tuple[int, int] = (10, 30),
        scheduled_offset: Tuple[int, int] = (1, 10),
    ):
        self.rng = rng
        self.received_offset = received_offset
        self.scheduled_offset = scheduled_offset

    def synthesize(
        self,
        payment_date: date,
        received_date: Optional[date] = None,
        scheduled_date: Optional[date] = None,
    ) -> SyntheticDates:
        """Fill in whichever of the two dates is missing and keep the given ones.

        A generated received date never falls after a real scheduled date.
        """
        received = received_date
        if received is None:
            received = payment_date - timedelta(days=self.rng.randint(*self.received_offset))
            if scheduled_date is not None:
                received = min(received, scheduled_date)
        scheduled = scheduled_date
        if scheduled is None:
            scheduled = received + timedelta(days=self.rng.randint(*self.scheduled_offset))
        return SyntheticDates(received_date=received, scheduled_date=scheduled)


class AmountHeuristic:
    def __init__(self, rng: random.Random, base_range: Tuple[int, int] = (1000, 5000)):
        self.rng = rng
        self.base_range = base_range

    def synthesize(self, rate: int = 20) -> AmountBreakdown:
        return compose(self.rng.randint(*self.base_range), rate)


class DuplicateGuard:
    def __init__(self, existing_keys: Iterable[JobKey] = ()):
        self._keys: Set[JobKey] = {(int(court_id), str(file_number)) for court_id, file_number in existing_keys}

    def seen(self, court_id: int, file_number: str) -> bool:
        return (court_id, file_number) in self._keys

    def add(self, court_id: int, file_number: str) -> None:
        self._keys.add((court_id, file_number))

    def __len__(self) -> int:
        return len(self._keys)


class ImportPipeline:
    """Turns parsed payments into completed, paid and invoiced jobs.

    Records are processed one at a time; each persisted job is its own
    commit. Per-record failures are counted in the returned summary and never
    stop the batch.
    """

    def __init__(
        self,
        registry: Iterable[CourtEntry],
        existing_keys: Iterable[JobKey],
        vehicles: Iterable[Vehicle],
        store: RecordStore,
        *,
        parser: Optional[DescriptionParser] = None,
        resolver: Optional[CourtResolver] = None,
        vat_rate: int = 20,
        rng: Optional[random.Random] = None,
        synthesize_dates: bool = True,
        synthesize_amounts: bool = True,
        auto_create_courts: bool = False,
        placeholder_city: str = "Bilinmiyor",
    ):
        self.vehicles: List[Vehicle] = list(vehicles)
        if not self.vehicles:
            raise MissingPrecondition("No vehicle registered; add one before importing jobs")
        self.store = store
        self.parser = parser or DescriptionParser()
        self.resolver = resolver or CourtResolver(registry)
        self.guard = DuplicateGuard(existing_keys)
        self.vat_rate = vat_rate
        self.rng = rng or random.Random()
        self.dates = DateHeuristic(self.rng)
        self.amounts = AmountHeuristic(self.rng)
        self.synthesize_dates = synthesize_dates
        self.synthesize_amounts = synthesize_amounts
        self.auto_create_courts = auto_create_courts
        self.placeholder_city = placeholder_city

    @classmethod
    def from_store(
        cls,
        store: Optional[RecordStore] = None,
        settings: Optional[Settings] = None,
        **overrides,
    ) -> "ImportPipeline":
        store = store or RecordStore()
        settings = settings or get_settings()
        vehicles = [Vehicle.from_row(row) for row in store.all("vehicles")]
        if not vehicles:
            raise MissingPrecondition("No vehicle registered; add one before importing jobs")
        registry = load_registry(store)
        existing_keys = [(row["court_id"], row["file_number"]) for row in store.all("jobs")]
        strategy = overrides.pop("resolution_strategy", settings.resolution_strategy)
        options = {
            "parser": DescriptionParser(settings.city_prefixes, strict=settings.strict_parsing),
            "resolver": CourtResolver(registry, strategy, settings.min_similarity),
            "vat_rate": settings.vat_rate,
            "rng": random.Random(settings.random_seed),
            "synthesize_dates": settings.synthesize_dates,
            "synthesize_amounts": settings.synthesize_amounts,
            "auto_create_courts": settings.auto_create_courts,
            "placeholder_city": settings.placeholder_city,
        }
        options.update(overrides)
        log.info(
            "Loaded %d courts, %d existing jobs, %d vehicles",
            len(registry),
            len(existing_keys),
            len(vehicles),
        )
        return cls(registry, existing_keys, vehicles, store, **options)

    def run(self, payments: Iterable[ParsedPayment]) -> ImportRunSummary:
        summary = ImportRunSummary()
        for payment in payments:
            try:
                job_id = self.process(payment, summary)
            except ParseFailure as exc:
                log.debug("%s", exc)
                summary.parse_error += 1
            except UnresolvedCourt as exc:
                log.warning("%s", exc)
                summary.unresolved_names.add(exc.court_name)
                summary.unresolved_court += 1
            except DuplicateRecord as exc:
                log.debug("%s", exc)
                summary.duplicate += 1
            except PersistenceFailure as exc:
                log.warning("Could not store job for %r: %s", payment.description, exc)
                summary.persistence_error += 1
            else:
                log.debug("Stored job %d", job_id)
                summary.success += 1
        log.info("Import finished: %s", summary.to_dict())
        return summary

    def run_batch(self, batch) -> ImportRunSummary:
        """Run a :class:`~casejobs.sources.StatementBatch`, carrying over what the reader dropped."""
        summary = self.run(batch.payments)
        summary.skipped += batch.skipped
        summary.parse_error += batch.invalid
        return summary

    def process(self, payment: ParsedPayment, summary: ImportRunSummary) -> int:
        candidate = payment.candidate or self.parser.parse(payment.description)
        if candidate is None:
            raise ParseFailure(payment.description)
        court = self.resolve_court(candidate.court_name, summary)
        if self.guard.seen(court.id, candidate.file_number):
            raise DuplicateRecord(court.id, candidate.file_number)
        job = self.build_job(payment, court, candidate)
        job_id = self.store.insert("jobs", job.to_record())
        self.guard.add(court.id, candidate.file_number)
        return job_id

    def resolve_court(self, name: str, summary: ImportRunSummary) -> CourtEntry:
        match = self.resolver.resolve(name)
        if match is not None:
            if match.method != "exact":
                log.debug("Resolved %r to %r (%s, %d)", name, match.court.name, match.method, match.score)
            return match.court
        if not self.auto_create_courts:
            raise UnresolvedCourt(name)
        record = {"name": name, "city": self.placeholder_city, "notes": AUTO_CREATED_COURT_NOTE}
        try:
            court_id = self.store.insert("courts", record)
        except PersistenceFailure as exc:
            log.warning("Could not create court %s: %s", name, exc)
            raise UnresolvedCourt(name) from exc
        court = CourtEntry(id=court_id, name=name, city=self.placeholder_city, notes=AUTO_CREATED_COURT_NOTE)
        self.resolver.add(court)
        summary.auto_created_courts += 1
        log.info("Created court %s", name)
        return court

    def breakdown(self, payment: ParsedPayment) -> Tuple[AmountBreakdown, bool]:
        if payment.total_amount is not None:
            if payment.total_amount <= 0:
                raise ParseFailure(payment.description)
            return decompose(payment.total_amount, self.vat_rate), False
        if not self.synthesize_amounts:
            raise ParseFailure(payment.description)
        return self.amounts.synthesize(self.vat_rate), True

    def job_dates(self, payment: ParsedPayment) -> Tuple[date, date, Optional[str]]:
        """Received and scheduled dates for the job, plus a note when any was estimated."""
        received, scheduled = payment.received_date, payment.scheduled_date
        if received is not None and scheduled is not None:
            return received, scheduled, None
        if not self.synthesize_dates:
            paid = payment.payment_date
            if received is None:
                received = paid if scheduled is None else min(paid, scheduled)
            if scheduled is None:
                scheduled = max(paid, received)
            return received, scheduled, None
        dates = self.dates.synthesize(payment.payment_date, received, scheduled)
        if received is not None:
            note = SYNTHETIC_SCHEDULED_NOTE
        elif scheduled is not None:
            note = SYNTHETIC_RECEIVED_NOTE
        else:
            note = SYNTHETIC_DATES_NOTE
        return dates.received_date, dates.scheduled_date, note

    def build_job(self, payment: ParsedPayment, court: CourtEntry, candidate: CandidateMatch) -> JobRecord:
        amounts, synthetic_amount = self.breakdown(payment)
        received, scheduled, dates_note = self.job_dates(payment)
        notes = []
        if payment.reference:
            notes.append(f"Bank reference: {payment.reference}")
        if dates_note:
            notes.append(dates_note)
        if synthetic_amount:
            notes.append(SYNTHETIC_AMOUNT_NOTE)
        paid_on = payment.payment_date.isoformat()
        return JobRecord(
            received_date=received.isoformat(),
            scheduled_date=scheduled.isoformat(),
            court_id=court.id,
            file_number=candidate.file_number,
            vehicle_id=self.rng.choice(self.vehicles).id,
            total_amount=float(amounts.total),
            base_amount=float(amounts.base),
            vat_amount=float(amounts.vat),
            vat_rate=amounts.rate,
            payment_status=PAYMENT_PAID,
            invoice_status=INVOICE_ISSUED,
            status=STATUS_COMPLETED,
            status_date=paid_on,
            payment_date=paid_on,
            completion_date=scheduled.isoformat(),
            notes="; ".join(notes) or None,
        )


__all__ = [
    "SyntheticDates",
    "DateHeuristic",
    "AmountHeuristic",
    "DuplicateGuard",
    "ImportPipeline",
    "SYNTHETIC_DATES_NOTE",
    "SYNTHETIC_RECEIVED_NOTE",
    "SYNTHETIC_SCHEDULED_NOTE",
    "SYNTHETIC_AMOUNT_NOTE",
]
