from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

from .db import RecordStore
from .errors import MissingPrecondition
from .models import (
    INVOICE_STATUSES,
    JOB_STATUSES,
    PAYMENT_STATUSES,
    STATUS_COMPLETED,
    JobRecord,
)

log = logging.getLogger(__name__)

STATUS_COLUMNS: Dict[str, tuple] = {
    "status": JOB_STATUSES,
    "payment_status": PAYMENT_STATUSES,
    "invoice_status": INVOICE_STATUSES,
}

REQUIRED_FIELDS: Dict[tuple, tuple] = {
    ("status", STATUS_COMPLETED): ("file_number", "vehicle_id", "total_amount", "completion_date"),
}


@dataclass
class TransitionCheck:
    ok: bool
    missing_fields: List[str] = field(default_factory=list)


def _as_mapping(job: Union[JobRecord, Mapping[str, Any]]) -> Dict[str, Any]:
    if is_dataclass(job):
        return asdict(job)
    return dict(job)


def transition_column(target: str, column: Optional[str] = None) -> str:
    """Which status column ``target`` belongs to.

    ``Beklemede`` is both a job and an invoice status; without an explicit
    column it is read as a job status.
    """
    if column is not None:
        if column not in STATUS_COLUMNS:
            raise ValueError(f"Unknown status column: {column}")
        if target not in STATUS_COLUMNS[column]:
            raise ValueError(f"{target!r} is not a valid {column}")
        return column
    for name, vocabulary in STATUS_COLUMNS.items():
        if target in vocabulary:
            return name
    raise ValueError(f"Unknown status: {target!r}")


def _is_empty(name: str, value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if name == "total_amount":
        return value <= 0
    return False


def can_transition(
    job: Union[JobRecord, Mapping[str, Any]],
    target: str,
    column: Optional[str] = None,
) -> TransitionCheck:
    column = transition_column(target, column)
    values = _as_mapping(job)
    required = REQUIRED_FIELDS.get((column, target), ())
    missing = [name for name in required if _is_empty(name, values.get(name))]
    return TransitionCheck(ok=not missing, missing_fields=missing)


def apply_transition(
    store: RecordStore,
    job_id: int,
    target: str,
    column: Optional[str] = None,
    **fields: Any,
) -> JobRecord:
    """Fill ``fields`` and move the job to ``target`` if the merged record allows it."""
    column = transition_column(target, column)
    row = store.find_one("jobs", id=job_id)
    if row is None:
        raise MissingPrecondition(f"Job {job_id} not found")
    merged = {**row, **fields}
    check = can_transition(merged, target, column)
    if not check.ok:
        raise MissingPrecondition(
            f"Job {job_id} cannot move to {target}: missing {', '.join(check.missing_fields)}"
        )
    changes = dict(fields)
    changes[column] = target
    if column == "status" and "status_date" not in fields:
        changes["status_date"] = date.today().isoformat()
    store.update("jobs", job_id, changes)
    log.info("Job %d %s -> %s", job_id, column, target)
    return JobRecord.from_row({**merged, **changes})


__all__ = [
    "TransitionCheck",
    "STATUS_COLUMNS",
    "REQUIRED_FIELDS",
    "transition_column",
    "can_transition",
    "apply_transition",
]
