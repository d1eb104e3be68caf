from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import init_db
from .config import RESOLUTION_STRATEGIES, get_settings
from .db import RecordStore
from .errors import CaseJobsError
from .jobs import can_transition
from .processing import ImportPipeline
from .sources import parse_statement_lines
from .utils import find_similar

app = FastAPI(title="Case Jobs API")


class ImportPayload(BaseModel):
    lines: str
    auto_create_courts: Optional[bool] = None
    strategy: Optional[str] = None


class SimilarItem(BaseModel):
    value: str
    score: int
    tier: Optional[str] = None


class TransitionResult(BaseModel):
    job_id: int
    target: str
    ok: bool
    missing_fields: List[str]


@app.on_event("startup")
def startup_event() -> None:
    init_db()


@app.get("/health")
def health():
    settings = get_settings()
    return {"status": "ok", "db": settings.db_url}


@app.get("/similar", response_model=List[SimilarItem])
def similar(name: str, kind: str = "court", limit: int = 5):
    if kind not in {"court", "vehicle"}:
        raise HTTPException(status_code=400, detail="kind must be 'court' or 'vehicle'")
    store = RecordStore()
    if kind == "court":
        candidates = [row["name"] for row in store.all("courts")]
    else:
        candidates = [row["plate"] for row in store.all("vehicles")]
    matches = find_similar(name, candidates, limit=limit, thresholds=get_settings().similarity_tiers)
    return [SimilarItem(value=match.value, score=match.score, tier=match.tier) for match in matches]


@app.post("/import")
def import_lines(payload: ImportPayload):
    if payload.strategy is not None and payload.strategy not in RESOLUTION_STRATEGIES:
        raise HTTPException(status_code=400, detail=f"Unknown strategy: {payload.strategy}")
    overrides = {}
    if payload.strategy is not None:
        overrides["resolution_strategy"] = payload.strategy
    if payload.auto_create_courts is not None:
        overrides["auto_create_courts"] = payload.auto_create_courts
    try:
        pipeline = ImportPipeline.from_store(RecordStore(), get_settings(), **overrides)
    except CaseJobsError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    summary = pipeline.run_batch(parse_statement_lines(payload.lines))
    return summary.to_dict()


@app.get("/jobs/{job_id}/transitions/{target}", response_model=TransitionResult)
def check_transition(job_id: int, target: str, column: Optional[str] = None):
    job = RecordStore().find_one("jobs", id=job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    try:
        check = can_transition(job, target, column)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return TransitionResult(job_id=job_id, target=target, ok=check.ok, missing_fields=check.missing_fields)
