from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from . import init_db
from .amounts import decompose
from .config import RESOLUTION_STRATEGIES, get_settings
from .courts import import_courts, read_court_list, write_court_list
from .db import RecordStore
from .errors import CaseJobsError
from .jobs import apply_transition
from .models import ImportRunSummary, STATUS_COMPLETED
from .parsing import DescriptionParser
from .processing import ImportPipeline
from .samples import write_sample_statement
from .sources import read_job_table, read_statement
from .utils import find_similar

app = typer.Typer(help="Court delivery job tracking CLI")


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    _configure_logging(verbose)


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


def _print_summary(summary: ImportRunSummary, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
        return
    for line in summary.format():
        typer.echo(line)


@app.command()
def init(db_url: Optional[str] = typer.Option(None, help="Override database URL")) -> None:
    """Initialise the database."""
    if db_url:
        settings = get_settings()
        settings.db_url = db_url
    init_db()
    typer.echo("Database initialised.")


@app.command("add-court")
def add_court(
    name: str = typer.Argument(..., help="Court display name"),
    city: Optional[str] = typer.Option(None, help="City, defaults to the configured city"),
    district: Optional[str] = typer.Option(None),
    court_type: Optional[str] = typer.Option(None, "--type", help="Court type"),
) -> None:
    """Register a court, warning about similar existing names."""
    init_db()
    store = RecordStore()
    existing = [row["name"] for row in store.all("courts")]
    if name in existing:
        raise typer.BadParameter(f"Court {name!r} already exists")
    settings = get_settings()
    for match in find_similar(name, existing, thresholds=settings.similarity_tiers):
        typer.echo(f"Warning: similar court {match.value!r} ({match.score}, {match.tier})")
    record = {"name": name, "city": city or settings.default_city, "district": district, "type": court_type}
    try:
        court_id = store.insert("courts", record)
    except CaseJobsError as exc:
        _fail(exc)
    typer.echo(f"Court {court_id} added: {name}")


@app.command("add-vehicle")
def add_vehicle(
    plate: str = typer.Argument(...),
    brand: str = typer.Option(..., help="Vehicle brand"),
    model: str = typer.Option(..., help="Vehicle model"),
    year: int = typer.Option(..., help="Model year"),
    vehicle_type: str = typer.Option("Otomobil", "--type", help="Vehicle type"),
) -> None:
    """Register a vehicle."""
    init_db()
    store = RecordStore()
    plates = [row["plate"] for row in store.all("vehicles")]
    settings = get_settings()
    for match in find_similar(plate, plates, thresholds=settings.similarity_tiers):
        typer.echo(f"Warning: similar plate {match.value!r} ({match.score}, {match.tier})")
    try:
        vehicle_id = store.insert(
            "vehicles",
            {"plate": plate, "brand": brand, "model": model, "year": year, "type": vehicle_type},
        )
    except CaseJobsError as exc:
        _fail(exc)
    typer.echo(f"Vehicle {vehicle_id} added: {plate}")


@app.command("import-courts")
def import_courts_command(path: Path = typer.Argument(..., help="Numbered court list")) -> None:
    """Add courts from a numbered list, skipping names already registered."""
    init_db()
    settings = get_settings()
    try:
        names = read_court_list(path)
    except CaseJobsError as exc:
        _fail(exc)
    result = import_courts(RecordStore(), names, settings.default_city, settings.districts)
    typer.echo(f"Added: {len(result.created)}")
    typer.echo(f"Already registered: {len(result.existing)}")
    typer.echo(f"Failed: {len(result.failed)}")


@app.command("extract-courts")
def extract_courts(
    statement: Path = typer.Argument(..., help="Bank statement (.xlsx, .csv, .txt)"),
    out: Optional[Path] = typer.Option(None, help="Where to write the numbered list"),
) -> None:
    """Collect the distinct court names mentioned in a statement."""
    settings = get_settings()
    try:
        batch = read_statement(statement, settings.header_rows)
    except CaseJobsError as exc:
        _fail(exc)
    parser = DescriptionParser(settings.city_prefixes, strict=False)
    names = set()
    failed = 0
    for payment in batch.payments:
        candidate = parser.parse(payment.description)
        if candidate is None:
            failed += 1
            continue
        names.add(candidate.court_name)
    target = out or settings.export_dir / "courts.md"
    write_court_list(target, names)
    typer.echo(f"{len(names)} courts written to {target}")
    if failed:
        typer.echo(f"{failed} descriptions could not be parsed")


@app.command("import-statement")
def import_statement(
    statement: Path = typer.Argument(..., help="Bank statement (.xlsx, .csv, .txt)"),
    auto_create_courts: Optional[bool] = typer.Option(
        None, "--auto-create-courts/--no-auto-create-courts", help="Create missing courts"
    ),
    strategy: Optional[str] = typer.Option(None, help="first-contains or best-similarity"),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
) -> None:
    """Create completed jobs from the court payments in a bank statement."""
    if strategy is not None and strategy not in RESOLUTION_STRATEGIES:
        raise typer.BadParameter(f"strategy must be one of {', '.join(RESOLUTION_STRATEGIES)}")
    init_db()
    settings = get_settings()
    overrides = {}
    if strategy is not None:
        overrides["resolution_strategy"] = strategy
    if auto_create_courts is not None:
        overrides["auto_create_courts"] = auto_create_courts
    try:
        batch = read_statement(statement, settings.header_rows)
        pipeline = ImportPipeline.from_store(RecordStore(), settings, **overrides)
    except CaseJobsError as exc:
        _fail(exc)
    _print_summary(pipeline.run_batch(batch), as_json)


@app.command("import-jobs-table")
def import_jobs_table(
    path: Path = typer.Argument(..., help="Markdown table: | date | court | file | amount |"),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
) -> None:
    """Create completed jobs from a markdown table with real dates."""
    init_db()
    try:
        batch = read_job_table(path)
        pipeline = ImportPipeline.from_store(RecordStore(), get_settings())
    except CaseJobsError as exc:
        _fail(exc)
    _print_summary(pipeline.run_batch(batch), as_json)


@app.command()
def similar(
    name: str = typer.Argument(...),
    kind: str = typer.Option("court", help="court or vehicle"),
    limit: int = typer.Option(5, help="Maximum number of suggestions"),
) -> None:
    """List registered names that look like NAME."""
    if kind not in {"court", "vehicle"}:
        raise typer.BadParameter("kind must be 'court' or 'vehicle'")
    init_db()
    store = RecordStore()
    if kind == "court":
        candidates = [row["name"] for row in store.all("courts")]
    else:
        candidates = [row["plate"] for row in store.all("vehicles")]
    matches = find_similar(name, candidates, limit=limit, thresholds=get_settings().similarity_tiers)
    if not matches:
        typer.echo("No similar records.")
        return
    for match in matches:
        typer.echo(f"{match.score:3d}  {match.tier:<8}  {match.value}")


@app.command("complete-job")
def complete_job(
    job_id: int = typer.Argument(...),
    vehicle_id: Optional[int] = typer.Option(None, help="Vehicle that served the job"),
    completion_date: Optional[str] = typer.Option(None, help="YYYY-MM-DD"),
    total_amount: Optional[float] = typer.Option(None, help="VAT-inclusive total"),
) -> None:
    """Mark a job as completed once its required fields are filled."""
    init_db()
    fields = {
        name: value
        for name, value in {
            "vehicle_id": vehicle_id,
            "completion_date": completion_date,
            "total_amount": total_amount,
        }.items()
        if value is not None
    }
    if total_amount is not None:
        amounts = decompose(total_amount, get_settings().vat_rate)
        fields.update(
            total_amount=float(amounts.total),
            base_amount=float(amounts.base),
            vat_amount=float(amounts.vat),
            vat_rate=amounts.rate,
        )
    try:
        job = apply_transition(RecordStore(), job_id, STATUS_COMPLETED, "status", **fields)
    except CaseJobsError as exc:
        _fail(exc)
    typer.echo(f"Job {job.id} {job.file_number} is now {job.status}.")


@app.command()
def stats() -> None:
    """Show record counts."""
    init_db()
    store = RecordStore()
    for table in ("courts", "vehicles", "jobs"):
        typer.echo(f"{table}: {store.count(table)}")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", help="Confirm deletion"),
    tables: List[str] = typer.Option(["jobs"], "--table", help="Tables to clear"),
) -> None:
    """Delete all rows from the given tables (jobs by default)."""
    if not yes:
        raise typer.BadParameter("Pass --yes to delete data.")
    init_db()
    store = RecordStore()
    # jobs reference courts and vehicles
    order = [name for name in ("jobs", "courts", "vehicles") if name in tables]
    unknown = sorted(set(tables) - set(order))
    if unknown:
        raise typer.BadParameter(f"Unknown tables: {', '.join(unknown)}")
    for table in order:
        try:
            deleted = store.delete_all(table)
        except CaseJobsError as exc:
            _fail(exc)
        typer.echo(f"{table}: {deleted} rows deleted")


@app.command("sample-statement")
def sample_statement(out: Path = typer.Argument(..., help="Target .xlsx path")) -> None:
    """Write a sample bank statement workbook."""
    path = write_sample_statement(out)
    typer.echo(f"Sample statement written to {path}")


if __name__ == "__main__":
    app()
