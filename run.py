import asyncio
import os
from pathlib import Path
from typing import List, Optional

import typer

from mediorder.commons.bmp_engine import BmpEngine
from mediorder.commons.logger import setup_logging
from mediorder.helpers.pzn_cache import JsonPznCache
from mediorder.helpers.pzn_client import PznWebClient
from mediorder.parsers.constants import section_label
from mediorder.parsers.dosage import format_medication_line
from mediorder.parsers.errors import BmpError
from mediorder.parsers.models import FreeText, Medication, Plan
from mediorder.services.lookup_service import PznLookupService, load_reference_table
from mediorder.services.plan_service import PlanService
from mediorder.validation.validators import validate_pzn_or_raise

app = typer.Typer(add_completion=False, help="Mediorder - BMP medication plan reader")

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="settings.yaml (default: bundled)")


def _bootstrap(config: Optional[Path]):
    engine = BmpEngine(str(config) if config else None)
    logger = setup_logging(engine.settings.paths.logs_root, os.getenv("LOG_LEVEL", "INFO"))
    return engine, logger


def build_lookup(engine: BmpEngine) -> PznLookupService:
    cfg = engine.settings.lookup
    client = None
    if cfg.network.enabled:
        client = PznWebClient(cfg.network.base_url, cfg.network.timeout_sec)
    return PznLookupService(
        JsonPznCache(cfg.cache_file),
        load_reference_table(engine.reference_table_path),
        client,
        pad_width=cfg.pad_width,
    )


def _print_plan(plan: Plan):
    patient = f"{plan.patient.given_name} {plan.patient.family_name}".strip()
    typer.echo(f"Plan {plan.uuid} (UKF {plan.version}, {plan.language})")
    typer.echo(f"Patient: {patient or '-'}  Geburtsdatum: {plan.patient.birth_date or '-'}")
    typer.echo(f"Arzt: {plan.author.name or '-'}")
    if plan.observations.allergies:
        typer.echo(f"Allergien: {plan.observations.allergies}")
    for section in plan.sections:
        typer.echo(f"\n[{section_label(section.code, section.free_title)}]")
        for entry in section.entries:
            if isinstance(entry, Medication):
                pzn = f"  PZN {entry.pzn}" if entry.pzn else ""
                typer.echo(f"  - {format_medication_line(entry) or '?'}{pzn}")
            elif isinstance(entry, FreeText):
                typer.echo(f"  * {entry.text}")
            else:
                typer.echo(f"  Rezept: {entry.text}")


@app.command()
def show(
    files: List[Path] = typer.Argument(..., help="Payload files, one per page"),
    enrich: bool = typer.Option(True, help="Fill missing names from the PZN tables"),
    config: Optional[Path] = CONFIG_OPTION,
):
    """Decode the pages of one plan and print it."""
    engine, logger = _bootstrap(config)
    svc = PlanService(engine, build_lookup(engine) if enrich else None)
    try:
        result = asyncio.run(svc.process_pages([f.read_bytes() for f in files]))
    except BmpError as ex:
        logger.error(f"Could not read plan: {ex}")
        raise typer.Exit(code=1)
    _print_plan(result.plan)


@app.command()
def ingest(
    files: List[Path] = typer.Argument(..., help="Payload files, one per page"),
    config: Optional[Path] = CONFIG_OPTION,
):
    """Process the pages of one plan and archive the result as JSON."""
    engine, logger = _bootstrap(config)
    logger.info(f"Ingesting {len(files)} page(s)")
    svc = PlanService(engine, build_lookup(engine))
    out = asyncio.run(svc.ingest_files(files))
    if out is None:
        raise typer.Exit(code=1)
    typer.echo(str(out))


@app.command()
def watch(config: Optional[Path] = CONFIG_OPTION):
    """Process the inbox backlog, then keep watching for new scans."""
    engine, logger = _bootstrap(config)
    logger.info("Starting inbox watcher")
    svc = PlanService(engine, build_lookup(engine))
    asyncio.run(svc.run_file_mode(engine.settings.inbox.filename_glob))


@app.command()
def lookup(
    pzn: str = typer.Argument(..., help="PZN, with or without leading zeros"),
    config: Optional[Path] = CONFIG_OPTION,
):
    """Resolve one PZN through cache, reference table and (if enabled) the web service."""
    engine, logger = _bootstrap(config)
    try:
        key = validate_pzn_or_raise(pzn, engine.settings.lookup.pad_width)
    except ValueError as ex:
        logger.error(str(ex))
        raise typer.Exit(code=2)
    info = asyncio.run(build_lookup(engine).lookup(key))
    if info is None:
        typer.echo(f"PZN {key}: not found")
        raise typer.Exit(code=1)
    ingredients = ", ".join(f"{a.name} {a.strength or ''}".strip() for a in info.active_ingredients)
    typer.echo(f"PZN {key}: {info.brand_name} ({ingredients}) {info.form_code or ''}".rstrip())


if __name__ == "__main__":
    app()
