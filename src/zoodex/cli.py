"""Command-line browser for the animal catalog."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from zoodex.catalog.pipeline import CatalogPipeline, Page
from zoodex.config import get_settings
from zoodex.ingest.loader import DatasetLoadError, load_dataset
from zoodex.ingest.models import ProcessedRecord
from zoodex.labels import category_label, common_names, extinction_color
from zoodex.media.carousel import ESCAPE_KEY, MediaViewer, card_images
from zoodex.processing.records import DatasetValidationError

app = typer.Typer(help="Browse the animal catalog")

NO_RESULTS_MESSAGE = "No animals found. Try a different search or sort!"


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def _build_pipeline(data: Optional[Path], strict: Optional[bool] = None) -> CatalogPipeline:
    settings = get_settings()
    try:
        batch = load_dataset(data, strict=strict)
    except (DatasetLoadError, DatasetValidationError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if batch.issues:
        typer.secho("Dataset issues detected:", fg=typer.colors.YELLOW, err=True)
        for issue in batch.issues:
            typer.secho(f"- {issue}", fg=typer.colors.YELLOW, err=True)
    return CatalogPipeline.from_settings(batch.records, settings.page_size, settings.default_sort)


def _require_record(pipeline: CatalogPipeline, record_id: str) -> ProcessedRecord:
    record = pipeline.find_by_id(record_id)
    if record is None:
        typer.secho(f"No animal with id {record_id}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return record


def _render_page(page: Page, page_numbers: List[int]) -> None:
    if page.is_empty:
        typer.secho(NO_RESULTS_MESSAGE, fg=typer.colors.YELLOW)
        return
    for record in page.items:
        typer.echo(f"[{record.id}] {record.common_name} ({record.scientific_name}) - {record.category or '??'}")
    if page_numbers:
        links = " ".join(f"[{n}]" if n == page.page_number else str(n) for n in page_numbers)
        typer.echo(f"Page {page.page_number} of {page.total_pages}: {links}")


def _render_record(record: ProcessedRecord) -> None:
    typer.secho(f"{record.common_name} ({record.scientific_name})", bold=True)
    typer.echo(f"Id: {record.id}")
    category = record.category
    typer.echo(f"Status: {category or 'N/A'} - {category_label(category)} ({extinction_color(category)})")
    typer.echo(f"Habitat: {record.get('habitat.descricao', 'Not informed')}")
    names = common_names(record)
    if names:
        typer.echo("Common names:")
        for language, name in names.items():
            typer.echo(f"  {language}: {name}")
    if record.risk_scale:
        typer.echo("Risk scale: " + " < ".join(entry.code for entry in record.risk_scale))
    viewer = MediaViewer(record)
    typer.echo(f"Gallery: {len(viewer.gallery)} image(s)")
    for url in viewer.gallery:
        typer.echo(f"  {url}")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    configure_logging(verbose)


@app.command("list")
def list_records(
    search: str = typer.Option("", help="Filter by common or scientific name"),
    sort: Optional[str] = typer.Option(None, help="name-asc, name-desc, risk-asc, risk-desc, codigo-asc, codigo-desc"),
    page: int = typer.Option(1, help="Page to display"),
    data: Optional[Path] = typer.Option(None, help="Dataset file (JSON or CSV)"),
) -> None:
    """List one page of the catalog."""
    pipeline = _build_pipeline(data)
    pipeline.set_search_term(search)
    if sort:
        pipeline.set_sort_key(sort)
    if page != 1 and not pipeline.request_page(page):
        typer.secho(f"Page {page} is out of range; showing page 1.", fg=typer.colors.YELLOW, err=True)
    _render_page(pipeline.current_page(), pipeline.page_numbers())


@app.command()
def show(
    record_id: str = typer.Argument(..., help="Animal id"),
    data: Optional[Path] = typer.Option(None, help="Dataset file (JSON or CSV)"),
) -> None:
    """Show one animal profile."""
    pipeline = _build_pipeline(data)
    _render_record(_require_record(pipeline, record_id))


@app.command()
def random(data: Optional[Path] = typer.Option(None, help="Dataset file (JSON or CSV)")) -> None:
    """Show a random animal profile."""
    pipeline = _build_pipeline(data)
    record = pipeline.random_record()
    if record is None:
        typer.secho(NO_RESULTS_MESSAGE, fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    _render_record(record)


@app.command()
def gallery(
    record_id: str = typer.Argument(..., help="Animal id"),
    start: Optional[str] = typer.Option(None, help="Image URL to open first; defaults to the first gallery image"),
    steps: int = typer.Option(0, min=0, help="How many images to advance"),
    back: bool = typer.Option(False, "--back", help="Walk backwards instead of forwards"),
    data: Optional[Path] = typer.Option(None, help="Dataset file (JSON or CSV)"),
) -> None:
    """Open the image viewer for an animal and walk through it."""
    pipeline = _build_pipeline(data)
    record = _require_record(pipeline, record_id)

    with MediaViewer(record) as viewer:
        clicked = start or (viewer.gallery or card_images(record) or [None])[0]
        state = viewer.open(clicked)
        if not state.is_open:
            typer.secho("This animal has no images.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=1)
        typer.echo(f"{state.index + 1}/{len(state.images)} {state.current}")
        for _ in range(steps):
            state = viewer.previous() if back else viewer.next()
            typer.echo(f"{state.index + 1}/{len(state.images)} {state.current}")
        viewer.events.dispatch(ESCAPE_KEY)
        typer.echo("Viewer closed." if not viewer.state.is_open else "Viewer still open.")


if __name__ == "__main__":  # pragma: no cover
    app()
