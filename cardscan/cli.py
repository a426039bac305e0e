"""Command-line interface for cardscan - trading card metadata extraction."""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.types import ExtractedCardData
from .detect import build_detector
from .reference.index import ReferenceIndex
from .utils.config import settings
from .utils.error_handler import CardScanError
from .utils.log import configure_logging, get_logger
from .utils.validation import validate_file_path, validate_numeric_range, validate_sport

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Rich console
console = Console()

app = typer.Typer(
    name="cardscan",
    help="Trading card scanner - extract player, set, numbering and grading details from card images",
    add_completion=False
)

LEVEL_STYLES = {"high": "green", "medium": "yellow", "low": "red"}

DISPLAY_FIELDS = [
    ("Player", "player"),
    ("Year", "year"),
    ("Brand", "brand"),
    ("Set", "set_name"),
    ("Card #", "card_number"),
    ("Team", "team"),
    ("Category", "category"),
    ("Parallel", "parallel"),
    ("Variation", "variation"),
    ("Serial", "serial_number"),
    ("Print run", "print_run"),
    ("Grading", "grading_company"),
    ("Grade", "grade"),
    ("Condition", "condition"),
    ("Cert #", "cert_number"),
]


def _load_reference() -> ReferenceIndex:
    try:
        return ReferenceIndex.load(settings.REFERENCE_DATA_DIR)
    except CardScanError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(1)


def _known_sports(reference: ReferenceIndex) -> List[str]:
    sports = dict.fromkeys(list(reference.keywords.sports) + reference.manufacturers.sports())
    return list(sports)


def _check_sport(sport: Optional[str], reference: ReferenceIndex) -> Optional[str]:
    if sport is None:
        return None
    try:
        return validate_sport(sport, _known_sports(reference))
    except CardScanError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(2)


def _render(data: ExtractedCardData, title: str):
    """Show extracted fields, feature flags, confidence and validation errors."""
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for label, attr in DISPLAY_FIELDS:
        value = getattr(data, attr)
        if value is not None:
            table.add_row(label, str(value))
    console.print(table)

    flags = [name.replace("is_", "").replace("_", " ") for name, on in vars(data.features).items() if on]
    if flags:
        console.print(f"[bold]Features:[/bold] {', '.join(flags)}")

    if data.confidence:
        style = LEVEL_STYLES.get(data.confidence.level, "white")
        console.print(
            f"[bold]Confidence:[/bold] [{style}]{data.confidence.score} ({data.confidence.level})[/{style}]"
            f" | {data.confidence.detected_fields} fields detected"
        )
        if data.confidence.missing_fields:
            console.print(f"[yellow]⚠ Missing: {', '.join(data.confidence.missing_fields)}[/yellow]")
        for warning in data.confidence.warnings:
            console.print(f"[yellow]⚠ {warning}[/yellow]")

    for error in data.extraction_errors:
        console.print(f"[red]❌ {error}[/red]")


def _emit(data: ExtractedCardData, as_json: bool, title: str):
    if as_json:
        typer.echo(json.dumps(data.to_dict(), ensure_ascii=False, indent=2))
    else:
        _render(data, title)


@app.command()
def detect(
    front: Path = typer.Argument(..., help="Front image (file path)"),
    back: Optional[Path] = typer.Option(None, "--back", "-b", help="Back image (file path)"),
    real_ocr: Optional[bool] = typer.Option(
        None, "--real-ocr/--simulated", help="Use Tesseract (default from USE_REAL_OCR)"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Simulation seed (default from SIMULATION_SEED)"),
    sport: Optional[str] = typer.Option(None, "--sport", "-s", help="Sport hint used when the text is ambiguous"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Extract card metadata from a card image (front, optionally back)."""
    try:
        front_path = validate_file_path(front, must_exist=True)
        back_path = validate_file_path(back, must_exist=True) if back else None
    except CardScanError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(1)

    overrides = {}
    if real_ocr is not None:
        overrides["USE_REAL_OCR"] = real_ocr
    if seed is not None:
        overrides["SIMULATION_SEED"] = seed
    run_settings = settings.model_copy(update=overrides)

    reference = _load_reference()
    sport_hint = _check_sport(sport, reference)
    detector = build_detector(run_settings, reference=reference)

    result = detector.detect_with_timing(str(front_path), str(back_path) if back_path else None, sport_hint)
    if not result.success:
        console.print(f"[red]❌ Detection failed: {result.error}[/red]")
        raise typer.Exit(1)

    _emit(result.data, as_json, f"{front_path.name} ({result.processing_time_ms} ms)")


@app.command()
def parse(
    text_file: Path = typer.Argument(..., help="File holding the recognized front text, one line per region"),
    back_text: Optional[Path] = typer.Option(None, "--back-text", help="File holding the recognized back text"),
    sport: Optional[str] = typer.Option(None, "--sport", "-s", help="Sport hint used when the text is ambiguous"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Extract card metadata from text that was already recognized."""
    try:
        front_text = validate_file_path(text_file, must_exist=True).read_text(encoding="utf-8")
        back = (
            validate_file_path(back_text, must_exist=True).read_text(encoding="utf-8")
            if back_text else None
        )
    except CardScanError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(1)

    reference = _load_reference()
    sport_hint = _check_sport(sport, reference)
    detector = build_detector(reference=reference)
    data = detector.detect_from_text(front_text, back, sport_hint)
    _emit(data, as_json, text_file.name)


@app.command()
def lookup(name: str = typer.Argument(..., help="Player name, nickname, team name or abbreviation")):
    """Look up a player and a team in the reference data."""
    reference = _load_reference()
    player = reference.players.find_player(name)
    team = reference.players.find_team(name)

    if not player and not team:
        console.print(f"[yellow]⚠ No player or team found for '{name}'[/yellow]")
        raise typer.Exit(1)

    if player:
        table = Table(title="Player")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Name", player.name)
        table.add_row("Sport", player.sport)
        table.add_row("Teams", ", ".join(player.teams))
        table.add_row("Years", ", ".join(player.years))
        if player.position:
            table.add_row("Position", player.position)
        if player.rookie_year:
            table.add_row("Rookie year", player.rookie_year)
        if player.nicknames:
            table.add_row("Nicknames", ", ".join(player.nicknames))
        console.print(table)

    if team:
        table = Table(title="Team")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Name", team.full_name)
        table.add_row("Sport", team.sport)
        table.add_row("Abbreviations", ", ".join(team.abbreviations))
        console.print(table)


@app.command()
def licenses(
    sport: str = typer.Argument(..., help="Sport, e.g. Baseball"),
    year: int = typer.Argument(..., help="Card year"),
):
    """Show which manufacturers were licensed for a sport in a given year."""
    reference = _load_reference()
    canonical = _check_sport(sport, reference)
    try:
        validate_numeric_range(year, min_value=1800, max_value=2100, field_name="year")
    except CardScanError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(2)

    registry = reference.manufacturers
    licensed = registry.licenses_for(canonical, year)
    if not licensed:
        console.print(f"[yellow]⚠ No licensed manufacturers for {canonical} in {year}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"{canonical} {year}")
    table.add_column("Manufacturer", style="cyan")
    table.add_column("Exclusive", style="white")
    table.add_column("Major sets", style="white")
    for info, license in licensed:
        table.add_row(info.name, "yes" if license.exclusive else "no", ", ".join(license.major_sets))
    console.print(table)

    dominant = registry.get_dominant_manufacturer(canonical, year)
    if dominant:
        console.print(Panel.fit(f"[bold]Dominant manufacturer:[/bold] {dominant}", border_style="blue"))


if __name__ == "__main__":
    app()
