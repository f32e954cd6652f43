"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.crm_client import CRMClient
from ..adapters.mock_crm_client import MockCRMClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import AllocationError, CabinetSlotsError
from ..domain.models import AvailabilityResult
from ..services.clinic_scheduler import ClinicSchedulerService

app = typer.Typer(
    name="cabinetslots",
    help="Find free appointment times and book visits in a two-cabinet clinic",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use bundled mock CRM data instead of the real API."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show informational log messages.")] = False,
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    """
    Load the YAML config. In mock mode a missing file means defaults.
    """
    config_path = config_file or get_default_config_path()
    if mock and not config_path.exists():
        return AppConfig()

    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_client(config: AppConfig, mock: bool, announce: bool = True):
    if mock:
        if announce:
            err_console.print("[yellow]⚠  MOCK MODE: using bundled test data[/yellow]\n", highlight=False)
        return MockCRMClient()

    token = config.crm.resolved_token()
    if not token:
        console.print("[bold red]Error:[/bold red] No CRM token configured (crm.api_token or CRM_API_TOKEN).")
        raise typer.Exit(1)

    return CRMClient(
        base_url=config.crm.base_url,
        api_token=token,
        timeout=config.crm.timeout_seconds,
    )


def _build_service(config_file: Optional[Path], mock: bool, announce: bool) -> ClinicSchedulerService:
    config = _load_config(config_file, mock)
    client = _build_client(config, mock, announce)
    return ClinicSchedulerService(crm_client=client, layout=config.clinic.to_layout())


def _render_availability(result: AvailabilityResult) -> None:
    if not result.available_slots:
        console.print(f"[yellow]⚠ No free appointment times on {result.date}.[/yellow]")
        return

    console.print(f"[bold green]✓ {result.total_slots} free time(s) on {result.date}:[/bold green]\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Time", style="bold yellow")
    table.add_column("Cabinet / Doctor")

    for slot in result.available_slots:
        pairs = result.free_pairs.get(slot, [])
        table.add_row(
            slot,
            ", ".join(f"{pair.room_id}/{pair.provider_id}" for pair in pairs) or "[dim]no doctor free[/dim]",
        )

    console.print(table)

    for label, intervals in result.intervals.items():
        spans = ", ".join(str(interval) for interval in intervals) or "closed"
        console.print(f"[dim]{label} open: {spans}[/dim]")


@app.command()
def available(
    date: Annotated[str, typer.Argument(help="Date to check (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw availability result as JSON.")] = False,
):
    """
    Show free appointment times and cabinet/doctor pairs for a date.

    Examples:

        cabinetslots available 2025-10-17

        cabinetslots available 2025-10-17 --mock --json
    """
    service = _build_service(config_file, mock, announce=not as_json)

    try:
        result = service.get_available_times(date)
    except CabinetSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    _render_availability(result)


@app.command()
def book(
    first_name: Annotated[str, typer.Option("--first-name", help="Patient first name")],
    last_name: Annotated[str, typer.Option("--last-name", help="Patient last name")],
    phone: Annotated[str, typer.Option("--phone", help="Patient phone number")],
    date: Annotated[str, typer.Option("--date", help="Appointment date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Option("--time", help="Appointment start (HH:MM)")],
    email: Annotated[Optional[str], typer.Option("--email")] = None,
    gender: Annotated[Optional[str], typer.Option("--gender")] = None,
    address: Annotated[Optional[str], typer.Option("--address")] = None,
    note: Annotated[Optional[str], typer.Option("--note")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the booking result as JSON.")] = False,
):
    """
    Create a patient and book the first free cabinet/doctor pair.
    """
    service = _build_service(config_file, mock, announce=not as_json)

    try:
        booking = service.book_appointment({
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
            "appointment_date": date,
            "appointment_time": time,
            "email": email,
            "gender": gender,
            "address": address,
            "note": note,
        })
    except AllocationError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        if e.patient_id:
            console.print(f"[yellow]Patient {e.patient_id} was created but has no visit.[/yellow]")
        raise typer.Exit(2)
    except CabinetSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(booking.to_dict(), indent=2))
        return

    allocation = booking.allocation
    console.print(Panel.fit(
        f"[bold green]✓ Appointment booked![/bold green]\n\n"
        f"[bold]Date:[/bold] {booking.appointment_date} "
        f"{allocation.appointment_time} - {allocation.end_time}\n"
        f"[bold]Cabinet:[/bold] {allocation.pair.room_id}\n"
        f"[bold]Doctor:[/bold] {allocation.pair.provider_id}\n"
        f"[bold]Patient:[/bold] {booking.patient_id}\n"
        f"[bold]Visit:[/bold] {booking.visit_id or 'N/A'}",
        title="✓ Booking"
    ))


def _print_listing(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command()
def cabinets(config_file: ConfigOption = None, mock: MockOption = False):
    """
    List cabinets known to the CRM.
    """
    client = _build_client(_load_config(config_file, mock), mock, announce=False)
    try:
        _print_listing(client.get_cabinets())
    except CabinetSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def staff(config_file: ConfigOption = None, mock: MockOption = False):
    """
    List staff (doctors) known to the CRM.
    """
    client = _build_client(_load_config(config_file, mock), mock, announce=False)
    try:
        _print_listing(client.get_staff())
    except CabinetSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def test_connection(config_file: ConfigOption = None, mock: MockOption = False):
    """
    Test the CRM connection and token.
    """
    config = _load_config(config_file, mock)
    client = _build_client(config, mock)

    console.print("\n[bold]Testing CRM connection...[/bold]\n")
    try:
        client.test_connection()
    except CabinetSlotsError as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}\n")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]✓ Connected![/bold green]\n\n"
        f"[bold]CRM:[/bold] {'mock' if mock else config.crm.base_url}",
        title="✓ Connection test"
    ))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]cabinetslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
