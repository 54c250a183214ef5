"""
Main CLI application using Typer.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from pendulum import Date
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.json_repository import JsonFileBookingRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingError
from ..domain.lifecycle import BookingLifecycle
from ..domain.models import Barber, Booking, Service, weekday_name
from ..domain.slot_calculator import SlotCalculator
from ..services.availability import AvailabilityService
from ..services.booking_lifecycle import BookingLifecycleService

app = typer.Typer(
    name="barberbook",
    help="Check barber availability and manage bookings",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")]

STATUS_STYLES = {
    "pending": "yellow",
    "confirmed": "green",
    "completed": "cyan",
    "cancelled": "red",
}


@dataclass
class _Context:
    config: AppConfig
    repository: JsonFileBookingRepository
    availability: AvailabilityService
    bookings: BookingLifecycleService


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_context(config_file: Optional[Path], verbose: bool = False) -> _Context:
    """Load configuration and wire repository, calculator and services together."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    _configure_logging(config.log_level, verbose)

    tz = config.business.timezone
    rules = config.booking
    repository = JsonFileBookingRepository(config.data_file)

    availability = AvailabilityService(
        repository=repository,
        slot_calculator=SlotCalculator(
            slot_granularity_minutes=rules.slot_granularity_minutes,
            min_advance_booking_hours=rules.min_advance_booking_hours,
        ),
        schedule=config.business.weekly_schedule(),
        timezone=tz,
        max_advance_booking_days=rules.max_advance_booking_days,
    )
    bookings = BookingLifecycleService(
        repository=repository,
        lifecycle=BookingLifecycle(cancellation_window_hours=rules.cancellation_window_hours),
        timezone=tz,
        min_advance_booking_hours=rules.min_advance_booking_hours,
    )
    return _Context(config=config, repository=repository, availability=availability, bookings=bookings)


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(1)


def _resolve_barber(ctx: _Context, identifier: str) -> Barber:
    barber = ctx.config.business.find_barber(identifier)
    if barber is None or not barber.is_active:
        _fail(f"Unknown barber: '{identifier}'. Use an id or a configured name.")
    return barber.to_domain()


def _resolve_service(ctx: _Context, identifier: str) -> Service:
    service = ctx.config.business.find_service(identifier)
    if service is None or not service.is_active:
        _fail(f"Unknown service: '{identifier}'. Use an id or a configured name.")
    return service.to_domain()


def _parse_day(value: Optional[str], tz: str) -> Date:
    if not value:
        return pendulum.now(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        _fail(f"Could not parse date '{value}': {e}")


def _bookings_table(title: str, bookings: list[Booking], tz: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("When", style="bold")
    table.add_column("Barber")
    table.add_column("Service")
    table.add_column("Customer")
    table.add_column("Status")

    for booking in bookings:
        local = booking.date_time.in_timezone(tz)
        style = STATUS_STYLES.get(booking.status.value, "white")
        table.add_row(
            booking.id or "-",
            f"{local.format('YYYY-MM-DD HH:mm')} ({booking.duration_minutes} min)",
            booking.barber_id,
            booking.service_id,
            booking.customer_id,
            f"[{style}]{booking.status.value}[/{style}]",
        )
    return table


@app.command()
def slots(
    barber: Annotated[str, typer.Argument(help="Barber id or name")],
    service: Annotated[str, typer.Argument(help="Service id or name")],
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD), defaults to today")] = None,
    only_free: Annotated[bool, typer.Option("--free", help="Hide slots that cannot be booked.")] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the slot grid of a barber for one day.

    Examples:

        barberbook slots anna haircut --date 2024-11-25
        barberbook slots anna haircut --free
    """
    try:
        ctx = _build_context(config_file, verbose)
        tz = ctx.config.business.timezone
        selected_barber = _resolve_barber(ctx, barber)
        selected_service = _resolve_service(ctx, service)
        target = _parse_day(day, tz)

        grid = asyncio.run(
            ctx.availability.get_slots(
                barber_id=selected_barber.id,
                day=target,
                service_duration_minutes=selected_service.duration_minutes,
            )
        )

        console.print(
            f"\n[bold cyan]{selected_barber.name}[/bold cyan] - {selected_service.name} "
            f"({selected_service.duration_minutes} min) on {weekday_name(target).capitalize()}, "
            f"{target.format('YYYY-MM-DD')}\n"
        )

        if not grid:
            console.print("[yellow]⚠ Closed on this day.[/yellow]\n")
            return

        shown = [slot for slot in grid if slot.available] if only_free else grid
        if not shown:
            console.print("[yellow]⚠ No free slots left on this day.[/yellow]\n")
            return

        for slot in shown:
            marker = "[green]✓[/green]" if slot.available else "[dim]✗[/dim]"
            console.print(f"  {marker} {slot.format_display()}")
        console.print()

    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def dates(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the dates customers can currently book, with opening hours.
    """
    try:
        ctx = _build_context(config_file, verbose)

        table = Table(title="Bookable dates", show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold")
        table.add_column("Day")
        table.add_column("Hours")

        for day in ctx.availability.available_dates():
            hours = ctx.availability.working_hours_for(day)
            opening = f"{hours.start} - {hours.end}" if hours.is_open else "[dim]closed[/dim]"
            table.add_row(day.format("YYYY-MM-DD"), weekday_name(day).capitalize(), opening)

        console.print()
        console.print(table)
        console.print()

    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def book(
    barber: Annotated[str, typer.Argument(help="Barber id or name")],
    service: Annotated[str, typer.Argument(help="Service id or name")],
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Slot start (HH:MM)")],
    customer: Annotated[str, typer.Option("--customer", "-u", help="Customer id")],
    notes: Annotated[Optional[str], typer.Option("--notes", help="Note for the barber")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Book a slot. The slot must be free according to the current slot grid.
    """
    try:
        ctx = _build_context(config_file, verbose)
        tz = ctx.config.business.timezone
        selected_barber = _resolve_barber(ctx, barber)
        selected_service = _resolve_service(ctx, service)
        target = _parse_day(day, tz)

        free = asyncio.run(
            ctx.availability.get_available_slots(
                barber_id=selected_barber.id,
                day=target,
                service_duration_minutes=selected_service.duration_minutes,
            )
        )
        chosen = next((slot for slot in free if slot.time == time), None)
        if chosen is None:
            _fail(f"{time} on {target.format('YYYY-MM-DD')} is not an available slot.")

        booking = asyncio.run(
            ctx.bookings.create_booking(
                business_id=ctx.config.business.id,
                barber_id=selected_barber.id,
                customer_id=customer,
                service_id=selected_service.id,
                date_time=chosen.time_range.start,
                duration_minutes=selected_service.duration_minutes,
                notes=notes,
            )
        )
        console.print(
            f"\n[bold green]✓ Booked[/bold green] {selected_service.name} with {selected_barber.name} "
            f"on {target.format('YYYY-MM-DD')} at {chosen.time}"
        )
        console.print(f"  Booking id: [bold]{booking.id}[/bold] (pending)\n")

    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _transition(action: str, booking_id: str, config_file: Optional[Path], verbose: bool) -> None:
    try:
        ctx = _build_context(config_file, verbose)
        handler = {
            "confirm": ctx.bookings.confirm_booking,
            "complete": ctx.bookings.complete_booking,
            "cancel": ctx.bookings.cancel_booking,
        }[action]
        booking = asyncio.run(handler(booking_id))
        console.print(f"\n[green]✓ Booking {booking.id} is now {booking.status.value}.[/green]\n")

    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def confirm(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Confirm a pending booking.
    """
    _transition("confirm", booking_id, config_file, verbose)


@app.command()
def complete(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Mark a confirmed booking as completed.
    """
    _transition("complete", booking_id, config_file, verbose)


@app.command()
def cancel(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Cancel a pending or confirmed booking before the cancellation window.
    """
    _transition("cancel", booking_id, config_file, verbose)


@app.command()
def bookings(
    customer: Annotated[str, typer.Argument(help="Customer id")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show a customer's upcoming and past bookings.
    """
    try:
        ctx = _build_context(config_file, verbose)
        tz = ctx.config.business.timezone
        upcoming, past = asyncio.run(ctx.bookings.customer_bookings(customer))

        console.print()
        if not upcoming and not past:
            console.print(f"[yellow]No bookings for {customer}.[/yellow]\n")
            return

        console.print(_bookings_table("Upcoming", upcoming, tz))
        console.print(_bookings_table("Past", past, tz))
        console.print()

    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def overview(
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD), defaults to today")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Owner dashboard: the day's bookings with pending and confirmed counts.
    """
    try:
        ctx = _build_context(config_file, verbose)
        tz = ctx.config.business.timezone
        target = _parse_day(day, tz)
        summary = asyncio.run(ctx.bookings.business_overview(ctx.config.business.id, target))

        console.print(
            f"\n[bold cyan]{ctx.config.business.name}[/bold cyan] - {target.format('YYYY-MM-DD')}: "
            f"{len(summary.bookings)} bookings, "
            f"[yellow]{len(summary.pending)} pending[/yellow], "
            f"[green]{len(summary.confirmed)} confirmed[/green]\n"
        )
        if summary.bookings:
            console.print(_bookings_table("Today", summary.bookings, tz))
            console.print()

    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def services(
    config_file: ConfigOption = None,
):
    """
    List all configured services.
    """
    try:
        config = AppConfig.load_from_yaml(config_file or get_default_config_path())

        if not config.business.services:
            console.print("[yellow]No services defined in the config file.[/yellow]")
            return

        table = Table(title="Services", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("Duration", justify="right")
        table.add_column("Price", justify="right")

        for service in config.business.services:
            if service.is_active:
                table.add_row(service.id, service.name, f"{service.duration_minutes} min", f"{service.price:.2f}")

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def barbers(
    config_file: ConfigOption = None,
):
    """
    List all configured barbers.
    """
    try:
        config = AppConfig.load_from_yaml(config_file or get_default_config_path())

        if not config.business.barbers:
            console.print("[yellow]No barbers defined in the config file.[/yellow]")
            return

        table = Table(title="Barbers", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("Specialties")

        for barber in config.business.barbers:
            if barber.is_active:
                table.add_row(barber.id, barber.name, ", ".join(barber.specialties))

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]barberbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
