"""
baoclone CLI

Read, write and inspect the memory of Baofeng UV-5R, UV-B5 and BF-888S
radios over the clone cable.
"""

import sys
import logging
from pathlib import Path
from typing import Optional

import serial.tools.list_ports
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.logging import RichHandler
from rich.progress import Progress, BarColumn, TextColumn

from baoclone.codec.records import ChannelRecord
from baoclone.core import actions
from baoclone.core.results import CloneResult
from baoclone.errors import RadioError
from baoclone.models import (
    list_models as registry_list_models,
    get_model as registry_get_model,
    get_capabilities as registry_get_capabilities,
)
from baoclone.protocol import open_link
from baoclone.session import RadioSession

CONFIRMATION_TOKEN = "WRITE"

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = logging.getLogger("baoclone")

# Setup Rich console
console = Console()

app = typer.Typer(help="Baofeng clone utility - read, write and inspect radio memory")


def print_header(text: str) -> None:
    """Print fancy header."""
    console.print(Panel(text, expand=False, style="bold blue"))


def print_success(text: str) -> None:
    """Print success message."""
    console.print(f"✓ {text}", style="green")


def print_warning(text: str) -> None:
    """Print warning message."""
    console.print(f"⚠️  {text}", style="yellow")


def print_error(text: str) -> None:
    """Print error message."""
    console.print(f"❌ {text}", style="red")


def print_result_failure(result: CloneResult) -> None:
    """Print the diagnostic of a failed result and exit with status 1."""
    print_error(result.diagnostic or result.summary())
    raise typer.Exit(1)


def _mhz(hz: int) -> str:
    return f"{hz / 1_000_000:.4f}"


def _flag(value: Optional[bool]) -> str:
    if value is None:
        return ""
    return "+" if value else "-"


def _transmit(record: ChannelRecord) -> str:
    if record.tx_offset_hz is not None:
        return f"{record.tx_offset_hz / 1_000_000:+.4f}"
    if not record.tx_hz:
        return "off"
    return _mhz(record.tx_hz)


def render_channels(session: RadioSession) -> Table:
    """Build the channel table for a session."""
    model = session.model
    has_names = model.has_names
    has_offset = model.tx_as_offset

    table = Table(title=f"{model.name} Channels")
    table.add_column("Chan", justify="right", style="cyan")
    if has_names:
        table.add_column("Name", style="magenta")
    table.add_column("Receive", justify="right", style="green")
    table.add_column("TxOffset" if has_offset else "Transmit", justify="right")
    table.add_column("R-Squel", justify="right")
    table.add_column("T-Squel", justify="right")
    table.add_column("Power")
    table.add_column("FM")
    table.add_column("Scan")
    table.add_column("BCL")
    table.add_column("Extra")

    for slot, record in session.channels():
        row = [str(model.channel_label(slot))]
        if has_names:
            row.append(record.name or "")
        extra = []
        if record.pttid is not None and record.pttid.value:
            extra.append(f"PTTID {record.pttid}")
        if record.scramble:
            extra.append("Scramble")
        if record.compander:
            extra.append("Compander")
        if record.reverse:
            extra.append("Reverse")
        row += [
            _mhz(record.rx_hz),
            _transmit(record),
            str(record.rx_squelch),
            str(record.tx_squelch),
            record.power.value if record.power else "",
            record.bandwidth.value if record.bandwidth else "",
            _flag(record.scan),
            _flag(record.bcl),
            ", ".join(extra),
        ]
        table.add_row(*row)
    return table


def render_vfos(session: RadioSession) -> Optional[Table]:
    if not session.model.vfo_slots:
        return None
    table = Table(title="VFO")
    table.add_column("VFO", style="cyan")
    table.add_column("Receive", justify="right", style="green")
    table.add_column("TxOffset", justify="right")
    table.add_column("R-Squel", justify="right")
    table.add_column("T-Squel", justify="right")
    table.add_column("Power")
    table.add_column("FM")
    for label, record in session.vfos():
        if not record.enabled:
            table.add_row(label, "-", "", "", "", "", "")
            continue
        table.add_row(
            label,
            _mhz(record.rx_hz),
            _transmit(record),
            str(record.rx_squelch),
            str(record.tx_squelch),
            record.power.value if record.power else "",
            record.bandwidth.value if record.bandwidth else "",
        )
    return table


def _edge(hz: Optional[int]) -> str:
    return "-" if hz is None else f"{hz / 1_000_000:.1f}"


def render_limits(session: RadioSession) -> Optional[Table]:
    if not session.model.bands:
        return None
    table = Table(title="Band Limits")
    table.add_column("Band", style="cyan")
    table.add_column("Lower", justify="right", style="green")
    table.add_column("Upper", justify="right", style="green")
    table.add_column("Enabled")
    for band in session.model.bands:
        limits = session.limits(band)
        enabled = "" if limits.enabled is None else ("Yes" if limits.enabled else "No")
        table.add_row(
            band.value,
            _edge(limits.lower_hz),
            _edge(limits.upper_hz),
            enabled,
        )
    return table


def render_settings(session: RadioSession) -> Table:
    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for value in session.settings():
        style = None if value.known else "red"
        table.add_row(value.label, value.display, style=style)
    return table


def render_info(session: RadioSession) -> Table:
    table = Table(title="Radio Information")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Model", session.model.name)
    table.add_row("Identifier", session.ident.hex().upper())
    for name, value in session.device_info().items():
        table.add_row(name, value)
    return table


def _progress(description: str):
    """Return (Progress, callback) for a block transfer."""
    progress = Progress(
        TextColumn("[{task.description}]"),
        BarColumn(),
        TextColumn("[{task.percentage:.0f}%]"),
        console=console,
    )
    task = progress.add_task(description, total=None)

    def callback(done: int, total: int) -> None:
        progress.update(task, completed=done, total=total)

    return progress, callback


def confirm_write(write_flag: bool, model: str, image: str, confirm_token: Optional[str]) -> None:
    """
    Require explicit --write flag AND a typed confirmation before uploading.

    Raises:
        typer.Exit: If the write is not permitted
    """
    if not write_flag:
        print_error("Refusing to write without --write")
        raise typer.Exit(1)

    if confirm_token is not None:
        if confirm_token != CONFIRMATION_TOKEN:
            print_error(f"Confirmation token mismatch. Expected: --confirm {CONFIRMATION_TOKEN}")
            raise typer.Exit(1)
        return

    if not sys.stdin.isatty():
        print_error("Non-interactive environment detected but no confirmation token provided.")
        console.print(f"  Use --write --confirm {CONFIRMATION_TOKEN}")
        raise typer.Exit(1)

    console.print(f"About to overwrite the memory of the radio with [cyan]{image}[/cyan]"
                  + (f" ({model})" if model else ""))
    typed = typer.prompt(f"Type {CONFIRMATION_TOKEN} to continue")
    if typed.strip() != CONFIRMATION_TOKEN:
        print_warning("Upload cancelled")
        raise typer.Exit(1)


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show wire traffic"),
) -> None:
    """Baofeng clone utility."""
    if verbose:
        logger.setLevel(logging.DEBUG)


@app.command()
def ports() -> None:
    """List available serial ports."""
    print_header("Available Serial Ports")

    ports_list = list(serial.tools.list_ports.comports())
    if not ports_list:
        print_warning("No serial ports found")
        return

    table = Table(title="Serial Ports")
    table.add_column("Port", style="cyan")
    table.add_column("Device", style="magenta")
    table.add_column("Description", style="green")
    for port in ports_list:
        table.add_row(port.device, port.name or "-", port.description or "-")
    console.print(table)


@app.command("list-models")
def list_models() -> None:
    """List supported radio models and their configurations."""
    print_header("Supported Radio Models")

    table = Table(title="Models (probe order)")
    table.add_column("Model", style="cyan")
    table.add_column("Magic", style="yellow")
    table.add_column("Memory", style="green", justify="right")
    table.add_column("Image", style="green", justify="right")
    table.add_column("Channels", justify="right")
    table.add_column("Notes", style="magenta")

    for name in registry_list_models():
        cfg = registry_get_model(name)
        table.add_row(
            cfg.name,
            cfg.magic_bytes.hex().upper(),
            f"0x{cfg.mem_size:04X}",
            f"{cfg.image_size} bytes",
            str(len(cfg.channel_slots)),
            "; ".join(cfg.notes),
        )
    console.print(table)


@app.command("show-model")
def show_model(
    model: str = typer.Argument(..., help="Model name (e.g., UV-5R)"),
) -> None:
    """Show the capabilities of one model."""
    cfg = registry_get_model(model)
    if cfg is None:
        print_error(f"Unknown model: {model}")
        console.print("Use [cyan]list-models[/cyan] to see known models.")
        raise typer.Exit(1)

    print_header(f"{cfg.vendor} {cfg.name}")
    table = Table(title="Capabilities")
    table.add_column("Capability", style="cyan")
    table.add_column("Supported")
    table.add_column("Details", style="green")
    table.add_column("Safety", style="yellow")
    for cap in registry_get_capabilities(cfg.name):
        table.add_row(
            cap.capability.name,
            "Yes" if cap.supported else "No",
            cap.reason,
            cap.safety.value,
        )
    console.print(table)


@app.command()
def detect(
    port: str = typer.Argument(..., help="Serial port (e.g., /dev/ttyUSB0)"),
    baud: int = typer.Option(9600, "--baud", help="Baud rate"),
) -> None:
    """Identify the radio attached to a port."""
    print_header("Detect Radio")
    result = actions.detect(port, baud=baud, link_factory=open_link)
    if not result.ok:
        print_result_failure(result)

    table = Table(title="Radio Information")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Model", result.model)
    table.add_row("Identifier", result.ident.hex().upper())
    table.add_row("Attempts", str(result.attempts))
    console.print(table)


@app.command()
def dump(
    port: str = typer.Argument(..., help="Serial port (e.g., /dev/ttyUSB0)"),
    image: str = typer.Argument(..., help="Image file to write"),
    baud: int = typer.Option(9600, "--baud", help="Baud rate"),
) -> None:
    """Download radio memory and save it to an image file."""
    print_header("Download Clone from Radio")
    console.print(f"Port: {port}")

    progress, callback = _progress("Downloading clone...")
    with progress:
        result = actions.dump(port, image, baud=baud, progress_cb=callback,
                              link_factory=open_link)
    if not result.ok:
        print_result_failure(result)

    console.print(render_info(result.session))
    print_success(result.summary())


@app.command()
def restore(
    port: str = typer.Argument(..., help="Serial port (e.g., /dev/ttyUSB0)"),
    image: str = typer.Argument(..., help="Image file to upload"),
    model: Optional[str] = typer.Option(None, "--model", help="Override image model"),
    baud: int = typer.Option(9600, "--baud", help="Baud rate"),
    write: bool = typer.Option(
        False,
        "--write",
        help="Required flag to enable actual write to radio",
    ),
    confirm: Optional[str] = typer.Option(
        None,
        "--confirm",
        help=f"Non-interactive confirmation token ({CONFIRMATION_TOKEN})",
    ),
) -> None:
    """Upload an image file to the radio."""
    print_header("Upload Clone to Radio")

    if not Path(image).is_file():
        print_error(f"File not found: {image}")
        raise typer.Exit(1)

    confirm_write(write, model or "", image, confirm)

    progress, callback = _progress("Uploading clone...")
    with progress:
        result = actions.restore(port, image, model_name=model, baud=baud,
                                 progress_cb=callback, link_factory=open_link)
    if not result.ok:
        print_result_failure(result)

    for warning in result.warnings:
        print_warning(warning)
    print_success(result.summary())


@app.command()
def show(
    target: str = typer.Argument(..., help="Image file or serial port"),
    model: Optional[str] = typer.Option(None, "--model", help="Override image model"),
    baud: int = typer.Option(9600, "--baud", help="Baud rate"),
) -> None:
    """Print channels, limits and settings of an image file or a radio."""
    try:
        session = actions.open_session(target, model_name=model, baud=baud,
                                       link_factory=open_link)
        console.print(render_info(session))
        console.print(render_channels(session))
        for table in (render_vfos(session), render_limits(session)):
            if table is not None:
                console.print(table)
        console.print(render_settings(session))
    except RadioError as e:
        print_error(e.diagnostic())
        raise typer.Exit(1)


@app.command()
def configure(
    port: str = typer.Argument(..., help="Serial port (e.g., /dev/ttyUSB0)"),
    config_file: str = typer.Argument(..., help="Configuration file"),
) -> None:
    """Apply a text configuration file (not supported)."""
    try:
        actions.configure(port, config_file)
    except RadioError as e:
        print_error(e.diagnostic())
        raise typer.Exit(1)


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    main()
