"""CLI for cubik."""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

import typer

from cubik import __version__
from cubik.core.codec import Color
from cubik.core.device import Device
from cubik.core.discovery import discover_devices
from cubik.core.fonts import Alignment, draw_number
from cubik.core.frame import Framebuffer, load_image_frames, parse_color
from cubik.core.patterns import checkerboard, gradient, solid_color
from cubik.core.scheduler import AnimationScheduler
from cubik.exceptions import CubikError
from cubik.models.config import Settings

app = typer.Typer(
    name="cubik",
    help="CubeLite LED matrix controller",
    no_args_is_help=True,
)

LOCATION_HELP = "Device location, e.g. yeelight://192.168.1.20:55443 (auto-discover if not specified)"


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(levelname)s: %(message)s",
    )


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


def _get_device(settings: Settings, location: Optional[str]) -> Device:
    """Build a Device for ``location`` or for the first discovered device."""
    try:
        if location:
            return Device(location, timeout=settings.command_timeout)

        typer.echo("Discovering device...")
        devices = discover_devices(settings.discovery_timeout, settings.target_model)
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not devices:
        typer.echo("No device found.", err=True)
        raise typer.Exit(1)

    device = devices[0]
    typer.echo(f"Using {device.name or device.id or 'device'} at {device.location}")
    return Device(device.location, timeout=settings.command_timeout)


def _show(settings: Settings, location: Optional[str], framebuffer: Framebuffer) -> None:
    device = _get_device(settings, location)
    try:
        device.activate_fx_mode()
        device.show(framebuffer)
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Sent to device at {device.location}")


def _color(value: str) -> Color:
    try:
        return parse_color(value)
    except CubikError as e:
        raise typer.BadParameter(str(e))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """CubeLite LED matrix controller."""
    settings = Settings()
    setup_logging(settings.log_level, verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"cubik v{__version__}")


@app.command()
def discover(
    ctx: typer.Context,
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout", "-t",
        help="Seconds to wait after the last reply",
    ),
    all_models: bool = typer.Option(False, "--all", help="Include devices of any model"),
) -> None:
    """Discover devices on the network."""
    settings = _settings(ctx)
    typer.echo("Scanning network for devices...")

    try:
        devices = discover_devices(
            timeout or settings.discovery_timeout,
            None if all_models else settings.target_model,
        )
    except CubikError as e:
        typer.echo(f"Discovery failed: {e}", err=True)
        raise typer.Exit(1)

    if not devices:
        typer.echo("\nNo devices found.")
        typer.echo("Make sure the device is powered on and LAN control is enabled.")
        return

    typer.echo(f"\nFound {len(devices)} device(s):")
    for device in devices:
        typer.echo(f"  - {device.location}  {device.model} id={device.id} name={device.name or '-'}")
        typer.echo(f"      power={device.power or '?'} bright={device.bright or '?'} fw={device.fw_ver or '?'}")


@app.command()
def info(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Show device properties."""
    device = _get_device(_settings(ctx), location)
    try:
        props = device.get_prop("power", "bright", "name", "color_mode", "ct", "rgb")
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for name, value in props.items():
        typer.echo(f"  {name}: {value or '-'}")


@app.command()
def toggle(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Toggle device power."""
    device = _get_device(_settings(ctx), location)
    try:
        device.toggle()
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("Power toggled")


@app.command()
def on(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Turn device on."""
    device = _get_device(_settings(ctx), location)
    try:
        device.set_power(True)
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("Device turned on")


@app.command()
def off(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Turn device off."""
    device = _get_device(_settings(ctx), location)
    try:
        device.set_power(False)
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("Device turned off")


@app.command()
def brightness(
    ctx: typer.Context,
    level: int = typer.Argument(..., min=1, max=100, help="Brightness level (1-100)"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Set display brightness."""
    device = _get_device(_settings(ctx), location)
    try:
        device.set_brightness(level)
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Brightness set to {level}%")


@app.command()
def number(
    ctx: typer.Context,
    value: int = typer.Argument(..., min=0, help="Non-negative number to display"),
    color: str = typer.Option("#00FF00", "--color", help="Digit color (hex)"),
    background: str = typer.Option("#000000", "--background", help="Background color (hex)"),
    align: Alignment = typer.Option(Alignment.CENTER, "--align", help="Horizontal alignment"),
    spacing: int = typer.Option(1, "--spacing", min=0, help="Blank columns between digits"),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Save rendered frame to image file instead of sending to device",
    ),
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Draw a number on the matrix."""
    settings = _settings(ctx)
    bg = _color(background)
    framebuffer = Framebuffer(settings.matrix_width, settings.matrix_height, bg)

    try:
        draw_number(framebuffer, value, 0, spacing, align, _color(color), bg)
    except CubikError as e:
        typer.echo(f"Cannot draw {value}: {e}", err=True)
        raise typer.Exit(1)

    if output:
        framebuffer.save(output, scale=10)
        typer.echo(f"Saved to {output}")
    else:
        _show(settings, location, framebuffer)


@app.command()
def pattern(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="solid, checkerboard or gradient"),
    color: str = typer.Option("#FF0000", "--color", help="Color for the solid pattern (hex)"),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Save rendered frame to image file instead of sending to device",
    ),
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Fill the matrix with a test pattern."""
    settings = _settings(ctx)
    count = settings.matrix_width * settings.matrix_height

    if name == "solid":
        pixels = solid_color(_color(color), count)
    elif name == "checkerboard":
        pixels = checkerboard(count)
    elif name == "gradient":
        pixels = gradient(count)
    else:
        typer.echo(f"Unknown pattern: {name}", err=True)
        raise typer.Exit(1)

    framebuffer = Framebuffer.from_pixels(settings.matrix_width, settings.matrix_height, pixels)
    if output:
        framebuffer.save(output, scale=10)
        typer.echo(f"Saved to {output}")
    else:
        _show(settings, location, framebuffer)


@app.command()
def play(
    ctx: typer.Context,
    image_file: Path = typer.Argument(..., help="Image or animated GIF to play"),
    interval: Optional[float] = typer.Option(
        None,
        "--interval", "-i",
        help="Seconds between frames",
    ),
    location: Optional[str] = typer.Option(None, "--location", "-l", help=LOCATION_HELP),
) -> None:
    """Loop the frames of an image on a device until interrupted."""
    settings = _settings(ctx)

    if not image_file.exists():
        typer.echo(f"Image file not found: {image_file}", err=True)
        raise typer.Exit(1)

    try:
        frames = load_image_frames(image_file, settings.matrix_width, settings.matrix_height)
    except OSError as e:
        typer.echo(f"Invalid image file: {e}", err=True)
        raise typer.Exit(1)

    device = _get_device(settings, location)
    scheduler = AnimationScheduler(
        settings.matrix_width,
        settings.matrix_height,
        interval or settings.frame_interval,
        device_factory=lambda loc: Device(loc, timeout=settings.command_timeout),
    )

    async def run() -> None:
        loop = asyncio.get_running_loop()
        stop_event = asyncio.Event()

        def handle_signal() -> None:
            typer.echo("\nStopping...")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, handle_signal)

        await scheduler.start(device.location, frames)
        typer.echo(f"Playing {len(frames)} frame(s) on {device.location}. Press Ctrl+C to stop")
        await stop_event.wait()
        await scheduler.stop_all()

    try:
        asyncio.run(run())
    except CubikError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        pass


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="HTTP port"),
) -> None:
    """Start the HTTP API."""
    import uvicorn

    from cubik.storage import AnimationStore
    from cubik.web.app import create_app

    settings = _settings(ctx)
    scheduler = AnimationScheduler(
        settings.matrix_width,
        settings.matrix_height,
        settings.frame_interval,
        device_factory=lambda loc: Device(loc, timeout=settings.command_timeout),
    )
    store = AnimationStore(settings.data_dir)
    web_app = create_app(scheduler, store, settings)

    bind_port = port or settings.server_port
    typer.echo(f"Starting cubik server at http://localhost:{bind_port}")
    uvicorn.run(
        web_app,
        host=host or settings.server_host,
        port=bind_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
