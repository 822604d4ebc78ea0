"""
CLI Application Module
Command-line front-end rendering device state with rich.
"""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from core.adb import check_adb_available, check_fastboot_available
from core.adb_models import CommandResult
from core.flashing import ADB_QUICK_ACTIONS, FASTBOOT_QUICK_ACTIONS, PARTITIONS
from core.models import BootloaderState, DeviceSnapshot
from core.reboot import REBOOT_TARGETS, RebootSuccess, parse_reboot_mode
from core.service import DeviceService
from core.utils import format_size


console = Console()

BOOTLOADER_STYLES = {
    BootloaderState.LOCKED: "green",
    BootloaderState.PARTIALLY_LOCKED: "yellow",
    BootloaderState.UNLOCKED: "red",
    BootloaderState.UNKNOWN: "dim",
}


def check_prerequisites(service: DeviceService) -> bool:
    """Check that at least adb can be started."""
    if not check_adb_available(service.client):
        console.print(f"[bold red]ERROR:[/] adb not found ({service.client.adb_path}). "
                      "Install Android SDK Platform Tools.", style="red")
        return False
    console.print("[green][OK][/] adb available")

    if check_fastboot_available(service.client):
        console.print("[green][OK][/] fastboot available")
    else:
        console.print("[yellow][--][/] fastboot not found, bootloader commands disabled")
    return True


def display_devices(title: str, devices: list[str]):
    """Print a numbered list of device identifiers."""
    if not devices:
        console.print(f"[yellow]{title}: no devices found.[/]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=4)
    table.add_column("Serial", style="cyan")
    for i, serial in enumerate(devices, 1):
        table.add_row(str(i), serial)
    console.print(table)


def display_snapshot(snapshot: DeviceSnapshot):
    """Render a device snapshot as a panel and a details table."""
    if not snapshot.is_connected:
        console.print(Panel("[yellow]No device connected[/]", border_style="yellow"))
        return

    bl_style = BOOTLOADER_STYLES[snapshot.bootloader_state]
    root_text = "[red]Rooted[/]" if snapshot.is_rooted else "[green]Not rooted[/]"
    summary = f"""[bold cyan]{snapshot.display_name}[/]
Android {snapshot.android_version} | Patch {snapshot.security_patch}
Bootloader: [{bl_style}]{snapshot.bootloader_state.label}[/] | {root_text}"""
    console.print(Panel(summary, title="[bold]Device[/]", border_style="cyan"))

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="bold")
    table.add_column("Value")

    storage = snapshot.storage
    table.add_row("Serial", snapshot.serial_number)
    table.add_row("Build", snapshot.build_number)
    table.add_row("Chipset", snapshot.chipset.description)
    table.add_row("RAM", snapshot.ram)
    table.add_row("Storage", f"{storage.used_human} / {storage.total_human} "
                             f"({storage.percentage}%), {storage.available_human} free")
    table.add_row("Apps", str(snapshot.installed_apps))
    table.add_row("Battery", snapshot.battery_human)
    table.add_row("Uptime", snapshot.uptime)
    console.print(table)


def display_command_result(result: CommandResult) -> int:
    """Print tool output and return a process exit code."""
    if result.text:
        console.print(result.text, markup=False, highlight=False)
    if result.ok:
        return 0

    label = result.status.value.replace('_', ' ')
    if result.exit_code is not None:
        label += f" (exit {result.exit_code})"
    console.print(f"[bold red]{label}[/]")
    return 1


def display_quick_actions(title: str, prefix: str, actions: dict[str, str]):
    console.print(f"\n[bold]{title}[/]")
    for command, description in actions.items():
        console.print(f"  [cyan]{prefix} \"{command}\"[/]  {description}")


def run_devices(service: DeviceService) -> int:
    display_devices("ADB devices", service.scan_devices())
    return 0


def run_fastboot_devices(service: DeviceService) -> int:
    display_devices("Fastboot devices", service.scan_fastboot_devices())
    return 0


def run_info(service: DeviceService, serial: Optional[str] = None) -> int:
    """Show the snapshot of a device (first connected one by default)."""
    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
                  console=console, transient=True) as progress:
        progress.add_task("Reading device info...", total=None)
        if serial:
            snapshot = service.fetch_snapshot(serial)
        else:
            service.scan_devices()
            snapshot = service.store.device_info

    if snapshot is None:
        console.print(f"[bold red]ERROR:[/] device {serial} is not reachable.")
        return 1
    display_snapshot(snapshot)
    return 0


def run_adb(service: DeviceService, text: str) -> int:
    console.print(f"[dim]$ adb {text}[/]")
    return display_command_result(service.run_adb_command(text))


def run_fastboot(service: DeviceService, text: str) -> int:
    console.print(f"[dim]$ fastboot {text}[/]")
    return display_command_result(service.run_fastboot_command(text))


def run_root(service: DeviceService, serial: str) -> int:
    if service.probe_root(serial):
        console.print(f"[green]{serial} has root access (uid=0).[/]")
        return 0
    console.print(f"[yellow]{serial} has no root access.[/]")
    return 1


def run_reboot_modes(service: DeviceService, serial: str) -> int:
    modes = service.reboot_modes(serial)
    if not modes:
        console.print("[yellow]No reboot modes available: every reboot command needs root.[/]")
        return 1

    table = Table(title=f"Reboot modes for {serial}", header_style="bold magenta")
    table.add_column("Mode", style="cyan")
    table.add_column("Name")
    table.add_column("Command", style="dim")
    table.add_column("Description")
    for mode in modes:
        target = REBOOT_TARGETS[mode]
        table.add_row(mode.value, target.display_name, target.command, target.description)
    console.print(table)
    return 0


def run_reboot(service: DeviceService, serial: str, mode_name: str, assume_yes: bool = False) -> int:
    mode = parse_reboot_mode(mode_name)
    if mode not in service.reboot_modes(serial):
        console.print("[bold red]ERROR:[/] root access is required to reboot.")
        return 1

    target = REBOOT_TARGETS[mode]
    if not assume_yes and not Confirm.ask(f"[bold]{target.display_name}[/] on {serial}?", default=False):
        console.print("[yellow]Cancelled.[/]")
        return 1

    outcome = service.execute_reboot(serial, mode)
    if isinstance(outcome, RebootSuccess):
        console.print(f"[green]{outcome.message}[/]")
        return 0
    console.print(f"[bold red]Reboot failed:[/] {outcome.reason}")
    return 1


def run_flash(service: DeviceService, serial: str, partition: str, image: str, assume_yes: bool = False) -> int:
    path = Path(image).expanduser()
    if path.is_file():
        console.print(Panel(
            f"[bold]Partition:[/] {partition} ({PARTITIONS.get(partition, '?')})\n"
            f"[bold]Image:[/] {path.name} ({format_size(path.stat().st_size)})\n"
            f"[bold]Device:[/] {serial}",
            title="[bold]Flash image[/]", border_style="red"
        ))
        if not assume_yes and not Confirm.ask("Proceed with flashing?", default=False):
            console.print("[yellow]Cancelled.[/]")
            return 1

    outcome = service.flash(serial, partition, image)
    console.print(outcome.output.strip(), markup=False, highlight=False)
    if outcome.success:
        console.print("[bold green]Image flashed successfully.[/]")
        return 0
    console.print("[bold red]Flashing failed.[/]")
    return 1


def run_getvar(service: DeviceService, serial: str) -> int:
    variables = service.getvar(serial)
    if not variables:
        console.print("[yellow]No variables reported.[/]")
        return 1

    table = Table(title=f"fastboot getvar all ({serial})", header_style="bold magenta")
    table.add_column("Variable", style="cyan")
    table.add_column("Value")
    for key, value in variables.items():
        table.add_row(key, value)
    console.print(table)
    return 0


def run_cli(service: DeviceService) -> int:
    """
    Default overview: check tools, scan both transports, show the snapshot.

    Returns:
        Process exit code.
    """
    console.print(Panel.fit(
        "[bold cyan]DroidPanel[/]\n[dim]Android device overview via ADB and Fastboot[/]",
        border_style="cyan"
    ))

    if not check_prerequisites(service):
        return 1

    scan = service.submit_scan()
    fastboot_scan = service.submit_fastboot_scan()
    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
                  console=console, transient=True) as progress:
        progress.add_task("Scanning devices...", total=None)
        devices = scan.result()
        fastboot_devices = fastboot_scan.result()

    display_devices("ADB devices", devices)
    display_devices("Fastboot devices", fastboot_devices)
    display_snapshot(service.store.device_info)

    if devices:
        display_quick_actions("ADB quick actions", "droidpanel adb", ADB_QUICK_ACTIONS)
    if fastboot_devices:
        display_quick_actions("Fastboot quick actions", "droidpanel fastboot", FASTBOOT_QUICK_ACTIONS)
    return 0
