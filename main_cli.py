#!/usr/bin/env python3
"""
DroidPanel - CLI Entry Point
"""

import argparse
import sys

from cli.app import (
    console, run_adb, run_cli, run_devices, run_fastboot, run_fastboot_devices,
    run_flash, run_getvar, run_info, run_reboot, run_reboot_modes, run_root
)
from cli.logging_setup import setup_logging
from core.config import Settings
from core.service import DeviceService

__version__ = "1.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="droidpanel",
        description="DroidPanel - Android device overview and control via ADB/Fastboot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              # Overview of connected devices
  %(prog)s info -s SERIAL               # Full device snapshot
  %(prog)s adb "shell getprop ro.product.model"
  %(prog)s reboot -s SERIAL recovery    # Requires root
  %(prog)s flash -s SERIAL boot boot.img
        """
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Logging level (DEBUG, INFO, WARNING, ERROR)'
    )

    parser.add_argument(
        '-v', '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    sub = parser.add_subparsers(dest='command')

    sub.add_parser('devices', help='List adb devices')
    sub.add_parser('fastboot-devices', help='List fastboot devices')

    info = sub.add_parser('info', help='Show device information')
    info.add_argument('-s', '--serial', help='Device serial (default: first device)')

    adb = sub.add_parser('adb', help='Run a free-text adb command')
    adb.add_argument('args', help='Arguments passed to adb, quoted as one string')

    fastboot = sub.add_parser('fastboot', help='Run a free-text fastboot command')
    fastboot.add_argument('args', help='Arguments passed to fastboot, quoted as one string')

    root = sub.add_parser('root', help='Probe root access')
    root.add_argument('-s', '--serial', required=True)

    modes = sub.add_parser('reboot-modes', help='List reboot modes available to a device')
    modes.add_argument('-s', '--serial', required=True)

    reboot = sub.add_parser('reboot', help='Reboot a rooted device into a mode')
    reboot.add_argument('-s', '--serial', required=True)
    reboot.add_argument('mode', help='normal, recovery, bootloader, fastboot, download, safe_mode, power_off')
    reboot.add_argument('-y', '--yes', action='store_true', help='Do not ask for confirmation')

    flash = sub.add_parser('flash', help='Flash an image with fastboot')
    flash.add_argument('-s', '--serial', required=True)
    flash.add_argument('partition')
    flash.add_argument('image')
    flash.add_argument('-y', '--yes', action='store_true', help='Do not ask for confirmation')

    getvar = sub.add_parser('getvar', help='Show fastboot device variables')
    getvar.add_argument('-s', '--serial', required=True)

    return parser


def dispatch(service: DeviceService, args: argparse.Namespace) -> int:
    if args.command == 'devices':
        return run_devices(service)
    if args.command == 'fastboot-devices':
        return run_fastboot_devices(service)
    if args.command == 'info':
        return run_info(service, args.serial)
    if args.command == 'adb':
        return run_adb(service, args.args)
    if args.command == 'fastboot':
        return run_fastboot(service, args.args)
    if args.command == 'root':
        return run_root(service, args.serial)
    if args.command == 'reboot-modes':
        return run_reboot_modes(service, args.serial)
    if args.command == 'reboot':
        return run_reboot(service, args.serial, args.mode, args.yes)
    if args.command == 'flash':
        return run_flash(service, args.serial, args.partition, args.image, args.yes)
    if args.command == 'getvar':
        return run_getvar(service, args.serial)
    return run_cli(service)


def main():
    args = build_parser().parse_args()

    settings = Settings.from_env()
    if args.log_level:
        settings.log_level = args.log_level.upper()
    setup_logging(settings.log_level, console)

    try:
        with DeviceService(settings) as service:
            code = dispatch(service, args)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[bold red]ERROR:[/] {e}")
        code = 2
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.")
        sys.exit(130)

    sys.exit(code)


if __name__ == '__main__':
    main()
