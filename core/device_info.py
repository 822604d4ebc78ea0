"""
Device Information Module
Queries a device property by property and assembles a DeviceSnapshot.
Each query is independent: a failing query only resets its own field.
"""

import logging
from typing import Optional

from .adb import AdbClient
from .chipset import classify_chipset, pick_chipset_source
from .models import (
    BootloaderState, ChipsetInfo, DeviceSnapshot, StorageInfo, UNKNOWN
)
from .utils import KB_PER_GB, format_uptime, kb_to_gb

MAX_FREQ_PATH = "/sys/devices/system/cpu/cpu0/cpufreq/cpuinfo_max_freq"

PACKAGE_PREFIX = "package:"
CORE_PREFIX = "processor"
CPUINFO_MODEL_PREFIXES = ("model name", "Processor", "Hardware", "cpu model", "Model")

VERIFIED_BOOT_STATES = {
    'orange': BootloaderState.UNLOCKED,
    'yellow': BootloaderState.PARTIALLY_LOCKED,
    'green': BootloaderState.LOCKED,
}


def map_bootloader_state(verified_boot_state: str) -> BootloaderState:
    """Translate ro.boot.verifiedbootstate into a lock state."""
    return VERIFIED_BOOT_STATES.get(verified_boot_state.strip().lower(), BootloaderState.UNKNOWN)


def is_su_present(which_output: str) -> bool:
    """Interpret the output of ``which su``."""
    text = which_output.strip()
    return bool(text) and "not found" not in text


def parse_uptime(proc_uptime: str) -> Optional[str]:
    """Parse /proc/uptime into "<h>h <m>m", or None if malformed."""
    fields = proc_uptime.split()
    if not fields:
        return None
    try:
        seconds = float(fields[0])
    except ValueError:
        return None
    return format_uptime(seconds)


def parse_storage(df_output: str) -> StorageInfo:
    """
    Parse ``df /data`` output.

    Uses the second line, columns [total_kb, used_kb, available_kb]. A
    table that does not have that shape yields an all-unknown StorageInfo.
    """
    lines = df_output.strip().splitlines()
    if len(lines) < 2:
        return StorageInfo()

    columns = lines[1].split()
    if len(columns) < 4:
        return StorageInfo()

    try:
        total_kb, used_kb, available_kb = (int(value) for value in columns[1:4])
    except ValueError:
        return StorageInfo()

    percentage = 0
    if total_kb > 0:
        percentage = max(0, min(100, round(used_kb / total_kb * 100)))

    return StorageInfo(
        total_gb=kb_to_gb(total_kb),
        used_gb=kb_to_gb(used_kb),
        available_gb=kb_to_gb(available_kb),
        percentage=percentage
    )


def count_packages(pm_output: str) -> int:
    """Count ``package:`` lines from ``pm list packages``."""
    return sum(1 for line in pm_output.splitlines() if line.startswith(PACKAGE_PREFIX))


def count_cores(cpuinfo: str) -> int:
    """Count per-core ``processor`` entries in /proc/cpuinfo."""
    return sum(1 for line in cpuinfo.splitlines() if line.startswith(CORE_PREFIX))


def find_cpuinfo_model(cpuinfo: str) -> Optional[str]:
    """Return the value of the first model-like line in /proc/cpuinfo."""
    for line in cpuinfo.splitlines():
        if line.startswith(CPUINFO_MODEL_PREFIXES):
            return line.split(':', 1)[-1].strip()
    return None


def parse_max_freq_ghz(freq_output: str) -> Optional[float]:
    """Convert cpuinfo_max_freq (kHz) to GHz; None when unavailable."""
    try:
        freq_khz = int(freq_output.strip())
    except ValueError:
        return None
    freq_mhz = freq_khz // 1000
    if freq_mhz <= 0:
        return None
    return freq_mhz / 1000.0


def parse_mem_total_gb(meminfo: str) -> Optional[int]:
    """Whole gigabytes of the MemTotal line in /proc/meminfo."""
    for line in meminfo.splitlines():
        if line.startswith("MemTotal:"):
            parts = line.split()
            if len(parts) < 2:
                return None
            try:
                return int(parts[1]) // KB_PER_GB
            except ValueError:
                return None
    return None


def parse_battery_level(battery_dump: str) -> Optional[int]:
    """Battery percentage from ``dumpsys battery``."""
    for line in battery_dump.splitlines():
        if "level:" in line:
            try:
                return int(line.split("level:", 1)[1].strip())
            except ValueError:
                return None
    return None


class DeviceInfoCollector:
    """
    Builds a DeviceSnapshot for one device identifier.

    Queries always run in the same order. Only a failure of the very first
    query (the model property) means the device is unreachable.
    """

    def __init__(self, client: AdbClient):
        self.client = client
        self.logger = logging.getLogger("device.info")

    def _read(self, serial: str, field: str, *args: str) -> Optional[str]:
        result = self.client.shell(serial, *args)
        if not result.ok:
            self.logger.debug("%s: %s unavailable (%s)", serial, field, result.status.value)
            return None
        return result.output

    def _prop(self, serial: str, prop: str) -> str:
        output = self._read(serial, prop, "getprop", prop)
        return output.strip() if output else ""

    def collect(self, serial: str) -> Optional[DeviceSnapshot]:
        """
        Query every property of the device.

        Args:
            serial: Device identifier from discovery.

        Returns:
            A complete DeviceSnapshot, or None if the device cannot be
            reached at all.
        """
        self.logger.info("Collecting device info for %s", serial)

        first = self.client.getprop(serial, "ro.product.model")
        if not first.ok:
            self.logger.warning("Device %s unreachable: %s", serial, first.describe())
            return None
        model = first.text

        manufacturer = self._prop(serial, "ro.product.manufacturer")
        android_version = self._prop(serial, "ro.build.version.release")
        serial_number = self._prop(serial, "ro.serialno")
        build_number = self._prop(serial, "ro.build.display.id")
        security_patch = self._prop(serial, "ro.build.version.security_patch")
        bootloader_state = map_bootloader_state(self._prop(serial, "ro.boot.verifiedbootstate"))

        which_su = self._read(serial, "su", "which", "su")
        is_rooted = is_su_present(which_su) if which_su is not None else False

        uptime_raw = self._read(serial, "uptime", "cat", "/proc/uptime")
        uptime = parse_uptime(uptime_raw) if uptime_raw is not None else None

        df_raw = self._read(serial, "storage", "df", "/data")
        storage = parse_storage(df_raw) if df_raw is not None else StorageInfo()

        packages_raw = self._read(serial, "packages", "pm", "list", "packages")
        installed_apps = count_packages(packages_raw) if packages_raw is not None else 0

        chipset = self._collect_chipset(serial)

        meminfo = self._read(serial, "meminfo", "cat", "/proc/meminfo")
        ram_gb = parse_mem_total_gb(meminfo) if meminfo is not None else None

        battery_raw = self._read(serial, "battery", "dumpsys", "battery")
        battery_level = parse_battery_level(battery_raw) if battery_raw is not None else None

        return DeviceSnapshot(
            model=model or UNKNOWN,
            manufacturer=manufacturer or UNKNOWN,
            android_version=android_version or UNKNOWN,
            serial_number=serial_number or serial,
            build_number=build_number or UNKNOWN,
            bootloader_state=bootloader_state,
            is_rooted=is_rooted,
            is_connected=True,
            uptime=uptime or UNKNOWN,
            storage=storage,
            installed_apps=installed_apps,
            security_patch=security_patch or UNKNOWN,
            chipset=chipset,
            ram=f"{ram_gb}GB" if ram_gb is not None else UNKNOWN,
            battery_level=battery_level
        )

    def _collect_chipset(self, serial: str) -> ChipsetInfo:
        cpuinfo = self._read(serial, "cpuinfo", "cat", "/proc/cpuinfo") or ""

        platform = self._prop(serial, "ro.board.platform")
        hardware = self._prop(serial, "ro.hardware")
        chipname = self._prop(serial, "ro.chipname")

        raw = pick_chipset_source(platform, hardware, chipname, find_cpuinfo_model(cpuinfo))
        self.logger.debug("%s: chipset source %r", serial, raw)
        fact = classify_chipset(raw)

        freq_raw = self._read(serial, "max frequency", "cat", MAX_FREQ_PATH)
        max_freq = parse_max_freq_ghz(freq_raw) if freq_raw is not None else None

        return ChipsetInfo(
            brand=fact.brand,
            model=fact.model,
            cores=count_cores(cpuinfo) or None,
            max_freq_ghz=max_freq
        )
