"""
Fastboot Flashing Module
Partition table, quick actions and image flashing over fastboot.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .adb import AdbClient

logger = logging.getLogger(__name__)

# Partitions that can be flashed, with a short description
PARTITIONS = {
    'boot': 'Boot (kernel image)',
    'recovery': 'Recovery (recovery mode)',
    'system': 'System (system image)',
    'userdata': 'Userdata (user data)',
    'cache': 'Cache',
    'vendor': 'Vendor (vendor image)',
    'dtbo': 'DTBO (device tree overlay)',
    'vbmeta': 'VBMeta (verified boot metadata)',
}

# Common one-shot fastboot commands
FASTBOOT_QUICK_ACTIONS = {
    'getvar all': 'Read device variables',
    'reboot': 'Reboot the device',
    'reboot-bootloader': 'Reboot into the bootloader',
    'oem unlock': 'Unlock the bootloader',
}

# Common adb commands offered as starting points for free-text input
ADB_QUICK_ACTIONS = {
    'devices': 'List devices',
    'shell': 'Open a shell',
    'logcat': 'Show the device log',
    'install': 'Install an APK',
    'uninstall': 'Remove a package',
}

# Output markers that mean a flash did not go through
FAILURE_MARKERS = ("FAILED", "error")

GETVAR_LINE = re.compile(r"^\(bootloader\)\s*(.+:.*)$")


@dataclass(frozen=True)
class FlashOutcome:
    """Result of flashing one image."""
    partition: str
    image: str
    success: bool
    output: str


def flash_image(client: AdbClient, serial: str, partition: str, image: str) -> FlashOutcome:
    """
    Flash an image file to a partition.

    Args:
        client: Command layer to use.
        serial: Fastboot device identifier.
        partition: One of PARTITIONS.
        image: Path to the image file.

    Returns:
        FlashOutcome; success requires a zero exit and no failure marker.

    Raises:
        ValueError: If the partition is not in PARTITIONS.
        FileNotFoundError: If the image does not exist.
    """
    if partition not in PARTITIONS:
        raise ValueError(f"Unknown partition: {partition}")

    image_path = Path(image).expanduser()
    if not image_path.is_file():
        raise FileNotFoundError(f"Image not found: {image_path}")

    logger.info("Flashing %s to %s on %s", image_path.name, partition, serial)
    result = client.fastboot("flash", partition, str(image_path), serial=serial)
    success = result.ok and not any(marker in result.output for marker in FAILURE_MARKERS)

    if not success:
        logger.warning("Flashing %s failed: %s", partition, result.describe())

    return FlashOutcome(partition, str(image_path), success, result.output)


def parse_getvar(output: str) -> dict[str, str]:
    """
    Parse ``fastboot getvar all`` output.

    Lines look like ``(bootloader) product:lahaina`` or
    ``(bootloader) partition-size:boot_a:0x6000000``. The value follows the
    last colon; the first value seen for a key is kept.
    """
    variables: dict[str, str] = {}
    for line in output.splitlines():
        match = GETVAR_LINE.match(line.strip())
        if not match:
            continue
        key, value = match.group(1).rsplit(":", 1)
        variables.setdefault(key.strip(), value.strip())
    return variables
