"""
Device Discovery Module
Lists devices visible to adb and fastboot.
"""

import logging

from .adb import AdbClient

logger = logging.getLogger(__name__)


def parse_device_list(output: str, skip_header: bool = True) -> list[str]:
    """
    Parse the tab-separated table printed by ``adb devices``/``fastboot devices``.

    Args:
        output: Raw tool output.
        skip_header: Drop the first line ("List of devices attached").

    Returns:
        Device identifiers in output order, duplicates kept.
    """
    lines = output.splitlines()
    if skip_header:
        lines = lines[1:]

    devices = []
    for line in lines:
        if not line.strip() or '\t' not in line:
            continue
        serial = line.split('\t', 1)[0].strip()
        if serial:
            devices.append(serial)

    return devices


def get_connected_devices(client: AdbClient) -> list[str]:
    """
    Get identifiers of devices visible over adb.

    Returns:
        Ordered identifiers, or an empty list if the command failed.
    """
    result = client.adb("devices")
    if not result.ok:
        logger.warning("adb devices failed: %s", result.describe())
        return []
    return parse_device_list(result.output, skip_header=True)


def get_fastboot_devices(client: AdbClient) -> list[str]:
    """
    Get identifiers of devices visible in fastboot mode.

    Returns:
        Ordered identifiers, or an empty list if the command failed.
    """
    result = client.fastboot("devices")
    if not result.ok:
        logger.warning("fastboot devices failed: %s", result.describe())
        return []
    return parse_device_list(result.output, skip_header=False)
