"""
Reboot Module
Root probing and the reboot targets a device is allowed to use.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union

from .adb import AdbClient

ROOT_MARKER = "uid=0"
PRIVILEGE_DENIED_MARKERS = ("not found", "su:")
PRIVILEGE_DENIED_MESSAGE = "elevated access required"


class RebootMode(Enum):
    """Reboot target tags."""
    NORMAL = "normal"
    RECOVERY = "recovery"
    BOOTLOADER = "bootloader"
    FASTBOOT = "fastboot"
    DOWNLOAD = "download"
    SAFE_MODE = "safe_mode"
    POWER_OFF = "power_off"


@dataclass(frozen=True)
class RebootTarget:
    """Command line and labels for one reboot mode."""
    command: str
    display_name: str
    description: str


REBOOT_TARGETS: dict[RebootMode, RebootTarget] = {
    RebootMode.NORMAL: RebootTarget("reboot", "Normal reboot", "Restart into the system"),
    RebootMode.RECOVERY: RebootTarget("reboot recovery", "Recovery", "Restart into recovery mode"),
    RebootMode.BOOTLOADER: RebootTarget("reboot bootloader", "Bootloader", "Restart into the bootloader (fastboot/download)"),
    RebootMode.FASTBOOT: RebootTarget("reboot fastboot", "Fastboot", "Restart into fastboot mode"),
    RebootMode.DOWNLOAD: RebootTarget("reboot download", "Download", "Restart into download mode"),
    RebootMode.SAFE_MODE: RebootTarget("reboot safemode", "Safe mode", "Restart into safe mode"),
    RebootMode.POWER_OFF: RebootTarget("reboot -p", "Power off", "Shut the device down"),
}


class RootState(Enum):
    """Probe state of a single device identifier."""
    UNPROBED = "unprobed"
    PROBING = "probing"
    ROOTED = "rooted"
    UNROOTED = "unrooted"


@dataclass(frozen=True)
class RebootSuccess:
    mode: RebootMode
    message: str


@dataclass(frozen=True)
class RebootError:
    mode: RebootMode
    reason: str


RebootOutcome = Union[RebootSuccess, RebootError]


def parse_reboot_mode(name: str) -> RebootMode:
    """
    Look up a reboot mode by tag (``safe_mode``) or command suffix (``safemode``).

    Raises:
        ValueError: If the name matches no mode.
    """
    key = name.strip().lower().replace('-', '_')
    for mode, target in REBOOT_TARGETS.items():
        if key == mode.value or key == target.command.split(' ', 1)[-1]:
            return mode
    raise ValueError(f"Unknown reboot mode: {name}")


class RebootManager:
    """
    Tracks root state per device and executes reboot commands.

    The probe result is cached until the identifier disappears from
    discovery; executing a reboot never changes it.
    """

    def __init__(self, client: AdbClient):
        self.client = client
        self.logger = logging.getLogger("device.reboot")
        self._states: dict[str, RootState] = {}

    def state(self, serial: str) -> RootState:
        return self._states.get(serial, RootState.UNPROBED)

    def probe(self, serial: str) -> bool:
        """
        Check for root with ``su -c id``.

        Returns:
            True if the command succeeded and reported uid=0.
        """
        self._states[serial] = RootState.PROBING
        result = self.client.shell(serial, "su", "-c", "id")
        rooted = result.ok and ROOT_MARKER in result.output
        self._states[serial] = RootState.ROOTED if rooted else RootState.UNROOTED
        self.logger.info("Root probe for %s: %s", serial, self._states[serial].value)
        return rooted

    def is_rooted(self, serial: str) -> bool:
        """Cached root state, probing on first use."""
        state = self.state(serial)
        if state in (RootState.UNPROBED, RootState.PROBING):
            return self.probe(serial)
        return state is RootState.ROOTED

    def available_modes(self, serial: str) -> list[RebootMode]:
        """
        Reboot modes the device may use.

        Every reboot goes through su, so an unrooted device gets none.
        """
        if self.is_rooted(serial):
            return list(REBOOT_TARGETS)
        return []

    def execute(self, serial: str, mode: RebootMode) -> RebootOutcome:
        """Run the reboot command for a mode through su."""
        target = REBOOT_TARGETS[mode]
        self.logger.info("Rebooting %s: %s", serial, target.command)

        result = self.client.shell(serial, f"su -c '{target.command}'")
        if result.ok:
            return RebootSuccess(mode, f"{target.display_name} command sent")

        output = result.text
        if any(marker in output for marker in PRIVILEGE_DENIED_MARKERS):
            return RebootError(mode, PRIVILEGE_DENIED_MESSAGE)
        return RebootError(mode, output or result.describe())

    def forget_missing(self, visible: Iterable[str]) -> None:
        """Drop cached probe results for identifiers no longer listed."""
        visible = set(visible)
        for serial in list(self._states):
            if serial not in visible:
                self.logger.debug("Forgetting root state of %s", serial)
                self._states.pop(serial, None)
