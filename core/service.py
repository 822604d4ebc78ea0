"""
Device Service Module
Observable snapshot store plus the actions a front-end can invoke.
Blocking work runs on a thread pool owned by the service.
"""

import logging
import shlex
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from .adb import AdbClient
from .adb_models import CommandResult
from .config import Settings
from .device_info import DeviceInfoCollector
from .discovery import get_connected_devices, get_fastboot_devices
from .flashing import FlashOutcome, flash_image, parse_getvar
from .models import DeviceSnapshot
from .reboot import RebootManager, RebootMode, RebootOutcome

Listener = Callable[[str, Any], None]


class SnapshotStore:
    """
    Latest discovery and aggregation results.

    Each field is replaced as a whole value; readers see either the old or
    the new value, never a mix. Concurrent writers are last-write-wins.
    """

    FIELDS = ("connected_devices", "fastboot_devices", "device_info", "is_scanning")

    def __init__(self):
        self.logger = logging.getLogger("device.store")
        self._values: dict[str, Any] = {
            "connected_devices": (),
            "fastboot_devices": (),
            "device_info": DeviceSnapshot(),
            "is_scanning": False,
        }
        self._listeners: list[Listener] = []

    @property
    def connected_devices(self) -> tuple[str, ...]:
        return self._values["connected_devices"]

    @property
    def fastboot_devices(self) -> tuple[str, ...]:
        return self._values["fastboot_devices"]

    @property
    def device_info(self) -> DeviceSnapshot:
        return self._values["device_info"]

    @property
    def is_scanning(self) -> bool:
        return self._values["is_scanning"]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback(field_name, new_value) fired after each update.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, field: str, value: Any) -> None:
        """Replace one field and notify listeners."""
        if field not in self.FIELDS:
            raise KeyError(field)
        self._values[field] = value

        for listener in list(self._listeners):
            try:
                listener(field, value)
            except Exception:
                self.logger.exception("Store listener failed for %s", field)


def split_command(text: str) -> list[str]:
    """
    Split a free-text tool command, keeping quoted paths intact.

    Quotes group words; backslashes are literal so Windows paths such as
    ``C:\\images\\boot.img`` pass through unchanged.
    """
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ''
    lexer.escape = ''
    args = list(lexer)
    if not args:
        raise ValueError("Command is empty")
    return args


class DeviceService:
    """
    Entry points consumed by the front-end.

    Every action has a blocking form and, where it touches a device, a
    ``submit_*`` form that returns a Future owned by the caller.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AdbClient] = None,
        store: Optional[SnapshotStore] = None
    ):
        self.settings = settings or Settings()
        self.client = client or AdbClient(self.settings)
        self.store = store or SnapshotStore()
        self.collector = DeviceInfoCollector(self.client)
        self.reboot = RebootManager(self.client)
        self.logger = logging.getLogger("device.service")
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="device"
        )

    def __enter__(self) -> "DeviceService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and join running operations."""
        self._executor.shutdown(wait=wait)

    # Discovery

    def scan_devices(self) -> list[str]:
        """
        Run a full adb scan cycle.

        Publishes the device list, drops root state of vanished devices and
        publishes the snapshot of the first device (the default snapshot when
        none is connected).
        """
        self.store.update("is_scanning", True)
        try:
            devices = get_connected_devices(self.client)
            self.store.update("connected_devices", tuple(devices))
            self.reboot.forget_missing(devices)
            self.logger.info("Found %d adb device(s)", len(devices))

            if devices:
                self.fetch_snapshot(devices[0])
            else:
                self.store.update("device_info", DeviceSnapshot())
            return devices
        finally:
            self.store.update("is_scanning", False)

    def scan_fastboot_devices(self) -> list[str]:
        """List devices in fastboot mode and publish them."""
        self.store.update("is_scanning", True)
        try:
            devices = get_fastboot_devices(self.client)
            self.store.update("fastboot_devices", tuple(devices))
            self.logger.info("Found %d fastboot device(s)", len(devices))
            return devices
        finally:
            self.store.update("is_scanning", False)

    def fetch_snapshot(self, serial: str) -> Optional[DeviceSnapshot]:
        """
        Collect and publish a snapshot for one device.

        An unreachable device returns None and leaves the stored snapshot as is.
        """
        snapshot = self.collector.collect(serial)
        if snapshot is not None:
            self.store.update("device_info", snapshot)
        return snapshot

    # Free-text commands

    def run_adb_command(self, text: str) -> CommandResult:
        """Run ``adb <text>``."""
        return self.client.adb(*split_command(text))

    def run_fastboot_command(self, text: str) -> CommandResult:
        """Run ``fastboot <text>``."""
        return self.client.fastboot(*split_command(text))

    # Root and reboot

    def probe_root(self, serial: str) -> bool:
        return self.reboot.probe(serial)

    def reboot_modes(self, serial: str) -> list[RebootMode]:
        return self.reboot.available_modes(serial)

    def execute_reboot(self, serial: str, mode: RebootMode) -> RebootOutcome:
        return self.reboot.execute(serial, mode)

    # Fastboot

    def flash(self, serial: str, partition: str, image: str) -> FlashOutcome:
        return flash_image(self.client, serial, partition, image)

    def getvar(self, serial: str) -> dict[str, str]:
        """Device variables from ``fastboot getvar all`` (empty on failure)."""
        result = self.client.fastboot("getvar", "all", serial=serial)
        if not result.ok:
            self.logger.warning("getvar failed on %s: %s", serial, result.describe())
            return {}
        return parse_getvar(result.output)

    # Pool dispatch

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Run any action on the worker pool."""
        return self._executor.submit(fn, *args)

    def submit_scan(self) -> Future:
        return self.submit(self.scan_devices)

    def submit_fastboot_scan(self) -> Future:
        return self.submit(self.scan_fastboot_devices)

    def submit_snapshot(self, serial: str) -> Future:
        return self.submit(self.fetch_snapshot, serial)

    def submit_reboot(self, serial: str, mode: RebootMode) -> Future:
        return self.submit(self.execute_reboot, serial, mode)
