"""
Data Models Module
Core dataclasses describing a device snapshot.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

UNKNOWN = "Unknown"
NOT_CONNECTED = "Not connected"


class BootloaderState(Enum):
    """Verified-boot lock state of the device."""
    LOCKED = "locked"
    PARTIALLY_LOCKED = "partially_locked"
    UNLOCKED = "unlocked"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return self.value.replace('_', ' ').capitalize()


class ChipBrand(Enum):
    """Chipset vendors recognised by the classifier."""
    QUALCOMM = "Qualcomm"
    MEDIATEK = "MediaTek"
    HISILICON = "HiSilicon"
    SAMSUNG = "Samsung"
    UNISOC = "Unisoc"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ChipsetFact:
    """Vendor and marketing model derived from a raw platform string."""
    brand: ChipBrand
    model: str


@dataclass(frozen=True)
class ChipsetInfo:
    """Classified chipset plus core count and peak clock."""
    brand: ChipBrand = ChipBrand.UNKNOWN
    model: str = UNKNOWN
    cores: Optional[int] = None
    max_freq_ghz: Optional[float] = None

    @property
    def description(self) -> str:
        text = f"{self.brand.value} {self.model}"
        if self.cores:
            text += f" ({self.cores} cores)"
        if self.max_freq_ghz:
            text += f" @ {self.max_freq_ghz:.1f} GHz"
        return text


@dataclass(frozen=True)
class StorageInfo:
    """Usage of the data partition, in gigabytes."""
    total_gb: Optional[float] = None
    used_gb: Optional[float] = None
    available_gb: Optional[float] = None
    percentage: int = 0

    @staticmethod
    def _human(value: Optional[float]) -> str:
        if value is None:
            return UNKNOWN
        return f"{value:.1f} GB"

    @property
    def total_human(self) -> str:
        return self._human(self.total_gb)

    @property
    def used_human(self) -> str:
        return self._human(self.used_gb)

    @property
    def available_human(self) -> str:
        return self._human(self.available_gb)


@dataclass(frozen=True)
class DeviceSnapshot:
    """
    Complete, immutable view of a device's state.

    Every field has a default so a snapshot can always be built even when
    individual queries fail. The bare default instance stands for
    "no device connected".
    """
    model: str = NOT_CONNECTED
    manufacturer: str = UNKNOWN
    android_version: str = UNKNOWN
    serial_number: str = UNKNOWN
    build_number: str = UNKNOWN
    bootloader_state: BootloaderState = BootloaderState.UNKNOWN
    is_rooted: bool = False
    is_connected: bool = False
    uptime: str = UNKNOWN
    storage: StorageInfo = field(default_factory=StorageInfo)
    installed_apps: int = 0
    security_patch: str = UNKNOWN
    chipset: ChipsetInfo = field(default_factory=ChipsetInfo)
    ram: str = UNKNOWN
    battery_level: Optional[int] = None

    @property
    def battery_human(self) -> str:
        if self.battery_level is None:
            return UNKNOWN
        return f"{self.battery_level}%"

    @property
    def display_name(self) -> str:
        if self.manufacturer != UNKNOWN:
            return f"{self.manufacturer} {self.model}"
        return self.model
