# Android Device Toolkit Core Modules

from .adb_models import CommandResult, CommandStatus
from .models import DeviceSnapshot, StorageInfo, ChipsetInfo, ChipsetFact, ChipBrand, BootloaderState
from .config import Settings
from .adb import AdbClient, run_command, check_adb_available, check_fastboot_available
from .chipset import classify_chipset
from .reboot import RebootMode, RebootSuccess, RebootError, REBOOT_TARGETS
from .service import DeviceService, SnapshotStore
from .utils import format_size
