import os
import sys
from typing import Optional, Sequence, Union

import pytest

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from core.adb import AdbClient  # noqa: E402
from core.adb_models import CommandResult, CommandStatus  # noqa: E402
from core.config import Settings  # noqa: E402

SERIAL = "R58M123ABC"

CPUINFO = """processor\t: 0
BogoMIPS\t: 38.40
processor\t: 1
BogoMIPS\t: 38.40
processor\t: 2
processor\t: 3
processor\t: 4
processor\t: 5
processor\t: 6
processor\t: 7
Hardware\t: Qualcomm Technologies, Inc SM8450
"""

DF_DATA = """Filesystem     1K-blocks     Used Available Use% Mounted on
/dev/block/dm-48 1000000 400000 600000  40% /data
"""

MEMINFO = """MemTotal:        8388608 kB
MemFree:          512000 kB
"""

BATTERY = """Current Battery Service state:
  AC powered: false
  USB powered: true
  status: 2
  level: 87
  scale: 100
"""

Response = Union[str, CommandResult]


def ok(output: str = "") -> CommandResult:
    return CommandResult(CommandStatus.SUCCESS, output, 0)


def failed(output: str = "", exit_code: int = 1) -> CommandResult:
    return CommandResult(CommandStatus.NON_ZERO_EXIT, output, exit_code)


class FakeAdbClient(AdbClient):
    """AdbClient answering from a table keyed by (tool, *args) without '-s <serial>'."""

    def __init__(self, responses: Optional[dict[tuple, Response]] = None,
                 default: Optional[CommandResult] = None):
        super().__init__(Settings(resources_dir=None))
        self.responses = dict(responses or {})
        self.default = default or failed("error: unknown command")
        self.calls: list[tuple[str, ...]] = []

    def _run(self, binary: str, args: Sequence[str]) -> CommandResult:
        tool = "adb" if binary == self.adb_path else "fastboot"
        args = list(args)
        if args[:1] == ["-s"]:
            args = args[2:]
        key = (tool, *args)
        self.calls.append(key)

        response = self.responses.get(key, self.default)
        if isinstance(response, str):
            return ok(response)
        return response


def device_responses() -> dict[tuple, Response]:
    """Canned answers for a healthy rooted Snapdragon device."""
    def prop(name):
        return ("adb", "shell", "getprop", name)

    return {
        prop("ro.product.model"): "SM-S901B\n",
        prop("ro.product.manufacturer"): "samsung\n",
        prop("ro.build.version.release"): "14\n",
        prop("ro.serialno"): f"{SERIAL}\n",
        prop("ro.build.display.id"): "UP1A.231005.007\n",
        prop("ro.build.version.security_patch"): "2024-03-01\n",
        prop("ro.boot.verifiedbootstate"): "orange\n",
        ("adb", "shell", "which", "su"): "/system/bin/su\n",
        ("adb", "shell", "cat", "/proc/uptime"): "9000.50 30000.12\n",
        ("adb", "shell", "df", "/data"): DF_DATA,
        ("adb", "shell", "pm", "list", "packages"): "package:com.android.settings\npackage:com.android.chrome\npackage:com.whatsapp\n",
        ("adb", "shell", "cat", "/proc/cpuinfo"): CPUINFO,
        prop("ro.board.platform"): "taro\n",
        prop("ro.hardware"): "qcom\n",
        prop("ro.chipname"): "\n",
        ("adb", "shell", "cat", "/sys/devices/system/cpu/cpu0/cpufreq/cpuinfo_max_freq"): "3000000\n",
        ("adb", "shell", "cat", "/proc/meminfo"): MEMINFO,
        ("adb", "shell", "dumpsys", "battery"): BATTERY,
        ("adb", "devices"): f"List of devices attached\n{SERIAL}\tdevice\n\n",
        ("adb", "shell", "su", "-c", "id"): "uid=0(root) gid=0(root) groups=0(root) context=u:r:magisk:s0\n",
    }


@pytest.fixture
def fake_client():
    return FakeAdbClient(device_responses())
