import pytest

from core.adb_models import CommandResult, CommandStatus
from core.device_info import (
    DeviceInfoCollector, count_cores, count_packages, find_cpuinfo_model, is_su_present,
    map_bootloader_state, parse_battery_level, parse_max_freq_ghz, parse_mem_total_gb,
    parse_storage, parse_uptime
)
from core.models import BootloaderState, ChipBrand, DeviceSnapshot, StorageInfo

from conftest import BATTERY, CPUINFO, MEMINFO, SERIAL, FakeAdbClient, device_responses, failed


class TestParsers:
    @pytest.mark.parametrize("raw, state", [
        ("orange", BootloaderState.UNLOCKED),
        ("yellow\n", BootloaderState.PARTIALLY_LOCKED),
        ("GREEN", BootloaderState.LOCKED),
        ("red", BootloaderState.UNKNOWN),
        ("", BootloaderState.UNKNOWN),
    ])
    def test_bootloader_state(self, raw, state):
        assert map_bootloader_state(raw) is state

    def test_su_probe(self):
        assert is_su_present("/system/xbin/su\n")
        assert not is_su_present("")
        assert not is_su_present("/system/bin/sh: su: not found")

    def test_uptime(self):
        assert parse_uptime("9000.50 30000.12") == "2h 30m"
        assert parse_uptime("59.9 1.0") == "0h 0m"
        assert parse_uptime("") is None
        assert parse_uptime("abc def") is None

    def test_storage(self):
        storage = parse_storage("Filesystem 1K-blocks Used Available Use% Mounted on\n"
                                "/dev/block/dm-0 1000000 400000 600000 40% /data\n")
        assert storage.percentage == 40
        assert storage.total_gb == pytest.approx(1000000 / 1024 / 1024)
        assert storage.used_gb == pytest.approx(400000 / 1024 / 1024)
        assert storage.available_gb == pytest.approx(600000 / 1024 / 1024)
        assert storage.total_human == "1.0 GB"

    @pytest.mark.parametrize("output", [
        "",
        "Filesystem 1K-blocks Used Available\n",
        "Filesystem 1K-blocks Used Available\n/dev/block/dm-0 1000\n",
        "Filesystem 1K-blocks Used Available\n/dev/block/dm-0 1G 400M 600M\n",
    ])
    def test_malformed_storage_is_unknown(self, output):
        storage = parse_storage(output)
        assert storage == StorageInfo()
        assert storage.total_human == "Unknown"
        assert storage.percentage == 0

    def test_zero_total_storage(self):
        storage = parse_storage("h\n/dev/x 0 0 0 0% /data\n")
        assert storage.percentage == 0

    def test_package_count(self):
        assert count_packages("package:a\npackage:b\nnot-a-package\n package:c\n") == 2
        assert count_packages("") == 0

    def test_cpuinfo(self):
        assert count_cores(CPUINFO) == 8
        assert find_cpuinfo_model(CPUINFO) == "Qualcomm Technologies, Inc SM8450"
        assert find_cpuinfo_model("processor\t: 0\n") is None

    def test_max_frequency(self):
        assert parse_max_freq_ghz("3187200\n") == pytest.approx(3.187)
        assert parse_max_freq_ghz("500") is None
        assert parse_max_freq_ghz("n/a") is None

    def test_memory(self):
        assert parse_mem_total_gb(MEMINFO) == 8
        assert parse_mem_total_gb("MemTotal:        7900000 kB\n") == 7
        assert parse_mem_total_gb("MemFree: 1 kB\n") is None

    def test_battery(self):
        assert parse_battery_level(BATTERY) == 87
        assert parse_battery_level("level: full") is None
        assert parse_battery_level("") is None


class TestCollector:
    def test_full_snapshot(self, fake_client):
        snapshot = DeviceInfoCollector(fake_client).collect(SERIAL)

        assert snapshot.model == "SM-S901B"
        assert snapshot.manufacturer == "samsung"
        assert snapshot.android_version == "14"
        assert snapshot.serial_number == SERIAL
        assert snapshot.build_number == "UP1A.231005.007"
        assert snapshot.security_patch == "2024-03-01"
        assert snapshot.bootloader_state is BootloaderState.UNLOCKED
        assert snapshot.is_rooted is True
        assert snapshot.is_connected is True
        assert snapshot.uptime == "2h 30m"
        assert snapshot.storage.percentage == 40
        assert snapshot.installed_apps == 3
        assert snapshot.ram == "8GB"
        assert snapshot.battery_level == 87
        assert snapshot.battery_human == "87%"

        chipset = snapshot.chipset
        assert chipset.brand is ChipBrand.QUALCOMM
        assert chipset.model == "Snapdragon 8 Gen 1 (taro)"
        assert chipset.cores == 8
        assert chipset.max_freq_ghz == pytest.approx(3.0)
        assert chipset.description == "Qualcomm Snapdragon 8 Gen 1 (taro) (8 cores) @ 3.0 GHz"

    def test_queries_run_in_fixed_order(self, fake_client):
        DeviceInfoCollector(fake_client).collect(SERIAL)

        props = [call[3] for call in fake_client.calls if call[2:3] == ("getprop",)]
        assert props == [
            "ro.product.model", "ro.product.manufacturer", "ro.build.version.release",
            "ro.serialno", "ro.build.display.id", "ro.build.version.security_patch",
            "ro.boot.verifiedbootstate", "ro.board.platform", "ro.hardware", "ro.chipname",
        ]
        assert fake_client.calls[-1] == ("adb", "shell", "dumpsys", "battery")

    def test_unreachable_device_returns_none(self):
        client = FakeAdbClient(default=CommandResult(CommandStatus.SPAWN_FAILURE, "No such file"))
        assert DeviceInfoCollector(client).collect(SERIAL) is None
        assert len(client.calls) == 1

    def test_failed_first_query_returns_none(self):
        client = FakeAdbClient(default=failed("error: device 'X' not found"))
        assert DeviceInfoCollector(client).collect("X") is None

    def test_failures_degrade_to_defaults(self):
        responses = {("adb", "shell", "getprop", "ro.product.model"): "Pixel 7\n"}
        snapshot = DeviceInfoCollector(FakeAdbClient(responses)).collect("ABC")

        assert snapshot is not None
        assert snapshot.model == "Pixel 7"
        assert snapshot.is_connected is True
        assert snapshot.manufacturer == "Unknown"
        assert snapshot.serial_number == "ABC"
        assert snapshot.bootloader_state is BootloaderState.UNKNOWN
        assert snapshot.is_rooted is False
        assert snapshot.uptime == "Unknown"
        assert snapshot.storage == StorageInfo()
        assert snapshot.installed_apps == 0
        assert snapshot.ram == "Unknown"
        assert snapshot.battery_level is None
        assert snapshot.chipset.brand is ChipBrand.UNKNOWN
        assert snapshot.chipset.model == "Unknown"

    def test_one_timeout_does_not_abort_others(self):
        responses = device_responses()
        responses[("adb", "shell", "df", "/data")] = CommandResult(CommandStatus.TIMEOUT)
        snapshot = DeviceInfoCollector(FakeAdbClient(responses)).collect(SERIAL)

        assert snapshot.storage == StorageInfo()
        assert snapshot.installed_apps == 3
        assert snapshot.battery_level == 87

    def test_chipset_falls_back_to_cpuinfo_line(self):
        responses = device_responses()
        for prop in ("ro.board.platform", "ro.hardware", "ro.chipname"):
            responses[("adb", "shell", "getprop", prop)] = "\n"
        snapshot = DeviceInfoCollector(FakeAdbClient(responses)).collect(SERIAL)

        assert snapshot.chipset.model == "Snapdragon 8 Gen 1"

    def test_repeated_collection_is_equal(self, fake_client):
        collector = DeviceInfoCollector(fake_client)
        assert collector.collect(SERIAL) == collector.collect(SERIAL)

    def test_default_snapshot_means_disconnected(self):
        snapshot = DeviceSnapshot()
        assert snapshot.is_connected is False
        assert snapshot.model == "Not connected"
